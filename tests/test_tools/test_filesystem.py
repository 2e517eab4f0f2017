"""Tests for FileModule."""

import io
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from automation_agent.llm_client.types import ModelTier, ServiceError
from automation_agent.tools.filesystem import (
    SUMMARY_FALLBACK_NOTE,
    SUMMARY_PREFIX,
    FileModule,
    format_size,
)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "notes.md").write_text("# Notes\nremember the milk", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "data.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def module(workspace: Path) -> FileModule:
    return FileModule(workspace)


def write_docx(path: Path, *runs: str) -> None:
    body = "".join(f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>" for text in runs)
    document = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body>{body}</w:body></w:document>"
    )
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("word/document.xml", document)


def test_format_size() -> None:
    assert format_size(512) == "512.0B"
    assert format_size(1536) == "1.5KB"
    assert format_size(5 * 1024 * 1024) == "5.0MB"


class TestDeclarations:
    def test_summary_query_only_with_summarizer(self, workspace: Path, make_client) -> None:
        plain = FileModule(workspace).declare_tools(ModelTier.FAST)
        with_summary = FileModule(workspace, summarizer=make_client("fast-model")).declare_tools(
            ModelTier.FAST
        )

        def read_params(declarations) -> list[str]:
            read = next(decl for decl in declarations if decl.name == "read_file")
            return [param.name for param in read.parameters]

        assert [decl.name for decl in plain] == ["list_files", "read_file", "write_file"]
        assert read_params(plain) == ["fileName"]
        assert read_params(with_summary) == ["fileName", "summaryQuery"]


class TestListFiles:
    def test_lists_tree(self, module: FileModule) -> None:
        result = module.list_files("")

        assert not result.is_error
        lines = result.text.splitlines()
        assert lines[0] == "[Folder Tree: ]"
        assert lines[1].startswith("[DIR]  docs")
        assert lines[2].strip().startswith("[FILE] data.csv")
        assert lines[3].startswith("[FILE] notes.md")

    def test_empty_folder(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        result = FileModule(tmp_path).list_files("empty")
        assert "(this folder is empty)" in result.text

    def test_missing_folder(self, module: FileModule) -> None:
        result = module.list_files("nowhere")
        assert result.is_error
        assert "does not exist" in result.text

    def test_parent_directory_is_rejected(self, module: FileModule) -> None:
        result = module.list_files("../")
        assert result.is_error
        assert "not allowed" in result.text

    def test_dangling_symlink_is_reported_inline(self, workspace: Path, module: FileModule) -> None:
        (workspace / "broken").symlink_to(workspace / "gone.txt")

        result = module.list_files("")

        assert not result.is_error
        assert "[error] broken:" in result.text
        assert "[FILE] notes.md" in result.text


class TestReadFile:
    def test_reads_text(self, module: FileModule) -> None:
        result = module.read_file("notes.md")
        assert result.text == "# Notes\nremember the milk"

    def test_reads_nested_text(self, module: FileModule) -> None:
        assert module.read_file("docs/data.csv").text == "a,b\n1,2\n"

    def test_double_dots_inside_a_name_are_allowed(self, workspace: Path, module: FileModule) -> None:
        (workspace / "notes..v2.txt").write_text("second draft", encoding="utf-8")
        assert module.read_file("notes..v2.txt").text == "second draft"

    def test_escaping_the_workspace_is_rejected(self, module: FileModule) -> None:
        result = module.read_file("docs/../../secret.txt")
        assert result.is_error
        assert "not allowed" in result.text

    def test_reads_docx(self, workspace: Path, module: FileModule) -> None:
        write_docx(workspace / "report.docx", "Hello ", "world")
        assert module.read_file("report.docx").text == "Hello world"

    def test_invalid_docx(self, workspace: Path, module: FileModule) -> None:
        (workspace / "broken.docx").write_bytes(b"not a zip")
        result = module.read_file("broken.docx")
        assert result.is_error
        assert "invalid .docx" in result.text

    def test_reads_image_as_binary(self, workspace: Path, module: FileModule) -> None:
        buffer = io.BytesIO()
        Image.new("RGB", (4, 4)).save(buffer, format="JPEG")
        (workspace / "photo.jpg").write_bytes(buffer.getvalue())

        result = module.read_file("photo.jpg")

        assert result.binary is not None
        assert result.binary.mime_type == "image/jpeg"
        assert result.binary.data == buffer.getvalue()

    def test_image_over_limit_is_refused(self, workspace: Path) -> None:
        (workspace / "big.png").write_bytes(b"\x00" * 100)
        result = FileModule(workspace, max_image_bytes=10).read_file("big.png")
        assert result.is_error
        assert "too large" in result.text

    def test_unsupported_extension(self, workspace: Path, module: FileModule) -> None:
        (workspace / "tool.exe").write_bytes(b"MZ")
        result = module.read_file("tool.exe")
        assert result.is_error
        assert result.text == "Unsupported file format or access denied."

    def test_missing_file(self, module: FileModule) -> None:
        assert "not found" in module.read_file("ghost.txt").text


class TestWriteFile:
    def test_append_is_default(self, workspace: Path, module: FileModule) -> None:
        module.write_file("log.txt", "one")
        result = module.write_file("log.txt", "two")

        assert result.text == "Success: Appended content to AI_Workspace/log.txt"
        assert (workspace / "AI_Workspace" / "log.txt").read_text(encoding="utf-8") == "one\ntwo\n"

    def test_overwrite(self, workspace: Path, module: FileModule) -> None:
        module.write_file("out.txt", "old", append=False)
        result = module.write_file("out.txt", "new", append=False)

        assert "overwrite" in result.text
        assert (workspace / "AI_Workspace" / "out.txt").read_text(encoding="utf-8") == "new"

    def test_missing_extension_gets_txt(self, workspace: Path, module: FileModule) -> None:
        module.write_file("memo", "x", append=False)
        assert (workspace / "AI_Workspace" / "memo.txt").exists()

    def test_subfolders_are_ignored(self, workspace: Path, module: FileModule) -> None:
        module.write_file("..\\..\\escape.txt", "x", append=False)
        assert (workspace / "AI_Workspace" / "escape.txt").exists()
        assert not (workspace.parent / "escape.txt").exists()


class TestDispatch:
    @pytest.mark.asyncio
    async def test_dispatch_write_then_read(self, module: FileModule) -> None:
        await module.dispatch("write_file", {"fileName": "a.md", "content": "hi", "append": "false"})
        result = await module.dispatch("read_file", {"fileName": "AI_Workspace/a.md"})
        assert result.text == "hi"

    @pytest.mark.asyncio
    async def test_unknown_name_is_not_handled(self, module: FileModule) -> None:
        assert await module.dispatch("http_get", {"url": "x"}) is None

    @pytest.mark.asyncio
    async def test_summary_query_uses_summarizer(
        self, workspace: Path, make_client, text_reply
    ) -> None:
        summarizer = make_client("fast-model", [text_reply("Buy milk.")])
        module = FileModule(workspace, summarizer=summarizer)

        result = await module.dispatch("read_file", {"fileName": "notes.md", "summaryQuery": "todo"})

        assert result.text == f"{SUMMARY_PREFIX}Buy milk."
        prompt = summarizer.requests[0].contents[0].text
        assert "remember the milk" in prompt
        assert '"todo"' in prompt

    @pytest.mark.asyncio
    async def test_failed_summary_falls_back_to_content(self, workspace: Path, make_client) -> None:
        summarizer = make_client("fast-model", [ServiceError("unavailable", status_code=503)])
        module = FileModule(workspace, summarizer=summarizer)

        result = await module.dispatch("read_file", {"fileName": "notes.md", "summaryQuery": "todo"})

        assert result.text.startswith(SUMMARY_FALLBACK_NOTE)
        assert result.text.endswith("remember the milk")
