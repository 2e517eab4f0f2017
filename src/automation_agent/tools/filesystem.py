"""Filesystem tools for listing, reading and writing workspace files.

The module only touches files below its base directory. Reads may target any
file under it; writes always go to the output folder (``AI_Workspace``).
Images are returned as binary payloads and left to the multimodal injector
for size checks and downscaling.
"""

import asyncio
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any
from xml.etree import ElementTree

from automation_agent.llm_client.types import (
    BinaryPayload,
    GenerateRequest,
    GenerationError,
    GenerativeClient,
    ModelTier,
    Turn,
)
from automation_agent.telemetry import get_logger
from automation_agent.tools.base import (
    CapabilityModule,
    bool_argument,
    optional_argument,
    required_argument,
)
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolParameter

log = get_logger(__name__)

MAX_TREE_DEPTH = 3

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".csv", ".json", ".cs", ".py"})

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}

_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"

SUMMARY_PREFIX = "[Fast AI Summary]: "
SUMMARY_FALLBACK_NOTE = "[Warning: Summary failed, falling back to full content] Original file content:"


def format_size(size_bytes: int) -> str:
    """Human readable size, e.g. ``1.5KB``."""
    suffixes = ("B", "KB", "MB", "GB", "TB")
    number = float(size_bytes)
    counter = 0
    while number >= 1024 and counter < len(suffixes) - 1:
        number /= 1024
        counter += 1
    return f"{number:.1f}{suffixes[counter]}"


def extract_docx_text(path: Path) -> str:
    """Extract the text runs of a .docx document.

    Raises:
        ValueError: If the file is not a Word document.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            try:
                xml_bytes = archive.read("word/document.xml")
            except KeyError:
                raise ValueError("invalid .docx file (word/document.xml missing)") from None
    except zipfile.BadZipFile as e:
        raise ValueError(f"invalid .docx file: {e}") from e

    root = ElementTree.fromstring(xml_bytes)
    return "".join(node.text or "" for node in root.iter(f"{_WORD_NS}t"))


class PathOutsideWorkspace(ValueError):
    """Raised when a requested path leaves the workspace."""


class FileModule(CapabilityModule):
    """File capabilities: ``list_files``, ``read_file``, ``write_file``.

    Attributes:
        base_dir: Root directory visible to the tools.
        output_folder: Folder under ``base_dir`` that ``write_file`` targets.
    """

    name = "files"

    def __init__(
        self,
        base_dir: Path,
        output_folder: str = "AI_Workspace",
        summarizer: GenerativeClient | None = None,
        max_image_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        """Initialize the file module.

        Args:
            base_dir: Root directory visible to the tools.
            output_folder: Folder name for written files.
            summarizer: Fast-tier client used for ``summaryQuery``. When None the
                parameter is not declared.
            max_image_bytes: Images above this size are refused without reading.
        """
        self.base_dir = Path(base_dir).resolve()
        self.output_folder = output_folder
        self.summarizer = summarizer
        self.max_image_bytes = max_image_bytes

    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        read_params = [
            ToolParameter(
                name="fileName",
                type="string",
                description=f"File path relative to the workspace (e.g. {self.output_folder}/notes.txt)",
            )
        ]
        read_description = (
            "Read the content of a file. Supports text formats (.txt, .md, .csv, .json, .cs, .py), "
            ".docx documents and images (.png, .jpg, .jpeg, .gif, .bmp, .webp). "
            f"Files saved by the assistant live under {self.output_folder}/."
        )
        if self.summarizer is not None:
            read_description += " For large files, pass summaryQuery to extract only the relevant points."
            read_params.append(
                ToolParameter(
                    name="summaryQuery",
                    type="string",
                    description="Only return the points matching this query (optional, uses the fast model)",
                    required=False,
                )
            )

        return [
            ToolDeclaration(
                name="list_files",
                description=(
                    f"List files and sub-folders under a folder as a tree (at most {MAX_TREE_DEPTH} levels)."
                ),
                parameters=[
                    ToolParameter(
                        name="subPath",
                        type="string",
                        description="Folder path relative to the workspace",
                        required=False,
                    )
                ],
            ),
            ToolDeclaration(name="read_file", description=read_description, parameters=read_params),
            ToolDeclaration(
                name="write_file",
                description=(
                    f"Save text to a file in {self.output_folder}. Content is appended by default; "
                    "set append=false to overwrite."
                ),
                parameters=[
                    ToolParameter(name="fileName", type="string", description="File name (e.g. notes.txt)"),
                    ToolParameter(name="content", type="string", description="Content to write"),
                    ToolParameter(
                        name="append",
                        type="boolean",
                        description="true = append to the end (default); false = overwrite",
                        required=False,
                    ),
                ],
            ),
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        loop = asyncio.get_running_loop()
        if name == "list_files":
            sub_path = optional_argument(arguments, "subPath") or ""
            return await loop.run_in_executor(None, self.list_files, sub_path)
        if name == "read_file":
            file_name = required_argument(arguments, "fileName")
            result = await loop.run_in_executor(None, self.read_file, file_name)
            query = optional_argument(arguments, "summaryQuery")
            if self.summarizer is not None and query and not result.is_error and result.binary is None:
                return await self._summarize(self.summarizer, result, query)
            return result
        if name == "write_file":
            file_name = required_argument(arguments, "fileName")
            content = str(arguments.get("content", ""))
            append = bool_argument(arguments, "append", default=True)
            return await loop.run_in_executor(None, self.write_file, file_name, content, append)
        return None

    def _resolve(self, relative: str) -> Path:
        if ".." in Path(relative).parts:
            raise PathOutsideWorkspace("parent directory access is not allowed")
        target = (self.base_dir / relative).resolve()
        if not target.is_relative_to(self.base_dir):
            raise PathOutsideWorkspace("path is outside the workspace")
        return target

    def list_files(self, sub_path: str = "") -> ToolCallResult:
        """Render the folder tree under ``sub_path``."""
        try:
            target = self._resolve(sub_path)
        except PathOutsideWorkspace as e:
            return ToolCallResult.error("list_files", f"Error: {e}.")
        if not target.is_dir():
            return ToolCallResult.error("list_files", f"Error: path '{sub_path}' does not exist.")

        lines = [f"[Folder Tree: {sub_path}]"]
        self._build_tree(target, 0, lines)
        return ToolCallResult(name="list_files", text="\n".join(lines))

    def _build_tree(self, current: Path, depth: int, lines: list[str]) -> None:
        if depth >= MAX_TREE_DEPTH:
            return
        indent = " " * (depth * 4)
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name.lower())
        except PermissionError:
            lines.append(f"{indent}[access denied]")
            return
        except OSError as e:
            lines.append(f"{indent}[error: {e}]")
            return

        if not entries and depth == 0:
            lines.append("(this folder is empty)")

        for entry in entries:
            try:
                stat = entry.stat()
            except OSError as e:
                lines.append(f"{indent}[error] {entry.name}: {e.strerror or e}")
                continue
            modified = datetime.fromtimestamp(stat.st_mtime)
            if entry.is_dir():
                lines.append(f"{indent}[DIR]  {entry.name} (Modified: {modified:%Y-%m-%d})")
                self._build_tree(entry, depth + 1, lines)
            else:
                size = format_size(stat.st_size)
                lines.append(
                    f"{indent}[FILE] {entry.name:<30} | {size:>8} | Mod: {modified:%Y-%m-%d %H:%M}"
                )

    def read_file(self, file_name: str) -> ToolCallResult:
        """Read a text, .docx or image file below the workspace."""
        try:
            path = self._resolve(file_name)
        except PathOutsideWorkspace as e:
            return ToolCallResult.error("read_file", f"Error: {e}.")
        if not path.is_file():
            return ToolCallResult.error("read_file", f"Error: file '{file_name}' not found.")

        extension = path.suffix.lower()
        try:
            if extension in TEXT_EXTENSIONS:
                return ToolCallResult(name="read_file", text=path.read_text(encoding="utf-8"))
            if extension == ".docx":
                return ToolCallResult(name="read_file", text=extract_docx_text(path))
            if extension in IMAGE_MIME_TYPES:
                size = path.stat().st_size
                if size > self.max_image_bytes:
                    return ToolCallResult.error(
                        "read_file",
                        f"Error: image file too large ({format_size(size)}), "
                        f"limit is {format_size(self.max_image_bytes)}.",
                    )
                payload = BinaryPayload(mime_type=IMAGE_MIME_TYPES[extension], data=path.read_bytes())
                return ToolCallResult(name="read_file", text=f"Image file {file_name}", binary=payload)
        except (OSError, UnicodeDecodeError, ValueError, ElementTree.ParseError) as e:
            log.warning("file_read_failed", file_name=file_name, error=str(e))
            return ToolCallResult.error("read_file", f"Error: could not read file. {e}")

        return ToolCallResult.error("read_file", "Unsupported file format or access denied.")

    def write_file(self, file_name: str, content: str, append: bool = True) -> ToolCallResult:
        """Write ``content`` to the output folder, appending by default."""
        if not Path(file_name).suffix:
            file_name += ".txt"
        # Only the base name is used; sub-folders in the argument are ignored
        safe_name = Path(file_name.replace("\\", "/")).name

        folder = self.base_dir / self.output_folder
        target = folder / safe_name
        try:
            folder.mkdir(parents=True, exist_ok=True)
            if append:
                with target.open("a", encoding="utf-8") as f:
                    f.write(content + "\n")
            else:
                target.write_text(content, encoding="utf-8")
        except OSError as e:
            log.warning("file_write_failed", file_name=safe_name, error=str(e))
            return ToolCallResult.error("write_file", f"Error: could not save file. {e}")

        action = "Appended content" if append else "Saved file (overwrite)"
        return ToolCallResult(
            name="write_file", text=f"Success: {action} to {self.output_folder}/{safe_name}"
        )

    async def _summarize(
        self, summarizer: GenerativeClient, result: ToolCallResult, query: str
    ) -> ToolCallResult:
        prompt = (
            f"Here is the content of a file:\n\n{result.text}\n\n"
            f'Based on the user\'s request "{query}", extract the relevant points or summarize. '
            "Do not answer anything unrelated."
        )
        try:
            response = await summarizer.generate(
                GenerateRequest(contents=[Turn.user_text(prompt)])
            )
            summary = response.turn.text
        except GenerationError as e:
            log.warning("file_summary_failed", model=summarizer.model_name, error=str(e))
            summary = ""

        if not summary:
            return ToolCallResult(
                name="read_file", text=f"{SUMMARY_FALLBACK_NOTE}\n{result.text}"
            )
        return ToolCallResult(name="read_file", text=f"{SUMMARY_PREFIX}{summary}")
