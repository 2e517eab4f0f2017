"""Tests for MultimodalInjector."""

import io

import pytest
from PIL import Image

from automation_agent.llm_client.types import BinaryPayload, InlineBinaryPart, Role
from automation_agent.orchestrator.multimodal import MultimodalInjector
from automation_agent.tools.types import ToolCallResult


def make_image(size: tuple[int, int], image_format: str, mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color=0).save(buffer, format=image_format)
    return buffer.getvalue()


def image_result(data: bytes, mime_type: str) -> ToolCallResult:
    return ToolCallResult(
        name="read_file", text="Image file pic", binary=BinaryPayload(mime_type=mime_type, data=data)
    )


class TestTextResults:
    def test_text_result_passes_through(self) -> None:
        injection = MultimodalInjector().inject(ToolCallResult(name="echo", text="hello"))

        assert injection.part.text == "hello"
        assert injection.part.binary is None
        assert injection.followup is None
        assert injection.summary == "hello"


class TestImageResults:
    def test_small_image_is_kept_as_is(self) -> None:
        data = make_image((20, 10), "PNG")
        injection = MultimodalInjector(max_dimension=64).inject(image_result(data, "image/png"))

        assert injection.part.binary is None
        assert "size: 20x10" in injection.part.text
        followup = injection.followup
        assert followup is not None
        assert followup.role is Role.USER
        binary = followup.parts[0]
        assert isinstance(binary, InlineBinaryPart)
        assert binary.payload.data == data
        assert "read_file" in followup.parts[1].text

    def test_large_png_is_downscaled_as_png(self) -> None:
        data = make_image((200, 100), "PNG", mode="RGBA")
        injection = MultimodalInjector(max_dimension=50).inject(image_result(data, "image/png"))

        payload = injection.followup.parts[0].payload
        assert payload.mime_type == "image/png"
        with Image.open(io.BytesIO(payload.data)) as img:
            assert img.size == (50, 25)
        assert "resized to: 50x25" in injection.summary

    def test_large_non_png_is_reencoded_as_jpeg(self) -> None:
        data = make_image((100, 300), "GIF", mode="P")
        injection = MultimodalInjector(max_dimension=60).inject(image_result(data, "image/gif"))

        payload = injection.followup.parts[0].payload
        assert payload.mime_type == "image/jpeg"
        with Image.open(io.BytesIO(payload.data)) as img:
            assert img.format == "JPEG"
            assert img.size == (20, 60)

    def test_undecodable_image_is_rejected(self) -> None:
        injection = MultimodalInjector().inject(image_result(b"not an image", "image/png"))

        assert injection.followup is None
        assert injection.part.text.startswith("Error: could not decode image.")

    def test_oversized_payload_is_rejected(self) -> None:
        data = make_image((10, 10), "PNG")
        injection = MultimodalInjector(max_bytes=10).inject(image_result(data, "image/png"))

        assert injection.followup is None
        assert "too large" in injection.part.text
        assert injection.summary == injection.part.text


class TestOtherBinary:
    def test_non_image_binary_gets_content_label(self) -> None:
        result = ToolCallResult(
            name="fetch", text="report.pdf", binary=BinaryPayload(mime_type="application/pdf", data=b"%PDF")
        )
        injection = MultimodalInjector().inject(result)

        assert injection.part.text == "Content loaded successfully. report.pdf. See the content below."
        assert injection.followup.parts[0].payload.mime_type == "application/pdf"


class TestPixelLimits:
    def test_image_over_pixel_limit_is_rejected(self) -> None:
        data = make_image((400, 300), "PNG", mode="1")
        injection = MultimodalInjector(max_pixels=100_000).inject(image_result(data, "image/png"))

        assert injection.followup is None
        assert injection.part.text.startswith("Error: image too large.")
        assert "400x300" in injection.part.text

    def test_decompression_bomb_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        data = make_image((100, 100), "PNG", mode="1")
        # Pillow refuses to open images above twice this limit
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1_000)
        injection = MultimodalInjector().inject(image_result(data, "image/png"))

        assert injection.followup is None
        assert injection.part.text.startswith("Error: image too large.")
