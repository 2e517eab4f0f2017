"""Multimodal result injection.

The service only accepts binary content as user-authored content. A tool
result carrying a binary payload is therefore split into a text-only part for
the ``tool`` turn and a follow-up ``user`` turn holding the payload and a
caption. Images are downscaled with Pillow before injection.
"""

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from automation_agent.llm_client.types import (
    BinaryPayload,
    InlineBinaryPart,
    Role,
    TextPart,
    ToolResultPart,
    Turn,
)
from automation_agent.telemetry import MULTIMODAL_INJECTED, MULTIMODAL_REJECTED, get_logger
from automation_agent.tools.types import ToolCallResult

log = get_logger(__name__)

DEFAULT_MAX_DIMENSION = 1024
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
JPEG_QUALITY = 85
DEFAULT_MAX_PIXELS = 50_000_000


class ImageTooLarge(Exception):
    """Raised when an image has more pixels than the injector accepts."""


@dataclass(frozen=True)
class Injection:
    """How one tool result enters the transcript.

    Attributes:
        part: Text-only result for the ``tool`` turn.
        followup: ``user`` turn carrying the binary content, if any.
        summary: Payload-free description for progress reporting.
    """

    part: ToolResultPart
    followup: Turn | None
    summary: str


class MultimodalInjector:
    """Reframes binary tool results into the turn shape the service requires."""

    def __init__(
        self,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_pixels: int = DEFAULT_MAX_PIXELS,
    ) -> None:
        """Initialize the injector.

        Args:
            max_dimension: Images wider or taller than this are downscaled.
            max_bytes: Payloads larger than this are rejected.
            max_pixels: Images with more pixels than this are rejected before decoding.
        """
        self.max_dimension = max_dimension
        self.max_bytes = max_bytes
        self.max_pixels = max_pixels

    def inject(self, result: ToolCallResult) -> Injection:
        """Split a tool result into its transcript parts.

        Args:
            result: Result returned by the capability registry.

        Returns:
            Injection with the text-only part and optional follow-up turn.
        """
        if result.binary is None:
            return Injection(
                part=ToolResultPart(name=result.name, text=result.text),
                followup=None,
                summary=result.text,
            )

        payload = result.binary
        if len(payload.data) > self.max_bytes:
            message = (
                f"Error: binary result too large ({len(payload.data)} bytes), "
                f"limit is {self.max_bytes} bytes."
            )
            return self._reject(result.name, message, size=len(payload.data))

        detail = ""
        is_image = payload.mime_type.startswith("image/")
        label = "Image" if is_image else "Content"
        if is_image:
            try:
                payload, detail = self._prepare_image(payload)
            except (ImageTooLarge, Image.DecompressionBombError) as e:
                return self._reject(result.name, f"Error: image too large. {e}")
            except (UnidentifiedImageError, OSError, ValueError) as e:
                return self._reject(result.name, f"Error: could not decode image. {e}")

        description = result.text
        if detail:
            description = f"{description} ({detail})" if description else detail

        followup = Turn(
            role=Role.USER,
            parts=[
                InlineBinaryPart(payload=payload),
                TextPart(
                    text=(
                        f"The content above was loaded by the {result.name} tool. "
                        "Analyze it or respond based on its content."
                    )
                ),
            ],
        )
        log.info(
            MULTIMODAL_INJECTED,
            tool_name=result.name,
            mime_type=payload.mime_type,
            size_bytes=len(payload.data),
        )
        return Injection(
            part=ToolResultPart(
                name=result.name,
                text=f"{label} loaded successfully. {description}. See the {label.lower()} below.",
            ),
            followup=followup,
            summary=f"{label} loaded and sent to the model\n{description}",
        )

    def _reject(self, name: str, message: str, **details: int) -> Injection:
        log.warning(MULTIMODAL_REJECTED, tool_name=name, reason=message, **details)
        return Injection(part=ToolResultPart(name=name, text=message), followup=None, summary=message)

    def _prepare_image(self, payload: BinaryPayload) -> tuple[BinaryPayload, str]:
        with Image.open(io.BytesIO(payload.data)) as img:
            orig_w, orig_h = img.size
            if orig_w * orig_h > self.max_pixels:
                raise ImageTooLarge(f"{orig_w}x{orig_h} exceeds the limit of {self.max_pixels} pixels.")
            if orig_w <= self.max_dimension and orig_h <= self.max_dimension:
                img.verify()
                return payload, f"size: {orig_w}x{orig_h}"

            ratio = min(self.max_dimension / orig_w, self.max_dimension / orig_h)
            new_w = max(1, int(orig_w * ratio))
            new_h = max(1, int(orig_h * ratio))
            resized = img.resize((new_w, new_h), Image.LANCZOS)

        buffer = io.BytesIO()
        if payload.mime_type == "image/png":
            resized.save(buffer, format="PNG")
            mime_type = "image/png"
        else:
            if resized.mode not in ("RGB", "L"):
                resized = resized.convert("RGB")
            resized.save(buffer, format="JPEG", quality=JPEG_QUALITY)
            mime_type = "image/jpeg"

        detail = f"original size: {orig_w}x{orig_h}, resized to: {new_w}x{new_h}"
        return BinaryPayload(mime_type=mime_type, data=buffer.getvalue()), detail
