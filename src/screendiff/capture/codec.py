"""PNG and base64 encoding for captured frames."""

import base64
import io

from PIL import Image

from screendiff.capture.types import Screenshot

PNG_MIME_TYPE = "image/png"


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_base64(data: bytes) -> str:
    """Encode bytes with the standard base64 alphabet."""
    return base64.b64encode(data).decode("ascii")


def decode_screenshot_data(data: str) -> Image.Image:
    """Decode a base64 PNG payload back into an image."""
    image = Image.open(io.BytesIO(base64.b64decode(data)))
    image.load()
    return image


def to_data_url(screenshot: Screenshot) -> str:
    """
    Build a data URL for displaying a screenshot.

    Returns an empty string when the screenshot carries no payload.
    """
    if not screenshot.data:
        return ""
    return f"data:{PNG_MIME_TYPE};base64,{screenshot.data}"
