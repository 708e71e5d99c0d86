"""
Input image encoding.
"""
import io

from PIL import Image, UnidentifiedImageError

# Modes PNG can store directly
PNG_MODES = {"1", "L", "LA", "I", "P", "RGB", "RGBA"}


def encode_png(image_data: bytes) -> bytes:
    """
    Re-encode an uploaded image as PNG, whatever its original format.

    Raises:
        ValueError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(image_data)) as img:
            img.load()
            if img.mode not in PNG_MODES:
                img = img.convert("RGBA")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unreadable input image: {e}") from e
    return buffer.getvalue()
