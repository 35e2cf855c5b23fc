"""Image type detection, decoding and resizing."""

from __future__ import annotations

import io

from PIL import Image

_SIGNATURES = (
    (b"\xff\xd8\xff", "jpg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"\x89PNG\r\n\x1a\n", "png"),
)


def check_image_type(data: bytes) -> str:
    """File extension for JPEG, GIF or PNG data; empty for anything else."""
    head = bytes(data[:512])
    for signature, ext in _SIGNATURES:
        if head.startswith(signature):
            return ext
    return ""


def get_image_obj(data: bytes) -> Image.Image:
    """Decode JPEG, GIF or PNG data; raise ValueError for other formats."""
    if not check_image_type(data):
        raise ValueError("unknown image format")
    img = Image.open(io.BytesIO(bytes(data)))
    img.load()
    return img


def image_resize(img: Image.Image, width: int, height: int) -> Image.Image:
    """Lanczos resize; wide targets never enlarge, a zero side keeps the aspect ratio."""
    src_w, src_h = img.size
    if width > 73:
        width = min(width, src_w)
        height = min(height, src_h)
    if width < 0 or height < 0 or (width == 0 and height == 0):
        return Image.new("RGBA", (0, 0))
    if width == 0:
        width = max(1, int(height * src_w / src_h + 0.5))
    elif height == 0:
        height = max(1, int(width * src_h / src_w + 0.5))
    return img.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)