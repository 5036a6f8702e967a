"""Image normalisation helpers."""

from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from ynigo_mart.errors import DecodeError

MIME_TYPES = {
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "PNG": "image/png",
}

# Formats whose encoder cannot store an alpha channel.
_OPAQUE_FORMATS = {"JPEG"}


class ImageNormalizer:
    """Crops uploads to a centred square thumbnail encoded as a data URI."""

    def __init__(self, size: int = 150, image_format: str = "JPEG", quality: float = 0.9) -> None:
        image_format = image_format.upper()
        if image_format not in MIME_TYPES:
            raise ValueError(f"Unsupported thumbnail format: {image_format}")
        if size <= 0:
            raise ValueError("Thumbnail size must be positive.")
        if not 0 < quality <= 1:
            raise ValueError("Quality factor must be in the (0, 1] range.")
        self.size = size
        self.image_format = image_format
        self.quality = quality

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.image_format]

    def normalize(self, image_bytes: bytes) -> str:
        """Return a ``size``x``size`` thumbnail of the centred square crop as a data URI."""

        if not image_bytes:
            raise DecodeError("Uploaded image is empty.")

        try:
            with Image.open(BytesIO(image_bytes)) as source:
                source.load()
                upright = ImageOps.exif_transpose(source)
                try:
                    thumbnail = self._square_thumbnail(upright)
                finally:
                    upright.close()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError("Uploaded file is not a supported image.") from exc

        try:
            return self._to_data_uri(thumbnail)
        finally:
            thumbnail.close()

    def _square_thumbnail(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        side = min(width, height)
        origin_x = (width - side) // 2
        origin_y = (height - side) // 2

        square = image.crop((origin_x, origin_y, origin_x + side, origin_y + side))
        try:
            return square.resize((self.size, self.size), Image.Resampling.LANCZOS)
        finally:
            square.close()

    def _to_data_uri(self, image: Image.Image) -> str:
        encodable = _flatten(image) if self.image_format in _OPAQUE_FORMATS else image

        buffer = BytesIO()
        try:
            if self.image_format == "PNG":
                encodable.save(buffer, format="PNG", optimize=True)
            else:
                encodable.save(buffer, format=self.image_format, quality=max(1, round(self.quality * 100)))
        finally:
            if encodable is not image:
                encodable.close()
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def _flatten(image: Image.Image) -> Image.Image:
    """Composite transparent pixels onto white and return an RGB image."""

    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image
