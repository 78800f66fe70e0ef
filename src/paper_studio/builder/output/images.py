"""
Module: builder.output.images

Purpose:
    Load overlay image sources into QImages for painting.
    Sources may be file paths, data URIs or http(s) URLs. Decoding is
    done with PIL so every format Pillow reads is supported.

Key Classes:
    - ImageLoader: Async, caching source -> QImage loader
    - ImageLoadError: Missing file, undecodable data or failed fetch

Dependencies:
    - PIL: Image decoding
    - PySide6.QtGui: QImage
    - requests: Remote fetches, run in a worker thread

Used By:
    - builder.output.rasterizer: Awaits every image before painting
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
import urllib.parse
from pathlib import Path
from typing import Dict, Iterable, Optional

import requests
from PIL import Image, UnidentifiedImageError
from PySide6.QtGui import QImage

logger = logging.getLogger(__name__)

# Seconds to wait for a remote image
FETCH_TIMEOUT = 15.0


class ImageLoadError(Exception):
    """Image source could not be read or decoded."""
    pass


def pil_to_qimage(img: Image.Image) -> QImage:
    """
    Convert a PIL image to a QImage that owns its pixel data.

    Args:
        img: Any-mode PIL image

    Returns:
        RGBA8888 QImage
    """
    rgba = img.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    # Detach from the Python buffer
    return qimage.copy()


def decode_image(data: bytes, src: str = "<bytes>") -> QImage:
    """
    Decode encoded image bytes.

    Raises:
        ImageLoadError: If Pillow cannot identify or decode the data
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return pil_to_qimage(img)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageLoadError(f"Cannot decode image {_describe(src)}: {e}") from e


class ImageLoader:
    """
    Loads and caches overlay images by source string.

    Attributes:
        base_dir: Directory relative file paths are resolved against

    Example:
        >>> loader = ImageLoader(base_dir=Path("assets"))
        >>> qimage = asyncio.run(loader.load("logo.png"))
        >>> qimage.isNull()
        False
    """

    def __init__(self, base_dir: Optional[Path] = None, *, fetch_timeout: float = FETCH_TIMEOUT) -> None:
        self.base_dir = base_dir
        self.fetch_timeout = fetch_timeout
        self._cache: Dict[str, QImage] = {}

    def __contains__(self, src: object) -> bool:
        return src in self._cache

    def get(self, src: str) -> Optional[QImage]:
        """Cached image for src, or None if it has not been loaded."""
        return self._cache.get(src)

    def clear(self) -> None:
        self._cache.clear()

    async def load(self, src: str) -> QImage:
        """
        Load one image source (cached after the first success).

        Raises:
            ImageLoadError: If the source cannot be read or decoded
        """
        cached = self._cache.get(src)
        if cached is not None:
            return cached

        if src.startswith("data:"):
            data = _decode_data_uri(src)
        elif urllib.parse.urlparse(src).scheme in ("http", "https"):
            data = await asyncio.to_thread(self._fetch, src)
        else:
            data = await asyncio.to_thread(self._read_file, src)

        qimage = decode_image(data, src)
        if qimage.isNull():
            raise ImageLoadError(f"Decoded image is empty: {_describe(src)}")
        self._cache[src] = qimage
        logger.debug(f"Loaded image {_describe(src)} ({qimage.width()}x{qimage.height()})")
        return qimage

    async def load_all(self, sources: Iterable[str]) -> Dict[str, QImage]:
        """Load several sources in order; the first failure propagates."""
        images: Dict[str, QImage] = {}
        for src in sources:
            if src not in images:
                images[src] = await self.load(src)
        return images

    def _read_file(self, src: str) -> bytes:
        path = Path(src)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageLoadError(f"Cannot read image file {path}: {e}") from e

    def _fetch(self, url: str) -> bytes:
        try:
            response = requests.get(url, timeout=self.fetch_timeout)
            response.raise_for_status()
            return response.content
        except requests.exceptions.RequestException as e:
            raise ImageLoadError(f"Cannot fetch image {url}: {e}") from e


def _decode_data_uri(src: str) -> bytes:
    """Payload of a data: URI (base64 or percent-encoded)."""
    header, sep, payload = src.partition(",")
    if not sep:
        raise ImageLoadError("Malformed data URI (missing ',')")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Invalid base64 in data URI: {e}") from e
    return urllib.parse.unquote_to_bytes(payload)


def _describe(src: str) -> str:
    """Short form of a source for messages (data URIs can be huge)."""
    if src.startswith("data:"):
        return src.split(",", 1)[0] + ",..."
    return src
