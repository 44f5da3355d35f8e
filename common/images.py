"""
Blackbasket - Image Payload Validation
=======================================
Product and profile images are stored inline as base64 data URLs.
"""

import base64
import binascii
import io
import os
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from common.exceptions import ValidationError
from config.settings import MAX_IMAGE_PAYLOAD_CHARS, ALLOWED_IMAGE_EXTENSIONS

DATA_URL_PREFIX = "data:image/"


def is_valid_base64_image(data: str) -> bool:
    """
    Check a `data:image/...;base64,<payload>` string:
    prefix, exactly one comma, strict base64, and decodable image bytes.
    """
    if not data or not data.startswith(DATA_URL_PREFIX):
        return False

    parts = data.split(",")
    if len(parts) != 2:
        return False

    try:
        raw = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError):
        return False

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return False
    return True


def validate_image_payloads(urls: list) -> None:
    """Validate a list of product image payloads, reporting the first bad one (1-based)."""
    for i, url in enumerate(urls, start=1):
        if len(url) > MAX_IMAGE_PAYLOAD_CHARS:
            raise ValidationError(f"Image {i} exceeds size limit")
        if not is_valid_base64_image(url):
            raise ValidationError(f"Image {i} must be a valid base64 encoded image")


def is_valid_image_url(image_url: str) -> bool:
    """
    Profile images: empty (default applies), a data URL, or an absolute/relative
    URL ending in a known image extension.
    """
    if not image_url:
        return True
    if image_url.startswith(DATA_URL_PREFIX):
        return len(image_url) <= MAX_IMAGE_PAYLOAD_CHARS and is_valid_base64_image(image_url)

    parsed = urlparse(image_url)
    if parsed.scheme not in ("http", "https") and not image_url.startswith("/"):
        return False

    ext = os.path.splitext(parsed.path.lower())[1]
    return ext in ALLOWED_IMAGE_EXTENSIONS
