"""Evidence packaging - timestamp burn-in and compression of inspection photos.

Each photo is stamped with the local capture time in the bottom-right corner
(white text, black outline), re-encoded as JPEG and compressed to at most
0.7 MB and 1280 px on the longest side. Any failure falls back to the
original upload so a bad image never blocks a submission.

Packaged files are renamed ``{category}_{index}_{HHmm}_{DDMMYY}.jpg``.
"""

import io
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime

from PIL import Image, ImageDraw, ImageFont, ImageOps

from app.core.dates import ddmmyy, display_datetime, hhmm

logger = logging.getLogger(__name__)

BURN_IN_QUALITY = 90
MAX_BYTES = int(0.7 * 1024 * 1024)
MAX_DIMENSION = 1280
MIN_DIMENSION = 320
MIN_QUALITY = 40
QUALITY_STEP = 10

_CATEGORY_RE = re.compile(r"^(?P<category>[A-Za-z]+)(?:[_-](?P<index>\d+))?$")


@dataclass
class EvidenceFile:
    filename: str
    content_type: str
    content: bytes


def split_category(filename: str) -> tuple[str, int]:
    """'checklist_2.jpg' -> ('checklist', 2); 'building.jpg' -> ('building', 1)."""
    stem = os.path.splitext(os.path.basename(filename or ""))[0]
    match = _CATEGORY_RE.match(stem)
    if not match:
        return (stem or "photo"), 1
    index = int(match.group("index")) if match.group("index") else 1
    return match.group("category").lower(), index


def evidence_filename(
    category: str,
    index: int,
    when: datetime,
    tz_name: str,
    era: str = "gregorian",
) -> str:
    return f"{category}_{index}_{hhmm(when, tz_name)}_{ddmmyy(when, tz_name, era)}.jpg"


def _load_rgb(content: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(content))
    img = ImageOps.exif_transpose(img)
    return img.convert("RGB")


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue()


def burn_timestamp(content: bytes, stamp: str) -> bytes:
    """Draw ``stamp`` bottom-right and re-encode at JPEG quality 90."""
    img = _load_rgb(content)
    draw = ImageDraw.Draw(img)

    font_size = max(16, img.width // 30)
    font = ImageFont.load_default(size=font_size)
    stroke = max(2, font_size // 10)
    margin = max(10, font_size // 2)

    left, top, right, bottom = draw.textbbox((0, 0), stamp, font=font, stroke_width=stroke)
    x = img.width - (right - left) - margin
    y = img.height - (bottom - top) - margin
    draw.text(
        (x - left, y - top),
        stamp,
        font=font,
        fill="white",
        stroke_width=stroke,
        stroke_fill="black",
    )
    return _encode_jpeg(img, BURN_IN_QUALITY)


def compress_jpeg(
    content: bytes,
    max_bytes: int = MAX_BYTES,
    max_dimension: int = MAX_DIMENSION,
) -> bytes:
    """Downscale to max_dimension, then lower quality until under max_bytes.

    If the quality floor is reached and the image is still too large it is
    shrunk by a quarter and the quality ladder restarts.
    """
    img = _load_rgb(content)
    img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    while True:
        for quality in range(BURN_IN_QUALITY, MIN_QUALITY - 1, -QUALITY_STEP):
            encoded = _encode_jpeg(img, quality)
            if len(encoded) <= max_bytes:
                return encoded
        if max(img.size) <= MIN_DIMENSION:
            return encoded
        img = img.resize(
            (max(1, img.width * 3 // 4), max(1, img.height * 3 // 4)),
            Image.Resampling.LANCZOS,
        )


def package_evidence(
    file: EvidenceFile,
    when: datetime,
    tz_name: str,
    era: str = "gregorian",
) -> EvidenceFile:
    """Stamp, compress and rename one photo; return it untouched on failure."""
    category, index = split_category(file.filename)
    try:
        stamped = burn_timestamp(file.content, display_datetime(when, tz_name))
        compressed = compress_jpeg(stamped)
    except Exception as e:
        logger.warning(f"[EVIDENCE] Packaging failed for {file.filename}, sending original: {e}")
        return file

    return EvidenceFile(
        filename=evidence_filename(category, index, when, tz_name, era),
        content_type="image/jpeg",
        content=compressed,
    )
