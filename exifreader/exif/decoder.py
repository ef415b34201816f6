"""EXIF decoding backed by Pillow."""

import io
import logging
from calendar import timegm
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import GPSTAGS, TAGS

from exifreader.exceptions import ExifDecodeError

# Register HEIF/HEIC support if available
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
    HEIC_SUPPORT = True
except ImportError:
    HEIC_SUPPORT = False

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
GPS_IFD = 0x8825

DATE_TAGS = {"DateTimeOriginal", "DateTime", "DateTimeDigitized"}
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

TAG_ALIASES = {
    "ISOSpeedRatings": "ISO",
    "PhotographicSensitivity": "ISO",
}

# ISO base media "ftyp" brands used by HEIC/HEIF files
HEIF_BRANDS = {b"heic", b"heix", b"heim", b"heis", b"hevc", b"hevx", b"mif1", b"msf1"}


@dataclass
class ExifData:
    """Decoded EXIF content of one image.

    Attributes:
        image_size: Image dimensions as {"width", "height"}, if known
        tags: Mapping of tag name to primitive value
    """
    image_size: Optional[Dict[str, int]] = None
    tags: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return the decoded structure as a JSON-friendly dictionary."""
        data: Dict[str, Any] = {}
        if self.image_size:
            data["imageSize"] = dict(self.image_size)
        data["tags"] = dict(self.tags)
        return data


def _simplify(value: Any) -> Any:
    """Convert a Pillow tag value into a JSON-friendly primitive."""
    if isinstance(value, bytes):
        try:
            return value.decode("ascii").rstrip("\x00").strip()
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, str):
        return value.rstrip("\x00").strip()
    if isinstance(value, (tuple, list)):
        items = [_simplify(v) for v in value]
        return items[0] if len(items) == 1 else items
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return value
    # IFDRational and other numeric wrappers
    try:
        number = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return str(value)
    # A rational with a zero denominator comes out as NaN
    if number != number:
        return None
    return number


def parse_exif_datetime(value: Any) -> Any:
    """Convert an EXIF date string to Unix epoch seconds.

    EXIF dates carry no timezone, so they are read as UTC.

    Args:
        value: Date string in "YYYY:MM:DD HH:MM:SS" form

    Returns:
        Epoch seconds, or the value unchanged if it cannot be parsed
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = datetime.strptime(value.strip()[:19], EXIF_DATE_FORMAT)
    except ValueError:
        logger.debug(f"Unparseable EXIF date: {value!r}")
        return value
    return timegm(parsed.timetuple())


def dms_to_degrees(value: Any) -> Any:
    """Convert a (degrees, minutes, seconds) sequence to decimal degrees.

    The result is unsigned; the hemisphere lives in the matching Ref tag.
    """
    if isinstance(value, list) and len(value) == 3:
        try:
            degrees, minutes, seconds = (float(v) for v in value)
        except (TypeError, ValueError):
            return value
        return degrees + minutes / 60.0 + seconds / 3600.0
    return value


def _read_ifd(exif: Image.Exif, ifd_tag: int) -> Dict[int, Any]:
    try:
        return dict(exif.get_ifd(ifd_tag))
    except (KeyError, TypeError, ValueError) as e:
        logger.debug(f"IFD {ifd_tag:#x} not readable: {e}")
        return {}


def _collect_tags(exif: Image.Exif) -> Dict[str, Any]:
    tags: Dict[str, Any] = {}

    entries = list(exif.items()) + list(_read_ifd(exif, EXIF_IFD).items())
    for tag_id, value in entries:
        if tag_id in (EXIF_IFD, GPS_IFD):
            continue
        name = TAGS.get(tag_id)
        if name is None:
            continue
        name = TAG_ALIASES.get(name, name)
        value = _simplify(value)
        if name in DATE_TAGS:
            value = parse_exif_datetime(value)
        tags[name] = value

    for tag_id, value in _read_ifd(exif, GPS_IFD).items():
        name = GPSTAGS.get(tag_id)
        if name is None:
            continue
        value = _simplify(value)
        if name in ("GPSLatitude", "GPSLongitude"):
            value = dms_to_degrees(value)
        tags[name] = value

    return tags


def is_heif(buffer: bytes) -> bool:
    """Return True if the bytes start with a HEIC/HEIF file header."""
    return len(buffer) >= 12 and buffer[4:8] == b"ftyp" and buffer[8:12] in HEIF_BRANDS


def decode_exif(buffer: bytes) -> ExifData:
    """Decode image bytes and extract their EXIF tags.

    Supports every format Pillow can open, plus HEIC/HEIF when pillow-heif
    is installed. An image without EXIF data yields an empty tag mapping.

    Args:
        buffer: Raw image bytes

    Returns:
        ExifData with image dimensions and simplified tag values

    Raises:
        ExifDecodeError: If the bytes are not a readable image
    """
    if not buffer:
        raise ExifDecodeError("Image data is empty")

    if not HEIC_SUPPORT and is_heif(buffer):
        logger.warning(
            "HEIC format detected but pillow-heif not installed. "
            "EXIF extraction may fail. Install with: pip install pillow-heif"
        )

    try:
        with Image.open(io.BytesIO(buffer)) as img:
            width, height = img.size
            exif = img.getexif()
            tags = _collect_tags(exif) if exif else {}
    except UnidentifiedImageError as e:
        raise ExifDecodeError(f"Unsupported or invalid image data: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise ExifDecodeError(f"Failed to decode image: {e}") from e

    logger.debug(f"Decoded {width}x{height} image with {len(tags)} EXIF tags")
    return ExifData(image_size={"width": width, "height": height}, tags=tags)
