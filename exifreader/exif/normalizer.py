"""Reshape raw EXIF tags into structured, human-friendly metadata."""

import copy
import logging
import math
import numbers
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from exifreader.exif.filesize import format_file_size, format_number

logger = logging.getLogger(__name__)

EXPOSURE_MODES = ("Auto", "Manual", "Auto bracket")

# Checked in order; the first tag present wins
TIMESTAMP_TAGS = ("DateTimeOriginal", "DateTime", "DateTimeDigitized")


@dataclass(frozen=True)
class NormalizeOptions:
    """Feature flags controlling which groups are derived.

    Attributes:
        include_gps: Whether to emit the GPS group
        include_image_size: Whether to emit image dimensions
        convert_timestamps: Whether to expand timestamps into ISO/display forms
    """
    include_gps: bool = True
    include_image_size: bool = True
    convert_timestamps: bool = True


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _has_text(value: Any) -> bool:
    # Blank strings (NUL-padded tags after stripping) count as missing
    return value is not None and value != ""


def build_file_info(file_name: str, size_bytes: int) -> Dict[str, Any]:
    """Build the fileInfo group for an image.

    Args:
        file_name: Name of the source file
        size_bytes: Size of the image buffer in bytes

    Returns:
        Dictionary with fileName, fileSizeBytes and fileSizeFormatted
    """
    return {
        "fileName": file_name,
        "fileSizeBytes": size_bytes,
        "fileSizeFormatted": format_file_size(size_bytes),
    }


def format_shutter_speed(exposure_time: Any) -> Any:
    """Format an exposure time in seconds as a shutter speed.

    Sub-second exposures become a fraction ("1/200"), longer ones keep their
    value with an "s" suffix ("2s"). Non-numeric values are returned as-is.
    """
    if not _is_number(exposure_time):
        return exposure_time

    if 0 < exposure_time < 1:
        try:
            # Half rounds up
            denominator = math.floor(1 / exposure_time + 0.5)
        except (OverflowError, ZeroDivisionError):
            return exposure_time
        return f"1/{denominator}"

    return f"{format_number(exposure_time)}s"


def exposure_mode_name(mode: Any) -> str:
    """Map an ExposureMode tag value to its name."""
    if _is_number(mode) and float(mode).is_integer():
        index = int(mode)
        if 0 <= index < len(EXPOSURE_MODES):
            return EXPOSURE_MODES[index]
    return "Unknown"


def _signed_coordinate(value: Any, ref: Any, negative_ref: str) -> Optional[float]:
    if value is None or not ref or not _is_number(value):
        return None
    return -abs(value) if ref == negative_ref else abs(value)


def convert_timestamp(value: Any) -> Any:
    """Expand an epoch-seconds timestamp into ISO and display forms.

    Args:
        value: Unix timestamp in seconds

    Returns:
        Dictionary with original, iso (UTC) and formatted (local, locale
        dependent) values, or the value unchanged if it is not a usable
        timestamp
    """
    if not _is_number(value):
        return value

    try:
        utc = datetime.fromtimestamp(value, tz=timezone.utc)
        local = datetime.fromtimestamp(value)
    except (OverflowError, OSError, ValueError) as e:
        logger.debug(f"Could not convert timestamp {value!r}: {e}")
        return value

    return {
        "original": value,
        "iso": utc.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "formatted": local.strftime("%c"),
    }


def _camera_group(tags: Mapping[str, Any]) -> Dict[str, Any]:
    camera = {}
    for field, tag in (("make", "Make"), ("model", "Model"), ("software", "Software")):
        if _has_text(tags.get(tag)):
            camera[field] = tags[tag]
    return camera


def _lens_group(tags: Mapping[str, Any]) -> Dict[str, Any]:
    lens = {}
    if _has_text(tags.get("LensModel")):
        lens["model"] = tags["LensModel"]
    if _has_text(tags.get("LensMake")):
        lens["make"] = tags["LensMake"]
    if tags.get("FocalLength") is not None:
        lens["focalLength"] = f"{format_number(tags['FocalLength'])}mm"
    return lens


def _exposure_group(tags: Mapping[str, Any]) -> Dict[str, Any]:
    exposure = {}
    if tags.get("ExposureTime") is not None:
        exposure["shutterSpeed"] = format_shutter_speed(tags["ExposureTime"])
    if tags.get("FNumber") is not None:
        exposure["aperture"] = f"f/{format_number(tags['FNumber'])}"
    if tags.get("ISO") is not None:
        exposure["iso"] = tags["ISO"]
    if tags.get("ExposureMode") is not None:
        exposure["mode"] = exposure_mode_name(tags["ExposureMode"])
    if tags.get("Flash") is not None:
        exposure["flash"] = "Fired" if tags["Flash"] == 1 else "Did not fire"
    return exposure


def _gps_group(tags: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    # A coordinate of exactly 0 (equator, prime meridian) counts as present
    if tags.get("GPSLatitude") is None and tags.get("GPSLongitude") is None:
        return None

    gps = {
        "latitude": tags.get("GPSLatitude"),
        "longitude": tags.get("GPSLongitude"),
        "altitude": tags.get("GPSAltitude"),
        "latitudeRef": tags.get("GPSLatitudeRef"),
        "longitudeRef": tags.get("GPSLongitudeRef"),
    }

    latitude = _signed_coordinate(gps["latitude"], gps["latitudeRef"], "S")
    if latitude is not None:
        gps["latitudeDecimal"] = latitude

    longitude = _signed_coordinate(gps["longitude"], gps["longitudeRef"], "W")
    if longitude is not None:
        gps["longitudeDecimal"] = longitude

    return gps


def _timestamp(tags: Mapping[str, Any], convert: bool) -> Any:
    value = next(
        (tags[tag] for tag in TIMESTAMP_TAGS if tags.get(tag) is not None),
        None,
    )
    if value is None:
        return None
    return convert_timestamp(value) if convert else value


def normalize(
    raw_tags: Optional[Mapping[str, Any]],
    image_size: Optional[Mapping[str, int]],
    file_info: Dict[str, Any],
    options: Optional[NormalizeOptions] = None,
    raw: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build structured metadata from a raw EXIF tag dictionary.

    Groups with nothing to report (camera, lens, exposure) are left out of
    the result entirely. imageSize, gps and timestamp are always present and
    are None when disabled or unavailable. The function never raises:
    values of an unexpected type are carried through uninterpreted.

    Args:
        raw_tags: Mapping of EXIF tag name to primitive value (may be empty)
        image_size: Image dimensions as {"width", "height"}, if known
        file_info: fileInfo group, see build_file_info()
        options: Feature flags (defaults to everything enabled)
        raw: Decoded structure to pass through under "raw"; built from
            raw_tags and image_size when not given

    Returns:
        Structured metadata dictionary

    Examples:
        >>> info = build_file_info("photo.jpg", 1536)
        >>> result = normalize({"Make": "Canon", "FNumber": 2.8}, None, info)
        >>> result["camera"], result["exposure"]
        ({'make': 'Canon'}, {'aperture': 'f/2.8'})
    """
    options = options or NormalizeOptions()
    tags = raw_tags or {}

    if raw is None:
        raw = {"tags": dict(tags)}
        if image_size:
            raw["imageSize"] = dict(image_size)

    result: Dict[str, Any] = {"fileInfo": dict(file_info)}

    if options.include_image_size and image_size:
        result["imageSize"] = {
            "width": image_size.get("width"),
            "height": image_size.get("height"),
        }
    else:
        result["imageSize"] = None

    for group, values in (
        ("camera", _camera_group(tags)),
        ("lens", _lens_group(tags)),
        ("exposure", _exposure_group(tags)),
    ):
        if values:
            result[group] = values

    result["gps"] = _gps_group(tags) if options.include_gps else None
    result["timestamp"] = _timestamp(tags, options.convert_timestamps)
    result["raw"] = copy.deepcopy(raw)

    logger.debug(
        f"Normalized {len(tags)} tags for {file_info.get('fileName')}: "
        f"groups={[key for key, value in result.items() if value is not None]}"
    )
    return result
