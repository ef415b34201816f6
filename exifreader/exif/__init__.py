"""EXIF decoding and normalization for exifreader."""

from exifreader.exif.decoder import ExifData, decode_exif
from exifreader.exif.filesize import format_file_size
from exifreader.exif.normalizer import NormalizeOptions, build_file_info, normalize

__all__ = [
    "ExifData",
    "decode_exif",
    "format_file_size",
    "NormalizeOptions",
    "build_file_info",
    "normalize",
]
