"""exifreader - structured EXIF metadata for pipeline items.

Extract EXIF metadata from images supplied as binary data or fetched from a
URL, and reshape the raw tags into grouped, human-friendly JSON.
"""

from exifreader._version import __version__, __version_info__
from exifreader.config import ConfigManager
from exifreader.exif import decode_exif, format_file_size, normalize
from exifreader.processing import ExifReaderProcessor, ReaderOptions

__license__ = "MIT"
__all__ = [
    "__version__",
    "__version_info__",
    "ConfigManager",
    "decode_exif",
    "format_file_size",
    "normalize",
    "ExifReaderProcessor",
    "ReaderOptions",
]
