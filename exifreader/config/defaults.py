"""Default configuration values for exifreader."""

from exifreader._version import __version__

# Default configuration dictionary
DEFAULT_CONFIG = {
    # Reader options (applied to every item unless overridden per item)
    "reader": {
        "input_source": "binaryData",  # "binaryData" or "url"
        "binary_property": "data",
        "image_url": "",
        "output_property": "exif",
        "include_gps": True,
        "include_image_size": True,
        "convert_timestamps": True,
        "continue_on_fail": False,
    },

    # HTTP download configuration
    "http": {
        "timeout": 30,
        "user_agent": f"exifreader/{__version__}",
    },

    # Logging Configuration
    "logging": {
        "level": "INFO",
        "file": "",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}

