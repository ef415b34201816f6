"""Custom exceptions for exifreader operations."""

from typing import Optional


class ExifReaderError(Exception):
    """Base exception for exifreader errors.

    Attributes:
        message: Error message
        item_index: Position of the pipeline item that failed (if known)
    """

    def __init__(self, message: str, item_index: Optional[int] = None):
        """Initialize exifreader error.

        Args:
            message: Error message
            item_index: Position of the failing item in the batch
        """
        super().__init__(message)
        self.message = message
        self.item_index = item_index

    def __str__(self) -> str:
        """Return string representation of error."""
        return self.message


class ImageSourceError(ExifReaderError):
    """Exception raised when image bytes cannot be obtained."""
    pass


class MissingBinaryDataError(ImageSourceError):
    """Exception raised when an item has no binary data in the given property."""

    def __init__(self, binary_property: str, item_index: Optional[int] = None):
        super().__init__(
            f'No binary data found in property "{binary_property}"',
            item_index=item_index,
        )
        self.binary_property = binary_property


class MissingImageUrlError(ImageSourceError):
    """Exception raised when the URL source is selected without a URL."""

    def __init__(self, item_index: Optional[int] = None):
        super().__init__(
            "Image URL is required when using URL input source",
            item_index=item_index,
        )


class ImageDownloadError(ImageSourceError):
    """Exception raised when downloading an image fails.

    Attributes:
        url: URL that was requested
        status_code: HTTP status code (if a response was received)
    """

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        """Return string representation of error."""
        if self.status_code:
            return f"Image download failed ({self.status_code}): {self.message}"
        return f"Image download failed: {self.message}"


class ExifDecodeError(ExifReaderError):
    """Exception raised when image data cannot be decoded."""
    pass


class ItemProcessingError(ExifReaderError):
    """Exception raised when processing a pipeline item fails.

    Wraps the underlying error and records which item failed.
    """

    def __str__(self) -> str:
        """Return string representation of error."""
        if self.item_index is not None:
            return f"{self.message} [item {self.item_index}]"
        return self.message
