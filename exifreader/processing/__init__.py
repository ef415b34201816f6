"""Item processing pipeline for exifreader."""

from exifreader.processing.processor import ExifReaderProcessor, ReaderOptions, process_items

__all__ = ["ExifReaderProcessor", "ReaderOptions", "process_items"]
