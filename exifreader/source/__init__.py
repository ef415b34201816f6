"""Image sources for exifreader: pipeline items and HTTP downloads."""

from exifreader.source.fetcher import ImageFetcher, file_name_from_url
from exifreader.source.models import BinaryData, Item

__all__ = ["ImageFetcher", "file_name_from_url", "BinaryData", "Item"]
