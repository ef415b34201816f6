"""Item pipeline that attaches structured EXIF metadata to each item."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..config import ConfigManager
from ..exceptions import ExifReaderError, ItemProcessingError, MissingBinaryDataError
from ..exif import ExifData, NormalizeOptions, build_file_info, decode_exif, normalize
from ..source import ImageFetcher, Item, file_name_from_url
from ..source.fetcher import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

INPUT_SOURCES = ("binaryData", "url")
DEFAULT_BINARY_FILE_NAME = "unknown"


@dataclass(frozen=True)
class ReaderOptions:
    """Per-item reader parameters.

    Attributes:
        input_source: "binaryData" to read an item attachment, "url" to download
        binary_property: Name of the binary attachment holding the image
        image_url: URL to download when input_source is "url"
        output_property: Key under which metadata is stored in the item json
        include_gps: Whether to include GPS coordinates
        include_image_size: Whether to include image dimensions
        convert_timestamps: Whether to convert timestamps to ISO 8601
        continue_on_fail: Whether a failing item yields an error item instead
            of aborting the batch
    """
    input_source: str = "binaryData"
    binary_property: str = "data"
    image_url: str = ""
    output_property: str = "exif"
    include_gps: bool = True
    include_image_size: bool = True
    convert_timestamps: bool = True
    continue_on_fail: bool = False

    def __post_init__(self):
        if self.input_source not in INPUT_SOURCES:
            raise ValueError(
                f"Invalid input source: {self.input_source!r} "
                f"(expected one of {', '.join(INPUT_SOURCES)})"
            )

    @classmethod
    def from_config(cls, config: ConfigManager, **overrides: Any) -> "ReaderOptions":
        """Create ReaderOptions from the reader section of a configuration.

        Args:
            config: Configuration manager
            **overrides: Values taking precedence over the configuration

        Returns:
            ReaderOptions instance
        """
        defaults = cls()
        values = {
            name: config.get(f"reader.{name}", getattr(defaults, name))
            for name in cls.__dataclass_fields__
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_url(self, image_url: str) -> "ReaderOptions":
        """Return a copy reading from the given URL."""
        return replace(self, input_source="url", image_url=image_url)

    @property
    def normalize_options(self) -> NormalizeOptions:
        return NormalizeOptions(
            include_gps=self.include_gps,
            include_image_size=self.include_image_size,
            convert_timestamps=self.convert_timestamps,
        )


OptionsSource = Union[ReaderOptions, Callable[[int], ReaderOptions]]


class ExifReaderProcessor:
    """Runs EXIF extraction over a batch of pipeline items.

    Items are processed one at a time and independently. Each output item
    keeps the input's json fields and adds the structured metadata under
    the configured output property; binary attachments are dropped to keep
    the output light.
    """

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        decoder: Callable[[bytes], ExifData] = decode_exif
    ) -> None:
        """Initialize processor.

        Args:
            fetcher: Image fetcher for URL sources (created if not provided)
            decoder: Function turning image bytes into ExifData
        """
        self.fetcher = fetcher or ImageFetcher()
        self.decoder = decoder

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ExifReaderProcessor":
        """Create a processor using the http section of a configuration."""
        fetcher = ImageFetcher(
            timeout=config.get("http.timeout", 30),
            user_agent=config.get("http.user_agent", DEFAULT_USER_AGENT),
        )
        return cls(fetcher=fetcher)

    def process(self, items: Iterable[Item], options: OptionsSource) -> List[Item]:
        """Extract EXIF metadata for every item.

        Args:
            items: Input items
            options: ReaderOptions applied to every item, or a callable
                returning the options for a given item index

        Returns:
            One output item per input item, in order

        Raises:
            ExifReaderError: If an item fails and continue_on_fail is off.
                The error's item_index identifies the failing item.
        """
        resolve = options if callable(options) else (lambda index: options)
        items = list(items)
        results = []

        for index, item in enumerate(items):
            # Without options there is no continue_on_fail setting to honour
            try:
                item_options = resolve(index)
            except Exception as e:
                raise ItemProcessingError(
                    f"Could not resolve reader options: {e}", item_index=index
                ) from e

            logger.info(f"[{index + 1}/{len(items)}] Reading EXIF data")

            try:
                results.append(self.process_item(item, item_options, index))
            except Exception as e:
                if item_options.continue_on_fail:
                    logger.warning(f"Item {index} failed: {e}")
                    results.append(Item(
                        json={**item.json, "error": str(e)},
                        binary=item.binary,
                        paired_item=index,
                    ))
                    continue

                if isinstance(e, ExifReaderError):
                    e.item_index = index
                    raise
                raise ItemProcessingError(str(e), item_index=index) from e

        return results

    def process_item(self, item: Item, options: ReaderOptions, index: int = 0) -> Item:
        """Extract EXIF metadata for a single item.

        Args:
            item: Input item
            options: Reader options for this item
            index: Position of the item in its batch

        Returns:
            Output item with metadata under options.output_property

        Raises:
            MissingBinaryDataError: If the binary property is missing
            MissingImageUrlError: If the URL source has no URL
            ImageDownloadError: If the download fails
            ExifDecodeError: If the image cannot be decoded
        """
        buffer, file_name = self._load_image(item, options, index)

        exif_data = self.decoder(buffer)
        metadata = normalize(
            exif_data.tags,
            exif_data.image_size,
            build_file_info(file_name, len(buffer)),
            options.normalize_options,
            raw=exif_data.to_dict(),
        )

        logger.debug(f"Extracted {len(exif_data.tags)} tags from {file_name}")
        return Item(json={**item.json, options.output_property: metadata})

    def _load_image(
        self,
        item: Item,
        options: ReaderOptions,
        index: int
    ) -> Tuple[bytes, str]:
        if options.input_source == "binaryData":
            binary = item.binary.get(options.binary_property)
            if binary is None:
                raise MissingBinaryDataError(options.binary_property, item_index=index)
            return binary.data, binary.file_name or DEFAULT_BINARY_FILE_NAME

        buffer = self.fetcher.fetch(options.image_url)
        return buffer, file_name_from_url(options.image_url)


def process_items(
    items: Iterable[Dict[str, Any]],
    options: Optional[ReaderOptions] = None,
    processor: Optional[ExifReaderProcessor] = None
) -> List[Dict[str, Any]]:
    """Process plain item dictionaries and return plain dictionaries.

    Args:
        items: Items as {"json": ..., "binary": ...} dictionaries
        options: Reader options (defaults used if not provided)
        processor: Processor to use (created if not provided)

    Returns:
        Output items as dictionaries
    """
    processor = processor or ExifReaderProcessor()
    results = processor.process(
        [Item.from_dict(item) for item in items],
        options or ReaderOptions(),
    )
    return [result.to_dict() for result in results]
