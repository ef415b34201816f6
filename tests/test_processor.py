"""Tests for the EXIF reader item pipeline."""

from unittest.mock import Mock

import pytest

from exifreader.config import ConfigManager
from exifreader.exceptions import (
    ExifDecodeError,
    ImageDownloadError,
    ItemProcessingError,
    MissingBinaryDataError,
    MissingImageUrlError,
)
from exifreader.exif import ExifData
from exifreader.processing import ExifReaderProcessor, ReaderOptions, process_items
from exifreader.source import BinaryData, Item, ImageFetcher

URL = "https://example.com/images/sunset.jpg"


def binary_item(data, file_name="photo.jpg", **json):
    return Item(json=json, binary={"data": BinaryData(data=data, file_name=file_name)})


def test_binary_item(camera_jpeg):
    processor = ExifReaderProcessor()
    [result] = processor.process([binary_item(camera_jpeg, id=7)], ReaderOptions())

    assert result.json["id"] == 7
    assert result.binary == {}
    assert result.paired_item is None

    exif = result.json["exif"]
    assert exif["fileInfo"]["fileName"] == "photo.jpg"
    assert exif["fileInfo"]["fileSizeBytes"] == len(camera_jpeg)
    assert exif["imageSize"] == {"width": 80, "height": 60}
    assert exif["camera"] == {
        "make": "Canon",
        "model": "Canon EOS R5",
        "software": "Firmware 1.8.1",
    }
    assert exif["timestamp"]["iso"] == "2021-01-01T00:00:00.000Z"
    assert exif["raw"]["tags"]["Make"] == "Canon"
    assert exif["raw"]["imageSize"] == {"width": 80, "height": 60}


def test_output_property_and_flags(camera_jpeg):
    options = ReaderOptions(
        output_property="metadata",
        include_image_size=False,
        convert_timestamps=False,
    )
    [result] = ExifReaderProcessor().process([binary_item(camera_jpeg)], options)

    assert "exif" not in result.json
    assert result.json["metadata"]["imageSize"] is None
    assert result.json["metadata"]["timestamp"] == 1609459200


def test_missing_file_name_defaults_to_unknown(plain_jpeg):
    [result] = ExifReaderProcessor().process(
        [binary_item(plain_jpeg, file_name=None)], ReaderOptions()
    )
    assert result.json["exif"]["fileInfo"]["fileName"] == "unknown"
    assert "camera" not in result.json["exif"]


def test_url_item(camera_jpeg):
    fetcher = Mock(spec=ImageFetcher)
    fetcher.fetch.return_value = camera_jpeg

    processor = ExifReaderProcessor(fetcher=fetcher)
    options = ReaderOptions(input_source="url", image_url=URL)
    [result] = processor.process([Item(json={"id": 1})], options)

    fetcher.fetch.assert_called_once_with(URL)
    assert result.json["exif"]["fileInfo"]["fileName"] == "sunset.jpg"
    assert result.json["exif"]["camera"]["make"] == "Canon"


def test_per_item_options(camera_jpeg):
    decoder = Mock(return_value=ExifData(tags={"GPSLatitude": 1.5, "GPSLatitudeRef": "S"}))
    processor = ExifReaderProcessor(decoder=decoder)
    items = [binary_item(camera_jpeg), binary_item(camera_jpeg)]

    results = processor.process(
        items, lambda index: ReaderOptions(include_gps=(index == 0))
    )

    assert results[0].json["exif"]["gps"]["latitudeDecimal"] == -1.5
    assert results[1].json["exif"]["gps"] is None


def test_missing_binary_data_aborts_with_item_index(camera_jpeg):
    items = [binary_item(camera_jpeg), Item(json={"id": 2})]

    with pytest.raises(MissingBinaryDataError) as exc_info:
        ExifReaderProcessor().process(items, ReaderOptions())

    assert exc_info.value.item_index == 1
    assert 'No binary data found in property "data"' in str(exc_info.value)


def test_missing_url():
    with pytest.raises(MissingImageUrlError) as exc_info:
        ExifReaderProcessor().process([Item()], ReaderOptions(input_source="url"))
    assert exc_info.value.item_index == 0


def test_download_failure_sets_item_index():
    fetcher = Mock(spec=ImageFetcher)
    fetcher.fetch.side_effect = ImageDownloadError("boom", url=URL, status_code=500)
    options = ReaderOptions(input_source="url", image_url=URL)

    with pytest.raises(ImageDownloadError) as exc_info:
        ExifReaderProcessor(fetcher=fetcher).process([Item(), Item()], options)

    assert exc_info.value.item_index == 0


def test_unexpected_error_is_wrapped(plain_jpeg):
    decoder = Mock(side_effect=RuntimeError("decoder crashed"))
    items = [binary_item(plain_jpeg)]

    with pytest.raises(ItemProcessingError) as exc_info:
        ExifReaderProcessor(decoder=decoder).process(items, ReaderOptions())

    assert exc_info.value.item_index == 0
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert str(exc_info.value) == "decoder crashed [item 0]"


def test_options_failure_is_reported_with_item_index(camera_jpeg):
    def options_for(index):
        if index == 1:
            return ReaderOptions(input_source="ftp")
        return ReaderOptions(continue_on_fail=True)

    items = [binary_item(camera_jpeg), binary_item(camera_jpeg)]

    with pytest.raises(ItemProcessingError) as exc_info:
        ExifReaderProcessor().process(items, options_for)

    assert exc_info.value.item_index == 1
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_continue_on_fail(camera_jpeg):
    bad = binary_item(b"not an image", file_name="broken.jpg", id=1)
    good = binary_item(camera_jpeg, id=2)
    options = ReaderOptions(continue_on_fail=True)

    first, second = ExifReaderProcessor().process([bad, good], options)

    assert first.json["id"] == 1
    assert "exif" not in first.json
    assert first.json["error"]
    assert first.binary == bad.binary
    assert first.paired_item == 0

    assert second.json["exif"]["camera"]["make"] == "Canon"
    assert "error" not in second.json


def test_decode_error_without_continue():
    with pytest.raises(ExifDecodeError) as exc_info:
        ExifReaderProcessor().process([binary_item(b"garbage")], ReaderOptions())
    assert exc_info.value.item_index == 0


def test_invalid_input_source():
    with pytest.raises(ValueError):
        ReaderOptions(input_source="ftp")


def test_options_from_config(isolated_home):
    config = ConfigManager.load(create_if_missing=False)
    config.set("reader.include_gps", False)
    config.set("reader.output_property", "meta")

    options = ReaderOptions.from_config(config, output_property="override", include_image_size=None)

    assert options.include_gps is False
    assert options.output_property == "override"
    assert options.include_image_size is True


def test_process_items_with_dicts(camera_jpeg):
    results = process_items([
        {"json": {"id": 1}, "binary": {"data": {"data": camera_jpeg, "fileName": "x.jpg"}}},
    ])

    assert results == [{"json": {"id": 1, "exif": results[0]["json"]["exif"]}}]
    assert results[0]["json"]["exif"]["fileInfo"]["fileName"] == "x.jpg"
