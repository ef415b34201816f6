"""Data models for pipeline items and their binary attachments."""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class BinaryData:
    """Binary attachment of a pipeline item.

    Attributes:
        data: Raw file bytes
        file_name: Original file name (if known)
        mime_type: MIME type (if known)
    """
    data: bytes
    file_name: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "BinaryData":
        """Create BinaryData from a dictionary.

        The ``data`` entry may hold raw bytes or a base64-encoded string.

        Args:
            data: Dictionary with data, fileName and mimeType keys

        Returns:
            BinaryData instance

        Raises:
            ValueError: If a string payload is not valid base64
        """
        payload = data.get("data", b"")
        if isinstance(payload, str):
            try:
                payload = base64.b64decode(payload, validate=True)
            except binascii.Error as e:
                raise ValueError(f"Binary data is not valid base64: {e}") from e

        return cls(
            data=payload,
            file_name=data.get("fileName") or data.get("file_name"),
            mime_type=data.get("mimeType") or data.get("mime_type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dictionary with base64-encoded data."""
        result: Dict[str, Any] = {"data": base64.b64encode(self.data).decode("ascii")}
        if self.file_name:
            result["fileName"] = self.file_name
        if self.mime_type:
            result["mimeType"] = self.mime_type
        return result

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class Item:
    """A single unit of work flowing through the pipeline.

    Attributes:
        json: Structured fields of the item
        binary: Named binary attachments
        paired_item: Index of the input item this output came from, set on
            error outputs
    """
    json: Dict[str, Any] = field(default_factory=dict)
    binary: Dict[str, BinaryData] = field(default_factory=dict)
    paired_item: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        """Create Item from a dictionary with json and binary keys."""
        binary = {
            name: value if isinstance(value, BinaryData) else BinaryData.from_dict(value)
            for name, value in (data.get("binary") or {}).items()
        }
        return cls(
            json=dict(data.get("json") or {}),
            binary=binary,
            paired_item=data.get("pairedItem"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the item as a JSON-friendly dictionary."""
        result: Dict[str, Any] = {"json": self.json}
        if self.binary:
            result["binary"] = {name: value.to_dict() for name, value in self.binary.items()}
        if self.paired_item is not None:
            result["pairedItem"] = self.paired_item
        return result
