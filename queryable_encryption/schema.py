"""
Encrypted field schema.

Describes which document paths are encrypted and how they may be queried.
The engine fills in a data key id for every field that has none when the
encrypted collection is created.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import SchemaError


class QueryType(Enum):
    """Supported queryable encryption query types."""

    EQUALITY = "equality"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EncryptedField:
    """
    One encrypted path.

    query_type None means encrypted but not indexed (not queryable).
    """

    path: str
    bson_type: str
    query_type: Optional[QueryType] = None

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"path": self.path, "bsonType": self.bson_type}
        if self.query_type is not None:
            doc["queries"] = {"queryType": self.query_type.value}
        return doc


@dataclass(frozen=True)
class EncryptedFieldSchema:
    """Ordered set of encrypted fields for one collection."""

    fields: Tuple[EncryptedField, ...]

    def __post_init__(self) -> None:
        if not self.fields:
            raise SchemaError("Encrypted field schema must contain at least one field")
        seen = set()
        for f in self.fields:
            if not f.path or not f.bson_type:
                raise SchemaError(f"Encrypted field needs a path and a bsonType: {f!r}")
            if f.path in seen:
                raise SchemaError(f"Duplicate encrypted field path: {f.path}")
            seen.add(f.path)

    @classmethod
    def of(cls, fields: Iterable[EncryptedField]) -> EncryptedFieldSchema:
        return cls(fields=tuple(fields))

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.fields]

    def to_encrypted_fields(self) -> Dict[str, List[Dict[str, Any]]]:
        """The ``encryptedFields`` document: ``{"fields": [...]}``."""
        return {"fields": [f.to_document() for f in self.fields]}

    def to_create_collection_options(self) -> Dict[str, Any]:
        """Collection creation options: ``{"encryptedFields": {...}}``."""
        return {"encryptedFields": self.to_encrypted_fields()}


def patient_record_schema() -> EncryptedFieldSchema:
    """Default schema for patient documents."""
    return EncryptedFieldSchema.of(
        [
            EncryptedField("age", "int", QueryType.EQUALITY),
            EncryptedField("patientRecord.ssn", "string", QueryType.EQUALITY),
            EncryptedField("patientRecord.billing", "object"),
        ]
    )
