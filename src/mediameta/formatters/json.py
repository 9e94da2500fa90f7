"""JSON output formatter."""

import json
from typing import Any

from pydantic import BaseModel


def format_json(record: BaseModel, indent: int = 2) -> str:
    """Serialize one ImageMetadata or VideoMetadata record.

    Every field of the record is written, so fields that could not be
    resolved appear as ``null``. The media item id and capture time use
    their standard string forms.
    """
    return record.model_dump_json(indent=indent)


def format_json_list(records: list[BaseModel], indent: int = 2) -> str:
    """Serialize a batch of records as a JSON array, in input order.

    Image and video records may be mixed; each keeps its own field set.
    """
    data = [to_dict(r) for r in records]
    return json.dumps(data, indent=indent, ensure_ascii=False)


def to_dict(record: BaseModel) -> dict[str, Any]:
    """Return a record as plain JSON types (UUID and datetime become strings)."""
    return record.model_dump(mode="json")
