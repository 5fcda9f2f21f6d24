"""JSON encoding for intake stream lines."""
from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

from .model import Metadata


def _prune(value: Any) -> Any:
    """Drop ``None`` entries so the intake only sees populated fields."""

    if isinstance(value, dict):
        return {key: _prune(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_prune(item) for item in value]
    return value


class Serializer:
    """Encodes the metadata header and individual events as compact JSON."""

    separators = (",", ":")

    def serialize(self, metadata: Metadata) -> bytes:
        document = {"metadata": _prune(asdict(metadata))}
        return json.dumps(document, separators=self.separators, default=str).encode("utf-8")

    def dumps(self, kind: str, data: Dict[str, Any]) -> str:
        return json.dumps({kind: data}, separators=self.separators, default=str)
