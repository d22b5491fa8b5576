"""Content hashing used to merge equivalent cart lines."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from .attributes import ITEM_QTY

HashFunction = Callable[[Dict[str, Any]], str]


def _tag_key(key: Any) -> str:
    # keys of any type become strings, tagged so that 1 and "1" stay distinct
    if isinstance(key, str):
        return f"str:{key}"
    return f"{type(key).__name__}:{json.dumps(canonical_value(key), sort_keys=True)}"


def canonical_value(value: Any) -> Any:
    """Reduce ``value`` to JSON data that is identical across processes.

    Raises:
        TypeError: when the value has no stable representation
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return {"__decimal__": str(value.normalize())}
    if isinstance(value, (datetime, date, time)):
        return {"__datetime__": value.isoformat()}
    if isinstance(value, Mapping):
        return {_tag_key(key): canonical_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((canonical_value(item) for item in value), key=lambda item: json.dumps(item, sort_keys=True))
    if hasattr(value, "get_hash"):
        return {"__hash__": value.get_hash()}
    raise TypeError(
        f"Cannot build a stable hash from {type(value).__name__!r}; "
        "use plain data (str, numbers, Decimal, dates, lists, dicts) or an object with get_hash()"
    )


def content_hash(record: Dict[str, Any]) -> str:
    """SHA-256 of the record serialized as canonical JSON."""
    payload = json.dumps(canonical_value(record), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def random_identity() -> str:
    return uuid4().hex


class IdentityHasher:
    """Builds item identities.

    Regular items get a deterministic hash of their canonical record, so two
    lines differing only in quantity or discounts collapse into one. Line
    items get a random identity instead and never merge.
    """

    def __init__(
        self,
        hash_function: Optional[HashFunction] = None,
        random_identity_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.hash_function = hash_function or content_hash
        self.random_identity = random_identity_factory or random_identity

    def canonical_record(self, item) -> Dict[str, Any]:
        """Everything that identifies ``item`` except quantity, discounts and excluded fields."""
        excluded = set(item.excluded_hash_fields)
        excluded.add(ITEM_QTY)
        return {
            "options": item.attributes.canonical(excluded),
            "active": item.active,
            "line_item": item.line_item,
            "currency_code": item.currency_code,
            "locale": item.locale,
            "item_model": item.item_model,
            "item_model_relations": list(item.item_model_relations),
            "sub_items": sorted(item.sub_items.keys()),
        }

    def compute(self, item, force: bool = False) -> Optional[str]:
        """Return the identity ``item`` should carry after (re)hashing."""
        if not item.line_item:
            return self.hash_function(self.canonical_record(item))
        if force or not item.get_hash():
            return self.random_identity()
        return item.get_hash()

    def hash_data(self, data: Dict[str, Any]) -> str:
        """Content hash for plain attribute data (sub-items)."""
        return self.hash_function({key: data[key] for key in sorted(data, key=str)})
