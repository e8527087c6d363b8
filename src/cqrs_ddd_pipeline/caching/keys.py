"""Deterministic cache-key derivation for requests and validator outcomes.

Keys are ``{TypeName}_{sha256}`` where the hash covers a versioned, canonical
JSON encoding of the request content (sorted keys, compact separators, sets
emitted in sorted order). The encoding does not depend on field declaration
order, process, or hash randomization, so keys survive restarts and can be
shared between processes through Redis.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

#: Bump when the canonical encoding changes so old entries stop matching.
KEY_ENCODING_VERSION = "v1"

VALIDATION_KEY_PREFIX = "validation:"

#: Separates type name, validator name and hash in validation keys. It cannot
#: occur in a Python identifier, so one type's pattern never matches another.
VALIDATION_KEY_SEPARATOR = ":"


def request_type_name(request: Any) -> str:
    cls = request if isinstance(request, type) else type(request)
    type_name = getattr(cls, "type_name", None)
    return type_name() if callable(type_name) else cls.__name__


def request_content(request: Any) -> Any:
    """Field values of *request* without per-call metadata, before encoding."""
    if isinstance(request, BaseModel):
        metadata = getattr(request, "METADATA_FIELDS", frozenset())
        return request.model_dump(mode="python", exclude=set(metadata))
    return vars(request)


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonicalize(value: Any) -> Any:
    """JSON-compatible form of *value* that is identical for equal content.

    Sets lose their iteration order (which varies with ``PYTHONHASHSEED``)
    and are emitted sorted by each element's canonical JSON.
    """
    if isinstance(value, BaseModel):
        return canonicalize(value.model_dump(mode="python"))
    if isinstance(value, Mapping):
        return {
            key if isinstance(key, str) else _dumps(canonicalize(key)): canonicalize(v)
            for key, v in value.items()
        }
    if isinstance(value, (set, frozenset)):
        return sorted((canonicalize(v) for v in value), key=_dumps)
    if isinstance(value, (list, tuple)):
        return [canonicalize(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return canonicalize(to_jsonable_python(value, fallback=str))


def canonical_bytes(content: Any) -> bytes:
    return f"{KEY_ENCODING_VERSION}:{_dumps(canonicalize(content))}".encode()


def content_hash(request: Any) -> str:
    return hashlib.sha256(canonical_bytes(request_content(request))).hexdigest()


def derive_cache_key(request: Any) -> str:
    """Return the request's custom ``cache_key`` or ``{TypeName}_{hash}``."""
    custom = getattr(request, "cache_key", None)
    if custom:
        return str(custom)
    return f"{request_type_name(request)}_{content_hash(request)}"


def validation_cache_key(request: Any, validator_name: str) -> str:
    return VALIDATION_KEY_PREFIX + VALIDATION_KEY_SEPARATOR.join(
        (request_type_name(request), validator_name, content_hash(request))
    )


def validation_cache_pattern(request_type: type[Any] | None = None) -> str:
    """Wildcard matching cached validation outcomes (of one type, or all)."""
    if request_type is None:
        return f"{VALIDATION_KEY_PREFIX}*"
    return (
        f"{VALIDATION_KEY_PREFIX}{request_type_name(request_type)}"
        f"{VALIDATION_KEY_SEPARATOR}*"
    )
