"""
certreg_core/canonical.py — Deterministic byte encoding for payloads and headers.

Transaction payloads, transaction headers and batch headers are encoded
as RFC 8785 canonical JSON (JCS) before hashing and signing. The same
logical value must always produce the same bytes, otherwise signatures
become unverifiable.

The protocol only carries strings, integers, booleans, lists and objects.
Floats are rejected outright: none of the registry's fields need them and
their text form is the one place JSON encoders disagree.

Reference: https://www.rfc-editor.org/rfc/rfc8785
"""

from __future__ import annotations

from typing import Any

import jcs
from pydantic import BaseModel

from .config import MAX_SAFE_INTEGER
from .errors import SerializationError


# jcs emits integers through IEEE 754 doubles; beyond 2**53 they change value
_MAX_INT = MAX_SAFE_INTEGER


def canonicalize(obj: Any) -> bytes:
    """Serialize a JSON-compatible Python object to canonical JSON bytes.

    Raises:
        SerializationError: If the value holds floats, out-of-range
            integers, non-string keys or non-JSON types.
    """
    _check_encodable(obj, "$")
    try:
        return jcs.canonicalize(obj)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def canonicalize_model(model: BaseModel) -> bytes:
    """Canonicalize a pydantic model via its JSON-mode dump.

    Pipeline: model_dump(mode="json") → canonicalize() → hash / sign
    """
    return canonicalize(model.model_dump(mode="json"))


def _check_encodable(value: Any, path: str) -> None:
    if value is None or isinstance(value, (bool, str)):
        return
    if isinstance(value, int):
        if not -_MAX_INT <= value <= _MAX_INT:
            raise SerializationError(
                f"Integer at {path} exceeds 2**53 and cannot be encoded exactly",
                details={"path": path},
            )
        return
    if isinstance(value, float):
        raise SerializationError(
            f"Float at {path} cannot be encoded deterministically",
            details={"path": path},
        )
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_encodable(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise SerializationError(
                    f"Object key at {path} must be a string, "
                    f"got {type(k).__name__}",
                    details={"path": path},
                )
            _check_encodable(v, f"{path}.{k}")
        return
    raise SerializationError(
        f"Cannot encode type {type(value).__name__} at {path}. "
        f"Only JSON-compatible types are allowed.",
        details={"path": path},
    )
