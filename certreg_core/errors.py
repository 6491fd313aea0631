"""
certreg_core/errors.py — Error taxonomy for the certificate registry client.

Every fallible operation in certreg_core raises a subclass of
CertRegError. Each kind carries a stable machine-readable `code` plus a
human-readable message; the underlying library exception (pydantic,
cryptography, OSError) is chained as __cause__.

No operation returns a partial transaction or batch: construction is
all-or-nothing, and nothing here retries.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


CERTREG_E_USER = "CERTREG_E_USER"
CERTREG_E_IO = "CERTREG_E_IO"
CERTREG_E_SIGNING = "CERTREG_E_SIGNING"
CERTREG_E_SERIALIZATION = "CERTREG_E_SERIALIZATION"
CERTREG_E_INVALID_TRANSACTION = "CERTREG_E_INVALID_TRANSACTION"
CERTREG_E_INVALID_INPUT = "CERTREG_E_INVALID_INPUT"


class CertRegError(Exception):
    """Base error with a stable code."""

    code: str = "CERTREG_E_INTERNAL"
    label: str = "Error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            d["details"] = self.details
        return d

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class UserError(CertRegError):
    """Invalid input whose message is fit for display without more context."""

    code = CERTREG_E_USER
    label = "Error"


class IoError(CertRegError):
    code = CERTREG_E_IO
    label = "IoError"


class SigningError(CertRegError):
    """The signer could not produce a public key or a signature."""

    code = CERTREG_E_SIGNING
    label = "SigningError"


class SerializationError(CertRegError):
    """A payload or header could not be encoded to bytes."""

    code = CERTREG_E_SERIALIZATION
    label = "SerializationError"


class InvalidTransactionError(CertRegError):
    code = CERTREG_E_INVALID_TRANSACTION
    label = "InvalidTransactionError"


class InvalidInputError(CertRegError):
    code = CERTREG_E_INVALID_INPUT
    label = "InvalidInput"
