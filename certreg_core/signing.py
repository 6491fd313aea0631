"""
certreg_core/signing.py — Signing capability used for transactions and batches.

Any object with these two methods can sign:

    public_key() -> str        hex-encoded public key
    sign(message: bytes) -> str  hex-encoded signature over message

Two in-process implementations are provided (secp256k1, the ledger's
native scheme, and Ed25519). Remote or hardware signers only need to
satisfy the same protocol.

Signers are used read-only and may be shared between callers; when a
concrete backend is not thread-safe, callers serialize access to it.
Every failure raised by a signer surfaces as SigningError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .config import ClientSettings, SignerAlgorithm, get_settings
from .crypto import (
    ed25519_public_key_hex,
    ed25519_sign,
    generate_ed25519_key,
    generate_secp256k1_key,
    private_key_from_pem,
    private_key_to_pem,
    secp256k1_public_key_hex,
    secp256k1_sign,
)
from .errors import InvalidInputError, IoError, SigningError


logger = logging.getLogger("certreg_core.signing")


@runtime_checkable
class Signer(Protocol):
    """Protocol implemented by signing backends."""

    def public_key(self) -> str: ...

    def sign(self, message: bytes) -> str: ...


@dataclass(frozen=True)
class Secp256k1Signer:
    """In-process ECDSA signer over secp256k1."""
    private_key: ec.EllipticCurvePrivateKey

    def public_key(self) -> str:
        return secp256k1_public_key_hex(self.private_key.public_key())

    def sign(self, message: bytes) -> str:
        return secp256k1_sign(self.private_key, bytes(message))

    def to_pem(self) -> bytes:
        return private_key_to_pem(self.private_key)


@dataclass(frozen=True)
class Ed25519Signer:
    """In-process Ed25519 signer."""
    private_key: Ed25519PrivateKey

    def public_key(self) -> str:
        return ed25519_public_key_hex(self.private_key.public_key())

    def sign(self, message: bytes) -> str:
        return ed25519_sign(self.private_key, bytes(message))

    def to_pem(self) -> bytes:
        return private_key_to_pem(self.private_key)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def generate_signer(algorithm: SignerAlgorithm = "secp256k1") -> Signer:
    """Create a signer around a freshly generated private key."""
    if algorithm == "secp256k1":
        return Secp256k1Signer(generate_secp256k1_key())
    if algorithm == "ed25519":
        return Ed25519Signer(generate_ed25519_key())
    raise InvalidInputError(f"Unsupported signer algorithm: {algorithm!r}")


def signer_from_pem(pem_data: bytes) -> Signer:
    """Wrap a PEM private key; the scheme follows from the key type."""
    try:
        key = private_key_from_pem(pem_data)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Unusable private key: {exc}") from exc
    if isinstance(key, Ed25519PrivateKey):
        return Ed25519Signer(key)
    return Secp256k1Signer(key)


def load_signer(path: str) -> Signer:
    """Load a signer from a PEM private key file."""
    try:
        with open(path, "rb") as f:
            pem_data = f.read()
    except OSError as exc:
        raise IoError(f"Cannot read private key {path}: {exc}") from exc
    signer = signer_from_pem(pem_data)
    logger.debug("loaded %s from %s", type(signer).__name__, path)
    return signer


def signer_from_settings(settings: Optional[ClientSettings] = None) -> Signer:
    """Build the signer described by ClientSettings.

    With private_key_path set the key is loaded from disk and must match
    signer_algorithm; otherwise a fresh key of that algorithm is created.
    """
    if settings is None:
        settings = get_settings()

    if settings.private_key_path is None:
        return generate_signer(settings.signer_algorithm)

    signer = load_signer(settings.private_key_path)
    expected = Secp256k1Signer if settings.signer_algorithm == "secp256k1" else Ed25519Signer
    if not isinstance(signer, expected):
        raise InvalidInputError(
            f"Key at {settings.private_key_path} is not a "
            f"{settings.signer_algorithm} key"
        )
    return signer


# ---------------------------------------------------------------------------
# Boundary: translate backend failures into SigningError
# ---------------------------------------------------------------------------

def signer_public_key(signer: Signer) -> str:
    try:
        public_key = signer.public_key()
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError(f"Signer could not provide a public key: {exc}") from exc
    if not isinstance(public_key, str) or not public_key:
        raise SigningError("Signer returned an empty public key")
    return public_key


def sign_message(signer: Signer, message: bytes) -> str:
    try:
        signature = signer.sign(message)
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError(f"Signer failed to sign: {exc}") from exc
    if not isinstance(signature, str) or not signature:
        raise SigningError("Signer returned an empty signature")
    return signature
