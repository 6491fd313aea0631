"""
certreg_core/crypto.py — Cryptographic primitives for the registry client.

Uses Python `cryptography` library exclusively. No custom crypto.
- SHA-256 for namespace and entity hashing (addresses)
- SHA-512 for payload digests in transaction headers
- secp256k1 ECDSA (the ledger's native scheme) and Ed25519 for signing

All functions are deterministic (apart from key generation) and have no
side effects.
"""

from __future__ import annotations

import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .errors import InvalidInputError


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hash and return as lowercase hex string."""
    return hashlib.sha256(data).hexdigest()


def sha512_hex(data: bytes) -> str:
    """Compute SHA-512 hash and return as lowercase hex string (128 chars)."""
    return hashlib.sha512(data).hexdigest()


def hash_hex(value: str, length: int) -> str:
    """SHA-256 of the UTF-8 bytes of `value`, hex, truncated to `length`.

    This is the namespace hasher every address is built from.
    """
    if not 0 < length <= 64:
        raise InvalidInputError(
            f"hash length must be between 1 and 64, got {length}"
        )
    try:
        encoded = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError(
            f"key is not encodable as UTF-8: {exc.reason}",
            details={"position": exc.start},
        ) from exc
    return sha256_hex(encoded)[:length]


# ---------------------------------------------------------------------------
# secp256k1
# ---------------------------------------------------------------------------

# Order of the secp256k1 group; signatures are normalised to low-S.
_SECP256K1_N = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)


def generate_secp256k1_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256K1())


def secp256k1_public_key_hex(key: ec.EllipticCurvePublicKey) -> str:
    """Compressed SEC1 point (33 bytes) as hex."""
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    ).hex()


def secp256k1_sign(private_key: ec.EllipticCurvePrivateKey, data: bytes) -> str:
    """ECDSA/SHA-256 signature in compact 64-byte r||s form, hex-encoded."""
    der = private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    if s > _SECP256K1_N // 2:
        s = _SECP256K1_N - s
    return (r.to_bytes(32, "big") + s.to_bytes(32, "big")).hex()


def _secp256k1_verify(public_key_bytes: bytes, data: bytes, signature: bytes) -> bool:
    if len(signature) != 64:
        return False
    public_key = ec.EllipticCurvePublicKey.from_encoded_point(
        ec.SECP256K1(), public_key_bytes
    )
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    try:
        public_key.verify(
            encode_dss_signature(r, s), data, ec.ECDSA(hashes.SHA256())
        )
        return True
    except InvalidSignature:
        return False


# ---------------------------------------------------------------------------
# Ed25519
# ---------------------------------------------------------------------------

def generate_ed25519_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


def ed25519_public_key_hex(key: Ed25519PublicKey) -> str:
    """Raw 32-byte public key as hex."""
    return key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    ).hex()


def ed25519_sign(private_key: Ed25519PrivateKey, data: bytes) -> str:
    """Sign data with Ed25519 private key. Returns hex-encoded signature."""
    return private_key.sign(data).hex()


def _ed25519_verify(public_key_bytes: bytes, data: bytes, signature: bytes) -> bool:
    public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
    try:
        public_key.verify(signature, data)
        return True
    except InvalidSignature:
        return False


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_signature(public_key_hex: str, data: bytes, signature_hex: str) -> bool:
    """Verify a hex signature against a hex public key.

    The scheme follows from the key encoding: 33 bytes is a compressed
    secp256k1 point, 32 bytes is an Ed25519 key. Returns False for
    malformed keys or signatures rather than raising.
    """
    try:
        key_bytes = bytes.fromhex(public_key_hex)
        signature = bytes.fromhex(signature_hex)
    except ValueError:
        return False

    try:
        if len(key_bytes) == 33:
            return _secp256k1_verify(key_bytes, data, signature)
        if len(key_bytes) == 32:
            return _ed25519_verify(key_bytes, data, signature)
    except ValueError:
        # not a point on the curve / malformed key
        return False
    return False


# ---------------------------------------------------------------------------
# PEM
# ---------------------------------------------------------------------------

def private_key_to_pem(key) -> bytes:
    """Serialize a private key (either scheme) to unencrypted PKCS8 PEM."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def private_key_from_pem(pem_data: bytes):
    """Deserialize a secp256k1 or Ed25519 private key from PEM bytes."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if isinstance(key, Ed25519PrivateKey):
        return key
    if isinstance(key, ec.EllipticCurvePrivateKey) and isinstance(
        key.curve, ec.SECP256K1
    ):
        return key
    raise TypeError("Not a secp256k1 or Ed25519 private key")
