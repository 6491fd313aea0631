"""
certreg_core/transaction.py — Signed transaction construction and verification.

Build:  action → payload bytes → SHA-512 → header → header bytes → sign
Verify: recompute payload digest, decode header, check header signature

The transaction id is its header signature; batches refer to
transactions by that id.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .canonical import canonicalize_model
from .config import FAMILY_NAME, FAMILY_VERSION
from .crypto import sha512_hex, verify_signature
from .errors import InvalidTransactionError
from .footprint import inputs, inputs_with_org, outputs, outputs_with_org
from .nonce import create_nonce
from .payload import ACTION_MODELS, CertificateRegistryPayload
from .signing import Signer, sign_message, signer_public_key


logger = logging.getLogger("certreg_core.transaction")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TransactionHeader(BaseModel):
    """Signed metadata of a transaction.

    inputs/outputs are the declared read/write address sets the
    validator schedules on.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    family_name: str
    family_version: str
    nonce: str = Field(..., min_length=1)
    signer_public_key: str = Field(..., min_length=1)
    batcher_public_key: str = Field(..., min_length=1)
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    dependencies: Tuple[str, ...] = ()
    payload_sha512: str = Field(..., pattern=r"^[0-9a-f]{128}$")


class Transaction(BaseModel):
    """Header bytes, payload bytes and the signature over the header bytes."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    header: bytes
    header_signature: str
    payload: bytes

    @property
    def id(self) -> str:
        return self.header_signature

    def decoded_header(self) -> TransactionHeader:
        try:
            return TransactionHeader.model_validate_json(self.header)
        except ValidationError as exc:
            raise InvalidTransactionError(
                f"Transaction header cannot be decoded: {exc.error_count()} error(s)"
            ) from exc

    def decoded_payload(self) -> CertificateRegistryPayload:
        try:
            return CertificateRegistryPayload.model_validate_json(self.payload)
        except ValidationError as exc:
            raise InvalidTransactionError(
                f"Transaction payload cannot be decoded: {exc.error_count()} error(s)"
            ) from exc


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def encode_payload(action) -> bytes:
    """Wrap an action in the payload envelope and encode it.

    Raises:
        InvalidTransactionError: If `action` is not a registry action.
        SerializationError: If the payload cannot be encoded.
    """
    if not isinstance(action, ACTION_MODELS):
        raise InvalidTransactionError(
            f"Not a registry action: {type(action).__name__}"
        )
    return canonicalize_model(CertificateRegistryPayload.wrap(action))


def make_transaction(
    action,
    signer: Signer,
    org_id: Optional[str] = None,
) -> Transaction:
    """Build and sign a transaction carrying `action`.

    Args:
        action: Any registry action model (see payload.Action).
        signer: Signs the header; its key is both signer and batcher.
        org_id: The signer's organization. When given, the organization
                address joins the declared footprint (required for every
                org-scoped action).

    Raises:
        InvalidTransactionError, SerializationError, SigningError.
        Nothing partial is returned on failure.
    """
    payload_bytes = encode_payload(action)
    public_key = signer_public_key(signer)

    if org_id is None:
        read_set = inputs(action, public_key)
        write_set = outputs(action, public_key)
    else:
        read_set = inputs_with_org(action, public_key, org_id)
        write_set = outputs_with_org(action, public_key, org_id)

    header = TransactionHeader(
        family_name=FAMILY_NAME,
        family_version=FAMILY_VERSION,
        nonce=create_nonce(),
        signer_public_key=public_key,
        batcher_public_key=public_key,
        inputs=read_set,
        outputs=write_set,
        payload_sha512=sha512_hex(payload_bytes),
    )
    header_bytes = canonicalize_model(header)
    signature = sign_message(signer, header_bytes)

    logger.debug(
        "built %s transaction %s (%d inputs, %d outputs)",
        action.action, signature[:16], len(read_set), len(write_set),
    )
    return Transaction(
        header=header_bytes,
        header_signature=signature,
        payload=payload_bytes,
    )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_transaction(txn: Transaction) -> dict:
    """Check a transaction's internal integrity.

    Checks:
    1. Header decodes and names this family/version
    2. payload_sha512 matches the carried payload bytes
    3. header_signature verifies against header.signer_public_key

    Returns dict with verification results.
    """
    result = {
        "transaction_id": txn.header_signature,
        "header_valid": False,
        "payload_digest_valid": False,
        "signature_valid": False,
        "errors": [],
    }

    try:
        header = txn.decoded_header()
    except InvalidTransactionError as exc:
        result["errors"].append(str(exc))
        logger.warning("transaction %s: %s", txn.header_signature[:16], exc)
        return result

    if header.family_name == FAMILY_NAME and header.family_version == FAMILY_VERSION:
        result["header_valid"] = True
    else:
        result["errors"].append(
            f"Family mismatch: {header.family_name} {header.family_version}"
        )

    actual_digest = sha512_hex(txn.payload)
    if actual_digest == header.payload_sha512:
        result["payload_digest_valid"] = True
    else:
        result["errors"].append(
            f"Payload digest mismatch: computed {actual_digest}, "
            f"header says {header.payload_sha512}"
        )

    if verify_signature(header.signer_public_key, txn.header, txn.header_signature):
        result["signature_valid"] = True
    else:
        result["errors"].append("Header signature verification failed")

    if result["errors"]:
        logger.warning(
            "transaction %s failed verification: %s",
            txn.header_signature[:16], "; ".join(result["errors"]),
        )
    return result
