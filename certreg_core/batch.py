"""
certreg_core/batch.py — Signed batches of transactions.

A batch commits atomically on the ledger: every transaction in it is
applied or none is. Transaction order inside a batch is significant and
is exactly the order the caller supplies. The batch header lists the
transaction ids (header signatures) in that order and is signed by the
batch signer.

A BatchList is the body a client posts to the ledger; submission itself
is not handled here.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .canonical import canonicalize_model
from .crypto import verify_signature
from .errors import InvalidTransactionError
from .signing import Signer, sign_message, signer_public_key
from .transaction import Transaction, verify_transaction


logger = logging.getLogger("certreg_core.batch")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class BatchHeader(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    signer_public_key: str = Field(..., min_length=1)
    transaction_ids: Tuple[str, ...] = Field(..., min_length=1)


class Batch(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    header: bytes
    header_signature: str
    transactions: Tuple[Transaction, ...]

    @property
    def id(self) -> str:
        return self.header_signature

    def decoded_header(self) -> BatchHeader:
        try:
            return BatchHeader.model_validate_json(self.header)
        except ValidationError as exc:
            raise InvalidTransactionError(
                f"Batch header cannot be decoded: {exc.error_count()} error(s)"
            ) from exc


class BatchList(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    batches: Tuple[Batch, ...]

    def to_json(self) -> str:
        """Serialize for submission (bytes fields are base64)."""
        return self.model_dump_json()


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def make_batch(
    transactions: Union[Transaction, Sequence[Transaction]],
    signer: Signer,
) -> Batch:
    """Group transactions, in the given order, into one signed batch.

    Raises:
        InvalidTransactionError: If no transactions are supplied.
        SerializationError, SigningError.
    """
    if isinstance(transactions, Transaction):
        transactions = [transactions]
    transactions = tuple(transactions)
    if not transactions:
        raise InvalidTransactionError("A batch needs at least one transaction")
    for txn in transactions:
        if not isinstance(txn, Transaction):
            raise InvalidTransactionError(
                f"Batches hold transactions, got {type(txn).__name__}"
            )

    header = BatchHeader(
        signer_public_key=signer_public_key(signer),
        transaction_ids=tuple(txn.header_signature for txn in transactions),
    )
    header_bytes = canonicalize_model(header)
    signature = sign_message(signer, header_bytes)

    logger.debug(
        "built batch %s with %d transaction(s)", signature[:16], len(transactions)
    )
    return Batch(
        header=header_bytes,
        header_signature=signature,
        transactions=transactions,
    )


def make_batch_list(
    transactions: Union[Transaction, Sequence[Transaction]],
    signer: Signer,
) -> BatchList:
    """A BatchList holding a single batch of `transactions`."""
    return BatchList(batches=(make_batch(transactions, signer),))


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_batch(batch: Batch) -> dict:
    """Check a batch and every transaction it carries.

    Checks:
    1. Header decodes
    2. header.transaction_ids equals the carried transactions' ids, in order
    3. header_signature verifies against header.signer_public_key
    4. Each transaction passes verify_transaction

    Returns dict with verification results.
    """
    result = {
        "batch_id": batch.header_signature,
        "ids_match": False,
        "signature_valid": False,
        "invalid_transactions": [],
        "errors": [],
    }

    try:
        header = batch.decoded_header()
    except InvalidTransactionError as exc:
        result["errors"].append(str(exc))
        logger.warning("batch %s: %s", batch.header_signature[:16], exc)
        return result

    carried = tuple(txn.header_signature for txn in batch.transactions)
    if carried == header.transaction_ids:
        result["ids_match"] = True
    else:
        result["errors"].append(
            "Transaction ids in header do not match carried transactions"
        )

    if verify_signature(header.signer_public_key, batch.header, batch.header_signature):
        result["signature_valid"] = True
    else:
        result["errors"].append("Batch signature verification failed")

    for txn in batch.transactions:
        v = verify_transaction(txn)
        if v["errors"]:
            result["invalid_transactions"].append({
                "transaction_id": txn.header_signature,
                "errors": v["errors"],
            })
    if result["invalid_transactions"]:
        result["errors"].append(
            f"{len(result['invalid_transactions'])} invalid transaction(s)"
        )

    if result["errors"]:
        logger.warning(
            "batch %s failed verification: %s",
            batch.header_signature[:16], "; ".join(result["errors"]),
        )
    return result
