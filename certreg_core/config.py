"""
certreg_core/config.py — Protocol constants and client settings.

The protocol constants below define the address space and are shared by
every client and the validator. They are never mutated at runtime.
Changing FAMILY_NAME or any entity tag makes existing addresses
unreachable: addresses are not comparable across namespace literals.

ClientSettings holds the per-deployment knobs (which signing scheme,
where the key lives) and is read from CERTREG_* environment variables.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Protocol constants
# ---------------------------------------------------------------------------

FAMILY_NAME = "certificate_registry"
FAMILY_VERSION = "0.1"

PREFIX_SIZE = 6
RESERVED_SPACE = "00"
TAG_SIZE = 2
ENTITY_HASH_SIZE = 60
ADDRESS_LENGTH = PREFIX_SIZE + len(RESERVED_SPACE) + TAG_SIZE + ENTITY_HASH_SIZE

# sha512 hex digest of the payload carried in every transaction header
PAYLOAD_DIGEST_LENGTH = 128

# Largest integer every canonical JSON encoder reproduces exactly (IEEE 754
# doubles). Integer fields are capped here rather than at uint64.
MAX_SAFE_INTEGER = 2**53


# ---------------------------------------------------------------------------
# Client settings
# ---------------------------------------------------------------------------

SignerAlgorithm = Literal["secp256k1", "ed25519"]


class ClientSettings(BaseSettings):
    """Client settings parsed from the environment."""

    signer_algorithm: Annotated[
        SignerAlgorithm,
        Field(
            default="secp256k1",
            description="Signature scheme used for transactions and batches.",
        ),
    ]
    private_key_path: Annotated[
        Optional[str],
        Field(
            default=None,
            description="PEM-encoded private key. A fresh key is generated "
                        "when unset.",
        ),
    ]
    log_level: Annotated[
        str,
        Field(default="WARNING", description="Level for configure_logging()."),
    ]

    model_config = SettingsConfigDict(
        env_prefix="CERTREG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


@lru_cache
def get_settings() -> ClientSettings:
    return ClientSettings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler for applications embedding the client.

    The library itself never installs handlers.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
