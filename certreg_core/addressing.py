"""
certreg_core/addressing.py — State address derivation for the registry family.

Address layout (70 lowercase hex characters):

    [namespace prefix:6][reserved "00":2][entity tag:2][entity hash:60]

The namespace prefix is the first 6 hex chars of SHA-256(FAMILY_NAME).
The entity hash is the first 60 hex chars of SHA-256(natural key).
Addresses are derived on demand and never stored by this layer.

Entity tags are part of the wire protocol: a tag, once deployed, is never
reassigned to another entity kind.
"""

from __future__ import annotations

import re
from enum import Enum

from .config import (
    ADDRESS_LENGTH,
    ENTITY_HASH_SIZE,
    FAMILY_NAME,
    PREFIX_SIZE,
    RESERVED_SPACE,
    TAG_SIZE,
)
from .crypto import hash_hex
from .errors import InvalidInputError


_TAG_START = PREFIX_SIZE + len(RESERVED_SPACE)
_TAG_END = _TAG_START + TAG_SIZE

_HEX_ADDRESS = re.compile(rf"^[0-9a-f]{{{ADDRESS_LENGTH}}}$")


class EntityType(str, Enum):
    """Entity kinds stored under the family namespace, valued by tag."""
    AGENT = "00"
    CERTIFICATE = "01"
    ORGANIZATION = "02"
    STANDARD = "03"
    REQUEST = "04"
    ASSERTION = "05"

    # Not a tag: the result of classifying an address outside the table.
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def tagged(cls) -> list["EntityType"]:
        """All members that own a tag in the address space."""
        return [member for member in cls if member is not cls.UNRECOGNIZED]


_TAG_TABLE = {member.value: member for member in EntityType.tagged()}


# ---------------------------------------------------------------------------
# Prefixes
# ---------------------------------------------------------------------------

def namespace_prefix() -> str:
    """First 6 hex chars of the family namespace SHA-256."""
    return hash_hex(FAMILY_NAME, PREFIX_SIZE)


def entity_space_prefix(entity_type: EntityType) -> str:
    """The 10-char prefix shared by every address of one entity kind."""
    return namespace_prefix() + RESERVED_SPACE + _tag_of(entity_type)


def _tag_of(entity_type: EntityType) -> str:
    if entity_type is EntityType.UNRECOGNIZED:
        raise InvalidInputError("UNRECOGNIZED has no address space")
    return EntityType(entity_type).value


# ---------------------------------------------------------------------------
# Address construction
# ---------------------------------------------------------------------------

def address_for(entity_type: EntityType, natural_key: str) -> str:
    """Return the state address of `natural_key` within one entity kind."""
    return entity_space_prefix(entity_type) + hash_hex(natural_key, ENTITY_HASH_SIZE)


def make_agent_address(agent_public_key: str) -> str:
    """Agents are keyed by their signing public key."""
    return address_for(EntityType.AGENT, agent_public_key)


def make_organization_address(organization_id: str) -> str:
    return address_for(EntityType.ORGANIZATION, organization_id)


def make_certificate_address(certificate_id: str) -> str:
    return address_for(EntityType.CERTIFICATE, certificate_id)


def make_standard_address(standard_id: str) -> str:
    return address_for(EntityType.STANDARD, standard_id)


def make_request_address(request_id: str) -> str:
    return address_for(EntityType.REQUEST, request_id)


def make_assertion_address(assertion_id: str) -> str:
    return address_for(EntityType.ASSERTION, assertion_id)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify(address: str) -> EntityType:
    """Map a state address to the kind of entity it stores.

    Never fails for strings of at least 10 characters: addresses under a
    different namespace, and tags outside the table, classify as
    EntityType.UNRECOGNIZED so callers can filter a mixed address space.

    Raises:
        InvalidInputError: If the address is too short to carry a tag.
    """
    if len(address) < _TAG_END:
        raise InvalidInputError(
            f"address must be at least {_TAG_END} characters to classify, "
            f"got {len(address)}",
            details={"address": address},
        )
    if address[:PREFIX_SIZE] != namespace_prefix():
        return EntityType.UNRECOGNIZED
    return _TAG_TABLE.get(address[_TAG_START:_TAG_END], EntityType.UNRECOGNIZED)


def is_family_address(address: str) -> bool:
    """True for a well-formed 70-hex address under this family's namespace."""
    return (
        bool(_HEX_ADDRESS.match(address))
        and address.startswith(namespace_prefix() + RESERVED_SPACE)
    )
