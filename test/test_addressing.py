"""
test/test_addressing.py — Tests for certreg_core.addressing and the namespace hasher

Run:  python test/test_addressing.py
  or: pytest test/test_addressing.py -v
"""

import hashlib
import re
import sys
import os

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from certreg_core.addressing import (
    EntityType,
    address_for,
    classify,
    entity_space_prefix,
    is_family_address,
    make_agent_address,
    make_assertion_address,
    make_certificate_address,
    make_organization_address,
    make_request_address,
    make_standard_address,
    namespace_prefix,
)
from certreg_core.config import FAMILY_NAME
from certreg_core.crypto import hash_hex
from certreg_core.errors import CertRegError, InvalidInputError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_HEX70 = re.compile(r"^[0-9a-f]{70}$")

_PASS = 0
_FAIL = 0

_MAKERS = {
    EntityType.AGENT: make_agent_address,
    EntityType.CERTIFICATE: make_certificate_address,
    EntityType.ORGANIZATION: make_organization_address,
    EntityType.STANDARD: make_standard_address,
    EntityType.REQUEST: make_request_address,
    EntityType.ASSERTION: make_assertion_address,
}


def _ok(name: str) -> None:
    global _PASS
    _PASS += 1
    print(f"  PASS: {name}")


def _fail(name: str, err: Exception) -> None:
    global _FAIL
    _FAIL += 1
    print(f"  FAIL: {name} — {err}")


# ---------------------------------------------------------------------------
# Namespace hasher
# ---------------------------------------------------------------------------

def test_hash_hex_truncates_sha256():
    full = hashlib.sha256("test_key".encode("utf-8")).hexdigest()
    assert hash_hex("test_key", 60) == full[:60]
    assert hash_hex("test_key", 6) == full[:6]
    assert hash_hex("test_key", 64) == full
    _ok("test_hash_hex_truncates_sha256")


def test_hash_hex_rejects_bad_length():
    for bad in (0, -1, 65):
        try:
            hash_hex("x", bad)
            raise AssertionError(f"length {bad} should be rejected")
        except InvalidInputError:
            pass
    _ok("test_hash_hex_rejects_bad_length")


def test_hash_hex_utf8():
    expected = hashlib.sha256("fábrica-東京".encode("utf-8")).hexdigest()[:60]
    assert hash_hex("fábrica-東京", 60) == expected
    _ok("test_hash_hex_utf8")


def test_unencodable_key_rejected():
    """Lone surrogates have no UTF-8 form; they are an input error."""
    for key in ("\ud800", "org-\udfff"):
        try:
            hash_hex(key, 60)
            raise AssertionError(f"{key!r} should be rejected")
        except InvalidInputError as e:
            assert isinstance(e.__cause__, UnicodeEncodeError)
        for make in (make_organization_address, make_agent_address):
            try:
                make(key)
                raise AssertionError(f"{key!r} should be rejected")
            except InvalidInputError:
                pass
        try:
            address_for(EntityType.AGENT, key)
            raise AssertionError(f"{key!r} should be rejected")
        except InvalidInputError:
            pass
    _ok("test_unencodable_key_rejected")


# ---------------------------------------------------------------------------
# Address construction
# ---------------------------------------------------------------------------

def test_namespace_prefix():
    prefix = namespace_prefix()
    assert len(prefix) == 6
    assert prefix == hashlib.sha256(FAMILY_NAME.encode()).hexdigest()[:6]
    _ok("test_namespace_prefix")


def test_entity_tags_are_fixed():
    """Tags are wire protocol; they must never move."""
    assert EntityType.AGENT.value == "00"
    assert EntityType.CERTIFICATE.value == "01"
    assert EntityType.ORGANIZATION.value == "02"
    assert EntityType.STANDARD.value == "03"
    assert EntityType.REQUEST.value == "04"
    assert EntityType.ASSERTION.value == "05"
    tags = [t.value for t in EntityType.tagged()]
    assert len(tags) == len(set(tags)) == 6
    _ok("test_entity_tags_are_fixed")


def test_address_structure():
    for entity_type, make in _MAKERS.items():
        address = make("test_key")
        assert _HEX70.match(address), address
        assert address[:6] == namespace_prefix()
        assert address[6:8] == "00"
        assert address[8:10] == entity_type.value
        assert address[10:] == hash_hex("test_key", 60)
        assert address == address_for(entity_type, "test_key")
    _ok("test_address_structure")


def test_address_determinism():
    for entity_type in EntityType.tagged():
        for key in ("a", "org-42", "x" * 300, ""):
            assert address_for(entity_type, key) == address_for(entity_type, key)
    _ok("test_address_determinism")


def test_same_key_differs_across_kinds():
    addresses = {address_for(t, "shared-id") for t in EntityType.tagged()}
    assert len(addresses) == 6
    _ok("test_same_key_differs_across_kinds")


def test_disjointness_large_sample():
    keys = [f"cert-{i}" for i in range(5000)]
    addresses = {make_certificate_address(k) for k in keys}
    assert len(addresses) == len(keys)
    _ok("test_disjointness_large_sample")


def test_entity_space_prefix():
    prefix = entity_space_prefix(EntityType.ORGANIZATION)
    assert prefix == namespace_prefix() + "00" + "02"
    assert make_organization_address("org-1").startswith(prefix)
    try:
        entity_space_prefix(EntityType.UNRECOGNIZED)
        raise AssertionError("UNRECOGNIZED has no space")
    except InvalidInputError:
        pass
    _ok("test_entity_space_prefix")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def test_classify_round_trip():
    for entity_type, make in _MAKERS.items():
        for key in ("k1", "k2", "another key"):
            assert classify(make(key)) is entity_type
    _ok("test_classify_round_trip")


def test_classify_unknown_tag():
    base = make_agent_address("k")
    for tag in ("06", "99", "ff", "zz"):
        assert classify(base[:8] + tag + base[10:]) is EntityType.UNRECOGNIZED
    # exactly 10 characters is enough
    assert classify(namespace_prefix() + "0099") is EntityType.UNRECOGNIZED
    _ok("test_classify_unknown_tag")


def test_classify_foreign_namespace():
    foreign = "99999999999"
    assert classify(foreign) is EntityType.UNRECOGNIZED
    other_family = hashlib.sha256(b"other_family").hexdigest()[:6] + "00" + "02" + "a" * 60
    assert classify(other_family) is EntityType.UNRECOGNIZED
    _ok("test_classify_foreign_namespace")


def test_classify_short_address_fails_loudly():
    for short in ("", "abc", namespace_prefix() + "000"):
        try:
            classify(short)
            raise AssertionError(f"{short!r} should be rejected")
        except InvalidInputError as e:
            assert isinstance(e, CertRegError)
            assert e.code == "CERTREG_E_INVALID_INPUT"
    _ok("test_classify_short_address_fails_loudly")


def test_is_family_address():
    assert is_family_address(make_request_address("r-1"))
    assert not is_family_address(make_request_address("r-1")[:-1])
    assert not is_family_address(make_request_address("r-1").upper())
    assert not is_family_address("0" * 70)
    assert not is_family_address(entity_space_prefix(EntityType.STANDARD))
    _ok("test_is_family_address")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    print("=" * 60)
    print("Addressing Tests")
    print("=" * 60)

    tests = [
        test_hash_hex_truncates_sha256,
        test_hash_hex_rejects_bad_length,
        test_hash_hex_utf8,
        test_unencodable_key_rejected,
        test_namespace_prefix,
        test_entity_tags_are_fixed,
        test_address_structure,
        test_address_determinism,
        test_same_key_differs_across_kinds,
        test_disjointness_large_sample,
        test_entity_space_prefix,
        test_classify_round_trip,
        test_classify_unknown_tag,
        test_classify_foreign_namespace,
        test_classify_short_address_fails_loudly,
        test_is_family_address,
    ]

    for t in tests:
        try:
            t()
        except Exception as e:
            _fail(t.__name__, e)

    print("=" * 60)
    if _FAIL == 0:
        print(f"ALL {_PASS} TESTS PASSED")
    else:
        print(f"{_PASS} passed, {_FAIL} FAILED")
        sys.exit(1)
    print("=" * 60)
