"""
test/test_footprint.py — Tests for certreg_core.footprint (read/write sets)

Every action's declared inputs/outputs are checked against the addresses
the validator touches when applying it.

Run:  python test/test_footprint.py
"""

import sys
import os

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from certreg_core import actions
from certreg_core.addressing import (
    EntityType,
    classify,
    entity_space_prefix,
    make_agent_address,
    make_assertion_address,
    make_certificate_address,
    make_organization_address,
    make_request_address,
    make_standard_address,
)
from certreg_core.errors import InvalidInputError, InvalidTransactionError
from certreg_core.footprint import inputs, inputs_with_org, outputs, outputs_with_org
from certreg_core.payload import (
    AuthorizationRole,
    OrganizationType,
    RequestStatus,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SIGNER = "02b018d38f052973b21235893c2d08b705269255d9bfb326ee63eb6c5841075882"
TARGET = "03" + "11" * 32
ORG_ID = "signer-org"

_agent = make_agent_address(SIGNER)
_signer_org = make_organization_address(ORG_ID)

_PASS = 0
_FAIL = 0


def _ok(name: str) -> None:
    global _PASS
    _PASS += 1
    print(f"  PASS: {name}")


def _fail(name: str, err: Exception) -> None:
    global _FAIL
    _FAIL += 1
    print(f"  FAIL: {name} — {err}")


def _factory(org_id: str = "factory-1"):
    return actions.create_organization(
        org_id, "Factory", OrganizationType.FACTORY, "Ada", "555", "en",
        street="1 Main St", city="Springfield", country="US",
    )


def _all_actions():
    std = actions.create_standard("Std", "1", "desc", "link", 1)
    cert = actions.issue_certificate("cert-1", "factory-1", None, "std-1", [], 1, 2)
    return [
        actions.create_agent("agent", 1),
        _factory(),
        actions.update_organization("org-1", name="New"),
        actions.authorize_agent(TARGET, AuthorizationRole.ADMIN),
        cert,
        actions.update_certificate("cert-1", [], 1, 2),
        std,
        actions.update_standard("Std", "2", "desc", "link", 2),
        actions.create_accreditation("std-1", "cb-1", 1, 2),
        actions.open_request("req-1", "std-1", 1),
        actions.create_pre_certified_request("req-2", "std-1", 1),
        actions.change_request_status("req-1", RequestStatus.CLOSED),
        actions.create_factory_assertion("as-1", _factory("factory-2")),
        actions.create_certificate_assertion("as-2", cert),
        actions.create_standard_assertion("as-3", std),
        actions.transfer_assertion("as-1", TARGET),
    ]


# ---------------------------------------------------------------------------
# Uniform rules
# ---------------------------------------------------------------------------

def test_agent_address_always_first_input():
    for action in _all_actions():
        ins = inputs(action, SIGNER)
        assert ins[0] == _agent, type(action).__name__
        assert ins.count(_agent) == 1, type(action).__name__
    _ok("test_agent_address_always_first_input")


def test_no_duplicate_addresses():
    for action in _all_actions():
        for addresses in (
            inputs(action, SIGNER),
            outputs(action, SIGNER),
            inputs_with_org(action, SIGNER, ORG_ID),
            outputs_with_org(action, SIGNER, ORG_ID),
        ):
            assert len(addresses) == len(set(addresses)), type(action).__name__
    _ok("test_no_duplicate_addresses")


def test_org_aware_inputs_add_signer_org():
    for action in _all_actions():
        base = inputs(action, SIGNER)
        with_org = inputs_with_org(action, SIGNER, ORG_ID)
        assert with_org[:len(base)] == base
        assert _signer_org in with_org
    _ok("test_org_aware_inputs_add_signer_org")


def test_org_aware_outputs_only_extend_authorize_agent():
    for action in _all_actions():
        base = outputs(action, SIGNER)
        with_org = outputs_with_org(action, SIGNER, ORG_ID)
        if action.action == "authorize_agent":
            assert with_org == base + [_signer_org]
        else:
            assert with_org == base, type(action).__name__
    _ok("test_org_aware_outputs_only_extend_authorize_agent")


def test_unknown_action_rejected():
    try:
        inputs(object(), SIGNER)
        raise AssertionError("unknown action should be rejected")
    except InvalidTransactionError:
        pass
    _ok("test_unknown_action_rejected")


# ---------------------------------------------------------------------------
# Per-action tables
# ---------------------------------------------------------------------------

def test_create_agent():
    a = actions.create_agent("agent", 1)
    assert inputs(a, SIGNER) == [_agent]
    assert outputs(a, SIGNER) == [_agent]
    _ok("test_create_agent")


def test_create_organization_org_42():
    org = actions.create_organization(
        "org-42", "Org", OrganizationType.STANDARDS_BODY, "Bo", "555", "en",
    )
    org_address = make_organization_address("org-42")
    assert inputs(org, SIGNER) == [_agent, org_address]
    assert outputs(org, SIGNER) == [_agent, org_address]
    assert set(inputs(org, SIGNER)) == set(outputs(org, SIGNER))
    _ok("test_create_organization_org_42")


def test_update_organization():
    upd = actions.update_organization("org-42", name="Renamed")
    assert inputs(upd, SIGNER) == [_agent, make_organization_address("org-42")]
    assert outputs(upd, SIGNER) == [_agent, make_organization_address("org-42")]
    _ok("test_update_organization")


def test_authorize_agent():
    auth = actions.authorize_agent(TARGET, AuthorizationRole.TRANSACTOR)
    target = make_agent_address(TARGET)
    assert inputs(auth, SIGNER) == [_agent, target]
    assert outputs(auth, SIGNER) == [target]
    assert inputs_with_org(auth, SIGNER, ORG_ID) == [_agent, target, _signer_org]
    assert outputs_with_org(auth, SIGNER, ORG_ID) == [target, _signer_org]
    _ok("test_authorize_agent")


def test_issue_certificate_independent():
    cert = actions.issue_certificate("cert-1", "factory-1", None, "std-1", [], 1, 2)
    assert inputs(cert, SIGNER) == [
        _agent,
        make_certificate_address("cert-1"),
        make_organization_address("factory-1"),
    ]
    assert outputs(cert, SIGNER) == [make_certificate_address("cert-1")]
    _ok("test_issue_certificate_independent")


def test_issue_certificate_from_request():
    cert = actions.issue_certificate("cert-1", "factory-1", "req-1", None, [], 1, 2)
    assert inputs(cert, SIGNER) == [
        _agent,
        make_certificate_address("cert-1"),
        make_organization_address("factory-1"),
        make_request_address("req-1"),
    ]
    assert [classify(a) for a in inputs(cert, SIGNER)] == [
        EntityType.AGENT,
        EntityType.CERTIFICATE,
        EntityType.ORGANIZATION,
        EntityType.REQUEST,
    ]
    assert outputs(cert, SIGNER) == [make_certificate_address("cert-1")]

    # without the factory the organization read could not be declared
    try:
        actions.issue_certificate("cert-1", None, "req-1", None, [], 1, 2)
        raise AssertionError("request-sourced certificate needs its factory")
    except InvalidInputError:
        pass
    _ok("test_issue_certificate_from_request")


def test_update_certificate():
    upd = actions.update_certificate("cert-1", [], 1, 2)
    assert inputs(upd, SIGNER) == [_agent, make_certificate_address("cert-1")]
    assert outputs(upd, SIGNER) == [make_certificate_address("cert-1")]
    _ok("test_update_certificate")


def test_standards():
    std = actions.create_standard("Std", "1", "desc", "link", 1)
    upd = actions.update_standard("Std", "2", "desc", "link", 2)
    address = make_standard_address(std.standard_id)
    for action in (std, upd):
        assert inputs(action, SIGNER) == [_agent, address]
        assert outputs(action, SIGNER) == [address]
    _ok("test_standards")


def test_accreditation():
    acc = actions.create_accreditation("std-1", "cb-1", 1, 2)
    assert inputs(acc, SIGNER) == [
        _agent, make_standard_address("std-1"), make_organization_address("cb-1"),
    ]
    assert outputs(acc, SIGNER) == [make_organization_address("cb-1")]
    _ok("test_accreditation")


def test_requests():
    for action in (
        actions.open_request("req-1", "std-1", 1),
        actions.create_pre_certified_request("req-1", "std-1", 1),
    ):
        assert inputs(action, SIGNER) == [
            _agent, make_request_address("req-1"), make_standard_address("std-1"),
        ]
        assert outputs(action, SIGNER) == [make_request_address("req-1")]

    status = actions.change_request_status("req-1", RequestStatus.CERTIFIED)
    assert inputs(status, SIGNER) == [_agent, make_request_address("req-1")]
    assert outputs(status, SIGNER) == [make_request_address("req-1")]
    _ok("test_requests")


def test_factory_assertion():
    a = actions.create_factory_assertion("as-1", _factory("factory-9"))
    expected = [make_assertion_address("as-1"), make_organization_address("factory-9")]
    assert inputs(a, SIGNER) == [_agent] + expected
    assert outputs(a, SIGNER) == expected
    _ok("test_factory_assertion")


def test_certificate_assertion():
    cert = actions.issue_certificate("cert-7", "factory-1", None, "std-1", [], 1, 2)
    a = actions.create_certificate_assertion("as-2", cert)
    assert inputs(a, SIGNER) == [
        _agent,
        make_assertion_address("as-2"),
        make_organization_address("factory-1"),
        make_standard_address("std-1"),
    ]
    assert outputs(a, SIGNER) == [
        make_assertion_address("as-2"), make_certificate_address("cert-7"),
    ]
    _ok("test_certificate_assertion")


def test_standard_assertion():
    std = actions.create_standard("Std", "1", "desc", "link", 1)
    a = actions.create_standard_assertion("as-3", std)
    assert inputs(a, SIGNER) == [_agent, make_assertion_address("as-3")]
    assert outputs(a, SIGNER) == [
        make_assertion_address("as-3"), make_standard_address(std.standard_id),
    ]
    _ok("test_standard_assertion")


def test_transfer_assertion_declares_whole_spaces():
    spaces = [
        entity_space_prefix(EntityType.ORGANIZATION),
        entity_space_prefix(EntityType.CERTIFICATE),
        entity_space_prefix(EntityType.STANDARD),
    ]
    for assertion_id in ("as-1", "as-2", "something-else"):
        t = actions.transfer_assertion(assertion_id, TARGET)
        expected = [_agent] + spaces + [make_assertion_address(assertion_id)]
        assert inputs(t, SIGNER) == expected
        assert outputs(t, SIGNER) == expected
        for prefix in spaces:
            assert len(prefix) == 10
            assert prefix in inputs_with_org(t, SIGNER, ORG_ID)
            assert prefix in outputs_with_org(t, SIGNER, ORG_ID)
    _ok("test_transfer_assertion_declares_whole_spaces")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    print("=" * 60)
    print("Footprint Tests")
    print("=" * 60)

    tests = [
        test_agent_address_always_first_input,
        test_no_duplicate_addresses,
        test_org_aware_inputs_add_signer_org,
        test_org_aware_outputs_only_extend_authorize_agent,
        test_unknown_action_rejected,
        test_create_agent,
        test_create_organization_org_42,
        test_update_organization,
        test_authorize_agent,
        test_issue_certificate_independent,
        test_issue_certificate_from_request,
        test_update_certificate,
        test_standards,
        test_accreditation,
        test_requests,
        test_factory_assertion,
        test_certificate_assertion,
        test_standard_assertion,
        test_transfer_assertion_declares_whole_spaces,
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
