"""
certreg_core/footprint.py — Read/write address sets for every registry action.

The validator's scheduler runs transactions in parallel when their
declared address sets do not overlap, and the validator rejects any
transaction that touches an address it did not declare. Each function
here must therefore list EVERY address the state transition for an
action reads or writes. Over-declaring only costs parallelism.

Layering:
    _action_inputs / _action_outputs  per-action addresses (one dispatch)
    inputs / outputs                  + the signer's agent address (inputs)
    inputs_with_org / outputs_with_org + the signer's organization address

The signer's agent record is read by every action (the validator checks
the signer is a known agent), so it is added once in inputs() and never
repeated per action.
"""

from __future__ import annotations

from typing import Iterable, List

from .addressing import (
    EntityType,
    entity_space_prefix,
    make_agent_address,
    make_assertion_address,
    make_certificate_address,
    make_organization_address,
    make_request_address,
    make_standard_address,
)
from .errors import InvalidTransactionError
from .payload import (
    AccreditCertifyingBodyAction,
    AssertAction,
    AuthorizeAgentAction,
    ChangeRequestStatusAction,
    CertificateSource,
    CreateAgentAction,
    CreateOrganizationAction,
    CreatePreCertifiedRequestAction,
    CreateStandardAction,
    IssueCertificateAction,
    OpenRequestAction,
    TransferAssertionAction,
    UpdateCertificateAction,
    UpdateOrganizationAction,
    UpdateStandardAction,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def inputs(action, signer_public_key: str) -> List[str]:
    """Addresses read when applying `action`, signer's agent first."""
    return _ordered_unique(
        [make_agent_address(signer_public_key)]
        + _action_inputs(action, signer_public_key)
    )


def outputs(action, signer_public_key: str) -> List[str]:
    """Addresses written when applying `action`."""
    return _ordered_unique(_action_outputs(action, signer_public_key))


def inputs_with_org(action, signer_public_key: str, org_id: str) -> List[str]:
    """inputs() plus the signer's organization, which the validator reads
    to check the signer's role for every org-scoped action."""
    return _ordered_unique(
        inputs(action, signer_public_key) + [make_organization_address(org_id)]
    )


def outputs_with_org(action, signer_public_key: str, org_id: str) -> List[str]:
    """outputs() plus the signer's organization where the action writes it.

    Only AuthorizeAgentAction writes the signer's organization (it adds
    the target agent to the organization's authorization list).
    """
    result = outputs(action, signer_public_key)
    if isinstance(action, AuthorizeAgentAction):
        result = _ordered_unique(result + [make_organization_address(org_id)])
    return result


# ---------------------------------------------------------------------------
# Per-action footprints
# ---------------------------------------------------------------------------

def _action_inputs(action, signer_public_key: str) -> List[str]:
    if isinstance(action, CreateAgentAction):
        return []
    if isinstance(action, (CreateOrganizationAction, UpdateOrganizationAction)):
        return [make_organization_address(action.id)]
    if isinstance(action, AuthorizeAgentAction):
        return [make_agent_address(action.public_key)]
    if isinstance(action, IssueCertificateAction):
        return _issue_certificate_inputs(action)
    if isinstance(action, UpdateCertificateAction):
        return [make_certificate_address(action.id)]
    if isinstance(action, (CreateStandardAction, UpdateStandardAction)):
        return [make_standard_address(action.standard_id)]
    if isinstance(action, AccreditCertifyingBodyAction):
        return [
            make_standard_address(action.standard_id),
            make_organization_address(action.certifying_body_id),
        ]
    if isinstance(action, (OpenRequestAction, CreatePreCertifiedRequestAction)):
        return [
            make_request_address(action.id),
            make_standard_address(action.standard_id),
        ]
    if isinstance(action, ChangeRequestStatusAction):
        return [make_request_address(action.request_id)]
    if isinstance(action, AssertAction):
        return _assert_inputs(action)
    if isinstance(action, TransferAssertionAction):
        return _transfer_footprint(action, signer_public_key)
    raise _unknown_action(action)


def _action_outputs(action, signer_public_key: str) -> List[str]:
    if isinstance(action, CreateAgentAction):
        return [make_agent_address(signer_public_key)]
    if isinstance(action, (CreateOrganizationAction, UpdateOrganizationAction)):
        # the validator also updates the creating agent's organization link
        return [
            make_agent_address(signer_public_key),
            make_organization_address(action.id),
        ]
    if isinstance(action, AuthorizeAgentAction):
        return [make_agent_address(action.public_key)]
    if isinstance(action, (IssueCertificateAction, UpdateCertificateAction)):
        return [make_certificate_address(action.id)]
    if isinstance(action, (CreateStandardAction, UpdateStandardAction)):
        return [make_standard_address(action.standard_id)]
    if isinstance(action, AccreditCertifyingBodyAction):
        return [make_organization_address(action.certifying_body_id)]
    if isinstance(action, (OpenRequestAction, CreatePreCertifiedRequestAction)):
        return [make_request_address(action.id)]
    if isinstance(action, ChangeRequestStatusAction):
        return [make_request_address(action.request_id)]
    if isinstance(action, AssertAction):
        return _assert_outputs(action)
    if isinstance(action, TransferAssertionAction):
        return _transfer_footprint(action, signer_public_key)
    raise _unknown_action(action)


def _issue_certificate_inputs(action: IssueCertificateAction) -> List[str]:
    # factory_id is present for both sources (IssueCertificateAction.validate_source)
    result = [
        make_certificate_address(action.id),
        make_organization_address(action.factory_id),
    ]
    if action.source == CertificateSource.FROM_REQUEST:
        result.append(make_request_address(action.request_id))
    return result


def _assert_inputs(action: AssertAction) -> List[str]:
    assertion_address = make_assertion_address(action.assertion_id)
    if action.new_factory is not None:
        return [
            assertion_address,
            make_organization_address(action.new_factory.factory.id),
        ]
    if action.new_certificate is not None:
        certificate = action.new_certificate
        result = [assertion_address]
        if certificate.request_id is not None:
            result.append(make_request_address(certificate.request_id))
        if certificate.factory_id is not None:
            result.append(make_organization_address(certificate.factory_id))
        if certificate.standard_id is not None:
            result.append(make_standard_address(certificate.standard_id))
        return result
    return [assertion_address]


def _assert_outputs(action: AssertAction) -> List[str]:
    assertion_address = make_assertion_address(action.assertion_id)
    if action.new_factory is not None:
        return [
            assertion_address,
            make_organization_address(action.new_factory.factory.id),
        ]
    if action.new_certificate is not None:
        return [
            assertion_address,
            make_certificate_address(action.new_certificate.id),
        ]
    return [
        assertion_address,
        make_standard_address(action.new_standard.standard_id),
    ]


def _transfer_footprint(
    action: TransferAssertionAction, signer_public_key: str
) -> List[str]:
    # Ownership transfer may rewrite any organization, certificate or
    # standard record, so whole entity spaces are declared, not addresses.
    return [
        make_agent_address(signer_public_key),
        entity_space_prefix(EntityType.ORGANIZATION),
        entity_space_prefix(EntityType.CERTIFICATE),
        entity_space_prefix(EntityType.STANDARD),
        make_assertion_address(action.assertion_id),
    ]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ordered_unique(addresses: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for address in addresses:
        if address not in seen:
            seen.add(address)
            result.append(address)
    return result


def _unknown_action(action) -> InvalidTransactionError:
    return InvalidTransactionError(
        f"No address footprint defined for {type(action).__name__}",
        details={"type": type(action).__name__},
    )
