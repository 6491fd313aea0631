"""
certreg_core/payload.py — Action payload data model.

One immutable Pydantic model per registry action. Together they form the
closed tagged union `Action`, discriminated on the `action` field, so a
payload can never be half-built and every consumer (footprint, encoder)
dispatches over a known, finite set of kinds.

CertificateRegistryPayload is the wire envelope that is encoded, hashed
into the transaction header and carried as the transaction payload.
"""

# NOTE: `from __future__ import annotations` is intentionally omitted;
# Pydantic resolves the Literal discriminators at class creation.

from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import MAX_SAFE_INTEGER


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

NonEmptyStr = Annotated[str, Field(min_length=1)]

# Timestamps and dates are seconds since the epoch. Capped at 2**53 so the
# canonical JSON encoding carries them exactly.
SafeUint = Annotated[int, Field(ge=0, le=MAX_SAFE_INTEGER, strict=True)]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ActionType(str, Enum):
    """Registry actions. The value is the payload's wire tag."""
    CREATE_AGENT = "create_agent"
    CREATE_ORGANIZATION = "create_organization"
    UPDATE_ORGANIZATION = "update_organization"
    AUTHORIZE_AGENT = "authorize_agent"
    ISSUE_CERTIFICATE = "issue_certificate"
    UPDATE_CERTIFICATE = "update_certificate"
    CREATE_STANDARD = "create_standard"
    UPDATE_STANDARD = "update_standard"
    ACCREDIT_CERTIFYING_BODY = "accredit_certifying_body"
    OPEN_REQUEST = "open_request"
    CREATE_PRE_CERTIFIED_REQUEST = "create_pre_certified_request"
    CHANGE_REQUEST_STATUS = "change_request_status"
    ASSERT = "assert"
    TRANSFER_ASSERTION = "transfer_assertion"


class OrganizationType(str, Enum):
    CERTIFYING_BODY = "certifying_body"
    STANDARDS_BODY = "standards_body"
    FACTORY = "factory"
    INGESTION = "ingestion"


class AuthorizationRole(str, Enum):
    ADMIN = "admin"
    TRANSACTOR = "transactor"


class RequestStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    CERTIFIED = "certified"


class CertificateSource(str, Enum):
    """Whether a certificate closes an open request or stands alone."""
    FROM_REQUEST = "from_request"
    INDEPENDENT = "independent"


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------

class Contact(_Frozen):
    name: NonEmptyStr
    phone_number: NonEmptyStr
    language_code: NonEmptyStr


class FactoryAddress(_Frozen):
    street_line_1: NonEmptyStr
    city: NonEmptyStr
    country: NonEmptyStr


class CertificateData(_Frozen):
    """A free-form field/value pair recorded on a certificate."""
    field: NonEmptyStr
    data: str


# ---------------------------------------------------------------------------
# Agent and organization actions
# ---------------------------------------------------------------------------

class CreateAgentAction(_Frozen):
    action: Literal["create_agent"] = "create_agent"
    name: NonEmptyStr
    timestamp: SafeUint


class AuthorizeAgentAction(_Frozen):
    """Grant `role` in the signer's organization to the agent at public_key."""
    action: Literal["authorize_agent"] = "authorize_agent"
    public_key: NonEmptyStr
    role: AuthorizationRole


class CreateOrganizationAction(_Frozen):
    action: Literal["create_organization"] = "create_organization"
    id: NonEmptyStr
    name: NonEmptyStr
    organization_type: OrganizationType
    contacts: Tuple[Contact, ...] = ()
    address: Optional[FactoryAddress] = None

    @model_validator(mode="after")
    def validate_factory_address(self) -> "CreateOrganizationAction":
        is_factory = self.organization_type == OrganizationType.FACTORY
        if is_factory and self.address is None:
            raise ValueError("A factory organization requires an address")
        if not is_factory and self.address is not None:
            raise ValueError("Only factory organizations carry an address")
        return self


class UpdateOrganizationAction(_Frozen):
    """Fields left as None / empty are not changed by the validator."""
    action: Literal["update_organization"] = "update_organization"
    id: NonEmptyStr
    name: Optional[NonEmptyStr] = None
    contacts: Tuple[Contact, ...] = ()
    address: Optional[FactoryAddress] = None


# ---------------------------------------------------------------------------
# Certificate actions
# ---------------------------------------------------------------------------

class IssueCertificateAction(_Frozen):
    action: Literal["issue_certificate"] = "issue_certificate"
    id: NonEmptyStr
    source: CertificateSource
    request_id: Optional[NonEmptyStr] = None
    factory_id: Optional[NonEmptyStr] = None
    standard_id: Optional[NonEmptyStr] = None
    certificate_data: Tuple[CertificateData, ...] = ()
    valid_from: SafeUint
    valid_to: SafeUint

    @model_validator(mode="after")
    def validate_source(self) -> "IssueCertificateAction":
        if self.source == CertificateSource.FROM_REQUEST:
            # the validator reads the factory organization either way
            if self.request_id is None or self.factory_id is None:
                raise ValueError(
                    "request_id and factory_id are required when source "
                    "is FROM_REQUEST"
                )
        else:
            if self.request_id is not None:
                raise ValueError(
                    "request_id must be None for INDEPENDENT certificates"
                )
            if self.factory_id is None or self.standard_id is None:
                raise ValueError(
                    "factory_id and standard_id are required for "
                    "INDEPENDENT certificates"
                )
        return self


class UpdateCertificateAction(_Frozen):
    action: Literal["update_certificate"] = "update_certificate"
    id: NonEmptyStr
    certificate_data: Tuple[CertificateData, ...] = ()
    valid_from: SafeUint
    valid_to: SafeUint


# ---------------------------------------------------------------------------
# Standard actions
# ---------------------------------------------------------------------------

class CreateStandardAction(_Frozen):
    action: Literal["create_standard"] = "create_standard"
    standard_id: NonEmptyStr
    name: NonEmptyStr
    version: NonEmptyStr
    description: str
    link: str
    approval_date: SafeUint


class UpdateStandardAction(_Frozen):
    action: Literal["update_standard"] = "update_standard"
    standard_id: NonEmptyStr
    version: NonEmptyStr
    description: str
    link: str
    approval_date: SafeUint


class AccreditCertifyingBodyAction(_Frozen):
    action: Literal["accredit_certifying_body"] = "accredit_certifying_body"
    standard_id: NonEmptyStr
    certifying_body_id: NonEmptyStr
    valid_from: SafeUint
    valid_to: SafeUint


# ---------------------------------------------------------------------------
# Request actions
# ---------------------------------------------------------------------------

class OpenRequestAction(_Frozen):
    action: Literal["open_request"] = "open_request"
    id: NonEmptyStr
    standard_id: NonEmptyStr
    request_date: SafeUint


class CreatePreCertifiedRequestAction(_Frozen):
    """A request that is recorded as already certified by the signer."""
    action: Literal["create_pre_certified_request"] = "create_pre_certified_request"
    id: NonEmptyStr
    standard_id: NonEmptyStr
    request_date: SafeUint


class ChangeRequestStatusAction(_Frozen):
    action: Literal["change_request_status"] = "change_request_status"
    request_id: NonEmptyStr
    status: RequestStatus


# ---------------------------------------------------------------------------
# Assertion actions
# ---------------------------------------------------------------------------

class FactoryAssertion(_Frozen):
    factory: CreateOrganizationAction


class AssertAction(_Frozen):
    """A signed claim that creates exactly one factory, certificate or standard.

    The asserted entity is later transferable to its real owner with
    TransferAssertionAction.
    """
    action: Literal["assert"] = "assert"
    assertion_id: NonEmptyStr
    new_factory: Optional[FactoryAssertion] = None
    new_certificate: Optional[IssueCertificateAction] = None
    new_standard: Optional[CreateStandardAction] = None

    @model_validator(mode="after")
    def validate_exactly_one_assertion(self) -> "AssertAction":
        present = [
            name for name in ("new_factory", "new_certificate", "new_standard")
            if getattr(self, name) is not None
        ]
        if len(present) != 1:
            raise ValueError(
                "AssertAction must carry exactly one of new_factory, "
                f"new_certificate, new_standard (got {present or 'none'})"
            )
        return self


class TransferAssertionAction(_Frozen):
    action: Literal["transfer_assertion"] = "transfer_assertion"
    assertion_id: NonEmptyStr
    new_owner_public_key: NonEmptyStr


# ---------------------------------------------------------------------------
# Tagged union + envelope
# ---------------------------------------------------------------------------

Action = Annotated[
    Union[
        CreateAgentAction,
        CreateOrganizationAction,
        UpdateOrganizationAction,
        AuthorizeAgentAction,
        IssueCertificateAction,
        UpdateCertificateAction,
        CreateStandardAction,
        UpdateStandardAction,
        AccreditCertifyingBodyAction,
        OpenRequestAction,
        CreatePreCertifiedRequestAction,
        ChangeRequestStatusAction,
        AssertAction,
        TransferAssertionAction,
    ],
    Field(discriminator="action"),
]

ACTION_MODELS = get_args(get_args(Action)[0])


class CertificateRegistryPayload(_Frozen):
    """Wire envelope: the action tag plus the action body."""
    action: ActionType
    body: Action

    @model_validator(mode="after")
    def validate_tag_matches_body(self) -> "CertificateRegistryPayload":
        if self.body.action != self.action:
            raise ValueError(
                f"Payload tag {self.action.value} does not match body "
                f"{self.body.action}"
            )
        return self

    @classmethod
    def wrap(cls, action: BaseModel) -> "CertificateRegistryPayload":
        return cls(action=action.action, body=action)
