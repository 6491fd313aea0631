"""
certreg_core/actions.py — Builders for registry action payloads.

Each builder returns a fully-formed, immutable action model or raises
InvalidInputError; a partially-initialized payload can never reach the
transaction builder.

Numeric fields may be supplied as integers or as decimal strings (as
they arrive from forms and command lines). Strings that are not a
non-negative base-10 integer are rejected with InvalidInputError.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .crypto import sha256_hex
from .errors import InvalidInputError
from .payload import (
    AccreditCertifyingBodyAction,
    AssertAction,
    AuthorizationRole,
    AuthorizeAgentAction,
    CertificateData,
    CertificateSource,
    ChangeRequestStatusAction,
    Contact,
    CreateAgentAction,
    CreateOrganizationAction,
    CreatePreCertifiedRequestAction,
    CreateStandardAction,
    FactoryAddress,
    FactoryAssertion,
    IssueCertificateAction,
    OpenRequestAction,
    OrganizationType,
    RequestStatus,
    TransferAssertionAction,
    UpdateCertificateAction,
    UpdateOrganizationAction,
    UpdateStandardAction,
)


M = TypeVar("M", bound=BaseModel)

IntLike = Union[int, str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_uint(value: IntLike, field_name: str) -> int:
    """Parse a non-negative integer from an int or a decimal string.

    Raises:
        InvalidInputError: For anything else, including bools, negative
            numbers, whitespace-padded or non-numeric strings.
    """
    if isinstance(value, bool):
        raise InvalidInputError(
            f"{field_name} must be an integer, got a boolean",
            details={"field": field_name},
        )
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        parsed = int(value)
    else:
        raise InvalidInputError(
            f"{field_name} must be a non-negative integer, got {value!r}",
            details={"field": field_name, "value": repr(value)},
        )
    if parsed < 0:
        raise InvalidInputError(
            f"{field_name} must be a non-negative integer, got {parsed}",
            details={"field": field_name, "value": parsed},
        )
    return parsed


def _build(model: Callable[..., M], **fields) -> M:
    try:
        return model(**fields)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        first = errors[0]
        location = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InvalidInputError(
            f"{model.__name__}: {location}: {first['msg']}",
            details={"errors": [
                {"loc": list(e["loc"]), "msg": e["msg"]} for e in errors
            ]},
        ) from exc


def _contacts(
    name: Optional[str],
    phone_number: Optional[str],
    language_code: Optional[str],
) -> tuple:
    """A single contact when all three parts are given, else none."""
    if name is None or phone_number is None or language_code is None:
        return ()
    return (
        _build(Contact, name=name, phone_number=phone_number,
               language_code=language_code),
    )


def _factory_address(
    street: Optional[str], city: Optional[str], country: Optional[str]
) -> Optional[FactoryAddress]:
    if street is None or city is None or country is None:
        return None
    return _build(FactoryAddress, street_line_1=street, city=city, country=country)


def _certificate_data(data: Iterable) -> tuple:
    items = []
    for entry in data:
        if isinstance(entry, CertificateData):
            items.append(entry)
        elif isinstance(entry, dict):
            items.append(_build(CertificateData, **entry))
        else:
            try:
                field, value = entry
            except (TypeError, ValueError) as exc:
                raise InvalidInputError(
                    f"certificate data entries must be (field, data) pairs, "
                    f"got {entry!r}"
                ) from exc
            items.append(_build(CertificateData, field=field, data=value))
    return tuple(items)


def standard_id_for(name: str) -> str:
    """Standards are keyed by the SHA-256 hex of their name."""
    return sha256_hex(name.encode("utf-8"))


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------

def create_agent(name: str, timestamp: IntLike) -> CreateAgentAction:
    return _build(
        CreateAgentAction,
        name=name,
        timestamp=parse_uint(timestamp, "timestamp"),
    )


def authorize_agent(
    public_key: str, role: AuthorizationRole
) -> AuthorizeAgentAction:
    return _build(AuthorizeAgentAction, public_key=public_key, role=role)


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

def create_organization(
    id: str,
    name: str,
    organization_type: OrganizationType,
    contact_name: str,
    contact_phone_number: str,
    contact_language_code: str,
    street: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
) -> CreateOrganizationAction:
    """Build a create-organization payload.

    Factories must supply street, city and country; other organization
    types must not.
    """
    return _build(
        CreateOrganizationAction,
        id=id,
        name=name,
        organization_type=organization_type,
        contacts=_contacts(contact_name, contact_phone_number, contact_language_code),
        address=_factory_address(street, city, country),
    )


def update_organization(
    id: str,
    name: Optional[str] = None,
    contact_name: Optional[str] = None,
    contact_phone_number: Optional[str] = None,
    contact_language_code: Optional[str] = None,
    street: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
) -> UpdateOrganizationAction:
    """Build an update-organization payload.

    The contact is replaced only when all three contact parts are given;
    the factory address only when street, city and country are given.
    """
    return _build(
        UpdateOrganizationAction,
        id=id,
        name=name,
        contacts=_contacts(contact_name, contact_phone_number, contact_language_code),
        address=_factory_address(street, city, country),
    )


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------

def issue_certificate(
    id: str,
    factory_id: Optional[str],
    request_id: Optional[str],
    standard_id: Optional[str],
    certificate_data: Sequence,
    valid_from: IntLike,
    valid_to: IntLike,
) -> IssueCertificateAction:
    """Build an issue-certificate payload.

    With a request_id the certificate is issued FROM_REQUEST and the
    validator takes the standard from the request; factory_id is still
    required so the factory organization is declared as an input.
    Otherwise it is INDEPENDENT and factory_id and standard_id are required.
    """
    source = (
        CertificateSource.FROM_REQUEST if request_id is not None
        else CertificateSource.INDEPENDENT
    )
    return _build(
        IssueCertificateAction,
        id=id,
        source=source,
        request_id=request_id,
        factory_id=factory_id,
        standard_id=standard_id,
        certificate_data=_certificate_data(certificate_data),
        valid_from=parse_uint(valid_from, "valid_from"),
        valid_to=parse_uint(valid_to, "valid_to"),
    )


def update_certificate(
    id: str,
    certificate_data: Sequence,
    valid_from: IntLike,
    valid_to: IntLike,
) -> UpdateCertificateAction:
    return _build(
        UpdateCertificateAction,
        id=id,
        certificate_data=_certificate_data(certificate_data),
        valid_from=parse_uint(valid_from, "valid_from"),
        valid_to=parse_uint(valid_to, "valid_to"),
    )


# ---------------------------------------------------------------------------
# Standards
# ---------------------------------------------------------------------------

def create_standard(
    name: str,
    version: str,
    description: str,
    link: str,
    approval_date: IntLike,
) -> CreateStandardAction:
    return _build(
        CreateStandardAction,
        standard_id=standard_id_for(name),
        name=name,
        version=version,
        description=description,
        link=link,
        approval_date=parse_uint(approval_date, "approval_date"),
    )


def update_standard(
    name: str,
    version: str,
    description: str,
    link: str,
    approval_date: IntLike,
) -> UpdateStandardAction:
    """The standard is located by its name; the name itself is immutable."""
    return _build(
        UpdateStandardAction,
        standard_id=standard_id_for(name),
        version=version,
        description=description,
        link=link,
        approval_date=parse_uint(approval_date, "approval_date"),
    )


def create_accreditation(
    standard_id: str,
    certifying_body_id: str,
    valid_from: IntLike,
    valid_to: IntLike,
) -> AccreditCertifyingBodyAction:
    return _build(
        AccreditCertifyingBodyAction,
        standard_id=standard_id,
        certifying_body_id=certifying_body_id,
        valid_from=parse_uint(valid_from, "valid_from"),
        valid_to=parse_uint(valid_to, "valid_to"),
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

def open_request(
    request_id: str, standard_id: str, request_date: IntLike
) -> OpenRequestAction:
    return _build(
        OpenRequestAction,
        id=request_id,
        standard_id=standard_id,
        request_date=parse_uint(request_date, "request_date"),
    )


def create_pre_certified_request(
    request_id: str, standard_id: str, request_date: IntLike
) -> CreatePreCertifiedRequestAction:
    return _build(
        CreatePreCertifiedRequestAction,
        id=request_id,
        standard_id=standard_id,
        request_date=parse_uint(request_date, "request_date"),
    )


def change_request_status(
    request_id: str, status: RequestStatus
) -> ChangeRequestStatusAction:
    return _build(ChangeRequestStatusAction, request_id=request_id, status=status)


# ---------------------------------------------------------------------------
# Assertions
# ---------------------------------------------------------------------------

def create_factory_assertion(
    assertion_id: str, factory: CreateOrganizationAction
) -> AssertAction:
    return _build(
        AssertAction,
        assertion_id=assertion_id,
        new_factory=_build(FactoryAssertion, factory=factory),
    )


def create_certificate_assertion(
    assertion_id: str, certificate: IssueCertificateAction
) -> AssertAction:
    return _build(AssertAction, assertion_id=assertion_id, new_certificate=certificate)


def create_standard_assertion(
    assertion_id: str, standard: CreateStandardAction
) -> AssertAction:
    return _build(AssertAction, assertion_id=assertion_id, new_standard=standard)


def transfer_assertion(
    assertion_id: str, new_owner_public_key: str
) -> TransferAssertionAction:
    return _build(
        TransferAssertionAction,
        assertion_id=assertion_id,
        new_owner_public_key=new_owner_public_key,
    )
