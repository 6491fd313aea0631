"""
certreg_core — Certificate registry client core.

Derives state addresses for registry entities, declares the read/write
address footprint of every registry action, and builds signed
transactions and batches for the `certificate_registry` family.

__version__ is the SDK version. The transaction family version is
FAMILY_VERSION and is carried in every transaction header.
"""

__version__ = "0.1.0"

from .config import (
    FAMILY_NAME,
    FAMILY_VERSION,
    ADDRESS_LENGTH,
    ClientSettings,
    get_settings,
    configure_logging,
)
from .errors import (
    CertRegError,
    UserError,
    IoError,
    SigningError,
    SerializationError,
    InvalidTransactionError,
    InvalidInputError,
)
from .crypto import hash_hex, sha256_hex, sha512_hex, verify_signature
from .addressing import (
    EntityType,
    namespace_prefix,
    entity_space_prefix,
    address_for,
    make_agent_address,
    make_organization_address,
    make_certificate_address,
    make_standard_address,
    make_request_address,
    make_assertion_address,
    classify,
    is_family_address,
)
from .canonical import canonicalize, canonicalize_model
from .payload import (
    Action,
    ActionType,
    OrganizationType,
    AuthorizationRole,
    RequestStatus,
    CertificateSource,
    Contact,
    FactoryAddress,
    CertificateData,
    CreateAgentAction,
    AuthorizeAgentAction,
    CreateOrganizationAction,
    UpdateOrganizationAction,
    IssueCertificateAction,
    UpdateCertificateAction,
    CreateStandardAction,
    UpdateStandardAction,
    AccreditCertifyingBodyAction,
    OpenRequestAction,
    CreatePreCertifiedRequestAction,
    ChangeRequestStatusAction,
    FactoryAssertion,
    AssertAction,
    TransferAssertionAction,
    CertificateRegistryPayload,
)
from . import actions
from .footprint import inputs, outputs, inputs_with_org, outputs_with_org
from .signing import (
    Signer,
    Secp256k1Signer,
    Ed25519Signer,
    generate_signer,
    load_signer,
    signer_from_pem,
    signer_from_settings,
)
from .transaction import (
    TransactionHeader,
    Transaction,
    encode_payload,
    make_transaction,
    verify_transaction,
)
from .batch import (
    BatchHeader,
    Batch,
    BatchList,
    make_batch,
    make_batch_list,
    verify_batch,
)
