"""
cosign-trust - trust decisions for keyless cosign signatures.

Verifies ECDSA P-256 signatures over cosign payloads and decides whether a
short-lived Fulcio signing certificate can be trusted, anchoring its validity
to the transparency log integrated time.
"""

__version__ = "0.1.0"

from .certificate import SignerIdentity, extract_signer_identity, load_certificate
from .certificate_validator import (
    CertificateTrustValidator,
    TrustDecision,
    verify_certificate_can_be_trusted,
)
from .crypto import (
    CosignVerificationKey,
    extract_public_key_from_pem_cert,
    new_verification_key,
    new_verification_key_from_public_key_der,
    verify_signature,
)
from .exceptions import (
    Base64DecodeError,
    CertificateParseError,
    CertificateTrustError,
    ConfigurationError,
    CosignTrustError,
    InvalidKeyFormatError,
    IssuerMismatchError,
    MissingCodeSigningUsageError,
    MissingDigitalSignatureUsageError,
    MissingIdentityBindingError,
    NotYetValidError,
    SignatureFormatError,
    SignatureInvalidError,
    SignatureVerificationError,
    SignedAfterCertExpiredError,
    SignedBeforeCertValidError,
    TrustErrorCode,
)
from .timestamp import Timestamp

__all__ = [
    "Base64DecodeError",
    "CertificateParseError",
    "CertificateTrustError",
    "CertificateTrustValidator",
    "ConfigurationError",
    "CosignTrustError",
    "CosignVerificationKey",
    "InvalidKeyFormatError",
    "IssuerMismatchError",
    "MissingCodeSigningUsageError",
    "MissingDigitalSignatureUsageError",
    "MissingIdentityBindingError",
    "NotYetValidError",
    "SignatureFormatError",
    "SignatureInvalidError",
    "SignatureVerificationError",
    "SignedAfterCertExpiredError",
    "SignedBeforeCertValidError",
    "SignerIdentity",
    "Timestamp",
    "TrustDecision",
    "TrustErrorCode",
    "extract_public_key_from_pem_cert",
    "extract_signer_identity",
    "load_certificate",
    "new_verification_key",
    "new_verification_key_from_public_key_der",
    "verify_certificate_can_be_trusted",
    "verify_signature",
]
