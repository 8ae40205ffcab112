"""
Exceptions raised while verifying cosign signatures and signing certificates.

Every failure maps to exactly one TrustErrorCode so callers can branch on the
reason for rejection without matching exception classes.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .timestamp import Timestamp


class TrustErrorCode(Enum):
    """Reasons a key, signature or certificate is rejected."""

    INVALID_KEY_FORMAT = "InvalidKeyFormat"
    BASE64_DECODE_ERROR = "Base64DecodeError"
    SIGNATURE_FORMAT_ERROR = "SignatureFormatError"
    SIGNATURE_INVALID = "SignatureInvalid"
    CERTIFICATE_PARSE_ERROR = "CertificateParseError"
    ISSUER_MISMATCH = "IssuerMismatch"
    MISSING_DIGITAL_SIGNATURE_USAGE = "MissingDigitalSignatureUsage"
    MISSING_CODE_SIGNING_USAGE = "MissingCodeSigningUsage"
    MISSING_IDENTITY_BINDING = "MissingIdentityBinding"
    NOT_YET_VALID = "NotYetValid"
    SIGNED_BEFORE_CERT_VALID = "SignedBeforeCertValid"
    SIGNED_AFTER_CERT_EXPIRED = "SignedAfterCertExpired"
    CONFIGURATION_ERROR = "ConfigurationError"


class CosignTrustError(Exception):
    """Base exception class for cosign trust failures."""

    error_code: TrustErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ConfigurationError(CosignTrustError):
    """Exception raised for configuration-related errors."""

    error_code = TrustErrorCode.CONFIGURATION_ERROR


class KeyFormatError(CosignTrustError):
    """Base class for key material that cannot be used."""


class InvalidKeyFormatError(KeyFormatError):
    """Key bytes are not a PEM/DER SubjectPublicKeyInfo of the expected type."""

    error_code = TrustErrorCode.INVALID_KEY_FORMAT


class CertificateParseError(CosignTrustError):
    """Certificate bytes are not valid PEM/DER X.509."""

    error_code = TrustErrorCode.CERTIFICATE_PARSE_ERROR


class SignatureVerificationError(CosignTrustError):
    """Base class for signature verification failures."""


class Base64DecodeError(SignatureVerificationError):
    error_code = TrustErrorCode.BASE64_DECODE_ERROR


class SignatureFormatError(SignatureVerificationError):
    error_code = TrustErrorCode.SIGNATURE_FORMAT_ERROR


class SignatureInvalidError(SignatureVerificationError):
    error_code = TrustErrorCode.SIGNATURE_INVALID


class CertificateTrustError(CosignTrustError):
    """Base class for certificates that must not be trusted."""


class IssuerMismatchError(CertificateTrustError):
    error_code = TrustErrorCode.ISSUER_MISMATCH


class MissingDigitalSignatureUsageError(CertificateTrustError):
    error_code = TrustErrorCode.MISSING_DIGITAL_SIGNATURE_USAGE

    def __init__(self, message: str = "Certificate has no digitalSignature key usage") -> None:
        super().__init__(message)


class MissingCodeSigningUsageError(CertificateTrustError):
    error_code = TrustErrorCode.MISSING_CODE_SIGNING_USAGE

    def __init__(self, message: str = "Certificate has no codeSigning extended key usage") -> None:
        super().__init__(message)


class MissingIdentityBindingError(CertificateTrustError):
    error_code = TrustErrorCode.MISSING_IDENTITY_BINDING

    def __init__(self, message: str = "Certificate has no SubjectAlternativeName") -> None:
        super().__init__(message)


class NotYetValidError(CertificateTrustError):
    """The current time precedes the certificate's not-before bound."""

    error_code = TrustErrorCode.NOT_YET_VALID

    def __init__(self, not_before: Timestamp) -> None:
        super().__init__(f"Certificate is not valid before {not_before.to_rfc2822()}")
        self.not_before = not_before


class SignedBeforeCertValidError(CertificateTrustError):
    """The transparency log integrated time precedes the certificate's not-before."""

    error_code = TrustErrorCode.SIGNED_BEFORE_CERT_VALID

    def __init__(self, integrated_time: Timestamp, not_before: Timestamp) -> None:
        super().__init__(
            f"Signature integrated at {integrated_time.to_rfc2822()}, "
            f"before certificate validity started at {not_before.to_rfc2822()}"
        )
        self.integrated_time = integrated_time
        self.not_before = not_before


class SignedAfterCertExpiredError(CertificateTrustError):
    """The transparency log integrated time follows the certificate's not-after."""

    error_code = TrustErrorCode.SIGNED_AFTER_CERT_EXPIRED

    def __init__(self, integrated_time: Timestamp, not_after: Timestamp) -> None:
        super().__init__(
            f"Signature integrated at {integrated_time.to_rfc2822()}, "
            f"after certificate expired at {not_after.to_rfc2822()}"
        )
        self.integrated_time = integrated_time
        self.not_after = not_after
