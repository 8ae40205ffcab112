"""
Trust validation for short-lived cosign signing certificates
============================================================

Fulcio issues a code-signing certificate for a single signing operation and
the signature is recorded in the Rekor transparency log. A certificate can be
trusted for verifying cosign signatures when:

- it was issued by the CA holding the given SubjectPublicKeyInfo
- it carries the digitalSignature key usage
- it carries the codeSigning extended key usage
- it binds a signer identity through a SubjectAlternativeName
- the current time is not before its validity window
- the transparency log integrated time falls inside its validity window

Checks run in that order and the first failure is raised.

The certificate is never rejected because it expired relative to the current
time: it is treated as trusted forever, and only the window in which the
signature was created is enforced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from cryptography.x509.oid import ExtendedKeyUsageOID

from .crypto import load_public_key_info
from .exceptions import (
    CertificateParseError,
    CosignTrustError,
    IssuerMismatchError,
    MissingCodeSigningUsageError,
    MissingDigitalSignatureUsageError,
    MissingIdentityBindingError,
    NotYetValidError,
    SignedAfterCertExpiredError,
    SignedBeforeCertValidError,
)
from .timestamp import Clock, Timestamp, system_clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustDecision:
    """Outcome of a certificate trust evaluation."""

    accepted: bool
    error: CosignTrustError | None = None

    @property
    def error_code(self) -> str | None:
        return self.error.error_code.value if self.error else None


def _subject_name(certificate: x509.Certificate) -> str:
    try:
        return certificate.subject.rfc4514_string()
    except (ValueError, AttributeError):
        return "Unknown Subject"


def _get_extension(
    certificate: x509.Certificate, extension_class: type[x509.ExtensionType]
) -> x509.Extension | None:
    try:
        return certificate.extensions.get_extension_for_class(extension_class)
    except x509.ExtensionNotFound:
        return None
    except ValueError as e:
        # Duplicate or undecodable extensions
        msg = f"Failed to parse certificate extensions: {e}"
        raise CertificateParseError(msg) from e


def verify_issuer(
    certificate: x509.Certificate, ca_issuer_public_key: bytes | PublicKeyTypes
) -> None:
    """
    Verify the certificate's signature over its TBS body with the CA key.

    The signature algorithm declared by the certificate selects the hash and,
    for RSA, the padding.

    Raises:
        InvalidKeyFormatError: If the CA key bytes are not a SubjectPublicKeyInfo
        IssuerMismatchError: If the signature does not verify against the CA key
    """
    if isinstance(ca_issuer_public_key, bytes):
        ca_issuer_public_key = load_public_key_info(ca_issuer_public_key)

    try:
        if isinstance(ca_issuer_public_key, ec.EllipticCurvePublicKey):
            ca_issuer_public_key.verify(
                certificate.signature,
                certificate.tbs_certificate_bytes,
                ec.ECDSA(certificate.signature_hash_algorithm),
            )
        elif isinstance(ca_issuer_public_key, rsa.RSAPublicKey):
            ca_issuer_public_key.verify(
                certificate.signature,
                certificate.tbs_certificate_bytes,
                certificate.signature_algorithm_parameters,
                certificate.signature_hash_algorithm,
            )
        elif isinstance(
            ca_issuer_public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)
        ):
            ca_issuer_public_key.verify(certificate.signature, certificate.tbs_certificate_bytes)
        else:
            msg = f"Unsupported issuer key type: {type(ca_issuer_public_key).__name__}"
            raise IssuerMismatchError(msg)
    except InvalidSignature as e:
        msg = f"Certificate {_subject_name(certificate)} was not signed by the given CA key"
        raise IssuerMismatchError(msg) from e
    except (TypeError, ValueError, UnsupportedAlgorithm) as e:
        # Key type does not match the certificate's signature algorithm
        msg = f"Certificate signature cannot be verified with the given CA key: {e}"
        raise IssuerMismatchError(msg) from e

    logger.debug("Issuer signature verified for %s", _subject_name(certificate))


def verify_digital_signature_key_usage(certificate: x509.Certificate) -> None:
    """Raises MissingDigitalSignatureUsageError unless digitalSignature is set."""
    key_usage = _get_extension(certificate, x509.KeyUsage)
    if key_usage is None or not key_usage.value.digital_signature:
        raise MissingDigitalSignatureUsageError


def verify_code_signing_extended_key_usage(certificate: x509.Certificate) -> None:
    """Raises MissingCodeSigningUsageError unless codeSigning is present."""
    ext_key_usage = _get_extension(certificate, x509.ExtendedKeyUsage)
    if ext_key_usage is None or ExtendedKeyUsageOID.CODE_SIGNING not in ext_key_usage.value:
        raise MissingCodeSigningUsageError


def verify_certificate_key_usages(certificate: x509.Certificate) -> None:
    """Digital signature key usage first, then the code signing extended key usage."""
    verify_digital_signature_key_usage(certificate)
    verify_code_signing_extended_key_usage(certificate)


def verify_certificate_has_san(certificate: x509.Certificate) -> None:
    """
    Ensure the certificate binds a signer identity.

    Only the presence of the SubjectAlternativeName extension is checked; the
    e-mail or URI it holds is left to the caller's policy.
    """
    if _get_extension(certificate, x509.SubjectAlternativeName) is None:
        raise MissingIdentityBindingError


def verify_certificate_validity(certificate: x509.Certificate, now: Timestamp) -> None:
    """
    Ensure the certificate cannot be used before its not-before bound.

    THE CERTIFICATE IS TREATED AS TRUSTED FOREVER: its not-after bound is not
    compared with the current time. The signing window is enforced by
    verify_certificate_expiration instead.
    """
    not_before = Timestamp.from_datetime(certificate.not_valid_before_utc)
    if now < not_before:
        raise NotYetValidError(not_before)


def verify_certificate_expiration(
    certificate: x509.Certificate, integrated_time: Timestamp
) -> None:
    """
    Ensure the signature was submitted to the transparency log while the
    certificate was valid. Both bounds are inclusive.
    """
    not_before = Timestamp.from_datetime(certificate.not_valid_before_utc)
    not_after = Timestamp.from_datetime(certificate.not_valid_after_utc)

    if integrated_time < not_before:
        raise SignedBeforeCertValidError(integrated_time, not_before)
    if integrated_time > not_after:
        raise SignedAfterCertExpiredError(integrated_time, not_after)


class CertificateTrustValidator:
    """
    Decides whether a Fulcio signing certificate can be trusted.

    The validator holds nothing but its clock and may be shared between threads.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """
        Initialize the validator.

        Args:
            clock: Zero-argument callable returning the current time as an aware
                datetime. Defaults to the system clock.
        """
        self.clock = clock or system_clock
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def verify_trust(
        self,
        certificate: x509.Certificate,
        ca_public_key: bytes | PublicKeyTypes,
        integrated_time: int | Timestamp,
        now: Timestamp | None = None,
    ) -> None:
        """
        Ensure the given certificate can be trusted for verifying cosign signatures.

        Args:
            certificate: Parsed signing certificate
            ca_public_key: DER SubjectPublicKeyInfo of the trusted CA, or a loaded key
            integrated_time: Unix time at which the transparency log recorded the signature
            now: Current time; read once from the clock when omitted

        Raises:
            CosignTrustError: The first check that fails
        """
        if not isinstance(integrated_time, Timestamp):
            integrated_time = Timestamp.from_unix(integrated_time)
        if now is None:
            now = Timestamp.now(self.clock)

        subject = _subject_name(certificate)
        try:
            verify_issuer(certificate, ca_public_key)
            verify_certificate_key_usages(certificate)
            verify_certificate_has_san(certificate)
            verify_certificate_validity(certificate, now)
            verify_certificate_expiration(certificate, integrated_time)
        except CosignTrustError as e:
            self.logger.debug("Certificate %s rejected: %s", subject, e)
            raise

        self.logger.debug(
            "Certificate %s trusted for signature integrated at %s", subject, integrated_time
        )

    def evaluate(
        self,
        certificate: x509.Certificate,
        ca_public_key: bytes | PublicKeyTypes,
        integrated_time: int | Timestamp,
        now: Timestamp | None = None,
    ) -> TrustDecision:
        """Run verify_trust and report the outcome as a TrustDecision."""
        try:
            self.verify_trust(certificate, ca_public_key, integrated_time, now)
        except CosignTrustError as e:
            return TrustDecision(accepted=False, error=e)
        return TrustDecision(accepted=True)


def verify_certificate_can_be_trusted(
    certificate: x509.Certificate,
    ca_issuer_public_key: bytes | PublicKeyTypes,
    integrated_time: int | Timestamp,
    *,
    clock: Clock | None = None,
) -> None:
    """Verify a certificate with a default validator."""
    CertificateTrustValidator(clock).verify_trust(certificate, ca_issuer_public_key, integrated_time)
