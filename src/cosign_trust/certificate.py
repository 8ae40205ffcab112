"""
Certificate loading and signer identity extraction.

Fulcio binds the signer identity to the certificate through the
SubjectAlternativeName extension and records the OIDC issuer that
authenticated the signer in a Sigstore-specific extension. The identity is
reported for the caller's policy; it takes no part in the trust decision.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from asn1crypto import core
from cryptography import x509
from cryptography.x509.oid import ExtensionOID

from .exceptions import CertificateParseError

logger = logging.getLogger(__name__)

# Raw UTF-8 issuer (deprecated) and its DER UTF8String replacement
SIGSTORE_ISSUER_OID = x509.ObjectIdentifier("1.3.6.1.4.1.57264.1.1")
SIGSTORE_ISSUER_V2_OID = x509.ObjectIdentifier("1.3.6.1.4.1.57264.1.8")


@dataclass(frozen=True)
class SignerIdentity:
    """Identity a signing certificate was issued to."""

    emails: tuple[str, ...] = ()
    uris: tuple[str, ...] = ()
    issuer: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.emails or self.uris)

    def to_dict(self) -> dict[str, object]:
        return {"emails": list(self.emails), "uris": list(self.uris), "issuer": self.issuer}


def _as_bytes(data: str | bytes) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def load_pem_certificate(data: str | bytes) -> x509.Certificate:
    """
    Load a PEM-encoded certificate.

    Raises:
        CertificateParseError: If the data is not a PEM X.509 certificate
    """
    try:
        return x509.load_pem_x509_certificate(_as_bytes(data))
    except ValueError as e:
        msg = f"Failed to parse PEM certificate: {e}"
        raise CertificateParseError(msg) from e


def load_certificate(data: str | bytes) -> x509.Certificate:
    """
    Load a certificate from bytes (PEM or DER format).

    Raises:
        CertificateParseError: If the data is neither PEM nor DER X.509
    """
    raw = _as_bytes(data)
    try:
        # Try PEM format first
        try:
            return x509.load_pem_x509_certificate(raw)
        except ValueError:
            # Fall back to DER format
            return x509.load_der_x509_certificate(raw)
    except ValueError as e:
        msg = f"Failed to parse certificate data: {e}"
        raise CertificateParseError(msg) from e


def _decode_der_utf8_string(value: bytes) -> str | None:
    try:
        return core.UTF8String.load(value, strict=True).native
    except ValueError:
        return None


def _find_extension(
    certificate: x509.Certificate, oid: x509.ObjectIdentifier
) -> x509.Extension | None:
    try:
        return certificate.extensions.get_extension_for_oid(oid)
    except x509.ExtensionNotFound:
        return None
    except ValueError as e:
        # Duplicate or undecodable extensions
        msg = f"Failed to parse certificate extensions: {e}"
        raise CertificateParseError(msg) from e


def _extract_oidc_issuer(certificate: x509.Certificate) -> str | None:
    ext = _find_extension(certificate, SIGSTORE_ISSUER_V2_OID)
    if ext is not None:
        issuer = _decode_der_utf8_string(ext.value.value)
        if issuer is not None:
            return issuer

    ext = _find_extension(certificate, SIGSTORE_ISSUER_OID)
    if ext is None:
        return None
    try:
        return ext.value.value.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Sigstore issuer extension is not valid UTF-8")
        return None


def extract_signer_identity(certificate: x509.Certificate) -> SignerIdentity:
    """
    Extract the SAN e-mails and URIs and the OIDC issuer of a signing certificate.

    Raises:
        CertificateParseError: If the certificate extensions cannot be decoded
    """
    ext = _find_extension(certificate, ExtensionOID.SUBJECT_ALTERNATIVE_NAME)
    if ext is None:
        emails, uris = (), ()
    else:
        emails = tuple(ext.value.get_values_for_type(x509.RFC822Name))
        uris = tuple(ext.value.get_values_for_type(x509.UniformResourceIdentifier))

    return SignerIdentity(emails=emails, uris=uris, issuer=_extract_oidc_issuer(certificate))
