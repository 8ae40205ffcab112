"""
Cryptographic primitives for cosign signature verification.

This module loads cosign verification keys (ECDSA on NIST P-256), extracts the
public key embedded in a signing certificate, and verifies base64-encoded
DER ECDSA signatures.
"""
from __future__ import annotations

import base64
import binascii
import logging

from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from .exceptions import (
    Base64DecodeError,
    CertificateParseError,
    InvalidKeyFormatError,
    SignatureFormatError,
    SignatureInvalidError,
)

logger = logging.getLogger(__name__)

# Sigstore relies on NIST P-256, also known as prime256v1 and secp256r1
CosignVerificationKey = ec.EllipticCurvePublicKey

# Order of the P-256 base point (FIPS 186-4, D.1.2.3)
P256_ORDER = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551


def _as_bytes(data: str | bytes) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def _ensure_p256(key: object) -> CosignVerificationKey:
    if not isinstance(key, ec.EllipticCurvePublicKey):
        msg = f"Expected an ECDSA public key, got {type(key).__name__}"
        raise InvalidKeyFormatError(msg)
    if not isinstance(key.curve, ec.SECP256R1):
        msg = f"Expected an ECDSA key on curve secp256r1, got {key.curve.name}"
        raise InvalidKeyFormatError(msg)
    return key


def new_verification_key(contents: str | bytes) -> CosignVerificationKey:
    """
    Create a cosign verification key from a PEM-encoded public key.

    Args:
        contents: PEM SubjectPublicKeyInfo ("BEGIN PUBLIC KEY")

    Returns:
        ECDSA P-256 public key

    Raises:
        InvalidKeyFormatError: If the PEM is malformed or the key is not ECDSA P-256
    """
    try:
        key = serialization.load_pem_public_key(_as_bytes(contents))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        msg = f"Failed to load PEM public key: {e}"
        raise InvalidKeyFormatError(msg) from e
    return _ensure_p256(key)


def new_verification_key_from_public_key_der(data: bytes) -> CosignVerificationKey:
    """
    Create a cosign verification key from a DER-encoded SubjectPublicKeyInfo.

    Raises:
        InvalidKeyFormatError: If the DER is malformed or the key is not ECDSA P-256
    """
    try:
        key = serialization.load_der_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        msg = f"Failed to load DER public key: {e}"
        raise InvalidKeyFormatError(msg) from e
    return _ensure_p256(key)


def load_public_key_info(data: bytes) -> PublicKeyTypes:
    """
    Load a trusted issuer key from its SubjectPublicKeyInfo.

    DER is expected; PEM-armored input is accepted as well. Unlike cosign
    verification keys, any key type the certificate issuer may sign with is allowed.

    Raises:
        InvalidKeyFormatError: If the data is not a SubjectPublicKeyInfo
    """
    try:
        if data.lstrip().startswith(b"-----BEGIN"):
            return serialization.load_pem_public_key(data)
        return serialization.load_der_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        msg = f"Failed to load issuer public key: {e}"
        raise InvalidKeyFormatError(msg) from e


def extract_public_key_from_pem_cert(cert: str | bytes) -> bytes:
    """
    Extract the public key stored inside of the given PEM-encoded certificate.

    The key is not parsed: the SubjectPublicKeyInfo is returned exactly as
    embedded, so point compression and unsupported algorithms survive.

    Returns:
        The DER-encoded SubjectPublicKeyInfo of the certificate's key

    Raises:
        CertificateParseError: If the PEM, DER or certificate structure is malformed
    """
    try:
        certificate = x509.load_pem_x509_certificate(_as_bytes(cert))
        parsed = asn1_x509.Certificate.load(certificate.public_bytes(serialization.Encoding.DER))
        return parsed["tbs_certificate"]["subject_public_key_info"].dump()
    except (ValueError, TypeError) as e:
        msg = f"Failed to parse PEM certificate: {e}"
        raise CertificateParseError(msg) from e


def verify_signature(
    verification_key: CosignVerificationKey, signature_str: str | bytes, msg: bytes
) -> None:
    """
    Verify that the signature was generated by the given key over msg.

    The signature is base64 text (str or ASCII bytes) wrapping a DER-encoded ECDSA signature; the
    message is hashed with SHA-256.

    Raises:
        Base64DecodeError: If signature_str is not valid base64
        SignatureFormatError: If the decoded bytes are not a DER ECDSA signature
        SignatureInvalidError: If cryptographic verification fails
    """
    try:
        signature_raw = base64.b64decode(signature_str, validate=True)
    except (binascii.Error, ValueError) as e:
        error_msg = f"Signature is not valid base64: {e}"
        raise Base64DecodeError(error_msg) from e

    try:
        r, s = decode_dss_signature(signature_raw)
    except ValueError as e:
        error_msg = f"Signature is not a DER-encoded ECDSA signature: {e}"
        raise SignatureFormatError(error_msg) from e
    if not (0 < r < P256_ORDER and 0 < s < P256_ORDER):
        error_msg = "Signature scalars are out of range for curve secp256r1"
        raise SignatureFormatError(error_msg)

    try:
        verification_key.verify(signature_raw, msg, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature as e:
        error_msg = "Signature does not match the message and verification key"
        raise SignatureInvalidError(error_msg) from e

    logger.debug("Signature verified over %d byte message", len(msg))
