import pytest
from asn1crypto import core
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import ExtensionOID

from cosign_trust.certificate import (
    SIGSTORE_ISSUER_OID,
    SIGSTORE_ISSUER_V2_OID,
    SignerIdentity,
    extract_signer_identity,
    load_certificate,
    load_pem_certificate,
)
from cosign_trust.exceptions import CertificateParseError
from tests.fixtures.certificates import (
    CertGenerationOptions,
    generate_certificate,
    with_duplicate_extension,
)


def test_load_pem_and_der(issued_cert):
    der = issued_cert.cert.public_bytes(serialization.Encoding.DER)
    assert load_certificate(issued_cert.pem) == issued_cert.cert
    assert load_certificate(der) == issued_cert.cert
    assert load_certificate(issued_cert.pem.decode("ascii")) == issued_cert.cert


def test_load_pem_certificate_rejects_der(issued_cert):
    der = issued_cert.cert.public_bytes(serialization.Encoding.DER)
    with pytest.raises(CertificateParseError):
        load_pem_certificate(der)


def test_load_certificate_rejects_garbage():
    with pytest.raises(CertificateParseError, match="Failed to parse certificate data"):
        load_certificate(b"definitely not a certificate")


def test_email_identity(issued_cert):
    identity = extract_signer_identity(issued_cert.cert)
    assert identity == SignerIdentity(
        emails=("tests@sigstore-rs.dev",), uris=(), issuer="https://sigstore.dev/oauth"
    )
    assert not identity.is_empty


def test_uri_identity_without_issuer(ca_data):
    url = "https://github.com/sigstore/sigstore-rs/.github/workflows/ci.yml@refs/heads/main"
    issued = generate_certificate(
        ca_data, CertGenerationOptions(subject_email=None, subject_url=url, subject_issuer=None)
    )
    identity = extract_signer_identity(issued.cert)
    assert identity.uris == (url,)
    assert identity.emails == ()
    assert identity.issuer is None


def test_missing_san_gives_empty_identity(ca_data):
    issued = generate_certificate(ca_data, CertGenerationOptions(subject_email=None))
    identity = extract_signer_identity(issued.cert)
    assert identity.is_empty
    assert identity.to_dict() == {"emails": [], "uris": [], "issuer": "https://sigstore.dev/oauth"}


def _leaf_with_extensions(ca_data, issued_cert, *extensions):
    builder = (
        x509.CertificateBuilder()
        .subject_name(issued_cert.cert.subject)
        .issuer_name(ca_data.cert.subject)
        .public_key(issued_cert.private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(issued_cert.cert.not_valid_before_utc)
        .not_valid_after(issued_cert.cert.not_valid_after_utc)
    )
    for oid, value in extensions:
        builder = builder.add_extension(x509.UnrecognizedExtension(oid, value), critical=False)
    return builder.sign(ca_data.private_key, hashes.SHA256())


def test_der_encoded_issuer_extension_takes_precedence(ca_data, issued_cert):
    issuer = b"https://token.actions.githubusercontent.com"
    cert = _leaf_with_extensions(
        ca_data,
        issued_cert,
        (SIGSTORE_ISSUER_OID, b"https://accounts.google.com"),
        (SIGSTORE_ISSUER_V2_OID, bytes([0x0C, len(issuer)]) + issuer),
    )
    assert extract_signer_identity(cert).issuer == issuer.decode("ascii")


def test_long_der_encoded_issuer(ca_data, issued_cert):
    issuer = "https://issuer.example.com/" + "a" * 200
    cert = _leaf_with_extensions(
        ca_data, issued_cert, (SIGSTORE_ISSUER_V2_OID, core.UTF8String(issuer).dump())
    )
    assert extract_signer_identity(cert).issuer == issuer


@pytest.mark.parametrize(
    "value",
    [
        core.OctetString(b"https://accounts.google.com").dump(),
        b"\x0c\x05abc",
        b"\x0c\x02\xff\xfe",
        b"",
    ],
    ids=["wrong-tag", "truncated", "not-utf8", "empty"],
)
def test_malformed_der_issuer_falls_back_to_raw_extension(ca_data, issued_cert, value):
    cert = _leaf_with_extensions(
        ca_data,
        issued_cert,
        (SIGSTORE_ISSUER_OID, b"https://accounts.google.com"),
        (SIGSTORE_ISSUER_V2_OID, value),
    )
    assert extract_signer_identity(cert).issuer == "https://accounts.google.com"


def test_malformed_der_issuer_without_raw_extension(ca_data, issued_cert):
    cert = _leaf_with_extensions(ca_data, issued_cert, (SIGSTORE_ISSUER_V2_OID, b"\x0c\x05abc"))
    assert extract_signer_identity(cert).issuer is None


@pytest.mark.parametrize(
    "oid",
    [ExtensionOID.SUBJECT_ALTERNATIVE_NAME, SIGSTORE_ISSUER_OID],
    ids=["san", "issuer"],
)
def test_duplicate_extension_is_a_parse_error(issued_cert, oid):
    cert = with_duplicate_extension(issued_cert.cert, oid)
    with pytest.raises(CertificateParseError, match="Failed to parse certificate extensions"):
        extract_signer_identity(cert)
