#!/usr/bin/env python3
"""
Command line interface for cosign-trust.

Wraps the signature and certificate checks for operators who already hold the
key, certificate and transparency log material on disk.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from asn1crypto import pem as asn1_pem
import click

from .certificate import extract_signer_identity, load_certificate
from .certificate_validator import CertificateTrustValidator
from .config import load_settings
from .crypto import (
    extract_public_key_from_pem_cert,
    new_verification_key,
    verify_signature,
)
from .exceptions import CosignTrustError
from .logging_config import get_logger, setup_logging

EXIT_REJECTED = 1

logger = get_logger(__name__)


def _read_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


def _fail(error: CosignTrustError) -> None:
    click.echo(f"REJECTED {error.error_code.value}: {error.message}", err=True)
    sys.exit(EXIT_REJECTED)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="YAML configuration file")
@click.option("--log-level", help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """Verify cosign signatures and Fulcio signing certificates."""
    try:
        settings = load_settings(config)
    except CosignTrustError as e:
        raise click.UsageError(e.message) from e

    setup_logging(
        service_name=settings.SERVICE_NAME,
        log_level=log_level or settings.LOG_LEVEL,
        json_format=settings.json_logs,
    )
    logger.debug("Loaded %s settings for %s", settings.ENVIRONMENT, settings.SERVICE_NAME)
    ctx.obj = settings


@cli.command("verify-signature")
@click.option("--key", "key_path", required=True, type=click.Path(exists=True, dir_okay=False), help="PEM public key")
@click.option("--signature", help="Base64 signature")
@click.option("--signature-file", type=click.Path(exists=True, dir_okay=False), help="File holding the base64 signature")
@click.option("--message-file", required=True, type=click.Path(exists=True, dir_okay=False), help="Signed payload")
def verify_signature_command(
    key_path: str, signature: str | bytes | None, signature_file: str | None, message_file: str
) -> None:
    """Verify a base64 ECDSA P-256 signature over a payload."""
    if (signature is None) == (signature_file is None):
        msg = "Exactly one of --signature or --signature-file is required"
        raise click.UsageError(msg)
    if signature_file is not None:
        signature = _read_bytes(signature_file).strip()

    try:
        key = new_verification_key(_read_bytes(key_path))
        verify_signature(key, signature, _read_bytes(message_file))
    except CosignTrustError as e:
        _fail(e)

    click.echo("Verified OK")


@cli.command("verify-certificate")
@click.option("--cert", "cert_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Signing certificate (PEM or DER)")
@click.option("--ca-key", "ca_key_path", required=True, type=click.Path(exists=True, dir_okay=False), help="CA SubjectPublicKeyInfo (PEM or DER)")
@click.option("--integrated-time", required=True, type=int, help="Transparency log integrated time (Unix seconds)")
def verify_certificate_command(cert_path: str, ca_key_path: str, integrated_time: int) -> None:
    """Check that a signing certificate can be trusted."""
    try:
        certificate = load_certificate(_read_bytes(cert_path))
        CertificateTrustValidator().verify_trust(
            certificate, _read_bytes(ca_key_path), integrated_time
        )
    except CosignTrustError as e:
        _fail(e)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--integrated-time") from e

    click.echo("Certificate trusted")


@cli.command("extract-key")
@click.option("--cert", "cert_path", required=True, type=click.Path(exists=True, dir_okay=False), help="PEM certificate")
def extract_key_command(cert_path: str) -> None:
    """Print the public key embedded in a PEM certificate."""
    try:
        der = extract_public_key_from_pem_cert(_read_bytes(cert_path))
    except CosignTrustError as e:
        _fail(e)

    pem = asn1_pem.armor("PUBLIC KEY", der)
    click.echo(pem.decode("ascii"), nl=False)


@cli.command("identity")
@click.option("--cert", "cert_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Signing certificate (PEM or DER)")
def identity_command(cert_path: str) -> None:
    """Print the signer identity bound to a certificate as JSON."""
    try:
        identity = extract_signer_identity(load_certificate(_read_bytes(cert_path)))
    except CosignTrustError as e:
        _fail(e)

    click.echo(json.dumps(identity.to_dict(), indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
