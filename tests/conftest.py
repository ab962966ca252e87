"""Pytest configuration and shared fixtures for tuic-server tests."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, NamedTuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("config", "marks tests as configuration tests"),
        ("security", "marks tests as certificate/TLS tests"),
        ("transport", "marks tests as transport parameter tests"),
        ("cli", "marks tests as CLI tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


def generate_key() -> ec.EllipticCurvePrivateKey:
    """Generate a P-256 private key."""
    return ec.generate_private_key(ec.SECP256R1())


def generate_certificate(
    private_key,
    common_name: str = "localhost",
    is_ca: bool = False,
    issuer_key=None,
    issuer_name: str | None = None,
) -> x509.Certificate:
    """Build a certificate for ``private_key``, self-signed unless an issuer is given."""
    signing_key = issuer_key or private_key
    # EdDSA signs without a separate digest
    algorithm = (
        None
        if isinstance(signing_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey))
        else hashes.SHA256()
    )
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer = x509.Name(
        [x509.NameAttribute(NameOID.COMMON_NAME, issuer_name or common_name)]
    )
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName("localhost")]), critical=False
        )
        .sign(signing_key, algorithm)
    )


def key_to_pem(private_key) -> bytes:
    """Serialize a key as unencrypted PKCS#8 PEM."""
    return private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())


class TlsFiles(NamedTuple):
    """Paths and objects of a generated certificate/key pair."""

    certificate: str
    private_key: str
    certificate_obj: x509.Certificate
    private_key_obj: Any


@pytest.fixture
def tls_files(tmp_path: Path) -> TlsFiles:
    """Write a self-signed end-entity certificate and its key to disk."""
    key = generate_key()
    cert = generate_certificate(key)
    cert_path = tmp_path / "cert.pem"
    key_path = tmp_path / "key.pem"
    cert_path.write_bytes(cert.public_bytes(Encoding.PEM))
    key_path.write_bytes(key_to_pem(key))
    return TlsFiles(str(cert_path), str(key_path), cert, key)


@pytest.fixture
def write_config(tmp_path: Path):
    """Return a helper writing a JSON config file and returning its path."""

    def _write(data: dict[str, Any] | str, name: str = "config.json") -> str:
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


def required_args(
    port: str = "443",
    token: str = "secret",
    certificate: str = "cert.pem",
    private_key: str = "key.pem",
) -> list[str]:
    """Command line supplying all four required options."""
    return [
        "--port",
        port,
        "--token",
        token,
        "--certificate",
        certificate,
        "--private-key",
        private_key,
    ]
