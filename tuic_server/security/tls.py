"""Server-side TLS configuration for QUIC connections.

:class:`ServerConfig` binds the loaded certificate chain and private key to
the transport parameters. Material is checked when the config is built, so a
bad key or certificate surfaces at startup instead of on the first handshake.
"""

from __future__ import annotations

import os
import ssl
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from tuic_server.transport.congestion import TransportConfig
from tuic_server.utils.exceptions import TlsConfigError
from tuic_server.utils.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
)


def _public_key_der(key) -> bytes:
    return key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)


def _is_ca(certificate: x509.Certificate) -> bool:
    try:
        constraints = certificate.extensions.get_extension_for_class(
            x509.BasicConstraints
        )
    except x509.ExtensionNotFound:
        return False
    return constraints.value.ca


@dataclass(frozen=True)
class ServerConfig:
    """TLS material plus transport parameters for the QUIC endpoint."""

    certificate_chain: tuple[x509.Certificate, ...]
    private_key: PrivateKeyTypes = field(repr=False)
    transport: TransportConfig = field(default_factory=TransportConfig)

    @classmethod
    def with_single_cert(
        cls,
        certificate_chain: Sequence[x509.Certificate],
        private_key: PrivateKeyTypes,
        transport: TransportConfig | None = None,
    ) -> ServerConfig:
        """Build a config serving one certificate chain.

        The first certificate is the end-entity certificate; the rest are
        intermediates. Without ``transport`` the default transport
        parameters apply.

        Raises:
            TlsConfigError: If the chain is empty, the key algorithm is not
                supported, the key does not belong to the end-entity
                certificate, or the end-entity certificate is a CA

        """
        if not certificate_chain:
            msg = "certificate chain is empty"
            raise TlsConfigError(msg)

        if not isinstance(private_key, SUPPORTED_KEY_TYPES):
            msg = f"unsupported private key type: {type(private_key).__name__}"
            raise TlsConfigError(msg)

        end_entity = certificate_chain[0]
        if _public_key_der(end_entity.public_key()) != _public_key_der(
            private_key.public_key()
        ):
            msg = "private key does not match the end-entity certificate"
            raise TlsConfigError(msg)

        if _is_ca(end_entity):
            msg = "end-entity certificate required, got a CA certificate"
            raise TlsConfigError(msg)

        logger.debug(
            "TLS certificate subject: %s", end_entity.subject.rfc4514_string()
        )
        return cls(
            certificate_chain=tuple(certificate_chain),
            private_key=private_key,
            transport=transport if transport is not None else TransportConfig(),
        )

    def certificate_chain_pem(self) -> bytes:
        """Serialize the chain as concatenated PEM blocks."""
        return b"".join(cert.public_bytes(Encoding.PEM) for cert in self.certificate_chain)

    def private_key_pem(self) -> bytes:
        """Serialize the private key as unencrypted PKCS#8 PEM."""
        return self.private_key.private_bytes(
            encoding=Encoding.PEM,
            format=PrivateFormat.PKCS8,
            encryption_algorithm=NoEncryption(),
        )

    def create_ssl_context(self) -> ssl.SSLContext:
        """Create a TLS 1.3 server context bound to this chain and key.

        Raises:
            TlsConfigError: If OpenSSL rejects the material

        """
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.minimum_version = ssl.TLSVersion.TLSv1_3

        # load_cert_chain only reads from the filesystem
        with tempfile.TemporaryDirectory() as tmpdir:
            cert_file = os.path.join(tmpdir, "chain.pem")
            key_file = os.path.join(tmpdir, "key.pem")
            with open(cert_file, "wb") as f:
                f.write(self.certificate_chain_pem())
            with open(os.open(key_file, os.O_WRONLY | os.O_CREAT, 0o600), "wb") as f:
                f.write(self.private_key_pem())

            try:
                context.load_cert_chain(cert_file, key_file)
            except ssl.SSLError as e:
                raise TlsConfigError(str(e)) from e

        return context
