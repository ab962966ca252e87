"""Certificate chain and private key loading.

Both loaders accept PEM and fall back to DER. They raise :class:`OSError` when
the file cannot be read and :class:`ValueError` when its content cannot be
decoded; callers attach the path.
"""

from __future__ import annotations

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_pem_private_key,
)

from tuic_server.utils.logging_config import get_logger

logger = get_logger(__name__)

PEM_MARKER = b"-----BEGIN"


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def load_certificates(path: str) -> list[x509.Certificate]:
    """Load an end-entity certificate followed by its intermediates.

    Raises:
        OSError: If the file cannot be read
        ValueError: If no certificate can be decoded from it

    """
    data = _read(path)

    if PEM_MARKER in data:
        certificates = x509.load_pem_x509_certificates(data)
    else:
        certificates = [x509.load_der_x509_certificate(data)]

    if not certificates:
        msg = "no certificates found"
        raise ValueError(msg)

    logger.debug("Loaded %d certificate(s) from %s", len(certificates), path)
    return certificates


def load_private_key(path: str) -> PrivateKeyTypes:
    """Load an unencrypted private key.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the key cannot be decoded, is encrypted, or uses an
            algorithm the backend does not support

    """
    data = _read(path)

    try:
        if PEM_MARKER in data:
            private_key = load_pem_private_key(data, password=None)
        else:
            private_key = load_der_private_key(data, password=None)
    except (TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(str(e)) from e

    logger.debug("Loaded private key from %s", path)
    return private_key
