# --------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module loads X509 certificates from disk into immutable handles that can later be
used when establishing a secured connection.
"""

import datetime
import logging
import os
from typing import Optional, Union
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from .exceptions import CertificateError, CertificateNotFoundError, CertificateMalformedError

logger = logging.getLogger(__name__)

PEM_MARKER = b"-----BEGIN CERTIFICATE-----"


class Certificate(object):
    """
    An immutable handle to a parsed X509 certificate
    """

    def __init__(self, cert: x509.Certificate, path: Optional[str] = None) -> None:
        """
        Initializer for Certificate. Use load_certificate() or Certificate.from_bytes() instead
        of calling this directly.

        :param cert: The parsed certificate
        :type cert: :class:`cryptography.x509.Certificate`
        :param str path: The file path the certificate was loaded from (optional)
        """
        self._cert = cert
        self._path = path

    def __repr__(self) -> str:
        return "Certificate(subject={!r}, thumbprint={!r})".format(self.subject, self.thumbprint)

    @classmethod
    def from_bytes(cls, data: bytes, path: Optional[str] = None) -> "Certificate":
        """Parse PEM or DER encoded certificate data

        :param bytes data: The encoded certificate
        :param str path: The file path the data was read from (optional)

        :raises: CertificateMalformedError if the data is not a valid certificate
        """
        try:
            if PEM_MARKER in data:
                cert = x509.load_pem_x509_certificate(data)
            else:
                cert = x509.load_der_x509_certificate(data)
        except ValueError as e:
            raise CertificateMalformedError(
                "Unable to parse certificate{}".format(" at " + path if path else "")
            ) from e
        return cls(cert, path)

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def x509(self) -> x509.Certificate:
        return self._cert

    @property
    def pem(self) -> str:
        return self._cert.public_bytes(serialization.Encoding.PEM).decode("ascii")

    @property
    def subject(self) -> str:
        return self._cert.subject.rfc4514_string()

    @property
    def issuer(self) -> str:
        return self._cert.issuer.rfc4514_string()

    @property
    def thumbprint(self) -> str:
        """SHA-1 thumbprint, as shown by the Azure portal"""
        return self._cert.fingerprint(hashes.SHA1()).hex().upper()

    @property
    def sha256_thumbprint(self) -> str:
        return self._cert.fingerprint(hashes.SHA256()).hex().upper()

    @property
    def not_valid_before(self) -> datetime.datetime:
        return self._cert.not_valid_before_utc

    @property
    def not_valid_after(self) -> datetime.datetime:
        return self._cert.not_valid_after_utc


def load_certificate(path: Union[str, "os.PathLike[str]"]) -> Certificate:
    """Read and parse the certificate file at the given path.

    The file is re-read and re-parsed on every call.

    :param path: Absolute or relative path to a PEM or DER encoded certificate file

    :raises: CertificateNotFoundError if there is no file at the path
    :raises: CertificateError if the file cannot be read
    :raises: CertificateMalformedError if the file cannot be parsed as a certificate
    """
    path = os.fspath(path)
    if not os.path.isfile(path):
        raise CertificateNotFoundError("Certificate file not found: {}".format(path))

    logger.debug("Loading certificate from {}".format(path))
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except FileNotFoundError as e:
        raise CertificateNotFoundError("Certificate file not found: {}".format(path)) from e
    except OSError as e:
        raise CertificateError("Unable to read certificate file: {}".format(path)) from e
    return Certificate.from_bytes(data, path)
