# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import datetime
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

"""
NOTE: Tests that need some kind of non-specific, arbitrary exception should use the
`arbitrary_exception` fixture. It is a subclass of Exception that is not defined anywhere else,
thus guaranteeing that it will be unexpected and unhandled except by broad all-encompassing
handling.
"""

FAKE_CERT_COMMON_NAME = "dmtools-test-ca"


@pytest.fixture
def arbitrary_exception():
    class ArbitraryException(Exception):
        pass

    e = ArbitraryException("arbitrary description")
    return e


@pytest.fixture(scope="session")
def x509_cert():
    """A self-signed CA certificate"""
    private_key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, FAKE_CERT_COMMON_NAME)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(private_key, hashes.SHA256())
    )
    return cert


@pytest.fixture
def pem_cert_file(tmp_path, x509_cert):
    path = tmp_path / "cert.pem"
    path.write_bytes(x509_cert.public_bytes(serialization.Encoding.PEM))
    return path


@pytest.fixture
def der_cert_file(tmp_path, x509_cert):
    path = tmp_path / "cert.der"
    path.write_bytes(x509_cert.public_bytes(serialization.Encoding.DER))
    return path
