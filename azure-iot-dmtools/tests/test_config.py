# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import pytest
import ssl
from azure.iot.dmtools.config import ServiceClientConfig, default_ssl_context, DEFAULT_HTTP_TIMEOUT
from azure.iot.dmtools.certificate import Certificate

FAKE_HOSTNAME = "fake.azure-devices.net"


@pytest.mark.describe("ServiceClientConfig")
class TestServiceClientConfig:
    @pytest.mark.it("Stores the provided values as attributes")
    def test_attributes(self, mocker):
        ssl_context = mocker.MagicMock(spec=ssl.SSLContext)
        sastoken = mocker.MagicMock()
        client_config = ServiceClientConfig(
            hostname=FAKE_HOSTNAME,
            ssl_context=ssl_context,
            sastoken=sastoken,
            product_info="my-product",
            http_timeout=20,
        )
        assert client_config.hostname == FAKE_HOSTNAME
        assert client_config.ssl_context is ssl_context
        assert client_config.sastoken is sastoken
        assert client_config.product_info == "my-product"
        assert client_config.http_timeout == 20

    @pytest.mark.it("Uses defaults for the optional values")
    def test_defaults(self, mocker):
        client_config = ServiceClientConfig(
            hostname=FAKE_HOSTNAME, ssl_context=mocker.MagicMock(spec=ssl.SSLContext)
        )
        assert client_config.sastoken is None
        assert client_config.product_info == ""
        assert client_config.http_timeout == DEFAULT_HTTP_TIMEOUT

    @pytest.mark.it("Raises ValueError if the HTTP timeout is not greater than 0")
    @pytest.mark.parametrize("http_timeout", [0, -1])
    def test_bad_timeout_value(self, mocker, http_timeout):
        with pytest.raises(ValueError):
            ServiceClientConfig(
                hostname=FAKE_HOSTNAME,
                ssl_context=mocker.MagicMock(spec=ssl.SSLContext),
                http_timeout=http_timeout,
            )

    @pytest.mark.it("Raises TypeError if the HTTP timeout is not numeric")
    @pytest.mark.parametrize("http_timeout", ["ten", None])
    def test_bad_timeout_type(self, mocker, http_timeout):
        with pytest.raises(TypeError):
            ServiceClientConfig(
                hostname=FAKE_HOSTNAME,
                ssl_context=mocker.MagicMock(spec=ssl.SSLContext),
                http_timeout=http_timeout,
            )


@pytest.mark.describe("default_ssl_context()")
class TestDefaultSSLContext:
    @pytest.mark.it("Returns a client SSLContext requiring TLS 1.2+ and server verification")
    def test_context(self):
        ctx = default_ssl_context()
        assert isinstance(ctx, ssl.SSLContext)
        assert ctx.minimum_version == ssl.TLSVersion.TLSv1_2
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True

    @pytest.mark.it("Trusts the provided server verification certificate")
    def test_server_verification_cert(self, x509_cert):
        ctx = default_ssl_context(Certificate(x509_cert).pem)
        subjects = [ca["subject"] for ca in ctx.get_ca_certs()]
        assert ((("commonName", "dmtools-test-ca"),),) in subjects
