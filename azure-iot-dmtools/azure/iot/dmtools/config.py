# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import ssl
from typing import Optional
from .sastoken import SasToken

logger = logging.getLogger(__name__)

# Total time allowed for a single twin request, in seconds
DEFAULT_HTTP_TIMEOUT = 10


class ServiceClientConfig:
    """
    Class for storing all configurations/options used by the IoT Hub service HTTP client.
    """

    def __init__(
        self,
        *,
        hostname: str,
        ssl_context: ssl.SSLContext,
        sastoken: Optional[SasToken] = None,
        product_info: str = "",
        http_timeout: int = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        """Initializer for ServiceClientConfig

        :param str hostname: The hostname of the IoT Hub being connected to
        :param ssl_context: SSLContext to use with the client
        :type ssl_context: :class:`ssl.SSLContext`
        :param sastoken: The SasToken to authenticate requests with
        :type sastoken: :class:`SasToken`
        :param str product_info: A custom identification string appended to the User-Agent
        :param int http_timeout: Total time allowed for a twin request, in seconds

        :raises: ValueError if an invalid timeout is provided
        :raises: TypeError if a non-numeric timeout is provided
        """
        # Network
        self.hostname = hostname
        self.http_timeout = _sanitize_http_timeout(http_timeout)

        # Auth
        self.sastoken = sastoken
        self.ssl_context = ssl_context

        self.product_info = product_info


def default_ssl_context(server_verification_cert: Optional[str] = None) -> ssl.SSLContext:
    """Return a default SSLContext

    :param str server_verification_cert: PEM text of an additional certificate to trust
        when validating the server (e.g. a gateway with a private CA). Optional.
    """
    ssl_context = ssl.SSLContext(protocol=ssl.PROTOCOL_TLS_CLIENT)
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.check_hostname = True
    ssl_context.load_default_certs()
    if server_verification_cert:
        logger.debug("Trusting provided server verification certificate")
        ssl_context.load_verify_locations(cadata=server_verification_cert)
    return ssl_context


# Sanitization #


def _sanitize_http_timeout(http_timeout):
    try:
        http_timeout = int(http_timeout)
    except (ValueError, TypeError):
        raise TypeError("Invalid type for 'http_timeout'. Must be a numeric value.")

    if http_timeout <= 0:
        raise ValueError("'http_timeout' must be greater than 0")

    return http_timeout
