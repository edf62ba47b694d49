# --------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import aiohttp
import asyncio
import json
import logging
import urllib.parse
from typing import Dict, Optional, cast
from .custom_typing import Twin, TwinPatch, DirectMethodParameters, DirectMethodResponse
from .device_registry import DeviceRegistry
from .exceptions import (
    IoTHubError,
    TwinConflictError,
    DeviceNotFoundError,
    DeviceUnreachableError,
    RemoteUnavailableError,
)
from . import config, constant, user_agent
from . import http_path_iothub as http_path

logger = logging.getLogger(__name__)

# Header Definitions
HEADER_AUTHORIZATION = "Authorization"
HEADER_IF_MATCH = "If-Match"
HEADER_USER_AGENT = "User-Agent"

# Query parameter definitions
PARAM_API_VERSION = "api-version"

# IoT Hub error codes that indicate a device could not be reached by a direct method
DEVICE_NOT_ONLINE_ERROR_CODES = ["DeviceNotOnline", "404103"]


# NOTE: aiohttp 3.x is bugged on Windows on Python 3.8.x - 3.10.6
# If running the application using asyncio.run(), there will be an issue with the Event Loop
# raising a spurious RuntimeError on application exit. Use loop.run_until_complete() in
# applications that must run there.
# See: https://github.com/aio-libs/aiohttp/issues/4324


class IoTHubHTTPClient(DeviceRegistry):
    """DeviceRegistry implementation that uses the IoT Hub service REST API"""

    def __init__(self, client_config: config.ServiceClientConfig) -> None:
        """Instantiate the client

        :param client_config: The config object for the client
        :type client_config: :class:`ServiceClientConfig`
        """
        self._user_agent_string = user_agent.get_iothub_user_agent() + client_config.product_info
        self._session = _create_client_session(client_config.hostname, client_config.http_timeout)
        self._ssl_context = client_config.ssl_context
        self._sastoken = client_config.sastoken

    async def shutdown(self) -> None:
        """Shut down the client

        Invoke only when complete finished with the client for graceful exit.
        """
        await self._session.close()
        # Wait 250ms for the underlying SSL connections to close
        # See: https://docs.aiohttp.org/en/stable/client_advanced.html#graceful-shutdown
        await asyncio.sleep(0.25)

    async def get_twin(self, *, device_id: str) -> Twin:
        """Retrieve the full twin of a device

        :param str device_id: The target device ID

        :returns: The twin document
        :rtype: dict

        :raises: :class:`DeviceNotFoundError` if the device does not exist
        :raises: :class:`IoTHubError` if IoT Hub responds with failure
        :raises: :class:`RemoteUnavailableError` if IoT Hub cannot be reached
        """
        path = http_path.get_twin_path(device_id)
        query_params = {PARAM_API_VERSION: constant.IOTHUB_API_VERSION}
        headers = self._get_headers()

        logger.debug("Sending twin request for {device_id}".format(device_id=device_id))
        try:
            async with self._session.get(
                url=path,
                params=query_params,
                headers=headers,
                ssl=self._ssl_context,
            ) as response:

                if response.status >= 300:
                    logger.error("Received failure response from IoTHub for twin request")
                    raise await _create_error_from_response(response, "twin request")
                else:
                    logger.debug("Successfully received response from IoTHub for twin request")
                    twin = cast(Twin, await _get_json_body(response, "twin request"))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteUnavailableError("Unable to reach IoTHub for twin request") from e

        return twin

    async def update_twin(self, *, device_id: str, twin_patch: TwinPatch, etag: str) -> Twin:
        """Patch the twin of a device, if the twin has not changed since `etag` was read

        :param str device_id: The target device ID
        :param dict twin_patch: The patch to apply
        :param str etag: The twin ETag the patch is conditional on

        :returns: The updated twin document
        :rtype: dict

        :raises: :class:`TwinConflictError` if the twin ETag no longer matches
        :raises: :class:`DeviceNotFoundError` if the device does not exist
        :raises: :class:`IoTHubError` if IoT Hub responds with any other failure
        :raises: :class:`RemoteUnavailableError` if IoT Hub cannot be reached
        """
        path = http_path.get_twin_path(device_id)
        query_params = {PARAM_API_VERSION: constant.IOTHUB_API_VERSION}
        headers = self._get_headers()
        headers[HEADER_IF_MATCH] = _ensure_quoted(etag)

        logger.debug("Sending twin patch for {device_id}".format(device_id=device_id))
        try:
            async with self._session.patch(
                url=path,
                json=twin_patch,
                params=query_params,
                headers=headers,
                ssl=self._ssl_context,
            ) as response:

                if response.status >= 300:
                    logger.error("Received failure response from IoTHub for twin patch")
                    raise await _create_error_from_response(response, "twin patch")
                else:
                    logger.debug("Successfully received response from IoTHub for twin patch")
                    twin = cast(Twin, await _get_json_body(response, "twin patch"))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteUnavailableError("Unable to reach IoTHub for twin patch") from e

        return twin

    async def invoke_direct_method(
        self, *, device_id: str, method_params: DirectMethodParameters, timeout: float
    ) -> DirectMethodResponse:
        """Send a request to invoke a direct method on a target device

        :param str device_id: The target device ID
        :param dict method_params: The parameters for the direct method invocation
        :param float timeout: Total time to wait for the HTTP response, in seconds

        :returns: A dictionary containing a status and payload reported by the target device
        :rtype: dict

        :raises: :class:`DeviceUnreachableError` if the device is offline or does not answer
            in time
        :raises: :class:`DeviceNotFoundError` if the device does not exist
        :raises: :class:`IoTHubError` if IoT Hub responds with any other failure
        :raises: :class:`RemoteUnavailableError` if IoT Hub cannot be reached
        """
        path = http_path.get_direct_method_invoke_path(device_id)
        query_params = {PARAM_API_VERSION: constant.IOTHUB_API_VERSION}
        headers = self._get_headers()

        logger.debug(
            "Sending direct method invocation request to {device_id}".format(device_id=device_id)
        )
        try:
            async with self._session.post(
                url=path,
                json=method_params,
                params=query_params,
                headers=headers,
                ssl=self._ssl_context,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:

                if response.status >= 300:
                    logger.error(
                        "Received failure response from IoTHub for direct method invocation"
                    )
                    raise await _create_error_from_response(
                        response, "direct method invocation", is_method=True
                    )
                else:
                    logger.debug(
                        "Successfully received response from IoTHub for direct method invocation"
                    )
                    dm_response = cast(
                        DirectMethodResponse,
                        await _get_json_body(response, "direct method invocation"),
                    )
        except asyncio.TimeoutError as e:
            # NOTE: Check before aiohttp.ClientError, since some aiohttp timeout errors are both
            raise DeviceUnreachableError(
                "Direct method invocation timed out after {} seconds".format(timeout)
            ) from e
        except aiohttp.ClientError as e:
            raise RemoteUnavailableError(
                "Unable to reach IoTHub for direct method invocation"
            ) from e

        return dm_response

    def _get_headers(self) -> Dict[str, str]:
        # NOTE: Other headers are auto-generated by aiohttp
        headers = {HEADER_USER_AGENT: urllib.parse.quote_plus(self._user_agent_string)}
        # If using SAS auth, pass the auth header
        if self._sastoken:
            headers[HEADER_AUTHORIZATION] = str(self._sastoken)
        return headers


def _ensure_quoted(etag: str) -> str:
    if len(etag) > 1 and etag[0] == '"' and etag[-1] == '"':
        return etag
    return '"' + etag + '"'


async def _get_json_body(response: aiohttp.ClientResponse, operation: str):
    """Return the parsed JSON body of a successful response"""
    try:
        # IoT Hub does not always label JSON bodies as such, so don't check the content type
        return await response.json(content_type=None)
    except ValueError as e:
        raise IoTHubError(
            "IoTHub responded to {operation} with an unparsable body".format(operation=operation),
            status=response.status,
        ) from e


async def _create_error_from_response(
    response: aiohttp.ClientResponse, operation: str, is_method: bool = False
) -> Exception:
    """Return the exception that corresponds to a failed IoT Hub response"""
    detail = _extract_error_message(await response.text())
    message = "IoTHub responded to {operation} with a failed status ({status}) - {reason}".format(
        operation=operation, status=response.status, reason=detail or response.reason
    )
    if response.status == 412:
        return TwinConflictError(message, status=response.status)
    elif response.status == 401:
        return RemoteUnavailableError(message)
    elif response.status == 404:
        if is_method and any(code in detail for code in DEVICE_NOT_ONLINE_ERROR_CODES):
            return DeviceUnreachableError(message, status=response.status)
        return DeviceNotFoundError(message, status=response.status)
    elif response.status == 504 and is_method:
        return DeviceUnreachableError(message, status=response.status)
    else:
        return IoTHubError(message, status=response.status)


def _extract_error_message(body: str) -> str:
    """Return the Message (or ExceptionMessage) of an IoT Hub error body, else the raw body"""
    if not body:
        return ""
    try:
        error_info = json.loads(body)
    except ValueError:
        return body
    if isinstance(error_info, dict):
        message = (
            error_info.get("Message")
            or error_info.get("message")
            or error_info.get("ExceptionMessage")
        )
        return str(message or body)
    return body


def _create_client_session(hostname: str, http_timeout: Optional[int]) -> aiohttp.ClientSession:
    """Create and return a aiohttp ClientSession object"""
    base_url = "https://{hostname}".format(hostname=hostname)
    timeout = aiohttp.ClientTimeout(total=http_timeout)
    session = aiohttp.ClientSession(base_url=base_url, timeout=timeout)
    logger.debug(
        "Creating HTTP Session for {url} with timeout of {timeout}".format(
            url=base_url, timeout=timeout.total
        )
    )
    return session
