# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the DeviceManagementClient, a facade over IoT Hub device twin and
direct method operations.
"""
import contextlib
import json
import logging
from typing import Optional, AsyncGenerator, Type
from types import TracebackType

from . import connection_string as cs
from . import sastoken as st
from . import signing_mechanism as sm
from . import config, constant
from .certificate import Certificate
from .custom_typing import JSONSerializable, Twin, DirectMethodParameters
from .device_registry import DeviceRegistry
from .exceptions import IoTHubError, MalformedRequestError, RemoteUnavailableError
from .iothub_http_client import IoTHubHTTPClient
from .models import DeviceData, DesiredPropertyPatch, DirectMethodResult

logger = logging.getLogger(__name__)


class DeviceManagementClient:
    """Reads device twins, updates desired properties and invokes direct methods.

    Every operation opens its own connection to IoT Hub and closes it when done, so
    operations may be run concurrently from multiple tasks.
    """

    def __init__(
        self,
        connection_string: str,
        *,
        server_verification_cert: Optional[Certificate] = None,
        sastoken_ttl: int = 3600,
        **kwargs,
    ) -> None:
        """
        The connection string is not validated here. An invalid one will cause the first
        operation to raise.

        :param str connection_string: The IoT Hub service connection string
        :param server_verification_cert: An additional certificate to trust when validating
            the IoT Hub server (optional)
        :type server_verification_cert: :class:`Certificate`
        :param int sastoken_ttl: Time-to-live (in seconds) for generated SAS tokens.
            Default is 3600 seconds (1 hour).

        :keyword str product_info: Arbitrary product information which will be included in the
            User-Agent string
        :keyword int http_timeout: Total time allowed for a twin request, in seconds.
            Default is 10 seconds.

        :raises: TypeError if an unsupported keyword argument is provided
        :raises: ValueError if sastoken_ttl is not greater than 0
        """
        _validate_kwargs(**kwargs)
        self._connection_string = connection_string
        self._server_verification_cert = server_verification_cert
        self._sastoken_ttl = _sanitize_sastoken_ttl(sastoken_ttl)
        self._client_kwargs = kwargs

    @classmethod
    def from_connection_string(cls, connection_string: str, **kwargs) -> "DeviceManagementClient":
        """Create a DeviceManagementClient from an IoT Hub service connection string.

        :param str connection_string: The IoT Hub service connection string

        See the initializer for the supported keyword arguments.
        """
        return cls(connection_string, **kwargs)

    async def __aenter__(self) -> "DeviceManagementClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.shutdown()

    async def shutdown(self) -> None:
        """Release any resources held by the client.

        Connections are closed at the end of each operation, so there is nothing
        outstanding. Provided for symmetry with the async context manager.
        """
        logger.debug("DeviceManagementClient shut down")

    async def update_desired_property(
        self, device_id: str, property_name: str, value: JSONSerializable
    ) -> Twin:
        """Set a single property on a device twin, conditional on the twin version.

        The twin is read to obtain its ETag, and the patch
        {"properties": {<property_name>: <value>}} is then written with that ETag.
        If the twin changes in between, the write is rejected.

        :param str device_id: The target device ID
        :param str property_name: The property name
        :param value: The property value. A str is a pre-serialized JSON fragment,
            e.g. '"red"' for the string red. Anything else must be JSON serializable.

        :returns: The updated twin as reported by IoT Hub
        :rtype: dict

        :raises: MalformedRequestError if the value is not valid JSON
        :raises: TwinConflictError if the twin was modified between the read and the write
        :raises: DeviceNotFoundError if the device does not exist
        :raises: IoTHubError if IoT Hub responds with any other failure
        :raises: RemoteUnavailableError if IoT Hub cannot be reached
        :raises: ValueError if the connection string is invalid
        """
        patch = DesiredPropertyPatch(property_name, value)
        logger.debug("updateJson: {}".format(patch.to_json()))

        async with self._open_registry() as registry:
            twin = await registry.get_twin(device_id=device_id)
            etag = twin.get("etag") if twin else None
            if not etag:
                raise IoTHubError(
                    "Twin read for {} did not return an ETag; update not attempted".format(
                        device_id
                    )
                )
            logger.debug("Updating twin for {} at version {}".format(device_id, etag))
            return await registry.update_twin(
                device_id=device_id, twin_patch=patch.to_twin_patch(), etag=etag
            )

    async def invoke_direct_method(
        self,
        device_id: str,
        method_name: str,
        payload_json: Optional[str] = None,
        *,
        timeout: int = constant.DEFAULT_DIRECT_METHOD_TIMEOUT,
    ) -> DirectMethodResult:
        """Invoke a direct method on a device and wait for its response.

        The call returns, or raises, within `timeout` seconds plus a small margin. To abandon
        it earlier, cancel the awaiting task.

        :param str device_id: The target device ID
        :param str method_name: The name of the method
        :param str payload_json: The method payload, as JSON text. None for no payload.
        :param int timeout: Seconds the device has to respond. Default is 30.

        :returns: The status and payload returned by the device
        :rtype: :class:`DirectMethodResult`

        :raises: MalformedRequestError if the payload is not valid JSON
        :raises: DeviceUnreachableError if the device is offline or does not respond in time
        :raises: DeviceNotFoundError if the device does not exist
        :raises: IoTHubError if IoT Hub responds with any other failure
        :raises: RemoteUnavailableError if IoT Hub cannot be reached
        :raises: ValueError if the connection string, method name or timeout is invalid
        """
        if not method_name:
            raise ValueError("Method name must be a non-empty string")
        if timeout <= 0:
            raise ValueError("'timeout' must be greater than 0")
        payload = _parse_payload(payload_json)
        method_params: DirectMethodParameters = {
            "methodName": method_name,
            "payload": payload,
            "connectTimeoutInSeconds": constant.DIRECT_METHOD_CONNECT_TIMEOUT,
            "responseTimeoutInSeconds": timeout,
        }

        async with self._open_registry() as registry:
            response = await registry.invoke_direct_method(
                device_id=device_id,
                method_params=method_params,
                timeout=timeout + constant.DIRECT_METHOD_TIMEOUT_MARGIN,
            )
        return DirectMethodResult.from_response(response)

    async def get_device_data(self, device_id: str) -> DeviceData:
        """Read a device twin and return it as four JSON text views.

        :param str device_id: The target device ID

        :returns: The twin, tags, reported properties and desired properties. Views of null
            sections are empty strings.
        :rtype: :class:`DeviceData`

        :raises: DeviceNotFoundError if the device does not exist
        :raises: IoTHubError if IoT Hub responds with any other failure
        :raises: RemoteUnavailableError if IoT Hub cannot be reached
        :raises: ValueError if the connection string is invalid
        """
        twin = await self.get_twin(device_id)
        return DeviceData.from_twin(twin)

    async def get_twin(self, device_id: str) -> Twin:
        """Read the full twin document of a device.

        :param str device_id: The target device ID

        :returns: The twin document, or None if IoT Hub returned a null twin
        :rtype: dict

        Raises the same errors as .get_device_data()
        """
        async with self._open_registry() as registry:
            return await registry.get_twin(device_id=device_id)

    @contextlib.asynccontextmanager
    async def _open_registry(self) -> AsyncGenerator[DeviceRegistry, None]:
        """Open a DeviceRegistry for the duration of one operation"""
        connection_string = cs.ConnectionString(self._connection_string)
        hostname = connection_string[cs.HOST_NAME]
        # A registry lives for one operation, so one token is generated for it and never renewed
        try:
            sastoken = await self._create_sastoken_generator(connection_string).generate_sastoken()
        except st.SasTokenError as e:
            raise RemoteUnavailableError("Unable to authenticate with IoTHub") from e
        if sastoken.is_expired():
            raise RemoteUnavailableError("Unable to authenticate with IoTHub: SAS Token expired")

        server_verification_cert = (
            self._server_verification_cert.pem if self._server_verification_cert else None
        )
        client_config = config.ServiceClientConfig(
            hostname=hostname,
            ssl_context=config.default_ssl_context(server_verification_cert),
            sastoken=sastoken,
            **self._client_kwargs,
        )
        registry = self._create_registry(client_config)
        try:
            yield registry
        finally:
            await registry.shutdown()

    def _create_registry(self, client_config: config.ServiceClientConfig) -> DeviceRegistry:
        return IoTHubHTTPClient(client_config)

    def _create_sastoken_generator(
        self, connection_string: cs.ConnectionString
    ) -> st.SasTokenGenerator:
        if cs.SHARED_ACCESS_SIGNATURE in connection_string:
            sastoken_str = connection_string[cs.SHARED_ACCESS_SIGNATURE]
            return st.ExternalSasTokenGenerator(lambda: sastoken_str)
        signing_mechanism = sm.SymmetricKeySigningMechanism(connection_string[cs.SHARED_ACCESS_KEY])
        return st.SasTokenGenerator(
            signing_mechanism=signing_mechanism,
            uri=connection_string[cs.HOST_NAME],
            key_name=connection_string[cs.SHARED_ACCESS_KEY_NAME],
            ttl=self._sastoken_ttl,
        )


def _parse_payload(payload_json: Optional[str]) -> JSONSerializable:
    if payload_json is None:
        return None
    try:
        return json.loads(payload_json)
    except (TypeError, ValueError) as e:
        raise MalformedRequestError("Direct method payload is not valid JSON") from e


def _sanitize_sastoken_ttl(sastoken_ttl):
    try:
        sastoken_ttl = int(sastoken_ttl)
    except (ValueError, TypeError):
        raise TypeError("Invalid type for 'sastoken_ttl'. Must be a numeric value.")

    if sastoken_ttl <= 0:
        raise ValueError("'sastoken_ttl' must be greater than 0")

    return sastoken_ttl


def _validate_kwargs(**kwargs) -> None:
    """Helper function to validate user provided kwargs.
    Raises TypeError if an invalid option has been provided"""
    valid_kwargs = [
        "product_info",
        "http_timeout",
    ]

    for kwarg in kwargs:
        if kwarg not in valid_kwargs:
            # NOTE: TypeError is the conventional error that is returned when an invalid kwarg is
            # supplied. It feels like it should be a ValueError, but it's not.
            raise TypeError("Unsupported keyword argument: '{}'".format(kwarg))
