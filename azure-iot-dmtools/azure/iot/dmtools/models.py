# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import json
from typing import Optional
from .custom_typing import JSONSerializable, Twin, TwinPatch, DirectMethodResponse
from .exceptions import MalformedRequestError
from . import constant


class DirectMethodResult:
    """The outcome of a direct method invocation.

    :ivar int status: The status code reported by the device's method handler, or
        DIRECT_METHOD_FAILURE_CODE if the invocation failed.
    :ivar str payload: The method response as JSON text, or an error message for
        failed invocations.
    """

    def __init__(self, status: int, payload: str = "") -> None:
        self._status = status
        self._payload = payload

    def __repr__(self) -> str:
        return "DirectMethodResult(status={status!r}, payload={payload!r})".format(
            status=self._status, payload=self._payload
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectMethodResult):
            return NotImplemented
        return (self._status, self._payload) == (other._status, other._payload)

    @property
    def status(self) -> int:
        return self._status

    @property
    def payload(self) -> str:
        return self._payload

    @property
    def is_failure(self) -> bool:
        return self._status == constant.DIRECT_METHOD_FAILURE_CODE

    @classmethod
    def from_response(cls, response: DirectMethodResponse) -> "DirectMethodResult":
        """Create a DirectMethodResult from the JSON body IoT Hub returns for an invocation"""
        return cls(status=int(response["status"]), payload=json.dumps(response.get("payload")))

    @classmethod
    def from_error(cls, error: BaseException) -> "DirectMethodResult":
        """Create a failed DirectMethodResult carrying the error's message as payload"""
        return cls(status=constant.DIRECT_METHOD_FAILURE_CODE, payload=str(error))


class DeviceData:
    """A snapshot of a device twin, as JSON text.

    All four views come from the same twin read. A view is an empty string if the twin
    (or that section of it) was null.

    :ivar str device_json: The whole twin document
    :ivar str tags_json: The twin tags
    :ivar str reported_properties_json: The reported properties
    :ivar str desired_properties_json: The desired properties
    """

    def __init__(
        self,
        device_json: str = "",
        tags_json: str = "",
        reported_properties_json: str = "",
        desired_properties_json: str = "",
    ) -> None:
        self._device_json = device_json
        self._tags_json = tags_json
        self._reported_properties_json = reported_properties_json
        self._desired_properties_json = desired_properties_json

    def __repr__(self) -> str:
        return "DeviceData(device_json={!r})".format(self._device_json)

    @property
    def device_json(self) -> str:
        return self._device_json

    @property
    def tags_json(self) -> str:
        return self._tags_json

    @property
    def reported_properties_json(self) -> str:
        return self._reported_properties_json

    @property
    def desired_properties_json(self) -> str:
        return self._desired_properties_json

    @classmethod
    def from_twin(cls, twin: Optional[Twin]) -> "DeviceData":
        """Create a DeviceData snapshot from a twin document (or None)"""
        if twin is None:
            return cls()
        properties = twin.get("properties") or {}
        return cls(
            device_json=_to_json_text(twin),
            tags_json=_to_json_text(twin.get("tags")),
            reported_properties_json=_to_json_text(properties.get("reported")),
            desired_properties_json=_to_json_text(properties.get("desired")),
        )


class DesiredPropertyPatch:
    """A single-property twin patch: {"properties": {<name>: <value>}}

    :ivar str name: The property name
    :ivar value: The property value
    """

    def __init__(self, name: str, value: JSONSerializable = None) -> None:
        """Initializer for DesiredPropertyPatch

        :param str name: The property name. Used as a JSON key; it is escaped on serialization.
        :param value: The property value. A str is treated as a pre-serialized JSON fragment
            (e.g. '"red"' or '{"interval": 5}'), anything else as a JSON compatible value.

        :raises: ValueError if the name is empty
        :raises: MalformedRequestError if a str value is not valid JSON, or the value is
            not JSON serializable
        """
        if not name:
            raise ValueError("Property name must be a non-empty string")
        self._name = name
        if isinstance(value, str):
            try:
                self._value = json.loads(value)
            except ValueError as e:
                raise MalformedRequestError(
                    "Value for property '{}' is not a valid JSON fragment".format(name)
                ) from e
        else:
            self._value = value
        # Fail fast on values that cannot be sent
        try:
            json.dumps(self._value)
        except (TypeError, ValueError) as e:
            raise MalformedRequestError(
                "Value for property '{}' is not JSON serializable".format(name)
            ) from e

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> JSONSerializable:
        return self._value

    def to_twin_patch(self) -> TwinPatch:
        return {"properties": {self._name: self._value}}

    def to_json(self) -> str:
        return json.dumps(self.to_twin_patch())


def _to_json_text(obj: JSONSerializable) -> str:
    if obj is None:
        return ""
    return json.dumps(obj)
