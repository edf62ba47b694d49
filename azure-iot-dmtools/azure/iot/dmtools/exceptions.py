# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Define the user-facing exceptions of the azure-iot-dmtools package"""
from typing import Optional


class DeviceManagementError(Exception):
    """Base class for failures raised by this package"""

    pass


# Certificate Exceptions
class CertificateError(DeviceManagementError):
    """Represents a failure to load a certificate"""

    pass


class CertificateNotFoundError(CertificateError, FileNotFoundError):
    """The certificate file does not exist"""

    pass


class CertificateMalformedError(CertificateError):
    """The certificate file exists, but cannot be parsed as a certificate"""

    pass


# Request Exceptions
class MalformedRequestError(DeviceManagementError, ValueError):
    """A caller-supplied payload or property value is not valid JSON"""

    pass


# Transport Exceptions
class RemoteUnavailableError(DeviceManagementError):
    """IoT Hub could not be reached, or the request could not be authenticated.

    Covers connection, DNS and TLS failures as well as SAS Token generation failures.
    """

    pass


# Service Exceptions
class IoTHubError(DeviceManagementError):
    """Represents a failure reported by IoT Hub"""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TwinConflictError(IoTHubError):
    """The twin was changed by another writer since its ETag was read"""

    pass


class DeviceNotFoundError(IoTHubError):
    """The target device is not registered with IoT Hub"""

    pass


class DeviceUnreachableError(IoTHubError):
    """The device did not respond to a direct method within the timeout, or is offline"""

    pass
