""" Azure IoT Device Management Tools

This library provides a client for reading device twins, updating desired properties and
invoking direct methods through the Azure IoT Hub service, along with a certificate loader.
"""

from .device_management_client import DeviceManagementClient  # noqa: F401
from .certificate import Certificate, load_certificate  # noqa: F401
from .models import DirectMethodResult, DeviceData, DesiredPropertyPatch  # noqa: F401
from .exceptions import (  # noqa: F401
    DeviceManagementError,
    CertificateError,
    CertificateNotFoundError,
    CertificateMalformedError,
    MalformedRequestError,
    RemoteUnavailableError,
    IoTHubError,
    TwinConflictError,
    DeviceNotFoundError,
    DeviceUnreachableError,
)
from .constant import (  # noqa: F401
    VERSION,
    DIRECT_METHOD_SUCCESS_CODE,
    DIRECT_METHOD_FAILURE_CODE,
)
