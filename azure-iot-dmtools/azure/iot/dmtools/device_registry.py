# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Interface to the remote device registry used by the DeviceManagementClient"""
import abc
from .custom_typing import Twin, TwinPatch, DirectMethodParameters, DirectMethodResponse


class DeviceRegistry(abc.ABC):
    """The remote operations the device management tools rely on.

    Implementations own their transport. Callers must call .shutdown() when finished.
    """

    @abc.abstractmethod
    async def get_twin(self, *, device_id: str) -> Twin:
        """Read the full twin of a device"""
        pass

    @abc.abstractmethod
    async def update_twin(self, *, device_id: str, twin_patch: TwinPatch, etag: str) -> Twin:
        """Patch the twin of a device, only if its current version matches the etag"""
        pass

    @abc.abstractmethod
    async def invoke_direct_method(
        self, *, device_id: str, method_params: DirectMethodParameters, timeout: float
    ) -> DirectMethodResponse:
        """Invoke a direct method on a device, waiting at most `timeout` seconds"""
        pass

    @abc.abstractmethod
    async def shutdown(self) -> None:
        pass
