# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Relative paths of the IoT Hub service REST resources used by this package"""

import urllib.parse


def get_twin_path(device_id: str) -> str:
    """
    :return: The path for reading or patching a device twin. It is of the format
    /twins/uri_encode($device_id)
    """
    return "/twins/{device_id}".format(device_id=urllib.parse.quote(device_id, safe=""))


def get_direct_method_invoke_path(device_id: str) -> str:
    """
    :return: The path for invoking a direct method on a device. It is of the format
    /twins/uri_encode($device_id)/methods
    """
    return "/twins/{device_id}/methods".format(device_id=urllib.parse.quote(device_id, safe=""))
