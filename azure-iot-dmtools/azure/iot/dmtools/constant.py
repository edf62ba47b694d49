# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module defines constants for use across the azure-iot-dmtools package
"""

VERSION = "1.0.0"
IOTHUB_IDENTIFIER = "azure-iot-dmtools-py"
IOTHUB_API_VERSION = "2021-04-12"

# Direct method invocation
DEFAULT_DIRECT_METHOD_TIMEOUT = 30
DIRECT_METHOD_CONNECT_TIMEOUT = 0
# Seconds added to the response timeout to bound the local HTTP request
DIRECT_METHOD_TIMEOUT_MARGIN = 5
DIRECT_METHOD_SUCCESS_CODE = 0
DIRECT_METHOD_FAILURE_CODE = -1

# Environment
CONNECTION_STRING_ENV_VAR = "IOTHUB_CONNECTION_STRING"
