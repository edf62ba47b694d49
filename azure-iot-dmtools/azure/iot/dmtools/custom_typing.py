# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
from typing import Union, Dict, List, Tuple
from typing_extensions import TypedDict


# typing does not support recursion, so we must use forward references here (PEP484)
JSONSerializable = Union[
    Dict[str, "JSONSerializable"],
    List["JSONSerializable"],
    Tuple["JSONSerializable", ...],
    str,
    int,
    float,
    bool,
    None,
]


Twin = Dict[str, JSONSerializable]
TwinPatch = Dict[str, JSONSerializable]


class DirectMethodParameters(TypedDict):
    methodName: str
    payload: JSONSerializable
    connectTimeoutInSeconds: int
    responseTimeoutInSeconds: int


class DirectMethodResponse(TypedDict):
    status: int
    payload: JSONSerializable
