# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains tools for working with Shared Access Signature (SAS) Tokens"""

import asyncio
import logging
import time
import urllib.parse
from typing import Dict, List, Optional, Union, Awaitable, Callable, cast
from .signing_mechanism import SigningMechanism

logger = logging.getLogger(__name__)

REQUIRED_SASTOKEN_FIELDS: List[str] = ["sr", "sig", "se"]
OPTIONAL_SASTOKEN_FIELDS: List[str] = ["skn"]
TOKEN_FORMAT: str = "SharedAccessSignature sr={resource}&sig={signature}&se={expiry}"
SERVICE_TOKEN_FORMAT: str = (
    "SharedAccessSignature sr={resource}&sig={signature}&se={expiry}&skn={key_name}"
)


class SasTokenError(Exception):
    """Error in SasToken"""

    pass


class SasToken:
    def __init__(self, sastoken_str: str) -> None:
        """Create a SasToken object from a SAS Token string
        :param str sastoken_str: The SAS Token string

        :raises: ValueError if SAS Token string is invalid
        """
        self._token_str: str = sastoken_str
        self._token_info: Dict[str, str] = _get_sastoken_info_from_string(sastoken_str)

    def __str__(self) -> str:
        return self._token_str

    def is_expired(self) -> bool:
        """Returns True if the token has expired"""
        return time.time() > self.expiry_time

    @property
    def expiry_time(self) -> float:
        # NOTE: Time is typically expressed in float in Python, even though a
        # SAS Token expiry time should be a whole number.
        return float(self._token_info["se"])

    @property
    def resource_uri(self) -> str:
        uri = self._token_info["sr"]
        return urllib.parse.unquote(uri)

    @property
    def signature(self) -> str:
        signature = self._token_info["sig"]
        return urllib.parse.unquote(signature)

    @property
    def key_name(self) -> Optional[str]:
        return self._token_info.get("skn")


class SasTokenGenerator:
    def __init__(
        self,
        signing_mechanism: SigningMechanism,
        uri: str,
        key_name: Optional[str] = None,
        ttl: int = 3600,
    ) -> None:
        """An object that can generate SasTokens using provided values

        :param signing_mechanism: The signing mechanism that will be used to sign data
        :type signing mechanism: :class:`SigningMechanism`
        :param str uri: The URI of the resource you are generating a tokens to access
        :param str key_name: The name of the shared access policy the key belongs to.
            Service tokens carry it, device tokens do not.
        :param int ttl: Time to live for generated tokens, in seconds (default 3600)
        """
        self.signing_mechanism = signing_mechanism
        self.uri = uri
        self.key_name = key_name
        self.ttl = ttl

    async def generate_sastoken(self) -> SasToken:
        """Generate a new SasToken

        :raises: SasTokenError if the token cannot be generated
        """
        expiry_time = int(time.time()) + self.ttl
        url_encoded_uri = urllib.parse.quote(self.uri, safe="")
        message = url_encoded_uri + "\n" + str(expiry_time)
        try:
            signature = await self.signing_mechanism.sign(message)
        except Exception as e:
            # Because of variant signing mechanisms, we don't know what error might be raised.
            # So we catch all of them.
            raise SasTokenError("Unable to generate SasToken") from e
        url_encoded_signature = urllib.parse.quote(signature, safe="")
        if self.key_name:
            token_str = SERVICE_TOKEN_FORMAT.format(
                resource=url_encoded_uri,
                signature=url_encoded_signature,
                expiry=str(expiry_time),
                key_name=urllib.parse.quote(self.key_name, safe=""),
            )
        else:
            token_str = TOKEN_FORMAT.format(
                resource=url_encoded_uri,
                signature=url_encoded_signature,
                expiry=str(expiry_time),
            )
        return SasToken(token_str)


class ExternalSasTokenGenerator(SasTokenGenerator):
    def __init__(self, generator_fn: Union[Callable[[], str], Callable[[], Awaitable[str]]]):
        """An object that can generate SasTokens by invoking a provided callable.
        This callable can be a function or a coroutine function.

        :param generator_fn: A callable that takes no arguments and returns a SAS Token string
        :type generator_fn: Function or Coroutine Function
        """
        self.generator_fn = generator_fn

    async def generate_sastoken(self) -> SasToken:
        try:
            # NOTE: the typechecker has some problems here, so we help it with a cast.
            if asyncio.iscoroutinefunction(self.generator_fn):
                generator_fn = cast(Callable[[], Awaitable[str]], self.generator_fn)
                token_str = await generator_fn()
            else:
                generator_coro_fn = cast(Callable[[], str], self.generator_fn)
                token_str = generator_coro_fn()
            return SasToken(token_str)
        except Exception as e:
            raise SasTokenError("Unable to generate SasToken") from e


def _get_sastoken_info_from_string(sastoken_string: str) -> Dict[str, str]:
    pieces = sastoken_string.split("SharedAccessSignature ")
    if len(pieces) != 2:
        raise ValueError("Invalid SAS Token string: Not a SAS Token ")

    # Get sastoken info as dictionary
    try:
        sastoken_info = dict(map(str.strip, sub.split("=", 1)) for sub in pieces[1].split("&"))  # type: ignore
    except Exception as e:
        raise ValueError("Invalid SAS Token string: Incorrectly formatted") from e

    # Validate that all required fields are present
    if not all(key in sastoken_info for key in REQUIRED_SASTOKEN_FIELDS):
        raise ValueError("Invalid SAS Token string: Not all required fields present")

    # Warn if extraneous fields are present
    known_fields = REQUIRED_SASTOKEN_FIELDS + OPTIONAL_SASTOKEN_FIELDS
    if not all(key in known_fields for key in sastoken_info):
        logger.warning("Unexpected fields present in SAS Token")

    return sastoken_info

