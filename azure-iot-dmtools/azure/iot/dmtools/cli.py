# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Command line front end for the device management tools.

Usage examples:
    iothub-dm twin my-device
    iothub-dm update-desired my-device desired '{"interval": 5}'
    iothub-dm invoke my-device reboot '{"delay": 10}' --timeout 60
    iothub-dm cert ./ca_cert.pem
"""

import argparse
import asyncio
import logging
import os
import sys

from . import constant
from .certificate import load_certificate
from .device_management_client import DeviceManagementClient
from .exceptions import DeviceManagementError
from .models import DirectMethodResult

logger = logging.getLogger(__name__)


def _create_parser():
    parser = argparse.ArgumentParser(
        prog="iothub-dm", description="Azure IoT Hub device management tools"
    )
    parser.add_argument(
        "--connection-string",
        default=os.getenv(constant.CONNECTION_STRING_ENV_VAR),
        help="IoT Hub service connection string. Defaults to ${}".format(
            constant.CONNECTION_STRING_ENV_VAR
        ),
    )
    parser.add_argument(
        "--server-cert", help="Additional certificate to trust when connecting to IoT Hub"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    twin_parser = subparsers.add_parser("twin", help="Show a device twin")
    twin_parser.add_argument("device_id")

    update_parser = subparsers.add_parser("update-desired", help="Update a desired property")
    update_parser.add_argument("device_id")
    update_parser.add_argument("name")
    update_parser.add_argument("value", help="Property value as JSON, e.g. '\"red\"' or 5")

    invoke_parser = subparsers.add_parser("invoke", help="Invoke a direct method")
    invoke_parser.add_argument("device_id")
    invoke_parser.add_argument("method_name")
    invoke_parser.add_argument("payload", nargs="?", default=None, help="Payload as JSON")
    invoke_parser.add_argument(
        "--timeout", type=int, default=constant.DEFAULT_DIRECT_METHOD_TIMEOUT
    )

    cert_parser = subparsers.add_parser("cert", help="Show certificate details")
    cert_parser.add_argument("path")

    return parser


def _print_certificate(path):
    cert = load_certificate(path)
    print("Subject:    {}".format(cert.subject))
    print("Issuer:     {}".format(cert.issuer))
    print("Thumbprint: {}".format(cert.thumbprint))
    print("Valid:      {} - {}".format(cert.not_valid_before, cert.not_valid_after))


async def _run(args):
    server_cert = load_certificate(args.server_cert) if args.server_cert else None
    async with DeviceManagementClient(
        args.connection_string, server_verification_cert=server_cert
    ) as client:
        if args.command == "twin":
            device_data = await client.get_device_data(args.device_id)
            print("Device:\n{}".format(device_data.device_json))
            print("Tags:\n{}".format(device_data.tags_json))
            print("Reported:\n{}".format(device_data.reported_properties_json))
            print("Desired:\n{}".format(device_data.desired_properties_json))
        elif args.command == "update-desired":
            await client.update_desired_property(args.device_id, args.name, args.value)
            print("Updated '{}' on {}".format(args.name, args.device_id))
        elif args.command == "invoke":
            try:
                result = await client.invoke_direct_method(
                    args.device_id, args.method_name, args.payload, timeout=args.timeout
                )
            except DeviceManagementError as e:
                result = DirectMethodResult.from_error(e)
            print("Status:  {}".format(result.status))
            print("Payload: {}".format(result.payload))
            if result.is_failure:
                return 1
    return 0


def main(argv=None):
    args = _create_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == "cert":
            _print_certificate(args.path)
            return 0
        if not args.connection_string:
            print(
                "A connection string is required (--connection-string or ${})".format(
                    constant.CONNECTION_STRING_ENV_VAR
                ),
                file=sys.stderr,
            )
            return 2
        return asyncio.run(_run(args))
    except (DeviceManagementError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
