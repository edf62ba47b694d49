# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import pytest
from azure.iot.dmtools.connection_string import ConnectionString

FAKE_HOSTNAME = "beauxbatons.academy-net"
FAKE_KEY_NAME = "iothubowner"
FAKE_KEY = "Zm9vYmFy"
FAKE_SIGNATURE = "SharedAccessSignature sr=beauxbatons.academy-net&sig=c2lnbmF0dXJl&se=12321312&skn=iothubowner"


@pytest.mark.describe("ConnectionString")
class TestConnectionString:
    @pytest.mark.it("Instantiates from a shared access key connection string")
    @pytest.mark.parametrize(
        "connection_string",
        [
            pytest.param(
                "HostName={};SharedAccessKeyName={};SharedAccessKey={}".format(
                    FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY
                ),
                id="Standard",
            ),
            pytest.param(
                "SharedAccessKey={};HostName={};SharedAccessKeyName={};".format(
                    FAKE_KEY, FAKE_HOSTNAME, FAKE_KEY_NAME
                ),
                id="Reordered, trailing delimiter",
            ),
        ],
    )
    def test_shared_access_key(self, connection_string):
        cs = ConnectionString(connection_string)
        assert cs["HostName"] == FAKE_HOSTNAME
        assert cs["SharedAccessKeyName"] == FAKE_KEY_NAME
        assert cs["SharedAccessKey"] == FAKE_KEY

    @pytest.mark.it("Instantiates from a shared access signature connection string")
    def test_shared_access_signature(self):
        cs = ConnectionString(
            "HostName={};SharedAccessSignature={}".format(FAKE_HOSTNAME, FAKE_SIGNATURE)
        )
        assert cs["SharedAccessSignature"] == FAKE_SIGNATURE
        assert "SharedAccessKey" not in cs

    @pytest.mark.it("Raises ValueError on an invalid connection string")
    @pytest.mark.parametrize(
        "connection_string",
        [
            pytest.param("garbage", id="Garbage"),
            pytest.param(
                "HostName={};SharedAccessKeyName={}".format(FAKE_HOSTNAME, FAKE_KEY_NAME),
                id="No authentication",
            ),
            pytest.param(
                "HostName={};SharedAccessKey={}".format(FAKE_HOSTNAME, FAKE_KEY),
                id="Key without key name",
            ),
            pytest.param(
                "SharedAccessKeyName={};SharedAccessKey={}".format(FAKE_KEY_NAME, FAKE_KEY),
                id="Missing HostName",
            ),
            pytest.param(
                "HostName={};SharedAccessKeyName={};SharedAccessKey={};SharedAccessSignature={}".format(
                    FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY, FAKE_SIGNATURE
                ),
                id="Mixed authentication",
            ),
            pytest.param(
                "HostName={};HostName={};SharedAccessKeyName={};SharedAccessKey={}".format(
                    FAKE_HOSTNAME, FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY
                ),
                id="Duplicate key",
            ),
            pytest.param(
                "HostName={};DeviceId=dev;SharedAccessKeyName={};SharedAccessKey={}".format(
                    FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY
                ),
                id="Device connection string key",
            ),
        ],
    )
    def test_invalid(self, connection_string):
        with pytest.raises(ValueError):
            ConnectionString(connection_string)

    @pytest.mark.it("Raises TypeError if the connection string is not a string")
    def test_not_a_string(self):
        with pytest.raises(TypeError):
            ConnectionString(1234)

    @pytest.mark.it("Returns a default from .get() for missing keys")
    def test_get(self):
        cs = ConnectionString(
            "HostName={};SharedAccessKeyName={};SharedAccessKey={}".format(
                FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY
            )
        )
        assert cs.get("HostName") == FAKE_HOSTNAME
        assert cs.get("SharedAccessSignature") is None
        assert cs.get("SharedAccessSignature", "default") == "default"

    @pytest.mark.it("Does not include the credential in its string representation")
    def test_repr(self):
        cs = ConnectionString(
            "HostName={};SharedAccessKeyName={};SharedAccessKey={}".format(
                FAKE_HOSTNAME, FAKE_KEY_NAME, FAKE_KEY
            )
        )
        assert FAKE_HOSTNAME in repr(cs)
        assert FAKE_KEY not in repr(cs)
