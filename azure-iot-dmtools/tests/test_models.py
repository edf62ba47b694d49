# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
import json
import pytest
from azure.iot.dmtools.models import DirectMethodResult, DeviceData, DesiredPropertyPatch
from azure.iot.dmtools.exceptions import MalformedRequestError, DeviceUnreachableError
from azure.iot.dmtools import constant

FAKE_TWIN = {
    "deviceId": "sensor-01",
    "etag": "AAAAAAAAAAE=",
    "tags": {"location": "plant-3"},
    "properties": {
        "desired": {"interval": 5, "$version": 2},
        "reported": {"firmware": "1.2.0", "$version": 7},
    },
}


@pytest.mark.describe("DesiredPropertyPatch")
class TestDesiredPropertyPatch:
    @pytest.mark.it("Treats a str value as a JSON fragment")
    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param('"red"', "red", id="JSON string"),
            pytest.param("5", 5, id="JSON number"),
            pytest.param("true", True, id="JSON boolean"),
            pytest.param("null", None, id="JSON null"),
            pytest.param('{"interval": 5}', {"interval": 5}, id="JSON object"),
        ],
    )
    def test_str_value(self, value, expected):
        patch = DesiredPropertyPatch("prop", value)
        assert patch.value == expected
        assert patch.to_twin_patch() == {"properties": {"prop": expected}}

    @pytest.mark.it("Accepts JSON compatible non-str values as they are")
    def test_non_str_value(self):
        patch = DesiredPropertyPatch("prop", {"a": [1, 2]})
        assert patch.to_twin_patch() == {"properties": {"prop": {"a": [1, 2]}}}

    @pytest.mark.it("Serializes the patch as JSON with the name and value properly escaped")
    def test_escaping(self):
        name = 'my "quoted" \\ prop'
        patch = DesiredPropertyPatch(name, '"say \\"hi\\""')
        assert json.loads(patch.to_json()) == {"properties": {name: 'say "hi"'}}

    @pytest.mark.it("Raises MalformedRequestError if a str value is not a valid JSON fragment")
    @pytest.mark.parametrize(
        "value",
        [
            pytest.param("red", id="Unquoted string"),
            pytest.param("", id="Empty string"),
            pytest.param("{interval: 5}", id="Unquoted key"),
        ],
    )
    def test_invalid_fragment(self, value):
        with pytest.raises(MalformedRequestError) as e_info:
            DesiredPropertyPatch("prop", value)
        assert isinstance(e_info.value, ValueError)

    @pytest.mark.it("Raises MalformedRequestError if the value is not JSON serializable")
    def test_not_serializable(self):
        with pytest.raises(MalformedRequestError):
            DesiredPropertyPatch("prop", {1, 2, 3})

    @pytest.mark.it("Raises ValueError if the name is empty")
    def test_empty_name(self):
        with pytest.raises(ValueError):
            DesiredPropertyPatch("", '"red"')


@pytest.mark.describe("DeviceData - .from_twin()")
class TestDeviceDataFromTwin:
    @pytest.mark.it("Creates JSON text views of the twin, tags, reported and desired properties")
    def test_views(self):
        device_data = DeviceData.from_twin(FAKE_TWIN)
        assert json.loads(device_data.device_json) == FAKE_TWIN
        assert json.loads(device_data.tags_json) == FAKE_TWIN["tags"]
        assert (
            json.loads(device_data.reported_properties_json)
            == FAKE_TWIN["properties"]["reported"]
        )
        assert (
            json.loads(device_data.desired_properties_json) == FAKE_TWIN["properties"]["desired"]
        )

    @pytest.mark.it("Uses empty strings for every view if the twin is None")
    def test_null_twin(self):
        device_data = DeviceData.from_twin(None)
        assert device_data.device_json == ""
        assert device_data.tags_json == ""
        assert device_data.reported_properties_json == ""
        assert device_data.desired_properties_json == ""

    @pytest.mark.it("Uses empty strings for the views of null or missing sections")
    @pytest.mark.parametrize(
        "twin",
        [
            pytest.param({"deviceId": "sensor-01", "tags": None, "properties": None}, id="Null"),
            pytest.param({"deviceId": "sensor-01"}, id="Missing"),
        ],
    )
    def test_null_sections(self, twin):
        device_data = DeviceData.from_twin(twin)
        assert json.loads(device_data.device_json) == twin
        assert device_data.tags_json == ""
        assert device_data.reported_properties_json == ""
        assert device_data.desired_properties_json == ""

    @pytest.mark.it("Maintains the views as read-only properties")
    @pytest.mark.parametrize(
        "attr",
        ["device_json", "tags_json", "reported_properties_json", "desired_properties_json"],
    )
    def test_read_only(self, attr):
        device_data = DeviceData.from_twin(FAKE_TWIN)
        with pytest.raises(AttributeError):
            setattr(device_data, attr, "{}")


@pytest.mark.describe("DirectMethodResult")
class TestDirectMethodResult:
    @pytest.mark.it("Creates a result from an IoT Hub response, serializing the payload as JSON")
    @pytest.mark.parametrize(
        "payload, expected_payload",
        [
            pytest.param({"rebooted": True}, '{"rebooted": true}', id="Object payload"),
            pytest.param("done", '"done"', id="String payload"),
            pytest.param(None, "null", id="Null payload"),
        ],
    )
    def test_from_response(self, payload, expected_payload):
        result = DirectMethodResult.from_response({"status": 200, "payload": payload})
        assert result.status == 200
        assert result.payload == expected_payload
        assert not result.is_failure

    @pytest.mark.it("Creates a failed result carrying the error message as payload")
    def test_from_error(self):
        result = DirectMethodResult.from_error(DeviceUnreachableError("Device is offline"))
        assert result.status == constant.DIRECT_METHOD_FAILURE_CODE
        assert result.payload == "Device is offline"
        assert result.is_failure

    @pytest.mark.it("Compares equal to another result with the same status and payload")
    def test_eq(self):
        assert DirectMethodResult(200, "{}") == DirectMethodResult(200, "{}")
        assert DirectMethodResult(200, "{}") != DirectMethodResult(500, "{}")

    @pytest.mark.it("Maintains its status and payload as read-only properties")
    @pytest.mark.parametrize("attr", ["status", "payload"])
    def test_read_only(self, attr):
        result = DirectMethodResult(200, "{}")
        with pytest.raises(AttributeError):
            setattr(result, attr, None)
