"""Tests for PotaClient and the shared HTTP helper, with a mocked session."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.adapters.pota_client import PotaClient
from potaplan.result import ErrorKind


def _response(status=200, payload=None, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = "Not Found" if status == 404 else "Server Error" if status >= 500 else "OK"
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


def _client(resp=None, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
        session.head.side_effect = exc
    else:
        session.get.return_value = resp
        session.head.return_value = resp
    return PotaClient(base_url="https://api.example.test", timeout=30, session=session), session


class TestFetchAllParks:
    def test_success(self):
        client, session = _client(_response(payload=[{"reference": "K-0001"}]))
        result = client.fetch_all_parks()
        assert result.success
        assert result.data == [{"reference": "K-0001"}]
        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.example.test/parks"
        assert kwargs["timeout"] == 30

    def test_timeout_has_its_own_code(self):
        client, _ = _client(exc=requests.exceptions.Timeout("slow"))
        result = client.fetch_all_parks()
        assert not result.success
        assert result.error.kind == ErrorKind.NETWORK
        assert result.error.code == "POTA_API_TIMEOUT"

    def test_connection_error(self):
        client, _ = _client(exc=requests.exceptions.ConnectionError("refused"))
        result = client.fetch_all_parks()
        assert result.error.code == "POTA_API_NETWORK_ERROR"
        assert result.error.status_code is None

    def test_server_error_carries_status(self):
        client, _ = _client(_response(status=503))
        result = client.fetch_all_parks()
        assert result.error.code == "POTA_API_ERROR"
        assert result.error.status_code == 503

    def test_invalid_json(self):
        client, _ = _client(_response(json_error=True))
        result = client.fetch_all_parks()
        assert result.error.code == "POTA_API_INVALID_RESPONSE"


class TestFetchPark:
    def test_reference_uppercased_in_url(self):
        client, session = _client(_response(payload={"reference": "K-0039"}))
        client.fetch_park("k-0039")
        assert session.get.call_args[0][0] == "https://api.example.test/park/K-0039"

    def test_404_is_success_with_none(self):
        client, _ = _client(_response(status=404))
        result = client.fetch_park("K-9999")
        assert result.success
        assert result.data is None

    def test_other_errors_propagate(self):
        client, _ = _client(_response(status=500))
        result = client.fetch_park("K-0039")
        assert not result.success
        assert result.error.status_code == 500


class TestFetchParksByEntity:
    def test_url(self):
        client, session = _client(_response(payload=[]))
        assert client.fetch_parks_by_entity(291).success
        assert session.get.call_args[0][0] == "https://api.example.test/parks/entity/291"


class TestHealthCheck:
    def test_reachable(self):
        client, session = _client(_response(status=200))
        result = client.check_api_health()
        assert result.success and result.data is True
        assert session.head.call_args.kwargs["timeout"] == 5

    def test_unhealthy_status(self):
        client, _ = _client(_response(status=502))
        result = client.check_api_health()
        assert result.success and result.data is False

    def test_unreachable_still_success(self):
        client, _ = _client(exc=requests.exceptions.ConnectionError("down"))
        result = client.check_api_health()
        assert result.success
        assert result.data is False


class TestResponseShape:
    def test_object_instead_of_list(self):
        client, _ = _client(_response(payload={"message": "rate limited"}))
        result = client.fetch_all_parks()
        assert not result.success
        assert result.error.code == "POTA_API_INVALID_RESPONSE"
        assert result.error.kind == ErrorKind.NETWORK

    def test_list_of_non_records(self):
        client, _ = _client(_response(payload=["K-0001", "K-0002"]))
        assert client.fetch_all_parks().error.code == "POTA_API_INVALID_RESPONSE"

    def test_empty_list_is_fine(self):
        client, _ = _client(_response(payload=[]))
        result = client.fetch_all_parks()
        assert result.success
        assert result.data == []

    def test_single_park_not_an_object(self):
        client, _ = _client(_response(payload=["K-9999"]))
        result = client.fetch_park("K-9999")
        assert not result.success
        assert result.error.code == "POTA_API_INVALID_RESPONSE"

    def test_single_park_empty_body_is_none(self):
        client, _ = _client(_response(payload={}))
        result = client.fetch_park("K-9999")
        assert result.success
        assert result.data is None

    def test_entity_listing_not_a_list(self):
        client, _ = _client(_response(payload={"error": "unknown entity"}))
        assert client.fetch_parks_by_entity(9999).error.code == "POTA_API_INVALID_RESPONSE"
