"""Tests for the RouterOS REST client with the HTTP layer mocked."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from hotspot_portal.services.routeros_service import (
    HOTSPOT_USER_PATH,
    IP_BINDING_PATH,
    RouterOSClient,
    RouterOSError,
)


def reply(status_code=200, json_body=None, text=""):
    response = MagicMock(status_code=status_code, text=text)
    response.content = b"" if json_body is None else b"{}"
    response.json.return_value = json_body
    return response


@pytest.fixture()
def client():
    return RouterOSClient("192.168.88.1", "api", "secret", port=8443, use_ssl=True, timeout=3)


def test_base_url_and_auth(client):
    assert client.base_url == "https://192.168.88.1:8443/rest"
    assert client.session.auth == ("api", "secret")
    assert client.session.verify is False


def test_connect_reads_identity(client):
    with patch.object(client.session, "request", return_value=reply(json_body={"name": "rb-main"})) as request:
        client.connect()

    assert client.identity == "rb-main"
    request.assert_called_once_with("GET", "https://192.168.88.1:8443/rest/system/identity", timeout=3)


def test_connect_without_host():
    with pytest.raises(RouterOSError):
        RouterOSClient("", "api", "secret").connect()


def test_find_passes_filters(client):
    rows = [{".id": "*1", "name": "abc"}]
    with patch.object(client.session, "request", return_value=reply(json_body=rows)) as request:
        assert client.find(HOTSPOT_USER_PATH, name="abc") == rows

    assert request.call_args.kwargs["params"] == {"name": "abc"}


def test_add_uses_put(client):
    with patch.object(client.session, "request", return_value=reply(json_body={".id": "*2"})) as request:
        client.add(IP_BINDING_PATH, address="10.0.0.5", type="bypassed", comment="captive-portal:abc")

    method, url = request.call_args.args
    assert method == "PUT"
    assert url.endswith("/rest/ip/hotspot/ip-binding")
    assert request.call_args.kwargs["json"]["type"] == "bypassed"


def test_remove_uses_record_id(client):
    with patch.object(client.session, "request", return_value=reply()) as request:
        client.remove(IP_BINDING_PATH, "*2")

    assert request.call_args.args == ("DELETE", "https://192.168.88.1:8443/rest/ip/hotspot/ip-binding/*2")


def test_error_reply_raises(client):
    error = reply(status_code=400, json_body={"error": 400, "detail": "failure: already have user"})
    with patch.object(client.session, "request", return_value=error):
        with pytest.raises(RouterOSError) as exc_info:
            client.add(HOTSPOT_USER_PATH, name="abc")

    assert exc_info.value.status_code == 400
    assert "already have user" in str(exc_info.value)


def test_transport_error_raises(client):
    with patch.object(client.session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(RouterOSError):
            client.find(HOTSPOT_USER_PATH)
