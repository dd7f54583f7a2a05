"""Unit tests for the fleet-management HTTP client."""

import json

import pytest
import requests

from amhub.fleet import AlertError, AuthError, FleetClient, StructureError, TransportError
from amhub.fleet.client import is_auth_failure

from fakes import FakeResponse, FakeSession, make_host, topology_body


def test_fetch_topology_sends_credentials(config) -> None:
    body = topology_body(make_host("A"))
    session = FakeSession(FakeResponse(200, body))
    client = FleetClient(config, session=session)

    assert client.fetch_topology() == body

    request = session.requests[0]
    assert request["method"] == "GET"
    assert request["url"] == "https://fh.example.com/manage/api/v1.0/projects/project-1/topologies"
    assert request["headers"]["X-User-Token"] == "token-123"
    assert request["headers"]["x-project-uuid"] == "project-1"
    assert request["timeout"] == config.request_timeout_s


def test_fetch_topology_through_proxy(config) -> None:
    session = FakeSession(FakeResponse(200, topology_body()))
    client = FleetClient(config.with_overrides(proxy_base="https://proxy.local/?url="), session=session)
    client.fetch_topology()
    assert session.requests[0]["url"] == (
        "https://proxy.local/?url=https%3A%2F%2Ffh.example.com%2Fmanage%2Fapi%2Fv1.0%2Fprojects%2Fproject-1%2Ftopologies"
    )


@pytest.mark.parametrize("status", [401, 403])
def test_http_auth_status_raises_auth_error(config, status) -> None:
    client = FleetClient(config, session=FakeSession(FakeResponse(status, text="denied", content_type="text/plain")))
    with pytest.raises(AuthError, match=f"Topology API Error: {status}"):
        client.fetch_topology()


def test_error_body_auth_code_takes_precedence(config) -> None:
    response = FakeResponse(500, {"code": 200401, "message": "token expired"})
    client = FleetClient(config, session=FakeSession(response))
    with pytest.raises(AuthError):
        client.fetch_topology()


def test_auth_marker_in_error_body_raises_auth_error(config) -> None:
    response = FakeResponse(502, {"code": 502, "message": "upstream said 401 Unauthorized"})
    client = FleetClient(config, session=FakeSession(response))
    with pytest.raises(AuthError, match="Topology API Error: 502"):
        client.fetch_topology()


def test_other_http_errors_are_transport_errors(config) -> None:
    client = FleetClient(config, session=FakeSession(FakeResponse(502, text="Bad Gateway", content_type="text/html")))
    with pytest.raises(TransportError) as exc:
        client.fetch_topology()
    assert not isinstance(exc.value, AuthError)


@pytest.mark.parametrize(
    "body, error",
    [
        ({"code": 200401, "message": "token invalid"}, AuthError),
        ({"code": 1, "message": "401 Unauthorized"}, AuthError),
        ({"code": 1, "message": "UNAUTHORIZED access"}, AuthError),
        ({"code": 500, "message": "internal"}, TransportError),
        ({"code": "abc"}, StructureError),
    ],
)
def test_api_level_failures_in_success_response(config, body, error) -> None:
    client = FleetClient(config, session=FakeSession(FakeResponse(200, body)))
    with pytest.raises(error):
        client.fetch_topology()


def test_non_json_success_is_structure_error(config) -> None:
    client = FleetClient(config, session=FakeSession(FakeResponse(200, text="<html>", content_type="text/html")))
    with pytest.raises(StructureError):
        client.fetch_topology()


@pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.ConnectionError("refused")])
def test_network_failures_are_transport_errors(config, exc) -> None:
    client = FleetClient(config, session=FakeSession(exc))
    with pytest.raises(TransportError):
        client.fetch_topology()


def test_is_auth_failure() -> None:
    assert is_auth_failure(401)
    assert is_auth_failure("403")
    assert is_auth_failure(200401)
    assert is_auth_failure(0, "Unauthorized")
    assert not is_auth_failure(500, "server error")
    assert not is_auth_failure()


def test_send_workflow_alert_posts_json(config) -> None:
    session = FakeSession(FakeResponse(200, {"code": 0, "data": {"id": "wf-1"}}))
    client = FleetClient(config, session=session)
    payload = {"workflow_uuid": "workflow-1", "name": "Alert-1"}

    assert client.send_workflow_alert(payload) == {"code": 0, "data": {"id": "wf-1"}}

    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == config.api_url
    assert json.loads(request["data"]) == payload


def test_send_workflow_alert_wraps_text_response(config) -> None:
    session = FakeSession(FakeResponse(200, text="accepted", content_type="text/plain"))
    assert FleetClient(config, session=session).send_workflow_alert({}) == {"message": "accepted"}


def test_send_workflow_alert_rejection(config) -> None:
    session = FakeSession(FakeResponse(400, {"message": "invalid workflow"}))
    with pytest.raises(AlertError, match="invalid workflow"):
        FleetClient(config, session=session).send_workflow_alert({})


def test_send_workflow_alert_network_failure(config) -> None:
    session = FakeSession(requests.ConnectionError("offline"))
    with pytest.raises(AlertError):
        FleetClient(config, session=session).send_workflow_alert({})
