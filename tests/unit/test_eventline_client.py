"""
Unit tests for eventline_provider/core/eventline/client.py

Covers request construction (authentication, project scoping, encoding)
and response interpretation (destinations, structured and raw errors).
"""
import io

import pytest
import requests

from eventline_provider.core.eventline import (
    JSON,
    PROJECT_ID_HEADER,
    RAW,
    REQUEST_TIMEOUT,
    APIError,
    DecodeError,
    EncodeError,
    EventlineClient,
    Identity,
    NotFoundError,
    Project,
    RequestFailedError,
    TransportError,
    ValidationError,
    url_path,
)
from eventline_provider.core.raw_data import RawData
from tests.factories import (
    API_KEY,
    DATA_PLACEHOLDER,
    ENDPOINT,
    OTHER_PROJECT_ID,
    PROJECT_ID,
    FakeSession,
    identity_payload,
    page_payload,
    raw_body,
)


# ============================================================================
# Construction and scoping
# ============================================================================

class TestConstruction:
    def test_endpoint_is_required(self):
        with pytest.raises(ValueError, match="endpoint is required"):
            EventlineClient("")

    def test_trailing_slash_is_stripped(self, session):
        client = EventlineClient(ENDPOINT + "/", session=session)
        session.queue({})
        client.get("/projects")
        assert session.last["url"] == f"{ENDPOINT}/projects"

    def test_malformed_project_id_is_rejected(self, session):
        with pytest.raises(ValidationError):
            EventlineClient(ENDPOINT, project_id="not-an-id", session=session)

    def test_for_project_returns_new_bound_client(self, client, session):
        scoped = client.for_project(PROJECT_ID)

        assert scoped is not client
        assert client.project_id is None
        assert scoped.project_id == PROJECT_ID
        assert scoped._session is session
        assert scoped.timeout == client.timeout

    def test_for_project_rejects_malformed_id(self, client):
        with pytest.raises(ValidationError):
            client.for_project("p1")

    def test_context_manager_closes_session(self, session):
        with EventlineClient(ENDPOINT, session=session):
            pass
        assert session.closed


# ============================================================================
# Request construction
# ============================================================================

class TestRequestHeaders:
    def test_bearer_token_and_timeout(self, client, session):
        session.queue({})
        client.get("/projects")

        headers = session.last["headers"]
        assert headers["Authorization"] == f"Bearer {API_KEY}"
        assert headers["Accept"] == "application/json"
        assert PROJECT_ID_HEADER not in headers
        assert session.last["timeout"] == REQUEST_TIMEOUT

    def test_no_authorization_without_key(self, session):
        client = EventlineClient(ENDPOINT, session=session)
        session.queue({})
        client.get("/projects")
        assert "Authorization" not in session.last["headers"]

    def test_scoped_client_sends_project_header(self, scoped_client, session):
        session.queue({})
        scoped_client.get("/identities")
        assert session.last["headers"][PROJECT_ID_HEADER] == PROJECT_ID

    def test_scopes_do_not_leak_between_clients(self, client, session):
        a = client.for_project(PROJECT_ID)
        b = client.for_project(OTHER_PROJECT_ID)
        session.queue({}).queue({}).queue({})

        b.get("/jobs")
        a.get("/jobs")
        client.get("/projects")

        assert session.requests[0]["headers"][PROJECT_ID_HEADER] == OTHER_PROJECT_ID
        assert session.requests[1]["headers"][PROJECT_ID_HEADER] == PROJECT_ID
        assert PROJECT_ID_HEADER not in session.requests[2]["headers"]


class TestRequestBody:
    def test_model_body_is_json_encoded(self, client, session):
        session.queue({"id": PROJECT_ID, "name": "main"})
        client.post("/projects", Project(name="main"))

        assert session.last["headers"]["Content-Type"] == "application/json"
        assert session.body() == {"name": "main"}

    def test_list_of_models_is_encoded(self, client, session):
        session.queue([])
        client.put("/things", [Project(name="a"), {"name": "b"}])
        assert session.body() == [{"name": "a"}, {"name": "b"}]

    def test_identity_data_is_sent_as_declared(self, client, session):
        declared = '{"amount": 0.30000000000000000001, "big": 1e400, "k": 1, "k": 2}'
        identity = Identity(name="gh", connector="github", type="oauth2", data=RawData.from_text(declared))
        session.queue()

        client.post("/identities", identity, dest=None)

        assert declared.encode("utf-8") in session.last["data"]
        assert b"Infinity" not in session.last["data"]

    def test_non_finite_number_is_encode_error(self, client, session):
        with pytest.raises(EncodeError):
            client.post("/things", {"ratio": float("nan")})
        assert session.requests == []

    def test_bytes_are_sent_verbatim(self, client, session):
        session.queue()
        client.send_request("PUT", "/blob", body=b"\x00raw", dest=None)

        assert session.last["data"] == b"\x00raw"
        assert "Content-Type" not in session.last["headers"]

    def test_file_object_is_streamed(self, client, session):
        stream = io.BytesIO(b"content")
        session.queue()
        client.send_request("PUT", "/blob", body=stream, dest=None)
        assert session.last["data"] is stream

    def test_unencodable_body_raises_before_sending(self, client, session):
        with pytest.raises(EncodeError):
            client.post("/projects", {"when": object()})
        assert session.requests == []

    def test_query_parameters_are_passed(self, client, session):
        session.queue({})
        client.get("/projects", query={"size": "5"})
        assert session.last["params"] == {"size": "5"}


# ============================================================================
# Response interpretation
# ============================================================================

class TestResponseDestinations:
    def test_json_destination(self, client, session):
        session.queue({"a": 1})
        assert client.send_request("GET", "/x", dest=JSON) == {"a": 1}

    def test_callable_destination(self, client, session):
        session.queue({"id": PROJECT_ID, "name": "main"})
        project = client.get("/projects/id/x", dest=Project.from_dict)
        assert project.name == "main"

    def test_raw_destination_returns_bytes(self, client, session):
        session.queue(content=b"not json at all")
        assert client.send_request("GET", "/x", dest=RAW) == b"not json at all"

    def test_no_destination_ignores_body(self, client, session):
        session.queue(content=b"garbage")
        assert client.send_request("DELETE", "/x", dest=None) is None

    def test_empty_body_with_destination_is_decode_error(self, client, session):
        session.queue(status_code=204)
        with pytest.raises(DecodeError, match="empty response body"):
            client.get("/x")

    def test_invalid_json_is_decode_error(self, client, session):
        session.queue(content=b"<html>")
        with pytest.raises(DecodeError):
            client.get("/x")

    def test_identity_data_keeps_server_text(self, client, session):
        remote = '{"n": 1.10, "k": 1, "k": 2}'
        session.queue(content=raw_body(identity_payload(data=DATA_PLACEHOLDER), remote))

        identity = client.get("/identities/id/x", dest=Identity.from_dict)

        assert identity.data.text == remote

    def test_page_elements_keep_server_text(self, client, session):
        remote = "[1e400,  2]"
        session.queue(content=raw_body(page_payload([identity_payload(data=DATA_PLACEHOLDER)]), remote))

        page = client.get("/identities")

        assert page["elements"][0]["data"] == RawData(remote.encode("utf-8"))


class TestErrors:
    def test_structured_error(self, client, session):
        session.queue_error("forbidden", "access denied", status_code=403)
        with pytest.raises(APIError) as excinfo:
            client.get("/projects")

        err = excinfo.value
        assert not isinstance(err, NotFoundError)
        assert err.code == "forbidden"
        assert err.message == "access denied"
        assert err.status_code == 403
        assert str(err) == "access denied (forbidden)"

    def test_unknown_kind_is_not_found(self, client, session):
        session.queue_error("unknown_identity", "identity not found")
        with pytest.raises(NotFoundError) as excinfo:
            client.get("/identities/id/x")
        assert excinfo.value.kind == "identity"

    def test_non_json_error_body(self, client, session):
        session.queue(content=b"Bad Gateway", status_code=502)
        with pytest.raises(RequestFailedError) as excinfo:
            client.get("/projects")

        assert excinfo.value.status_code == 502
        assert "request failed with status 502" in str(excinfo.value)
        assert "Bad Gateway" in str(excinfo.value)

    def test_json_error_without_code(self, client, session):
        session.queue({"error": "oops"}, status_code=500)
        with pytest.raises(RequestFailedError):
            client.get("/projects")

    def test_error_raised_even_without_destination(self, client, session):
        session.queue_error("unknown_project", status_code=404)
        with pytest.raises(NotFoundError):
            client.delete("/projects/id/x")

    def test_connection_error_is_transport_error(self, failing_session):
        client = EventlineClient(ENDPOINT, session=failing_session)
        with pytest.raises(TransportError, match="cannot send request GET /projects"):
            client.get("/projects")

    def test_timeout_is_transport_error(self, failing_session):
        failing_session.request.side_effect = requests.Timeout("slow")
        client = EventlineClient(ENDPOINT, session=failing_session, timeout=5)
        with pytest.raises(TransportError, match="timed out after 5s"):
            client.get("/projects")


def test_url_path_escapes_segments():
    assert url_path("jobs", "name", "deploy prod/eu") == "/jobs/name/deploy%20prod%2Feu"
