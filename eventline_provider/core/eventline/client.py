"""Low-level HTTP client for the Eventline API.

Handles authentication, project scoping, JSON encoding and error decoding.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import quote

import requests

from eventline_provider.core import raw_data, validators
from .exceptions import (
    DecodeError,
    RequestFailedError,
    TransportError,
    api_error,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
PROJECT_ID_HEADER = "X-Eventline-Project-Id"

# Members kept verbatim in responses, at the top level and in page elements
OPAQUE_MEMBERS = frozenset({"data"})
PAGE_MEMBERS = frozenset({"elements"})


class _Destination:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


# Response destinations for send_request: verbatim bytes, or decoded JSON
RAW = _Destination("RAW")
JSON = _Destination("JSON")

Destination = Union[None, _Destination, Callable[[Any], Any]]


def url_path(*segments: str) -> str:
    """Join path segments, escaping each one (e.g. job names)."""
    return "/" + "/".join(quote(str(segment), safe="") for segment in segments)


def _to_json_value(body: Any) -> Any:
    if hasattr(body, "to_dict"):
        return body.to_dict()
    if isinstance(body, (list, tuple)):
        return [_to_json_value(item) for item in body]
    return body


class EventlineClient:
    """HTTP client for the Eventline API.

    A client may be bound to a project; bound clients send the project id
    in the scope header of every request. Binding never mutates a client:
    ``for_project`` returns a new client sharing the same HTTP session, so
    operations against different projects each hold their own scope.

    Usage:
        client = EventlineClient("https://eventline.example.com/api", api_key="...")
        projects = ProjectService(client).list()

        scoped = client.for_project(project_id)
        identities = IdentityService(scoped).list()
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        *,
        project_id: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize Eventline client.

        Args:
            endpoint: API base URL (e.g. "https://eventline.example.com/api")
            api_key: API key sent as a bearer token
            project_id: Project the client is bound to, if any
            timeout: Timeout in seconds applied to every request
            session: HTTP session to reuse (a new one is created otherwise)
        """
        if not endpoint:
            raise ValueError("Eventline endpoint is required")
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key or None
        self.project_id = validators.parse_id(project_id, "project_id") if project_id else None
        self.timeout = timeout
        self._session = session or requests.Session()

    def for_project(self, project_id: str) -> "EventlineClient":
        """Return a client bound to ``project_id``.

        Raises:
            ValidationError: If project_id is not a well-formed identifier
        """
        return EventlineClient(
            self.endpoint,
            self.api_key,
            project_id=validators.parse_id(project_id, "project_id"),
            timeout=self.timeout,
            session=self._session,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "EventlineClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def send_request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Dict[str, str]] = None,
        body: Any = None,
        dest: Destination = None,
    ) -> Any:
        """Send one request and interpret the response.

        Args:
            method: HTTP method
            path: Path relative to the endpoint (e.g. "/projects/id/<id>")
            query: Query parameters
            body: Raw bytes or file object sent verbatim; anything else is
                JSON-encoded (models are converted with ``to_dict``)
            dest: None to discard the response body, RAW for the verbatim
                bytes, JSON for the decoded value, or a callable applied to
                the decoded value

        Returns:
            The response interpreted according to ``dest``

        Raises:
            EncodeError: If the body cannot be serialized
            TransportError: If the request fails or times out
            APIError: On a structured error response (NotFoundError for
                ``unknown_<kind>`` codes)
            RequestFailedError: On any other non-2xx response
            DecodeError: If data was expected and the body is empty or invalid
        """
        url = f"{self.endpoint}{path}"
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.project_id:
            headers[PROJECT_ID_HEADER] = str(self.project_id)

        data = None
        if body is not None:
            if isinstance(body, (bytes, bytearray)) or hasattr(body, "read"):
                data = body
            else:
                data = raw_data.dumps(_to_json_value(body))
                headers["Content-Type"] = "application/json"

        try:
            resp = self._session.request(
                method,
                url,
                params=query,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
            content = resp.content
        except requests.Timeout as e:
            raise TransportError(f"{method} {path} timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(f"cannot send request {method} {path}: {e}") from e

        logger.debug("%s %s -> %d", method, path, resp.status_code)

        if resp.status_code < 200 or resp.status_code >= 300:
            self._handle_error(resp.status_code, content)

        if dest is None:
            return None
        if dest is RAW:
            return content
        if not content:
            raise DecodeError("empty response body")
        value = raw_data.loads_preserving(content, OPAQUE_MEMBERS, PAGE_MEMBERS)
        if dest is JSON:
            return value
        return dest(value)

    def get(self, path: str, query: Optional[Dict[str, str]] = None, dest: Destination = JSON) -> Any:
        return self.send_request("GET", path, query=query, dest=dest)

    def post(self, path: str, body: Any = None, dest: Destination = JSON, **kwargs) -> Any:
        return self.send_request("POST", path, body=body, dest=dest, **kwargs)

    def put(self, path: str, body: Any = None, dest: Destination = JSON, **kwargs) -> Any:
        return self.send_request("PUT", path, body=body, dest=dest, **kwargs)

    def delete(self, path: str, dest: Destination = None) -> Any:
        return self.send_request("DELETE", path, dest=dest)

    def _handle_error(self, status_code: int, content: bytes) -> None:
        """Raise the error matching a non-2xx response.

        Raises:
            APIError: If the body is a structured ``{code, message}`` error
            RequestFailedError: Otherwise
        """
        try:
            payload = json.loads(content)
        except (ValueError, UnicodeDecodeError):
            payload = None

        if isinstance(payload, dict) and isinstance(payload.get("code"), str):
            raise api_error(payload["code"], str(payload.get("message", "")), status_code)

        raise RequestFailedError(status_code, content.decode("utf-8", errors="replace"))
