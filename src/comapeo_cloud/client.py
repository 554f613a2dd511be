"""
HTTP client for the CoMapeo Cloud API.

Wraps a requests.Session carrying the bearer token and turns transport
errors, non-success responses and malformed bodies into ApiError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config.settings import DEFAULT_REQUEST_TIMEOUT, ServerCredentials
from .domain.models import Observation, RemoteDetectionAlert
from .types import ApiError

logger = logging.getLogger(__name__)


def _error_message(response: requests.Response, fallback: str) -> str:
    """Prefer the server's JSON `message` over the HTTP reason."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


class ComapeoClient:
    """
    Thin client for the CoMapeo Cloud REST API.

    The underlying session is shared by concurrent attachment downloads,
    so no per-request state is kept on the client.
    """

    def __init__(
        self,
        credentials: ServerCredentials,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.base_url = credentials.server_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {credentials.bearer_token}",
            "Content-Type": "application/json",
        })

    def __enter__(self) -> ComapeoClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message = _error_message(e.response, str(e)) if e.response is not None else str(e)
            raise ApiError(message, status_code=status) from e
        except requests.RequestException as e:
            raise ApiError(str(e)) from e
        return response

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET a JSON document."""
        response = self._request("GET", path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Malformed JSON response from {path}: {e}", status_code=response.status_code) from e

    def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded response (None when empty)."""
        response = self._request("POST", path, json=payload)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Malformed JSON response from {path}: {e}", status_code=response.status_code) from e

    def get_bytes(self, path: str, params: Optional[dict[str, Any]] = None) -> bytes:
        """GET a binary payload."""
        return self._request("GET", path, params=params).content

    # Resource helpers

    def get_info(self) -> Any:
        return self.get_json("/info")

    def healthcheck(self) -> Any:
        return self.get_json("/healthcheck")

    def list_projects(self) -> Any:
        return self.get_json("/projects")

    def list_observations_raw(self, project_id: str) -> Any:
        return self.get_json(f"/projects/{project_id}/observations")

    def list_observations(self, project_id: str) -> list[Observation]:
        """
        Fetch and parse every observation of a project.

        Raises:
            ApiError: If the request fails or the body is not `{"data": [...]}`
        """
        body = self.list_observations_raw(project_id)
        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            raise ApiError(f"Malformed observations response for project {project_id}")
        try:
            return [Observation.model_validate(item) for item in body["data"]]
        except ValueError as e:
            raise ApiError(f"Malformed observation in project {project_id}: {e}") from e

    def list_alerts(self, project_id: str) -> Any:
        return self.get_json(f"/projects/{project_id}/remoteDetectionAlerts")

    def create_alert(self, project_id: str, alert: RemoteDetectionAlert) -> Any:
        return self.post_json(f"/projects/{project_id}/remoteDetectionAlerts", alert.to_payload())
