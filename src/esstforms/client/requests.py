"""
# Forms HTTP Client (FastAPI /forms routes)

Thin wrapper around the proxy routes:

- GET  /health
- GET  /forms?type={control|alarm|damaged|param}
- POST /forms?type={control|alarm|damaged|param}

## Usage
from esstforms.client import FormsApiClient

client = FormsApiClient("http://127.0.0.1:8000")
print(client.health())

rows = client.read_rows("alarm")
print("Alarm rows:", len(rows))

client.submit("damaged", {"damagedLine": "1-1호기", "item": "Gripper", ...})
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union, cast

import requests
from pydantic import ValidationError as PydanticValidationError

from esstforms.errors import SAVE_FAILED_MESSAGE, ApplicationError, EsstFormsError
from esstforms.proxy.models import ResponseEnvelope
from esstforms.schemas import ListType

JsonDict = Dict[str, Any]

API_URL_ENV_VAR = "ESSTFORMS_API_URL"
DEFAULT_API_URL = "http://127.0.0.1:8000"


class FormsApiError(EsstFormsError):
    """
    Exception raised when the proxy replies with something that is not an envelope.
    """

    def __init__(
        self, status_code: int, message: str, url: str, details: Optional[Any] = None
    ) -> None:
        super().__init__(f"[FormsApiError] {status_code} {message} | url={url} | details={details}")
        self.status_code = status_code
        self.message = message
        self.url = url
        self.details = details


def default_api_url() -> str:
    return os.getenv(API_URL_ENV_VAR, "").strip() or DEFAULT_API_URL


@dataclass(frozen=True)
class FormsApiClient:
    """
    A small client for the proxy's /forms endpoints.

    Attributes:
        base_url: Base URL for the proxy service, e.g. "http://127.0.0.1:8000"
        timeout_s: Request timeout in seconds.
        session: Optional requests.Session for connection reuse.
    """

    base_url: str
    timeout_s: float = 30.0
    session: Optional[requests.Session] = None

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[JsonDict] = None,
    ) -> ResponseEnvelope:
        """
        Perform an HTTP request and return the decoded envelope.

        Raises:
            ApplicationError: The envelope reports status "error".
            FormsApiError: The reply is not a JSON envelope.
            requests.RequestException: For network errors/timeouts.
        """
        url = self._url(path)
        sess = self.session or requests

        resp = sess.request(
            method=method,
            url=url,
            params=params,
            json=json_body,
            timeout=self.timeout_s,
        )

        try:
            payload = resp.json()
        except ValueError:
            raise FormsApiError(resp.status_code, "response is not JSON", url, resp.text[:200])

        if not isinstance(payload, dict):
            raise FormsApiError(resp.status_code, "expected a JSON object", url, payload)

        try:
            envelope = ResponseEnvelope.model_validate(payload)
        except PydanticValidationError as exc:
            raise FormsApiError(resp.status_code, "malformed envelope", url, payload) from exc

        if envelope.status != "success":
            raise ApplicationError(envelope.message or SAVE_FAILED_MESSAGE, resp.status_code)
        return envelope

    def health(self) -> JsonDict:
        """GET /health"""
        url = self._url("/health")
        resp = (self.session or requests).get(url, timeout=self.timeout_s)
        resp.raise_for_status()
        return cast(JsonDict, resp.json())

    def read_rows(self, list_type: Union[ListType, str]) -> List[JsonDict]:
        """
        GET /forms?type=...

        Returns:
            Stored rows, oldest first as the sheet keeps them (empty if none).
        """
        envelope = self._request("GET", "/forms", params={"type": ListType(list_type).value})
        return list(envelope.rows or [])

    def submit(self, list_type: Union[ListType, str], record: Mapping[str, Any]) -> ResponseEnvelope:
        """
        POST /forms?type=...

        Args:
            list_type: Destination sheet.
            record: Flat mapping of field -> JSON scalar.
        """
        return self._request(
            "POST",
            "/forms",
            params={"type": ListType(list_type).value},
            json_body=dict(record),
        )
