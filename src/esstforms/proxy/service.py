"""
Forwarding layer between the /forms routes and the Apps Script web apps.

Every public method returns a `ProxyResult` (HTTP status + JSON envelope);
upstream decode and transport failures are converted here and never escape.
Only `UnknownListType` is raised, before any network call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from esstforms.errors import TransportError, UpstreamDecodeError, error_envelope
from esstforms.schemas import ListType

from .config import ProxyConfig
from .decoding import excerpt, safe_parse_json

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]

NOT_JSON_MESSAGES = {
    "GET": "Apps Script GET 응답이 JSON 형식이 아닙니다. (Apps Script GET response is not in JSON format.)",
    "POST": "Apps Script POST 응답이 JSON 형식이 아닙니다. (Apps Script POST response is not in JSON format.)",
}

# Older damaged forms posted the cause as `damagedReason`; the script reads `reason`.
DAMAGED_REASON_ALIAS = "damagedReason"


@dataclass(frozen=True)
class ProxyResult:
    status_code: int
    body: JsonDict


def normalize_body(list_type: str, body: JsonDict) -> JsonDict:
    """
    Rewrite field names the destination sheet expects. Returns a new dict.
    """
    if list_type == ListType.DAMAGED.value:
        reason = body.get("reason")
        if reason is None:
            reason = body.get(DAMAGED_REASON_ALIAS)
        return {**body, "reason": "" if reason is None else reason}
    return dict(body)


class FormProxy:
    """
    Stateless bridge to the external record store.

    Attributes:
        config: Destination URLs and timeout.
        session: Optional requests.Session (injected in tests).
    """

    def __init__(self, config: ProxyConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session

    def resolve(self, list_type: str) -> str:
        return self.config.resolve(list_type)

    def read(self, list_type: str) -> ProxyResult:
        """
        GET all rows for `list_type`.

        Raises:
            UnknownListType: before any I/O.
        """
        url = self.resolve(list_type)
        return self._forward("GET", list_type, url)

    def write(self, list_type: str, body: JsonDict) -> ProxyResult:
        """
        POST one record for `list_type`, normalizing legacy field names first.

        Raises:
            UnknownListType: before any I/O.
        """
        url = self.resolve(list_type)
        payload = normalize_body(list_type, body)
        return self._forward("POST", list_type, url, payload)

    def _send(self, method: str, url: str, payload: Optional[JsonDict]) -> requests.Response:
        sess = self.session or requests
        try:
            if method == "GET":
                return sess.request(
                    method="GET",
                    url=url,
                    headers={"Cache-Control": "no-cache"},
                    timeout=self.config.timeout_s,
                )
            return sess.request(
                method="POST",
                url=url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout_s,
            )
        except requests.RequestException as exc:
            raise TransportError(str(exc) or "Unknown error") from exc

    def _decode(self, method: str, list_type: str, text: str) -> JsonDict:
        data = safe_parse_json(text)
        if data is None:
            raw = excerpt(text)
            logger.error("Apps Script %s raw response (%s): %s", method, list_type, raw)
            raise UpstreamDecodeError(NOT_JSON_MESSAGES[method], raw)
        return data

    def _forward(
        self, method: str, list_type: str, url: str, payload: Optional[JsonDict] = None
    ) -> ProxyResult:
        try:
            resp = self._send(method, url, payload)
            data = self._decode(method, list_type, resp.text)
        except UpstreamDecodeError as exc:
            return ProxyResult(500, error_envelope(exc.message, raw=exc.raw))
        except TransportError as exc:
            logger.error("%s /forms?type=%s error: %s", method, list_type, exc)
            return ProxyResult(500, error_envelope(str(exc)))

        logger.debug("%s /forms?type=%s -> %s", method, list_type, resp.status_code)
        return ProxyResult(resp.status_code, data)
