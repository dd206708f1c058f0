from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from esstforms.errors import UnknownListType
from esstforms.schemas import ListType

# One Apps Script web app per sheet.
URL_ENV_VARS: dict[ListType, str] = {
    ListType.CONTROL: "APPS_SCRIPT_URL_CONTROL",
    ListType.ALARM: "APPS_SCRIPT_URL_ALARM",
    ListType.DAMAGED: "APPS_SCRIPT_URL_DAMAGED",
    ListType.PARAM: "APPS_SCRIPT_URL_PARAM",
}

TIMEOUT_ENV_VAR = "ESSTFORMS_UPSTREAM_TIMEOUT_S"
DEFAULT_TIMEOUT_S = 30.0


def _timeout_from_env() -> float:
    raw = os.getenv(TIMEOUT_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{TIMEOUT_ENV_VAR} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{TIMEOUT_ENV_VAR} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class ProxyConfig:
    """
    Destination addresses for every list type, resolved once at startup.

    Attributes:
        urls: list type -> Apps Script URL. Missing or empty entries are unset.
        timeout_s: Per-request timeout for upstream calls.
    """

    urls: Mapping[ListType, str] = field(default_factory=dict)
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        urls = {
            list_type: os.getenv(env_var, "").strip()
            for list_type, env_var in URL_ENV_VARS.items()
        }
        return cls(urls=urls, timeout_s=_timeout_from_env())

    def configured_types(self) -> list[ListType]:
        return [t for t in ListType if self.urls.get(t)]

    def resolve(self, list_type: str) -> str:
        """
        Map a raw `type` query value onto its destination URL.

        Raises:
            UnknownListType: tag not recognized, or its URL is empty/unset.
        """
        parsed: Optional[ListType] = ListType.parse(list_type)
        if parsed is None:
            raise UnknownListType(list_type)
        url = self.urls.get(parsed) or ""
        if not url:
            raise UnknownListType(list_type)
        return url
