from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import requests
from fastapi import FastAPI, Request

from .config import ProxyConfig
from .service import FormProxy

logger = logging.getLogger(__name__)


def build_lifespan(
    config: Optional[ProxyConfig] = None,
    session: Optional[requests.Session] = None,
    on_startup: Optional[Callable[[], None]] = None,
):
    """
    Build the app lifespan.

    On startup:
      - run `on_startup` (logging setup in production)
      - resolve ProxyConfig (from env unless one is passed in)
      - open a requests.Session shared by all upstream calls
    On shutdown the session is closed if we opened it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if on_startup is not None:
            on_startup()
        cfg = config or ProxyConfig.from_env()
        owned = session is None
        sess = session if session is not None else requests.Session()

        configured = [t.value for t in cfg.configured_types()]
        if configured:
            logger.info("Proxy destinations configured for: %s", ", ".join(configured))
        else:
            logger.warning("No Apps Script URLs configured; every /forms call will be rejected.")

        app.state.proxy = FormProxy(cfg, session=sess)
        try:
            yield
        finally:
            if owned:
                sess.close()

    return lifespan


async def get_proxy(request: Request) -> FormProxy:
    """
    Dependency to retrieve the FormProxy from app.state.
    """
    proxy = getattr(request.app.state, "proxy", None)
    if proxy is None:
        raise RuntimeError("FormProxy not available on app.state (lifespan not initialized).")
    return proxy
