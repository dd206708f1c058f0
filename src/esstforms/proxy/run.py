from __future__ import annotations

from typing import Optional

import requests
from fastapi import FastAPI

from esstforms import __version__
from esstforms.logging import setup_logging

from .config import ProxyConfig
from .deps import build_lifespan
from .routes import router


def create_app(
    config: Optional[ProxyConfig] = None,
    session: Optional[requests.Session] = None,
    configure_logging: bool = True,
) -> FastAPI:
    lifespan = build_lifespan(
        config,
        session,
        on_startup=setup_logging if configure_logging else None,
    )
    app = FastAPI(title="ESST Forms Proxy", version=__version__, lifespan=lifespan)

    app.include_router(router)

    @app.get("/")
    async def root():
        return {"ok": True, "service": "ESST Forms Proxy"}

    return app


# ASGI entrypoint (uvicorn esstforms.proxy.run:app)
app = create_app()
