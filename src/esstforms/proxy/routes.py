from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from esstforms.errors import UnknownListType, error_envelope
from esstforms.schemas import ListType

from .deps import get_proxy
from .models import HealthResponse
from .service import FormProxy, ProxyResult

logger = logging.getLogger(__name__)

router = APIRouter()

# Omitted `type` means control; anything unrecognized is a 400.
DEFAULT_LIST_TYPE = ListType.CONTROL.value


def _respond(result: ProxyResult) -> JSONResponse:
    return JSONResponse(result.body, status_code=result.status_code)


def _unknown_type(exc: UnknownListType) -> JSONResponse:
    logger.warning("Rejected /forms request: %s", exc)
    return JSONResponse(error_envelope(str(exc)), status_code=400)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/forms")
async def read_forms(
    list_type: str = Query(DEFAULT_LIST_TYPE, alias="type"),
    proxy: FormProxy = Depends(get_proxy),
) -> JSONResponse:
    try:
        proxy.resolve(list_type)
    except UnknownListType as exc:
        return _unknown_type(exc)

    result = await run_in_threadpool(proxy.read, list_type)
    return _respond(result)


@router.post("/forms")
async def write_forms(
    request: Request,
    list_type: str = Query(DEFAULT_LIST_TYPE, alias="type"),
    proxy: FormProxy = Depends(get_proxy),
) -> JSONResponse:
    try:
        proxy.resolve(list_type)
    except UnknownListType as exc:
        return _unknown_type(exc)

    try:
        body: Any = await request.json()
    except (ValueError, UnicodeDecodeError) as exc:
        logger.warning("POST /forms?type=%s invalid JSON body: %s", list_type, exc)
        return JSONResponse(error_envelope(f"Request body is not valid JSON: {exc}"), status_code=400)
    if not isinstance(body, dict):
        return JSONResponse(
            error_envelope(f"Request body must be a JSON object, got {type(body).__name__}"),
            status_code=400,
        )

    result = await run_in_threadpool(proxy.write, list_type, body)
    return _respond(result)
