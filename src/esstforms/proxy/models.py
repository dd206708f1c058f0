from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    ok: bool = True
    service: str = "esstforms proxy"


class ResponseEnvelope(BaseModel):
    """
    Uniform reply of every /forms call.

    `rows` only appears on successful reads; error replies may carry `raw`,
    an excerpt of an undecodable upstream body. Apps Script can add its own
    keys, so extras are kept.
    """

    model_config = ConfigDict(extra="allow")

    status: Literal["success", "error"]
    rows: Optional[list[dict[str, Any]]] = None
    message: Optional[str] = None
    raw: Optional[str] = Field(None, description="Truncated upstream body (errors only)")
