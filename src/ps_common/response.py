"""Envelope for every REST reply from the market API.

    {"code": 0, "message": "trade executed", "data": {...},
     "timestamp": 1767225600000, "request_id": "req_a1b2c3d4e5f6"}

code is 0 on success, otherwise the AppError code (2001, 3001, ...), and
data is null. timestamp is epoch milliseconds like every other wire time.
request_id matches the X-Request-ID header set by RequestLogMiddleware.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.ps_common.datetime_utils import to_epoch_ms, utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: int = Field(default_factory=lambda: to_epoch_ms(utc_now()))
    request_id: str = Field(default_factory=new_request_id)


def success_response(
    data: Any = None, message: str = "success", request_id: str | None = None
) -> ApiResponse:
    resp = ApiResponse(code=0, message=message, data=data)
    if request_id:
        resp.request_id = request_id
    return resp


def error_response(code: int, message: str, request_id: str | None = None) -> ApiResponse:
    resp = ApiResponse(code=code, message=message, data=None)
    if request_id:
        resp.request_id = request_id
    return resp
