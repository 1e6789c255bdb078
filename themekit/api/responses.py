from __future__ import annotations

from typing import Any

from fastapi import Request


def response_meta(request: Request) -> dict[str, Any]:
    return {"request_id": getattr(request.state, "request_id", None)}


def success_payload(request: Request, *, data: Any) -> dict[str, Any]:
    return {
        "data": data,
        "meta": response_meta(request),
    }
