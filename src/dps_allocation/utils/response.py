from __future__ import annotations

import time
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


def success(data: Any, message: str = "request processed successfully") -> dict[str, Any]:
    return {"status": "success", "message": message, "data": data, "timestamp": now_ms()}


def failure(message: str, error: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "failure", "message": message, "timestamp": now_ms()}
    if error:
        body["error"] = error
    return body
