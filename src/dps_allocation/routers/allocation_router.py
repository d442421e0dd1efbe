from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request

from dps_allocation.allocation.evaluator import AllocationEvaluator
from dps_allocation.configs.logging_config import get_logger
from dps_allocation.domain.entities.allocation import AllocationRequest, AllocationResponse
from dps_allocation.errors import MalformedRequestError

log = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["allocation"])


class RequestTrace(logging.LoggerAdapter):
    """Tags every evaluator trace line with the inbound request id."""

    def process(self, msg, kwargs):
        return f"{msg} request_id={self.extra.get('request_id')}", kwargs


def _evaluator(request: Request) -> AllocationEvaluator:
    return request.app.state.evaluator


@router.post("/allocate")
async def allocate(request: Request) -> dict:
    request_id = request.headers.get("x-request-id") or request.headers.get("x-ms-request-id")

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedRequestError("request body is not valid JSON") from exc
    if not isinstance(body, dict):
        raise MalformedRequestError("request body must be a JSON object")

    req = AllocationRequest.model_validate(body)
    decision = _evaluator(request).evaluate(
        req, trace=RequestTrace(log, {"request_id": request_id})
    )

    response = AllocationResponse.from_decision(decision)
    log.info(
        "allocate.done request_id=%s hub=%s has_payload=%s",
        request_id,
        response.iotHubHostName,
        response.payload is not None,
    )
    return response.model_dump()
