from __future__ import annotations

from fastapi import APIRouter, Request

from dps_allocation.utils.response import success

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:
    settings = request.app.state.settings
    evaluator = request.app.state.evaluator
    return success(
        {
            "ok": True,
            "service": settings.SERVICE_NAME,
            "payload_policy": evaluator.payload_policy.name(),
        },
        message="healthy",
    )
