from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dps_allocation.allocation.evaluator import AllocationEvaluator
from dps_allocation.allocation.policy_factory import PayloadPolicyFactory
from dps_allocation.configs.logging_config import get_logger, setup_logging
from dps_allocation.configs.settings import Settings, get_settings
from dps_allocation.errors import AppError
from dps_allocation.routers.allocation_router import router as allocation_router
from dps_allocation.routers.health_router import router as health_router
from dps_allocation.utils.response import failure

log = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="dps_allocation", version="0.1.0")
    settings = settings or get_settings()

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        request_id = request.headers.get("x-request-id") or request.headers.get("x-ms-request-id")

        log.info("request.start method=%s path=%s request_id=%s", method, path, request_id)
        response = None
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            log.info(
                "request.end method=%s path=%s status=%s request_id=%s elapsed_ms=%s",
                method,
                path,
                getattr(response, "status_code", "unknown"),
                request_id,
                elapsed_ms,
            )
        return response

    app.include_router(health_router)
    app.include_router(allocation_router)

    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
        log.info("request.error type=app_error status=%s message=%s", exc.http_status, exc.message)
        return JSONResponse(
            status_code=exc.http_status,
            content=failure(exc.message, error=type(exc).__name__),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error: %s", str(exc))
        return JSONResponse(status_code=500, content=failure("internal server error"))

    @app.on_event("startup")
    async def startup() -> None:
        setup_logging(settings.LOG_LEVEL)

        factory = PayloadPolicyFactory(static_payload=settings.STATIC_PAYLOAD)
        policy = factory.get(settings.PAYLOAD_POLICY)

        app.state.settings = settings
        app.state.evaluator = AllocationEvaluator(payload_policy=policy)
        log.info(
            "startup.done service=%s environment=%s payload_policy=%s",
            settings.SERVICE_NAME,
            settings.ENVIRONMENT,
            policy.name(),
        )

    return app


app = create_app()
