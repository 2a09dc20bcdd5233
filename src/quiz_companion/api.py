"""
HTTP boundary: FastAPI routes over the two orchestrators.

Routes stay thin: parse the body, call the service, map errors.

  - InvalidRequest / body validation errors  → 400 {"error": ...}
  - anything raised downstream               → 500, logged with traceback

Collaborators come from FastAPI dependencies backed by ServiceFactory;
tests replace them through `app.dependency_overrides`.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_companion.domain.models import (
    CaptureOrderRequest,
    CreateOrderRequest,
    ExplanationRequest,
    ExplanationResponse,
    HealthStatus,
    OrderCaptured,
    OrderCreated,
)
from quiz_companion.errors import InvalidRequest
from quiz_companion.explanations import ExplanationService
from quiz_companion.logging_setup import setup_logging
from quiz_companion.payments import PaymentService
from quiz_companion.services.factory import ServiceFactory

logger = logging.getLogger(__name__)


def get_explanation_service() -> ExplanationService:
    settings = ServiceFactory.get_settings()
    return ExplanationService(
        store=ServiceFactory.get_store(),
        generator=ServiceFactory.get_generator(),
        models=settings.gemini_models,
    )


def get_payment_service() -> PaymentService:
    return PaymentService(ServiceFactory.get_paypal_client())


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Served as `uvicorn quiz_companion.api:app` nothing else configures logging.
    settings = ServiceFactory.get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    # Credential bootstrap never raises; a missing store is logged and tolerated.
    ServiceFactory.get_store()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Quiz Companion API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        client = request.client.host if request.client else "unknown"
        logger.info("Incoming Request: %s %s - IP: %s", request.method, url, client)
        return await call_next(request)

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected malformed body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request data"})

    @app.get("/health", response_model=HealthStatus)
    async def health() -> HealthStatus:
        return HealthStatus(status="ok", timestamp=utc_timestamp())

    @app.post("/api/explain-exam", response_model=ExplanationResponse)
    async def explain_exam(
        body: ExplanationRequest,
        service: ExplanationService = Depends(get_explanation_service),
    ):
        try:
            explanations = await service.create_or_generate(body)
        except InvalidRequest:
            raise
        except Exception as exc:
            logger.exception("Error generating explanations")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to generate explanations", "details": str(exc)},
            )
        return ExplanationResponse(explanations=explanations)

    @app.post("/api/paypal/create-order", response_model=OrderCreated)
    async def create_order(
        body: CreateOrderRequest,
        service: PaymentService = Depends(get_payment_service),
    ):
        try:
            return await service.create_order(body.amount, body.currency)
        except InvalidRequest:
            raise
        except Exception as exc:
            logger.error("PayPal Create Order Error: %s", exc)
            return JSONResponse(status_code=500, content={"error": f"Failed to create PayPal order: {exc}"})

    @app.post("/api/paypal/capture-order", response_model=OrderCaptured)
    async def capture_order(
        body: CaptureOrderRequest,
        service: PaymentService = Depends(get_payment_service),
    ):
        try:
            return await service.capture_order(body.order_id)
        except InvalidRequest:
            raise
        except Exception as exc:
            logger.error("PayPal Capture Order Error: %s", exc)
            return JSONResponse(status_code=500, content={"error": f"Failed to capture PayPal order: {exc}"})

    return app


app = create_app()
