import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from auditionapi import containers
from auditionapi.config import settings
from auditionapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from auditionapi.core.exceptions import BaseAPIException
from auditionapi.core.logging_middleware import LoggingMiddleware
from auditionapi.logging_config import setup_logging
from auditionapi.routers import (
    admin_router,
    health_router,
    image_router,
    job_router,
    payment_router,
    rewards_router,
    wallet_router,
)

load_dotenv("auditionapi/.env")

logger = logging.getLogger("auditionapi")


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
    app.container = containers.Container()  # type: ignore[attr-defined]

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router)
    for module in (
        rewards_router,
        image_router,
        job_router,
        wallet_router,
        admin_router,
        payment_router,
    ):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
