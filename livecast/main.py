import time
import traceback
import uuid
from contextlib import asynccontextmanager
from os import environ

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from livecast.api.errors import app_error_handler
from livecast.api.v1.dependency import get_boost_service
from livecast.api.v1.routers import content, feed, recording, session
from livecast.api.webhooks import provider as provider_webhook
from livecast.app_config import get_app_environ_config
from livecast.schemas.init_schemas import init_schema
from livecast.services.app_store import uses_mongo_store
from livecast.shared.api import health
from livecast.shared.api.utils import api_failure, get_all_routes_info, init_logger, validation_exception_handler
from livecast.shared.config import config
from livecast.utils.app_errors import AppError, AppErrorCode
from livecast.workers.boost_expiry import start_boost_expiry, stop_boost_expiry

API_PREFIX = "/api/v1"


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore
        start_time = time.time()
        request_id = str(uuid.uuid4())[:8]

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000

            logger.info(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Duration: {process_time:.2f}ms"
            )

            return response

        except Exception as exc:
            process_time = (time.time() - start_time) * 1000

            logger.error(
                f"[{request_id}] Unhandled exception in {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - "
                f"Error: {type(exc).__name__}: {exc}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            failure = api_failure(
                errcode=AppErrorCode.E_INTERNAL_ERROR,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return ORJSONResponse(
                status_code=500,
                content=failure.model_dump(),
            )


def include_routes(server: FastAPI, prefix: str):
    for module in (session, feed, content, recording):
        server.include_router(module.router, prefix=prefix)
    server.include_router(provider_webhook.router)
    server.include_router(health.router)

    for route_info in get_all_routes_info(server):
        methods = ",".join(route_info["methods"])
        logger.debug("Loaded route: {:<12} {:<60} {}", methods, route_info["path"], route_info["endpoint"])


@asynccontextmanager
async def lifespan(server: FastAPI):
    init_logger()

    logger.info("Application startup...")

    if uses_mongo_store():
        # Initialize MongoDB schemas and Beanie ODM
        await init_schema()
        logger.info("✅ MongoDB record store initialized")

    if str(config.get("LOGFIRE_ENABLE", "false")).lower() == "true":
        logger.info("Logfire initializing")

        logfire.configure(
            token=config.get("LOGFIRE_TOKEN"),
            service_name="livecast-core",
            service_version=environ.get("BUILD_COMMIT") or "dev",
        )

        logger.info("Logfire instrument fastapi")
        logfire.instrument_fastapi(server, capture_headers=True)

        logger.info("Logfire instrument mongo")
        logfire.instrument_pymongo(capture_statement=DEBUG)

        logger.info("Logfire instrument httpx")
        logfire.instrument_httpx()

    boost_expiry_task = start_boost_expiry(
        get_boost_service(), get_app_environ_config().BOOST_EXPIRY_INTERVAL_SECONDS
    )

    yield

    await stop_boost_expiry(boost_expiry_task)

    logger.info("Application shutdown...")


def create_app() -> FastAPI:
    server = FastAPI(
        version="1.0",
        title="LiveCast Core API",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    server.add_middleware(HTTPLoggingMiddleware)

    server.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=[x.strip() for x in str(config.get("API_CORS_ORIGINS", "*")).split(",") if x.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    server.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
    server.add_exception_handler(AppError, app_error_handler)  # type: ignore

    include_routes(server, API_PREFIX)
    return server


DEBUG = str(config.get("DEBUG", "false")).lower() == "true"

app = create_app()


def build_granian_kwargs():
    kwargs = {
        "interface": "asgi",
        "address": config.get("API_HOST", "0.0.0.0"),
        "port": int(config.get("API_PORT", "8000")),
        "workers": int(config.get("API_WORKERS", "1")),
        "reload": DEBUG,
    }

    return kwargs


if __name__ == "__main__":
    granian_kwargs = build_granian_kwargs()
    Granian("livecast.main:app", **granian_kwargs).serve()
