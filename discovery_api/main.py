"""
FastAPI Backend for the Continuous Discovery Canvas

Routes:
- Outcomes / opportunities / solutions (the opportunity solution tree)
- Interviews and evidence backing opportunities
- Health check (Neo4j connectivity)
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from discovery_api.features.discovery.errors import DiscoveryError, InvalidInput
from discovery_api.platform.env import SCHEMA_INIT_ON_STARTUP, get_api_host, get_api_port
from discovery_api.platform.neo4j import NEO4J_DATABASE, close_neo4j_driver, init_neo4j_driver
from discovery_api.platform.observability.request_logging import (
    RequestTimer,
    error_context,
    http_context,
    new_request_id,
    set_request_id,
)
from discovery_api.platform.observability.smart_logger import SmartLogger
from discovery_api.platform.schema import SchemaManager


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared Neo4j driver (and ensure constraints) for the app's lifetime."""
    SmartLogger.log(
        "INFO",
        "Discovery API starting.",
        category="api.startup",
        params={"logger": SmartLogger.impl_source, "schema_init": SCHEMA_INIT_ON_STARTUP},
    )
    driver = init_neo4j_driver()
    if SCHEMA_INIT_ON_STARTUP:
        SchemaManager(driver, database=NEO4J_DATABASE).initialize_schema()
    try:
        yield
    finally:
        close_neo4j_driver()
        SmartLogger.log("INFO", "Discovery API stopped.", category="api.shutdown")


app = FastAPI(
    title="Continuous Discovery Canvas API",
    description="API for the outcome / opportunity / solution canvas",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- request correlation ----------------------------------------------------

@app.middleware("http")
async def _correlate_request(request: Request, call_next):
    """
    Tag the request with an id (client-supplied `X-Request-Id` or a new one),
    log start and end, and echo the id back on the response.
    """
    request_id = request.headers.get("x-request-id") or new_request_id()
    set_request_id(request_id)
    timer = RequestTimer()
    context = http_context(request)
    SmartLogger.log("INFO", "HTTP request started.", category="api.http.start", params=context)

    try:
        response: Response = await call_next(request)
    except Exception as e:
        SmartLogger.log(
            "ERROR",
            "HTTP request raised an unhandled exception.",
            category="api.http.error",
            params={**context, "error": error_context(e), "duration_ms": timer.ms()},
        )
        raise
    finally:
        set_request_id(None)

    response.headers["X-Request-Id"] = request_id
    SmartLogger.log(
        "WARNING" if response.status_code >= 500 else "INFO",
        "HTTP request finished.",
        category="api.http.end",
        params={**context, "status_code": response.status_code, "duration_ms": timer.ms()},
    )
    return response

# ---- error bodies: {"message": ..., "errors": [...]} ------------------------

@app.exception_handler(DiscoveryError)
async def _discovery_error_handler(request: Request, exc: DiscoveryError):
    SmartLogger.log(
        "WARNING",
        "Request rejected.",
        category="api.error.discovery",
        params={**http_context(request), "status_code": exc.status_code, "message": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidInput(errors=jsonable_encoder(exc.errors()))
    SmartLogger.log(
        "WARNING",
        "Request body failed validation.",
        category="api.error.validation",
        params={**http_context(request), "errors": error.errors},
    )
    return JSONResponse(status_code=error.status_code, content=error.to_body())


# Feature routers
from discovery_api.features.health.router import router as health_router
from discovery_api.features.discovery.router import router as discovery_router

app.include_router(health_router)
app.include_router(discovery_router)


if __name__ == "__main__":
    import uvicorn

    host, port = get_api_host(), get_api_port()
    SmartLogger.log("INFO", "Serving discovery API.", category="api.serve", params={"host": host, "port": port})
    uvicorn.run("discovery_api.main:app", host=host, port=port, reload=True)
