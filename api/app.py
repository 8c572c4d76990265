"""
FastAPI Application

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import APIError, api_error_handler, generic_error_handler, oracle_error_handler
from api.routes import evidence, health, logs, markets, reconsider, resolve
from core.schemas.errors import OracleException
from orchestrator.service import OracleService


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

API_DESCRIPTION = """
Oracle for prediction markets: agents research and judge a market question,
the transcript is pinned to a content store and the outcome is committed to
the ledger, after which winners are paid.

- `POST /markets`, `GET /markets`, `GET /markets/{id}`, `POST /markets/{id}/distribute`
- `POST /evidence` (file upload or CID)
- `POST /resolve`, `POST /resolve/schedule`, `DELETE /resolve/schedule/{id}`
- `POST /reconsider` (advisory only)
- `GET /logs`, `GET /health`, `GET /stats`
"""

# uvicorn api.app:app picks the level up from PROPHECY_LOG_LEVEL; `prophecy serve`
# has configured logging already, which makes this a no-op
logging.basicConfig(
    level=getattr(logging, os.getenv("PROPHECY_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format=LOG_FORMAT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    service: Optional[OracleService] = getattr(app.state, "service", None)
    if service is not None:
        service.close()


def create_app(service: Optional[OracleService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``service`` is built from prophecy.json + environment on first request
    when not given.
    """

    app = FastAPI(
        title="Prophecy Oracle API",
        description=API_DESCRIPTION,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(OracleException, oracle_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(health.router)
    app.include_router(markets.router)
    app.include_router(evidence.router)
    app.include_router(resolve.router)
    app.include_router(reconsider.router)
    app.include_router(logs.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
