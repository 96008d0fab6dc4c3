"""FastAPI application main module.

This module defines the FastAPI application instance, the health, status and
metrics endpoints, and the translation of recommender errors into JSON
error responses.
"""

import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from latentrec import __version__
from latentrec.api import state
from latentrec.api.logging_config import RequestLoggingMiddleware
from latentrec.api.metrics import metrics_service
from latentrec.api.routes import model, recommend
from latentrec.api.schemas import StatusResponse
from latentrec.recommender import RecommenderError

# Configure module logger
logger = logging.getLogger(__name__)

# Create FastAPI application instance
app = FastAPI(
    title="latentrec API",
    description="Latent factor collaborative filtering service",
    version=__version__,
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(model.router)
app.include_router(recommend.router)


@app.exception_handler(RecommenderError)
async def recommender_error_handler(request: Request, exc: RecommenderError) -> JSONResponse:
    """Report recommender errors with their status code and details."""
    logger.warning(
        "Request rejected",
        extra={
            "path": str(request.url.path),
            "error_type": type(exc).__name__,
            "error": exc.message,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/status", response_model=StatusResponse)
def status() -> StatusResponse:
    """Describe the served model, if any."""
    recommender = state.current_recommender()
    if recommender is None or not recommender.is_fit:
        return StatusResponse(model_loaded=False)

    return StatusResponse(
        model_loaded=True,
        implicit=recommender.implicit,
        num_users=len(recommender.user_ids()),
        num_items=len(recommender.item_ids()),
        factors=recommender.factors,
        timestamp_last_fit=state.timestamp_last_fit(),
    )


@app.get("/metrics")
def metrics() -> Dict:
    """Per-endpoint call counts and latencies."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    from latentrec.api.logging_config import setup_logging

    setup_logging()
    uvicorn.run(
        "latentrec.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
