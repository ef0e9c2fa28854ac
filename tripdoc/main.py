"""FastAPI application."""

from fastapi import FastAPI

from tripdoc.api.routes.exports import router as exports_router
from tripdoc.api.routes.health import router as health_router
from tripdoc.api.routes.metrics import router as metrics_router
from tripdoc.api.routes.sessions import router as sessions_router

app = FastAPI(title="Trip Document Export API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(sessions_router, tags=["sessions"])
app.include_router(exports_router, tags=["exports"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Document Export API", "version": "0.1.0"}
