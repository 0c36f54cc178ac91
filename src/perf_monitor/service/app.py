"""FastAPI service exposing the performance monitor."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from perf_monitor.collector import PerformanceMonitor
from perf_monitor.config import get_settings
from perf_monitor.telemetry import (
    REQUEST_FAILED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    get_logger,
)

log = get_logger(__name__)

ROUTE_PREFIX = "/performance-monitor"


def get_monitor(request: Request) -> PerformanceMonitor:
    """Monitor attached to the running application."""
    return request.app.state.monitor


# ============================================================================
# Performance monitor endpoints
# ============================================================================

router = APIRouter(prefix=ROUTE_PREFIX, tags=["performance-monitor"])


@router.get("/stats")
async def get_stats(
    monitor: PerformanceMonitor = Depends(get_monitor),  # noqa: B008
) -> Any:
    """Current metrics snapshot, or an {error} object when nothing is available."""
    try:
        result = await monitor.collect()
    except Exception as e:
        log.error(
            REQUEST_FAILED,
            path=f"{ROUTE_PREFIX}/stats",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"error": str(e) or type(e).__name__})
    return result.to_wire()


@router.get("/settings")
async def get_settings_endpoint(
    monitor: PerformanceMonitor = Depends(get_monitor),  # noqa: B008
) -> dict[str, Any]:
    """Current dashboard settings."""
    return monitor.get_settings().to_wire()


@router.post("/settings")
async def update_settings_endpoint(
    payload: Any = Body(default=None),  # noqa: B008
    monitor: PerformanceMonitor = Depends(get_monitor),  # noqa: B008
) -> dict[str, Any]:
    """Apply a partial settings update and return the result."""
    return monitor.update_settings(payload).to_wire()


@router.get("/sidebar", response_class=HTMLResponse)
async def get_sidebar(
    monitor: PerformanceMonitor = Depends(get_monitor),  # noqa: B008
) -> HTMLResponse:
    """Dashboard page."""
    return HTMLResponse(content=monitor.sidebar_html)


# ============================================================================
# Application
# ============================================================================


def create_app(monitor: PerformanceMonitor | None = None) -> FastAPI:
    """Build the service around ``monitor`` (a new one by default).

    The lag probe runs for as long as the application lifespan.
    """
    settings = get_settings()
    monitor = monitor or PerformanceMonitor(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        log.info(SERVICE_STARTING, environment=settings.environment.value)
        await monitor.start()
        log.info(
            SERVICE_READY,
            host=settings.service_host,
            port=settings.service_port,
            platform=monitor.probe.name,
        )

        yield

        await monitor.stop()
        log.info(SERVICE_STOPPED)

    app = FastAPI(
        title=settings.project_name,
        description="Host, container and process metrics for dashboards",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.monitor = monitor

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Service health check endpoint."""
        return {
            "status": "healthy",
            "lag_probe": "running" if monitor.lag_probe.running else "stopped",
        }

    app.include_router(router)
    return app
