"""Health check and metrics endpoints."""

from fastapi import APIRouter, Request, Response
from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST

from leadline.schemas.common import HealthResponse

router = APIRouter(tags=["health"])

# Prometheus metrics
LEADS_RECEIVED = Counter("leads_received_total", "Total accepted leads", ["type"])
VALIDATION_ERRORS = Counter("validation_errors_total", "Rejected lead submissions", ["type"])
NOTIFICATIONS = Counter("notifications_total", "Notification attempts by outcome", ["channel", "status"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint. Degraded when no notification channel is configured."""
    channels = request.app.state.dispatcher.configured_channels()
    overall = "healthy" if any(channels.values()) else "degraded"
    return HealthResponse(status=overall, channels=channels)


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
