"""Observability API endpoints: metrics scrape, health, readiness and a sample error."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors.exceptions import BusinessException
from .health import check_database_health, run_health_checks

router = APIRouter(tags=["Observability"])


@router.get("/metrics", summary="Prometheus metrics endpoint", include_in_schema=False)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Component health; 503 when any component is unhealthy",
)
def health_check(db: Session = Depends(get_db)):
    report = run_health_checks(db)
    return JSONResponse(content=report.to_dict(), status_code=report.http_status)


@router.get(
    "/health/error",
    summary="Sample business error",
    description="Always fails with a business exception; shows the error envelope format",
)
def health_error():
    raise BusinessException("This is a test error")


@router.get(
    "/ready",
    summary="Readiness check endpoint",
    description="Ready once the database answers (Kubernetes readiness probe)",
)
def readiness_check(db: Session = Depends(get_db)):
    database = check_database_health(db)
    if database.is_healthy:
        return {"status": "ready", "message": "Application is ready to serve traffic"}
    return JSONResponse(content={"status": "not_ready", "message": database.message}, status_code=503)
