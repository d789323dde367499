from datetime import datetime, timezone
import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, status as http_status
from fastapi.responses import JSONResponse

from placement_api.core.config import get_settings
from placement_api.services.database import get_database
from placement_api.services.errors import RepositoryError

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()

ENDPOINTS = {
    "health": "/api/health",
    "companies": "/api/companies",
    "jobs": "/api/jobs",
    "job_requirements": "/api/job-requirements",
    "applications": "/api/applications",
    "roles": "/api/roles",
    "permissions": "/api/permissions",
    "role_permissions": "/api/role-permissions",
    "students": "/api/students",
    "student_academics": "/api/student-academics",
    "student_internships": "/api/student-internships",
    "student_languages": "/api/student-languages",
    "student_family": "/api/student-family",
    "student_addresses": "/api/student-addresses",
    "student_offers": "/api/student-offers",
    "student_certifications": "/api/student-certifications",
    "student_projects": "/api/student-projects",
    "student_documents": "/api/student-documents",
    "student_report": "/api/student-report",
    "users": "/api/users",
    "student_users": "/api/student-users",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def index() -> dict[str, Any]:
    settings = get_settings()
    return {
        "success": True,
        "data": {"name": settings.app_name, "version": settings.app_version, "endpoints": ENDPOINTS},
        "message": "Placement API",
    }


@router.get("/health")
async def health() -> dict[str, Any]:
    return {
        "success": True,
        "data": {
            "status": "OK",
            "timestamp": _now(),
            "uptime_seconds": round(time.monotonic() - _STARTED_AT, 2),
        },
        "message": "Server is running",
    }


@router.get("/health/database")
async def database_health(database=Depends(get_database)):
    try:
        details = await database.ping()
    except RepositoryError as exc:
        return JSONResponse(
            status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "data": {"status": "DISCONNECTED", "timestamp": _now(), "error": exc.message},
                "message": "Database connection failed",
            },
        )
    return {"success": True, "data": details, "message": "Database connection is healthy"}


@router.get("/health/complete")
async def complete_health(database=Depends(get_database)):
    settings = get_settings()
    try:
        database_check = await database.ping()
    except RepositoryError as exc:
        database_check = {"status": "DISCONNECTED", "error": exc.message}

    healthy = database_check["status"] == "CONNECTED"
    data = {
        "status": "HEALTHY" if healthy else "DEGRADED",
        "timestamp": _now(),
        "uptime_seconds": round(time.monotonic() - _STARTED_AT, 2),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"server": {"status": "OK"}, "database": database_check},
    }
    if healthy:
        return {"success": True, "data": data, "message": "All systems operational"}
    logger.warning("health check degraded database=%s", database_check.get("error"))
    return JSONResponse(
        status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "data": data, "message": "Some systems are degraded"},
    )
