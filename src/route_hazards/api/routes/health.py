"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


def _get_overpass_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.hazards.overpass_client import check_health as overpass_health_check
    return overpass_health_check


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    """Check OSRM service health."""
    try:
        return {"service": "osrm", "healthy": _get_osrm_health_check()()}
    except Exception as e:
        return {"service": "osrm", "healthy": False, "error": str(e)}


@router.get("/health/overpass", status_code=status.HTTP_200_OK)
def health_overpass() -> dict:
    """Check Overpass API health."""
    try:
        return {"service": "overpass", "healthy": _get_overpass_health_check()()}
    except Exception as e:
        return {"service": "overpass", "healthy": False, "error": str(e)}
