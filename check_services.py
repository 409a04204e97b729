#!/usr/bin/env python3
"""Check connectivity to the geocoding, routing and hazard services."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from route_hazards.config import settings
from route_hazards.errors import ProviderError
from route_hazards.models.domain import GeoPoint
from route_hazards.services.geocoding import NominatimClient
from route_hazards.services.hazards.overpass_client import check_health as overpass_health
from route_hazards.services.routing import FallbackRouteProvider, build_route_providers
from route_hazards.services.routing.osrm_client import check_health as osrm_health

# Two points in central Berlin
SAMPLE_START = GeoPoint(52.517037, 13.388860)
SAMPLE_END = GeoPoint(52.496891, 13.385983)


def main():
    print("=" * 60)
    print("Route Hazard Engine Service Check")
    print("=" * 60)
    print()

    print("1. Configuration")
    print(f"   Nominatim: {settings.nominatim_base_url}")
    print(f"   OSRM:      {settings.osrm_base_url} ({settings.osrm_profile})")
    print(f"   ORS:       {settings.ors_base_url} ({'key set' if settings.ors_api_key else 'no key, skipped'})")
    print(f"   Overpass:  {settings.overpass_url}")
    print()

    failures = 0

    print("2. Geocoding...")
    label = NominatimClient().reverse_geocode(SAMPLE_START)
    print(f"   [OK] Reverse geocode: {label}")
    print()

    print("3. OSRM health check...")
    if osrm_health():
        print("   [OK] OSRM is reachable")
    else:
        print("   [ERROR] OSRM is not responding")
        failures += 1
    print()

    print("4. Overpass health check...")
    if overpass_health():
        print("   [OK] Overpass is reachable")
    else:
        print("   [ERROR] Overpass is not responding")
        failures += 1
    print()

    print("5. Route request through the provider chain...")
    try:
        routes = FallbackRouteProvider(build_route_providers()).compute_routes(SAMPLE_START, SAMPLE_END)
        for route in routes:
            print(f"   [OK] {route.name}: {route.distance:.0f} m, {len(route.steps)} steps via {route.provider}")
    except ProviderError as e:
        print(f"   [ERROR] {e}")
        failures += 1
    except Exception as e:
        print(f"   [ERROR] Route request failed: {e}")
        failures += 1
    print()

    print("=" * 60)
    print("[SUCCESS] All services reachable" if not failures else f"[FAILED] {failures} check(s) failed")
    print("=" * 60)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
