"""Hazard discovery and classification."""

from .base import HazardSource
from .classifier import SeverityThresholds, classify
from .overpass_client import OverpassClient, build_overpass_query
from .parser import parse_feature, parse_features

__all__ = [
    "HazardSource",
    "OverpassClient",
    "build_overpass_query",
    "parse_feature",
    "parse_features",
    "SeverityThresholds",
    "classify",
]
