"""Route analysis."""

from .analyzer import AnalysisPolicy, RouteAnalyzer, compute_safety_score, overall_severity

__all__ = ["AnalysisPolicy", "RouteAnalyzer", "compute_safety_score", "overall_severity"]
