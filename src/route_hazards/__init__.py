"""Route hazard analysis engine."""
