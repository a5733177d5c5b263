"""Rich rendering helpers for the compactifai CLI."""
