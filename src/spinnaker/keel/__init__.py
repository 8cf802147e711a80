"""
Keel resource telemetry.

Turns resource check events into ``keel.resource.checked`` counter
increments without letting metrics failures reach the resource pipeline.
"""

__version__ = "1.0.0"


def get_version() -> str:
    """Get package version."""
    return __version__
