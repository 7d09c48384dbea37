"""
Blinko ICS Sync package.

Pulls todo notes from the Blinko API and publishes them as an iCalendar feed.
The FastAPI app instance is exposed for convenience imports if desired.
"""

# Expose FastAPI app at package level (optional import path: src.blinko_ics.app)
try:
    from .main import app  # noqa: F401
except ImportError:
    # During certain tooling operations (e.g., static analysis) optional runtime
    # dependencies may be missing. The engine in .ics stays importable.
    pass
