"""API Routers Package.

Routers:
- dashboard.py: calendars, summary, study report, schedule, event editing

Usage in main.py:
    from api.routers import dashboard_router

    app.include_router(dashboard_router, tags=["dashboard"])
"""

from .dashboard import router as dashboard_router

__all__ = [
    "dashboard_router",
]
