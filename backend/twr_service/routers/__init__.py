# backend/twr_service/routers/__init__.py
"""
API routers for the Time-Weighted Return service.

Each router handles a specific domain:
- twr: Time-weighted return calculation
"""

from twr_service.routers.twr import router as twr_router

__all__ = [
    "twr_router",
]
