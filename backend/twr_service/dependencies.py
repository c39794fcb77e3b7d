# backend/twr_service/dependencies.py
"""
Dependency injection for FastAPI routes.

Usage in routers:
    from twr_service.dependencies import get_twr_calculator

    @router.post("/twr")
    def calculate(calculator: TWRCalculator = Depends(get_twr_calculator)):
        ...

Tests can swap the calculator with app.dependency_overrides[get_twr_calculator].
"""

import logging
from functools import lru_cache

from twr_service.services.twr import TWRCalculator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_twr_calculator() -> TWRCalculator:
    """
    Get the singleton TWRCalculator instance.

    The calculator is stateless, so one instance serves every request.
    """
    logger.debug("Initializing singleton TWRCalculator")
    return TWRCalculator()
