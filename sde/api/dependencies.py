"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from sde.services.application.ellipse_service import EllipseService


# Rate limiter shared by the app and its routers
limiter = Limiter(key_func=get_remote_address)


def get_ellipse_service() -> EllipseService:
    """
    Dependency factory for EllipseService.

    Returns:
        EllipseService configured from settings
    """
    return EllipseService()


# Type aliases for cleaner route signatures
EllipseServiceDep = Annotated[EllipseService, Depends(get_ellipse_service)]
