"""
External collaborators: link-storage and log-storage services.
"""

from .base import BaseLinkService, BaseLogService, ServiceError, UnauthorizedError
from .memory import InMemoryLinkService, InMemoryLogService
from .service_factory import close_services, get_services

__all__ = [
    "BaseLinkService",
    "BaseLogService",
    "ServiceError",
    "UnauthorizedError",
    "InMemoryLinkService",
    "InMemoryLogService",
    "close_services",
    "get_services",
]
