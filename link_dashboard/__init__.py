"""
link_dashboard package initializer.
"""

from . import analytics
from . import auth
from . import lifecycle
from . import manager
from . import services
from . import views

__all__ = ["analytics", "auth", "lifecycle", "manager", "services", "views"]
