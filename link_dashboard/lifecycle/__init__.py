"""
Link lifecycle rules: activity predicates and slug resolution.
"""

from .activity import is_active, is_unexpired
from .resolver import SlugResolver, resolve_logs, resolve_slug

__all__ = ["is_active", "is_unexpired", "SlugResolver", "resolve_logs", "resolve_slug"]
