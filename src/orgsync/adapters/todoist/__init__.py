"""
Todoist Adapter - Remote task service implementation for Todoist.
"""

from .adapter import TodoistAdapter
from .client import TodoistApiClient


__all__ = ["TodoistAdapter", "TodoistApiClient"]
