"""
Org-mode adapter - project files as the local task store.
"""

from .document import OrgDocument, OrgEntry
from .store import OrgTaskStore


__all__ = ["OrgDocument", "OrgEntry", "OrgTaskStore"]
