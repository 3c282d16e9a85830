"""
orgsync - Reconcile Todoist tasks with Org-mode project files.

Architecture:
- core/: Domain entities, exceptions and ports (abstract interfaces)
- application/: Reconciliation engine (diff, resolve, apply, orchestrate)
- adapters/: Todoist client, Org-mode store, configuration providers
- cli/: Command line interface and logging setup
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
