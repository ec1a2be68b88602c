"""
Top-level package for the ranking browser.

This package exposes the core architecture (domain, services, UI adapters).
Most code should import from submodules such as:
    rank_viewer.core
    rank_viewer.services
    rank_viewer.ui
"""

__all__: list[str] = []
