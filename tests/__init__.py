# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_listing, make_criteria
"""

from .utils import make_criteria, make_listing, make_pool, make_session

__all__ = ["make_criteria", "make_listing", "make_pool", "make_session"]
