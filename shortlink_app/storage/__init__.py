"""
Storage module for links and visits.

Strategy Pattern: the services depend on LinkStoreStrategy / VisitStoreStrategy,
the SQLAlchemy implementations are wired in dependencies.py.
"""

from .strategies import (
    LinkStoreStrategy,
    VisitStoreStrategy,
    SQLAlchemyLinkStore,
    SQLAlchemyVisitStore,
)

__all__ = [
    "LinkStoreStrategy",
    "VisitStoreStrategy",
    "SQLAlchemyLinkStore",
    "SQLAlchemyVisitStore",
]
