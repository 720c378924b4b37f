"""Data layer for lazybeads."""

from .models import (
    Comment,
    Issue,
    IssueStatus,
    IssueType,
    Snapshot,
)
from .beads_client import BeadsClient, BeadsError

__all__ = [
    "BeadsClient",
    "BeadsError",
    "Comment",
    "Issue",
    "IssueStatus",
    "IssueType",
    "Snapshot",
]
