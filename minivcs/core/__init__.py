"""Core types - records and failures shared by every layer.

The Repository lives in ``minivcs.core.repository``; it is not re-exported here
because the storage and service layers import this package.
"""

from .errors import VCSError
from .models import Commit, StatusReport, UnstagedChange

__all__ = ["Commit", "StatusReport", "UnstagedChange", "VCSError"]
