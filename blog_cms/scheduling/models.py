"""
Scheduling data models: SweepResult.

``PostState`` lives in :mod:`blog_cms.models` next to ``Post`` and is
re-exported here for convenience.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from blog_cms.models import PostState
from blog_cms.utils import utc_now


# =============================================================================
# SWEEP RESULT
# =============================================================================


@dataclass
class SweepResult:
    """Diagnostics for one sweep.  Never surfaced to whoever triggered it.

    Attributes:
        started_at: The ``now`` the due check was evaluated against.
        checked: Number of posts inspected.
        published: IDs promoted to published during this sweep.
        errors: Post ID (or ``"*"`` for the listing step) -> error message.
    """

    started_at: datetime = field(default_factory=utc_now)
    checked: int = 0
    published: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "PostState",
    "SweepResult",
]
