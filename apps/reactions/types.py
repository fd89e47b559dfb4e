# apps/reactions/types.py

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, Iterable, Optional

from apps.reactions.constants import REACTION_TYPES, QUEUED_OPERATIONS, OP_UPDATE


# ==========================================================
# Target
# ==========================================================
@dataclass(frozen=True)
class ReactionTarget:
    """A blog post (comment_id=None) or one comment inside it."""
    blog_id: int
    comment_id: Optional[int] = None

    @property
    def is_blog(self) -> bool:
        return self.comment_id is None

    @property
    def counts_key(self) -> str:
        if self.comment_id is None:
            return f"reaction_counts:blog_{self.blog_id}"
        return f"reaction_counts:blog_{self.blog_id}:comment_{self.comment_id}"

    @property
    def group_name(self) -> str:
        if self.comment_id is None:
            return f"blog.{self.blog_id}"
        return f"blog.{self.blog_id}.comment.{self.comment_id}"


# ==========================================================
# Aggregate counts
# ==========================================================
@dataclass(frozen=True)
class ReactionCounts:
    """
    Per-type counts for one target.
    Every reaction kind is always present; values never go below zero.
    """
    like: int = 0
    love: int = 0
    laugh: int = 0
    surprised: int = 0
    sad: int = 0

    def __post_init__(self):
        for name in REACTION_TYPES:
            value = int(getattr(self, name) or 0)
            object.__setattr__(self, name, max(0, value))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReactionCounts":
        data = data or {}
        return cls(**{k: int(data.get(k) or 0) for k in REACTION_TYPES})

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]]) -> "ReactionCounts":
        """Build from `.values('type').annotate(count=...)` rows."""
        return cls.from_dict({row["type"]: row["count"] for row in rows if row["type"] in REACTION_TYPES})

    def to_dict(self) -> Dict[str, int]:
        return {k: getattr(self, k) for k in REACTION_TYPES}

    def get(self, reaction_type: str) -> int:
        return getattr(self, reaction_type) if reaction_type in REACTION_TYPES else 0

    def incremented(self, reaction_type: str, by: int = 1) -> "ReactionCounts":
        if reaction_type not in REACTION_TYPES:
            return self
        return replace(self, **{reaction_type: self.get(reaction_type) + by})

    def decremented(self, reaction_type: str, by: int = 1) -> "ReactionCounts":
        # floored at zero by __post_init__
        return self.incremented(reaction_type, -by)

    @property
    def total(self) -> int:
        return sum(self.to_dict().values())


# ==========================================================
# Pending operation (queue entry)
# ==========================================================
@dataclass(frozen=True)
class PendingOperation:
    blog_id: int
    comment_id: Optional[int]
    visitor_id: str
    type: str
    operation: str
    previous_type: Optional[str] = None
    timestamp: int = field(default_factory=lambda: int(time.time()))

    def __post_init__(self):
        if self.operation not in QUEUED_OPERATIONS:
            raise ValueError(f"Unsupported pending operation: {self.operation!r}")
        if self.operation == OP_UPDATE and not self.previous_type:
            raise ValueError("Update operations must carry previous_type")

    @property
    def target(self) -> ReactionTarget:
        return ReactionTarget(self.blog_id, self.comment_id)

    @property
    def tuple_key(self):
        return (self.comment_id, self.visitor_id)

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str) -> "PendingOperation":
        data = json.loads(raw)
        comment_id = data.get("comment_id")
        return cls(
            blog_id=int(data["blog_id"]),
            comment_id=int(comment_id) if comment_id is not None else None,
            visitor_id=str(data["visitor_id"]),
            type=data["type"],
            operation=data["operation"],
            previous_type=data.get("previous_type"),
            timestamp=int(data.get("timestamp") or 0),
        )
