from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger


USER_ID = "user"
DEFAULT_DURATION = 10.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TopicStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class TopicPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Topic:
    id: str
    title: str
    estimated_duration: float
    description: str = ""
    priority: TopicPriority = TopicPriority.MEDIUM

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "Topic":
        topic_id = str(obj["id"])
        duration = obj.get("estimated_duration", obj.get("estimatedDuration"))
        if duration is None:
            logger.warning(f"topic_duration_missing | topic={topic_id}; using {DEFAULT_DURATION}min")
            duration = DEFAULT_DURATION
        raw_priority = str(obj.get("priority") or TopicPriority.MEDIUM.value).strip().lower()
        try:
            priority = TopicPriority(raw_priority)
        except ValueError:
            logger.warning(f"topic_priority_invalid | topic={topic_id} priority={raw_priority!r}; using medium")
            priority = TopicPriority.MEDIUM
        return cls(
            id=topic_id,
            title=obj.get("title", "") or "",
            estimated_duration=float(duration),
            description=obj.get("description", "") or "",
            priority=priority,
        )


@dataclass(frozen=True)
class Message:
    agent_id: str
    text: str
    timestamp: datetime = field(default_factory=utcnow)
    topic_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "topic_id": self.topic_id,
        }


@dataclass(frozen=True)
class TopicKeyMetrics:
    total_messages: int = 0
    agent_messages: int = 0
    user_messages: int = 0
    average_message_length: float = 0.0
    topic_relevance_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_messages": self.total_messages,
            "agent_messages": self.agent_messages,
            "user_messages": self.user_messages,
            "average_message_length": self.average_message_length,
            "topic_relevance_score": self.topic_relevance_score,
        }


@dataclass(frozen=True)
class TopicState:
    """Tracker-owned progress record for one topic.

    Instances are never mutated in place; the manager swaps in a new one on
    every change, so a reference handed to a caller is a stable snapshot.
    """

    topic_id: str
    estimated_duration: float
    status: TopicStatus = TopicStatus.PENDING
    message_count: int = 0
    participant_count: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    actual_duration: float = 0.0
    completion_percentage: int = 0
    key_metrics: TopicKeyMetrics = field(default_factory=TopicKeyMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "status": self.status.value,
            "message_count": self.message_count,
            "participant_count": self.participant_count,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "estimated_duration": self.estimated_duration,
            "actual_duration": self.actual_duration,
            "completion_percentage": self.completion_percentage,
            "key_metrics": self.key_metrics.to_dict(),
        }


@dataclass(frozen=True)
class TopicSummary:
    is_completed: bool
    message_count: int
    duration: float
    participants: int
    relevance_score: int
    target_messages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_completed": self.is_completed,
            "message_count": self.message_count,
            "duration": self.duration,
            "participants": self.participants,
            "relevance_score": self.relevance_score,
            "target_messages": self.target_messages,
        }


@dataclass(frozen=True)
class ProgressReport:
    total_topics: int = 0
    completed_topics: int = 0
    active_topics: int = 0
    pending_topics: int = 0
    overall_progress: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_topics": self.total_topics,
            "completed_topics": self.completed_topics,
            "active_topics": self.active_topics,
            "pending_topics": self.pending_topics,
            "overall_progress": self.overall_progress,
        }
