"""
Boardroom discussion tracking engine.

Modules:
- tracker: TopicStateManager lifecycle + completion heuristics
- states: Topic/Message/TopicState value types + reports
- config: TrackerConfig thresholds (env overridable)
- agents: BoardAgent protocol + scripted executive personas
- session: BoardroomSession orchestrator over an ordered topic list
"""

from .config import TrackerConfig
from .states import Message, ProgressReport, Topic, TopicPriority, TopicState, TopicStatus, TopicSummary, USER_ID
from .tracker import TopicStateManager

__all__ = [
    "Message",
    "ProgressReport",
    "Topic",
    "TopicPriority",
    "TopicState",
    "TopicStateManager",
    "TopicStatus",
    "TopicSummary",
    "TrackerConfig",
    "USER_ID",
]
