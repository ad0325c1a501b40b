from __future__ import annotations

import math
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from .config import TrackerConfig
from .states import (
    Message,
    ProgressReport,
    Topic,
    TopicKeyMetrics,
    TopicState,
    TopicStatus,
    TopicSummary,
    utcnow,
)


CompletionCallback = Callable[[str, TopicState], None]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _elapsed_minutes(start: datetime, now: datetime) -> float:
    return (now - start).total_seconds() / 60.0


def relevance_score(messages: Sequence[Message], config: TrackerConfig | None = None) -> int:
    """Depth heuristic from average words per message plus participant bonuses.

    Bonuses are added after the 100 cap on the base score, so the result can
    exceed 100 (up to 100 + 2 * participant_bonus).
    """
    cfg = config or TrackerConfig()
    if not messages:
        return 0
    total_words = sum(len(m.text.split(" ")) for m in messages)
    avg_words = total_words / len(messages)
    score = min(100.0, (avg_words / cfg.relevance_words_target) * 100)
    participants = len({m.agent_id for m in messages})
    if participants > 2:
        score += cfg.participant_bonus
    if participants > 3:
        score += cfg.participant_bonus
    return round_half_up(score)


def completion_percentage(
    message_count: int,
    estimated_duration: float,
    start_time: Optional[datetime] = None,
    now: Optional[datetime] = None,
    config: TrackerConfig | None = None,
) -> int:
    """Blend of message progress and elapsed-time progress.

    Each term is capped at 100 individually and the sum is not clamped.
    """
    cfg = config or TrackerConfig()
    message_weight = min(100.0, (message_count / cfg.target_messages) * cfg.message_weight)
    time_weight = 0.0
    if start_time is not None and estimated_duration > 0:
        elapsed = _elapsed_minutes(start_time, now or utcnow())
        time_weight = min(100.0, (elapsed / estimated_duration) * cfg.time_weight)
    return round_half_up(message_weight + time_weight)


def should_complete(state: TopicState, config: TrackerConfig | None = None) -> bool:
    cfg = config or TrackerConfig()
    if state.status != TopicStatus.ACTIVE:
        return False
    if state.message_count < cfg.min_messages:
        return False
    return state.completion_percentage >= cfg.completion_threshold or state.message_count >= cfg.max_messages


class TopicStateManager:
    """Tracks lifecycle, messages and derived metrics for any number of topics.

    Unknown topic ids are never raised: mutators log and return, accessors
    return None or an empty list. All state changes happen under a single
    re-entrant lock, so a completion callback may call back into the manager.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or TrackerConfig()
        self._clock = clock or utcnow
        self._states: Dict[str, TopicState] = {}
        self._messages: Dict[str, List[Message]] = {}
        self._callbacks: Dict[str, CompletionCallback] = {}
        self._lock = threading.RLock()
        logger.debug("topic_state_manager_init")

    @property
    def topic_ids(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def initialize_topic(self, topic: Topic) -> None:
        with self._lock:
            if topic.id in self._states:
                logger.warning(f"topic_reinitialized | topic={topic.id}; previous state discarded")
            self._states[topic.id] = TopicState(
                topic_id=topic.id,
                estimated_duration=topic.estimated_duration,
            )
            self._messages[topic.id] = []
        logger.info(f"topic_initialized | topic={topic.id} est={topic.estimated_duration}min")

    def start_topic(self, topic_id: str) -> None:
        with self._lock:
            state = self._states.get(topic_id)
            if state is None:
                logger.error(f"topic_not_found | op=start topic={topic_id}")
                return
            if state.status == TopicStatus.COMPLETED:
                logger.warning(f"topic_start_refused | topic={topic_id} status=completed; reset first")
                return
            self._states[topic_id] = replace(
                state,
                status=TopicStatus.ACTIVE,
                start_time=self._clock(),
                completion_percentage=0,
            )
        logger.info(f"topic_started | topic={topic_id} est={state.estimated_duration}min")

    def add_message(self, topic_id: str, message: Message) -> None:
        with self._lock:
            state = self._states.get(topic_id)
            messages = self._messages.get(topic_id)
            if state is None or messages is None:
                logger.error(f"topic_not_found | op=add_message topic={topic_id}")
                return

            messages.append(message)
            user_id = self.config.user_id
            user_count = sum(1 for m in messages if m.agent_id == user_id)
            metrics = TopicKeyMetrics(
                total_messages=len(messages),
                agent_messages=len(messages) - user_count,
                user_messages=user_count,
                average_message_length=sum(len(m.text) for m in messages) / len(messages),
                topic_relevance_score=relevance_score(messages, self.config),
            )
            updated = replace(
                state,
                message_count=len(messages),
                participant_count=len({m.agent_id for m in messages}),
                key_metrics=metrics,
            )
            # Completed topics stay frozen at 100
            if updated.status != TopicStatus.COMPLETED:
                updated = replace(
                    updated,
                    completion_percentage=completion_percentage(
                        updated.message_count,
                        updated.estimated_duration,
                        updated.start_time,
                        self._clock(),
                        self.config,
                    ),
                )
            self._states[topic_id] = updated
            logger.debug(
                f"topic_message | topic={topic_id} spk={message.agent_id} n={updated.message_count} "
                f"pct={updated.completion_percentage} rel={metrics.topic_relevance_score}"
            )

            if should_complete(updated, self.config):
                self.complete_topic(topic_id)

    def complete_topic(self, topic_id: str) -> None:
        with self._lock:
            state = self._states.get(topic_id)
            if state is None:
                logger.error(f"topic_not_found | op=complete topic={topic_id}")
                return
            if state.status == TopicStatus.COMPLETED:
                logger.warning(f"topic_already_completed | topic={topic_id}; callback not re-fired")
                return

            end_time = self._clock()
            elapsed = _elapsed_minutes(state.start_time, end_time) if state.start_time else 0.0
            completed = replace(
                state,
                status=TopicStatus.COMPLETED,
                end_time=end_time,
                actual_duration=math.floor(elapsed * 10 + 0.5) / 10,
                completion_percentage=100,
            )
            self._states[topic_id] = completed
            logger.info(
                f"topic_completed | topic={topic_id} planned={state.estimated_duration}min "
                f"actual={completed.actual_duration}min msgs={completed.message_count}"
            )

            callback = self._callbacks.get(topic_id)
            if callback is not None:
                callback(topic_id, completed)

    def on_topic_complete(self, topic_id: str, callback: CompletionCallback) -> None:
        with self._lock:
            if topic_id in self._callbacks:
                logger.debug(f"topic_callback_replaced | topic={topic_id}")
            self._callbacks[topic_id] = callback

    def get_topic_state(self, topic_id: str) -> Optional[TopicState]:
        with self._lock:
            return self._states.get(topic_id)

    def get_topic_messages(self, topic_id: str) -> List[Message]:
        with self._lock:
            return list(self._messages.get(topic_id, ()))

    def get_all_topic_states(self) -> Dict[str, TopicState]:
        with self._lock:
            return dict(self._states)

    def is_topic_completed(self, topic_id: str) -> bool:
        state = self.get_topic_state(topic_id)
        return state is not None and state.status == TopicStatus.COMPLETED

    def get_topic_summary(self, topic_id: str) -> Optional[TopicSummary]:
        state = self.get_topic_state(topic_id)
        if state is None:
            return None
        return TopicSummary(
            is_completed=state.status == TopicStatus.COMPLETED,
            message_count=state.message_count,
            duration=state.actual_duration,
            participants=state.participant_count,
            relevance_score=state.key_metrics.topic_relevance_score,
            target_messages=self.config.target_messages,
        )

    def reset_topic(self, topic_id: str) -> None:
        with self._lock:
            state = self._states.get(topic_id)
            if state is None:
                return
            # Registered callback is kept so the topic can be re-run
            self._states[topic_id] = TopicState(
                topic_id=topic_id,
                estimated_duration=state.estimated_duration,
            )
            self._messages[topic_id] = []
        logger.info(f"topic_reset | topic={topic_id}")

    def get_progress_report(self) -> ProgressReport:
        with self._lock:
            states = list(self._states.values())
        total = len(states)
        completed = sum(1 for s in states if s.status == TopicStatus.COMPLETED)
        active = sum(1 for s in states if s.status == TopicStatus.ACTIVE)
        pending = sum(1 for s in states if s.status == TopicStatus.PENDING)
        return ProgressReport(
            total_topics=total,
            completed_topics=completed,
            active_topics=active,
            pending_topics=pending,
            overall_progress=round_half_up(completed / total * 100) if total else 0,
        )
