from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .agents import BoardAgent
from .states import Message, Topic, TopicState
from .tracker import TopicStateManager


class BoardroomSession:
    """Runs a board discussion over an ordered list of topics.

    Each topic is tracked by the shared TopicStateManager; the session
    moves on to the next topic when the tracker reports completion, or
    force-completes a topic after max_turns_per_topic persona turns.
    """

    def __init__(
        self,
        tracker: TopicStateManager,
        agents: Sequence[BoardAgent],
        topics: Sequence[Topic],
        max_turns_per_topic: int = 20,
    ) -> None:
        if not agents:
            raise ValueError("BoardroomSession needs at least one agent")
        self.tracker = tracker
        self.agents = list(agents)
        self.topics = list(topics)
        self.max_turns_per_topic = max(1, int(max_turns_per_topic))
        self.completed_order: List[str] = []
        self.final_states: Dict[str, TopicState] = {}
        self._current_topic_id: Optional[str] = None

    @property
    def current_topic_id(self) -> Optional[str]:
        return self._current_topic_id

    def _handle_complete(self, topic_id: str, state: TopicState) -> None:
        self.completed_order.append(topic_id)
        self.final_states[topic_id] = state
        if topic_id == self._current_topic_id:
            self._current_topic_id = None
        logger.info(
            f"topic_complete | topic={topic_id} msgs={state.message_count} "
            f"participants={state.participant_count} rel={state.key_metrics.topic_relevance_score}"
        )

    def post_user_message(self, text: str) -> bool:
        topic_id = self._current_topic_id
        if topic_id is None:
            logger.warning("user_message_dropped | no active topic")
            return False
        self.tracker.add_message(topic_id, Message(agent_id=self.tracker.config.user_id, text=text, topic_id=topic_id))
        return True

    async def _discuss(self, topic: Topic) -> None:
        self.tracker.initialize_topic(topic)
        self.tracker.on_topic_complete(topic.id, self._handle_complete)
        self.tracker.start_topic(topic.id)
        self._current_topic_id = topic.id
        logger.info(f"topic_start | topic={topic.id} title='{topic.title}' est={topic.estimated_duration}min")

        for turn in range(self.max_turns_per_topic):
            agent = self.agents[turn % len(self.agents)]
            history = self.tracker.get_topic_messages(topic.id)
            text = (await agent.respond(topic, history) or "").strip()
            if not text:
                logger.warning(f"topic_turn_empty | topic={topic.id} spk={agent.id} t={turn + 1}")
                continue
            one_line = " ".join(text.split())
            logger.info(f"topic_turn | topic={topic.id} spk={agent.id} t={turn + 1} | msg='{one_line}'")
            self.tracker.add_message(topic.id, Message(agent_id=agent.id, text=text, topic_id=topic.id))
            if self.tracker.is_topic_completed(topic.id):
                return

        if not self.tracker.is_topic_completed(topic.id):
            logger.warning(f"topic_force_complete | topic={topic.id} turns={self.max_turns_per_topic}")
            self.tracker.complete_topic(topic.id)

    async def run(self) -> Dict[str, Any]:
        agent_ids = ",".join(a.id for a in self.agents)
        logger.info(f"session_start | topics={len(self.topics)} agents={agent_ids} max_turns={self.max_turns_per_topic}")

        for topic in self.topics:
            await self._discuss(topic)

        progress = self.tracker.get_progress_report()
        logger.info(
            f"session_end | completed={progress.completed_topics}/{progress.total_topics} "
            f"progress={progress.overall_progress}%"
        )
        topics_out: Dict[str, Any] = {}
        conversation: Dict[str, List[Dict[str, Any]]] = {}
        for topic in self.topics:
            state = self.tracker.get_topic_state(topic.id)
            summary = self.tracker.get_topic_summary(topic.id)
            topics_out[topic.id] = {
                "title": topic.title,
                "state": state.to_dict() if state else None,
                "summary": summary.to_dict() if summary else None,
            }
            conversation[topic.id] = [m.to_dict() for m in self.tracker.get_topic_messages(topic.id)]
        return {
            "topics": topics_out,
            "completed_order": list(self.completed_order),
            "progress": progress.to_dict(),
            "conversation": conversation,
        }
