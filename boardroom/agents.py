from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence

from loguru import logger

from .states import Message, Topic


class BoardAgent(Protocol):
    id: str
    role: str

    async def respond(self, topic: Topic, history: Sequence[Message]) -> str:
        ...


class ScriptedAgent:
    """Persona that replays canned lines, one per turn, cycling when exhausted.

    Lines may use ``{title}`` and ``{description}`` placeholders, filled from
    the topic under discussion.
    """

    def __init__(self, agent_id: str, role: str, lines: Sequence[str]) -> None:
        self.id = agent_id or ""
        self.role = role or ""
        self.lines = list(lines)
        self._turn = 0

    async def respond(self, topic: Topic, history: Sequence[Message]) -> str:
        if not self.lines:
            return ""
        line = self.lines[self._turn % len(self.lines)]
        self._turn += 1
        try:
            return line.format(title=topic.title, description=topic.description)
        except (KeyError, IndexError) as e:
            logger.warning(f"scripted_line_format_failed | id={self.id} err={e}")
            return line


_DEFAULT_LINES: Dict[str, List[str]] = {
    "CEO": [
        "Let's frame {title} against our annual goals and decide what success looks like this quarter.",
        "I want a clear owner for {title} and a decision we can take to the board next month.",
        "What would make us regret not moving faster on {title}?",
    ],
    "CTO": [
        "From an engineering standpoint {title} touches our platform roadmap and the capacity we have left.",
        "We can prototype within two sprints but scaling it needs investment in infrastructure and observability.",
        "Technical debt is the hidden cost here so I would budget time to pay some of it down first.",
    ],
    "CFO": [
        "The numbers on {title} need a payback period under eighteen months to clear our hurdle rate.",
        "I would stage the spend in tranches tied to measurable milestones rather than one lump commitment.",
        "Cash runway stays above twenty months in the base case even with this initiative funded.",
    ],
    "CMO": [
        "Customers are already asking about {title} so there is a positioning window we should not miss.",
        "We should test messaging with two segments before a broad launch to protect acquisition costs.",
        "Brand consistency matters so the story needs to connect to what we already promise.",
    ],
}


def default_board(roles: Optional[Sequence[str]] = None) -> List[ScriptedAgent]:
    picked = list(roles) if roles else list(_DEFAULT_LINES)
    board = []
    for role in picked:
        lines = _DEFAULT_LINES.get(role.upper())
        if lines is None:
            logger.warning(f"unknown_board_role | role={role}; skipping")
            continue
        board.append(ScriptedAgent(agent_id=role.lower(), role=role.upper(), lines=lines))
    return board
