from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List

from loguru import logger

from boardroom.agents import default_board
from boardroom.config import TrackerConfig
from boardroom.session import BoardroomSession
from boardroom.states import Topic
from boardroom.tracker import TopicStateManager


_SAMPLE_TOPICS: List[Dict[str, Any]] = [
    {"id": "market_expansion", "title": "Market Expansion", "description": "Entering the EU mid-market", "priority": "high", "estimated_duration": 10},
    {"id": "ai_roadmap", "title": "AI Roadmap", "description": "Where AI fits in the product", "priority": "medium", "estimated_duration": 15},
    {"id": "hiring_plan", "title": "Hiring Plan", "description": "Headcount for the next two quarters", "priority": "low", "estimated_duration": 5},
]


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a scripted boardroom discussion and print topic progress")
    p.add_argument("--topics-json", type=str, help="Path to a JSON array of topic objects")
    p.add_argument("--roles", type=str, default="", help="Comma separated board roles (default: CEO,CTO,CFO,CMO)")
    p.add_argument("--max-turns", type=int, default=20, help="Persona turns per topic before forcing completion")
    p.add_argument("--log-level", type=str, default="INFO", help="Loguru level for stderr output")
    return p.parse_args()


def load_topics(path: str | None) -> List[Topic]:
    if not path:
        return [Topic.from_dict(t) for t in _SAMPLE_TOPICS]
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.error(f"Topics file not found: {path}")
        raise
    return [Topic.from_dict(t) for t in raw]


async def main() -> None:
    args = parse_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper(), colorize=True, format="{time:HH:mm:ss} | {level} | {message}")

    topics = load_topics(args.topics_json)
    roles = [r.strip() for r in args.roles.split(",") if r.strip()]
    board = default_board(roles or None)
    if not board:
        logger.error(f"No known board roles in --roles={args.roles!r}; choose from CEO,CTO,CFO,CMO")
        raise SystemExit(2)
    tracker = TopicStateManager(config=TrackerConfig.from_env())
    session = BoardroomSession(tracker, board, topics, max_turns_per_topic=args.max_turns)
    result = await session.run()
    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
