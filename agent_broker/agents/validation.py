"""
Agent validation rules.

Pure functions: no storage access, no side effects.
"""

import re
from typing import List

from ..errors import AgentValidationError, Violation
from .models import AgentCard

MAX_AGENT_ID_LENGTH = 64
AGENT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def agent_card_violations(card: AgentCard) -> List[Violation]:
    """Collect every problem with a card, in reporting order."""
    violations = []

    if not card.name:
        violations.append(Violation("name", "name is required"))
    if not card.url:
        violations.append(Violation("url", "url is required"))
    if not card.version:
        violations.append(Violation("version", "version is required"))
    if not card.skills:
        violations.append(Violation("skills", "at least one skill is required"))

    for i, skill in enumerate(card.skills):
        if not skill.id:
            violations.append(Violation(f"skill[{i}].id", f"skill[{i}].id is required"))
        if not skill.name:
            violations.append(Violation(f"skill[{i}].name", f"skill[{i}].name is required"))

    return violations


def validate_agent_card(card: AgentCard) -> None:
    """Raise AgentValidationError listing all problems with the card."""
    violations = agent_card_violations(card)
    if violations:
        raise AgentValidationError(violations)


def validate_agent_id(agent_id: str) -> None:
    """Raise AgentValidationError if the agent ID is unusable."""
    if not agent_id:
        message = "agent_id is required"
    elif len(agent_id) > MAX_AGENT_ID_LENGTH:
        message = f"agent_id must be at most {MAX_AGENT_ID_LENGTH} characters"
    elif not AGENT_ID_PATTERN.fullmatch(agent_id):
        message = "agent_id must match pattern ^[A-Za-z0-9_-]+$"
    else:
        return
    raise AgentValidationError([Violation("agent_id", message)])
