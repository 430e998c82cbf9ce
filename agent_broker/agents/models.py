"""
Agent Registry Models

Pydantic models for agent cards, registered agents, list filters
and the request/response bodies of the HTTP API.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, List, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _CardModel(BaseModel):
    """A2A wire models use camelCase keys; snake_case is accepted too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class AgentSkill(_CardModel):
    """A named capability unit within an agent card."""
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    examples: Optional[List[str]] = None
    input_modes: Optional[List[str]] = None
    output_modes: Optional[List[str]] = None


class AgentProvider(_CardModel):
    """Organization publishing the agent."""
    organization: str = ""
    url: Optional[str] = None


class AgentCapabilities(_CardModel):
    """Optional protocol features the agent supports."""
    streaming: Optional[bool] = None
    push_notifications: Optional[bool] = None
    state_transition_history: Optional[bool] = None


class AgentCard(_CardModel):
    """
    A2A agent capability descriptor.

    Every field has an empty default so that an incomplete card can still be
    decoded; completeness is checked by ``validate_agent_card``.
    """
    name: str = ""
    description: str = ""
    url: str = ""
    version: str = ""
    skills: List[AgentSkill] = Field(default_factory=list)

    protocol_version: Optional[str] = None
    provider: Optional[AgentProvider] = None
    capabilities: Optional[AgentCapabilities] = None
    default_input_modes: Optional[List[str]] = None
    default_output_modes: Optional[List[str]] = None
    documentation_url: Optional[str] = None
    icon_url: Optional[str] = None

    def skill_ids(self) -> List[str]:
        return [s.id for s in self.skills]

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with A2A camelCase keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RegisteredAgent(BaseModel):
    """An agent card registered with the broker, plus broker metadata."""
    id: str
    card: AgentCard
    tags: List[str] = Field(default_factory=list)
    # Must always describe the current card, or be absent.
    embedding: Optional[List[float]] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AgentFilter(BaseModel):
    """Criteria for listing agents. Empty criteria match everything."""
    offset: int = 0
    limit: int = 20
    tags: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    query: str = ""

    def matches(self, agent: RegisteredAgent) -> bool:
        """Predicates are ANDed; any single tag or skill match satisfies its predicate."""
        if self.tags and not set(self.tags) & set(agent.tags):
            return False
        if self.skills and not set(self.skills) & set(agent.card.skill_ids()):
            return False
        if self.query:
            needle = self.query.lower()
            haystacks = (agent.card.name.lower(), agent.card.description.lower())
            if not any(needle in h for h in haystacks):
                return False
        return True


class AgentListResult(BaseModel):
    """One page of agents plus the total number of matches."""
    agents: List[RegisteredAgent] = Field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.agents) < self.total


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterAgentRequest(BaseModel):
    """Request to register a new agent."""
    agent_id: str = ""
    agent_card: AgentCard = Field(default_factory=AgentCard)
    tags: Optional[List[str]] = None


class UpdateAgentRequest(BaseModel):
    """Request to replace an agent's card and tags."""
    agent_card: AgentCard = Field(default_factory=AgentCard)
    tags: Optional[List[str]] = None


class AgentRecordResponse(BaseModel):
    """Admin view of a registered agent."""
    agent_id: str
    agent_card: Dict[str, Any]
    endpoint: str
    skills: List[str]
    tags: List[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_agent(cls, agent: RegisteredAgent) -> "AgentRecordResponse":
        return cls(
            agent_id=agent.id,
            agent_card=agent.card.to_wire(),
            endpoint=agent.card.url,
            skills=agent.card.skill_ids(),
            tags=list(agent.tags or []),
            created_at=agent.created_at,
            updated_at=agent.updated_at,
        )


class PaginationInfo(BaseModel):
    offset: int
    limit: int
    total: int
    has_more: bool


class AgentListResponse(BaseModel):
    agents: List[AgentRecordResponse]
    pagination: PaginationInfo

    @classmethod
    def from_result(cls, result: AgentListResult) -> "AgentListResponse":
        return cls(
            agents=[AgentRecordResponse.from_agent(a) for a in result.agents],
            pagination=PaginationInfo(
                offset=result.offset,
                limit=result.limit,
                total=result.total,
                has_more=result.has_more,
            ),
        )


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[List[Dict[str, str]]] = None
