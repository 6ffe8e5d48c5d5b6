"""
Intent Analyzer

Classifies a free-text request into an IntentAnalysis. The language model is
asked once for a fixed-shape JSON object; on any failure the analysis is
derived from deterministic keyword rules. Tool and delegate selection always
comes from the agent's rosters, never from model output.
"""

import json
import re
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from boardroom.core.domain.agents import AgentProfile, get_profile
from boardroom.core.domain.generation import DEFAULT_LLM_TIMEOUT, generate_or_none
from boardroom.core.domain.models import Complexity, IntentAnalysis, Urgency
from boardroom.core.interfaces.llm import LanguageModelClient
from boardroom.core.prompts.pipeline_prompts import INTENT_ANALYSIS_PROMPT

# Order matters: the first family with a matching keyword wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("analysis", ("analyze", "review", "assess", "evaluate", "examine", "audit", "investigate")),
    ("planning", ("plan", "strategy", "roadmap", "design", "architect", "propose", "recommend")),
    ("creation", ("create", "write", "draft", "generate", "build", "develop", "produce", "compose")),
    ("research", ("research", "find", "discover", "investigate", "explore", "identify", "study")),
    ("optimization", ("optimize", "improve", "enhance", "streamline", "efficiency", "reduce cost")),
    ("financial", ("budget", "revenue", "cost", "profit", "forecast", "pricing", "financial", "investment")),
    ("communication", ("email", "message", "announce", "communicate", "brief", "present", "report")),
)
DEFAULT_CATEGORY = "analysis"

COORDINATION_WORDS = ("team", "collaborate", "coordinate")
MAX_DELEGATES = 2
COMPLEX_WORD_COUNT = 50
MODERATE_WORD_COUNT = 20

URGENCY_KEYWORDS: tuple[tuple[Urgency, tuple[str, ...]], ...] = (
    (Urgency.CRITICAL, ("emergency", "critical", "urgent", "asap", "immediately", "crisis", "breaking")),
    (Urgency.HIGH, ("important", "priority", "soon", "quickly", "fast", "rush", "deadline")),
    (Urgency.MEDIUM, ("when possible", "sometime", "planning", "considering")),
    (Urgency.LOW, ("eventually", "future", "maybe", "thinking about")),
)

ENTITY_PATTERNS: dict[str, re.Pattern] = {
    "dates": re.compile(
        r"(?:today|tomorrow|monday|tuesday|wednesday|thursday|friday|saturday|sunday"
        r"|\d{1,2}/\d{1,2}|\d{1,2}-\d{1,2})",
        re.IGNORECASE,
    ),
    "times": re.compile(r"(?:\d{1,2}:\d{2}(?:\s?[ap]m)?|\d{1,2}\s?[ap]m)", re.IGNORECASE),
    "amounts": re.compile(r"\$[\d,]+(?:\.\d{2})?"),
    "emails": re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    "phones": re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),
}

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")


class IntentPayload(BaseModel):
    """Shape the language model must return for a classification."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    intent: str = Field(min_length=1)
    complexity: Complexity
    category: Literal[
        "analysis", "planning", "creation", "research", "optimization",
        "communication", "financial", "legal", "technical",
    ]
    requires_collaboration: bool = Field(default=False, alias="requiresCollaboration")
    key_actions: list[str] = Field(default_factory=list, alias="keyActions")


def parse_intent_payload(text: str) -> IntentPayload | None:
    """Parse a model response into an IntentPayload, or None if unusable."""
    cleaned = _FENCE_RE.sub("", text).strip()
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return IntentPayload.model_validate(json.loads(cleaned[start : end + 1]))
    except (json.JSONDecodeError, ValidationError):
        return None


def complexity_from_word_count(text: str) -> Complexity:
    words = len(text.split())
    if words > COMPLEX_WORD_COUNT:
        return Complexity.COMPLEX
    if words > MODERATE_WORD_COUNT:
        return Complexity.MODERATE
    return Complexity.SIMPLE


def detect_category(text: str) -> str:
    lowered = text.lower()
    for category, words in CATEGORY_KEYWORDS:
        if any(w in lowered for w in words):
            return category
    return DEFAULT_CATEGORY


def select_tools(profile: AgentProfile, text: str) -> list[str]:
    """Roster tools named in the text (underscores read as spaces); first tool if none."""
    lowered = text.lower()
    tools = [t for t in profile.tools if t.replace("_", " ") in lowered]
    return tools or [profile.tools[0]]


def mentions_coordination(text: str) -> bool:
    lowered = text.lower()
    return any(w in lowered for w in COORDINATION_WORDS)


def detect_urgency(text: str) -> Urgency:
    lowered = text.lower()
    for level, words in URGENCY_KEYWORDS:
        if any(w in lowered for w in words):
            return level
    return Urgency.MEDIUM


def extract_entities(text: str) -> dict[str, list[str]]:
    entities = {}
    for name, pattern in ENTITY_PATTERNS.items():
        found = pattern.findall(text)
        if found:
            entities[name] = found
    return entities


class IntentAnalyzer:
    def __init__(
        self,
        llm: LanguageModelClient | None = None,
        timeout: float = DEFAULT_LLM_TIMEOUT,
    ):
        self.llm = llm
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="intent_analyzer")

    async def analyze(self, agent_id: str, request: str) -> IntentAnalysis:
        """
        Classify a request for an agent. Never raises for a registered agent.

        Args:
            agent_id: Registered agent receiving the request
            request: Free-text request

        Returns:
            IntentAnalysis from the model when usable, else from keyword rules
        """
        profile = get_profile(agent_id)
        payload = None
        text = await generate_or_none(
            self.llm,
            INTENT_ANALYSIS_PROMPT.format(request=request),
            profile.context("intent_analysis"),
            self.timeout,
            self.logger,
        )
        if text is not None:
            payload = parse_intent_payload(text)
            if payload is None:
                self.logger.warning("intent_payload_unparsable", agent_id=profile.id, preview=text[:100])

        analysis = self._build(profile, request, payload)
        self.logger.info(
            "intent_analyzed",
            agent_id=profile.id,
            source=analysis.source,
            category=analysis.category,
            complexity=analysis.complexity.value,
            tools=analysis.tools_needed,
            delegates=analysis.delegate_to,
        )
        return analysis

    def analyze_with_rules(self, agent_id: str, request: str) -> IntentAnalysis:
        """Deterministic classification without any language model call."""
        return self._build(get_profile(agent_id), request, None)

    def _build(
        self, profile: AgentProfile, request: str, payload: IntentPayload | None
    ) -> IntentAnalysis:
        if payload is not None:
            category = payload.category
            complexity = payload.complexity
            intent = payload.intent.strip()
            collaboration = (
                payload.requires_collaboration
                or complexity == Complexity.COMPLEX
                or mentions_coordination(request)
            )
        else:
            category = detect_category(request)
            complexity = complexity_from_word_count(request)
            intent = f"{category} task for {profile.id}"
            collaboration = complexity == Complexity.COMPLEX or mentions_coordination(request)

        delegates = (
            [d.value for d in profile.delegates_to[:MAX_DELEGATES]] if collaboration else []
        )
        return IntentAnalysis(
            intent=intent,
            complexity=complexity,
            category=category,
            tools_needed=select_tools(profile, request),
            requires_collaboration=collaboration,
            delegate_to=delegates,
            urgency=detect_urgency(request),
            entities=extract_entities(request),
            source="llm" if payload is not None else "rules",
        )
