"""
Agent Registry

Closed set of agent personas. Each AgentId maps to a frozen profile with the
agent's display identity, its capability roster (tools), its delegation
roster and its areas of expertise. Lookups by unknown ids fail loudly
instead of silently falling back to a default persona.
"""

from dataclasses import dataclass
from enum import Enum

from boardroom.core.domain.errors import UnknownAgentError


class AgentId(str, Enum):
    EXECUTIVE_EVA = "executive-eva"
    STRATEGY = "strategy"
    MARKETING = "marketing"
    FINANCE = "finance"
    OPERATIONS = "operations"
    CUSTOMER = "customer"
    HR = "hr"
    LEGAL = "legal"
    CTO = "cto"
    DATA = "data"
    INTELLIGENCE = "intelligence"
    COMMUNICATIONS = "communications"
    DOCUMENTS = "documents"
    GRANT_EXPERT = "grant-expert"
    GOVERNMENT_CONTRACTS = "government-contracts"
    CHIEF_STRATEGY = "chief-strategy"
    NEGOTIATION_EXPERT = "negotiation-expert"
    DIGITAL_FUNDRAISING = "digital-fundraising"


@dataclass(frozen=True)
class AgentProfile:
    agent_id: AgentId
    name: str
    role: str
    tools: tuple[str, ...]
    delegates_to: tuple[AgentId, ...]
    expertise: tuple[str, ...]

    @property
    def id(self) -> str:
        return self.agent_id.value

    def context(self, stage: str) -> dict[str, str]:
        """Agent context passed along with every language model call."""
        return {
            "agent_id": self.agent_id.value,
            "name": self.name,
            "role": self.role,
            "stage": stage,
        }


def _profile(agent_id, name, role, tools, delegates_to, expertise) -> AgentProfile:
    return AgentProfile(
        agent_id=agent_id,
        name=name,
        role=role,
        tools=tuple(tools),
        delegates_to=tuple(delegates_to),
        expertise=tuple(expertise),
    )


AGENT_PROFILES: dict[AgentId, AgentProfile] = {
    p.agent_id: p
    for p in (
        _profile(
            AgentId.EXECUTIVE_EVA,
            "Executive Eva",
            "Executive Assistant & Permission Manager",
            ["strategic_analysis", "team_coordination", "decision_making", "report_generation"],
            [AgentId.STRATEGY, AgentId.FINANCE, AgentId.LEGAL, AgentId.OPERATIONS],
            ["leadership", "oversight", "resource allocation", "vision"],
        ),
        _profile(
            AgentId.STRATEGY,
            "Alex Strategy",
            "Strategic Planning & Analytics Expert",
            ["market_analysis", "competitive_research", "swot_analysis", "strategic_planning"],
            [AgentId.DATA, AgentId.INTELLIGENCE, AgentId.MARKETING],
            ["market strategy", "business development", "competitive intelligence"],
        ),
        _profile(
            AgentId.MARKETING,
            "Maya Creative",
            "Marketing & Content Specialist",
            ["campaign_planning", "content_creation", "audience_analysis", "brand_strategy"],
            [AgentId.DATA, AgentId.COMMUNICATIONS, AgentId.DIGITAL_FUNDRAISING],
            ["marketing campaigns", "brand management", "social media", "content"],
        ),
        _profile(
            AgentId.FINANCE,
            "Felix Finance",
            "Financial Management Advisor",
            ["financial_modeling", "budget_analysis", "forecasting", "cost_optimization"],
            [AgentId.DATA, AgentId.LEGAL, AgentId.OPERATIONS],
            ["financial planning", "budgeting", "ROI analysis", "risk assessment"],
        ),
        _profile(
            AgentId.OPERATIONS,
            "Oliver Operations",
            "Operations & Productivity Manager",
            ["process_optimization", "efficiency_analysis", "resource_planning", "workflow_design"],
            [AgentId.CTO, AgentId.HR, AgentId.DOCUMENTS],
            ["operations management", "logistics", "supply chain", "efficiency"],
        ),
        _profile(
            AgentId.CUSTOMER,
            "Clara Customer",
            "Customer Relations Specialist",
            ["satisfaction_analysis", "feedback_processing", "retention_strategy", "support_optimization"],
            [AgentId.COMMUNICATIONS, AgentId.MARKETING, AgentId.DATA],
            ["customer success", "support", "satisfaction", "retention"],
        ),
        _profile(
            AgentId.HR,
            "Harper HR",
            "HR & Team Development Coach",
            ["talent_analysis", "team_assessment", "culture_planning", "compensation_analysis"],
            [AgentId.OPERATIONS, AgentId.LEGAL, AgentId.FINANCE],
            ["talent management", "culture", "hiring", "team development"],
        ),
        _profile(
            AgentId.LEGAL,
            "Lex Legal",
            "Chief Legal Officer",
            ["contract_analysis", "compliance_check", "risk_assessment", "policy_drafting"],
            [AgentId.FINANCE, AgentId.HR, AgentId.GOVERNMENT_CONTRACTS],
            ["legal compliance", "contracts", "regulations", "IP protection"],
        ),
        _profile(
            AgentId.CTO,
            "Code Commander",
            "Chief Technology Officer",
            ["architecture_design", "code_review", "tech_assessment", "security_audit"],
            [AgentId.DATA, AgentId.OPERATIONS],
            ["software architecture", "technology strategy", "security", "DevOps"],
        ),
        _profile(
            AgentId.DATA,
            "Dr. Data",
            "Chief Data Scientist",
            ["data_analysis", "statistical_modeling", "visualization", "predictive_analytics"],
            [AgentId.INTELLIGENCE, AgentId.CTO],
            ["data science", "ML", "statistics", "analytics"],
        ),
        _profile(
            AgentId.INTELLIGENCE,
            "Intel Investigator",
            "Business Intelligence & Research Specialist",
            ["market_research", "competitor_analysis", "trend_analysis", "report_generation"],
            [AgentId.STRATEGY, AgentId.DATA],
            ["business intelligence", "research", "market trends", "competitive analysis"],
        ),
        _profile(
            AgentId.COMMUNICATIONS,
            "Comm Chief",
            "Communications Director",
            ["press_release", "internal_comms", "crisis_management", "stakeholder_messaging"],
            [AgentId.MARKETING, AgentId.CUSTOMER],
            ["PR", "internal communications", "crisis management", "messaging"],
        ),
        _profile(
            AgentId.DOCUMENTS,
            "Doc Master",
            "Document & Content Management Specialist",
            ["document_creation", "template_management", "knowledge_base", "content_organization"],
            [AgentId.LEGAL, AgentId.OPERATIONS],
            ["documentation", "knowledge management", "templates", "SOPs"],
        ),
        _profile(
            AgentId.GRANT_EXPERT,
            "Dr. Grant Sterling",
            "Grant Writing & Funding Expert",
            ["grant_research", "proposal_writing", "budget_justification", "compliance_documentation"],
            [AgentId.FINANCE, AgentId.LEGAL, AgentId.GOVERNMENT_CONTRACTS],
            ["grant writing", "funding research", "proposal development", "compliance"],
        ),
        _profile(
            AgentId.GOVERNMENT_CONTRACTS,
            "Agent Samuel Contracts",
            "Government Contracts Specialist",
            ["rfp_analysis", "proposal_compliance", "cost_pricing", "past_performance"],
            [AgentId.LEGAL, AgentId.FINANCE, AgentId.GRANT_EXPERT],
            ["federal contracting", "SAM.gov", "procurement", "compliance"],
        ),
        _profile(
            AgentId.CHIEF_STRATEGY,
            "Victoria Sterling",
            "Chief Strategy Officer",
            ["enterprise_strategy", "growth_architecture", "ma_advisory", "competitive_moats"],
            [AgentId.STRATEGY, AgentId.FINANCE, AgentId.EXECUTIVE_EVA],
            ["enterprise strategy", "M&A", "growth planning", "market positioning"],
        ),
        _profile(
            AgentId.NEGOTIATION_EXPERT,
            "Marcus Dealmaker",
            "Negotiation & Deal Structuring Expert",
            ["deal_structuring", "negotiation_strategy", "conflict_resolution", "value_optimization"],
            [AgentId.LEGAL, AgentId.FINANCE, AgentId.CUSTOMER],
            ["negotiation", "deal making", "conflict resolution", "partnership"],
        ),
        _profile(
            AgentId.DIGITAL_FUNDRAISING,
            "Diana Digital",
            "Digital Fundraising & Campaign Expert",
            ["campaign_analytics", "donor_segmentation", "email_campaign", "social_strategy"],
            [AgentId.MARKETING, AgentId.DATA, AgentId.GRANT_EXPERT],
            ["digital fundraising", "donor engagement", "crowdfunding", "email marketing"],
        ),
    )
}


def resolve_agent_id(agent_id: "AgentId | str") -> AgentId:
    """
    Normalize an agent id given as enum member or string value.

    Raises:
        UnknownAgentError: If the id is not registered
    """
    if isinstance(agent_id, AgentId):
        return agent_id
    try:
        return AgentId(str(agent_id).strip().lower())
    except ValueError:
        raise UnknownAgentError(str(agent_id)) from None


def get_profile(agent_id: "AgentId | str") -> AgentProfile:
    return AGENT_PROFILES[resolve_agent_id(agent_id)]


def list_profiles() -> list[AgentProfile]:
    return [AGENT_PROFILES[a] for a in AgentId]
