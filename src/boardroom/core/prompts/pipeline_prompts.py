"""
Planning Pipeline Prompts

Prompt templates for the four language model calls made while processing a
request:
- INTENT_ANALYSIS_PROMPT: structured classification of the request
- STEP_EXECUTION_PROMPT: role-specific execution of one plan step
- DELIVERABLE_SYNTHESIS_PROMPT: merge of completed step outputs
- FINAL_RESPONSE_PROMPT: short conversational summary of the outcome

Templates are plain str.format strings; callers fill every placeholder.
"""

INTENT_ANALYSIS_PROMPT = """Analyze this request and respond ONLY with a JSON object (no markdown, no code blocks):
{{"intent": "brief description of what user wants", "complexity": "simple|moderate|complex", "category": "one of: analysis, planning, creation, research, optimization, communication, financial, legal, technical", "requiresCollaboration": true/false, "keyActions": ["action1", "action2"]}}

Request: "{request}"
"""

STEP_EXECUTION_PROMPT = """You are executing a specific task step. Be thorough, actionable, and produce real work output.

AGENT: {agent_name} ({agent_role})
EXPERTISE: {expertise}
ORIGINAL REQUEST: {request}
CURRENT STEP: {step_description}
TOOL: {tool}

Instructions:
- Produce real, actionable output for this step
- If this is analysis, provide specific data points and insights
- If this is planning, provide concrete steps with timelines
- If this is creation, produce the actual content
- If this is research, provide findings with specifics
- Format with clear sections and bullet points

Execute this step now and provide the complete output:"""

DELIVERABLE_SYNTHESIS_PROMPT = """You are creating a final deliverable document. Synthesize these work outputs into a cohesive, professional deliverable.

Original Request: {request}

Work Outputs:
{outputs}

Create a well-structured final document that addresses the original request. Use markdown formatting with headers, bullet points, and sections."""

FINAL_RESPONSE_PROMPT = """You just completed a task. Summarize what you did in a conversational but professional way.

Task: {request}
Steps Completed: {completed_steps}/{total_steps}
Deliverables Created: {deliverable_count}
Collaborators: {collaborators}

Key results from your work:
{key_results}

Provide a brief, confident summary of what you accomplished and the key findings. Keep it under 200 words."""
