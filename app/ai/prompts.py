from __future__ import annotations

from app.ai.types import InsightRequest

SYSTEM_PROMPT = (
    "You are a career coach reviewing a developer's profile for a target role. "
    "Reply with a single JSON object only, no prose and no markdown."
)

_RESUME_TEMPLATE = """Analyze this resume for a {role} position and provide detailed ATS feedback.
Compare the experience and projects in the resume against the requirements for {role}.
On a scale of 0-100, provide a "roleMatchScore".

Resume Content:
{excerpt}

Respond with this JSON shape:
{{
  "roleMatchScore": 75,
  "summary": "2-3 sentence overall assessment",
  "strengths": ["strength 1", "strength 2"],
  "weaknesses": ["weakness 1", "weakness 2"],
  "recommendations": ["specific action 1", "specific action 2"],
  "actionPlan": [{{"action": "specific task", "priority": "high|medium|low", "timeline": "timeframe"}}]
}}"""

_CODING_TEMPLATE = """Analyze this coding-practice profile for a developer targeting a {role} role.

{excerpt}

requiredTopics should be 6-10 core topics for the role; focusTopics should be 3-5 topics
to practice next based on the weakest coverage. Use common LeetCode topic names.

Respond with this JSON shape:
{{
  "summary": "Brief summary",
  "strengths": ["strength 1"],
  "weaknesses": ["weakness 1"],
  "recommendations": ["recommendation 1"],
  "requiredTopics": ["Array"],
  "focusTopics": ["Graph"],
  "recommendedProblems": [{{"title": "Problem", "difficulty": "Easy|Medium|Hard", "topic": "Topic", "url": "https://leetcode.com/problems/..."}}],
  "actionPlan": [{{"action": "Action item", "priority": "high|medium|low", "timeline": "1 week"}}]
}}"""

_PORTFOLIO_TEMPLATE = """Analyze this GitHub profile for a developer targeting a {role} role.

{excerpt}

Compare the projects and languages with the requirements for the {role} role.
On a scale of 0-100, provide a "projectRelevanceScore".

Respond with this JSON shape:
{{
  "projectRelevanceScore": 85,
  "summary": "Brief summary",
  "strengths": ["strength 1"],
  "weaknesses": ["weakness 1"],
  "recommendations": ["recommendation 1"],
  "projectIdeas": [{{"title": "Project name", "goal": "What it demonstrates", "tech": ["Tech 1"], "impact": "Why it helps the role"}}],
  "actionPlan": [{{"action": "Action item", "priority": "high|medium|low", "timeline": "1 week"}}]
}}"""

_TEMPLATES = {
    "resume": _RESUME_TEMPLATE,
    "coding": _CODING_TEMPLATE,
    "portfolio": _PORTFOLIO_TEMPLATE,
}


def build_user_prompt(request: InsightRequest) -> str:
    template = _TEMPLATES[request.task]
    role = request.target_role or "software developer"
    return template.format(role=role, excerpt=request.input_excerpt)
