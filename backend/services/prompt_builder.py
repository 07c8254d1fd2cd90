"""Prompt templates for Gemini API calls."""

import json


def _structured_section(resume_data: dict | None) -> str:
    if resume_data is None:
        return ""
    return f"""
STRUCTURED RESUME (JSON):
---
{json.dumps(resume_data, indent=2, ensure_ascii=False)}
---

This resume was built field-by-field. For every suggestion that rewrites a
single existing field, set "path" to that field's address in the JSON above
using dot notation with bracketed list indices, e.g.
"experience[0].bullets[1]", "projects[2].technologies" or "skills.tools".
"original_text" must then be the field's current value verbatim.
"""


def build_analysis_prompt(
    resume_text: str,
    job_description: str,
    resume_data: dict | None = None,
) -> str:
    """Score + suggestions + keyword coverage in one call.

    When ``resume_data`` is given the model is asked to address suggestions
    by field path so they can be applied to the structured document.
    """
    path_field = (
        ',\n      "path": "<field path from the structured resume, or empty>"'
        if resume_data is not None else ""
    )

    return f"""You are an expert ATS (Applicant Tracking System) analyzer and career coach.
Analyze the following resume against the job description and provide detailed,
actionable feedback.

SCORING RUBRIC (follow strictly):
- 0-20:  No relevant match. Resume is for a completely different field.
- 20-40: Weak match. Some transferable skills but major gaps in core requirements.
- 40-60: Moderate match. Meets some key requirements but missing several important ones.
- 60-80: Strong match. Meets most requirements with minor gaps.
- 80-100: Exceptional match. Meets or exceeds nearly all requirements.

INSTRUCTIONS:
1. Calculate an overall ATS compatibility score (0-100) based on keyword matches,
   relevant experience, and formatting.
2. Identify specific areas where the resume can be improved for this job posting.
3. For each suggestion, give the original text from the resume (copied exactly)
   and a suggested replacement, when the suggestion edits existing text.
4. Focus on missing ATS keywords, experience descriptions that could be reworded
   to match the requirements, skills that should be highlighted or added, and
   formatting issues that might affect ATS parsing.
5. Be specific and actionable. Prioritize suggestions with the most impact.
{_structured_section(resume_data)}
RESUME:
---
{resume_text}
---

JOB DESCRIPTION:
---
{job_description}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "overall_score": <integer 0-100>,
  "suggestions": [
    {{
      "id": "<unique id, e.g. s1>",
      "type": "<add_keyword | improve_wording | add_section | remove_content | formatting>",
      "priority": "<high | medium | low>",
      "title": "<short title>",
      "description": "<detailed explanation>",
      "section": "<resume section this applies to, e.g. Experience, Skills>",
      "original_text": "<exact text from the resume to replace, or empty>",
      "suggested_text": "<replacement or addition text, or empty>"{path_field}
    }}
  ],
  "keywords_found": [
    {{"keyword": "<keyword>", "context": "<where in the resume it appears>"}}
  ],
  "keywords_missing": [
    {{
      "keyword": "<keyword>",
      "importance": "<critical | important | nice-to-have>",
      "suggestion": "<how to incorporate this keyword>"
    }}
  ],
  "summary": "<2-3 sentence assessment of the resume's fit for this position>"
}}"""
