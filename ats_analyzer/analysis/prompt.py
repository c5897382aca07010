"""Prompt construction for the five-section resume analysis."""

MAX_RESUME_CHARS = 10000
MAX_JOB_DESCRIPTION_CHARS = 5000

SYSTEM_PROMPT = (
    "You are an expert applicant tracking system and senior recruiter. "
    "You evaluate resumes against job descriptions critically and objectively.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) that follows the "
    "format given in the user message exactly."
)

_RESPONSE_FORMAT = """\
{
  "searchability": {
    "score": <number 0-100>,
    "contact_info": {"present": <boolean>, "missing": ["<string>"]},
    "sections": {
      "has_summary": <boolean>,
      "has_proper_headings": <boolean>,
      "properly_formatted_dates": <boolean>
    },
    "job_title_match": {"score": <number 0-100>, "explanation": "<string>"},
    "recommendations": ["<string>"]
  },
  "hard_skills": {
    "score": <number 0-100>,
    "matched_skills": ["<string>"],
    "missing_skills": ["<string>"],
    "technical_proficiency": {
      "score": <number 0-100>,
      "strengths": ["<string>"],
      "gaps": ["<string>"]
    },
    "recommendations": ["<string>"]
  },
  "soft_skills": {
    "score": <number 0-100>,
    "matched_skills": ["<string>"],
    "missing_skills": ["<string>"],
    "leadership_indicators": ["<string>"],
    "recommendations": ["<string>"]
  },
  "recruiter_tips": {
    "score": <number 0-100>,
    "job_level_match": {"assessment": "<string>", "recommendation": "<string>"},
    "measurable_results": {"present": ["<string>"], "missing": ["<string>"]},
    "resume_tone": {"assessment": "<string>", "improvements": ["<string>"]},
    "web_presence": {"mentioned": ["<string>"], "recommended": ["<string>"]},
    "recommendations": ["<string>"]
  },
  "overall": {
    "total_score": <number 0-100>,
    "applying_for": {"job_title": "<string>", "explanation": "<string>"},
    "shortlist_recommendation": {"decision": "<string>", "explanation": "<string>"},
    "critical_improvements": ["<string>"],
    "key_strengths": ["<string>"]
  }
}"""


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters. Lossy on purpose."""
    return text[:limit]


def build_prompt(
    resume_text: str,
    job_description_text: str,
    *,
    max_resume_chars: int = MAX_RESUME_CHARS,
    max_job_description_chars: int = MAX_JOB_DESCRIPTION_CHARS,
) -> str:
    """Assemble the user prompt, capping each document independently."""
    resume = truncate(resume_text, max_resume_chars)
    job_description = truncate(job_description_text, max_job_description_chars)

    return (
        "As the Head of Talent Acquisition, conduct a highly critical and "
        "objective analysis of this resume against the job description.\n"
        "Provide a concise and precise ATS analysis with strict adherence to "
        "the JSON format below. No extra text is permitted before, within, or "
        "after the JSON.\n\n"
        "Categories:\n"
        "1. Searchability: resume formatting and ATS compatibility\n"
        "2. Hard Skills: technical skills match\n"
        "3. Soft Skills: demonstrated soft skills\n"
        "4. Recruiter Tips: overall presentation\n"
        "5. Overall: comprehensive scoring\n\n"
        f"JSON Format (Strictly Enforced):\n{_RESPONSE_FORMAT}\n\n"
        f"Resume:\n{resume}\n\n"
        f"Job Description:\n{job_description}\n"
    )
