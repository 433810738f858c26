"""
CV form <-> storage transforms

The CV editor works with a flat "form" layout (first/last name, dated
experience entries, a skill list). Storage uses the document layout the
PDF renderer and the AI services read (full name + title, period strings,
category-keyed skills). These helpers convert between the two at the API
boundary.
"""

import re
from typing import Any, Optional

from cvbuilder.services.skills import categorize_skills_array, flatten_skills_object

_TITLE_SUFFIX = r"(?:developer|engineer|designer|manager|analyst|specialist|consultant)"

# Tried in order; group 1 holds the candidate title
TITLE_PATTERNS = [
    re.compile(r"(?:I am|I'm) (?:a|an) ([^.]+)" + _TITLE_SUFFIX, re.IGNORECASE),
    re.compile(r"(?:experienced|senior|junior) ([^.]+)" + _TITLE_SUFFIX, re.IGNORECASE),
    re.compile(r"([^.]+)" + _TITLE_SUFFIX, re.IGNORECASE),
    re.compile(r"(?:working as|work as) (?:a|an) ([^.]+)", re.IGNORECASE),
    re.compile(r"(?:passionate|dedicated) ([^.]+)", re.IGNORECASE),
]

_LEADING_ARTICLE = re.compile(r"^(a|an|the)\s+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

DEFAULT_TITLE = "Professional"
DEFAULT_LANGUAGE_LEVEL = "Intermediate"


def extract_job_title_from_summary(summary: Optional[str]) -> Optional[str]:
    """
    Pull a job title out of a free-text summary.

    Returns the first candidate between 4 and 49 characters long, with any
    leading article removed and the first letter capitalized, or None.
    """
    if not isinstance(summary, str) or not summary:
        return None

    for pattern in TITLE_PATTERNS:
        match = pattern.search(summary)
        if not match or not match.group(1):
            continue
        title = _LEADING_ARTICLE.sub("", match.group(1).strip())
        title = _WHITESPACE.sub(" ", title).strip()
        if 3 < len(title) < 50:
            return title[0].upper() + title[1:]

    return None


def _records(value: Any) -> list[dict]:
    return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


def _period(start: str, end: str, fallback: str) -> str:
    if start and end:
        return f"{start} - {end}"
    if start:
        return f"{start} - Present"
    return fallback


def _split_period(period: str) -> tuple[str, str]:
    if not period:
        return "", ""
    parts = period.split(" - ")
    return parts[0], parts[1] if len(parts) > 1 else ""


def is_form_shape(payload: Any) -> bool:
    """True when a CV payload uses the editor layout rather than the stored one."""
    if not isinstance(payload, dict):
        return False
    personal = payload.get("personalInfo")
    if isinstance(personal, dict) and ("firstName" in personal or "lastName" in personal):
        return True
    return isinstance(payload.get("skills"), list)


def transform_cv_for_storage(form: dict) -> dict:
    """
    Convert an editor-layout CV into the stored document layout.

    Entries that are not objects are dropped; a summary of the wrong type is
    passed through so the caller's validation can report it.
    """
    personal = form.get("personalInfo")
    if not isinstance(personal, dict):
        personal = {}
    summary = form.get("summary") or ""
    experience = _records(form.get("experience"))
    education = _records(form.get("education"))
    skills = form.get("skills")
    languages = _records(form.get("languages"))
    certifications = _records(form.get("certifications"))

    first_job_title = experience[0].get("position") if experience else None
    title = extract_job_title_from_summary(summary) or first_job_title or DEFAULT_TITLE

    if isinstance(skills, dict):
        categorized = dict(skills)
    else:
        categorized = categorize_skills_array(skills if isinstance(skills, list) else [])
    categorized = {category: names for category, names in categorized.items() if names}

    first_name = personal.get("firstName") or ""
    last_name = personal.get("lastName") or ""

    return {
        "language": form.get("language") or "en",
        "theme": form.get("theme") or "professional",
        "personalInfo": {
            "name": f"{first_name} {last_name}".strip() or personal.get("name") or "",
            "title": title,
            "contact": {
                "email": personal.get("email") or "",
                "phone": personal.get("phone") or "",
                "location": personal.get("location") or "",
                "linkedin": personal.get("linkedin") or "",
                "portfolio": personal.get("website") or "",
            },
        },
        "summary": summary,
        "skills": categorized,
        "experience": [
            {
                "title": exp.get("position") or "",
                "company": exp.get("company") or "",
                "period": _period(exp.get("startDate"), exp.get("endDate"), "Not specified"),
                "responsibilities": [exp["description"]] if exp.get("description") else [],
            }
            for exp in experience
            if exp.get("position") and exp.get("company")
        ],
        "education": [
            {
                "institution": edu.get("institution") or "",
                "degree": edu.get("degree") or "",
                "field": edu.get("field") or "",
                "period": _period(edu.get("startDate"), edu.get("endDate"), "Completed"),
                "grade": edu.get("grade") or "",
            }
            for edu in education
            if edu.get("institution") and edu.get("degree")
        ],
        "projects": form.get("projects") or [],
        "certifications": [
            {
                "name": cert.get("name") or "",
                "issuer": cert.get("issuer") or "",
                "type": "Certificate",
                "skills": cert.get("url") or "",
            }
            for cert in certifications
            if cert.get("name") and cert.get("issuer")
        ],
        "additionalExperience": form.get("additionalExperience") or [],
        "languages": [
            {
                "language": lang.get("name") or lang.get("language") or "",
                "level": lang.get("level") or DEFAULT_LANGUAGE_LEVEL,
            }
            for lang in languages
        ],
        "interests": form.get("interests") or [],
    }


def transform_cv_from_storage(cv: dict) -> dict:
    """Convert a stored CV document into the editor layout."""
    personal = cv.get("personalInfo") or {}
    contact = personal.get("contact") or {}
    name_parts = (personal.get("name") or "").split(" ")

    experience = []
    for exp in cv.get("experience") or []:
        start, end = _split_period(exp.get("period") or "")
        experience.append({
            "company": exp.get("company") or "",
            "position": exp.get("title") or "",
            "startDate": start,
            "endDate": end,
            "description": ". ".join(exp.get("responsibilities") or []),
            "location": "",
        })

    education = []
    for edu in cv.get("education") or []:
        start, end = _split_period(edu.get("period") or "")
        education.append({
            "institution": edu.get("institution") or "",
            "degree": edu.get("degree") or "",
            "field": edu.get("field") or "",
            "startDate": start,
            "endDate": end,
            "grade": edu.get("grade") or "",
        })

    return {
        "personalInfo": {
            "firstName": name_parts[0],
            "lastName": " ".join(name_parts[1:]),
            "email": contact.get("email") or "",
            "phone": contact.get("phone") or "",
            "location": contact.get("location") or "",
            "linkedin": contact.get("linkedin") or "",
            "website": contact.get("portfolio") or "",
        },
        "summary": cv.get("summary") or "",
        "experience": experience,
        "education": education,
        "skills": flatten_skills_object(cv.get("skills") or {}),
        "languages": [
            {"name": lang.get("language") or "", "level": lang.get("level") or DEFAULT_LANGUAGE_LEVEL}
            for lang in cv.get("languages") or []
        ],
        "certifications": [
            {
                "name": cert.get("name") or "",
                "issuer": cert.get("issuer") or "",
                "date": cert.get("date") or "",
                "url": cert.get("url") or "",
            }
            for cert in cv.get("certifications") or []
        ],
    }
