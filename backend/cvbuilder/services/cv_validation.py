"""
CV content checks before rendering, and layout hints for long CVs.
"""

import copy
import logging

from cvbuilder.errors import APIError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("personalInfo", "summary", "experience", "skills", "education")

MAX_EXPERIENCE = 6
MAX_PROJECTS = 5
MAX_SUMMARY_CHARS = 500
TRUNCATED_SUMMARY_CHARS = 480
MAX_RESPONSIBILITIES = 4


def validate_cv_data(cv: dict) -> bool:
    for field in REQUIRED_FIELDS:
        if not cv.get(field):
            raise APIError(f"Missing required field: {field}", 400)

    personal = cv["personalInfo"]
    if not personal.get("name") or not personal.get("title"):
        raise APIError("Missing required personal information", 400)

    if not cv.get("experience"):
        raise APIError("At least one experience entry is required", 400)

    if len(cv["experience"]) > 10:
        logger.warning("Large number of experience entries may affect layout")
    if len(cv.get("projects") or []) > 8:
        logger.warning("Large number of projects may affect layout")

    return True


def get_layout_suggestions(cv: dict) -> list[dict]:
    suggestions = []

    experience_count = len(cv.get("experience") or [])
    project_count = len(cv.get("projects") or [])

    if experience_count + project_count > 10:
        suggestions.append({
            "type": "content",
            "message": "Consider reducing content or using compact layout",
            "recommendation": "Use compact spacing and limit items per section",
        })

    if experience_count > MAX_EXPERIENCE:
        suggestions.append({
            "type": "experience",
            "message": "Large number of experience entries detected",
            "recommendation": "Consider prioritizing most recent or relevant positions",
        })

    if project_count > MAX_PROJECTS:
        suggestions.append({
            "type": "projects",
            "message": "Many projects detected",
            "recommendation": "Focus on 3-5 most significant projects",
        })

    if len(cv.get("summary") or "") > MAX_SUMMARY_CHARS:
        suggestions.append({
            "type": "summary",
            "message": "Professional summary is quite long",
            "recommendation": "Consider condensing to 2-3 key sentences",
        })

    return suggestions


def optimize_layout_for_content(cv: dict, auto_optimize: bool = False) -> dict:
    """
    Trim a CV so it fits the page layout.

    The input is never modified. Without ``auto_optimize`` the data comes
    back unchanged alongside the suggestions.
    """
    optimized = copy.deepcopy(cv)
    suggestions = get_layout_suggestions(cv)

    if auto_optimize:
        if optimized.get("experience"):
            optimized["experience"] = [
                {**exp, "responsibilities": (exp.get("responsibilities") or [])[:MAX_RESPONSIBILITIES]}
                for exp in optimized["experience"][:MAX_EXPERIENCE]
            ]
        if optimized.get("projects"):
            optimized["projects"] = optimized["projects"][:MAX_PROJECTS]
        summary = optimized.get("summary") or ""
        if len(summary) > MAX_SUMMARY_CHARS:
            optimized["summary"] = summary[:TRUNCATED_SUMMARY_CHARS] + "..."

    return {
        "optimizedData": optimized,
        "suggestions": suggestions,
        "appliedOptimizations": auto_optimize,
    }
