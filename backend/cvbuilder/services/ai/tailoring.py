"""
CV Tailoring Service - Rewrite a CV for a specific job offer

Pipeline (one model call per step):
    1. Comprehensive analysis: job requirements + CV strengths/gaps + match score
    2. Core optimizations: professional title and summary
    3. Section optimizations, run concurrently:
       experience, projects, skills, education, certifications

A failing analysis or core step fails the whole request. A failing section
step only keeps that section as it was; the metadata records which
sections were actually optimized.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from cvbuilder.errors import APIError
from cvbuilder.services.ai.client import AIService, AIServiceError, get_ai_service
from cvbuilder.services.ai.parsing import AIResponseParseError, parse_ai_response
from cvbuilder.services.ai import prompts
from cvbuilder.services.skills import count_skills

logger = logging.getLogger(__name__)

SECTIONS = ("experience", "projects", "skills", "education", "certifications")


def _split_bullets(text: str) -> list[str]:
    return [part.strip() for part in text.split("•") if part.strip()]


def _join_period(start: Any, end: Any) -> str:
    return f"{start or ''} - {end or ''}".strip()


def normalize_original_cv(cv: dict) -> dict:
    """
    Bring a CV in either layout to the stored layout the prompts expect.

    Missing sections become empty, a form-style name is joined, and
    experience/projects/education entries gain their storage keys.
    """
    normalized = dict(cv)
    personal = dict(cv.get("personalInfo") or {})
    if not personal.get("name") and (personal.get("firstName") or personal.get("lastName")):
        personal["name"] = f"{personal.get('firstName') or ''} {personal.get('lastName') or ''}".strip()
    normalized["personalInfo"] = personal

    normalized["experience"] = [
        {
            **exp,
            "title": exp.get("title") or exp.get("position") or "",
            "company": exp.get("company") or "",
            "period": exp.get("period") or _join_period(exp.get("startDate"), exp.get("endDate")),
            "responsibilities": exp.get("responsibilities") or _split_bullets(exp.get("description") or ""),
        }
        for exp in cv.get("experience") or []
    ]
    normalized["projects"] = [
        {
            **proj,
            "name": proj.get("name") or proj.get("title") or "",
            "description": proj.get("description") or "",
            "technologies": proj.get("technologies") or [],
            "keyFeatures": proj.get("keyFeatures") or proj.get("features") or [],
        }
        for proj in cv.get("projects") or []
    ]
    normalized["education"] = [
        {
            **edu,
            "degree": edu.get("degree") or edu.get("title") or "",
            "institution": edu.get("institution") or edu.get("school") or "",
            "period": edu.get("period") or _join_period(edu.get("startDate"), edu.get("endDate")),
            "details": edu.get("details") or edu.get("description") or "",
        }
        for edu in cv.get("education") or []
    ]
    normalized["skills"] = cv.get("skills") or {}
    for key in ("certifications", "languages", "additionalExperience", "interests"):
        normalized[key] = cv.get(key) or []

    return normalized


class CVTailoringService:
    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai_service = ai_service or get_ai_service()

    async def _ask_json(self, prompt: str, operation: str) -> Any:
        response = await self.ai_service.generate_content(prompt, operation=operation)
        return parse_ai_response(response)

    async def perform_comprehensive_analysis(self, cv: dict, job_offer: dict) -> dict:
        analysis = await self._ask_json(prompts.build_analysis_prompt(cv, job_offer), "tailor_analysis")
        if not isinstance(analysis, dict):
            raise AIResponseParseError("Analysis response is not an object")
        return analysis

    async def generate_core_optimizations(self, cv: dict, analysis: dict) -> dict:
        core = await self._ask_json(prompts.build_core_optimization_prompt(cv, analysis), "tailor_core")
        return core if isinstance(core, dict) else {}

    async def _optimize_list(
        self,
        section: str,
        items: list,
        analysis: dict,
        build_prompt: Callable[[list, dict], str],
    ) -> Optional[list]:
        if not items:
            return None
        result = await self._ask_json(build_prompt(items, analysis), f"tailor_{section}")
        if not isinstance(result, list):
            raise AIResponseParseError(f"{section} response is not a list")
        return result

    async def optimize_experience(self, experience: list, analysis: dict) -> Optional[list]:
        optimized = await self._optimize_list("experience", experience, analysis, prompts.build_experience_prompt)
        if optimized is None:
            return None
        # Keep the storage keys even when the model answers with form-style keys
        return [
            {
                **item,
                "title": item.get("title") or item.get("position") or "",
                "company": item.get("company") or "",
                "period": item.get("period") or "",
                "responsibilities": item.get("responsibilities")
                or _split_bullets(item.get("description") or ""),
            }
            for item in optimized
            if isinstance(item, dict)
        ]

    async def optimize_projects(self, projects: list, analysis: dict) -> Optional[list]:
        return await self._optimize_list("projects", projects, analysis, prompts.build_projects_prompt)

    async def optimize_education(self, education: list, analysis: dict) -> Optional[list]:
        return await self._optimize_list("education", education, analysis, prompts.build_education_prompt)

    async def optimize_certifications(self, certifications: list, analysis: dict) -> Optional[list]:
        return await self._optimize_list(
            "certifications", certifications, analysis, prompts.build_certifications_prompt
        )

    async def optimize_skills(self, skills: Any, analysis: dict) -> Optional[dict]:
        if not skills:
            return None
        result = await self._ask_json(prompts.build_skills_prompt(skills, analysis), "tailor_skills")
        if not isinstance(result, dict):
            raise AIResponseParseError("skills response is not an object")
        return result

    async def optimize_all_sections(self, cv: dict, analysis: dict) -> dict[str, Any]:
        """
        Optimize every section concurrently.

        Returns a dict keyed by section; a value is None when the section
        was empty or its optimization failed.
        """
        tasks: dict[str, Awaitable] = {
            "experience": self.optimize_experience(cv["experience"], analysis),
            "projects": self.optimize_projects(cv["projects"], analysis),
            "skills": self.optimize_skills(cv["skills"], analysis),
            "education": self.optimize_education(cv["education"], analysis),
            "certifications": self.optimize_certifications(cv["certifications"], analysis),
        }
        outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)

        results: dict[str, Any] = {}
        for section, outcome in zip(tasks.keys(), outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"{section} optimization failed, keeping original: {outcome}")
                results[section] = None
            else:
                results[section] = outcome
        return results

    async def tailor_cv(
        self,
        original_cv: dict,
        job_offer: dict,
        additional_requirements: Optional[str] = None,
    ) -> dict:
        """
        Produce a tailored copy of ``original_cv`` for ``job_offer``.

        Returns:
            The tailored CV in storage layout plus a ``metadata`` block
        """
        if not original_cv or not job_offer:
            raise APIError("Original CV and job offer data are required", 400)

        cv = normalize_original_cv(original_cv)
        if additional_requirements:
            job_offer = {**job_offer, "additionalRequirements": additional_requirements}

        logger.info(
            f"Tailoring CV: {len(cv['experience'])} experience, {len(cv['education'])} education, "
            f"{count_skills(cv['skills'])} skills, {len(cv['projects'])} projects"
        )

        try:
            analysis = await self.perform_comprehensive_analysis(cv, job_offer)
            core = await self.generate_core_optimizations(cv, analysis)
        except AIServiceError as e:
            raise AIServiceError(f"CV tailoring failed: {e.message}", status_code=e.status_code) from e
        except AIResponseParseError as e:
            raise AIServiceError(f"CV tailoring failed: {e}") from e

        sections = await self.optimize_all_sections(cv, analysis)

        original_title = cv["personalInfo"].get("title")
        tailored = {
            "personalInfo": {**cv["personalInfo"], "title": core.get("title") or original_title},
            "summary": core.get("summary") or cv.get("summary") or "",
            "experience": sections["experience"] or cv["experience"],
            "projects": sections["projects"] or cv["projects"],
            "education": sections["education"] or cv["education"],
            "skills": sections["skills"] or cv["skills"],
            "certifications": sections["certifications"] or cv["certifications"],
            "languages": cv["languages"],
            "additionalExperience": cv["additionalExperience"],
            "interests": cv["interests"],
            "metadata": {
                "tailoredFor": job_offer.get("title") or "Job Application",
                "tailoredDate": datetime.now(timezone.utc).isoformat(),
                "originalCVId": cv.get("id") or cv.get("_id"),
                "matchScore": (analysis.get("cvAnalysis") or {}).get("matchScore")
                or analysis.get("matchScore")
                or 0,
                "jobAnalysis": analysis.get("jobAnalysis"),
                "optimizationSummary": {
                    "titleChanged": bool(core.get("title")) and core.get("title") != original_title,
                    "summaryEnhanced": bool(core.get("summary")),
                    "experienceOptimized": bool(sections["experience"]),
                    "projectsOptimized": bool(sections["projects"]),
                    "skillsReorganized": bool(sections["skills"]),
                    "educationEnhanced": bool(sections["education"]),
                    "certificationsOptimized": bool(sections["certifications"]),
                },
            },
        }

        logger.info(f"CV tailored for '{tailored['metadata']['tailoredFor']}'")
        return tailored
