"""
Prompt builders for the AI features.

Every prompt asking for structured output spells out the exact JSON shape
expected back; parse_ai_response copes with the usual deviations.
"""

import json
from typing import Any, Optional

EXTRACTION_SHAPE = """{
  "personalInfo": {
    "firstName": "", "lastName": "", "title": "", "email": "",
    "phone": "", "location": "", "linkedin": "", "website": ""
  },
  "summary": "",
  "experience": [
    {"company": "", "position": "", "startDate": "", "endDate": "", "description": "", "location": ""}
  ],
  "education": [
    {"institution": "", "degree": "", "field": "", "startDate": "", "endDate": "", "grade": ""}
  ],
  "skills": {},
  "languages": [{"name": "", "level": "Basic|Intermediate|Advanced|Native"}],
  "certifications": [{"name": "", "issuer": "", "date": "", "url": ""}]
}"""

JOB_OFFER_SHAPE = """{
  "title": "",
  "company": "",
  "location": "",
  "salary": "",
  "employmentType": "",
  "description": "",
  "requirements": [],
  "keySkills": [],
  "preferredQualifications": [],
  "benefits": []
}"""


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _requirements_line(additional_requirements: Optional[str]) -> str:
    if not additional_requirements:
        return ""
    return f"Additional Requirements: {additional_requirements}\n"


def build_cv_extraction_prompt(text: str) -> str:
    return f"""You are an expert CV/resume parser and career consultant. Extract structured
information from the CV text below and return it as a JSON object with this structure:

{EXTRACTION_SHAPE}

Job titles:
- Determine the professional title from the whole career, not only the latest role.
- Never use "Intern" or "Trainee" as a position. Use the role actually performed
  and mention the internship context in the description instead.
- Add a seniority prefix from total experience: "Junior" for 0-2 years, none for
  2-5 years, "Senior" for 5+ years.

Skills:
- Build categories specific to this person's field, e.g. "Programming Languages",
  "Design Software", "Financial Software", "Clinical Skills".
- Structure: {{"Category Name": ["Skill 1", "Skill 2"]}}. Names only, no levels.
- Always include a "Soft Skills" category. Avoid a generic "Other" category.

Summary:
- 3-4 confident, natural sentences with years of experience and concrete
  achievements from the CV. Avoid cliches such as "results-driven".

Return only the JSON object, no additional text or formatting.

CV Text:
{text}
"""


def build_job_offer_prompt(text: str) -> str:
    return f"""Extract structured information from this job offer and return it as a JSON object:

{JOB_OFFER_SHAPE}

Job Offer Text:
{text}

Return only the JSON object, no additional text or formatting.
"""


def build_analysis_prompt(cv: dict, job_offer: dict) -> str:
    cv_excerpt = {
        "personalInfo": cv.get("personalInfo"),
        "summary": cv.get("summary"),
        "experience": (cv.get("experience") or [])[:3],
        "skills": cv.get("skills"),
        "education": (cv.get("education") or [])[:2],
        "certifications": (cv.get("certifications") or [])[:5],
    }
    return f"""Analyze this job offer and CV together.

JOB OFFER: {_dump(job_offer)}

CV: {_dump(cv_excerpt)}

Return ONLY valid JSON in this exact format:
{{
  "jobAnalysis": {{
    "title": "exact job title",
    "level": "entry/junior/mid/senior/lead/executive",
    "industry": "specific industry",
    "keyResponsibilities": ["..."],
    "requiredSkills": {{"technical": ["..."], "soft": ["..."]}},
    "preferredSkills": {{"technical": ["..."], "soft": ["..."]}},
    "experienceYears": "minimum years required",
    "keywordsForATS": ["..."]
  }},
  "cvAnalysis": {{
    "strengths": {{"technical": ["..."], "experience": ["..."], "achievements": ["..."]}},
    "gaps": {{"technical": ["..."], "experience": ["..."], "keywords": ["..."]}},
    "opportunities": {{"reframe": ["..."], "highlight": ["..."]}},
    "matchScore": 85,
    "recommendations": ["..."]
  }}
}}"""


def build_core_optimization_prompt(cv: dict, analysis: dict) -> str:
    title = (cv.get("personalInfo") or {}).get("title") or "Not specified"
    summary = cv.get("summary") or "None provided"
    return f"""Generate an optimized professional title and summary for this CV based on the analysis.

CURRENT CV:
- Title: "{title}"
- Summary: "{summary}"
- Experience: {_dump((cv.get("experience") or [])[:2])}

ANALYSIS: {_dump(analysis)}

Return ONLY valid JSON in this exact format:
{{
  "title": "Optimized Professional Title",
  "summary": "3-4 sentence summary aimed at the target role"
}}

Title rules: never use "Intern"; align with the target role while staying truthful;
use industry-standard terminology.
Summary rules: lead with the value proposition, include years of relevant
experience and 2-3 achievements matching the job requirements, avoid cliches."""


def build_experience_prompt(experience: list, analysis: dict) -> str:
    return f"""Optimize these work experiences for the target job.

EXPERIENCES: {_dump(experience)}
JOB ANALYSIS: {_dump(analysis.get("jobAnalysis"))}
CV ANALYSIS: {_dump(analysis.get("cvAnalysis"))}

Return ONLY a valid JSON array in this exact format:
[
  {{
    "company": "exact company name",
    "title": "enhanced position title",
    "period": "original period",
    "responsibilities": ["achievement-focused responsibility", "..."]
  }}
]

Keep companies and dates accurate. Quantify results where the original allows it
and use keywords from the job requirements naturally. Never invent achievements."""


def build_projects_prompt(projects: list, analysis: dict) -> str:
    return f"""Optimize these projects for the target job.

PROJECTS: {_dump(projects)}
JOB ANALYSIS: {_dump(analysis.get("jobAnalysis"))}

Return ONLY a valid JSON array in this exact format:
[
  {{
    "name": "project name",
    "description": "description highlighting relevance and impact",
    "technologies": ["..."],
    "keyFeatures": ["..."]
  }}
]

Highlight technologies that match the job requirements and keep every fact accurate."""


def build_skills_prompt(skills: Any, analysis: dict) -> str:
    return f"""Optimize this skills section for ATS and hiring manager appeal.

ORIGINAL SKILLS: {_dump(skills)}
JOB REQUIREMENTS: {_dump(analysis.get("jobAnalysis"))}

Return ONLY valid JSON in this exact format, adapting category names to the role:
{{
  "Primary Technical Skills": ["..."],
  "Secondary Technical Skills": ["..."],
  "Tools & Platforms": ["..."],
  "Soft Skills": ["..."],
  "Industry Knowledge": ["..."]
}}

Prioritize skills named in the job requirements, use the job description's exact
terminology and de-emphasize irrelevant skills."""


def build_education_prompt(education: list, analysis: dict) -> str:
    return f"""Optimize this education section to highlight relevance to the target role.

EDUCATION: {_dump(education)}
JOB ANALYSIS: {_dump(analysis.get("jobAnalysis"))}

Return ONLY a valid JSON array in this exact format:
[
  {{
    "degree": "degree name",
    "institution": "institution name",
    "period": "period",
    "details": "details highlighting relevance to the target role"
  }}
]

Keep all factual information accurate."""


def build_certifications_prompt(certifications: list, analysis: dict) -> str:
    return f"""Optimize these certifications to highlight relevance to the target role.

CERTIFICATIONS: {_dump(certifications)}
JOB ANALYSIS: {_dump(analysis.get("jobAnalysis"))}

Return ONLY a valid JSON array in this exact format:
[
  {{
    "name": "certification name",
    "issuer": "issuing organization",
    "type": "certification type",
    "skills": "skills gained, related to the target role"
  }}
]

Order by relevance to the job requirements."""


def build_cover_letter_prompt(cv: dict, job_offer: dict, additional_requirements: Optional[str]) -> str:
    return f"""You are an expert career consultant and professional writer. Write a compelling,
personalized cover letter from the information below.

Candidate CV:
{_dump(cv)}

Job Offer:
{_dump(job_offer)}

{_requirements_line(additional_requirements)}
Tone: confident and natural, never templated. Avoid openings such as
"I am writing to express my interest".

Structure (3-4 paragraphs, 250-400 words):
1. An opening that shows immediate fit for the role
2. The 2-3 most relevant achievements from the CV, matched to the requirements
3. The value the candidate brings to this company
4. A confident closing call to action

Use the candidate's exact name from personalInfo and weave in keywords from the
job description. Return the cover letter as plain text with paragraph breaks.
"""
