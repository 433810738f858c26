"""
Skills Representations

A CV's skills travel in two shapes:

    storage shape  {"Programming": ["Python", "Go"], "Tools": ["Docker"]}
    form shape     [{"name": "Python", "category": "Programming"}, ...]

The category-keyed object is what gets persisted; the flat list is what the
CV editor works with. Converting the flat list to the object and back keeps
every skill name, though skills without a category end up under
"Additional Skills".

Key Functions:
    categorize_skill: Guess a coarse category from a skill name
    categorize_skills_array: Flat list -> category-keyed object
    flatten_skills_object: Category-keyed object -> flat list
    normalize_skills_for_ui: Either shape -> flat list
"""

from typing import Any

UNCATEGORIZED = "Additional Skills"

# Checked in order; the first category with a matching keyword wins
CATEGORY_PATTERNS: dict[str, list[str]] = {
    "technical": [
        "javascript", "python", "java", "c++", "c#", "php", "ruby", "go", "rust", "kotlin", "swift",
        "typescript", "html", "css", "sql", "nosql", "mongodb", "mysql", "postgresql", "redis", "sqlite",
        "machine learning", "artificial intelligence", "data science", "deep learning", "ai", "ml",
        "blockchain", "cryptocurrency", "cybersecurity", "networking", "linux", "unix", "bash",
        "cloud computing", "microservices", "api", "rest", "graphql", "json", "xml",
    ],
    "frameworks": [
        "react", "angular", "vue", "svelte", "nextjs", "nuxt", "express", "fastapi", "django", "flask",
        "spring", "laravel", "rails", "asp.net", "node.js", "nodejs", "jquery", "bootstrap", "tailwind",
        "material-ui", "mui", "chakra", "ant design", "semantic ui", "bulma", "foundation",
        "redux", "vuex", "mobx", "webpack", "vite", "parcel", "rollup",
    ],
    "tools": [
        "git", "github", "gitlab", "bitbucket", "docker", "kubernetes", "jenkins", "travis", "circleci",
        "vs code", "visual studio", "intellij", "eclipse", "sublime", "atom", "vim", "emacs",
        "photoshop", "illustrator", "figma", "sketch", "adobe", "canva", "blender", "after effects",
        "jira", "trello", "asana", "notion", "slack", "teams", "zoom", "postman", "insomnia",
        "aws", "azure", "gcp", "google cloud", "heroku", "vercel", "netlify",
    ],
    "soft": [
        "communication", "leadership", "teamwork", "problem solving", "critical thinking",
        "time management", "project management", "adaptability", "creativity", "analytical",
        "attention to detail", "multitasking", "decision making", "conflict resolution",
        "negotiation", "presentation", "public speaking", "mentoring", "coaching",
        "customer service", "sales", "marketing", "strategic planning", "organization",
    ],
    "languages": [
        "english", "french", "spanish", "german", "italian", "portuguese", "chinese", "mandarin",
        "japanese", "korean", "arabic", "russian", "hindi", "dutch", "norwegian", "swedish",
        "danish", "finnish", "polish", "turkish", "greek", "hebrew", "thai", "vietnamese",
    ],
}

# Fallback keyword groups for compound terms none of the patterns caught
_COMPOUND_RULES: list[tuple[tuple[str, ...], str]] = [
    (("cloud", "devops", "ci/cd", "deployment"), "technical"),
    (("design", "ui", "ux", "prototyping"), "tools"),
    (("management", "lead", "scrum", "agile"), "soft"),
    (("framework", "library"), "frameworks"),
]


def categorize_skill(skill_name: Any) -> str:
    """
    Guess the category of a skill from its name.

    Matching is substring-based in both directions, so "react native"
    matches "react" and "c" matches "c++". Non-strings and empty names
    return "other".
    """
    if not isinstance(skill_name, str) or not skill_name:
        return "other"

    name = skill_name.lower().strip()

    for category, patterns in CATEGORY_PATTERNS.items():
        if any(pattern in name or name in pattern for pattern in patterns):
            return category

    for keywords, category in _COMPOUND_RULES:
        if any(keyword in name for keyword in keywords):
            return category

    return "other"


def _skill_name(skill: Any) -> Any:
    if isinstance(skill, dict):
        return skill.get("name") or skill
    return skill


def categorize_skills_array(skills: Any) -> dict[str, list]:
    """
    Group a flat skill list into the category-keyed storage shape.

    Items may be plain strings or {name, category} dicts. An item keeps its
    own category when it has one; everything else lands in
    "Additional Skills". Order within a category follows the input.
    """
    if not isinstance(skills, list):
        return {}

    categorized: dict[str, list] = {}
    for skill in skills:
        category = skill.get("category") if isinstance(skill, dict) else None
        categorized.setdefault(category or UNCATEGORIZED, []).append(_skill_name(skill))
    return categorized


def flatten_skills_object(skills: Any) -> list:
    """Category-keyed object to a flat [{name, category}] list; lists pass through."""
    if isinstance(skills, list):
        return skills
    if not isinstance(skills, dict):
        return []

    flat = []
    for category, category_skills in skills.items():
        if not isinstance(category_skills, list):
            continue
        for skill in category_skills:
            flat.append({"name": _skill_name(skill), "category": category})
    return flat


def normalize_skills_for_ui(skills: Any) -> list:
    if isinstance(skills, list):
        return skills
    if isinstance(skills, dict):
        return flatten_skills_object(skills)
    return []


def count_skills(skills: Any) -> int:
    """Number of skills in either shape."""
    return len(normalize_skills_for_ui(skills))
