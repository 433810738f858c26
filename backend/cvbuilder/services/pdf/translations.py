"""Section headings and labels printed on generated PDFs."""

TRANSLATIONS = {
    "en": {
        "professional_summary": "Professional Summary",
        "technical_skills": "Technical Skills",
        "professional_experience": "Professional Experience",
        "projects": "Projects",
        "education": "Education",
        "certifications": "Certifications",
        "additional_experience": "Additional Experience",
        "languages": "Languages",
        "interests": "Interests",
        "email": "Email",
        "phone": "Phone",
        "location": "Location",
        "linkedin": "LinkedIn",
        "github": "GitHub",
        "portfolio": "Portfolio",
        "technologies": "Technologies",
        "issuer": "Issuer",
        "date": "Date",
        "skills": "Skills",
    },
    "fr": {
        "professional_summary": "Résumé Professionnel",
        "technical_skills": "Compétences Techniques",
        "professional_experience": "Expérience Professionnelle",
        "projects": "Projets",
        "education": "Formation",
        "certifications": "Certifications",
        "additional_experience": "Expérience Complémentaire",
        "languages": "Langues",
        "interests": "Centres d'intérêt",
        "email": "Email",
        "phone": "Téléphone",
        "location": "Localisation",
        "linkedin": "LinkedIn",
        "github": "GitHub",
        "portfolio": "Portfolio",
        "technologies": "Technologies",
        "issuer": "Organisme",
        "date": "Date",
        "skills": "Compétences",
    },
}


def get_translation(key: str, language: str = "en") -> str:
    """Translated label; unknown languages use English, unknown keys echo the key."""
    table = TRANSLATIONS.get(language, TRANSLATIONS["en"])
    return table.get(key) or TRANSLATIONS["en"].get(key) or key
