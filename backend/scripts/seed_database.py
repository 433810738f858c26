#!/usr/bin/env python3
"""
Database Seed Script

Creates the tables and inserts the built-in themes (professional, modern,
minimal). Optionally adds a sample CV so the editor and PDF export have
something to show on a fresh install.

Usage:
    # Insert missing themes
    python scripts/seed_database.py

    # Replace every stored theme with the built-in set
    python scripts/seed_database.py --reset-themes

    # Also insert the sample CV
    python scripts/seed_database.py --sample-cv

    # List what is stored
    python scripts/seed_database.py --verify
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvbuilder.database import async_session, init_db
from cvbuilder.models import CV, Theme
from cvbuilder.services.themes import seed_default_themes

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# ==============================================================================
# Sample Data
# ==============================================================================

SAMPLE_CV = {
    "language": "en",
    "theme": "professional",
    "personalInfo": {
        "name": "Alex Martin",
        "title": "Full Stack Developer",
        "contact": {
            "email": "alex.martin@example.com",
            "phone": "+15550100",
            "location": "Lyon, France",
            "linkedin": "linkedin.com/in/alex-martin-example",
            "github": "github.com/alex-martin-example",
        },
    },
    "summary": (
        "Full stack developer with six years of experience building web platforms "
        "with Python and TypeScript. Comfortable across API design, data modelling "
        "and front-end delivery."
    ),
    "skills": {
        "technical": ["Python", "TypeScript", "SQL"],
        "frameworks": ["FastAPI", "React", "Django"],
        "tools": ["Docker", "Git", "PostgreSQL"],
        "soft": ["Mentoring", "Agile delivery"],
    },
    "experience": [
        {
            "title": "Senior Developer",
            "company": "Northwind Software",
            "period": "2021 - Present",
            "responsibilities": [
                "Led the rewrite of the billing API in FastAPI",
                "Cut median page load time by 40% with server-side caching",
                "Mentored four junior developers",
            ],
        },
        {
            "title": "Developer",
            "company": "Blue Harbor Digital",
            "period": "2018 - 2021",
            "responsibilities": [
                "Built React dashboards for logistics customers",
                "Maintained Django back office and reporting jobs",
            ],
        },
    ],
    "projects": [
        {
            "name": "Recipe Planner",
            "description": "Meal planning web app with shopping list export",
            "technologies": ["React", "FastAPI", "SQLite"],
            "keyFeatures": ["Weekly planner", "PDF shopping lists"],
        }
    ],
    "education": [
        {
            "degree": "MSc Computer Science",
            "institution": "Université Claude Bernard Lyon 1",
            "field": "Software Engineering",
            "period": "2016 - 2018",
        }
    ],
    "certifications": [
        {"name": "AWS Certified Developer - Associate", "issuer": "Amazon Web Services", "type": "Certificate"}
    ],
    "additionalExperience": [],
    "languages": [
        {"language": "French", "level": "Native"},
        {"language": "English", "level": "Fluent"},
    ],
    "interests": ["Climbing", "Open source"],
}


# ==============================================================================
# Seeding
# ==============================================================================

async def insert_sample_cv(session: AsyncSession) -> CV:
    cv = CV()
    cv.apply_content(SAMPLE_CV)
    session.add(cv)
    await session.commit()
    await session.refresh(cv)
    return cv


async def verify_seed(session: AsyncSession) -> None:
    result = await session.execute(select(Theme).order_by(Theme.display_name))
    themes = result.scalars().all()

    logger.info(f"Themes in database: {len(themes)}")
    for theme in themes:
        flags = " (default)" if theme.is_default else ""
        logger.info(f"  - {theme.display_name} [{theme.name}]{flags}")

    cv_count = await session.execute(select(func.count(CV.id)).where(CV.is_active == True))
    logger.info(f"Active CVs in database: {cv_count.scalar() or 0}")


# ==============================================================================
# Main
# ==============================================================================

async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the CV Builder database")
    parser.add_argument("--reset-themes", action="store_true", help="Replace stored themes with the built-in set")
    parser.add_argument("--sample-cv", action="store_true", help="Insert a sample CV")
    parser.add_argument("--verify", action="store_true", help="List stored themes and CV count")

    args = parser.parse_args()

    await init_db()

    async with async_session() as session:
        if args.verify:
            await verify_seed(session)
            return

        count = await seed_default_themes(session, replace=args.reset_themes)
        logger.info(f"Inserted {count} themes")

        if args.sample_cv:
            cv = await insert_sample_cv(session)
            logger.info(f"Inserted sample CV {cv.id}")


if __name__ == "__main__":
    asyncio.run(main())
