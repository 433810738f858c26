"""
Built-in themes

The three themes every installation ships with. They are inserted on
startup when missing and serve as the rendering fallback when a CV names
a theme that is not in the database.
"""

import logging
from copy import deepcopy
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cvbuilder.models import Theme

logger = logging.getLogger(__name__)

DEFAULT_THEME_NAME = "professional"

BUILTIN_THEMES = [
    {
        "name": "professional",
        "display_name": "Professional",
        "description": "Conservative design perfect for corporate environments and traditional industries",
        "colors": {
            "primary": "#2c3e50",
            "secondary": "#333333",
            "text": "#000000",
            "background": "#ffffff",
            "accent": "#2c3e50",
        },
        "typography": {"main": "Georgia, serif", "headings": "Georgia, serif", "body": "Georgia, serif"},
        "spacing": {"section": "12px", "element": "8px", "micro": "4px"},
        "font_sizes": {
            "name": "20pt",
            "sectionHeader": "12pt",
            "jobTitle": "11pt",
            "body": "10pt",
            "supporting": "9pt",
        },
        "use_case": "corporate",
        "border_style": "solid",
        "is_default": True,
    },
    {
        "name": "modern",
        "display_name": "Modern",
        "description": "Clean, contemporary design for tech companies, startups, and creative roles",
        "colors": {
            "primary": "#3498db",
            "secondary": "#2980b9",
            "text": "#2c3e50",
            "background": "#ffffff",
            "accent": "#e74c3c",
        },
        "typography": {"main": "Roboto, sans-serif", "headings": "Roboto, sans-serif", "body": "Roboto, sans-serif"},
        "spacing": {"section": "16px", "element": "10px", "micro": "5px"},
        "font_sizes": {
            "name": "22pt",
            "sectionHeader": "14pt",
            "jobTitle": "12pt",
            "body": "10pt",
            "supporting": "9pt",
        },
        "use_case": "tech",
        "border_style": "accent",
        "is_default": False,
    },
    {
        "name": "minimal",
        "display_name": "Minimal",
        "description": "Minimalist design with generous whitespace for design-focused roles",
        "colors": {
            "primary": "#333333",
            "secondary": "#666666",
            "text": "#333333",
            "background": "#ffffff",
            "accent": "#999999",
        },
        "typography": {
            "main": "Open Sans, sans-serif",
            "headings": "Open Sans, sans-serif",
            "body": "Open Sans, sans-serif",
        },
        "spacing": {"section": "20px", "element": "12px", "micro": "6px"},
        "font_sizes": {
            "name": "20pt",
            "sectionHeader": "13pt",
            "jobTitle": "11pt",
            "body": "10pt",
            "supporting": "9pt",
        },
        "use_case": "creative",
        "border_style": "subtle",
        "is_default": False,
    },
]


def builtin_theme(name: Optional[str]) -> dict:
    """Built-in theme definition by name, falling back to the professional theme."""
    for theme in BUILTIN_THEMES:
        if theme["name"] == name:
            return deepcopy(theme)
    return deepcopy(BUILTIN_THEMES[0])


def theme_to_dict(theme: Theme) -> dict:
    return {
        "name": theme.name,
        "display_name": theme.display_name,
        "description": theme.description,
        "colors": theme.colors or {},
        "typography": theme.typography or {},
        "spacing": theme.spacing or {},
        "font_sizes": theme.font_sizes or {},
        "use_case": theme.use_case,
        "border_style": theme.border_style,
        "is_default": theme.is_default,
    }


async def resolve_theme(db: AsyncSession, name: Optional[str]) -> dict:
    """
    Theme settings used to render a CV.

    Stored active themes win; unknown names fall back to the built-in
    definition of the same name, then to the professional theme.
    """
    if name:
        result = await db.execute(select(Theme).where(Theme.name == name, Theme.is_active == True))
        theme = result.scalar_one_or_none()
        if theme is not None:
            return theme_to_dict(theme)
    return builtin_theme(name)


async def seed_default_themes(db: AsyncSession, replace: bool = False) -> int:
    """
    Insert the built-in themes that are not stored yet.

    Args:
        db: Database session
        replace: Delete every stored theme first

    Returns:
        Number of themes inserted
    """
    if replace:
        existing = (await db.execute(select(Theme))).scalars().all()
        for theme in existing:
            await db.delete(theme)
        await db.flush()
        stored_names = set()
    else:
        stored_names = set((await db.execute(select(Theme.name))).scalars().all())

    inserted = 0
    for definition in BUILTIN_THEMES:
        if definition["name"] in stored_names:
            continue
        db.add(Theme(**deepcopy(definition), is_active=True))
        inserted += 1

    await db.commit()
    if inserted:
        logger.info(f"Seeded {inserted} default themes")
    return inserted
