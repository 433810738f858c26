from datetime import datetime
from typing import Literal, Optional
from pydantic import Field
from cvbuilder.schemas.common import CamelModel

HEX_COLOR = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class ThemeColors(CamelModel):
    primary: str = Field(pattern=HEX_COLOR)
    secondary: str = Field(default="#666666", pattern=HEX_COLOR)
    text: str = Field(default="#333333", pattern=HEX_COLOR)
    background: str = Field(default="#ffffff", pattern=HEX_COLOR)
    accent: str = Field(default="#0066cc", pattern=HEX_COLOR)


class ThemeTypography(CamelModel):
    main: str = Field(min_length=1)
    headings: Optional[str] = None
    body: Optional[str] = None


class ThemeSpacing(CamelModel):
    section: str = "1.5rem"
    element: str = "0.75rem"
    micro: str = "0.25rem"


class ThemeFontSizes(CamelModel):
    name: str = "24pt"
    section_header: str = "14pt"
    job_title: str = "12pt"
    body: str = "10pt"
    supporting: str = "9pt"


class ThemeCreate(CamelModel):
    name: str = Field(min_length=2, max_length=50, pattern=r"^[a-z0-9-]+$")
    display_name: str = Field(min_length=2, max_length=100)
    description: str = ""
    colors: ThemeColors
    typography: ThemeTypography
    spacing: ThemeSpacing = ThemeSpacing()
    font_sizes: ThemeFontSizes = ThemeFontSizes()
    use_case: Optional[Literal["corporate", "tech", "creative", "general"]] = None
    border_style: Literal["solid", "accent", "subtle"] = "solid"
    is_default: bool = False
    is_active: bool = True


class ThemeUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=r"^[a-z0-9-]+$")
    display_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = None
    colors: Optional[ThemeColors] = None
    typography: Optional[ThemeTypography] = None
    spacing: Optional[ThemeSpacing] = None
    font_sizes: Optional[ThemeFontSizes] = None
    use_case: Optional[Literal["corporate", "tech", "creative", "general"]] = None
    border_style: Optional[Literal["solid", "accent", "subtle"]] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class ThemeResponse(CamelModel):
    id: str
    name: str
    display_name: str
    description: str
    colors: dict
    typography: dict
    spacing: dict
    font_sizes: dict
    use_case: Optional[str] = None
    border_style: str
    is_default: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
