from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from cvbuilder.database import get_db
from cvbuilder.errors import APIError, NotFoundError
from cvbuilder.models import Theme
from cvbuilder.schemas import ThemeCreate, ThemeResponse, ThemeUpdate, envelope

router = APIRouter()


def serialize_theme(theme: Theme) -> dict:
    return ThemeResponse.model_validate(theme).model_dump(by_alias=True, mode="json")


async def get_theme_or_404(db: AsyncSession, theme_id: str) -> Theme:
    theme = await db.get(Theme, theme_id)
    if theme is None:
        raise NotFoundError("Theme not found")
    return theme


async def _ensure_name_available(db: AsyncSession, name: str) -> None:
    result = await db.execute(select(Theme.id).where(Theme.name == name))
    if result.scalar_one_or_none() is not None:
        raise APIError("Theme name already exists", 400)


async def _clear_other_defaults(db: AsyncSession, theme_id: str) -> None:
    await db.execute(update(Theme).where(Theme.id != theme_id).values(is_default=False))


@router.get("")
async def list_themes(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Theme).where(Theme.is_active == True).order_by(Theme.display_name))
    return envelope(data=[serialize_theme(theme) for theme in result.scalars().all()])


@router.get("/{theme_id}")
async def get_theme(theme_id: str, db: AsyncSession = Depends(get_db)):
    theme = await get_theme_or_404(db, theme_id)
    return envelope(data=serialize_theme(theme))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_theme(body: ThemeCreate, db: AsyncSession = Depends(get_db)):
    await _ensure_name_available(db, body.name)

    data = body.model_dump(by_alias=True)
    theme = Theme(
        name=body.name,
        display_name=body.display_name,
        description=body.description,
        colors=data["colors"],
        typography=data["typography"],
        spacing=data["spacing"],
        font_sizes=data["fontSizes"],
        use_case=body.use_case,
        border_style=body.border_style,
        is_default=body.is_default,
        is_active=body.is_active,
    )
    db.add(theme)
    await db.flush()
    if theme.is_default:
        await _clear_other_defaults(db, theme.id)

    await db.commit()
    await db.refresh(theme)
    return envelope(data=serialize_theme(theme), message="Theme created successfully")


@router.put("/{theme_id}")
async def update_theme(theme_id: str, body: ThemeUpdate, db: AsyncSession = Depends(get_db)):
    theme = await get_theme_or_404(db, theme_id)

    if body.name and body.name != theme.name:
        await _ensure_name_available(db, body.name)

    # Nested settings are stored with their camelCase keys
    aliased = body.model_dump(by_alias=True, exclude_unset=True)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if field in ("colors", "typography", "spacing", "font_sizes"):
            value = aliased["fontSizes" if field == "font_sizes" else field]
        setattr(theme, field, value)

    if body.is_default:
        await _clear_other_defaults(db, theme.id)

    await db.commit()
    await db.refresh(theme)
    return envelope(data=serialize_theme(theme), message="Theme updated successfully")


@router.delete("/{theme_id}")
async def delete_theme(theme_id: str, db: AsyncSession = Depends(get_db)):
    theme = await get_theme_or_404(db, theme_id)
    if theme.is_default:
        raise APIError("Cannot delete default theme", 400)

    await db.delete(theme)
    await db.commit()
    return envelope(message="Theme removed")
