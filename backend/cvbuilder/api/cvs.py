import math
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from cvbuilder.auth import get_current_user, get_optional_user
from cvbuilder.database import get_db
from cvbuilder.errors import APIError, NotFoundError
from cvbuilder.models import CV, CV_LANGUAGES, CV_THEMES, User
from cvbuilder.models.cv import CONTENT_COLUMNS
from cvbuilder.schemas import CVContent, CVCreate, CVListResponse, CVResponse, CVSummary, PDFRequest, ThemeChange, envelope
from cvbuilder.services.cv_transform import is_form_shape, transform_cv_for_storage, transform_cv_from_storage
from cvbuilder.services.cv_validation import get_layout_suggestions, optimize_layout_for_content
from cvbuilder.services.pdf import content_disposition, generate_pdf, pdf_filename, render_cv_html
from cvbuilder.services.skills import categorize_skills_array
from cvbuilder.services.themes import resolve_theme

router = APIRouter()

NO_CACHE_HEADERS = {
    "Accept-Ranges": "none",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def serialize_cv(cv: CV) -> dict:
    return CVResponse.model_validate(cv).model_dump(by_alias=True, mode="json")


def _check_language_and_theme(data: dict) -> None:
    if data.get("language") is not None and data["language"] not in CV_LANGUAGES:
        raise APIError(f"Invalid language: {data['language']}", 400)
    if data.get("theme") is not None and data["theme"] not in CV_THEMES:
        raise APIError("Invalid theme", 400)


def _to_storage(payload: dict) -> dict:
    """Storage-shape content from a payload in either layout."""
    data = transform_cv_for_storage(payload) if is_form_shape(payload) else dict(payload)
    _check_language_and_theme(data)
    return {key: value for key, value in data.items() if key in CONTENT_COLUMNS}


def _validate_content(content: dict) -> None:
    """Reject content that would leave the stored CV unreadable."""
    try:
        CVContent.model_validate(content)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


async def get_active_cv(db: AsyncSession, cv_id: str) -> CV:
    cv = await db.get(CV, cv_id)
    if cv is None or not cv.is_active:
        raise NotFoundError("CV not found")
    return cv


async def _find_user_cv(db: AsyncSession, user: Optional[User]) -> Optional[CV]:
    query = select(CV).where(CV.is_active == True)
    if user is not None:
        query = query.where(CV.user_id == user.id).order_by(CV.updated_at.desc())
    else:
        # Anonymous callers see the most recently created CV
        query = query.order_by(CV.created_at.desc())
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


def _pdf_response(pdf: bytes, filename: str, disposition: str = "attachment") -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(filename, disposition),
            **NO_CACHE_HEADERS,
        },
    )


# ==================== Full CV (current user) ====================

@router.get("/full")
async def get_full_cv(
    view: Optional[str] = Query(None, pattern="^(form|storage)$"),
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    cv = await _find_user_cv(db, user)
    if cv is None:
        return envelope(data={"cv": None}, message="No CV found")

    if view == "form":
        return envelope(data={"cv": {**transform_cv_from_storage(cv.to_content()), "id": cv.id}})
    return envelope(data={"cv": serialize_cv(cv)})


@router.post("/full")
async def save_full_cv(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    data = _to_storage(payload)

    # Anonymous saves always create a new CV
    cv = await _find_user_cv(db, user) if user is not None else None
    created = cv is None
    # apply_content skips None values, so they never reach the stored CV
    present = {key: value for key, value in data.items() if value is not None}
    _validate_content(present if created else {**cv.to_content(), **present})

    if created:
        cv = CV(user_id=user.id if user else None)
        cv.apply_content(data)
        db.add(cv)
    else:
        cv.apply_content(data)
        cv.version += 1

    await db.flush()
    if user is not None:
        user.cv_id = cv.id

    await db.commit()
    await db.refresh(cv)

    message = "CV created successfully" if created else "CV updated successfully"
    return envelope(data={"cv": serialize_cv(cv)}, message=message)


@router.delete("/full")
async def delete_full_cv(
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    query = delete(CV).where(CV.is_active == True)
    if user is not None:
        query = query.where(CV.user_id == user.id)
        user.cv_id = None

    result = await db.execute(query)
    await db.commit()

    deleted = result.rowcount or 0
    suffix = f" ({deleted} records deleted)" if deleted else ""
    return envelope(message=f"CV data cleared successfully{suffix}", deletedCount=deleted)


@router.patch("/full/{section}")
async def update_full_cv_section(
    section: str,
    value: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if section not in CONTENT_COLUMNS:
        raise APIError(f"Unknown CV section: {section}", 400)

    cv = await _find_user_cv(db, user)
    if cv is None:
        raise NotFoundError("CV not found")

    if section == "skills" and isinstance(value, list):
        value = categorize_skills_array(value)
    _check_language_and_theme({section: value})
    _validate_content({**cv.to_content(), section: value})

    setattr(cv, CONTENT_COLUMNS[section], value)
    cv.version += 1
    await db.commit()
    await db.refresh(cv)

    return envelope(data={"cv": serialize_cv(cv)}, message=f"CV {section} updated successfully")


# ==================== PDF from posted data ====================

@router.post("/generate-pdf")
async def generate_pdf_from_data(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    if "cvData" in payload:
        try:
            request = PDFRequest.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(e.errors())
        cv_data, options = request.cv_data or {}, request.options
    else:
        cv_data, options = payload, {}

    personal = cv_data.get("personalInfo") or {}
    if not isinstance(personal, dict) or not (personal.get("name") or personal.get("firstName")):
        raise APIError("Invalid CV data - personal info required", 400)

    cv = transform_cv_for_storage(cv_data) if is_form_shape(cv_data) else cv_data
    language = options.get("language") or cv.get("language") or "en"
    theme = await resolve_theme(db, options.get("theme") or cv.get("theme"))

    pdf = await generate_pdf(render_cv_html(cv, theme=theme, language=language))
    return _pdf_response(pdf, pdf_filename(cv["personalInfo"].get("name")))


# ==================== CRUD by id ====================

@router.get("")
async def list_cvs(
    language: Optional[str] = Query(None),
    theme: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    query = select(CV).where(CV.is_active == True)
    count_query = select(func.count(CV.id)).where(CV.is_active == True)

    if language:
        query = query.where(CV.language == language)
        count_query = count_query.where(CV.language == language)

    if theme:
        query = query.where(CV.theme == theme)
        count_query = count_query.where(CV.theme == theme)

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(CV.created_at.desc()).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    cvs = result.scalars().all()

    listing = CVListResponse(
        cvs=[CVSummary.model_validate(cv) for cv in cvs],
        total=total,
        page=page,
        per_page=per_page,
        pages=math.ceil(total / per_page),
    )
    return envelope(data=listing.model_dump(by_alias=True, mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_cv(
    body: CVCreate,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    cv = CV(user_id=user.id if user else None)
    cv.apply_content(body.model_dump(by_alias=True))
    db.add(cv)
    await db.commit()
    await db.refresh(cv)

    return envelope(data=serialize_cv(cv), message="CV created successfully")


@router.get("/{cv_id}")
async def get_cv(cv_id: str, db: AsyncSession = Depends(get_db)):
    cv = await get_active_cv(db, cv_id)
    return envelope(data=serialize_cv(cv))


@router.put("/{cv_id}")
async def update_cv(cv_id: str, body: CVCreate, db: AsyncSession = Depends(get_db)):
    cv = await get_active_cv(db, cv_id)
    cv.apply_content(body.model_dump(by_alias=True))
    cv.version += 1
    await db.commit()
    await db.refresh(cv)

    return envelope(data=serialize_cv(cv), message="CV updated successfully")


@router.delete("/{cv_id}")
async def delete_cv(cv_id: str, db: AsyncSession = Depends(get_db)):
    cv = await get_active_cv(db, cv_id)
    cv.is_active = False
    await db.commit()

    return envelope(message="CV deleted successfully")


@router.patch("/{cv_id}/theme")
async def update_cv_theme(cv_id: str, body: ThemeChange, db: AsyncSession = Depends(get_db)):
    if body.theme not in CV_THEMES:
        raise APIError("Invalid theme", 400)

    cv = await get_active_cv(db, cv_id)
    cv.theme = body.theme
    await db.commit()
    await db.refresh(cv)

    return envelope(data=serialize_cv(cv), message="CV theme updated successfully")


@router.get("/{cv_id}/layout-analysis")
async def get_layout_analysis(cv_id: str, db: AsyncSession = Depends(get_db)):
    cv = await get_active_cv(db, cv_id)
    content = cv.to_content()

    suggestions = get_layout_suggestions(content)
    analysis = optimize_layout_for_content(content, auto_optimize=False)
    critical = sum(1 for s in suggestions if s.get("type") == "content")

    return envelope(
        data={
            "suggestions": suggestions,
            "contentAnalysis": analysis["suggestions"],
            "recommendations": {
                "shouldOptimize": bool(suggestions),
                "criticalIssues": critical,
                "minorIssues": len(suggestions) - critical,
            },
        }
    )


@router.get("/{cv_id}/pdf")
async def get_cv_pdf(
    cv_id: str,
    language: Optional[str] = Query(None, pattern="^(en|fr)$"),
    db: AsyncSession = Depends(get_db),
):
    cv = await get_active_cv(db, cv_id)
    theme = await resolve_theme(db, cv.theme)

    pdf = await generate_pdf(render_cv_html(cv.to_content(), theme=theme, language=language or cv.language))
    return _pdf_response(pdf, pdf_filename((cv.personal_info or {}).get("name")), disposition="inline")
