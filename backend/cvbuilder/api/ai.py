from fastapi import APIRouter, Depends
from cvbuilder.schemas import TailoringRequest, TextExtractionRequest, envelope
from cvbuilder.services.ai import (
    AIService,
    CoverLetterService,
    CVProcessingService,
    CVTailoringService,
    get_ai_service,
)
from cvbuilder.services.cache import ExtractionCache, get_cache

router = APIRouter()


async def get_extraction_cache() -> ExtractionCache:
    return await get_cache()


def get_cv_processing_service(
    ai_service: AIService = Depends(get_ai_service),
    cache: ExtractionCache = Depends(get_extraction_cache),
) -> CVProcessingService:
    return CVProcessingService(ai_service=ai_service, cache=cache)


def get_tailoring_service(ai_service: AIService = Depends(get_ai_service)) -> CVTailoringService:
    return CVTailoringService(ai_service=ai_service)


def get_cover_letter_service(ai_service: AIService = Depends(get_ai_service)) -> CoverLetterService:
    return CoverLetterService(ai_service=ai_service)


@router.get("/test")
async def test_ai(ai_service: AIService = Depends(get_ai_service)):
    response = await ai_service.test_connection()
    return envelope(message="AI service is working", response=response)


@router.post("/extract-cv")
async def extract_cv(
    request: TextExtractionRequest,
    service: CVProcessingService = Depends(get_cv_processing_service),
):
    cv_data = await service.extract_cv_from_text(request.text)
    return envelope(data=cv_data, message="CV data extracted successfully")


@router.post("/extract-job-offer")
async def extract_job_offer(
    request: TextExtractionRequest,
    service: CVProcessingService = Depends(get_cv_processing_service),
):
    job_data = await service.extract_job_offer(request.text)
    return envelope(data=job_data, message="Job offer data extracted successfully")


@router.post("/tailor-cv")
async def tailor_cv(
    request: TailoringRequest,
    service: CVTailoringService = Depends(get_tailoring_service),
):
    tailored = await service.tailor_cv(request.cv, request.job_offer, request.additional_requirements)
    return envelope(data=tailored, message="CV tailored successfully")


@router.post("/generate-cover-letter")
async def generate_cover_letter(
    request: TailoringRequest,
    service: CoverLetterService = Depends(get_cover_letter_service),
):
    result = await service.generate_cover_letter(request.cv, request.job_offer, request.additional_requirements)
    return envelope(data=result, message="Cover letter generated successfully")
