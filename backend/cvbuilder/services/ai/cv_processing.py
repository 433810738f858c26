"""
CV and job offer extraction from free text.

Results are cached in Redis by a hash of the input text, so re-submitting
the same CV or posting does not cost another model call.
"""

import logging
from typing import Optional

from cvbuilder.errors import APIError
from cvbuilder.services.ai.client import AIService, get_ai_service
from cvbuilder.services.ai.parsing import AIResponseParseError, parse_ai_response
from cvbuilder.services.ai.prompts import build_cv_extraction_prompt, build_job_offer_prompt
from cvbuilder.services.cache import CacheLayer, ExtractionCache, get_cache, hash_content

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY_CHARS = 500


def fallback_cv_structure(text: str) -> dict:
    """Empty form-shaped CV carrying the start of the raw text as its summary."""
    return {
        "personalInfo": {
            "firstName": "",
            "lastName": "",
            "title": "",
            "email": "",
            "phone": "",
            "location": "",
            "linkedin": "",
            "website": "",
        },
        "summary": text[:FALLBACK_SUMMARY_CHARS],
        "experience": [],
        "education": [],
        "skills": {},
        "languages": [],
        "certifications": [],
    }


class CVProcessingService:
    def __init__(self, ai_service: Optional[AIService] = None, cache: Optional[ExtractionCache] = None):
        self.ai_service = ai_service or get_ai_service()
        self._cache = cache

    async def _get_cache(self) -> ExtractionCache:
        if self._cache is None:
            self._cache = await get_cache()
        return self._cache

    async def extract_cv_from_text(self, text: str) -> dict:
        """
        Extract a structured (form-shaped) CV from raw text.

        An unparseable model response does not fail the request: the
        fallback structure is returned instead and is not cached.
        """
        if not text:
            raise APIError("No text provided", 400)

        logger.info(f"CV extraction request received ({len(text)} chars)")

        cache = await self._get_cache()
        text_hash = hash_content(text)
        cached = await cache.get_extraction(CacheLayer.CV_EXTRACTION, text_hash)
        if cached is not None:
            logger.info("CV extraction served from cache")
            return cached

        response = await self.ai_service.generate_content(
            build_cv_extraction_prompt(text), operation="extract_cv"
        )

        try:
            cv_data = parse_ai_response(response)
        except AIResponseParseError as e:
            logger.warning(f"CV extraction returned unusable output ({e}), using fallback structure")
            return fallback_cv_structure(text)

        if not isinstance(cv_data, dict):
            logger.warning("CV extraction did not return an object, using fallback structure")
            return fallback_cv_structure(text)

        await cache.set_extraction(CacheLayer.CV_EXTRACTION, text_hash, cv_data)
        logger.info("CV extraction completed successfully")
        return cv_data

    async def extract_job_offer(self, text: str) -> dict:
        if not text:
            raise APIError("No text provided", 400)

        cache = await self._get_cache()
        text_hash = hash_content(text)
        cached = await cache.get_extraction(CacheLayer.JOB_OFFER, text_hash)
        if cached is not None:
            return cached

        response = await self.ai_service.generate_content(
            build_job_offer_prompt(text), operation="extract_job_offer"
        )
        try:
            job_offer = parse_ai_response(response)
        except AIResponseParseError as e:
            raise APIError(f"Failed to extract job offer data: {e}", 502) from e

        if not isinstance(job_offer, dict):
            raise APIError("Failed to extract job offer data: unexpected response shape", 502)

        await cache.set_extraction(CacheLayer.JOB_OFFER, text_hash, job_offer)
        return job_offer
