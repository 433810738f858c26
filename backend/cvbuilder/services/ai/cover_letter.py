import logging
from datetime import datetime, timezone
from typing import Optional

from cvbuilder.errors import APIError
from cvbuilder.services.ai.client import AIService, get_ai_service
from cvbuilder.services.ai.prompts import build_cover_letter_prompt

logger = logging.getLogger(__name__)


class CoverLetterService:
    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai_service = ai_service or get_ai_service()

    async def generate_cover_letter(
        self,
        cv: dict,
        job_offer: dict,
        additional_requirements: Optional[str] = None,
    ) -> dict:
        """Plain-text cover letter plus its creation timestamp."""
        if not cv or not job_offer:
            raise APIError("CV and job offer data required", 400)

        prompt = build_cover_letter_prompt(cv, job_offer, additional_requirements)
        content = await self.ai_service.generate_content(prompt, operation="cover_letter")

        logger.info(f"Cover letter generated ({len(content)} chars)")
        return {
            "content": content.strip(),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
