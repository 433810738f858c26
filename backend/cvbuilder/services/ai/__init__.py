from cvbuilder.services.ai.client import (
    AIService,
    AIServiceError,
    AITimeoutError,
    get_ai_service,
)
from cvbuilder.services.ai.parsing import AIResponseParseError, parse_ai_response
from cvbuilder.services.ai.cv_processing import CVProcessingService
from cvbuilder.services.ai.tailoring import CVTailoringService
from cvbuilder.services.ai.cover_letter import CoverLetterService

__all__ = [
    "AIService",
    "AIServiceError",
    "AITimeoutError",
    "get_ai_service",
    "AIResponseParseError",
    "parse_ai_response",
    "CVProcessingService",
    "CVTailoringService",
    "CoverLetterService",
]
