"""Input validation run before any gateway call."""

from __future__ import annotations

import logging

from cv_tailor.errors import InputValidationError
from cv_tailor.models.request import CoverLetterRequest, IngestRequest, TailorRequest
from cv_tailor.models.resume import ResumeDocument
from cv_tailor.utils.locale import resolve_locale

logger = logging.getLogger(__name__)

MIN_RAW_TEXT_LENGTH = 50
MAX_RAW_TEXT_LENGTH = 50_000


def validate_raw_text(raw_text: str | None) -> str:
    text = (raw_text or "").strip()
    if not text:
        raise InputValidationError("Raw CV text is required for ingestion.")
    if len(text) < MIN_RAW_TEXT_LENGTH:
        raise InputValidationError(
            f"CV text is too short. Please provide at least {MIN_RAW_TEXT_LENGTH} characters."
        )
    if len(text) > MAX_RAW_TEXT_LENGTH:
        raise InputValidationError(
            f"CV text is too long. Please limit to {MAX_RAW_TEXT_LENGTH:,} characters."
        )
    return text


def validate_credentials(api_key: str | None, model: str | None, purpose: str) -> tuple[str, str]:
    key = (api_key or "").strip()
    if not key:
        raise InputValidationError(
            f"API key is required to {purpose}. Please configure your API key in settings."
        )
    model_id = (model or "").strip()
    if not model_id:
        raise InputValidationError(
            f"Model selection is required to {purpose}. Please select a model in settings."
        )
    return key, model_id


def validate_resume(resume: ResumeDocument | None, purpose: str) -> ResumeDocument:
    if resume is None:
        raise InputValidationError(f"Resume data is required to {purpose}.")
    if not resume.name.strip():
        raise InputValidationError(f"Resume must contain at least a name to {purpose}.")
    if not resume.contact_info.location.strip():
        logger.warning("Resume is missing location information for the %s header.", purpose)
    return resume


def validate_ingest(request: IngestRequest) -> IngestRequest:
    raw_text = validate_raw_text(request.raw_text)
    api_key, model = validate_credentials(request.api_key, request.model, "process CV")
    return request.model_copy(
        update={
            "raw_text": raw_text,
            "api_key": api_key,
            "model": model,
            "locale": resolve_locale(request.locale),
        }
    )


def validate_tailor(request: TailorRequest) -> TailorRequest:
    api_key, model = validate_credentials(request.api_key, request.model, "tailor resume")
    resume = validate_resume(request.resume, "tailor resume")
    return request.model_copy(
        update={
            "job_title": request.job_title.strip(),
            "job_description": request.job_description.strip(),
            "ai_instructions": request.ai_instructions.strip(),
            "resume": resume,
            "api_key": api_key,
            "model": model,
            "locale": resolve_locale(request.locale),
        }
    )


def validate_cover_letter(request: CoverLetterRequest) -> CoverLetterRequest:
    api_key, model = validate_credentials(
        request.api_key, request.model, "generate a cover letter"
    )
    resume = validate_resume(request.resume, "generate a cover letter")
    company_description = request.company_description.strip()
    if request.is_spontaneous and not company_description:
        raise InputValidationError(
            "Company description is required for spontaneous applications. "
            "Please provide information about the company you're applying to."
        )
    return request.model_copy(
        update={
            "job_title": request.job_title.strip(),
            "job_description": request.job_description.strip(),
            "company_description": company_description,
            "resume": resume,
            "api_key": api_key,
            "model": model,
            "locale": resolve_locale(request.locale),
        }
    )


def validate_request(request):
    """Validate and sanitize any generation request."""
    if isinstance(request, IngestRequest):
        return validate_ingest(request)
    if isinstance(request, TailorRequest):
        return validate_tailor(request)
    if isinstance(request, CoverLetterRequest):
        return validate_cover_letter(request)
    raise InputValidationError(f"Unsupported generation request: {type(request).__name__}")
