"""Generation pipeline - validate, compose, call, extract, with retries."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from cv_tailor.clients.llm_client import LLMClient
from cv_tailor.errors import GenerationFailedError, InputValidationError
from cv_tailor.models.request import (
    CoverLetterInputs,
    CoverLetterRequest,
    CoverLetterResult,
    IngestRequest,
    TailorRequest,
)
from cv_tailor.models.resume import ResumeDocument
from cv_tailor.pipeline.error_classifier import classify_error
from cv_tailor.pipeline.input_validator import validate_request
from cv_tailor.pipeline.prompt_composer import INGEST_TOOL, TAILOR_TOOL, compose
from cv_tailor.pipeline.response_extractor import (
    extract_cover_letter,
    extract_ingested_resume,
    extract_tailored_resume,
)
from cv_tailor.pipeline.retry import RetryPolicy, RetryState, run_with_retry

logger = logging.getLogger(__name__)


class GenerationPipeline:
    """Runs ingestion, tailoring and cover-letter generation end to end.

    Holds no per-request state: each call validates its request, then every
    attempt recomposes the prompt, calls the gateway once and validates the
    reply. Failures reach the caller only as ``GenerationFailedError``.
    """

    def __init__(
        self,
        llm: LLMClient,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.llm = llm
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._today = today

    async def run(self, request, *, on_attempt: Callable[[RetryState], None] | None = None):
        """Dispatch any request kind; returns ResumeDocument or CoverLetterResult."""
        try:
            request = validate_request(request)
        except InputValidationError as exc:
            logger.warning("Rejected %s request: %s", type(request).__name__, exc)
            raise GenerationFailedError(classify_error(exc), attempts=0) from exc

        kwargs: dict = {"on_attempt": on_attempt}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return await run_with_retry(
            lambda: self._attempt(request), self.retry_policy, **kwargs
        )

    async def _attempt(self, request):
        prompt = compose(request, today=self._today())
        response = await self.llm.complete(prompt, api_key=request.api_key, model=request.model)
        if isinstance(request, IngestRequest):
            return extract_ingested_resume(response, INGEST_TOOL)
        if isinstance(request, TailorRequest):
            return extract_tailored_resume(response, TAILOR_TOOL, request.resume)
        inputs = CoverLetterInputs(
            job_position=request.job_title,
            company_description=request.company_description,
            job_description=request.job_description,
        )
        return extract_cover_letter(response, inputs, request.resume)

    async def ingest_cv(
        self,
        raw_text: str,
        api_key: str,
        model: str,
        locale: str = "en",
        *,
        on_attempt: Callable[[RetryState], None] | None = None,
    ) -> ResumeDocument:
        return await self.run(
            IngestRequest(raw_text=raw_text, api_key=api_key, model=model, locale=locale),
            on_attempt=on_attempt,
        )

    async def tailor_resume(
        self,
        job_title: str,
        job_description: str,
        resume: ResumeDocument,
        api_key: str,
        model: str,
        ai_instructions: str = "",
        locale: str = "en",
        *,
        on_attempt: Callable[[RetryState], None] | None = None,
    ) -> ResumeDocument:
        return await self.run(
            TailorRequest(
                job_title=job_title,
                job_description=job_description,
                resume=resume,
                ai_instructions=ai_instructions,
                api_key=api_key,
                model=model,
                locale=locale,
            ),
            on_attempt=on_attempt,
        )

    async def generate_cover_letter(
        self,
        job_title: str,
        job_description: str,
        resume: ResumeDocument,
        api_key: str,
        model: str,
        company_description: str = "",
        locale: str = "en",
        *,
        on_attempt: Callable[[RetryState], None] | None = None,
    ) -> CoverLetterResult:
        return await self.run(
            CoverLetterRequest(
                job_title=job_title,
                job_description=job_description,
                resume=resume,
                company_description=company_description,
                api_key=api_key,
                model=model,
                locale=locale,
            ),
            on_attempt=on_attempt,
        )
