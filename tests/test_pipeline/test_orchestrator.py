"""Tests for the generation pipeline."""

import logging
from datetime import date
from types import SimpleNamespace

import pytest

from cv_tailor.errors import ErrorKind, GatewayError, GenerationFailedError
from cv_tailor.models.request import CoverLetterRequest, IngestRequest
from cv_tailor.pipeline.orchestrator import GenerationPipeline
from cv_tailor.pipeline.prompt_composer import INGEST_TOOL, SPONTANEOUS_MARKER, TAILOR_TOOL

KEY = "sk-or-test"
MODEL = "openai/gpt-4.1-mini"


def _sent_prompt(mock_llm_client, index: int = -1):
    return mock_llm_client.complete.await_args_list[index].args[0]


class TestValidationGate:
    @pytest.mark.parametrize("length", [0, 10, 49, 50_001])
    async def test_bad_length_makes_no_call(self, pipeline, mock_llm_client, length):
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv("x" * length, KEY, MODEL)
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.attempts == 0
        mock_llm_client.complete.assert_not_awaited()

    async def test_missing_key_is_validation(self, pipeline, mock_llm_client, sample_raw_text):
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, "", MODEL)
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert not exc_info.value.retryable
        mock_llm_client.complete.assert_not_awaited()

    async def test_spontaneous_without_company(self, pipeline, mock_llm_client, sample_resume):
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.generate_cover_letter("", "", sample_resume, KEY, MODEL)
        assert "Company description is required" in str(exc_info.value)
        mock_llm_client.complete.assert_not_awaited()


class TestIngest:
    async def test_success(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text, sample_resume_json
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=INGEST_TOOL, arguments=sample_resume_json
        )
        doc = await pipeline.ingest_cv(f"  {sample_raw_text}  ", KEY, MODEL)

        assert doc.name == "John Doe"
        call = mock_llm_client.complete.await_args
        assert call.kwargs == {"api_key": KEY, "model": MODEL}
        prompt = call.args[0]
        assert prompt.tool.name == INGEST_TOOL
        assert prompt.content == f"Raw CV text:\n{sample_raw_text.strip()}"

    async def test_malformed_json(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=INGEST_TOOL, arguments="{ invalid json response"
        )
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)

        message = str(exc_info.value)
        assert "valid JSON" in message
        assert "valid name" not in message
        assert mock_llm_client.complete.await_count == 1

    async def test_missing_name(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text, sample_resume_json
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=INGEST_TOOL, arguments={**sample_resume_json, "name": ""}
        )
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)
        assert "valid name" in str(exc_info.value)

    async def test_unsupported_locale_falls_back(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text, sample_resume_json, caplog
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=INGEST_TOOL, arguments=sample_resume_json
        )
        with caplog.at_level(logging.WARNING):
            doc = await pipeline.ingest_cv(sample_raw_text, KEY, MODEL, locale="xx")

        assert doc.name == "John Doe"
        assert "English" in _sent_prompt(mock_llm_client).instruction
        warnings = [
            r for r in caplog.records
            if r.name == "cv_tailor.utils.locale" and r.levelno == logging.WARNING
        ]
        assert len(warnings) == 1
        assert "xx" in warnings[0].getMessage()

    async def test_missing_tool_call(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text
    ):
        mock_llm_client.complete.return_value = make_completion(content="Here is your CV")
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)
        assert "Expected tool call to ingest_cv was not returned" in str(exc_info.value)


class TestRetries:
    async def test_network_failure_retry_bound(
        self, pipeline, mock_llm_client, no_sleep, sample_raw_text
    ):
        mock_llm_client.complete.side_effect = GatewayError(
            "Network error connecting to the LLM gateway: Connection error."
        )
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)

        assert mock_llm_client.complete.await_count == 4
        assert no_sleep.await_count == 3
        assert exc_info.value.kind is ErrorKind.NETWORK
        assert exc_info.value.attempts == 4

    async def test_auth_failure_single_call(self, pipeline, mock_llm_client, sample_raw_text):
        mock_llm_client.complete.side_effect = GatewayError(
            "Invalid API key. Please check your OpenRouter API key in settings.", status_code=401
        )
        with pytest.raises(GenerationFailedError) as exc_info:
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)

        assert mock_llm_client.complete.await_count == 1
        assert exc_info.value.kind is ErrorKind.AUTH
        assert "API key" in exc_info.value.suggestion

    async def test_empty_reply_is_retried(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text, sample_resume_json
    ):
        mock_llm_client.complete.side_effect = [
            SimpleNamespace(choices=[]),
            make_completion(tool_name=INGEST_TOOL, arguments=sample_resume_json),
        ]
        doc = await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)
        assert doc.name == "John Doe"
        assert mock_llm_client.complete.await_count == 2

    async def test_each_attempt_recomposes(self, pipeline, mock_llm_client, sample_raw_text):
        mock_llm_client.complete.side_effect = GatewayError("Network error")
        with pytest.raises(GenerationFailedError):
            await pipeline.ingest_cv(sample_raw_text, KEY, MODEL)
        prompts = [c.args[0] for c in mock_llm_client.complete.await_args_list]
        assert len(prompts) == 4
        assert all(p == prompts[0] for p in prompts)

    async def test_on_attempt_callback(self, pipeline, mock_llm_client, sample_raw_text):
        mock_llm_client.complete.side_effect = GatewayError("Network error")
        attempts: list[int] = []
        with pytest.raises(GenerationFailedError):
            await pipeline.ingest_cv(
                sample_raw_text, KEY, MODEL, on_attempt=lambda s: attempts.append(s.attempt)
            )
        assert attempts == [1, 2, 3, 4]


class TestTailor:
    async def test_merge_keeps_omitted_fields(
        self, pipeline, mock_llm_client, make_completion, sample_resume
    ):
        delta = {
            "title": "Frontend Developer",
            "summary": "Frontend engineer focused on React",
            "changes": [{"field": "summary", "change": "Emphasized React"}],
        }
        mock_llm_client.complete.return_value = make_completion(
            tool_name=TAILOR_TOOL, arguments=delta
        )
        tailored = await pipeline.tailor_resume(
            "Frontend Developer", "React role", sample_resume, KEY, MODEL
        )

        assert tailored.title == "Frontend Developer"
        assert tailored.name == sample_resume.name
        assert tailored.contact_info == sample_resume.contact_info
        assert tailored.experience == sample_resume.experience
        assert tailored.education == sample_resume.education
        assert [c.change for c in tailored.changes] == ["Emphasized React"]

    async def test_instructions_reach_prompt(
        self, pipeline, mock_llm_client, make_completion, sample_resume
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=TAILOR_TOOL, arguments={"summary": "s"}
        )
        await pipeline.tailor_resume(
            "Dev", "Build", sample_resume, KEY, MODEL, ai_instructions="Mention Kubernetes"
        )
        assert "Mention Kubernetes" in _sent_prompt(mock_llm_client).instruction

    async def test_missing_name_after_merge(
        self, pipeline, mock_llm_client, make_completion, sample_resume
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=TAILOR_TOOL, arguments={"name": "", "summary": "s"}
        )
        with pytest.raises(GenerationFailedError, match="valid name"):
            await pipeline.tailor_resume("Dev", "Build", sample_resume, KEY, MODEL)


class TestCoverLetter:
    async def test_spontaneous_application(
        self, pipeline, mock_llm_client, make_completion, sample_resume, sample_cover_letter
    ):
        mock_llm_client.complete.return_value = make_completion(content=sample_cover_letter)
        result = await pipeline.generate_cover_letter(
            "", "", sample_resume, KEY, MODEL, "Acme Corp makes tools", "en"
        )

        assert result.content == sample_cover_letter
        assert result.inputs.company_description == "Acme Corp makes tools"
        assert result.inputs.job_position == ""
        prompt = _sent_prompt(mock_llm_client)
        assert prompt.tool is None
        assert SPONTANEOUS_MARKER in prompt.content
        assert "Acme Corp makes tools" in prompt.content

    async def test_localized_date(
        self, mock_llm_client, no_sleep, make_completion, sample_resume, sample_cover_letter
    ):
        pipeline = GenerationPipeline(
            mock_llm_client, sleep=no_sleep, today=lambda: date(2024, 1, 15)
        )
        mock_llm_client.complete.return_value = make_completion(content=sample_cover_letter)
        await pipeline.generate_cover_letter(
            "Développeur", "React", sample_resume, KEY, MODEL, locale="fr"
        )
        instruction = _sent_prompt(mock_llm_client).instruction
        assert "janvier 2024" in instruction
        assert "French" in instruction

    async def test_empty_content(self, pipeline, mock_llm_client, make_completion, sample_resume):
        mock_llm_client.complete.return_value = make_completion(content="")
        with pytest.raises(GenerationFailedError, match="AI generated empty content"):
            await pipeline.generate_cover_letter("Dev", "Build", sample_resume, KEY, MODEL)


class TestRun:
    async def test_run_dispatches(
        self, pipeline, mock_llm_client, make_completion, sample_resume, sample_cover_letter
    ):
        mock_llm_client.complete.return_value = make_completion(content=sample_cover_letter)
        request = CoverLetterRequest(
            resume=sample_resume, company_description="Acme", api_key=KEY, model=MODEL
        )
        result = await pipeline.run(request)
        assert result.content == sample_cover_letter

    async def test_request_not_mutated(
        self, pipeline, mock_llm_client, make_completion, sample_raw_text, sample_resume_json
    ):
        mock_llm_client.complete.return_value = make_completion(
            tool_name=INGEST_TOOL, arguments=sample_resume_json
        )
        request = IngestRequest(raw_text=f"  {sample_raw_text}", api_key=KEY, model=MODEL, locale="xx")
        await pipeline.run(request)
        assert request.raw_text.startswith("  ")
        assert request.locale == "xx"
