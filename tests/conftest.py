"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from openai.types.chat import ChatCompletion

from cv_tailor.clients.llm_client import LLMClient
from cv_tailor.models.resume import ResumeDocument
from cv_tailor.pipeline.orchestrator import GenerationPipeline


def build_completion(
    *,
    content: str | None = None,
    tool_name: str | None = None,
    arguments: str | dict | None = None,
    prompt_tokens: int = 100,
    completion_tokens: int = 50,
) -> ChatCompletion:
    """Build a real ChatCompletion with either text content or one tool call."""
    message: dict = {"role": "assistant", "content": content}
    finish_reason = "stop"
    if tool_name is not None:
        if isinstance(arguments, dict):
            arguments = json.dumps(arguments)
        message["tool_calls"] = [
            {
                "id": "call_1",
                "type": "function",
                "function": {"name": tool_name, "arguments": arguments or ""},
            }
        ]
        finish_reason = "tool_calls"
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "test-model",
            "choices": [{"index": 0, "finish_reason": finish_reason, "message": message}],
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        }
    )


@pytest.fixture
def sample_resume_json() -> dict:
    return {
        "name": "John Doe",
        "title": "Senior Software Engineer",
        "contactInfo": {
            "email": "john.doe@example.com",
            "phone": "+1-555-0123",
            "location": "San Francisco, CA",
            "website": "https://johndoe.dev",
            "linkedin": "linkedin.com/in/johndoe",
            "github": "github.com/johndoe",
        },
        "summary": "Experienced software engineer with 5+ years of experience",
        "generalSkills": ["JavaScript", "Python", "React"],
        "skills": [
            {"domain": "Programming Languages", "skills": ["JavaScript", "TypeScript", "Python"]}
        ],
        "experience": [
            {
                "title": "Senior Software Engineer",
                "company": "Tech Corp",
                "location": "San Francisco, CA",
                "period": {"start": "2021", "end": "Present"},
                "achievements": ["Led team of 5 developers", "Increased performance by 40%"],
                "techStack": ["React", "Node.js", "AWS"],
            }
        ],
        "projects": [
            {
                "name": "E-commerce Platform",
                "description": "Built scalable e-commerce solution",
                "techStack": ["React", "Node.js", "MongoDB"],
            }
        ],
        "education": [
            {
                "degree": "Computer Science",
                "institution": "UC Berkeley",
                "year": "2018",
                "location": "Berkeley, CA",
            }
        ],
        "certifications": [],
        "languages": [{"name": "English", "level": "Native"}],
        "publications": [],
        "personalityTraits": ["Analytical", "Creative"],
        "changes": [],
    }


@pytest.fixture
def sample_resume(sample_resume_json) -> ResumeDocument:
    return ResumeDocument.model_validate(sample_resume_json)


@pytest.fixture
def sample_raw_text() -> str:
    return """John Doe
john.doe@example.com | +1-555-0123 | San Francisco, CA

Senior Software Engineer at Tech Corp (2021 - Present)
- Led team of 5 developers
- Increased performance by 40%

B.S. Computer Science, UC Berkeley, 2018
"""


@pytest.fixture
def sample_cover_letter() -> str:
    return """<div>
<h1>John Doe</h1>
<p>john.doe@example.com | +1-555-0123 | San Francisco, CA</p>
<h2>Cover letter for position Frontend Developer - Acme Corp - January 2024</h2>
<p>Dear Hiring Manager,</p>
<p>I am excited to apply for the Frontend Developer role. My work at Tech Corp
taught me how to lead small teams and ship fast, reliable interfaces.</p>
<p>I would welcome the chance to discuss how I can help your team.</p>
<p>Sincerely,<br>John Doe</p>
</div>"""


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """LLMClient whose ``complete`` is an AsyncMock."""
    client = AsyncMock(spec=LLMClient)
    client.complete = AsyncMock()
    return client


@pytest.fixture
def no_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def pipeline(mock_llm_client, no_sleep) -> GenerationPipeline:
    return GenerationPipeline(mock_llm_client, sleep=no_sleep)


@pytest.fixture
def make_completion():
    """Factory fixture for ChatCompletion replies."""
    return build_completion
