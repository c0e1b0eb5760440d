"""Generation requests and results."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from cv_tailor.models.resume import ResumeDocument


class GenerationKind(str, Enum):
    INGEST = "ingest"
    TAILOR = "tailor"
    COVER_LETTER = "cover_letter"


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    api_key: str = Field(repr=False)
    locale: str = "en"


class IngestRequest(_Request):
    kind: Literal[GenerationKind.INGEST] = GenerationKind.INGEST
    raw_text: str


class TailorRequest(_Request):
    kind: Literal[GenerationKind.TAILOR] = GenerationKind.TAILOR
    job_title: str
    job_description: str
    resume: ResumeDocument
    ai_instructions: str = ""


class CoverLetterRequest(_Request):
    kind: Literal[GenerationKind.COVER_LETTER] = GenerationKind.COVER_LETTER
    resume: ResumeDocument
    job_title: str = ""
    job_description: str = ""
    company_description: str = ""

    @property
    def is_spontaneous(self) -> bool:
        return not self.job_title.strip() or not self.job_description.strip()


GenerationRequest = Annotated[
    Union[IngestRequest, TailorRequest, CoverLetterRequest],
    Field(discriminator="kind"),
]


class CoverLetterInputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_position: str = ""
    company_description: str = ""
    job_description: str = ""


class CoverLetterResult(BaseModel):
    content: str
    inputs: CoverLetterInputs
