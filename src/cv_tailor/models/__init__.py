"""Data models for the CV generation pipeline."""

from cv_tailor.models.catalog import DEFAULT_MODEL, AVAILABLE_MODELS, ModelOption
from cv_tailor.models.request import (
    CoverLetterInputs,
    CoverLetterRequest,
    CoverLetterResult,
    GenerationKind,
    GenerationRequest,
    IngestRequest,
    TailorRequest,
)
from cv_tailor.models.resume import (
    Certification,
    Change,
    ContactInfo,
    Education,
    Experience,
    Language,
    Period,
    Project,
    Publication,
    ResumeDocument,
    SkillDomain,
)

__all__ = [
    "AVAILABLE_MODELS",
    "Certification",
    "Change",
    "ContactInfo",
    "CoverLetterInputs",
    "CoverLetterRequest",
    "CoverLetterResult",
    "DEFAULT_MODEL",
    "Education",
    "Experience",
    "GenerationKind",
    "GenerationRequest",
    "IngestRequest",
    "Language",
    "ModelOption",
    "Period",
    "Project",
    "Publication",
    "ResumeDocument",
    "SkillDomain",
    "TailorRequest",
]
