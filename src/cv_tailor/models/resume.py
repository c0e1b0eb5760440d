"""Pydantic models for the structured resume document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Period(BaseModel):
    # Opaque date-like strings ("2021", "03/2019", "Present"), never parsed.
    start: str = ""
    end: str = ""


class ContactInfo(BaseModel):
    email: str = ""
    phone: str = ""
    location: str = ""
    website: str = ""
    linkedin: str = ""
    github: str = ""


class SkillDomain(BaseModel):
    domain: str
    skills: list[str] = Field(default_factory=list)


class Experience(_CamelModel):
    title: str
    company: str
    location: str = ""
    is_previous: bool = Field(default=False, alias="isPrevious")
    period: Period = Field(default_factory=Period)
    achievements: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list, alias="techStack")


class Project(_CamelModel):
    name: str
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list, alias="techStack")
    period: Period | None = None


class Education(BaseModel):
    degree: str
    institution: str
    year: str = ""
    location: str = ""
    gpa: str | None = None
    topics: str | None = None


class Certification(BaseModel):
    degree: str
    institution: str
    year: str = ""
    location: str = ""


class Language(BaseModel):
    name: str
    level: str = ""


class Publication(BaseModel):
    title: str
    location: str = ""
    url: str = ""


class Change(BaseModel):
    field: str
    change: str


class ResumeDocument(_CamelModel):
    """Canonical resume shape exchanged with the gateway (camelCase on the wire)."""

    name: str = ""
    title: str = ""
    contact_info: ContactInfo = Field(default_factory=ContactInfo, alias="contactInfo")
    summary: str = ""
    general_skills: list[str] = Field(default_factory=list, alias="generalSkills")
    skills: list[SkillDomain] = Field(default_factory=list)
    experience: list[Experience] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)
    publications: list[Publication] = Field(default_factory=list)
    personality_traits: list[str] = Field(default_factory=list, alias="personalityTraits")
    changes: list[Change] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """Serialize with the camelCase keys the prompts and schema use."""
        return self.model_dump(by_alias=True, exclude_none=True)
