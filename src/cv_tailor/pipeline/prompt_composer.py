"""Prompt composition for ingestion, tailoring and cover letters."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date

from cv_tailor.models.request import CoverLetterRequest, IngestRequest, TailorRequest
from cv_tailor.utils.locale import format_month_year, language_name

INGEST_TOOL = "ingest_cv"
TAILOR_TOOL = "tailor_resume"

SPONTANEOUS_MARKER = "SPONTANEOUS APPLICATION"
NOT_SPECIFIED = "Not specified"


@dataclass(frozen=True)
class ToolSpec:
    """A function the gateway is forced to call with schema-shaped arguments."""

    name: str
    description: str
    parameters: dict

    def as_tool(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ComposedPrompt:
    instruction: str
    content: str
    tool: ToolSpec | None = None

    @property
    def messages(self) -> list[dict]:
        return [
            {"role": "system", "content": self.instruction},
            {"role": "user", "content": self.content},
        ]


# --- Output schema ---------------------------------------------------------

def _string_list() -> dict:
    return {"type": "array", "items": {"type": "string"}}


def _object_list(properties: dict, required: list[str]) -> dict:
    return {
        "type": "array",
        "items": {"type": "object", "properties": properties, "required": required},
    }


_PERIOD = {
    "type": "object",
    "properties": {"start": {"type": "string"}, "end": {"type": "string"}},
    "required": ["start", "end"],
}

_DEGREE_PROPS = {
    "degree": {"type": "string"},
    "institution": {"type": "string"},
    "year": {"type": "string"},
    "location": {"type": "string"},
}


def resume_properties() -> dict:
    """JSON-schema properties mirroring ResumeDocument's wire shape."""
    return {
        "name": {"type": "string", "description": "Full name of the candidate."},
        "title": {"type": "string", "description": "Professional title or headline."},
        "contactInfo": {
            "type": "object",
            "properties": {
                key: {"type": "string"}
                for key in ("email", "phone", "location", "website", "linkedin", "github")
            },
        },
        "summary": {"type": "string"},
        "generalSkills": _string_list(),
        "skills": _object_list(
            {"domain": {"type": "string"}, "skills": _string_list()},
            ["domain", "skills"],
        ),
        "experience": _object_list(
            {
                "title": {"type": "string"},
                "company": {"type": "string"},
                "location": {"type": "string"},
                "period": _PERIOD,
                "achievements": _string_list(),
                "techStack": _string_list(),
                "isPrevious": {
                    "type": "boolean",
                    "description": (
                        "Indicates if this experience should be displayed "
                        "on the Previous Experiences section."
                    ),
                    "default": False,
                },
            },
            ["title", "company", "location", "period", "achievements", "techStack"],
        ),
        "projects": _object_list(
            {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "techStack": _string_list(),
                "period": _PERIOD,
            },
            ["name", "description", "techStack"],
        ),
        "education": _object_list(_DEGREE_PROPS, ["degree", "institution", "year", "location"]),
        "certifications": _object_list(
            _DEGREE_PROPS, ["degree", "institution", "year", "location"]
        ),
        "languages": _object_list(
            {"name": {"type": "string"}, "level": {"type": "string"}}, ["name", "level"]
        ),
        "publications": _object_list(
            {
                "title": {"type": "string"},
                "location": {"type": "string"},
                "url": {"type": "string"},
            },
            ["title", "location", "url"],
        ),
        "personalityTraits": _string_list(),
    }


def ingest_tool() -> ToolSpec:
    return ToolSpec(
        name=INGEST_TOOL,
        description="Format raw CV text into the structured resume document",
        parameters={
            "type": "object",
            "properties": resume_properties(),
            "required": ["name", "title", "contactInfo", "summary", "skills", "experience"],
        },
    )


def tailor_tool() -> ToolSpec:
    properties = resume_properties()
    properties["title"] = {
        "type": "string",
        "description": "The title of the job. Should match exactly the required job title.",
    }
    properties["changes"] = _object_list(
        {"field": {"type": "string"}, "change": {"type": "string"}},
        ["field", "change"],
    )
    # Identity and contact details stay with the original document.
    del properties["name"]
    del properties["contactInfo"]
    return ToolSpec(
        name=TAILOR_TOOL,
        description="Tailor a resume based on a job description",
        parameters={
            "type": "object",
            "properties": properties,
            "required": [
                "summary",
                "skills",
                "experience",
                "education",
                "certifications",
                "publications",
                "changes",
            ],
        },
    )


# --- Instructions ----------------------------------------------------------

INGEST_INSTRUCTION = """\
You are a CV formatting assistant. Your task is to read raw, unstructured CV text \
and organize it into the structured resume format provided by the {tool} function.

Rules:
1. Extract only information present in the text. Never invent employers, dates, \
degrees or achievements.
2. The name and title fields are mandatory. Use the candidate's most recent or \
stated professional title.
3. List experience in descending chronological order. Keep period start and end \
exactly as written (use "Present" for ongoing roles).
4. Group skills into domains (for example "Programming Languages", "Cloud").
5. Leave fields empty when the text does not contain the information.
6. Write all generated text (summary, titles, achievements) in {language}.

Always respond by calling the {tool} function."""

TAILOR_INSTRUCTION = """\
You are a professional resume tailor. Your task is to modify the provided resume \
to better match the job description while maintaining truthfulness and accuracy. Focus on:
1. Tailoring the summary to highlight relevant experience
2. Prioritizing and emphasizing relevant skills
3. Highlighting relevant achievements in professional experience, maintaining most recent chronologically.
4. Including only relevant education, certifications, and publications
5. The title of the job should match exactly the required job title. Don't use \
generic titles like "Software Engineer" or "Software Developer". Be precise.
6. The experience should be in descending chronological order. The most recent \
experience should always be present. If it is not relevant, keep it but edit it \
to make it more relevant. Do not lie.
7. Return an additional "changes" field describing what has been changed and why.
8. Write all tailored content in {language}.
{extra}
Return the modified resume by calling the {tool} function, using the same JSON \
structure as the input."""

COVER_LETTER_INSTRUCTION = """\
You are a professional cover letter writer. Write a compelling, truthful cover \
letter in {language}. Do not augment or invent the candidate's skills or experience.

REQUIRED STRUCTURE:
1. Header: the candidate's name and contact information (email, phone, location).
2. Company Information: the company name, followed by the title line \
"{title_format}".
3. Salutation: a greeting addressed to the hiring team.
4. Company Flattery Paragraph: a short, sincere paragraph on why this company \
interests the candidate.
5. Candidate Skills Paragraph: a longer paragraph with the background and \
accomplishments that fit the company's needs. Facts only.
6. Collaboration Vision Paragraph: a short paragraph on how the candidate would \
contribute and grow with the team.
7. Interview Request: a short call to action asking for an interview.
8. Sign-off: a closing greeting and the candidate's name.

{focus}
Format the letter as simple HTML using only div, h1, h2 and p elements. \
Do not use markdown or code fences."""

TARGETED_TITLE = "Cover letter for position {job_title} - [Company Name] - {date}"
SPONTANEOUS_TITLE = "Spontaneous Application - [Company Name] - {date}"


def compose_ingest(request: IngestRequest) -> ComposedPrompt:
    tool = ingest_tool()
    instruction = INGEST_INSTRUCTION.format(
        tool=tool.name, language=language_name(request.locale)
    )
    content = f"Raw CV text:\n{request.raw_text}"
    return ComposedPrompt(instruction=instruction, content=content, tool=tool)


def compose_tailor(request: TailorRequest) -> ComposedPrompt:
    tool = tailor_tool()
    extra = ""
    if request.ai_instructions:
        extra = f"\nAdditional Instructions:\n{request.ai_instructions}\n"
    instruction = TAILOR_INSTRUCTION.format(
        tool=tool.name, language=language_name(request.locale), extra=extra
    )
    resume_json = json.dumps(request.resume.to_wire(), indent=2, ensure_ascii=False)
    content = (
        f"Job Title: {request.job_title}\n"
        f"Job Description:\n{request.job_description}\n\n"
        f"Current Resume:\n{resume_json}"
    )
    return ComposedPrompt(instruction=instruction, content=content, tool=tool)


def compose_cover_letter(request: CoverLetterRequest, today: date | None = None) -> ComposedPrompt:
    today = today or date.today()
    month_year = format_month_year(today, request.locale)
    spontaneous = request.is_spontaneous

    if spontaneous:
        title_format = SPONTANEOUS_TITLE.format(date=month_year)
        focus = (
            "This is a spontaneous application with no specific opening. "
            "Focus on company-specific interests and general fit."
        )
    else:
        title_format = TARGETED_TITLE.format(job_title=request.job_title, date=month_year)
        focus = "Align the letter with the job requirements and the company's context."

    instruction = COVER_LETTER_INSTRUCTION.format(
        language=language_name(request.locale),
        title_format=title_format,
        focus=focus,
    )

    company = request.company_description or NOT_SPECIFIED
    resume_json = json.dumps(request.resume.to_wire(), indent=2, ensure_ascii=False)
    if spontaneous:
        header = (
            f"{SPONTANEOUS_MARKER}\n"
            "Focus on company-specific interests and general fit.\n\n"
            f"Company Information: {company}"
        )
    else:
        header = (
            f"Job Title: {request.job_title}\n"
            f"Job Description:\n{request.job_description}\n\n"
            f"Company Information: {company}"
        )
    content = f"{header}\n\nCandidate's Resume:\n{resume_json}"
    return ComposedPrompt(instruction=instruction, content=content)


def compose(request, today: date | None = None) -> ComposedPrompt:
    """Build the prompt for any validated generation request."""
    if isinstance(request, IngestRequest):
        return compose_ingest(request)
    if isinstance(request, TailorRequest):
        return compose_tailor(request)
    if isinstance(request, CoverLetterRequest):
        return compose_cover_letter(request, today=today)
    raise TypeError(f"Unsupported generation request: {type(request).__name__}")
