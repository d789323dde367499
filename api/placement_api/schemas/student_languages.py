from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, field_validator

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId

ALLOWED_LANGUAGES = (
    "Python",
    "JavaScript",
    "Java",
    "C#",
    "SQL",
    "C++",
    "C",
    "TypeScript",
    "Rust",
    "Go",
    "Swift",
    "Kotlin",
    "PHP",
    "Ruby",
    "Dart",
    "R",
    "MATLAB",
    "Scala",
    "Julia",
    "COBOL",
)
_CANONICAL = {language.lower(): language for language in ALLOWED_LANGUAGES}


def canonical_language(value: str) -> str:
    try:
        return _CANONICAL[value.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"must be one of {', '.join(ALLOWED_LANGUAGES)}") from exc


LanguageName = Annotated[str, AfterValidator(canonical_language)]


class StudentLanguageCreateRequest(RequestModel):
    student_id: StudentId
    language: LanguageName
    level: int = Field(ge=1, le=10)


class StudentLanguageUpdateRequest(RequestModel):
    language: str | None = None
    level: int | None = Field(default=None, ge=1, le=10)

    @field_validator("language")
    @classmethod
    def check_language(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return value
        return canonical_language(value)


class LanguageLevel(RequestModel):
    language: LanguageName
    level: int = Field(ge=1, le=10)


class StudentLanguageBulkRequest(RequestModel):
    student_id: StudentId
    languages: list[LanguageLevel] = Field(min_length=1, max_length=len(ALLOWED_LANGUAGES))


class StudentLanguageOut(OutModel):
    language_id: int
    student_id: str
    full_name: str | None = None
    language: str
    level: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentLanguageListData(BaseModel):
    student_languages: list[StudentLanguageOut]
    pagination: Pagination
