from pydantic import AliasChoices, BaseModel, Field, field_validator

from placement_api.schemas.common import Cgpa, OutModel, Pagination, Percent, RequestModel, decimal_range

ALLOWED_BRANCHES = ("CSE", "AI", "ECE", "MECH", "EEE", "CIVIL", "CSBS", "ETE", "MCA", "ALL")

Experience = decimal_range("0", "50")


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class _RequirementFields(RequestModel):
    tenth_percent: Percent | None = Field(default=None, validation_alias=_alias("tenth_percent", "tenthPercent"))
    twelfth_percent: Percent | None = Field(default=None, validation_alias=_alias("twelfth_percent", "twelfthPercent"))
    ug_cgpa: Cgpa | None = Field(default=None, validation_alias=_alias("ug_cgpa", "ugCgpa"))
    pg_cgpa: Cgpa | None = Field(default=None, validation_alias=_alias("pg_cgpa", "pgCgpa"))
    min_experience_yrs: Experience | None = Field(
        default=None, validation_alias=_alias("min_experience_yrs", "minExperienceYrs")
    )
    allowed_branches: list[str] | None = Field(
        default=None, validation_alias=_alias("allowed_branches", "allowedBranches")
    )
    skills_required: str | None = Field(default=None, validation_alias=_alias("skills_required", "skillsRequired"))
    additional_notes: str | None = Field(default=None, validation_alias=_alias("additional_notes", "additionalNotes"))
    backlogs_allowed: int | None = Field(
        default=None, ge=0, validation_alias=_alias("backlogs_allowed", "backlogsAllowed")
    )

    @field_validator("allowed_branches")
    @classmethod
    def normalize_branches(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        branches: list[str] = []
        for item in value:
            branch = item.strip().upper()
            if branch not in ALLOWED_BRANCHES:
                raise ValueError(f"must be one of {', '.join(ALLOWED_BRANCHES)}")
            if branch not in branches:
                branches.append(branch)
        return branches


class JobRequirementCreateRequest(_RequirementFields):
    job_id: int = Field(gt=0, validation_alias=_alias("job_id", "jobId"))


class JobRequirementUpdateRequest(_RequirementFields):
    pass


class JobRequirementOut(OutModel):
    job_requirement_id: int
    job_id: int
    job_title: str | None = None
    company_name: str | None = None
    tenth_percent: float | None = None
    twelfth_percent: float | None = None
    ug_cgpa: float | None = None
    pg_cgpa: float | None = None
    min_experience_yrs: float | None = None
    allowed_branches: list[str] | None = None
    skills_required: str | None = None
    additional_notes: str | None = None
    backlogs_allowed: int | None = None


class JobRequirementListData(BaseModel):
    job_requirements: list[JobRequirementOut]
    pagination: Pagination
