from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any

ELIGIBILITY_STATUSES = ("pending", "eligible", "not_eligible", "conditionally_eligible")
_MONTHS_RE = re.compile(r"^[0-9]+$")


@dataclass(slots=True)
class EligibilityChecks:
    tenth_percent_meets: bool = True
    twelfth_percent_meets: bool = True
    ug_cgpa_meets: bool = True
    pg_cgpa_meets: bool = True
    experience_meets: bool = True
    branch_meets: bool = True

    def all_passed(self) -> bool:
        return all(asdict(self).values())


@dataclass(slots=True)
class EligibilityOutcome:
    status: str
    comments: str
    checks: EligibilityChecks

    @property
    def eligible(self) -> bool:
        return self.status == "eligible"


def experience_years(durations: Iterable[str | None]) -> float:
    """Sum internship durations recorded as whole months; other text counts as zero."""
    months = 0
    for duration in durations:
        if duration is None:
            continue
        stripped = duration.strip()
        if _MONTHS_RE.match(stripped):
            months += int(stripped)
    return months / 12.0


def deadline_passed(deadline: date | None, today: date | None = None) -> bool:
    if deadline is None:
        return False
    current = today or datetime.now(timezone.utc).date()
    return current >= deadline


def evaluate_eligibility(
    requirement: Mapping[str, Any] | None,
    academics: Mapping[str, Any] | None,
    branch: str | None,
    experience: float,
) -> EligibilityOutcome:
    """Compare a student's record against a job requirement.

    A criterion with no requirement passes. A required criterion with no student
    data fails. A job without a requirement row is open to everyone.
    """
    requirement = requirement or {}
    academics = academics or {}
    checks = EligibilityChecks()
    comments: list[str] = []

    for key, attr, label, unit in (
        ("tenth_percent", "tenth_percent_meets", "10th percentage", "%"),
        ("twelfth_percent", "twelfth_percent_meets", "12th percentage", "%"),
        ("ug_cgpa", "ug_cgpa_meets", "UG CGPA", ""),
        ("pg_cgpa", "pg_cgpa_meets", "PG CGPA", ""),
    ):
        required = _number(requirement.get(key))
        if required is None:
            continue
        actual = _number(academics.get(key))
        if actual is None:
            setattr(checks, attr, False)
            comments.append(f"{label} data missing (required: {_fmt(required)}{unit})")
        elif actual < required:
            setattr(checks, attr, False)
            comments.append(f"{label} below requirement ({_fmt(actual)}{unit} < {_fmt(required)}{unit})")

    required_experience = _number(requirement.get("min_experience_yrs"))
    if required_experience is not None and experience < required_experience:
        checks.experience_meets = False
        comments.append(
            f"Experience below requirement ({_fmt(experience)} years < {_fmt(required_experience)} years)"
        )

    allowed_branches = [item for item in requirement.get("allowed_branches") or [] if item]
    if allowed_branches and not any(item.upper() == "ALL" for item in allowed_branches):
        student_branch = (branch or "").lower()
        if not any(item.lower() == student_branch for item in allowed_branches):
            checks.branch_meets = False
            comments.append(f"Branch not allowed ({branch or 'unknown'} not in [{', '.join(allowed_branches)}])")

    status = "eligible" if checks.all_passed() else "not_eligible"
    return EligibilityOutcome(status=status, comments="; ".join(comments), checks=checks)


def _number(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _fmt(value: float) -> str:
    return f"{value:g}"
