from __future__ import annotations

import subprocess
import sys
from pathlib import Path


SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "seed_roles.py"


def _run_script(*args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(SCRIPT_PATH), *args],
        check=check,
        capture_output=True,
        text=True,
    )


def test_seed_script_grants_crud_on_every_module_by_default() -> None:
    output = _run_script().stdout

    assert "values ('admin', 'Full administrative access')" in output
    assert "('companies.create', 'companies')" in output
    assert "('student_family.delete', 'student_family')" in output
    assert "('users.update', 'users')" in output
    assert "('student_offers.read', 'student_offers')" in output
    assert "on conflict ((lower(permission_name))) do nothing;" in output
    assert "where lower(r.role_name) = lower('admin')" in output
    assert output.strip().endswith("commit;")


def test_seed_script_accepts_explicit_permissions() -> None:
    output = _run_script(
        "--role",
        "recruiter",
        "--description",
        "Recruiter's desk",
        "--permission",
        "jobs.read",
        "--permission",
        "jobs.read",
        "--permission",
        "reports",
    ).stdout

    assert "values ('recruiter', 'Recruiter''s desk')" in output
    assert output.count("('jobs.read', 'jobs')") == 1
    assert "('reports', null)" in output
    assert "companies.create" not in output


def test_seed_script_rejects_short_role_names() -> None:
    completed = _run_script("--role", "ab", check=False)

    assert completed.returncode != 0
    assert "--role must be between 3 and 30 characters" in completed.stderr
