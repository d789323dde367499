#!/usr/bin/env python3
"""Emit deterministic SQL that upserts a role and grants it permissions."""

from __future__ import annotations

import argparse

MODULES = (
    "companies",
    "jobs",
    "job_requirements",
    "applications",
    "students",
    "student_academics",
    "student_internships",
    "student_languages",
    "student_family",
    "student_addresses",
    "student_offers",
    "student_certifications",
    "student_projects",
    "student_documents",
    "student_users",
    "users",
    "roles",
    "permissions",
)
ACTIONS = ("create", "read", "update", "delete")


def _quote_sql(value: str) -> str:
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def default_permissions() -> list[str]:
    return [f"{module}.{action}" for module in MODULES for action in ACTIONS]


def _module_value(permission: str) -> str:
    module, separator, _ = permission.partition(".")
    return _quote_sql(module) if separator and module else "null"


def render_sql(*, role: str, description: str | None, permissions: list[str]) -> str:
    names = sorted({name.strip() for name in permissions if name.strip()})
    role_value = _quote_sql(role)
    description_value = _quote_sql(description) if description else "null"

    statements = [
        "-- Role bootstrap SQL",
        "-- Run against the placement database after sql/001_schema.sql.",
        "",
        "begin;",
        "",
        "insert into roles (role_name, role_description)",
        f"values ({role_value}, {description_value})",
        "on conflict ((lower(role_name)))",
        "do update set role_description = coalesce(excluded.role_description, roles.role_description), updated_at = now();",
    ]
    if names:
        values = ",\n".join(f"  ({_quote_sql(name)}, {_module_value(name)})" for name in names)
        in_list = ", ".join(_quote_sql(name.lower()) for name in names)
        statements += [
            "",
            "insert into permissions (permission_name, module)",
            "values",
            f"{values}",
            "on conflict ((lower(permission_name))) do nothing;",
            "",
            "insert into role_permissions (role_id, permission_id)",
            "select r.role_id, p.permission_id",
            "from roles r",
            f"join permissions p on lower(p.permission_name) in ({in_list})",
            f"where lower(r.role_name) = lower({role_value})",
            "on conflict (role_id, permission_id) do nothing;",
        ]
    statements += ["", "commit;", ""]
    return "\n".join(statements)


def main() -> None:
    parser = argparse.ArgumentParser(description="Emit SQL to upsert a role and grant it permissions.")
    parser.add_argument("--role", default="admin", help="Role name (3-30 characters)")
    parser.add_argument("--description", default="Full administrative access", help="Role description")
    parser.add_argument(
        "--permission",
        action="append",
        dest="permissions",
        help="Permission name such as companies.read; repeat for several. Defaults to CRUD on every module.",
    )
    args = parser.parse_args()

    role = args.role.strip()
    if not 3 <= len(role) <= 30:
        parser.error("--role must be between 3 and 30 characters")

    print(
        render_sql(
            role=role,
            description=args.description,
            permissions=args.permissions or default_permissions(),
        )
    )


if __name__ == "__main__":
    main()
