from fastapi import APIRouter

from placement_api.api.routes import (
    applications,
    companies,
    health,
    job_requirements,
    jobs,
    permissions,
    role_permissions,
    roles,
    student_academics,
    student_addresses,
    student_certifications,
    student_documents,
    student_family,
    student_internships,
    student_languages,
    student_offers,
    student_projects,
    student_report,
    student_users,
    students,
    users,
)

ROUTERS = (
    (companies.router, "/companies", "companies"),
    (jobs.router, "/jobs", "jobs"),
    (job_requirements.router, "/job-requirements", "job-requirements"),
    (applications.router, "/applications", "applications"),
    (roles.router, "/roles", "roles"),
    (permissions.router, "/permissions", "permissions"),
    (role_permissions.router, "/role-permissions", "role-permissions"),
    (students.router, "/students", "students"),
    (student_academics.router, "/student-academics", "student-academics"),
    (student_internships.router, "/student-internships", "student-internships"),
    (student_languages.router, "/student-languages", "student-languages"),
    (student_family.router, "/student-family", "student-family"),
    (student_addresses.router, "/student-addresses", "student-addresses"),
    (student_offers.router, "/student-offers", "student-offers"),
    (student_certifications.router, "/student-certifications", "student-certifications"),
    (student_projects.router, "/student-projects", "student-projects"),
    (student_documents.router, "/student-documents", "student-documents"),
    (student_report.router, "/student-report", "student-report"),
    (users.router, "/users", "users"),
    (student_users.router, "/student-users", "student-users"),
)

api_router = APIRouter()
api_router.add_api_route("", health.index, methods=["GET"], tags=["health"])
api_router.include_router(health.router, tags=["health"])
for router, prefix, tag in ROUTERS:
    api_router.include_router(router, prefix=prefix, tags=[tag])
