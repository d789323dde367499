from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status as http_status

from placement_api.api.errors import http_error
from placement_api.api.imports import run_import
from placement_api.schemas.common import (
    STUDENT_ID_PATTERN,
    Envelope,
    ImportRequest,
    ImportResult,
    list_query,
    pagination_for,
)
from placement_api.schemas.student_projects import (
    StudentProjectCreateRequest,
    StudentProjectListData,
    StudentProjectOut,
    StudentProjectUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_projects import get_student_project_repository, split_tools

router = APIRouter()


@router.post("", response_model=Envelope[StudentProjectOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_project(
    payload: StudentProjectCreateRequest,
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectOut]:
    try:
        row = await repository.create_project(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentProjectOut(**row), message="Project created successfully")


@router.post(
    "/import",
    response_model=Envelope[ImportResult[StudentProjectOut]],
    status_code=http_status.HTTP_201_CREATED,
)
async def import_student_projects(
    payload: ImportRequest,
    response: Response,
    repository=Depends(get_student_project_repository),
) -> Envelope[ImportResult[StudentProjectOut]]:
    return await run_import(
        payload,
        response,
        create_model=StudentProjectCreateRequest,
        out_model=StudentProjectOut,
        import_rows=repository.import_projects,
        noun="project",
    )


@router.get("", response_model=Envelope[StudentProjectListData])
async def list_student_projects(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectListData]:
    try:
        rows, total = await repository.list_projects(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentProjectListData(
        student_projects=[StudentProjectOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Projects fetched successfully")


@router.get("/search", response_model=Envelope[StudentProjectListData])
async def search_projects_by_tools(
    tools: str | None = Query(default=None, max_length=500),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectListData]:
    tool_list = split_tools(tools)
    if not tool_list:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Please provide 'tools' query parameter")
    try:
        rows, total = await repository.list_projects(query, tools=tool_list)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentProjectListData(
        student_projects=[StudentProjectOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message=f"Projects using {', '.join(tool_list)} fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[StudentProjectListData])
async def list_projects_for_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectListData]:
    try:
        rows, total = await repository.list_projects(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentProjectListData(
        student_projects=[StudentProjectOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student projects fetched successfully")


@router.get("/{project_id}", response_model=Envelope[StudentProjectOut])
async def get_student_project(
    project_id: int = Path(gt=0),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectOut]:
    try:
        row = await repository.get_project(project_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentProjectOut(**row), message="Project fetched successfully")


@router.put("/{project_id}", response_model=Envelope[StudentProjectOut])
@router.patch("/{project_id}", response_model=Envelope[StudentProjectOut])
async def update_student_project(
    payload: StudentProjectUpdateRequest,
    project_id: int = Path(gt=0),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectOut]:
    try:
        row = await repository.update_project(project_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentProjectOut(**row), message="Project updated successfully")


@router.delete("/{project_id}", response_model=Envelope[StudentProjectOut])
async def delete_student_project(
    project_id: int = Path(gt=0),
    repository=Depends(get_student_project_repository),
) -> Envelope[StudentProjectOut]:
    try:
        row = await repository.delete_project(project_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentProjectOut(**row), message="Project deleted successfully")
