from fastapi import APIRouter, Depends, Path, Query

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_report import StudentReport, StudentSummaryListData, StudentSummaryOut
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_report import get_student_report_repository

router = APIRouter()


@router.get("/summary", response_model=Envelope[StudentSummaryListData])
async def list_student_summaries(
    query: ListQuery = Depends(list_query),
    branch: str | None = Query(default=None, max_length=100),
    graduation_year: int | None = Query(default=None, ge=1900, le=2100),
    repository=Depends(get_student_report_repository),
) -> Envelope[StudentSummaryListData]:
    try:
        rows, total = await repository.list_summaries(query, branch=branch, graduation_year=graduation_year)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentSummaryListData(
        students=[StudentSummaryOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Students summary fetched successfully")


@router.get("/{student_id}", response_model=Envelope[StudentReport])
async def get_student_report(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_report_repository),
) -> Envelope[StudentReport]:
    try:
        report = await repository.get_report(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentReport(**report), message="Student report data fetched successfully")
