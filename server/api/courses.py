from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from core.models.envelope import PageMeta
from server.errors import NotFoundError
from server.utils.response import send_response

router = APIRouter(tags=["Courses"])

# Static catalog used to exercise the client; the sandbox keeps no course model.
CATALOG: list[dict] = [
    {"id": "c1", "title": "Algebra Foundations", "price": 499, "level": "beginner"},
    {"id": "c2", "title": "Calculus I", "price": 999, "level": "intermediate"},
    {"id": "c3", "title": "Linear Algebra", "price": 1299, "level": "advanced"},
]


@router.get("")
async def list_courses(
    page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100)
) -> JSONResponse:
    start = (page - 1) * limit
    items = CATALOG[start : start + limit]
    meta = PageMeta(
        total=len(CATALOG), page=page, limit=limit, totalPages=-(-len(CATALOG) // limit)
    )
    return send_response(status.HTTP_200_OK, items, meta=meta)


@router.get("/{course_id}")
async def get_course(course_id: str) -> JSONResponse:
    course = next((c for c in CATALOG if c["id"] == course_id), None)
    if course is None:
        raise NotFoundError("Course not found", "COURSE_NOT_FOUND")
    return send_response(status.HTTP_200_OK, course)
