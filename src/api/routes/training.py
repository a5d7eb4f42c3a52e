"""Training course and progress routes."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep
from schemas.training import (
    ProgressUpdateRequest,
    TrainingCourse,
    TrainingCourseCreate,
    UserCourseProgress,
)

router = APIRouter(prefix="/api", tags=["Training"])


@router.get("/courses", response_model=List[TrainingCourse], summary="List courses")
async def list_courses(
    store: EntityStoreDep, current_user: CurrentUserDep
) -> List[TrainingCourse]:
    return await store.get_all_courses()


@router.get("/courses/{course_id}", response_model=TrainingCourse, summary="Get a course")
async def get_course(
    course_id: str, store: EntityStoreDep, current_user: CurrentUserDep
) -> TrainingCourse:
    course = await store.get_course(course_id)
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return course


@router.post(
    "/courses",
    response_model=TrainingCourse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a course",
)
async def create_course(
    req: TrainingCourseCreate, store: EntityStoreDep, current_user: CurrentUserDep
) -> TrainingCourse:
    return await store.create_course(req)


@router.get(
    "/users/{user_id}/progress",
    response_model=List[UserCourseProgress],
    summary="List a user's course progress",
)
async def get_user_progress(
    user_id: str, store: EntityStoreDep, current_user: CurrentUserDep
) -> List[UserCourseProgress]:
    return await store.get_user_progress(user_id)


@router.put(
    "/users/{user_id}/progress",
    response_model=UserCourseProgress,
    summary="Record course progress",
)
async def update_user_progress(
    user_id: str,
    req: ProgressUpdateRequest,
    store: EntityStoreDep,
    current_user: CurrentUserDep,
) -> UserCourseProgress:
    """Upsert the progress row for (user_id, course_id).

    ``completed_at`` is set once progress reaches 100 and cleared below it.
    """
    return await store.update_progress(user_id, req.course_id, req.progress)
