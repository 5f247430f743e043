from fastapi import APIRouter, Depends, HTTPException

from vacations_api.routers.deps import get_current_user
from vacations_api.services.training_service import (
    CourseNotFoundError,
    InvalidTrainingRequestError,
    PolicyNotFoundError,
    QuizNotFoundError,
    TrainingNotStartedError,
    TrainingService,
)

router = APIRouter(prefix="/api/training", tags=["training"])
training_service = TrainingService()


@router.get("/courses")
def list_courses():
    return training_service.courses()


@router.get("/courses/{course_id}")
def course_details(course_id: str):
    try:
        return training_service.course(course_id)
    except CourseNotFoundError:
        raise HTTPException(404, "Course not found")


@router.get("/my-progress")
def my_progress(user: dict = Depends(get_current_user)):
    return training_service.progress_for(user["id"])


@router.post("/start-course", status_code=201)
def start_course(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return training_service.start_course(user["id"], payload.get("courseId"))
    except InvalidTrainingRequestError as exc:
        raise HTTPException(400, str(exc))
    except CourseNotFoundError:
        raise HTTPException(404, "Course not found")


@router.put("/update-progress")
def update_progress(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return training_service.update_progress(
            user["id"], payload.get("courseId"), payload.get("moduleId"), payload.get("progress")
        )
    except InvalidTrainingRequestError as exc:
        raise HTTPException(400, str(exc))
    except TrainingNotStartedError as exc:
        raise HTTPException(404, str(exc))


@router.post("/submit-quiz")
def submit_quiz(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return training_service.submit_quiz(
            user["id"], payload.get("courseId"), payload.get("quizId"), payload.get("answers")
        )
    except InvalidTrainingRequestError as exc:
        raise HTTPException(400, str(exc))
    except (CourseNotFoundError, QuizNotFoundError, TrainingNotStartedError) as exc:
        raise HTTPException(404, str(exc))


@router.get("/policies")
def list_policies(user: dict = Depends(get_current_user)):
    return training_service.policies()


@router.post("/acknowledge-policy", status_code=201)
def acknowledge_policy(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return training_service.acknowledge_policy(user["id"], payload.get("policyId"))
    except InvalidTrainingRequestError as exc:
        raise HTTPException(400, str(exc))
    except PolicyNotFoundError:
        raise HTTPException(404, "Policy not found")
