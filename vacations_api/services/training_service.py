"""
Employee training: course catalogue, progress tracking, quizzes and
booking-policy acknowledgments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from vacations_api.core.utils import new_id, now_iso, to_iso, to_number, utcnow
from vacations_api.repositories.json_storage import JsonStore, get_store

NOT_STARTED = "not-started"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
CERTIFICATION_DAYS = 365


class TrainingError(Exception):
    pass


class CourseNotFoundError(TrainingError):
    pass


class TrainingNotStartedError(TrainingError):
    pass


class InvalidTrainingRequestError(TrainingError):
    pass


class QuizNotFoundError(TrainingError):
    pass


class PolicyNotFoundError(TrainingError):
    pass


def _find_quiz(course: dict, quiz_id: str) -> Optional[dict]:
    for module in course.get("modules") or []:
        for quiz in module.get("quizzes") or []:
            if quiz.get("id") == quiz_id:
                return quiz
    return None


@dataclass
class TrainingService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    # -------------------------------------- catalogue --------------------------------------
    def courses(self) -> list[dict]:
        return self.store.get("trainingCourses").value()

    def course(self, course_id: str) -> dict:
        course = self.store.get("trainingCourses").find({"id": course_id}).value()
        if not course:
            raise CourseNotFoundError("Course not found")
        return course

    def progress_for(self, user_id: str) -> list[dict]:
        return self.store.get("employeeTraining").filter({"userId": user_id}).value()

    def _record(self, user_id: str, course_id: str) -> Optional[dict]:
        return self.store.get("employeeTraining").find({"userId": user_id, "courseId": course_id}).value()

    # -------------------------------------- progress --------------------------------------
    def start_course(self, user_id: str, course_id: Optional[str]) -> dict:
        if not course_id:
            raise InvalidTrainingRequestError("Course ID is required")
        self.course(course_id)
        existing = self._record(user_id, course_id)
        if existing and existing.get("status") != NOT_STARTED:
            raise InvalidTrainingRequestError("Course already started")
        updates = {"status": IN_PROGRESS, "progress": 0, "startedAt": now_iso()}
        if existing:
            existing.update(updates)
            self.store.write()
            return existing
        record = {"id": new_id(), "userId": user_id, "courseId": course_id, "quizResults": [], **updates}
        self.store.get("employeeTraining").push(record).write()
        return record

    def update_progress(self, user_id: str, course_id: Optional[str], module_id: Optional[str], progress) -> dict:
        if not course_id or progress is None:
            raise InvalidTrainingRequestError("Course ID and progress are required")
        value = to_number(progress)
        if value is None:
            raise InvalidTrainingRequestError("Progress must be a number")
        record = self._record(user_id, course_id)
        if not record:
            raise TrainingNotStartedError("Training record not found")
        new_progress = min(100, max(0, int(round(max(to_number(record.get("progress"), 0.0), value)))))
        record["progress"] = new_progress
        if module_id:
            record["lastModuleId"] = module_id
        if new_progress >= 100 and record.get("status") != COMPLETED:
            now = utcnow()
            record.update({
                "status": COMPLETED,
                "completedAt": to_iso(now),
                "certificationExpiresAt": to_iso(now + timedelta(days=CERTIFICATION_DAYS)),
            })
        elif record.get("status") == NOT_STARTED:
            record["status"] = IN_PROGRESS
        self.store.write()
        return record

    def submit_quiz(self, user_id: str, course_id: Optional[str], quiz_id: Optional[str], answers) -> dict:
        if not course_id or not quiz_id or not isinstance(answers, list):
            raise InvalidTrainingRequestError("Course ID, quiz ID and answers are required")
        course = self.course(course_id)
        quiz = _find_quiz(course, quiz_id)
        if not quiz:
            raise QuizNotFoundError("Quiz not found")
        record = self._record(user_id, course_id)
        if not record:
            raise TrainingNotStartedError("Training record not found")

        questions = quiz.get("questions") or []
        feedback = []
        correct = 0
        for idx, question in enumerate(questions):
            answer = answers[idx] if idx < len(answers) else None
            ok = answer == question.get("correctAnswerIndex")
            correct += int(ok)
            feedback.append({"questionId": question.get("id"), "correct": ok,
                             "correctAnswerIndex": question.get("correctAnswerIndex")})
        score = round(100 * correct / len(questions)) if questions else 0
        required = quiz.get("passingScore", 0)
        passed = score >= required

        results = record.setdefault("quizResults", [])
        previous = next((r for r in results if r.get("quizId") == quiz_id), None)
        result = {
            "quizId": quiz_id,
            "score": score,
            "passed": passed,
            "completedAt": now_iso(),
            "attemptCount": (previous.get("attemptCount", 0) + 1) if previous else 1,
        }
        if previous:
            previous.update(result)
        else:
            results.append(result)
        self.store.write()
        return {"score": score, "passed": passed, "requiredScore": required, "feedback": feedback,
                "progress": record}

    # -------------------------------------- policies --------------------------------------
    def policies(self) -> list[dict]:
        return self.store.get("policies").value()

    def acknowledge_policy(self, user_id: str, policy_id: Optional[str]) -> dict:
        if not policy_id:
            raise InvalidTrainingRequestError("Policy ID is required")
        policy = self.store.get("policies").find({"id": policy_id}).value()
        if not policy:
            raise PolicyNotFoundError("Policy not found")
        acknowledgment = {
            "id": new_id(),
            "userId": user_id,
            "policyId": policy_id,
            "policyVersion": policy.get("version"),
            "acknowledgedAt": now_iso(),
        }
        self.store.get("policyAcknowledgments").push(acknowledgment).write()
        return acknowledgment
