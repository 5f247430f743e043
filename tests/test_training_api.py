from __future__ import annotations


def test_course_catalogue(client):
    courses = client.get("/api/training/courses").json()
    assert [c["id"] for c in courses] == ["course-1", "course-2", "course-3"]
    assert client.get("/api/training/courses/course-2").json()["id"] == "course-2"
    assert client.get("/api/training/courses/nope").status_code == 404


def test_start_progress_and_complete(client, user_headers):
    assert client.post("/api/training/start-course", json={}, headers=user_headers).status_code == 400
    assert client.post("/api/training/start-course", json={"courseId": "nope"}, headers=user_headers).status_code == 404
    missing = client.put("/api/training/update-progress", json={"courseId": "course-1", "progress": 10},
                         headers=user_headers)
    assert missing.status_code == 404

    started = client.post("/api/training/start-course", json={"courseId": "course-1"}, headers=user_headers)
    assert started.status_code == 201
    assert started.json()["status"] == "in-progress"
    again = client.post("/api/training/start-course", json={"courseId": "course-1"}, headers=user_headers)
    assert again.status_code == 400

    step = client.put("/api/training/update-progress",
                      json={"courseId": "course-1", "moduleId": "course-1-m2", "progress": 50}, headers=user_headers)
    assert step.json()["progress"] == 50
    lower = client.put("/api/training/update-progress",
                       json={"courseId": "course-1", "moduleId": "course-1-m1", "progress": 20}, headers=user_headers)
    assert lower.json()["progress"] == 50

    done = client.put("/api/training/update-progress",
                      json={"courseId": "course-1", "moduleId": "course-1-m4", "progress": 140}, headers=user_headers)
    body = done.json()
    assert body["progress"] == 100
    assert body["status"] == "completed"
    assert body["certificationExpiresAt"] > body["completedAt"]

    progress = client.get("/api/training/my-progress", headers=user_headers).json()
    assert [p["courseId"] for p in progress] == ["course-1"]


def test_submit_quiz_scores_and_counts_attempts(client, user_headers):
    client.post("/api/training/start-course", json={"courseId": "course-1"}, headers=user_headers)

    failed = client.post("/api/training/submit-quiz",
                         json={"courseId": "course-1", "quizId": "quiz-1", "answers": [2, 0]}, headers=user_headers)
    assert failed.status_code == 200
    assert failed.json()["score"] == 50
    assert failed.json()["passed"] is False
    assert failed.json()["requiredScore"] == 80

    passed = client.post("/api/training/submit-quiz",
                         json={"courseId": "course-1", "quizId": "quiz-1", "answers": [2, 2]}, headers=user_headers)
    body = passed.json()
    assert body["score"] == 100 and body["passed"] is True
    [result] = body["progress"]["quizResults"]
    assert result["attemptCount"] == 2

    unknown = client.post("/api/training/submit-quiz",
                          json={"courseId": "course-1", "quizId": "quiz-99", "answers": []}, headers=user_headers)
    assert unknown.status_code == 404


def test_policies_and_acknowledgment(client, store, user_headers):
    assert client.get("/api/training/policies").status_code == 401
    policies = client.get("/api/training/policies", headers=user_headers).json()
    assert len(policies) == 4

    ack = client.post("/api/training/acknowledge-policy", json={"policyId": "policy-2"}, headers=user_headers)
    assert ack.status_code == 201
    assert ack.json()["policyVersion"] == "3.2"
    assert store.get("policyAcknowledgments").size() == 1
    assert client.post("/api/training/acknowledge-policy", json={}, headers=user_headers).status_code == 400
