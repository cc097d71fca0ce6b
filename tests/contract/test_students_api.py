"""Contract tests for student API endpoints and their error bodies."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from student_management.core.identifiers import encode_to_base64

API_PREFIX = "/api/students"
JSON_HEADERS = {"Content-Type": "application/json"}


def _assert_error_body(payload: dict, *, status: int, code: str, error: str) -> None:
    assert payload["status"] == status
    assert payload["code"] == code
    assert payload["error"] == error
    assert isinstance(payload.get("message"), str) and payload["message"]
    assert ("errors" in payload) == ("details" in payload)
    if "errors" in payload:
        assert payload["errors"] == payload["details"]
        assert payload["errors"]
    for legacy in ("errorCode", "errorType"):
        assert legacy not in payload


def _registration(email: str | None = None, **student: object) -> dict:
    body = {
        "fullName": "Hanako Suzuki",
        "furigana": "suzuki hanako",
        "nickname": "hana",
        "email": email or f"hanako-{uuid.uuid4().hex[:8]}@example.com",
        "location": "Tokyo",
        "age": 25,
        "gender": "female",
    }
    body.update(student)
    return {
        "student": body,
        "courses": [{"courseName": "Java basics", "startDate": "2024-04-01", "endDate": "2024-09-30"}],
    }


def _register(client: TestClient, **student: object) -> dict:
    response = client.post(API_PREFIX, json=_registration(**student))
    assert response.status_code == 201
    return response.json()


def test_register_returns_student_with_base64_identifiers(client: TestClient) -> None:
    created = _register(client)

    student_id = created["student"]["studentId"]
    assert len(student_id) == 22
    assert "=" not in student_id
    assert created["student"]["deleted"] is False
    assert created["student"]["createdAt"]
    assert created["courses"][0]["courseName"] == "Java basics"
    assert len(created["courses"][0]["courseId"]) == 22


def test_get_student_returns_courses(client: TestClient) -> None:
    created = _register(client)
    student_id = created["student"]["studentId"]

    response = client.get(f"{API_PREFIX}/{student_id}")

    assert response.status_code == 200
    payload = response.json()
    assert payload["student"]["studentId"] == student_id
    assert [course["courseName"] for course in payload["courses"]] == ["Java basics"]


def test_unknown_student_is_not_found(client: TestClient) -> None:
    missing = uuid.uuid4()

    response = client.get(f"{API_PREFIX}/{encode_to_base64(missing.bytes)}")

    assert response.status_code == 404
    payload = response.json()
    _assert_error_body(payload, status=404, code="E404", error="NOT_FOUND")
    assert str(missing) in payload["message"]


def test_malformed_identifier_is_invalid_request(client: TestClient) -> None:
    response = client.get(f"{API_PREFIX}/not@base64")

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E006", error="INVALID_REQUEST")
    assert payload["message"] == "Invalid ID format (Base64)"
    assert payload["errors"][0]["field"] == "studentId"


def test_identifier_of_wrong_length_is_tagged_uuid(client: TestClient) -> None:
    response = client.get(f"{API_PREFIX}/{encode_to_base64(uuid.uuid4().bytes)[:14]}")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid ID format (UUID)"


def test_boolean_query_type_mismatch(client: TestClient) -> None:
    response = client.get(API_PREFIX, params={"includeDeleted": "abc"})

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E004", error="TYPE_MISMATCH")
    assert "includeDeleted" in payload["message"]


def test_conflicting_deletion_filters_are_rejected(client: TestClient) -> None:
    response = client.get(API_PREFIX, params={"includeDeleted": "true", "deletedOnly": "true"})

    assert response.status_code == 400
    _assert_error_body(response.json(), status=400, code="E006", error="INVALID_REQUEST")


def test_list_filters_by_furigana_and_deletion_state(client: TestClient) -> None:
    active = _register(client, furigana="tanaka ichiro")
    removed = _register(client, furigana="tanaka jiro")
    _register(client, furigana="sato saburo")
    assert client.delete(f"{API_PREFIX}/{removed['student']['studentId']}").status_code == 204

    default = client.get(API_PREFIX, params={"furigana": "tanaka"}).json()["items"]
    with_deleted = client.get(API_PREFIX, params={"furigana": "tanaka", "includeDeleted": "true"}).json()["items"]
    deleted_only = client.get(API_PREFIX, params={"deletedOnly": "true"}).json()["items"]

    assert [item["student"]["studentId"] for item in default] == [active["student"]["studentId"]]
    assert len(with_deleted) == 2
    assert [item["student"]["studentId"] for item in deleted_only] == [removed["student"]["studentId"]]
    assert deleted_only[0]["student"]["deleted"] is True
    assert deleted_only[0]["courses"][0]["courseName"] == "Java basics"


def test_register_without_body_is_missing_parameter(client: TestClient) -> None:
    response = client.post(API_PREFIX)

    assert response.status_code == 400
    _assert_error_body(response.json(), status=400, code="E003", error="MISSING_PARAMETER")


def test_register_with_invalid_fields_lists_field_errors(client: TestClient) -> None:
    body = _registration(email="not-an-email")
    del body["student"]["fullName"]

    response = client.post(API_PREFIX, json=body)

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    fields = {item["field"] for item in payload["errors"]}
    assert "student.fullName" in fields
    assert "student.email" in fields


def test_register_with_duplicate_email_is_validation_failed(client: TestClient) -> None:
    email = f"dup-{uuid.uuid4().hex[:8]}@example.com"
    _register(client, email=email)

    response = client.post(API_PREFIX, json=_registration(email=email))

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    assert payload["errors"][0]["field"] == "student.email"


def test_put_replaces_student_and_courses(client: TestClient) -> None:
    created = _register(client)
    student_id = created["student"]["studentId"]
    body = _registration(email=created["student"]["email"], fullName="Hanako Tanaka")
    body["courses"] = [{"courseName": "AWS"}, {"courseName": "Design"}]

    response = client.put(f"{API_PREFIX}/{student_id}", json=body)

    assert response.status_code == 200
    payload = response.json()
    assert payload["student"]["fullName"] == "Hanako Tanaka"
    assert sorted(course["courseName"] for course in payload["courses"]) == ["AWS", "Design"]


def test_put_and_patch_body_errors_are_distinguished(client: TestClient) -> None:
    student_id = _register(client)["student"]["studentId"]
    url = f"{API_PREFIX}/{student_id}"

    for method in ("PUT", "PATCH"):
        empty = client.request(method, url, content="", headers=JSON_HEADERS)
        empty_object = client.request(method, url, content="{}", headers=JSON_HEADERS)
        malformed = client.request(method, url, content="{", headers=JSON_HEADERS)

        _assert_error_body(empty.json(), status=400, code="E003", error="MISSING_PARAMETER")
        _assert_error_body(empty_object.json(), status=400, code="E003", error="EMPTY_OBJECT")
        _assert_error_body(malformed.json(), status=400, code="E002", error="INVALID_JSON")


def test_put_on_unknown_student_is_not_found(client: TestClient) -> None:
    response = client.put(f"{API_PREFIX}/{encode_to_base64(uuid.uuid4().bytes)}", json=_registration())

    assert response.status_code == 404
    _assert_error_body(response.json(), status=404, code="E404", error="NOT_FOUND")


def test_patch_updates_only_given_fields(client: TestClient) -> None:
    created = _register(client)
    student_id = created["student"]["studentId"]

    response = client.patch(f"{API_PREFIX}/{student_id}", json={"student": {"nickname": "hanachan"}})

    assert response.status_code == 200
    payload = response.json()["student"]
    assert payload["nickname"] == "hanachan"
    assert payload["fullName"] == created["student"]["fullName"]
    assert payload["email"] == created["student"]["email"]


def test_patch_appends_courses(client: TestClient) -> None:
    created = _register(client)
    student_id = created["student"]["studentId"]

    response = client.patch(
        f"{API_PREFIX}/{student_id}",
        json={"courses": [{"courseName": "SQL"}], "appendCourses": True},
    )

    assert response.status_code == 200
    names = sorted(course["courseName"] for course in response.json()["courses"])
    assert names == ["Java basics", "SQL"]


def test_patch_without_changes_is_empty_object(client: TestClient) -> None:
    student_id = _register(client)["student"]["studentId"]

    response = client.patch(f"{API_PREFIX}/{student_id}", json={"student": {}})

    assert response.status_code == 400
    _assert_error_body(response.json(), status=400, code="E003", error="EMPTY_OBJECT")


def test_patch_with_null_student_is_validation_failed(client: TestClient) -> None:
    student_id = _register(client)["student"]["studentId"]

    response = client.patch(f"{API_PREFIX}/{student_id}", json={"student": None})

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    assert payload["errors"][0]["field"] == "student"


def test_soft_delete_and_restore(client: TestClient) -> None:
    student_id = _register(client)["student"]["studentId"]
    url = f"{API_PREFIX}/{student_id}"

    assert client.delete(url).status_code == 204
    deleted = client.get(url).json()["student"]
    assert deleted["deleted"] is True
    assert deleted["deletedAt"]

    assert client.delete(url).status_code == 204
    assert client.patch(f"{url}/restore").status_code == 204
    restored = client.get(url).json()["student"]
    assert restored["deleted"] is False
    assert "deletedAt" not in restored or restored["deletedAt"] is None


def test_delete_unknown_student_is_not_found(client: TestClient) -> None:
    response = client.delete(f"{API_PREFIX}/{encode_to_base64(uuid.uuid4().bytes)}")

    assert response.status_code == 404
    _assert_error_body(response.json(), status=404, code="E404", error="NOT_FOUND")


def test_unknown_route_is_not_found(client: TestClient) -> None:
    response = client.get("/api/unknown")

    assert response.status_code == 404
    payload = response.json()
    _assert_error_body(payload, status=404, code="E404", error="NOT_FOUND")
    assert payload["message"] == "The requested URL does not exist"


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_with_existing_student_id_reports_the_id(client: TestClient) -> None:
    created = _register(client)
    body = _registration(studentId=created["student"]["studentId"])

    response = client.post(API_PREFIX, json=body)

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    assert [item["field"] for item in payload["errors"]] == ["student.studentId"]


def test_register_with_existing_course_id_reports_the_course(client: TestClient) -> None:
    created = _register(client)
    body = _registration()
    body["courses"] = [{"courseId": created["courses"][0]["courseId"], "courseName": "Reused"}]

    response = client.post(API_PREFIX, json=body)

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    assert [item["field"] for item in payload["errors"]] == ["courses.courseId"]


def test_put_with_invalid_student_fields_lists_field_errors(client: TestClient) -> None:
    created = _register(client)
    body = _registration(email="not-an-email")

    response = client.put(f"{API_PREFIX}/{created['student']['studentId']}", json=body)

    assert response.status_code == 400
    payload = response.json()
    _assert_error_body(payload, status=400, code="E001", error="VALIDATION_FAILED")
    assert [item["field"] for item in payload["errors"]] == ["student.email"]


def test_unsupported_method_is_unclassified(client: TestClient) -> None:
    response = client.post(f"{API_PREFIX}/{'A' * 22}")

    assert response.status_code == 500
    _assert_error_body(response.json(), status=500, code="E999", error="INTERNAL_SERVER_ERROR")
