from __future__ import annotations


def _create_employee(client, **fields):
    data = {"fullname": "Nguyen Van A", "salary": 20_000_000, "dependents": 1, "probation": "no"}
    data.update(fields)
    resp = client.post("/api/employees", json=data)
    assert resp.status_code == 201
    return resp.get_json()["id"]


def _batch(employee_ids, **extra):
    data = {"employeeIds": employee_ids, "month": 3, "year": 2024, "workingDays": 22, "daysOff": 0}
    data.update(extra)
    return data


def test_employee_crud(client):
    employee_id = _create_employee(client)

    assert client.get(f"/api/employees/{employee_id}").get_json()["fullname"] == "Nguyen Van A"
    resp = client.put(f"/api/employees/{employee_id}", json={"dependents": 2})
    assert resp.get_json()["dependents"] == 2
    assert client.delete(f"/api/employees/{employee_id}").status_code == 200
    assert client.get(f"/api/employees/{employee_id}").status_code == 404


def test_invalid_employee_payload(client):
    resp = client.post("/api/employees", json={"salary": 5})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_check_in_twice_is_a_conflict(client):
    employee_id = _create_employee(client)

    assert client.post(f"/api/attendance/{employee_id}/check-in", json={"notes": "hi"}).status_code == 201
    resp = client.post(f"/api/attendance/{employee_id}/check-in")
    assert resp.status_code == 409
    assert "record_id" in resp.get_json()

    status = client.get(f"/api/attendance/{employee_id}/status").get_json()
    assert status["status"] == "checked-in"
    assert client.post(f"/api/attendance/{employee_id}/check-out").status_code == 200
    assert client.post(f"/api/attendance/{employee_id}/check-out").status_code == 404


def test_attendance_stats_endpoint(client):
    employee_id = _create_employee(client)

    body = client.get(f"/api/attendance/{employee_id}/stats?month=3&year=2024").get_json()

    assert body["total_working_days"] == 21
    assert body["work_days"] == 0


def test_batch_then_conflict_then_overwrite(client):
    employee_id = _create_employee(client)

    first = client.post("/api/salary/calculate", json=_batch([employee_id]))
    assert first.status_code == 201
    body = first.get_json()
    assert body["success"] is True
    record = body["results"][0]
    assert record["net_salary"] == 17775000

    second = client.post("/api/salary/calculate", json=_batch([employee_id]))
    assert second.status_code == 409
    error = second.get_json()["errors"][0]
    assert error["kind"] == "conflict"
    assert error["record_id"] == record["id"]

    third = client.post("/api/salary/calculate", json=_batch([employee_id], bonus=100000, confirmOverwrite=True))
    assert third.status_code == 201
    assert third.get_json()["results"][0]["id"] == record["id"]


def test_batch_with_only_missing_employees(client):
    resp = client.post("/api/salary/calculate", json=_batch([404]))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is False
    assert body["errors"][0]["kind"] == "not_found"


def test_batch_validation_error(client):
    resp = client.post("/api/salary/calculate", json={"employeeIds": [], "month": 3, "year": 2024})

    assert resp.status_code == 400


def test_salary_record_endpoints(client):
    employee_id = _create_employee(client, department="Engineering")
    record_id = client.post("/api/salary/calculate", json=_batch([employee_id])).get_json()["results"][0]["id"]

    assert client.get(f"/api/salary/{record_id}").status_code == 200
    assert len(client.get("/api/salary/period?month=3&year=2024").get_json()) == 1
    assert client.get("/api/salary/period").status_code == 400

    updated = client.put(f"/api/salary/{record_id}", json={"bonus": 200000}).get_json()
    assert updated["record"]["bonus"] == 200000

    csv_resp = client.get("/api/salary/export/csv?month=3&year=2024")
    assert csv_resp.status_code == 200
    assert csv_resp.mimetype == "text/csv"

    xlsx_resp = client.get("/api/salary/export/excel")
    assert xlsx_resp.status_code == 200
    assert xlsx_resp.data[:2] == b"PK"

    assert client.get(f"/api/salary/{record_id}/payslip").status_code == 200

    monthly = client.get("/api/reports/monthly?month=3&year=2024").get_json()
    assert monthly["total_employees"] == 1
    assert monthly["departments"][0]["department"] == "Engineering"

    assert client.delete(f"/api/salary/{record_id}").status_code == 200
    assert client.get(f"/api/salary/{record_id}").status_code == 404


def test_export_without_records_is_not_found(client):
    assert client.get("/api/salary/export/excel").status_code == 404


def test_out_of_range_or_non_finite_input_is_a_bad_request(client):
    employee_id = _create_employee(client)

    assert client.post("/api/salary/calculate", json=_batch([employee_id], year=10000)).status_code == 400
    assert client.post("/api/salary/calculate", json=_batch([employee_id], bonus="NaN")).status_code == 400
    assert client.post("/api/employees", json={"fullname": "B", "salary": "Infinity"}).status_code == 400
    assert client.get("/api/salary").get_json() == []
