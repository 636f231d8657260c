import csv
import io

from conftest import API


def create_job(client, headers, **overrides):
    body = {"name": "Cafe", "hourlyRate": 200, "dailyHourLimit": 8}
    body.update(overrides)
    response = client.post(f"{API}/jobs", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_login_and_me(client, register):
    headers, user = register(name="Alice")
    assert user["role"] == "employee"
    assert "passwordHash" not in user

    login = client.post(f"{API}/auth/login", json={"email": user["email"], "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["tokenType"] == "bearer"

    me = client.get(f"{API}/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["name"] == "Alice"

    refreshed = client.post(f"{API}/auth/refresh", headers=headers)
    assert refreshed.status_code == 200
    assert refreshed.json()["user"]["id"] == user["id"]


def test_duplicate_email_conflicts(client, register):
    _, user = register()

    response = client.post(f"{API}/auth/register", json={
        "email": user["email"].upper(),
        "password": "secret123",
        "name": "Copy",
    })

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ConflictError"


def test_wrong_password_and_short_password(client, register):
    _, user = register()

    login = client.post(f"{API}/auth/login", json={"email": user["email"], "password": "wrong-one"})
    assert login.status_code == 401

    short = client.post(f"{API}/auth/register", json={"email": "short@example.com", "password": "123", "name": "S"})
    assert short.status_code == 422


def test_requires_token(client):
    response = client.get(f"{API}/records")
    assert response.status_code in (401, 403)


def test_clock_cycle(client, register):
    headers, user = register()
    job = create_job(client, headers)

    status = client.get(f"{API}/records/status", headers=headers).json()
    assert status["status"] == "idle"

    clock_in = client.post(f"{API}/records/clock-in", json={"jobId": job["id"], "clockInPhoto": "aW4="}, headers=headers)
    assert clock_in.status_code == 201
    record = clock_in.json()
    assert record["clockOut"] is None
    assert record["userId"] == user["id"]
    assert record["clockInPhoto"] == "aW4="

    again = client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ConflictError"

    working = client.get(f"{API}/records/status", headers=headers).json()
    assert working["status"] == "working"
    assert working["record"]["id"] == record["id"]

    clock_out = client.post(f"{API}/records/clock-out", json={"clockOutPhoto": "b3V0", "note": "done"}, headers=headers)
    assert clock_out.status_code == 200
    assert clock_out.json()["clockOut"] is not None
    assert clock_out.json()["note"] == "done"

    idle = client.post(f"{API}/records/clock-out", json={}, headers=headers)
    assert idle.status_code == 404
    assert idle.json()["error"]["code"] == "NotFoundError"

    records = client.get(f"{API}/records", headers=headers).json()
    assert [r["id"] for r in records] == [record["id"]]


def test_clock_out_without_clock_in(client, register):
    headers, _ = register()

    response = client.post(f"{API}/records/clock-out", json={}, headers=headers)

    assert response.status_code == 404
    assert client.get(f"{API}/records", headers=headers).json() == []


def test_manual_edit_and_statistics(client, register):
    headers, _ = register()
    job = create_job(client, headers)
    record = client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=headers).json()
    client.post(f"{API}/records/clock-out", json={}, headers=headers)

    bad = client.put(f"{API}/records/{record['id']}", json={
        "clockIn": "2025-03-01T17:00:00+00:00",
        "clockOut": "2025-03-01T09:00:00+00:00",
    }, headers=headers)
    assert bad.status_code == 422

    unknown_field = client.put(f"{API}/records/{record['id']}", json={"userId": "someone-else"}, headers=headers)
    assert unknown_field.status_code == 422

    edited = client.put(f"{API}/records/{record['id']}", json={
        "clockIn": "2025-03-01T09:00:00+00:00",
        "clockOut": "2025-03-01T17:30:00+00:00",
        "breakMinutes": 30,
    }, headers=headers)
    assert edited.status_code == 200
    assert edited.json()["isManualEdit"] is True
    assert edited.json()["date"] == "2025-03-01"

    monthly = client.get(f"{API}/records/monthly", params={"year": 2025, "month": 3}, headers=headers).json()
    assert monthly["summary"]["totalMinutes"] == 480
    assert monthly["summary"]["totalEarnings"] == 1600
    assert len(monthly["records"]) == 1

    stats = client.get(f"{API}/records/statistics", headers=headers)
    assert stats.status_code == 200
    assert set(stats.json()) >= {"today", "week", "month", "averageHoursPerDay", "totalRecords"}
    assert stats.json()["totalRecords"] == 1

    deleted = client.delete(f"{API}/records/{record['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"{API}/records", headers=headers).json() == []


def test_free_account_job_limit(client, register):
    headers, user = register()
    first = create_job(client, headers)
    assert first["isActive"] is True
    assert first["status"] == "active"

    second = client.post(f"{API}/jobs", json={"name": "Bar", "hourlyRate": 150}, headers=headers)
    assert second.status_code == 403

    bad_rate = client.post(f"{API}/jobs", json={"name": "Bad", "hourlyRate": 0}, headers=headers)
    assert bad_rate.status_code == 422

    client.put(f"{API}/users/{user['id']}", json={"isPremium": True}, headers=headers)
    third = client.post(f"{API}/jobs", json={"name": "Bar", "hourlyRate": 150}, headers=headers)
    assert third.status_code == 201


def test_retired_job_is_hidden(client, register):
    headers, _ = register()
    job = create_job(client, headers)

    retired = client.delete(f"{API}/jobs/{job['id']}", headers=headers)
    assert retired.status_code == 200
    assert retired.json()["status"] == "retired"
    assert retired.json()["isActive"] is False

    assert client.get(f"{API}/jobs", headers=headers).json() == []
    everything = client.get(f"{API}/jobs", params={"includeInactive": True}, headers=headers).json()
    assert [j["id"] for j in everything] == [job["id"]]

    clock_in = client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=headers)
    assert clock_in.status_code == 422


def test_profile_update_is_allow_listed(client, register):
    headers, user = register()

    ok = client.put(f"{API}/users/{user['id']}", json={"name": "New Name"}, headers=headers)
    assert ok.status_code == 200
    assert ok.json()["name"] == "New Name"

    for field in ({"email": "x@example.com"}, {"role": "manager"}, {"passwordHash": "x"}):
        rejected = client.put(f"{API}/users/{user['id']}", json=field, headers=headers)
        assert rejected.status_code == 422

    other_headers, _ = register()
    forbidden = client.put(f"{API}/users/{user['id']}", json={"name": "Hacker"}, headers=other_headers)
    assert forbidden.status_code == 403


def test_team_flow_and_rollup(client, register):
    manager_headers, manager = register(role="manager", name="Boss")
    created = client.post(f"{API}/teams", json={"name": "Cafe crew"}, headers=manager_headers)
    assert created.status_code == 201
    team = created.json()
    assert len(team["inviteCode"]) == 6

    members = []
    for name in ("Alice", "Bob"):
        headers, user = register(name=name)
        joined = client.post(f"{API}/teams/join", json={"inviteCode": team["inviteCode"].lower()}, headers=headers)
        assert joined.status_code == 200
        assert joined.json()["user"]["teamId"] == team["id"]
        members.append((headers, user))

    everyone = client.get(f"{API}/teams/{team['id']}/members", headers=manager_headers).json()
    employees = client.get(f"{API}/teams/{team['id']}/employees", headers=manager_headers).json()
    assert len(everyone) == 3
    assert {u["name"] for u in employees} == {"Alice", "Bob"}

    alice_headers, alice = members[0]
    job = create_job(client, alice_headers)
    client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=alice_headers)

    # 管理者可以查看成員的紀錄，其他成員不行
    seen = client.get(f"{API}/records", params={"userId": alice["id"]}, headers=manager_headers)
    assert seen.status_code == 200
    assert len(seen.json()) == 1
    bob_headers, _ = members[1]
    denied = client.get(f"{API}/records", params={"userId": alice["id"]}, headers=bob_headers)
    assert denied.status_code == 403

    rollup = client.get(f"{API}/teams/{team['id']}/rollup", params={"view": "employees"}, headers=manager_headers)
    assert rollup.status_code == 200
    body = rollup.json()
    assert len(body["members"]) == 2
    assert body["totals"]["todayMinutes"] == sum(m["todayMinutes"] for m in body["members"])

    not_manager = client.get(f"{API}/teams/{team['id']}/rollup", headers=alice_headers)
    assert not_manager.status_code == 403

    leave_owner = client.post(f"{API}/teams/leave", headers=manager_headers)
    assert leave_owner.status_code == 409


def test_schedules(client, register):
    manager_headers, _ = register(role="manager")
    team = client.post(f"{API}/teams", json={"name": "Crew"}, headers=manager_headers).json()
    member_headers, member = register()
    client.post(f"{API}/teams/join", json={"inviteCode": team["inviteCode"]}, headers=member_headers)
    outsider_headers, _ = register()

    created = client.post(f"{API}/schedules", json={
        "userId": member["id"],
        "mode": "date",
        "date": "2025-03-10",
        "startTime": "09:00",
        "endTime": "17:00",
    }, headers=manager_headers)
    assert created.status_code == 201
    schedule = created.json()
    assert schedule["userId"] == member["id"]
    assert schedule["createdBy"] != member["id"]

    weekly = client.post(f"{API}/schedules", json={
        "mode": "weekly", "weekday": 0, "startTime": "10:00", "endTime": "14:00",
    }, headers=member_headers)
    assert weekly.status_code == 201

    invalid = client.post(f"{API}/schedules", json={
        "mode": "date", "date": "2025-03-10", "startTime": "17:00", "endTime": "09:00",
    }, headers=member_headers)
    assert invalid.status_code == 422

    forbidden = client.post(f"{API}/schedules", json={
        "userId": member["id"], "mode": "date", "date": "2025-03-10", "startTime": "09:00", "endTime": "10:00",
    }, headers=outsider_headers)
    assert forbidden.status_code == 403

    march = client.get(f"{API}/schedules", params={"year": 2025, "month": 3}, headers=member_headers).json()
    april = client.get(f"{API}/schedules", params={"year": 2025, "month": 4}, headers=member_headers).json()
    assert len(march) == 2
    assert [s["mode"] for s in april] == ["weekly"]

    team_view = client.get(f"{API}/teams/{team['id']}/schedules", headers=manager_headers).json()
    assert len(team_view) == 2

    updated = client.put(f"{API}/schedules/{schedule['id']}", json={"endTime": "18:00"}, headers=member_headers)
    assert updated.status_code == 200
    assert updated.json()["endTime"] == "18:00"

    deleted = client.delete(f"{API}/schedules/{schedule['id']}", headers=manager_headers)
    assert deleted.status_code == 204


def test_csv_export(client, register):
    headers, _ = register()
    job = create_job(client, headers, name="Bakery")
    record = client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=headers).json()
    client.post(f"{API}/records/clock-out", json={}, headers=headers)
    client.put(f"{API}/records/{record['id']}", json={
        "clockIn": "2025-03-01T09:00:00+00:00",
        "clockOut": "2025-03-01T17:30:00+00:00",
        "breakMinutes": 30,
    }, headers=headers)

    response = client.get(f"{API}/reports/records.csv", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(response.content.decode("utf-8-sig"))))
    assert len(rows) == 1
    assert rows[0]["job"] == "Bakery"
    assert rows[0]["minutes_worked"] == "480"
    assert rows[0]["earnings"] == "1600"
    assert rows[0]["clock_in"] == "2025-03-01 09:00:00"


def test_delete_account_cascades(client, register):
    headers, user = register()
    job = create_job(client, headers)
    client.post(f"{API}/records/clock-in", json={"jobId": job["id"]}, headers=headers)

    response = client.delete(f"{API}/users/{user['id']}", headers=headers)

    assert response.status_code == 204
    assert client.get(f"{API}/auth/me", headers=headers).status_code == 401
