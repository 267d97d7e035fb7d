from models import Group, LeaveRequest, Mentee, User, Attendance


def test_dashboard_counts(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee(mentor_id=mentor["_id"])
    Group(name="Batch A", mentor_id=mentor["_id"]).save()
    Group(name="Old", mentor_id=mentor["_id"], is_archived=True).save()
    LeaveRequest(mentee["_id"], mentor["_id"], "Fever", "2024-06-03", "2024-06-04").save()

    payload = client.get("/api/admin/dashboard").get_json()

    assert payload["stats"] == {
        "total_users": 3,
        "total_mentors": 1,
        "total_mentees": 1,
        "total_groups": 1,
        "pending_leaves": 1,
        "active_users": 3,
    }
    assert len(payload["recent_users"]) == 3
    assert payload["recent_leaves"][0]["mentee"]["full_name"] == "Student One"


def test_create_user_with_profile(client):
    resp = client.post("/api/admin/users", json={
        "email": "Coach@Example.com",
        "password": "pw123456",
        "role": "mentor",
        "full_name": "Coach Carter",
        "department": "Sports",
    })

    assert resp.status_code == 201
    payload = resp.get_json()
    assert payload["user"]["email"] == "coach@example.com"
    assert payload["profile"]["full_name"] == "Coach Carter"

    duplicate = client.post("/api/admin/users", json={
        "email": "coach@example.com", "password": "x", "role": "mentor",
    })
    assert duplicate.status_code == 409


def test_create_user_rejects_unknown_role(client):
    resp = client.post("/api/admin/users", json={"email": "a@example.com", "password": "x", "role": "guest"})
    assert resp.status_code == 400


def test_list_users_filters_and_attaches_profile(client, make_mentor, make_mentee):
    make_mentor()
    make_mentee()

    payload = client.get("/api/admin/users?role=mentee").get_json()

    assert payload["total"] == 1
    assert payload["users"][0]["profile"]["student_id"] == "STU001"
    assert "password" not in payload["users"][0]

    searched = client.get("/api/admin/users?search=mentor@").get_json()
    assert [u["email"] for u in searched["users"]] == ["mentor@example.com"]


def test_assign_mentor(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee()

    resp = client.put("/api/admin/assign-mentor", json={
        "mentee_id": str(mentee["_id"]), "mentor_id": str(mentor["_id"]),
    })

    assert resp.status_code == 200
    assert Mentee.find_by_id(mentee["_id"])["mentor_id"] == mentor["_id"]


def test_assign_mentor_unknown_mentee(client, make_mentor):
    mentor = make_mentor()
    resp = client.put("/api/admin/assign-mentor", json={
        "mentee_id": "0123456789abcdef01234567", "mentor_id": str(mentor["_id"]),
    })
    assert resp.status_code == 404


def test_deleting_mentor_unassigns_mentees(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee(mentor_id=mentor["_id"])

    resp = client.delete(f"/api/admin/users/{mentor['user_id']}")

    assert resp.status_code == 200
    assert User.find_by_id(mentor["user_id"]) is None
    assert Mentee.find_by_id(mentee["_id"])["mentor_id"] is None


def test_deleting_mentee_removes_attendance(client, admin_user, make_mentee):
    mentee = make_mentee()
    Attendance(mentee["_id"], "2024-06-03", "present", admin_user["_id"]).save()

    client.delete(f"/api/admin/users/{mentee['user_id']}")

    assert Mentee.find_by_id(mentee["_id"]) is None
    assert Attendance.collection().count_documents({}) == 0


def test_delete_unknown_user(client):
    assert client.delete("/api/admin/users/0123456789abcdef01234567").status_code == 404


def test_toggle_status(client, make_mentee):
    mentee = make_mentee()

    resp = client.put(f"/api/admin/users/{mentee['user_id']}/toggle-status")

    assert resp.get_json()["message"] == "User deactivated successfully"
    assert User.find_by_id(mentee["user_id"])["is_active"] is False


def test_update_profile_only_touches_known_fields(client, make_mentee):
    mentee = make_mentee()

    resp = client.put(f"/api/admin/users/{mentee['user_id']}/profile", json={
        "full_name": "Renamed",
        "attendance": {"total_days": 500},
    })

    profile = resp.get_json()["profile"]
    assert profile["full_name"] == "Renamed"
    assert profile["attendance"]["total_days"] == 0


def test_update_profile_rejects_malformed_mentor_id(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee(mentor_id=mentor["_id"])

    resp = client.put(f"/api/admin/users/{mentee['user_id']}/profile", json={"mentor_id": "not-an-id"})

    assert resp.status_code == 400
    assert Mentee.find_by_id(mentee["_id"])["mentor_id"] == mentor["_id"]


def test_update_profile_rejects_unknown_mentor(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee(mentor_id=mentor["_id"])

    resp = client.put(f"/api/admin/users/{mentee['user_id']}/details", json={
        "mentor_id": "0123456789abcdef01234567",
    })

    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Mentor not found"
    assert Mentee.find_by_id(mentee["_id"])["mentor_id"] == mentor["_id"]


def test_update_profile_clears_mentor_on_null(client, make_mentor, make_mentee):
    mentor = make_mentor()
    mentee = make_mentee(mentor_id=mentor["_id"])

    resp = client.put(f"/api/admin/users/{mentee['user_id']}/profile", json={"mentor_id": None})

    assert resp.status_code == 200
    assert Mentee.find_by_id(mentee["_id"])["mentor_id"] is None


def test_create_mentee_with_unknown_mentor_creates_nothing(client):
    resp = client.post("/api/admin/users", json={
        "email": "new@example.com", "password": "pw123456", "role": "mentee",
        "student_id": "STU009", "mentor_id": "0123456789abcdef01234567",
    })

    assert resp.status_code == 404
    assert User.find_by_email("new@example.com") is None


def test_assign_mentor_rejects_malformed_mentor_id(client, make_mentee):
    mentee = make_mentee()
    resp = client.put("/api/admin/assign-mentor", json={
        "mentee_id": str(mentee["_id"]), "mentor_id": "not-an-id",
    })
    assert resp.status_code == 400


def test_update_details_creates_missing_profile(client):
    user_id = User(email="bare@example.com", password="x", role="mentor").save().inserted_id

    resp = client.put(f"/api/admin/users/{user_id}/details", json={"full_name": "Bare Mentor"})

    assert resp.status_code == 200
    assert resp.get_json()["profile"]["full_name"] == "Bare Mentor"


def test_mentors_include_counts(client, make_mentor, make_mentee):
    mentor = make_mentor()
    make_mentee(mentor_id=mentor["_id"])

    mentors = client.get("/api/admin/mentors").get_json()

    assert mentors[0]["stats"] == {"mentee_count": 1, "group_count": 0}


def test_update_own_profile(client, admin_user):
    resp = client.put("/api/admin/profile", json={"full_name": "Chief", "email": "chief@example.com"})

    assert resp.status_code == 200
    assert resp.get_json()["admin"]["full_name"] == "Chief"
    assert User.find_by_id(admin_user["_id"])["email"] == "chief@example.com"
