from conftest import register


def test_profile_round_trip(client, student_auth):
    student_id, headers = student_auth

    before = client.get("/api/users/profile", headers=headers).get_json()["user"]
    resp = client.put("/api/users/profile", json={
        "name": "Renamed Student",
        "bio": "Likes proteins.",
        "skills": ["Python", "R"],
        "gpa": 3.9,
        "year": "Graduate",
        "email": "hijack@uni.edu",
        "role": "professor",
    }, headers=headers)

    after = resp.get_json()["user"]
    assert before["id"] == student_id
    assert resp.status_code == 200
    assert after["name"] == "Renamed Student"
    assert after["skills"] == ["Python", "R"]
    assert after["gpa"] == 3.9
    assert after["year"] == "Graduate"
    assert after["email"] == before["email"]
    assert after["role"] == "student"


def test_profile_validation(client, student_auth):
    _, headers = student_auth

    resp = client.put("/api/users/profile", json={"gpa": 4.5, "year": "Postdoc", "bio": "x" * 501},
                      headers=headers)

    assert resp.status_code == 400
    assert {e["field"] for e in resp.get_json()["errors"]} == {"gpa", "year", "bio"}


def test_departments_and_skills(client):
    register(client, "student", email="a@uni.edu", department="Physics", skills=["Python", "MATLAB"])
    register(client, "professor", email="b@uni.edu", department="Biology", skills=["Python", "CRISPR"])

    assert client.get("/api/users/departments").get_json() == ["Biology", "Physics"]
    assert client.get("/api/users/skills").get_json() == ["CRISPR", "MATLAB", "Python"]


def test_health(client):
    assert client.get("/").get_json() == {"status": "ok"}
    assert client.get("/api/nope").status_code == 404
