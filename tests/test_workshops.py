from workshop_service.infrastructure.models import ActivityORM, WorkshopORM, workshop_activities

ACTIVITY = {
    "title": "Glazing basics",
    "description": "Dip, brush and wax resist techniques",
    "schedule": "2026-11-02T10:00:00Z",
}

def test_list_workshops_empty(client):
    response = client.get("/api/workshops")
    assert response.status_code == 200
    assert response.json() == []

def test_list_workshops_sorted_by_title(client, make_user, make_workshop):
    mentor = make_user(role="mentor")
    for title in ["Zen drawing", "Acrylic painting", "Macrame"]:
        make_workshop(mentor, title=title)

    response = client.get("/api/workshops")
    assert response.status_code == 200
    assert [w["title"] for w in response.json()] == ["Acrylic painting", "Macrame", "Zen drawing"]
    assert all(w["mentorId"] == mentor.id for w in response.json())

def test_create_workshop_as_mentor(client, make_user, login_as):
    mentor = make_user(role="mentor")
    login_as(mentor)

    response = client.post("/api/workshops", json={"title": "Knitting", "description": "Needles and yarn"})
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Knitting"
    assert data["mentorId"] == mentor.id
    assert data["activities"] == []

def test_create_workshop_as_learner_forbidden(client, database, make_user, login_as):
    login_as(make_user(role="learner"))

    response = client.post("/api/workshops", json={"title": "Knitting", "description": "Needles and yarn"})
    assert response.status_code == 403

    db = database.session()
    try:
        assert db.query(WorkshopORM).count() == 0
    finally:
        db.close()

def test_create_workshop_unauthenticated(client):
    response = client.post("/api/workshops", json={"title": "Knitting", "description": "Needles and yarn"})
    assert response.status_code == 401

def test_create_workshop_missing_description(client, make_user, login_as):
    login_as(make_user(role="mentor"))
    response = client.post("/api/workshops", json={"title": "Knitting"})
    assert response.status_code == 400

def test_get_workshop_not_found(client):
    assert client.get("/api/workshops/999").status_code == 404

def test_add_activity(client, make_user, make_workshop, login_as):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor)
    login_as(mentor)

    response = client.post(f"/api/workshops/activities?workshopId={workshop.id}", json=ACTIVITY)
    assert response.status_code == 201
    activity = response.json()
    assert activity["title"] == "Glazing basics"
    assert activity["workshopId"] == workshop.id

    detail = client.get(f"/api/workshops/{workshop.id}").json()
    assert [a["id"] for a in detail["activities"]] == [activity["id"]]

def test_add_activity_workshop_not_found(client, make_user, login_as):
    login_as(make_user(role="mentor"))
    response = client.post("/api/workshops/activities?workshopId=999", json=ACTIVITY)
    assert response.status_code == 404

def test_add_activity_other_mentors_workshop(client, make_user, make_workshop, login_as):
    owner = make_user(role="mentor")
    workshop = make_workshop(owner)
    login_as(make_user(role="mentor"))

    response = client.post(f"/api/workshops/activities?workshopId={workshop.id}", json=ACTIVITY)
    assert response.status_code == 403

def test_add_activity_validation(client, make_user, make_workshop, login_as):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor)
    login_as(mentor)

    response = client.post(
        f"/api/workshops/activities?workshopId={workshop.id}",
        json={**ACTIVITY, "title": "Glz"},
    )
    assert response.status_code == 400

    response = client.post(
        f"/api/workshops/activities?workshopId={workshop.id}",
        json={"title": "Glazing basics", "description": "Dip, brush and wax resist techniques"},
    )
    assert response.status_code == 400

def test_add_activity_notifies_opted_in_learners(client, notifier, session, make_user, make_workshop, login_as):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor)
    keen = make_user()
    quiet = make_user(preferences={"enrollment": True, "workshopUpdate": True, "newActivity": False})
    outsider = make_user()
    keen.workshops.append(workshop)
    quiet.workshops.append(workshop)
    session.commit()
    login_as(mentor)

    response = client.post(f"/api/workshops/activities?workshopId={workshop.id}", json=ACTIVITY)
    assert response.status_code == 201

    assert [s[0] for s in notifier.sent] == [keen.id]
    assert "Glazing basics" in notifier.sent[0][2]
    assert notifier.sent_to(outsider.id) == []

def test_update_activity(client, notifier, session, make_user, make_workshop, make_activity, login_as):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor)
    activity = make_activity(workshop)
    learner = make_user()
    learner.workshops.append(workshop)
    session.commit()
    login_as(mentor)

    response = client.put(
        f"/api/workshops/activities/{activity.id}",
        json={**ACTIVITY, "title": "Raku firing"},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Raku firing"
    assert client.get(f"/api/workshops/activities/{activity.id}").json()["title"] == "Raku firing"
    assert len(notifier.sent_to(learner.id)) == 1

def test_update_activity_not_found(client, make_user, login_as):
    login_as(make_user(role="mentor"))
    response = client.put("/api/workshops/activities/999", json=ACTIVITY)
    assert response.status_code == 404

def test_update_activity_as_learner_forbidden(client, make_user, make_workshop, make_activity, login_as):
    activity = make_activity(make_workshop(make_user(role="mentor")))
    login_as(make_user())
    response = client.put(f"/api/workshops/activities/{activity.id}", json=ACTIVITY)
    assert response.status_code == 403

def test_delete_activity_cascades(client, database, session, make_user, make_workshop, make_activity, login_as):
    mentor = make_user(role="mentor")
    owner = make_workshop(mentor, title="Pottery")
    other = make_workshop(mentor, title="Ceramics")
    activity = make_activity(owner)
    kept = make_activity(owner, title="Trimming pots")
    # same activity also listed on a second workshop
    activity_id, kept_id, owner_id, other_id = activity.id, kept.id, owner.id, other.id
    session.execute(workshop_activities.insert().values(workshop_id=other_id, activity_id=activity_id))
    session.commit()
    login_as(mentor)

    response = client.delete(f"/api/workshops/activities/{activity_id}")
    assert response.status_code == 200
    assert response.json()["id"] == activity_id

    assert client.get(f"/api/workshops/activities/{activity_id}").status_code == 404
    assert [a["id"] for a in client.get(f"/api/workshops/{owner_id}").json()["activities"]] == [kept_id]
    assert client.get(f"/api/workshops/{other_id}").json()["activities"] == []

    db = database.session()
    try:
        assert db.get(ActivityORM, activity_id) is None
        rows = db.execute(
            workshop_activities.select().where(workshop_activities.c.activity_id == activity_id)
        ).all()
        assert rows == []
    finally:
        db.close()

def test_delete_activity_not_found(client, make_user, login_as):
    login_as(make_user(role="mentor"))
    assert client.delete("/api/workshops/activities/999").status_code == 404

def test_get_activity_not_found(client):
    response = client.get("/api/workshops/activities/999")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"]
