from resume_builder.app.models.resume_model import StoredResume

HTMX = {"HX-Request": "true"}


def test_resume_state_requires_sign_in(client):
    response = client.get("/api/resume", headers={"Accept": "application/json"})
    assert response.status_code == 401


def test_initial_state(signed_in_client):
    response = signed_in_client.get("/api/resume")

    assert response.status_code == 200
    body = response.json()
    assert body["templateId"] == "modern"
    assert body["completion"] == 0
    assert body["document"]["personalDetails"]["fullName"] == ""
    assert body["skillInput"] == {"technical": "", "languages": "", "frameworks": "", "tools": ""}
    assert "New resume created" in [n["title"] for n in body["notifications"]]


def test_notifications_are_delivered_once(signed_in_client):
    signed_in_client.get("/api/resume")
    assert signed_in_client.get("/api/resume").json()["notifications"] == []


def test_update_personal_details(signed_in_client):
    response = signed_in_client.put(
        "/api/resume/personal",
        json={"field": "fullName", "value": "Jane Doe"},
    )
    signed_in_client.put("/api/resume/personal", json={"field": "email", "value": "jane@example.com"})

    assert response.json()["document"]["personalDetails"]["fullName"] == "Jane Doe"
    assert signed_in_client.get("/api/resume").json()["completion"] == 20


def test_update_unknown_personal_field(signed_in_client):
    response = signed_in_client.put("/api/resume/personal", json={"field": "age", "value": "30"})
    assert response.status_code == 422


def test_personal_update_htmx_returns_preview(signed_in_client):
    response = signed_in_client.put(
        "/api/resume/personal",
        json={"field": "full_name", "value": "Jane Doe"},
        headers=HTMX,
    )

    assert 'id="preview"' in response.text
    assert "Jane Doe" in response.text
    assert 'id="workspace"' not in response.text


def test_entry_routes(signed_in_client):
    created = signed_in_client.post("/api/resume/experience/entries")
    assert created.status_code == 201
    entry_id = created.json()["id"]
    assert created.json()["company"] == ""

    updated = signed_in_client.patch(
        f"/api/resume/experience/entries/{entry_id}",
        json={"field": "company", "value": "Acme"},
    )
    assert updated.json()["document"]["experience"][0]["company"] == "Acme"

    removed = signed_in_client.delete(f"/api/resume/experience/entries/{entry_id}")
    assert removed.json()["document"]["experience"] == []


def test_entry_routes_reject_bad_input(signed_in_client):
    assert signed_in_client.post("/api/resume/skills/entries").status_code == 422
    assert signed_in_client.post("/api/resume/hobbies/entries").status_code == 422

    entry_id = signed_in_client.post("/api/resume/projects/entries").json()["id"]
    response = signed_in_client.patch(
        f"/api/resume/projects/entries/{entry_id}",
        json={"field": "id", "value": "other"},
    )
    assert response.status_code == 422


def test_unknown_entry_id_changes_nothing(signed_in_client):
    signed_in_client.post("/api/resume/education/entries")
    before = signed_in_client.get("/api/resume").json()["document"]

    response = signed_in_client.patch(
        "/api/resume/education/entries/does-not-exist",
        json={"field": "institution", "value": "Nowhere"},
    )

    assert response.json()["document"] == before


def test_add_entry_htmx_returns_workspace(signed_in_client):
    response = signed_in_client.post("/api/resume/projects/entries", headers=HTMX)

    assert response.status_code == 201
    assert 'id="workspace"' in response.text


def test_skill_input_and_enter_key(signed_in_client):
    buffered = signed_in_client.put("/api/resume/skills/languages/input", json={"value": "Python"})
    assert buffered.status_code == 204

    other_key = signed_in_client.post("/api/resume/skills/languages/key", json={"key": "a"})
    assert other_key.json()["document"]["skills"]["languages"] == []
    assert other_key.json()["skillInput"]["languages"] == "Python"

    enter = signed_in_client.post("/api/resume/skills/languages/key", json={"key": "Enter"})
    assert enter.json()["document"]["skills"]["languages"] == ["Python"]
    assert enter.json()["skillInput"]["languages"] == ""


def test_commit_skill_ignores_duplicates(signed_in_client):
    signed_in_client.post("/api/resume/skills/tools", json={"value": "Docker"})
    response = signed_in_client.post("/api/resume/skills/tools", json={"value": "Docker"})

    body = response.json()
    assert body["document"]["skills"]["tools"] == ["Docker"]
    assert body["skillInput"]["tools"] == "Docker"


def test_remove_skill_with_slash(signed_in_client):
    signed_in_client.post("/api/resume/skills/technical", json={"value": "CI/CD"})
    signed_in_client.post("/api/resume/skills/technical", json={"value": "SQL"})

    response = signed_in_client.delete("/api/resume/skills/technical/CI/CD")

    assert response.json()["document"]["skills"]["technical"] == ["SQL"]


def test_unknown_skill_category(signed_in_client):
    response = signed_in_client.post("/api/resume/skills/hobbies", json={"value": "Chess"})
    assert response.status_code == 422


def test_save_stores_document(signed_in_client, db_session, verified_user):
    signed_in_client.put("/api/resume/personal", json={"field": "fullName", "value": "Jane Doe"})

    response = signed_in_client.post("/api/resume/save")

    assert response.status_code == 200
    body = response.json()
    assert body["saved"] is True
    assert body["notifications"][-1]["title"] == "Resume saved"
    stored = db_session.query(StoredResume).filter(StoredResume.user_id == verified_user.id).one()
    assert stored.personal_details["fullName"] == "Jane Doe"
    assert stored.template_id == "modern"


def test_save_htmx_returns_notifications(signed_in_client):
    response = signed_in_client.post("/api/resume/save", headers=HTMX)

    assert 'id="notifications"' in response.text
    assert "Resume saved" in response.text


def test_preview_json(signed_in_client):
    body = signed_in_client.get("/api/resume/preview").json()

    assert body["placeholder"] is not None
    assert body["style"]["layout"] == "modern"


def test_export_is_printable_html(signed_in_client):
    signed_in_client.put("/api/resume/personal", json={"field": "fullName", "value": "Jane Doe"})

    response = signed_in_client.get("/api/resume/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'filename="Jane_Doe_resume.html"' in response.headers["content-disposition"]
    assert "window.print()" in response.text


def test_suggestion(signed_in_client):
    body = signed_in_client.get("/api/resume/suggestion").json()
    assert body["suggestion"]


def test_suggestion_htmx_is_a_notification(signed_in_client):
    signed_in_client.get("/api/resume")
    response = signed_in_client.get("/api/resume/suggestion", headers=HTMX)

    assert 'id="notifications"' in response.text
    assert "Suggestion" in response.text
