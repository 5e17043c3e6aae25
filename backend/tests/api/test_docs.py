# tests/api/test_docs.py
from portal.core.errors import Conflict
from portal.models import Document
from portal.services.docs import docs_service


def doc_form(**overrides):
    form = {"title": "Zone development plan", "category": "planning", "description": "Five year plan"}
    form.update(overrides)
    return form


def pdf_file(pdf_bytes, name="plan.pdf", content_type="application/pdf"):
    return {"file": (name, pdf_bytes, content_type)}


def test_list_docs_is_public(client, sample_document):
    response = client.get("/api/docs")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["fileUrl"] == "/uploads/docs/budget.pdf"
    assert data["data"][0]["fileType"] == "application/pdf"
    assert "fileKey" not in data["data"][0]


def test_list_docs_by_category(client, sample_document, admin, headers_for, pdf_bytes):
    client.post("/api/docs", data=doc_form(), files=pdf_file(pdf_bytes), headers=headers_for(admin))

    data = client.get("/api/docs?category=finance").json()

    assert data["total"] == 1
    assert data["data"][0]["title"] == "Annual Budget"


def test_get_doc(client, sample_document):
    response = client.get(f"/api/docs/{sample_document.id}")
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Annual Budget"


def test_get_missing_doc(client):
    response = client.get("/api/docs/404")
    assert response.status_code == 404
    assert response.json()["error"] == "Document not found"


def test_create_doc(client, admin, headers_for, pdf_bytes, temp_storage_dir):
    response = client.post(
        "/api/docs", data=doc_form(), files=pdf_file(pdf_bytes), headers=headers_for(admin)
    )

    assert response.status_code == 201
    doc = response.json()["data"]
    assert doc["title"] == "Zone development plan"
    assert doc["fileType"] == "application/pdf"
    assert doc["fileUrl"].startswith("/uploads/docs/")
    stored = temp_storage_dir / "uploads" / doc["fileUrl"][len("/uploads/"):]
    assert stored.read_bytes() == pdf_bytes


def test_create_doc_requires_file(client, admin, headers_for):
    response = client.post("/api/docs", data=doc_form(), headers=headers_for(admin))
    assert response.status_code == 400
    assert response.json()["fields"] == [{"field": "file", "message": "File is required"}]


def test_create_doc_requires_title(client, admin, headers_for, pdf_bytes):
    response = client.post(
        "/api/docs", data={"category": "planning"}, files=pdf_file(pdf_bytes), headers=headers_for(admin)
    )
    assert response.status_code == 400
    assert response.json()["fields"][0]["field"] == "title"


def test_create_doc_rejects_executables(client, admin, headers_for, db_session):
    response = client.post(
        "/api/docs",
        data=doc_form(),
        files=pdf_file(b"MZ\x90\x00", "setup.exe", "application/x-msdownload"),
        headers=headers_for(admin)
    )
    assert response.status_code == 400
    assert db_session.query(Document).count() == 0


def test_create_doc_permissions(client, writer, headers_for, pdf_bytes):
    assert client.post("/api/docs", data=doc_form(), files=pdf_file(pdf_bytes)).status_code == 401
    response = client.post(
        "/api/docs", data=doc_form(), files=pdf_file(pdf_bytes), headers=headers_for(writer)
    )
    assert response.status_code == 403


def test_update_doc_metadata(client, sample_document, admin, headers_for):
    response = client.put(
        f"/api/docs/{sample_document.id}", data={"title": "Revised Budget"}, headers=headers_for(admin)
    )

    assert response.status_code == 200
    doc = response.json()["data"]
    assert doc["title"] == "Revised Budget"
    assert doc["category"] == "finance"
    assert doc["fileUrl"] == "/uploads/docs/budget.pdf"


def test_update_doc_replaces_file(client, sample_document, super_admin, headers_for, temp_storage_dir):
    old_path = temp_storage_dir / "uploads" / "docs" / "budget.pdf"
    assert old_path.exists()

    response = client.put(
        f"/api/docs/{sample_document.id}",
        files={"file": ("budget.txt", b"plain text budget", "text/plain")},
        headers=headers_for(super_admin)
    )

    assert response.status_code == 200
    doc = response.json()["data"]
    assert doc["fileType"] == "text/plain"
    assert doc["fileUrl"].endswith(".txt")
    assert not old_path.exists()


def test_update_doc_forbidden_for_writer(client, sample_document, writer, headers_for):
    response = client.put(
        f"/api/docs/{sample_document.id}", data={"title": "x"}, headers=headers_for(writer)
    )
    assert response.status_code == 403


def test_delete_doc(client, sample_document, admin, headers_for, temp_storage_dir, db_session):
    doc_id = sample_document.id

    response = client.delete(f"/api/docs/{doc_id}", headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json() == {"message": "Document deleted successfully"}
    assert client.get(f"/api/docs/{doc_id}").status_code == 404
    assert db_session.get(Document, doc_id) is None
    assert not (temp_storage_dir / "uploads" / "docs" / "budget.pdf").exists()


def test_delete_missing_doc(client, admin, headers_for):
    assert client.delete("/api/docs/999", headers=headers_for(admin)).status_code == 404


def test_update_doc_storage_failure_keeps_old_file(
        client, broken_storage, sample_document, admin, headers_for, temp_storage_dir, db_session
):
    response = client.put(
        f"/api/docs/{sample_document.id}",
        data={"title": "Should not stick"},
        files={"file": ("budget-v2.pdf", b"%PDF-1.7", "application/pdf")},
        headers=headers_for(admin)
    )

    assert response.status_code == 502
    assert (temp_storage_dir / "uploads" / "docs" / "budget.pdf").exists()
    db_session.refresh(sample_document)
    assert sample_document.title == "Annual Budget"
    assert sample_document.file_key == "docs/budget.pdf"


def test_update_doc_failed_commit_releases_new_file(
        client, sample_document, admin, headers_for, temp_storage_dir, monkeypatch
):
    docs_dir = temp_storage_dir / "uploads" / "docs"
    before = {p.name for p in docs_dir.iterdir()}

    def failing_update(*args, **kwargs):
        raise Conflict()

    monkeypatch.setattr(docs_service.lifecycle, "update", failing_update)

    response = client.put(
        f"/api/docs/{sample_document.id}",
        files={"file": ("budget-v2.pdf", b"%PDF-1.7", "application/pdf")},
        headers=headers_for(admin)
    )

    assert response.status_code == 409
    assert {p.name for p in docs_dir.iterdir()} <= before
