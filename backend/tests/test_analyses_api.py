"""End-to-end tests for analyses and the suggestion review flow (Gemini mocked)."""

import io
from unittest.mock import AsyncMock, patch

import pytest
from docx import Document

pytestmark = pytest.mark.api

JD = "Senior engineer with distributed systems experience"


def _structured_payload() -> dict:
    return {
        "overall_score": 50,
        "suggestions": [
            {
                "id": "s1", "type": "improve_wording", "priority": "high",
                "title": "Quantify your impact", "description": "Say what you built.",
                "path": "experience[0].bullets[0]",
                "original_text": "Built stuff", "suggested_text": "Built a distributed cache",
            },
            {"id": "s2", "type": "add_keyword", "priority": "medium", "title": "Add Kafka"},
            {"id": "s3", "type": "formatting", "priority": "low", "title": "Consistent dates"},
            {
                "id": "s4", "type": "add_keyword", "priority": "medium", "title": "Add Python",
                "path": "skills.languages",
                "original_text": "Java, Go", "suggested_text": "Java, Go, Python",
            },
        ],
        "keywords_found": [{"keyword": "Java"}],
        "keywords_missing": [
            {"keyword": "Kafka", "importance": "critical", "suggestion": "Mention streaming work"}
        ],
        "summary": "Moderate match.",
    }


def _create(client, headers, payload, **body) -> dict:
    with patch("services.gemini_client.generate_json", new=AsyncMock(return_value=payload)):
        response = client.post(
            "/analyses",
            json={"job_description": JD, **body},
            headers=headers,
        )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def structured_analysis(client, auth_headers, sample_resume) -> dict:
    client.put("/resume", json=sample_resume.model_dump(), headers=auth_headers)
    return _create(client, auth_headers, _structured_payload(), title="Staff Engineer", company="Initech")


def _url(analysis: dict, suffix: str = "") -> str:
    return f"/analyses/{analysis['id']}{suffix}"


class TestCreate:
    def test_create_analysis(self, structured_analysis):
        assert structured_analysis["overall_score"] == 50
        assert structured_analysis["job_title"] == "Staff Engineer"
        assert structured_analysis["job_company"] == "Initech"
        assert [s["id"] for s in structured_analysis["suggestions"]] == ["s1", "s2", "s3", "s4"]
        assert structured_analysis["keywords_missing"][0]["keyword"] == "Kafka"

    def test_requires_resume(self, client, auth_headers):
        response = client.post("/analyses", json={"job_description": JD}, headers=auth_headers)
        assert response.status_code == 400

    def test_requires_job_description(self, client, auth_headers, sample_resume):
        client.put("/resume", json=sample_resume.model_dump(), headers=auth_headers)
        response = client.post("/analyses", json={"job_description": "   "}, headers=auth_headers)
        assert response.status_code == 400

    def test_provider_failure(self, client, auth_headers, sample_resume):
        client.put("/resume", json=sample_resume.model_dump(), headers=auth_headers)
        with patch("services.gemini_client.generate_json", new=AsyncMock(return_value=None)):
            response = client.post("/analyses", json={"job_description": JD}, headers=auth_headers)
        assert response.status_code == 502
        assert response.json()["detail"] == "Analysis failed"
        assert client.get("/analyses", headers=auth_headers).json() == []

    def test_default_title_and_listing(self, client, auth_headers, structured_analysis):
        second = _create(client, auth_headers, _structured_payload())
        assert second["job_title"] == "Untitled Position"
        assert second["job_company"] is None

        listed = client.get("/analyses", headers=auth_headers).json()
        assert {a["id"] for a in listed} == {structured_analysis["id"], second["id"]}

    def test_analyses_are_private(self, client, other_headers, structured_analysis):
        assert client.get(_url(structured_analysis), headers=other_headers).status_code == 404
        assert client.get(_url(structured_analysis, "/review"), headers=other_headers).status_code == 404


class TestStructuredReview:
    def test_initial_review(self, client, auth_headers, structured_analysis):
        review = client.get(_url(structured_analysis, "/review"), headers=auth_headers).json()
        assert review["is_structured"] is True
        assert review["base_score"] == review["current_score"] == 50
        assert len(review["active"]) == 4
        assert review["accepted"] == [] and review["dismissed"] == []
        assert review["can_export"] is False

    def test_accept_dismiss_undo_flow(self, client, auth_headers, structured_analysis):
        accept = client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        assert accept.status_code == 200
        review = accept.json()
        assert review["resume_data"]["experience"][0]["bullets"][0] == "Built a distributed cache"
        assert review["current_score"] == 63
        assert review["score_delta"] == 13

        review = client.post(_url(structured_analysis, "/suggestions/s2/accept"), headers=auth_headers).json()
        assert review["current_score"] == 75

        review = client.post(_url(structured_analysis, "/suggestions/s3/dismiss"), headers=auth_headers).json()
        assert [s["id"] for s in review["active"]] == ["s4"]
        assert [s["id"] for s in review["accepted"]] == ["s1", "s2"]
        assert [s["id"] for s in review["dismissed"]] == ["s3"]

        review = client.post(_url(structured_analysis, "/suggestions/s1/undo"), headers=auth_headers).json()
        assert review["resume_data"]["experience"][0]["bullets"][0] == "Built stuff"
        assert review["current_score"] == 63

        persisted = client.get(_url(structured_analysis, "/review"), headers=auth_headers).json()
        assert persisted == review

    def test_state_machine_is_enforced(self, client, auth_headers, structured_analysis):
        client.post(_url(structured_analysis, "/suggestions/s3/dismiss"), headers=auth_headers)
        assert client.post(_url(structured_analysis, "/suggestions/s3/accept"), headers=auth_headers).status_code == 409
        assert client.post(_url(structured_analysis, "/suggestions/s3/undo"), headers=auth_headers).status_code == 409

        client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        assert client.post(_url(structured_analysis, "/suggestions/s1/dismiss"), headers=auth_headers).status_code == 409
        again = client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        assert again.status_code == 200
        assert len(again.json()["accepted"]) == 1

    def test_unknown_suggestion(self, client, auth_headers, structured_analysis):
        response = client.post(_url(structured_analysis, "/suggestions/nope/accept"), headers=auth_headers)
        assert response.status_code == 404

    def test_select_then_accept_clears_selection(self, client, auth_headers, structured_analysis):
        review = client.post(_url(structured_analysis, "/suggestions/s4/select"), headers=auth_headers).json()
        assert review["selected_id"] == "s4"
        review = client.post(_url(structured_analysis, "/suggestions/s4/accept"), headers=auth_headers).json()
        assert review["selected_id"] is None
        assert review["resume_data"]["skills"]["languages"] == "Java, Go, Python"

    def test_reset(self, client, auth_headers, structured_analysis):
        client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        review = client.post(_url(structured_analysis, "/review/reset"), headers=auth_headers).json()
        assert review["current_score"] == 50
        assert review["resume_data"]["experience"][0]["bullets"][0] == "Built stuff"

    def test_export(self, client, auth_headers, structured_analysis):
        assert client.get(_url(structured_analysis, "/export"), headers=auth_headers).status_code == 409

        client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        response = client.get(_url(structured_analysis, "/export"), headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "optimized-resume.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_unresolvable_path_is_dropped(self, client, auth_headers, sample_resume):
        client.put("/resume", json=sample_resume.model_dump(), headers=auth_headers)
        payload = _structured_payload()
        payload["suggestions"][0]["path"] = "experience[7].bullets[0]"
        analysis = _create(client, auth_headers, payload)
        assert analysis["suggestions"][0]["path"] is None

        response = client.post(_url(analysis, "/suggestions/s1/accept"), headers=auth_headers)
        assert response.status_code == 200
        review = response.json()
        assert [s["id"] for s in review["accepted"]] == ["s1"]
        assert review["resume_data"] == sample_resume.model_dump()

    def test_base_resume_is_a_snapshot(self, client, auth_headers, structured_analysis, sample_resume):
        changed = sample_resume.model_dump()
        changed["experience"][0]["bullets"][0] = "Something else entirely"
        client.put("/resume", json=changed, headers=auth_headers)
        client.delete("/resume", headers=auth_headers)

        review = client.post(_url(structured_analysis, "/suggestions/s1/accept"), headers=auth_headers).json()
        assert review["resume_data"]["experience"][0]["bullets"][0] == "Built a distributed cache"
        undone = client.post(_url(structured_analysis, "/suggestions/s1/undo"), headers=auth_headers).json()
        assert undone["resume_data"]["experience"][0]["bullets"][0] == "Built stuff"
        assert client.get(_url(structured_analysis), headers=auth_headers).json()["resume_id"] is None


class TestFlatReview:
    @pytest.fixture
    def flat_analysis(self, client, auth_headers) -> dict:
        doc = Document()
        doc.add_paragraph("Jane Doe")
        doc.add_paragraph("Skilled in Java")
        buf = io.BytesIO()
        doc.save(buf)
        client.post(
            "/resume/upload",
            files={"resume_file": ("cv.docx", buf.getvalue(), "application/octet-stream")},
            headers=auth_headers,
        )
        payload = {
            "overall_score": 70,
            "suggestions": [
                {
                    "id": "s1", "type": "add_keyword", "priority": "high", "title": "Python",
                    "original_text": "Java", "suggested_text": "Python",
                    "path": "ignored.for.flat",
                }
            ],
        }
        return _create(client, auth_headers, payload)

    def test_accept_and_undo_text(self, client, auth_headers, flat_analysis):
        review = client.get(_url(flat_analysis, "/review"), headers=auth_headers).json()
        assert review["is_structured"] is False
        assert review["resume_data"] is None
        assert review["resume_text"] == "Jane Doe\nSkilled in Java"

        review = client.post(_url(flat_analysis, "/suggestions/s1/accept"), headers=auth_headers).json()
        assert review["resume_text"] == "Jane Doe\nSkilled in Python"
        assert review["current_score"] == 100

        review = client.post(_url(flat_analysis, "/suggestions/s1/undo"), headers=auth_headers).json()
        assert review["resume_text"] == "Jane Doe\nSkilled in Java"
        assert review["current_score"] == 70

    def test_export_flat(self, client, auth_headers, flat_analysis):
        client.post(_url(flat_analysis, "/suggestions/s1/accept"), headers=auth_headers)
        response = client.get(_url(flat_analysis, "/export"), headers=auth_headers)
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")


class TestRowLocking:
    def _sql(self, for_update: bool) -> str:
        from sqlalchemy.dialects import postgresql

        from api.analyses import _analysis_query
        from database import SessionLocal
        from models.tables import User

        db = SessionLocal()
        try:
            query = _analysis_query(db, User(id="u1"), "a1", for_update=for_update)
            return str(query.statement.compile(dialect=postgresql.dialect()))
        finally:
            db.close()

    def test_review_transitions_lock_the_row(self):
        assert "FOR UPDATE" in self._sql(for_update=True)

    def test_reads_do_not_lock(self):
        assert "FOR UPDATE" not in self._sql(for_update=False)
