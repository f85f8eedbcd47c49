"""
Tests for API Contract
======================

Ensures the API always returns valid JSON with expected structure.
Gate denials come back as 200 with ok=false; engine errors as 500.
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient
from casebrain_engine.api import app
from casebrain_engine.catalogue import CATALOGUE_VERSION
from casebrain_engine.schemas import GatedResponse, HealthResponse, OptionRanking


# =============================================================================
# Test Client
# =============================================================================

@pytest.fixture
def client():
    """Create test client"""
    return TestClient(app)


def _docs(bundle):
    return [d.model_dump(mode="json") for d in bundle["documents"]]


def _strategy_body(bundle, case_id="case-1"):
    return {
        "org_id": "org-1",
        "case_id": case_id,
        "category": bundle["category"],
        "practice_area": bundle["practice_area"].value,
        "documents": _docs(bundle),
    }


# =============================================================================
# Health Check Tests
# =============================================================================

class TestHealthEndpoint:
    """Tests for /health endpoint"""

    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_valid_json(self, client):
        data = client.get("/health").json()
        HealthResponse(**data)
        assert data["status"] == "healthy"
        assert data["catalogue_version"] == CATALOGUE_VERSION


# =============================================================================
# Coverage / Admission
# =============================================================================

class TestCoverageEndpoint:

    def test_coverage_structure(self, client, criminal_bundle):
        response = client.post("/api/v1/coverage", json={
            "documents": _docs(criminal_bundle),
            "practice_area": "criminal",
        })
        assert response.status_code == 200
        data = response.json()

        assert data["completeness"]["score"] == 86
        assert data["completeness"]["capability_tier"] == "full"
        items = {item["id"]: item for item in data["items"]}
        assert items["pace"]["status"] == "present"
        assert items["pace"]["supporting_evidence"]
        assert "score" in data["bundle"]

    def test_coverage_empty_documents(self, client):
        response = client.post("/api/v1/coverage", json={"documents": []})
        assert response.status_code == 200
        assert response.json()["completeness"]["score"] == 0

    def test_malformed_structured_meta_is_500(self, client, criminal_bundle):
        response = client.post("/api/v1/coverage", json={
            "documents": _docs(criminal_bundle),
            "structured_meta": {"criminalMeta": {"charges": "not a list"}},
        })
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "ExtractionContractError"


class TestAdmissionEndpoint:

    def test_admitted(self, client, criminal_bundle):
        response = client.post("/api/v1/admission", json={"documents": _docs(criminal_bundle)})
        assert response.status_code == 200
        data = GatedResponse(**response.json())
        assert data.ok
        assert data.data["can_generate_analysis"] is True
        assert data.diagnostics.doc_count == 3

    def test_denied_is_200_with_banner(self, client, thin_bundle):
        response = client.post("/api/v1/admission", json={"documents": _docs(thin_bundle)})
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["banner"]["title"] == "No extractable text detected"
        assert "SCANNED_SUSPECTED" in data["diagnostics"]["reason_codes"]

    def test_no_documents(self, client):
        data = client.post("/api/v1/admission", json={"documents": []}).json()
        assert data["ok"] is False
        assert data["diagnostics"]["reason_codes"] == ["DOCS_NONE"]


# =============================================================================
# Strategy / Options
# =============================================================================

class TestStrategyEndpoint:

    def test_strategy_structure(self, client, criminal_bundle):
        response = client.post("/api/v1/strategy", json=_strategy_body(criminal_bundle))
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True

        data = body["data"]
        assert data["category"] == "violence"
        assert data["gate"] == {"show": True, "reason": None}
        strategy = data["strategy"]
        assert strategy["angles"][0]["id"] == "pace-solicitor"
        assert strategy["overall_win_probability"] == 95
        assert strategy["recommended_strategy"]["primary"]["id"] == "pace-solicitor"
        assert data["options"]["recommended"]["id"] == "no-case-to-answer"

    def test_denied_strategy_has_no_probabilities(self, client, thin_bundle):
        response = client.post("/api/v1/strategy", json=_strategy_body(thin_bundle))
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["data"] is None
        assert body["banner"] is not None

    def test_denied_strategy_skips_pipeline(self, client, thin_bundle, monkeypatch):
        calls = []

        async def recording_analyse(*args, **kwargs):
            calls.append(kwargs.get("case_id"))
            raise AssertionError("pipeline must not run for a denied bundle")

        monkeypatch.setattr("casebrain_engine.api.analyse", recording_analyse)
        body = client.post("/api/v1/strategy", json=_strategy_body(thin_bundle)).json()

        assert body["ok"] is False
        assert body["banner"] is not None
        assert calls == []

    def test_hidden_gate_nulls_probabilities(self, client, contract_bundle):
        body = client.post("/api/v1/strategy", json=_strategy_body(contract_bundle)).json()
        assert body["ok"] is True
        assert body["data"]["gate"]["show"] is False
        assert body["data"]["gate"]["reason"]
        assert body["data"]["strategy"]["overall_win_probability"] is None

    def test_missing_org_is_422(self, client, criminal_bundle):
        body = _strategy_body(criminal_bundle)
        del body["org_id"]
        assert client.post("/api/v1/strategy", json=body).status_code == 422


class TestOptionsEndpoint:

    def _angles(self, client, bundle):
        body = client.post("/api/v1/strategy", json=_strategy_body(bundle)).json()
        return body["data"]["strategy"]["angles"]

    def test_aggressive_policy(self, client, criminal_bundle):
        response = client.post("/api/v1/options", json={
            "category": "assault",
            "angles": self._angles(client, criminal_bundle),
            "policy": "aggressive",
        })
        assert response.status_code == 200
        ranking = OptionRanking(**response.json())
        assert ranking.recommended.id == "article-6-challenge"
        assert ranking.policy == "aggressive"

    def test_unknown_policy_is_500(self, client):
        response = client.post("/api/v1/options", json={"category": "assault", "angles": [], "policy": "reckless"})
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CatalogueError"

    def test_unrecognized_category_has_no_options(self, client, criminal_bundle):
        response = client.post("/api/v1/options", json={
            "category": "Breach of a supply contract",
            "angles": self._angles(client, criminal_bundle),
        })
        assert response.json()["viable"] == []


# =============================================================================
# Snapshot
# =============================================================================

class TestSnapshotEndpoint:

    def test_missing_org_header_is_422(self, client):
        assert client.get("/api/v1/cases/case-1/snapshot").status_code == 422

    def test_unknown_case(self, client, sqlalchemy_db):
        response = client.get("/api/v1/cases/nope/snapshot", headers={"X-Org-Id": "org-1"})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["diagnostics"]["reason_codes"] == ["CASE_NOT_FOUND"]
        assert body["banner"]["title"]

    def test_known_case(self, client, sqlalchemy_db, criminal_bundle):
        from casebrain_engine.db import Case, CaseDocument, Organization, get_db_session

        with get_db_session() as db:
            db.add(Organization(id="org-1", name="Alder & Co"))
            db.add(Case(id="case-1", org_id="org-1", title="R v Price", practice_area="criminal",
                        category=criminal_bundle["category"]))
            db.flush()
            for doc in criminal_bundle["documents"]:
                db.add(CaseDocument(id=doc.id, case_id="case-1", name=doc.name, raw_text=doc.raw_text))

        response = client.get("/api/v1/cases/case-1/snapshot", headers={"X-Org-Id": "org-1"})
        body = response.json()
        assert body["ok"] is True
        assert body["data"]["category"] == "violence"
        assert body["data"]["extraction_ok"] is True

        other = client.get("/api/v1/cases/case-1/snapshot", headers={"X-Org-Id": "org-2"}).json()
        assert other["ok"] is False
