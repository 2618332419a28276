"""End-to-end approval workflow through the HTTP API."""

from fastapi.testclient import TestClient

from tests.factories import PDF_BYTES, api_create_request, api_ready_request


def decide(client, headers, request_id, decision, **body):
    return client.post(f"/api/requests/{request_id}/{decision}", json=body, headers=headers)


class TestApprovalChain:

    def test_draft_to_decree(self, client: TestClient, headers_for, actors):
        request_id = api_ready_request(client, headers_for("filer"))["id"]

        response = decide(client, headers_for("filer"), request_id, "submit")
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "submitted"
        assert response.json()["capabilities"]["can_submit"] is False

        awaiting = client.get("/api/requests/awaiting", headers=headers_for("verifier")).json()
        assert [r["id"] for r in awaiting] == [request_id]

        for actor, expected in [
            ("verifier", "verified"),
            ("tier1", "tier1_approved"),
            ("tier2", "tier2_approved"),
        ]:
            response = decide(client, headers_for(actor), request_id, "approve")
            assert response.status_code == 200, response.text
            assert response.json()["status"] == expected

        response = decide(client, headers_for("tier2"), request_id, "issue")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "decree_issued"
        assert data["verified_by"] == str(actors["verifier"])
        assert data["tier1_approved_by"] == str(actors["tier1"])
        assert data["tier2_approved_by"] == str(actors["tier2"])
        assert data["decree_issued_at"] is not None
        assert data["progress"]["percent"] == 100
        assert data["progress"]["steps"]["issued"] == "completed"

        history = client.get(
            f"/api/requests/{request_id}/history", headers=headers_for("filer")
        ).json()
        assert [h["decision"] for h in history] == ["submit", "approve", "approve", "approve", "issue"]

    def test_wrong_stage_is_forbidden(self, client: TestClient, headers_for):
        request_id = api_ready_request(client, headers_for("filer"))["id"]
        decide(client, headers_for("filer"), request_id, "submit")

        response = decide(client, headers_for("tier1"), request_id, "approve")
        assert response.status_code == 403
        assert response.json()["code"] == "permission_denied"

        response = decide(client, headers_for("filer"), request_id, "approve")
        assert response.status_code == 403

    def test_stale_decision_conflicts(self, client: TestClient, headers_for):
        request_id = api_ready_request(client, headers_for("filer"))["id"]
        submitted = decide(client, headers_for("filer"), request_id, "submit").json()

        response = decide(
            client, headers_for("verifier"), request_id, "approve",
            expected_version=submitted["version"] - 1,
        )
        assert response.status_code == 409

        response = decide(
            client, headers_for("verifier"), request_id, "approve",
            expected_version=submitted["version"],
        )
        assert response.status_code == 200


class TestRejection:

    def test_reject_and_resubmit(self, client: TestClient, headers_for):
        request_id = api_ready_request(client, headers_for("filer"))["id"]
        decide(client, headers_for("filer"), request_id, "submit")

        response = decide(client, headers_for("verifier"), request_id, "reject")
        assert response.status_code == 400
        assert response.json()["field"] == "note"

        response = decide(
            client, headers_for("verifier"), request_id, "reject", note="Notulen belum ditandatangani"
        )
        assert response.status_code == 200
        assert response.json()["status"] == "verification_rejected"

        detail = client.get(f"/api/requests/{request_id}", headers=headers_for("filer")).json()
        assert detail["revision_note"] == "Notulen belum ditandatangani"
        assert detail["capabilities"]["can_submit"] is True
        assert detail["progress"]["steps"]["verification"] == "rejected"

        response = client.put(
            f"/api/requests/{request_id}/report",
            files={"file": ("notulen-v2.pdf", PDF_BYTES, "application/pdf")},
            headers=headers_for("filer"),
        )
        assert response.status_code == 200

        response = decide(client, headers_for("filer"), request_id, "submit")
        assert response.status_code == 200
        assert response.json()["status"] == "submitted"
        assert response.json()["revision_note"] is None


class TestSubmissionGates:

    def test_submit_without_report_or_roster(self, client: TestClient, headers_for):
        request_id = api_create_request(client, headers_for("filer"))["id"]

        response = decide(client, headers_for("filer"), request_id, "submit")
        assert response.status_code == 400
        assert response.json()["field"] == "meeting_report"

    def test_submitted_request_is_locked(self, client: TestClient, headers_for):
        request_id = api_ready_request(client, headers_for("filer"))["id"]
        decide(client, headers_for("filer"), request_id, "submit")

        response = client.put(
            f"/api/requests/{request_id}/report",
            files={"file": ("notulen.pdf", PDF_BYTES, "application/pdf")},
            headers=headers_for("filer"),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "authorization_error"
