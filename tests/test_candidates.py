"""
Unit tests for candidate endpoints.

Tests:
- Candidate creation and validation
- Tenant-scoped retrieval
- Activity timeline and filtering
"""

import uuid


class TestCandidateCreation:
    """Tests for creating candidate profiles"""

    def test_create_candidate(self, client, company, recruiter_headers):
        """Test creating a candidate with profile details"""
        response = client.post(
            "/api/v1/candidates",
            json={
                "name": "Grace Hopper",
                "email": "grace@mail.example.com",
                "skills": ["cobol", "compilers"],
                "experienceYears": 12,
                "currentCompany": "Navy",
                "source": "referral",
            },
            headers=recruiter_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["companyId"] == str(company.id)
        assert data["skills"] == ["cobol", "compilers"]
        assert data["experienceYears"] == 12

    def test_invalid_email_is_rejected(self, client, recruiter_headers):
        """Test candidate creation with a malformed email"""
        response = client.post(
            "/api/v1/candidates", json={"name": "No Mail", "email": "not-an-email"}, headers=recruiter_headers
        )

        assert response.status_code == 422

    def test_negative_experience_is_rejected(self, client, recruiter_headers):
        response = client.post(
            "/api/v1/candidates",
            json={"name": "Time Traveller", "email": "tt@mail.example.com", "experienceYears": -1},
            headers=recruiter_headers,
        )

        assert response.status_code == 422


class TestCandidateRetrieval:
    """Tests for reading candidates"""

    def test_get_candidate(self, client, recruiter_headers, applications):
        response = client.get(f"/api/v1/candidates/{applications[0].candidate_id}", headers=recruiter_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Alice Smith"

    def test_unknown_candidate(self, client, recruiter_headers):
        response = client.get(f"/api/v1/candidates/{uuid.uuid4()}", headers=recruiter_headers)

        assert response.status_code == 404
        assert response.json() == {"code": "NOT_FOUND", "message": "Candidate not found"}

    def test_candidate_of_other_tenant_is_not_found(self, client, outsider_headers, applications):
        response = client.get(f"/api/v1/candidates/{applications[0].candidate_id}", headers=outsider_headers)

        assert response.status_code == 404


class TestActivities:
    """Tests for the candidate activity timeline"""

    def test_timeline_newest_first(self, client, recruiter_headers, applications, stage):
        jc = applications[0]
        client.post(
            f"/api/v1/pipeline/applications/{jc.id}/move",
            json={"targetStageId": str(stage("Screening").id)},
            headers=recruiter_headers,
        )

        response = client.get(f"/api/v1/candidates/{jc.candidate_id}/activities", headers=recruiter_headers)

        assert response.status_code == 200
        activities = response.json()
        assert [a["activityType"] for a in activities] == ["stage_change", "application"]
        assert activities[1]["description"] == "Applied to Senior Python Developer"

    def test_filter_by_type(self, client, recruiter_headers, applications, stage):
        jc = applications[0]
        client.post(
            f"/api/v1/pipeline/applications/{jc.id}/move",
            json={"targetStageId": str(stage("Screening").id)},
            headers=recruiter_headers,
        )

        response = client.get(
            f"/api/v1/candidates/{jc.candidate_id}/activities",
            params={"type": "stage_change"},
            headers=recruiter_headers,
        )

        assert [a["activityType"] for a in response.json()] == ["stage_change"]
