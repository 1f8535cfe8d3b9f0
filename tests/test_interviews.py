"""
Test suite for interview scheduling and panel feedback.

Tests cover:
- Scheduling validation (location, meeting URL, panel)
- Post-commit notifications and email
- Status changes and cancellation
- Feedback submission and completion
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from app.models.activity import ActivityType, CandidateActivity
from app.models.interview import InterviewMode, InterviewStatus, Recommendation
from app.models.notification import Notification, NotificationType
from app.services import email_service, interviews, sla
from app.utils.time import utc_now


@pytest.fixture
def interview_payload(applications, admin, hiring_manager):
    return {
        "jobCandidateId": str(applications[0].id),
        "scheduledAt": (utc_now() + timedelta(days=2)).isoformat(),
        "duration": 45,
        "timezone": "America/New_York",
        "mode": "google_meet",
        "panelMemberIds": [str(admin.id), str(hiring_manager.id)],
    }


@pytest.fixture
def scheduled(db_session, company, recruiter, admin, hiring_manager, applications):
    return interviews.schedule_interview(
        db_session,
        company_id=company.id,
        scheduled_by=recruiter.id,
        job_candidate_id=applications[0].id,
        scheduled_at=utc_now() - timedelta(hours=3),
        duration=60,
        timezone="UTC",
        mode=InterviewMode.PHONE,
        panel_member_ids=[admin.id, hiring_manager.id],
    )


class TestScheduling:
    """Tests for scheduling interviews"""

    def test_schedule_interview(self, client, db_session, recruiter_headers, interview_payload, applications):
        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["duration"] == 45
        assert len(data["panelMembers"]) == 2
        assert data["feedback"] == []
        activity = db_session.query(CandidateActivity).filter(
            CandidateActivity.activity_type == ActivityType.INTERVIEW_SCHEDULED
        ).one()
        assert activity.job_candidate_id == applications[0].id

    def test_team_is_notified(self, client, db_session, recruiter, admin, hiring_manager, recruiter_headers, interview_payload):
        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        scheduled_notices = db_session.query(Notification).filter(
            Notification.type == NotificationType.INTERVIEW_SCHEDULED
        ).all()
        assert {n.user_id for n in scheduled_notices} == {admin.id, hiring_manager.id}
        assert all(n.entity_id == response.json()["id"] for n in scheduled_notices)

    def test_in_person_requires_location(self, client, recruiter_headers, interview_payload):
        interview_payload["mode"] = "in_person"

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 422
        assert "location" in response.json()["details"]

    @pytest.mark.parametrize("location, expected_status", [
        ("not a url", 422),
        ("ftp://files.example.com/room", 422),
        ("https://meet.example.com/abc-123", 201),
    ])
    def test_custom_url_must_be_http(self, client, recruiter_headers, interview_payload, location, expected_status):
        interview_payload.update({"mode": "custom_url", "location": location})

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == expected_status
        if expected_status == 201:
            assert response.json()["meetingLink"] == location

    def test_panel_must_belong_to_company(self, client, recruiter_headers, interview_payload, outsider):
        interview_payload["panelMemberIds"].append(str(outsider.id))

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 422
        assert "panelMemberIds" in response.json()["details"]

    def test_panel_is_required(self, client, recruiter_headers, interview_payload):
        interview_payload["panelMemberIds"] = []

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 422

    def test_confirmation_email_sent_when_enabled(self, client, recruiter_headers, interview_payload, monkeypatch):
        send = MagicMock(return_value=True)
        monkeypatch.setattr(email_service.settings, "EMAIL_ENABLED", True)
        monkeypatch.setattr(email_service.email_service, "send_interview_email", send)

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 201
        send.assert_called_once()
        event = send.call_args.args[0]
        assert event.candidate_email == "alice.smith@mail.example.com"
        assert event.cancelled is False
        assert len(event.panel_emails) == 2

    def test_email_failure_does_not_fail_scheduling(self, client, recruiter_headers, interview_payload, monkeypatch):
        monkeypatch.setattr(email_service.settings, "EMAIL_ENABLED", True)
        monkeypatch.setattr(
            email_service.email_service, "send_interview_email", MagicMock(side_effect=RuntimeError("SES down"))
        )

        response = client.post("/api/v1/interviews", json=interview_payload, headers=recruiter_headers)

        assert response.status_code == 201

    def test_interview_email_text(self, scheduled):
        event = interviews._event(scheduled, scheduled.scheduled_by)

        text = email_service.email_service._build_interview_text(event)

        assert "Senior Python Developer" in text
        assert "Format: Phone" in text
        assert "Duration: 60 minutes" in text


class TestStatusAndCancellation:
    """Tests for status changes"""

    def test_update_status(self, client, recruiter_headers, scheduled):
        response = client.patch(
            f"/api/v1/interviews/{scheduled.id}/status", json={"status": "in_progress"}, headers=recruiter_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"

    def test_cancel_interview(self, client, db_session, admin, recruiter_headers, scheduled):
        response = client.post(
            f"/api/v1/interviews/{scheduled.id}/cancel", json={"reason": "Candidate withdrew"}, headers=recruiter_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancelReason"] == "Candidate withdrew"
        notice = db_session.query(Notification).filter(
            Notification.type == NotificationType.INTERVIEW_CANCELLED,
            Notification.user_id == admin.id
        ).one()
        assert notice.message.endswith("Reason: Candidate withdrew")

    def test_cancel_twice_is_rejected(self, client, recruiter_headers, scheduled):
        client.post(f"/api/v1/interviews/{scheduled.id}/cancel", headers=recruiter_headers)

        response = client.post(f"/api/v1/interviews/{scheduled.id}/cancel", headers=recruiter_headers)

        assert response.status_code == 422

    def test_cancelled_interview_status_is_final(self, client, recruiter_headers, scheduled):
        client.post(f"/api/v1/interviews/{scheduled.id}/cancel", headers=recruiter_headers)

        response = client.patch(
            f"/api/v1/interviews/{scheduled.id}/status", json={"status": "completed"}, headers=recruiter_headers
        )

        assert response.status_code == 422

    def test_other_tenant_cannot_see_interview(self, client, outsider_headers, scheduled):
        response = client.get(f"/api/v1/interviews/{scheduled.id}", headers=outsider_headers)

        assert response.status_code == 404


class TestFeedback:
    """Tests for panel feedback"""

    def test_non_member_cannot_submit(self, client, recruiter_headers, scheduled):
        response = client.post(
            f"/api/v1/interviews/{scheduled.id}/feedback",
            json={"rating": 4, "recommendation": "hire"},
            headers=recruiter_headers,
        )

        assert response.status_code == 403

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, client, admin_headers, scheduled, rating):
        response = client.post(
            f"/api/v1/interviews/{scheduled.id}/feedback",
            json={"rating": rating, "recommendation": "hire"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert "rating" in response.json()["details"]

    def test_duplicate_feedback_is_rejected(self, client, admin_headers, scheduled):
        payload = {"rating": 5, "recommendation": "strong_hire", "comments": "Excellent"}
        first = client.post(f"/api/v1/interviews/{scheduled.id}/feedback", json=payload, headers=admin_headers)
        second = client.post(f"/api/v1/interviews/{scheduled.id}/feedback", json=payload, headers=admin_headers)

        assert first.status_code == 201
        assert first.json()["recommendation"] == "strong_hire"
        assert second.status_code == 422

    def test_last_feedback_completes_interview(self, db_session, company, admin, hiring_manager, scheduled):
        interviews.submit_feedback(db_session, scheduled.id, company.id, admin.id, 4, Recommendation.HIRE)
        assert interviews.get_interview(db_session, scheduled.id, company.id).status == InterviewStatus.SCHEDULED

        interviews.submit_feedback(db_session, scheduled.id, company.id, hiring_manager.id, 2, Recommendation.NO_HIRE)

        assert interviews.get_interview(db_session, scheduled.id, company.id).status == InterviewStatus.COMPLETED

    def test_feedback_status(self, client, db_session, company, admin, hiring_manager, admin_headers, scheduled):
        interviews.submit_feedback(db_session, scheduled.id, company.id, admin.id, 4, Recommendation.HIRE)

        response = client.get(f"/api/v1/interviews/{scheduled.id}/feedback-status", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert (data["total"], data["submitted"], data["pending"], data["percentage"]) == (2, 1, 1, 50)
        assert data["pendingMembers"] == [
            {"id": str(hiring_manager.id), "name": hiring_manager.name, "email": hiring_manager.email}
        ]

    def test_pending_feedback_alert(self, db_session, company, admin, scheduled):
        interviews.submit_feedback(db_session, scheduled.id, company.id, admin.id, 4, Recommendation.HIRE)

        alerts = sla.get_alerts(db_session, company.id, type="feedback")

        assert alerts["sla_breaches"] == []
        [pending] = alerts["pending_feedback"]
        assert pending["interview_id"] == scheduled.id
        assert pending["pending_members"] == ["Hank Manager"]
        assert pending["hours_since_interview"] == 3
