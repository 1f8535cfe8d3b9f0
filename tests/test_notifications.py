"""
Test suite for notifications.

Tests cover:
- Notification validation
- Inbox listing, read state and deletion
- Per-user isolation
- Interview feedback reminders
"""

import uuid
from datetime import timedelta

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models.interview import InterviewMode, Recommendation
from app.models.notification import Notification, NotificationType
from app.services import interviews, notifications, pipeline
from app.utils.time import utc_now


def notify(db, user, title="Heads up", message="Something happened", type=NotificationType.STAGE_CHANGE):
    notification = notifications.create_notification(db, user.id, type, title, message)
    db.commit()
    return notification


class TestCreateNotification:
    """Tests for notification validation"""

    @pytest.mark.parametrize("title, message, field", [
        ("", "Body", "title"),
        ("Title", "   ", "message"),
    ])
    def test_blank_fields_are_rejected(self, db_session, recruiter, title, message, field):
        with pytest.raises(ValidationError) as exc_info:
            notifications.create_notification(db_session, recruiter.id, NotificationType.STAGE_CHANGE, title, message)

        assert field in exc_info.value.details

    def test_unknown_user_is_rejected(self, db_session, recruiter):
        with pytest.raises(NotFoundError):
            notifications.create_notification(
                db_session, uuid.uuid4(), NotificationType.STAGE_CHANGE, "Title", "Body"
            )

    def test_notification_starts_unread(self, db_session, recruiter):
        notification = notify(db_session, recruiter)

        assert notification.is_read is False


class TestInbox:
    """Tests for the notification inbox endpoints"""

    def test_list_newest_first_with_unread_count(self, client, db_session, recruiter, recruiter_headers):
        notify(db_session, recruiter, title="First")
        notify(db_session, recruiter, title="Second")

        response = client.get("/api/v1/notifications", headers=recruiter_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["unreadCount"] == 2
        assert [n["title"] for n in data["notifications"]] == ["Second", "First"]

    def test_unread_only_and_limit(self, client, db_session, recruiter, recruiter_headers):
        read = notify(db_session, recruiter, title="Old")
        notifications.mark_as_read(db_session, read.id, recruiter.id)
        for index in range(3):
            notify(db_session, recruiter, title=f"New {index}")

        unread = client.get(
            "/api/v1/notifications", params={"unreadOnly": "true"}, headers=recruiter_headers
        ).json()
        limited = client.get("/api/v1/notifications", params={"limit": 2}, headers=recruiter_headers).json()

        assert "Old" not in [n["title"] for n in unread["notifications"]]
        assert unread["unreadCount"] == 3
        assert len(limited["notifications"]) == 2

    def test_mark_as_read(self, client, db_session, recruiter, recruiter_headers):
        notification = notify(db_session, recruiter)

        response = client.patch(f"/api/v1/notifications/{notification.id}/read", headers=recruiter_headers)

        assert response.status_code == 200
        assert response.json()["isRead"] is True
        count = client.get("/api/v1/notifications/unread-count", headers=recruiter_headers).json()
        assert count == {"unreadCount": 0}

    def test_mark_all_as_read_only_touches_caller(self, client, db_session, recruiter, admin, recruiter_headers):
        for _ in range(2):
            notify(db_session, recruiter)
            notify(db_session, admin)

        response = client.post("/api/v1/notifications/read-all", headers=recruiter_headers)

        assert response.status_code == 200
        assert response.json() == {"updatedCount": 2, "unreadCount": 0}
        assert notifications.get_unread_count(db_session, admin.id) == 2

    def test_other_users_notification_is_not_found(self, client, db_session, admin, recruiter_headers):
        notification = notify(db_session, admin)

        patched = client.patch(f"/api/v1/notifications/{notification.id}/read", headers=recruiter_headers)
        deleted = client.delete(f"/api/v1/notifications/{notification.id}", headers=recruiter_headers)

        assert patched.status_code == 404
        assert deleted.status_code == 404
        db_session.expire_all()
        assert db_session.get(Notification, notification.id).is_read is False

    def test_delete_notification(self, client, db_session, recruiter, recruiter_headers):
        notification = notify(db_session, recruiter)

        response = client.delete(f"/api/v1/notifications/{notification.id}", headers=recruiter_headers)

        assert response.status_code == 204
        assert db_session.query(Notification).count() == 0

    def test_listing_for_another_user_is_forbidden(self, client, admin, recruiter_headers):
        response = client.get(
            "/api/v1/notifications", params={"userId": str(admin.id)}, headers=recruiter_headers
        )

        assert response.status_code == 403


class TestDispatch:
    """Tests for event fan-out"""

    def test_inactive_users_are_skipped(self, db_session, company, recruiter, new_user, applications, stage):
        active = new_user("Andy Active")
        inactive = new_user("Ivy Inactive", is_active=False)

        pipeline.move_candidate(db_session, applications[0].id, stage("Screening").id, company.id, recruiter.id)

        recipients = {n.user_id for n in db_session.query(Notification).all()}
        assert active.id in recipients
        assert inactive.id not in recipients
        assert recruiter.id not in recipients


class TestFeedbackReminders:
    """Tests for overdue interview feedback reminders"""

    @pytest.fixture
    def past_interview(self, db_session, company, recruiter, admin, hiring_manager, applications):
        interview = interviews.schedule_interview(
            db_session,
            company_id=company.id,
            scheduled_by=recruiter.id,
            job_candidate_id=applications[0].id,
            scheduled_at=utc_now() - timedelta(days=2),
            duration=60,
            timezone="Europe/London",
            mode=InterviewMode.GOOGLE_MEET,
            panel_member_ids=[admin.id, hiring_manager.id],
        )
        return interview

    def test_reminds_members_missing_feedback(self, db_session, company, admin, hiring_manager, past_interview):
        interviews.submit_feedback(
            db_session, past_interview.id, company.id, admin.id, rating=4, recommendation=Recommendation.HIRE
        )

        result = notifications.send_feedback_reminders(db_session, hours_threshold=24)

        assert result.notifications_created == 1
        reminders = db_session.query(Notification).filter(
            Notification.type == NotificationType.FEEDBACK_PENDING
        ).all()
        assert [n.user_id for n in reminders] == [hiring_manager.id]
        assert reminders[0].entity_id == str(past_interview.id)

    def test_reminders_are_sent_once(self, db_session, past_interview):
        first = notifications.send_feedback_reminders(db_session, hours_threshold=24)
        second = notifications.send_feedback_reminders(db_session, hours_threshold=24)

        assert first.notifications_created == 2
        assert second.notifications_created == 0

    def test_recent_interviews_are_not_reminded(self, db_session, past_interview):
        result = notifications.send_feedback_reminders(db_session, hours_threshold=72)

        assert result.notifications_created == 0
