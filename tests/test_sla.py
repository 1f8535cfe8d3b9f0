"""
Test suite for SLA thresholds and evaluation.

Tests cover:
- Status classification
- Breach detection, ordering and scoping
- Per-role summaries
- Threshold configuration and validation
- The periodic breach sweep
"""

from datetime import timedelta

import pytest

from app.models.job import JobStatus
from app.models.job_candidate import StageHistory
from app.models.notification import Notification, NotificationType
from app.models.user import UserRole
from app.services import jobs, pipeline, sla
from app.services.sla import SLAStatus
from app.tasks.sla_tasks import sweep_sla_breaches
from app.utils.time import utc_now


@pytest.fixture
def screening_breach(db_session, company, recruiter, applications, stage, backdate):
    """Alice: 3 days in Screening against a 1 day threshold."""
    sla.update_config(db_session, company.id, "Screening", 1)
    jc = applications[0]
    pipeline.move_candidate(db_session, jc.id, stage("Screening").id, company.id, recruiter.id)
    backdate(jc, days=3)
    return jc


class TestClassification:
    """Tests for the on_track / at_risk / breached rule"""

    @pytest.mark.parametrize("days, threshold, expected", [
        (0, 5, SLAStatus.ON_TRACK),
        (3, 5, SLAStatus.ON_TRACK),
        (4, 5, SLAStatus.AT_RISK),
        (5, 5, SLAStatus.AT_RISK),
        (6, 5, SLAStatus.BREACHED),
        (0, 1, SLAStatus.ON_TRACK),
        (1, 1, SLAStatus.AT_RISK),
        (2, 1, SLAStatus.BREACHED),
    ])
    def test_classify(self, days, threshold, expected):
        assert sla.classify(days, threshold, at_risk_ratio=0.8) == expected

    def test_ratio_comes_from_settings(self, monkeypatch):
        monkeypatch.setattr(sla.settings, "SLA_AT_RISK_RATIO", 0.5)

        assert sla.classify(5, 10) == SLAStatus.AT_RISK
        assert sla.classify(4, 10) == SLAStatus.ON_TRACK


class TestBreaches:
    """Tests for breach detection"""

    def test_breach_reports_days_overdue(self, client, recruiter_headers, screening_breach):
        response = client.get("/api/v1/sla/breaches", headers=recruiter_headers)

        assert response.status_code == 200
        breaches = response.json()
        assert len(breaches) == 1
        breach = breaches[0]
        assert breach["id"] == f"sla-{screening_breach.id}"
        assert breach["candidateName"] == "Alice Smith"
        assert breach["jobTitle"] == "Senior Python Developer"
        assert breach["stageName"] == "Screening"
        assert breach["daysInStage"] == 3
        assert breach["thresholdDays"] == 1
        assert breach["daysOverdue"] == 2
        assert breach["status"] == "breached"

    def test_moving_out_clears_breach(self, db_session, company, recruiter, screening_breach, stage):
        pipeline.move_candidate(db_session, screening_breach.id, stage("Interview").id, company.id, recruiter.id)

        assert sla.check_sla_breaches(db_session, company.id) == []

    def test_days_are_whole_days(self, db_session, company, applications, backdate):
        sla.update_config(db_session, company.id, "Applied", 2)
        backdate(applications[0], days=2, hours=23)

        evaluation = sla.check_candidate_sla(db_session, applications[0].id, company.id)

        assert evaluation.days_in_stage == 2
        assert evaluation.status == SLAStatus.AT_RISK

    def test_stage_without_threshold_is_excluded(self, client, db_session, company, recruiter_headers, applications, backdate):
        sla.update_config(db_session, company.id, "Screening", 1)
        backdate(applications[0], days=30)

        assert sla.evaluate_company(db_session, company.id) == []
        response = client.get(
            f"/api/v1/sla/applications/{applications[0].id}/status", headers=recruiter_headers
        )
        assert response.status_code == 200
        assert response.json() == {"status": None, "evaluation": None}

    def test_stage_names_match_case_insensitively(self, db_session, company, applications, backdate):
        sla.update_config(db_session, company.id, "applied", 1)
        backdate(applications[0], days=4)

        breaches = sla.check_sla_breaches(db_session, company.id)

        assert [b.job_candidate_id for b in breaches] == [applications[0].id]

    def test_inactive_jobs_are_ignored(self, db_session, company, job, applications, backdate):
        sla.update_config(db_session, company.id, "Applied", 1)
        backdate(applications[0], days=4)
        job.status = JobStatus.ON_HOLD
        db_session.commit()

        assert sla.check_sla_breaches(db_session, company.id) == []

    def test_applied_at_fallback_without_history(self, db_session, company, applications):
        sla.update_config(db_session, company.id, "Applied", 3)
        jc = applications[0]
        db_session.query(StageHistory).filter(StageHistory.job_candidate_id == jc.id).delete()
        jc.applied_at = utc_now() - timedelta(days=5, hours=1)
        db_session.commit()

        evaluation = sla.check_candidate_sla(db_session, jc.id, company.id)

        assert evaluation.days_in_stage == 5
        assert evaluation.status == SLAStatus.BREACHED

    def test_breaches_sorted_by_days_overdue(self, db_session, company, applications, backdate):
        sla.update_config(db_session, company.id, "Applied", 1)
        for jc, days in zip(applications, (3, 9, 5)):
            backdate(jc, days=days)

        breaches = sla.check_sla_breaches(db_session, company.id)

        assert [b.days_overdue for b in breaches] == [8, 4, 2]
        assert breaches[0].candidate_name == "Bob Jones"

    def test_other_tenants_are_not_evaluated(self, db_session, other_company, screening_breach):
        assert sla.check_sla_breaches(db_session, other_company.id) == []


class TestRoleSummary:
    """Tests for the worst-status-per-role summary"""

    def test_roles_sorted_worst_first(self, client, db_session, company, recruiter_headers, screening_breach):
        quiet_job = jobs.create_job(db_session, company.id, "Data Engineer")
        closed_job = jobs.create_job(db_session, company.id, "Old Role", status=JobStatus.CLOSED)

        response = client.get("/api/v1/sla/roles", headers=recruiter_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {"onTrack": 1, "atRisk": 0, "breached": 1}
        roles = data["roles"]
        assert [role["roleName"] for role in roles] == ["Senior Python Developer", "Data Engineer"]
        assert roles[0]["status"] == "breached"
        assert roles[0]["candidatesBreaching"] == 1
        assert roles[1]["roleId"] == str(quiet_job.id)
        assert roles[1]["status"] == "on_track"
        assert str(closed_job.id) not in {role["roleId"] for role in roles}

    def test_worst_status_wins(self, db_session, company, applications, backdate):
        sla.update_config(db_session, company.id, "Applied", 5)
        backdate(applications[0], days=1)
        backdate(applications[1], days=4)

        result = sla.get_role_summary(db_session, company.id)

        assert result["roles"][0].status == SLAStatus.AT_RISK
        assert result["summary"] == {"on_track": 0, "at_risk": 1, "breached": 0}


class TestConfiguration:
    """Tests for threshold configuration"""

    def test_get_config_includes_defaults(self, client, recruiter_headers):
        response = client.get("/api/v1/sla/config", headers=recruiter_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["configs"] == []
        assert {"stageName": "Screening", "thresholdDays": 5} in data["defaults"]

    def test_upsert_trims_and_updates(self, client, recruiter_headers):
        first = client.put(
            "/api/v1/sla/config", json={"stageName": "  Screening ", "thresholdDays": 4}, headers=recruiter_headers
        )
        second = client.put(
            "/api/v1/sla/config", json={"stageName": "Screening", "thresholdDays": 6}, headers=recruiter_headers
        )

        assert first.status_code == 200
        assert first.json()["stageName"] == "Screening"
        assert second.json()["id"] == first.json()["id"]
        configs = client.get("/api/v1/sla/config", headers=recruiter_headers).json()["configs"]
        assert [(c["stageName"], c["thresholdDays"]) for c in configs] == [("Screening", 6)]

    def test_stage_name_case_variants_share_one_threshold(
        self, client, db_session, company, recruiter_headers, applications, backdate
    ):
        """Test a case variant updates the existing threshold instead of adding one"""
        client.put("/api/v1/sla/config", json={"stageName": "applied", "thresholdDays": 1}, headers=recruiter_headers)
        response = client.put(
            "/api/v1/sla/config", json={"stageName": "Applied", "thresholdDays": 10}, headers=recruiter_headers
        )
        backdate(applications[0], days=3)

        assert response.status_code == 200
        configs = client.get("/api/v1/sla/config", headers=recruiter_headers).json()["configs"]
        assert [(c["stageName"], c["thresholdDays"]) for c in configs] == [("Applied", 10)]
        assert sla.check_sla_breaches(db_session, company.id) == []
        evaluation = sla.check_candidate_sla(db_session, applications[0].id, company.id)
        assert evaluation.threshold_days == 10
        assert evaluation.status == SLAStatus.ON_TRACK

    def test_delete_ignores_case(self, client, db_session, company, recruiter_headers):
        sla.update_config(db_session, company.id, "Offer", 3)

        response = client.delete("/api/v1/sla/config/OFFER", headers=recruiter_headers)

        assert response.status_code == 204
        assert sla.get_configs(db_session, company.id) == []

    def test_batch_update(self, client, recruiter_headers):
        response = client.put(
            "/api/v1/sla/config",
            json={"configs": [
                {"stageName": "Applied", "thresholdDays": 2},
                {"stageName": "Offer", "thresholdDays": 3},
            ]},
            headers=recruiter_headers,
        )

        assert response.status_code == 200
        assert sorted(c["stageName"] for c in response.json()) == ["Applied", "Offer"]

    @pytest.mark.parametrize("payload, field", [
        ({"stageName": "Screening", "thresholdDays": 0}, "thresholdDays"),
        ({"stageName": "Screening", "thresholdDays": -3}, "thresholdDays"),
        ({"stageName": "Screening", "thresholdDays": 2.5}, "thresholdDays"),
        ({"stageName": "Screening"}, "thresholdDays"),
        ({"stageName": "  ", "thresholdDays": 3}, "stageName"),
    ])
    def test_invalid_threshold_is_rejected(self, client, recruiter_headers, payload, field):
        response = client.put("/api/v1/sla/config", json=payload, headers=recruiter_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert field in body["details"]

    def test_invalid_batch_writes_nothing(self, client, db_session, company, recruiter_headers):
        response = client.put(
            "/api/v1/sla/config",
            json={"configs": [
                {"stageName": "Applied", "thresholdDays": 2},
                {"stageName": "Offer", "thresholdDays": 0},
            ]},
            headers=recruiter_headers,
        )

        assert response.status_code == 422
        assert "configs[1].thresholdDays" in response.json()["details"]
        assert sla.get_configs(db_session, company.id) == []

    def test_whole_float_is_accepted(self, db_session, company):
        config = sla.update_config(db_session, company.id, "Offer", 3.0)

        assert config.threshold_days == 3

    def test_other_company_id_is_forbidden(self, client, recruiter_headers, other_company):
        response = client.get(
            "/api/v1/sla/config", params={"companyId": str(other_company.id)}, headers=recruiter_headers
        )

        assert response.status_code == 403

    def test_apply_defaults(self, client, recruiter_headers):
        response = client.post("/api/v1/sla/config/apply-defaults", headers=recruiter_headers)

        assert response.status_code == 200
        assert len(response.json()) == len(sla.DEFAULT_THRESHOLDS)

    def test_delete_config(self, client, db_session, company, recruiter_headers):
        sla.update_config(db_session, company.id, "Offer", 3)

        deleted = client.delete("/api/v1/sla/config/Offer", headers=recruiter_headers)
        missing = client.delete("/api/v1/sla/config/Offer", headers=recruiter_headers)

        assert deleted.status_code == 204
        assert missing.status_code == 404


class TestAlerts:
    """Tests for the combined alerts view"""

    def test_sla_alerts(self, client, recruiter_headers, screening_breach):
        response = client.get("/api/v1/sla/alerts", params={"type": "sla"}, headers=recruiter_headers)

        assert response.status_code == 200
        data = response.json()
        assert [a["jobCandidateId"] for a in data["slaBreaches"]] == [str(screening_breach.id)]
        assert data["pendingFeedback"] == []

    def test_unknown_alert_type_is_rejected(self, client, recruiter_headers):
        response = client.get("/api/v1/sla/alerts", params={"type": "everything"}, headers=recruiter_headers)

        assert response.status_code == 422


class TestBreachSweep:
    """Tests for the periodic breach notification sweep"""

    def test_sweep_notifies_managers_and_assigned_recruiter(self, db_session, admin, hiring_manager, recruiter, new_user, screening_breach):
        bystander = new_user("Bea Bystander", UserRole.RECRUITER)

        result = sweep_sla_breaches(db_session)

        assert result == {"companies": 1, "notifications_created": 3, "errors": []}
        alerts = db_session.query(Notification).filter(Notification.type == NotificationType.SLA_BREACH).all()
        assert {n.user_id for n in alerts} == {admin.id, hiring_manager.id, recruiter.id}
        assert bystander.id not in {n.user_id for n in alerts}
        assert alerts[0].entity_type == "job_candidate"
        assert alerts[0].entity_id == str(screening_breach.id)
        assert "2 days overdue" in alerts[0].message

    def test_sweep_does_not_repeat_unread_alerts(self, db_session, admin, screening_breach):
        sweep_sla_breaches(db_session)

        second = sweep_sla_breaches(db_session)

        assert second["notifications_created"] == 0

    def test_sweep_alerts_again_once_read(self, db_session, admin, screening_breach):
        sweep_sla_breaches(db_session)
        db_session.query(Notification).update({Notification.is_read: True})
        db_session.commit()

        again = sweep_sla_breaches(db_session)

        # admin and the assigned recruiter
        assert again["notifications_created"] == 2
