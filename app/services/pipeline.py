"""
Stage transition service.

Moves applications (JobCandidate rows) between the pipeline stages of their
job. Every move is one small transaction:

    1. close the open StageHistory row
    2. open a StageHistory row for the target stage
    3. point JobCandidate.current_stage_id at the target
    4. record a stage_change activity on the candidate

and once it is committed the stage-change event is handed to the post-commit
hooks (notifications). Bulk moves repeat this per application; a failure on
one application is recorded and the rest of the batch carries on.

Stages are not a state machine: any stage of a job can move to any other
stage of the same job. Concurrent moves of the same application are
last-write-wins on current_stage_id.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AppError, NotFoundError, ValidationError
from app.crud import candidate as candidate_crud
from app.crud import job as job_crud
from app.models.activity import ActivityType, CandidateActivity
from app.models.job import PipelineStage
from app.models.job_candidate import JobCandidate
from app.services import notifications, stage_history
from app.services.hooks import StageChangeEvent, run_post_commit_hooks

logger = logging.getLogger(__name__)

REJECTION_KEYWORDS = ("reject", "declined", "not selected")

STAGE_CHANGE_HOOKS = [notifications.dispatch_stage_change]


def is_rejection_stage(stage_name: str) -> bool:
    name = stage_name.lower()
    return any(keyword in name for keyword in REJECTION_KEYWORDS)


def _require_comment_for_rejection(stage: PipelineStage, comment: Optional[str]) -> None:
    if is_rejection_stage(stage.name) and not (comment and comment.strip()):
        raise ValidationError({"comment": ["A comment is required when moving to a rejection stage"]})


@dataclass
class MoveResult:
    job_candidate: JobCandidate
    # None when the application was already in the target stage
    activity: Optional[CandidateActivity]
    event: Optional[StageChangeEvent] = None

    @property
    def changed(self) -> bool:
        return self.event is not None


@dataclass
class BulkMoveFailure:
    candidate_id: UUID
    candidate_name: Optional[str]
    error: str


@dataclass
class BulkMoveResult:
    moved_count: int = 0
    failures: List[BulkMoveFailure] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def is_partial(self) -> bool:
        return self.moved_count > 0 and self.failed_count > 0


def _apply_move(
    db: Session,
    job_candidate: JobCandidate,
    target_stage: PipelineStage,
    moved_by: UUID,
    comment: Optional[str],
    bulk: bool
) -> MoveResult:
    """
    Apply one move and commit it. Rolls back and re-raises on any failure, so
    the application is left in its previous stage.
    """
    if job_candidate.current_stage_id == target_stage.id:
        return MoveResult(job_candidate=job_candidate, activity=None)

    old_stage = job_candidate.current_stage
    comment = comment.strip() if comment and comment.strip() else None

    # Snapshot before commit expires the instances
    event = StageChangeEvent(
        company_id=job_candidate.job.company_id,
        job_candidate_id=job_candidate.id,
        candidate_id=job_candidate.candidate_id,
        candidate_name=job_candidate.candidate.name,
        job_id=job_candidate.job_id,
        job_title=job_candidate.job.title,
        from_stage_name=old_stage.name,
        to_stage_name=target_stage.name,
        actor_id=moved_by,
        comment=comment,
    )

    description = f"Moved from {old_stage.name} to {target_stage.name}"
    if comment:
        description += f". Comment: {comment}"

    try:
        stage_history.record_transition(
            db, job_candidate.id, target_stage, comment=comment, moved_by=moved_by
        )
        job_candidate.current_stage_id = target_stage.id
        activity = candidate_crud.create_activity(
            db,
            candidate_id=job_candidate.candidate_id,
            activity_type=ActivityType.STAGE_CHANGE,
            description=description,
            job_candidate_id=job_candidate.id,
            metadata={
                "fromStageId": str(old_stage.id),
                "fromStageName": old_stage.name,
                "toStageId": str(target_stage.id),
                "toStageName": target_stage.name,
                "comment": comment,
                "bulkMove": bulk,
            },
            created_by=moved_by,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(job_candidate)
    db.refresh(activity)
    logger.info(
        f"Moved job candidate {event.job_candidate_id} from '{event.from_stage_name}' "
        f"to '{event.to_stage_name}' (by {moved_by})"
    )
    return MoveResult(job_candidate=job_candidate, activity=activity, event=event)


def move_candidate(
    db: Session,
    job_candidate_id: UUID,
    target_stage_id: UUID,
    company_id: UUID,
    moved_by: UUID,
    comment: Optional[str] = None
) -> MoveResult:
    """
    Move one application to another stage of its job.

    Raises:
        NotFoundError: Application missing or owned by another company
        ValidationError: Target stage not in the job pipeline, or a rejection
            stage without a comment
    """
    job_candidate = candidate_crud.get_application_for_company(db, job_candidate_id, company_id)
    if job_candidate is None:
        raise NotFoundError("Job candidate")

    target_stage = job_crud.get_stage(db, target_stage_id)
    if target_stage is None or target_stage.job_id != job_candidate.job_id:
        raise ValidationError({"targetStageId": ["Target stage not found in this job pipeline"]})

    _require_comment_for_rejection(target_stage, comment)

    result = _apply_move(db, job_candidate, target_stage, moved_by, comment, bulk=False)
    if result.changed:
        run_post_commit_hooks(db, STAGE_CHANGE_HOOKS, result.event)
        db.refresh(result.job_candidate)
    return result


def bulk_move(
    db: Session,
    job_candidate_ids: Sequence[UUID],
    target_stage_id: UUID,
    job_id: UUID,
    company_id: UUID,
    moved_by: UUID,
    comment: Optional[str] = None
) -> BulkMoveResult:
    """
    Move several applications of one job to the same stage.

    Batch-level problems (no ids, unknown job, stage outside the job, missing
    rejection comment) raise before anything is moved. Per-application
    problems are collected in the result's failures.
    """
    if not job_candidate_ids:
        raise ValidationError({"candidateIds": ["At least one candidate ID is required"]})

    job = job_crud.get_for_company(db, job_id, company_id)
    if job is None:
        raise NotFoundError("Job")

    target_stage = next((stage for stage in job.stages if stage.id == target_stage_id), None)
    if target_stage is None:
        raise ValidationError({"targetStageId": ["Target stage not found in this job pipeline"]})

    _require_comment_for_rejection(target_stage, comment)
    target_stage_name = target_stage.name

    result = BulkMoveResult()
    # Repeated ids move once
    for job_candidate_id in list(dict.fromkeys(job_candidate_ids)):
        candidate_name = None
        try:
            job_candidate = candidate_crud.get_application_for_company(db, job_candidate_id, company_id)
            if job_candidate is None:
                raise NotFoundError("Job candidate")
            candidate_name = job_candidate.candidate.name
            if job_candidate.job_id != job_id:
                raise ValidationError({"jobCandidateId": ["Candidate does not belong to the specified job"]})

            moved = _apply_move(db, job_candidate, target_stage, moved_by, comment, bulk=True)
        except (AppError, SQLAlchemyError) as e:
            db.rollback()
            logger.warning(f"Bulk move skipped job candidate {job_candidate_id}: {_describe(e)}")
            result.failures.append(BulkMoveFailure(job_candidate_id, candidate_name, _describe(e)))
            continue

        result.moved_count += 1
        if moved.changed:
            run_post_commit_hooks(db, STAGE_CHANGE_HOOKS, moved.event)

    logger.info(
        f"Bulk move to '{target_stage_name}' on job {job_id}: "
        f"{result.moved_count} moved, {result.failed_count} failed"
    )
    return result


def _describe(error: Exception) -> str:
    if not isinstance(error, AppError):
        return str(error)
    if error.details:
        return "; ".join(message for messages in error.details.values() for message in messages)
    return error.message
