"""
Pipeline stage management: list, insert, reorder and delete the stages of a job.

Positions stay contiguous (0..n-1) after every operation.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.crud import job as job_crud
from app.models.job import Job, PipelineStage

logger = logging.getLogger(__name__)


def _get_job(db: Session, job_id: UUID, company_id: UUID) -> Job:
    job = job_crud.get_for_company(db, job_id, company_id)
    if job is None:
        raise NotFoundError("Job")
    return job


def _get_stage(db: Session, stage_id: UUID, company_id: UUID) -> PipelineStage:
    stage = job_crud.get_stage(db, stage_id)
    if stage is None or stage.job.company_id != company_id:
        raise NotFoundError("Pipeline stage")
    return stage


def get_stages(db: Session, job_id: UUID, company_id: UUID) -> List[PipelineStage]:
    _get_job(db, job_id, company_id)
    return job_crud.get_stages(db, job_id)


def insert_stage(db: Session, job_id: UUID, company_id: UUID, name: str, position: int) -> PipelineStage:
    """
    Insert a custom stage at `position`, shifting stages at or after it down.
    """
    if not name or not name.strip():
        raise ValidationError({"name": ["Stage name is required"]})
    if position < 0:
        raise ValidationError({"position": ["Position must be non-negative"]})

    _get_job(db, job_id, company_id)
    count = len(job_crud.get_stages(db, job_id))
    if position > count:
        raise ValidationError({"position": [f"Position must be between 0 and {count}"]})

    job_crud.shift_stage_positions(db, job_id, delta=1, min_position=position)
    stage = PipelineStage(job_id=job_id, name=name.strip(), position=position, is_default=False)
    db.add(stage)
    db.commit()
    db.refresh(stage)

    logger.info(f"Inserted stage '{stage.name}' at position {position} on job {job_id}")
    return stage


def reorder_stage(db: Session, stage_id: UUID, company_id: UUID, new_position: int) -> List[PipelineStage]:
    """
    Move a stage to `new_position`, shifting the stages in between.

    Returns:
        All stages of the job in their new order
    """
    stage = _get_stage(db, stage_id, company_id)
    job_id = stage.job_id
    old_position = stage.position

    if new_position < 0:
        raise ValidationError({"newPosition": ["Position must be non-negative"]})

    count = len(job_crud.get_stages(db, job_id))
    if new_position >= count:
        raise ValidationError({"newPosition": [f"Position must be between 0 and {count - 1}"]})

    if new_position != old_position:
        if new_position > old_position:
            job_crud.shift_stage_positions(
                db, job_id, delta=-1, min_position=old_position + 1, max_position=new_position
            )
        else:
            job_crud.shift_stage_positions(
                db, job_id, delta=1, min_position=new_position, max_position=old_position - 1
            )
        stage.position = new_position
        db.commit()
        logger.info(f"Moved stage {stage_id} from position {old_position} to {new_position}")

    return job_crud.get_stages(db, job_id)


def delete_stage(db: Session, stage_id: UUID, company_id: UUID) -> None:
    """
    Delete a custom stage and close the gap it leaves.

    Raises:
        ValidationError: Default stage, or candidates still in the stage
    """
    stage = _get_stage(db, stage_id, company_id)
    if stage.is_default:
        raise ValidationError({"stage": ["Cannot delete default pipeline stages"]})
    if job_crud.count_candidates_in_stage(db, stage.id):
        raise ValidationError({"stage": ["Cannot delete a stage that still has candidates"]})

    job_id = stage.job_id
    position = stage.position
    db.delete(stage)
    db.flush()
    job_crud.shift_stage_positions(db, job_id, delta=-1, min_position=position + 1)
    db.commit()

    logger.info(f"Deleted stage {stage_id} from job {job_id}")
