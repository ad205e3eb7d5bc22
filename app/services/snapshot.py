"""Snapshot store: save, list and fetch whole project documents.

Calls report failure through ``StoreResult`` instead of raising, so callers
decide whether a miss is an error.
"""

import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import app.repositories.snapshot as snapshot_repo
from app.errors import NotFoundError
from app.schemas.project import ProjectData
from app.schemas.snapshot import SnapshotMeta, StoreResult
from app.services.project import dump_document, get_project, load_document, save_document

logger = logging.getLogger(__name__)


def save_snapshot(db: Session, project_id: int, note: str = "") -> StoreResult[SnapshotMeta]:
    document = load_document(db, project_id)
    try:
        snapshot = snapshot_repo.create_snapshot(
            db, project_id=project_id, note=note, data=dump_document(document)
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Saving snapshot of project %s failed: %s", project_id, e)
        return StoreResult(success=False, message="Snapshot could not be saved")
    return StoreResult(
        success=True, data=SnapshotMeta.model_validate(snapshot), message="Snapshot saved"
    )


def list_snapshots(db: Session, project_id: int) -> StoreResult[list[SnapshotMeta]]:
    get_project(db, project_id)
    snapshots = snapshot_repo.list_snapshots(db, project_id)
    return StoreResult(
        success=True,
        data=[SnapshotMeta.model_validate(s) for s in snapshots],
        message=f"{len(snapshots)} snapshot(s)",
    )


def fetch_snapshot(db: Session, project_id: int, snapshot_id: int) -> StoreResult[ProjectData]:
    snapshot = snapshot_repo.get_snapshot(db, project_id, snapshot_id)
    if snapshot is None:
        return StoreResult(success=False, message=f"Snapshot {snapshot_id} not found")
    try:
        document = ProjectData.model_validate(snapshot.data)
    except ValidationError as e:
        logger.warning("Snapshot %s of project %s is unreadable: %s", snapshot_id, project_id, e)
        return StoreResult(success=False, message=f"Snapshot {snapshot_id} is unreadable")
    return StoreResult(success=True, data=document, message="Snapshot fetched")


def restore_snapshot(db: Session, project_id: int, snapshot_id: int) -> ProjectData:
    """Overwrite the live document with a snapshot."""
    result = fetch_snapshot(db, project_id, snapshot_id)
    if not result.success or result.data is None:
        raise NotFoundError(result.message)
    logger.info("Restoring project %s from snapshot %s", project_id, snapshot_id)
    return save_document(db, project_id, result.data)
