from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.errors import NotFoundError
from app.schemas.project import ProjectData
from app.schemas.snapshot import SnapshotCreate, SnapshotMeta, StoreResult
from app.services.snapshot import fetch_snapshot, list_snapshots, restore_snapshot, save_snapshot

router = APIRouter(prefix="/projects/{project_id}/snapshots", tags=["snapshots"])


@router.post("", response_model=StoreResult[SnapshotMeta], status_code=status.HTTP_201_CREATED)
def create_snapshot(
    project_id: int, snapshot_data: SnapshotCreate, db: Session = Depends(get_db)
):
    """Save the current document as a snapshot with a note."""
    return save_snapshot(db, project_id, note=snapshot_data.note)


@router.get("", response_model=StoreResult[list[SnapshotMeta]])
def get_all_snapshots(project_id: int, db: Session = Depends(get_db)):
    """Snapshot metadata, newest first."""
    return list_snapshots(db, project_id)


@router.get("/{snapshot_id}", response_model=StoreResult[ProjectData])
def get_snapshot(project_id: int, snapshot_id: int, db: Session = Depends(get_db)):
    result = fetch_snapshot(db, project_id, snapshot_id)
    if not result.success:
        raise NotFoundError(result.message)
    return result


@router.post("/{snapshot_id}/restore", response_model=ProjectData)
def restore_snapshot_by_id(project_id: int, snapshot_id: int, db: Session = Depends(get_db)):
    """Overwrite the live document with the snapshot."""
    return restore_snapshot(db, project_id, snapshot_id)
