from sqlalchemy.orm import Session

from app.db.models.snapshot import Snapshot as SnapshotModel


def get_snapshot(db: Session, project_id: int, snapshot_id: int) -> SnapshotModel | None:
    """Get a snapshot by ID, scoped to its project."""
    return (
        db.query(SnapshotModel)
        .filter(SnapshotModel.id == snapshot_id, SnapshotModel.project_id == project_id)
        .first()
    )


def list_snapshots(db: Session, project_id: int) -> list[SnapshotModel]:
    """List a project's snapshots, newest first."""
    return (
        db.query(SnapshotModel)
        .filter(SnapshotModel.project_id == project_id)
        .order_by(SnapshotModel.created_at.desc(), SnapshotModel.id.desc())
        .all()
    )


def create_snapshot(db: Session, project_id: int, note: str, data: dict) -> SnapshotModel:
    """Create a new snapshot in the database. Pure data access - no business logic."""
    db_snapshot = SnapshotModel(project_id=project_id, note=note, data=data)
    db.add(db_snapshot)
    db.commit()
    db.refresh(db_snapshot)
    return db_snapshot
