from app.db.models.project import Project
from app.db.models.snapshot import Snapshot

__all__ = ["Project", "Snapshot"]
