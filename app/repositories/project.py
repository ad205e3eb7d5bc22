from sqlalchemy.orm import Session

from app.db.models.project import Project as ProjectModel
from app.errors import NotFoundError


def get_project_by_id(db: Session, project_id: int) -> ProjectModel | None:
    """Get a project by ID."""
    return db.query(ProjectModel).filter(ProjectModel.id == project_id).first()


def get_all_projects(db: Session) -> list[ProjectModel]:
    """Get all projects ordered by name."""
    return db.query(ProjectModel).order_by(ProjectModel.name).all()


def create_project(db: Session, name: str, data: dict) -> ProjectModel:
    """Create a new project in the database. Pure data access - no business logic."""
    db_project = ProjectModel(name=name, data=data)
    db.add(db_project)
    db.commit()
    db.refresh(db_project)
    return db_project


def update_project_data(db: Session, project_id: int, data: dict) -> ProjectModel:
    """Replace the stored document of a project."""
    project = get_project_by_id(db, project_id)
    if not project:
        raise NotFoundError("Project not found")

    project.data = data
    db.commit()
    db.refresh(project)
    return project
