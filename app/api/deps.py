from fastapi import HTTPException, Request, status

from app.db import SessionLocal
from app.domain.calendar import parse_month
from app.services.narrative import NarrativeClient


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_narrative_client(request: Request) -> NarrativeClient:
    """The process-wide narrative client created at application startup."""
    return request.app.state.narrative_client


def month_param(value: str) -> tuple[int, int]:
    """Parse a ``YYYY-MM`` request value, answering 422 when it is not a real month."""
    try:
        return parse_month(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
