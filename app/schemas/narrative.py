from typing import Literal

from app.schemas.base import CamelModel

NarrativeKind = Literal["Occupancy", "Revenue", "Execution"]


class BudgetNarrativeRequest(CamelModel):
    kind: NarrativeKind
    year: int


class NarrativeResponse(CamelModel):
    text: str
