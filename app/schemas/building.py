from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel

UnitStatus = Literal["Vacant", "Occupied", "Reserved", "Renovating"]


class Unit(CamelModel):
    id: str
    name: str = ""
    floor: int | None = None
    area: float = Field(0, ge=0)
    status: UnitStatus = "Vacant"
    is_self_use: bool = False


class Building(CamelModel):
    id: str
    name: str = ""
    units: list[Unit] = Field(default_factory=list)


def self_use_unit_ids(buildings: list[Building]) -> frozenset[str]:
    """Ids of units the operator occupies itself."""
    return frozenset(u.id for b in buildings for u in b.units if u.is_self_use)


def leasable_area(buildings: list[Building]) -> float:
    return sum(u.area for b in buildings for u in b.units if not u.is_self_use)


def find_unit(buildings: list[Building], unit_id: str) -> tuple[Building, Unit] | None:
    for building in buildings:
        for unit in building.units:
            if unit.id == unit_id:
                return building, unit
    return None
