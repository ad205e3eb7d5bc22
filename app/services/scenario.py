"""Scenario resolver.

A selector is either ``"current"`` (the live document) or a budget scenario
id. Reads resolve the selector into the {buildings, tenants, assumptions,
adjustments} tuple the engine consumes; writes are routed back to whichever
owns the resolved assumptions and adjustments. Every function returns a new
document and leaves its input untouched.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from app.errors import DomainValidationError, DuplicateResourceError, NotFoundError
from app.schemas.budget import (
    BudgetAdjustment,
    BudgetAssumption,
    BudgetScenario,
    DataSnapshot,
)
from app.schemas.building import Building
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant

logger = logging.getLogger(__name__)

CURRENT = "current"


@dataclass(frozen=True)
class ResolvedData:
    selector: str
    buildings: list[Building]
    tenants: list[Tenant]
    assumptions: list[BudgetAssumption]
    adjustments: list[BudgetAdjustment]


def _get_scenario(document: ProjectData, scenario_id: str) -> BudgetScenario:
    scenario = document.scenario(scenario_id)
    if scenario is None:
        raise NotFoundError(f"Budget scenario '{scenario_id}' not found")
    return scenario


def default_selector(document: ProjectData) -> str:
    """The active scenario's id, or ``"current"`` when none is active."""
    active = next((s for s in document.budget_scenarios if s.is_active), None)
    return active.id if active else CURRENT


def resolve(document: ProjectData, selector: str = CURRENT) -> ResolvedData:
    """Resolve a selector into the data the engine should run on.

    A scenario without a frozen snapshot (or with a partial one) falls back
    to the live tenants and buildings.
    """
    if selector == CURRENT:
        return ResolvedData(
            selector=CURRENT,
            buildings=document.buildings,
            tenants=document.tenants,
            assumptions=document.budget_assumptions,
            adjustments=document.budget_adjustments,
        )

    scenario = _get_scenario(document, selector)
    snapshot = scenario.base_data_snapshot
    return ResolvedData(
        selector=scenario.id,
        buildings=snapshot.buildings if snapshot and snapshot.buildings is not None else document.buildings,
        tenants=snapshot.tenants if snapshot and snapshot.tenants is not None else document.tenants,
        assumptions=scenario.assumptions,
        adjustments=scenario.adjustments,
    )


def _replace_scenario(document: ProjectData, scenario_id: str, **update) -> ProjectData:
    _get_scenario(document, scenario_id)
    scenarios = [
        s.model_copy(update=update) if s.id == scenario_id else s
        for s in document.budget_scenarios
    ]
    return document.model_copy(update={"budget_scenarios": scenarios})


def update_assumptions(
    document: ProjectData, selector: str, assumptions: Sequence[BudgetAssumption]
) -> ProjectData:
    if selector == CURRENT:
        return document.model_copy(update={"budget_assumptions": list(assumptions)})
    return _replace_scenario(document, selector, assumptions=list(assumptions))


def update_adjustments(
    document: ProjectData, selector: str, adjustments: Sequence[BudgetAdjustment]
) -> ProjectData:
    if selector == CURRENT:
        return document.model_copy(update={"budget_adjustments": list(adjustments)})
    return _replace_scenario(document, selector, adjustments=list(adjustments))


def upsert_assumption(
    document: ProjectData, selector: str, assumption: BudgetAssumption
) -> ProjectData:
    """Store an assumption, replacing any other for the same (target, type)."""
    current = resolve(document, selector).assumptions
    others = [
        a
        for a in current
        if (a.target_id, a.target_type) != (assumption.target_id, assumption.target_type)
    ]
    return update_assumptions(document, selector, [*others, assumption])


def add_adjustment(
    document: ProjectData, selector: str, adjustment: BudgetAdjustment
) -> ProjectData:
    current = resolve(document, selector).adjustments
    if any(a.id == adjustment.id for a in current):
        raise DuplicateResourceError(f"Budget adjustment '{adjustment.id}' already exists")
    return update_adjustments(document, selector, [*current, adjustment])


def undo_last_adjustment(document: ProjectData, selector: str) -> ProjectData:
    current = resolve(document, selector).adjustments
    if not current:
        raise DomainValidationError("There is no budget adjustment to undo")
    return update_adjustments(document, selector, current[:-1])


def create_scenario(
    document: ProjectData,
    *,
    scenario_id: str,
    name: str,
    description: str = "",
    created_at: datetime | None = None,
    with_snapshot: bool = False,
) -> tuple[ProjectData, BudgetScenario]:
    """Create a scenario seeded with the live assumptions and adjustments.

    With ``with_snapshot`` the live tenants and buildings are frozen into the
    scenario so later contract edits do not change its projections.
    """
    if not name.strip():
        raise DomainValidationError("Scenario name must not be empty")
    if document.scenario(scenario_id) is not None:
        raise DuplicateResourceError(f"Budget scenario '{scenario_id}' already exists")

    snapshot = None
    if with_snapshot:
        snapshot = DataSnapshot(
            tenants=[t.model_copy(deep=True) for t in document.tenants],
            buildings=[b.model_copy(deep=True) for b in document.buildings],
        )
    scenario = BudgetScenario(
        id=scenario_id,
        name=name.strip(),
        description=description,
        created_at=created_at,
        is_active=False,
        assumptions=list(document.budget_assumptions),
        adjustments=list(document.budget_adjustments),
        base_data_snapshot=snapshot,
    )
    updated = document.model_copy(
        update={"budget_scenarios": [*document.budget_scenarios, scenario]}
    )
    return updated, scenario


def rename_scenario(
    document: ProjectData,
    scenario_id: str,
    name: str | None = None,
    description: str | None = None,
) -> ProjectData:
    update = {}
    if name is not None:
        if not name.strip():
            raise DomainValidationError("Scenario name must not be empty")
        update["name"] = name.strip()
    if description is not None:
        update["description"] = description
    return _replace_scenario(document, scenario_id, **update)


def delete_scenario(document: ProjectData, scenario_id: str) -> ProjectData:
    """Remove a scenario. Live assumptions and adjustments are not touched."""
    _get_scenario(document, scenario_id)
    scenarios = [s for s in document.budget_scenarios if s.id != scenario_id]
    logger.info("Deleted budget scenario %s", scenario_id)
    return document.model_copy(update={"budget_scenarios": scenarios})


def activate_scenario(document: ProjectData, scenario_id: str) -> ProjectData:
    """Make a scenario the live plan.

    Its assumptions and adjustments are copied into the live document and it
    becomes the only scenario flagged active.
    """
    scenario = _get_scenario(document, scenario_id)
    scenarios = [
        s.model_copy(update={"is_active": s.id == scenario_id})
        for s in document.budget_scenarios
    ]
    logger.info("Activated budget scenario %s (%s)", scenario.id, scenario.name)
    return document.model_copy(
        update={
            "budget_assumptions": list(scenario.assumptions),
            "budget_adjustments": list(scenario.adjustments),
            "budget_scenarios": scenarios,
        }
    )
