"""Narrative text for budget and dashboard figures.

All numbers are computed by the engine beforehand; the text-generation
service only describes them.
"""

import json
import logging

import httpx

from app.core.config import Settings
from app.errors import DomainValidationError, ExternalServiceError
from app.schemas.budget_view import BudgetDetail, ExecutionView
from app.schemas.dashboard import DashboardData

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "You are a property leasing analyst. Write a short analysis (at most 200 words) "
    "of the figures below. The figures are final: do not recalculate, correct or "
    "derive new numbers from them, quote them as given."
)


class NarrativeClient:
    """Client for the Gemini ``generateContent`` endpoint.

    Built once per process and shared; ``transport`` lets tests plug in an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NarrativeClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.narrative_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str) -> str:
        if not self.configured:
            raise DomainValidationError("Narrative generation is not configured (GEMINI_API_KEY)")

        try:
            response = await self._client.post(
                f"/models/{self.model}:generateContent",
                json={"contents": [{"parts": [{"text": prompt}]}]},
                headers={"x-goog-api-key": self.api_key},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Narrative request failed with status %s", e.response.status_code)
            raise ExternalServiceError(
                f"Narrative service failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("Narrative request failed: %s", e)
            raise ExternalServiceError(f"Narrative service request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("Narrative service returned invalid JSON") from e

        try:
            parts = body["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ExternalServiceError("Narrative service response has no text") from e
        if not text:
            raise ExternalServiceError("Narrative service returned empty text")
        return text


def build_prompt(topic: str, summary: dict) -> str:
    return f"{INSTRUCTIONS}\n\nTopic: {topic}\nFigures (JSON):\n{json.dumps(summary, ensure_ascii=False)}"


def budget_summary(kind: str, detail: BudgetDetail, execution: ExecutionView) -> dict:
    """Numeric summary handed to the narrative service for one budget topic."""
    if kind == "Execution":
        return {
            "year": execution.year,
            "budget": [m.budget for m in execution.months],
            "actual": [round(m.actual) for m in execution.months],
            "budgetTotal": execution.budget_total,
            "actualTotal": round(execution.actual_total),
            "completionRate": f"{execution.completion_rate}%",
        }
    if kind == "Occupancy":
        return {
            "year": detail.year,
            "monthlyOccupancyRate": [p.rate for p in detail.occupancy],
            "monthlyOccupiedArea": [p.occupied_area for p in detail.occupancy],
        }
    return {
        "year": detail.year,
        "monthlyRevenue": detail.column_totals,
        "annualRevenue": detail.grand_total,
        "revenueByCategory": {
            category: sum(r.total for r in detail.rows if r.category == category)
            for category in sorted({r.category for r in detail.rows})
        },
    }


def dashboard_summary(dashboard: DashboardData) -> dict:
    return {
        "year": dashboard.year,
        "quarter": dashboard.quarter,
        "occupancyRate": dashboard.occupancy_rate,
        "occupancyTarget": dashboard.annual_occupancy_target,
        "revenueTarget": dashboard.annual_revenue_target,
        "revenueCollected": dashboard.annual_revenue_collected,
        "periodReceivable": dashboard.monthly_revenue_target,
        "periodCollected": dashboard.monthly_revenue_collected,
        "collectionRate": f"{dashboard.collection_rate}%",
        "newContracts": dashboard.new_contracts_count,
        "expiringContracts": len(dashboard.expiring_soon),
        "monthlyReceivable": [t.revenue_target for t in dashboard.monthly_trends],
        "monthlyCollected": [t.revenue_collected for t in dashboard.monthly_trends],
    }
