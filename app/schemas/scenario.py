from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class ScenarioCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    with_snapshot: bool = Field(
        False, description="Freeze the live tenants and buildings into the scenario"
    )


class ScenarioUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None

    @model_validator(mode="after")
    def validate_not_empty(self):
        if self.name is None and self.description is None:
            raise ValueError("Provide a name or a description")
        return self
