from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for records of the persisted dashboard document.

    Field names are snake_case in Python and camelCase on the wire. Models are
    frozen: changes go through ``model_copy(update=...)``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )
