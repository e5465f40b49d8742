from pydantic import BaseModel, ConfigDict, Field


class EntitySchema(BaseModel):
    """Response built straight from a domain dataclass"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str | None = Field(None, validation_alias="_id")
