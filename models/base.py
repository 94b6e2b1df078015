"""
Base schemas for all models.

Wire format is camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - camelCase aliases for JSON (accepts either spelling on input)
        - Validate on attribute assignment
        - Allow ORM/attribute objects (from_attributes)
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        validate_assignment=True
    )


class FrozenSchema(BaseSchema):
    """Immutable schema for values that must not change once produced."""
    model_config = ConfigDict(frozen=True)
