"""
Base models for ContactGraph.
"""

from pydantic import BaseModel as PydanticBaseModel, ConfigDict


class BaseModel(PydanticBaseModel):
    """
    Base model for all ContactGraph data structures.

    Provides common configuration and utilities.
    """

    model_config = ConfigDict(
        # Allow field population by name or alias
        populate_by_name=True,
        # Validate assignments after object creation
        validate_assignment=True,
        # Use enum values instead of enum names
        use_enum_values=False,
        # Reject unknown fields
        extra="forbid",
    )


class FrozenModel(BaseModel):
    """
    Immutable variant used for values shared between components.

    Graph nodes, edges and transforms are read by several components and
    replaced wholesale rather than edited, so they are frozen.
    """

    model_config = ConfigDict(frozen=True)
