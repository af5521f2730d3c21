"""Shared Pydantic base model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CycleKeeperBase(BaseModel):
    """Base model with shared config for all CycleKeeper schemas.

    Python attributes are snake_case; the canonical JSON form (local cache,
    export, HTTP surface) uses camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
