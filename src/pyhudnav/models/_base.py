"""Base model for pyhudnav value types.

Every model inherits from :class:`HudNavBaseModel` which provides:

* frozen instances, so values handed to listeners on other threads
  cannot be mutated underneath them.
* ``alias_generator=to_camel`` so host payloads use camelCase keys
  while Python code uses snake_case fields.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HudNavBaseModel(BaseModel):
    """Base for immutable pyhudnav values."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
