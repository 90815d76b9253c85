"""Base pydantic model for wire payloads.

The mobile client speaks camelCase (playerId, currentPrice, unrealizedPL), so
every outbound schema serializes by alias. Python code keeps snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
