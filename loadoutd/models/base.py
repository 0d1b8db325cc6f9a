"""Shared base for loadoutd request and response bodies."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class CamelCaseModel(BaseModel):
    """Body model that reads and writes camelCase keys (``selectedKeys``) but accepts field names too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
