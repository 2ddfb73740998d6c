"""Base pydantic model shared by domain and API models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire.

    Input accepts either spelling; FastAPI serializes responses by alias.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
