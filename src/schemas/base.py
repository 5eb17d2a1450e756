"""Shared pydantic base for wire models.

Python attributes are snake_case; the JSON wire format is camelCase
(chunkSize, apiKey, llmCallCount, ...). Both spellings are accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
