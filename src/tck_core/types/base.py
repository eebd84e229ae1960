"""Reusable pydantic base models shared by specs and configuration."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that reads and writes camelCase field names.

    The JSON-RPC interface of the system under test speaks camelCase
    (`fromKey`, `privateKeys`), while Python code uses snake_case
    (`from_key`, `private_keys`). Both spellings are accepted on input;
    `model_dump(by_alias=True)` produces the wire spelling.

    Unknown fields are rejected so that a typo in a fixture fails loudly
    instead of being silently ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        extra="forbid",
    )


class StrictBaseModel(CamelModel):
    """A frozen camelCase model for values that must not change once built."""

    model_config = CamelModel.model_config | {
        "frozen": True,
    }
