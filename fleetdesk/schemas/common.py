from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Decimals go out as JSON numbers; clients do arithmetic on them.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
Quantity = Money


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class Page(CamelModel, Generic[T]):
    data: list[T]
    page: int
    limit: int
    total: int
    pages: int


class Message(CamelModel):
    message: str
