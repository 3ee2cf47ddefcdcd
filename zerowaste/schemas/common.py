# zerowaste/schemas/common.py
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel


class CamelModel(SQLModel):
    """
    Base for request/response schemas.

    JSON keys are camelCase (productId, totalAmount, imageUrls);
    Python attributes stay snake_case. Requests may use either form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(CamelModel):
    success: bool = True
    message: str
