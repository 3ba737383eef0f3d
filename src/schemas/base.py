from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class BaseReadSchema(BaseSchema):
    """
    Базовая схема ответа: читается прямо из ORM сущности (from_attributes).
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
