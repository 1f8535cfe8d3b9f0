"""
Base Pydantic schemas.

The API speaks camelCase JSON while the models and services use snake_case;
CamelModel maps between the two and reads straight from SQLAlchemy objects.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.utils.time import as_utc

# SQLite hands back naive datetimes; always emit UTC offsets
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str
    count: Optional[int] = None
