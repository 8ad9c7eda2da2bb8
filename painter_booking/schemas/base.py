"""Shared pydantic base and field types for booking records."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from painter_booking.utils import to_utc

UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]


class Record(BaseModel):
    """Base for records exchanged with the HTTP layer (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
