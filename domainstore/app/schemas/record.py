# domainstore/app/schemas/record.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from domainstore.app.schemas.common import CamelModel


class RecordCreate(CamelModel):
    key: str = Field(..., min_length=1, max_length=255)
    value: Optional[str] = None


class RecordUpdate(CamelModel):
    # Required, but may be null
    value: Optional[str]


class RecordResponse(CamelModel):
    key: str
    value: Optional[str]
    is_deleted: bool
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None


class RecordEnvelope(CamelModel):
    data: RecordResponse


class RecordListEnvelope(CamelModel):
    data: List[RecordResponse]
