# domainstore/app/schemas/domain.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from domainstore.app.schemas.common import CamelModel


class DomainCreate(CamelModel):
    name: str = Field(..., max_length=100)


class DomainName(CamelModel):
    name: str


class DomainCreateResponse(CamelModel):
    message: str
    domain: DomainName


class DomainResponse(CamelModel):
    name: str
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None


class DomainListResponse(CamelModel):
    domains: List[DomainResponse]
