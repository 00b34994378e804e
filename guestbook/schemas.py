from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    message: str
    created_at: Optional[datetime]


class GuestbookPage(BaseModel):
    messages: List[MessageOut]


class Quote(BaseModel):
    text: str
    character: str


class QuotePage(BaseModel):
    quote: Quote
    visits: int
    hostname: str
