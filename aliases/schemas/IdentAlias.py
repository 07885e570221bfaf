from enum import Enum
from pydantic import BaseModel
from typing import Optional


class Status(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    MISSING = "missing"


# One identifier of a batch request, echoed back with its result.
class IdentAlias(BaseModel):
    ident: str
    alias: str = ""
    status: Optional[Status] = None
