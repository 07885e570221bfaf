from pydantic import BaseModel
from typing import Optional

# Request DTO for creating or updating a definition. Unset fields keep the
# defaults on create and the stored values on update.
class DefinitionRequest(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    offset: Optional[int] = None
    chars: Optional[str] = None
    minlen: Optional[int] = None
    prefix: Optional[str] = None

    model_config = {"extra": "ignore"}

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
