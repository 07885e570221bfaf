from pydantic import BaseModel


class DeleteResult(BaseModel):
    removed: int = 0
    skipped: int = 0
    conflicts: int = 0
