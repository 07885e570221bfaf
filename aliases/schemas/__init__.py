# re-export common schemas for simpler imports
from .DefinitionRequest import DefinitionRequest
from .DeleteResult import DeleteResult
from .IdentAlias import IdentAlias, Status

__all__ = [
    "DefinitionRequest",
    "DeleteResult",
    "IdentAlias",
    "Status",
]
