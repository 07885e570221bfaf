from typing import Optional

from pydantic import BaseModel, PrivateAttr

from aliases.core.config import settings
from aliases.services.generators import Generator, make_generator


class Definition(BaseModel):
    """A named alias generator configuration, stored as JSON under ``v:{id}``."""

    # Internal id, allocated once and never reused
    id: int = 0
    name: str = ""
    type: str = ""

    # seq: initial counter value
    offset: int = 0

    # rand
    chars: str = settings.RAND_DEFAULT_CHARS
    minlen: int = settings.RAND_DEFAULT_MINLEN
    prefix: str = ""

    deleted: bool = False

    model_config = {"extra": "ignore"}

    _generator: Optional[Generator] = PrivateAttr(default=None)

    @property
    def generator(self) -> Generator:
        # Built on first use so the sequence generator sees the final id.
        if self._generator is None:
            self._generator = make_generator(self)
        return self._generator
