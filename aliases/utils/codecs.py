"""Request and response bodies for the batch endpoints.

Bodies are either a JSON document (``application/json``) or line-delimited
text, one identifier (or identifier/alias pair) per line.
"""
import re
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from aliases.core.exceptions import BodyParseError
from aliases.schemas.IdentAlias import IdentAlias, Status

APPLICATION_JSON = "application/json"
TEXT_PLAIN = "text/plain"

# Separates identifier and alias on a put line.
SPLIT_PATTERN = re.compile(r"[\s,\t]+")

STATUS_MARKERS = {
    Status.CREATED: "0",
    Status.EXISTS: "1",
}

_idents_adapter = TypeAdapter(List[str])
_pairs_adapter = TypeAdapter(List[IdentAlias])


def media_type(content_type: Optional[str]) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _lines(body: bytes) -> List[str]:
    try:
        return body.decode("utf-8").splitlines()
    except UnicodeDecodeError as e:
        raise BodyParseError(f"body is not valid utf-8: {e}") from e


def parse_idents(mediatype: str, body: bytes) -> List[str]:
    if mediatype == APPLICATION_JSON:
        try:
            return _idents_adapter.validate_json(body)
        except ValidationError as e:
            raise BodyParseError(f"expected a JSON array of strings: {e}") from e
    return _lines(body)


def parse_pairs(mediatype: str, body: bytes) -> List[IdentAlias]:
    if mediatype == APPLICATION_JSON:
        try:
            return _pairs_adapter.validate_json(body)
        except ValidationError as e:
            raise BodyParseError(f"expected a JSON array of ident/alias records: {e}") from e

    pairs = []
    for line in _lines(body):
        toks = SPLIT_PATTERN.split(line, maxsplit=1)
        if len(toks) != 2:
            raise BodyParseError("delimiter should match [\\s\\t,]+")
        pairs.append(IdentAlias(ident=toks[0], alias=toks[1]))
    return pairs


def render_json(results: List[IdentAlias]) -> list:
    return [r.model_dump(mode="json") for r in results]


def render_text(results: List[IdentAlias]) -> str:
    """One line per result: ``0 <alias>`` created, ``1 <alias>`` exists,
    blank when missing or skipped."""
    lines = []
    for r in results:
        marker = STATUS_MARKERS.get(r.status)
        lines.append(f"{marker} {r.alias}" if marker else "")
    return "".join(f"{line}\n" for line in lines)
