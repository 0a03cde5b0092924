"""
Recover a JSON object from free-form model output.

The upstream model is asked for pure JSON but often wraps it in prose or a
markdown code fence. Extractors share one interface, extract(raw) -> dict, so
the field mapper never depends on which heuristic produced its input.
"""
import json
import logging
import re

from contract_scanner.services.errors import ParseError

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*\n(.*?)\n?\s*```", re.DOTALL)


def _loads_object(text: str) -> dict:
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        logger.error(f"Failed to parse model output as JSON: {e}")
        raise ParseError()

    if not isinstance(data, dict):
        logger.error(f"Model output parsed to {type(data).__name__}, expected an object")
        raise ParseError()

    return data


class BraceJsonExtractor:
    """
    Slice from the first '{' to the last '}' and parse that.

    Falls back to parsing the whole string when there is no such span. This
    mis-extracts if prose around the payload contains braces of its own.
    """

    def extract(self, raw: str) -> dict:
        start = raw.find('{')
        end = raw.rfind('}')

        if start != -1 and end != -1 and start < end:
            return _loads_object(raw[start:end + 1])

        return _loads_object(raw)


class FencedJsonExtractor:
    """Prefer the first ```json fenced block; otherwise behave like BraceJsonExtractor."""

    def __init__(self):
        self._fallback = BraceJsonExtractor()

    def extract(self, raw: str) -> dict:
        match = _FENCED_BLOCK.search(raw)
        if match:
            try:
                return _loads_object(match.group(1))
            except ParseError:
                logger.warning("Fenced block was not a JSON object, falling back to brace matching")

        return self._fallback.extract(raw)


EXTRACTORS = {
    'brace': BraceJsonExtractor,
    'fenced': FencedJsonExtractor,
}


def get_extractor(name: str = 'brace'):
    """
    Look up an extractor by its configured name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown JSON extractor: {name!r} (expected one of {sorted(EXTRACTORS)})")
