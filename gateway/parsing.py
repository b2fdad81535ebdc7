import re

from pydantic import TypeAdapter, ValidationError

from gateway.errors import MalformedJSONError

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def clean_json(text: str) -> str:
    """Strip markdown fences and surrounding prose from a JSON reply.

    Keeps the span from the first '{' or '[' (whichever comes first) to the
    last matching closer. Text with no closer is returned stripped.
    """
    clean = _FENCE.sub("", text).strip()

    first_brace = clean.find("{")
    first_bracket = clean.find("[")

    start = 0
    end = -1
    if first_brace != -1 and (first_bracket == -1 or first_brace < first_bracket):
        start = first_brace
        end = clean.rfind("}")
    elif first_bracket != -1:
        start = first_bracket
        end = clean.rfind("]")

    if end != -1 and end >= start:
        return clean[start:end + 1]
    return clean


def parse_payload(text: str, adapter: TypeAdapter, what: str = "payload"):
    """Validate model output against `adapter`, with one cleanup fallback.

    Raises:
        MalformedJSONError: neither the raw nor the cleaned text validates.
    """
    try:
        return adapter.validate_json(text)
    except ValidationError:
        pass

    cleaned = clean_json(text)
    try:
        return adapter.validate_json(cleaned)
    except ValidationError as e:
        raise MalformedJSONError(
            f"Could not parse {what} from model output: {e.error_count()} error(s), "
            f"first: {e.errors()[0]['msg']}"
        ) from e
