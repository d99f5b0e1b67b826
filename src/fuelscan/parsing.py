"""Decoding of free-form LLM replies into ReceiptFields."""

from pydantic import ValidationError

from fuelscan.errors import ParsingError
from fuelscan.models import ReceiptFields

# Longest marker first: "```json" also starts with "```"
_FENCE_OPENERS = ("```json", "```")
_FENCE = "```"


def _strip_code_fence(text: str) -> str:
    for opener in _FENCE_OPENERS:
        if text.startswith(opener):
            text = text[len(opener) :]
            break
    if text.endswith(_FENCE):
        text = text[: -len(_FENCE)]
    return text.strip()


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        loc = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{loc}: {detail['msg']}" if loc else detail["msg"])
    return "; ".join(parts)


def parse_receipt_fields(raw_text: str) -> ReceiptFields:
    """
    Extract the JSON object from a model reply and decode it.

    The reply may be wrapped in a markdown code fence and surrounded by
    prose. The object is taken to span from the first "{" to the last "}",
    so trailing prose that itself contains braces ends up inside the
    decoded text and makes it fail.

    Args:
        raw_text: Text generated by the provider

    Returns:
        The decoded ReceiptFields

    Raises:
        ParsingError: If no object is found or it cannot be decoded
    """
    text = _strip_code_fence(raw_text.strip())

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ParsingError("No JSON object found in response")

    try:
        return ReceiptFields.model_validate_json(text[start : end + 1])
    except ValidationError as e:
        raise ParsingError(_describe(e)) from e
