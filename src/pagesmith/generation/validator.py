import json
from enum import StrEnum
from logging import getLogger
from typing import Any

from pydantic import BaseModel, ConfigDict

from pagesmith.utils.json_extract import extract_first_json_object


logger = getLogger(__name__)


class Locale(StrEnum):
    EN = "en"
    TH = "th"


class DraftValidity(StrEnum):
    FULLY_VALID = "fully_valid"
    VALID_WITH_DEFAULTS = "valid_with_defaults"
    FAILED = "failed"


class DraftDefaults(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    script: str
    explanation: str


# Substituted field by field when a parsed response leaves a field absent or blank
FIELD_DEFAULTS: dict[Locale, DraftDefaults] = {
    Locale.EN: DraftDefaults(
        name="AI Tool",
        script="alert('No script generated')",
        explanation="No explanation provided",
    ),
    Locale.TH: DraftDefaults(
        name="AI Tool",
        script="alert('No script generated')",
        explanation="ไม่มีคำอธิบาย",
    ),
}

# Used for all three fields when the response cannot be parsed at all
ERROR_DEFAULTS: dict[Locale, DraftDefaults] = {
    Locale.EN: DraftDefaults(
        name="AI Tool",
        script="alert('AI generated script error')",
        explanation="Sorry, the AI response could not be understood. Please try again. (JSON Error)",
    ),
    Locale.TH: DraftDefaults(
        name="AI Tool",
        script="alert('AI generated script error')",
        explanation="ขอโทษทีครับ เฮียเอ๋อไปนิด ลองสั่งใหม่นะ (JSON Error)",
    ),
}

DRAFT_FIELDS = ("name", "script", "explanation")


class GeneratedToolDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    script: str
    explanation: str
    validity: DraftValidity

    @property
    def is_valid(self) -> bool:
        return self.validity is not DraftValidity.FAILED

    @property
    def has_all_required_fields(self) -> bool:
        return self.validity is DraftValidity.FULLY_VALID


def _as_text(value: Any) -> str | None:
    """JSON text of a field value; None for JSON null"""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _parse_record(candidate: str) -> dict[str, Any] | None:
    try:
        # strict=False admits raw newlines and tabs inside string values
        record = json.loads(candidate, strict=False)
    except (ValueError, RecursionError) as e:
        logger.warning("Extracted object is not valid JSON: %s", e)
        return None

    if not isinstance(record, dict):
        logger.warning("Extracted JSON is a %s, not an object", type(record).__name__)
        return None
    return record


class ResponseValidator:
    """
    Turns raw model output into a GeneratedToolDraft whose fields are never blank.

    Text that has no balanced object, or whose first object is not valid JSON, yields a
    FAILED draft filled from ERROR_DEFAULTS. A parsed object keeps each non-blank field
    verbatim and falls back to FIELD_DEFAULTS per field.
    """

    def __init__(self, locale: Locale = Locale.EN) -> None:
        self._locale = locale

    @property
    def field_defaults(self) -> DraftDefaults:
        return FIELD_DEFAULTS[self._locale]

    @property
    def error_defaults(self) -> DraftDefaults:
        return ERROR_DEFAULTS[self._locale]

    def _failed(self) -> GeneratedToolDraft:
        defaults = self.error_defaults
        return GeneratedToolDraft(
            name=defaults.name,
            script=defaults.script,
            explanation=defaults.explanation,
            validity=DraftValidity.FAILED,
        )

    def validate_and_normalize(self, raw: str | None) -> GeneratedToolDraft:
        if raw is None or not raw.strip():
            logger.info("Empty AI response")
            return self._failed()

        candidate = extract_first_json_object(raw)
        if candidate is None:
            logger.info("No JSON object found in AI response")
            return self._failed()

        record = _parse_record(candidate)
        if record is None:
            return self._failed()

        defaults = self.field_defaults.model_dump()
        values: dict[str, str] = {}
        substituted: list[str] = []
        for field in DRAFT_FIELDS:
            value = _as_text(record.get(field))
            if value is None or not value.strip():
                values[field] = defaults[field]
                substituted.append(field)
            else:
                values[field] = value

        if substituted:
            logger.info("Filled defaults for %s", ", ".join(substituted))
            validity = DraftValidity.VALID_WITH_DEFAULTS
        else:
            validity = DraftValidity.FULLY_VALID

        return GeneratedToolDraft(**values, validity=validity)

    def has_all_required_fields(self, raw: str | None) -> bool:
        return self.validate_and_normalize(raw).has_all_required_fields


_default_validator = ResponseValidator()


def validate_and_normalize(raw: str | None) -> GeneratedToolDraft:
    return _default_validator.validate_and_normalize(raw)


def has_all_required_fields(raw: str | None) -> bool:
    return _default_validator.has_all_required_fields(raw)
