"""
App input contract models.

An app declares an ordered list of inputs. Each input has a structured type
(a tagged union keyed by ``kind``) which also knows how to coerce a raw
submitted string into a typed value.
"""

import json
import re
from datetime import date, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from apprunner.models.enums import InputKind

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
LEGACY_TEXT_PATTERN = re.compile(r"^Text\((\d+)\)$")
LEGACY_RADIO_PATTERN = re.compile(r"^Radio\((.*)\)$", re.DOTALL)

TEXT_MAX_LENGTH_LIMIT = 500


# ==================== INPUT TYPES ====================


class TextInputType(BaseModel):
    """Free text with a maximum length."""
    kind: Literal[InputKind.TEXT] = InputKind.TEXT
    max_length: int = Field(default=100, ge=1, le=TEXT_MAX_LENGTH_LIMIT)

    def coerce(self, raw: str) -> str:
        if len(raw) > self.max_length:
            raise ValueError(f"exceeds max length of {self.max_length}")
        return raw


class EmailInputType(BaseModel):
    """Email address."""
    kind: Literal[InputKind.EMAIL] = InputKind.EMAIL

    def coerce(self, raw: str) -> str:
        if not EMAIL_PATTERN.match(raw):
            raise ValueError("must be a valid email address")
        return raw


class DateInputType(BaseModel):
    """Calendar date or timestamp in ISO 8601."""
    kind: Literal[InputKind.DATE] = InputKind.DATE

    def coerce(self, raw: str) -> date:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("must be a valid date") from None


class IntegerInputType(BaseModel):
    """Whole number."""
    kind: Literal[InputKind.INTEGER] = InputKind.INTEGER

    def coerce(self, raw: str) -> int:
        try:
            return int(raw.strip())
        except ValueError:
            raise ValueError("must be a valid integer") from None


class BooleanInputType(BaseModel):
    """true / false."""
    kind: Literal[InputKind.BOOLEAN] = InputKind.BOOLEAN

    def coerce(self, raw: str) -> bool:
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError("must be 'true' or 'false'")


class RadioOption(BaseModel):
    """One selectable radio option."""
    value: str = Field(min_length=1)
    label: str | None = None


class RadioInputType(BaseModel):
    """One value out of a fixed set of options."""
    kind: Literal[InputKind.RADIO] = InputKind.RADIO
    options: list[RadioOption] = Field(min_length=1)

    def coerce(self, raw: str) -> str:
        if not any(option.value == raw for option in self.options):
            raise ValueError("must be one of the radio options")
        return raw


InputType = Annotated[
    Union[
        TextInputType,
        EmailInputType,
        DateInputType,
        IntegerInputType,
        BooleanInputType,
        RadioInputType,
    ],
    Field(discriminator="kind"),
]

_input_type_adapter: TypeAdapter[Any] = TypeAdapter(InputType)


def parse_legacy_input_type(value: str) -> dict[str, Any]:
    """
    Convert a legacy string type such as ``Text(100)`` or ``Radio([...])``
    into its structured form.

    Only used when reading rows written before input types were stored as
    structured JSON.
    """
    text = value.strip()
    simple = {
        "Email": InputKind.EMAIL,
        "Date": InputKind.DATE,
        "Integer": InputKind.INTEGER,
        "Boolean": InputKind.BOOLEAN,
    }
    if text in simple:
        return {"kind": simple[text].value}

    text_match = LEGACY_TEXT_PATTERN.match(text)
    if text_match:
        return {"kind": InputKind.TEXT.value, "max_length": int(text_match.group(1))}

    radio_match = LEGACY_RADIO_PATTERN.match(text)
    if radio_match:
        try:
            raw_options = json.loads(radio_match.group(1))
        except json.JSONDecodeError:
            raise ValueError(f"Unrecognized radio options: {radio_match.group(1)}") from None
        options = [
            {"value": option} if isinstance(option, str) else option
            for option in raw_options
        ]
        return {"kind": InputKind.RADIO.value, "options": options}

    raise ValueError(f"Unrecognized input type: {value}")


# ==================== INPUTS ====================


class Input(BaseModel):
    """Declared app input"""
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    type: InputType
    required: bool = False
    default_value: str | None = Field(
        default=None,
        description="Raw default, validated against the input type"
    )

    @field_validator("type", mode="before")
    @classmethod
    def accept_legacy_type_strings(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_legacy_input_type(value)
        return value

    @model_validator(mode="after")
    def validate_default_matches_type(self) -> "Input":
        if self.default_value is not None:
            try:
                self.type.coerce(self.default_value)
            except ValueError as e:
                raise ValueError(f"Default value for '{self.title}' {e}") from None
        return self

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


class RunInputValue(BaseModel):
    """Submitted value for one input"""
    title: str
    value: str


def coerce_input_type(raw_type: Any) -> Any:
    """Validate a structured (or legacy string) input type."""
    if isinstance(raw_type, str):
        raw_type = parse_legacy_input_type(raw_type)
    return _input_type_adapter.validate_python(raw_type)
