from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from esstforms.errors import ValidationError
from esstforms.schemas import RECORD_MODELS, ListType, parse_record

FormValues = dict[str, str]

PLACEHOLDER = "-"


def display(value: Optional[str]) -> str:
    """
    Trimmed value for the preview, or "-" when empty/whitespace.
    """
    if value is None:
        return PLACEHOLDER
    text = str(value).strip()
    return text or PLACEHOLDER


@dataclass(frozen=True)
class FieldSpec:
    """
    One form field.

    Attributes:
        name: Payload key (also the sheet script's key).
        label: Bilingual display label.
        required: Empty/whitespace-only values are rejected.
        message: Validation message shown when a required field is empty.
        choices: Allowed values for select fields (None for free text).
        multiline: Rendered as a textarea / multi-line prompt.
    """

    name: str
    label: str
    required: bool = False
    message: str = ""
    choices: Optional[Sequence[str]] = None
    multiline: bool = False


@dataclass(frozen=True)
class FormSchema:
    """
    Everything a FormFlow needs to know about one record type.

    Attributes:
        list_type: Destination sheet.
        title: Form heading.
        fields: Declared in validation order.
        preview: (values, capture time) -> preview text.
        copy_on_submit: Copy the preview to the clipboard as part of submit.
        prepare: values -> outgoing values (trimming, format conversion).
        on_change: (values, name, value) -> values, for dependent fields.
        trim_before_validate: Validate the trimmed values instead of the raw ones.
    """

    list_type: ListType
    title: str
    fields: Sequence[FieldSpec]
    preview: Callable[[Mapping[str, str], datetime], str]
    copy_on_submit: bool = True
    success_message: str = "업로드가 완료되었습니다. (Upload complete.)"
    prepare: Optional[Callable[[Mapping[str, str]], dict[str, str]]] = None
    on_change: Optional[Callable[[FormValues, str, str], FormValues]] = None
    trim_before_validate: bool = False

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.list_type.value} form has no field {name!r}")

    def defaults(self) -> FormValues:
        """
        Initial values, taken from the record model's field defaults.
        """
        model = RECORD_MODELS[self.list_type]()
        return {spec.name: str(getattr(model, spec.name, "") or "") for spec in self.fields}

    def validate(self, values: Mapping[str, str]) -> Optional[ValidationError]:
        """
        Check required fields in declared order; first failure wins.
        """
        if self.trim_before_validate:
            values = trim_values(values)
        for spec in self.fields:
            if not spec.required:
                continue
            value = values.get(spec.name) or ""
            if not value.strip():
                return ValidationError(spec.name, spec.message or f"{spec.label} is required.")
        return None

    def payload(self, values: Mapping[str, str]) -> dict[str, Any]:
        """
        Outgoing record: prepared values run through the typed record model.
        """
        prepared = self.prepare(values) if self.prepare is not None else dict(values)
        return parse_record(self.list_type, prepared).to_payload()


def trim_values(values: Mapping[str, str]) -> FormValues:
    return {key: value.strip() if isinstance(value, str) else value for key, value in values.items()}
