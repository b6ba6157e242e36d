"""Field value normalizer.

Converts between the edit-form representation of a field value (strings,
booleans, upload handles) and its wire representation (numbers, parsed JSON,
file reference strings). Neither direction raises: values that cannot be
coerced pass through unchanged so the record validator can report them.
"""

import json
import posixpath
from dataclasses import dataclass
from typing import Any

from lunarconsole.domain.entities.field_definition import CollectionSchema, FieldDefinition, FieldType
from lunarconsole.domain.services.field_validator import FieldValidatorCompiler, is_absent


@dataclass(frozen=True)
class FileUpload:
    """Form-side handle for a file field entry.

    A handle is either a pending upload (``reference`` is None until the
    upload widget resolves it) or a preview of an already-stored file.
    """

    id: str
    name: str
    reference: str | None = None

    @property
    def is_uploaded(self) -> bool:
        return self.reference is not None

    @classmethod
    def from_reference(cls, reference: str) -> "FileUpload":
        """Rebuild a preview handle from a stored reference string."""
        return cls(id=reference, name=posixpath.basename(reference) or reference, reference=reference)


def form_default(field: FieldDefinition) -> Any:
    """Initial form value for a field in a blank create form."""
    if field.default_value is not None:
        return field.default_value

    match field.field_type:
        case FieldType.BOOLEAN:
            return False
        case FieldType.FILE:
            return []
        case _:
            return ""


def _resolve_file_references(value: Any) -> list[str]:
    entries = value if isinstance(value, (list, tuple)) else [value]
    references = []
    for entry in entries:
        if isinstance(entry, FileUpload):
            # Unresolved uploads are dropped; the widget resolves them before submit
            if entry.reference:
                references.append(entry.reference)
        elif isinstance(entry, str) and entry:
            references.append(entry)
    return references


def to_wire(field_type: FieldType | str, form_value: Any, required: bool) -> Any:
    """Convert a form value to its wire representation.

    Args:
        field_type: The field's type.
        form_value: Value as held by the edit form.
        required: Whether the field is required; optional empty values
            become ``None`` for numbers and files.

    Returns:
        The wire value. Unparseable input is returned unchanged.
    """
    match field_type:
        case FieldType.NUMBER:
            if is_absent(form_value):
                return form_value if required else None
            number = FieldValidatorCompiler.parse_number(form_value)
            return form_value if number is None else number
        case FieldType.BOOLEAN:
            if is_absent(form_value):
                return form_value if required else False
            return bool(form_value)
        case FieldType.JSON | FieldType.RICHTEXT:
            if form_value and isinstance(form_value, str):
                try:
                    return json.loads(form_value)
                except json.JSONDecodeError:
                    return form_value
            return form_value
        case FieldType.FILE:
            references = [] if is_absent(form_value, FieldType.FILE) else _resolve_file_references(form_value)
            if references:
                return references
            return [] if required else None
        case _:
            return form_value


def to_form(field_type: FieldType | str, wire_value: Any) -> Any:
    """Convert a wire value back to its edit-form representation.

    JSON values are pretty-printed with two-space indentation and stored
    file references become preview handles.
    """
    match field_type:
        case FieldType.NUMBER:
            return "" if wire_value is None else str(wire_value)
        case FieldType.BOOLEAN:
            return bool(wire_value)
        case FieldType.JSON | FieldType.RICHTEXT:
            if wire_value is None:
                return ""
            if isinstance(wire_value, str):
                return wire_value
            return json.dumps(wire_value, indent=2)
        case FieldType.FILE:
            if wire_value is None or wire_value == "":
                return []
            references = wire_value if isinstance(wire_value, (list, tuple)) else [wire_value]
            return [FileUpload.from_reference(str(ref)) for ref in references if ref]
        case _:
            return "" if wire_value is None else wire_value


def normalize_form(schema: CollectionSchema, form_data: dict[str, Any]) -> dict[str, Any]:
    """Apply ``to_wire`` to every schema field present in ``form_data``.

    Keys that are not schema fields are passed through so the record
    validator can report them as unknown.
    """
    wire: dict[str, Any] = {}
    for key, value in form_data.items():
        field = schema.get_field(key)
        if field is None or field.is_id:
            wire[key] = value
            continue
        wire[key] = to_wire(field.field_type, value, field.required)
    return wire


def to_form_data(schema: CollectionSchema, record_data: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build edit-form values for every user field of a schema.

    With no record data the result is a blank create form.
    """
    form: dict[str, Any] = {}
    for field in schema.user_fields:
        if record_data is None or field.name not in record_data:
            form[field.name] = form_default(field)
        else:
            form[field.name] = to_form(field.field_type, record_data[field.name])
    return form
