"""_forms.py

Dynamic form renderer driven by a backend ``FormSchema``.

`render_schema_form` draws one widget per schema field inside an
``st.form`` and returns the coerced payload when the user submits valid
data, ``None`` otherwise. Validation messages are shown under the form;
the caller decides what to do with the payload (usually hand it to an
``AssetCRUD`` action).
"""

from __future__ import annotations

from datetime import date
from typing import Any

import streamlit as st

from networth_deck.services.model import FormField, FormSchema
from networth_deck.services.transformers import to_float
from networth_deck.services.validation import NUMERIC_TYPES, coerce_form_data, validate_form


def as_schema(raw: Any) -> FormSchema | None:
    """Accept an already-parsed schema, a raw dict, or nothing."""
    if raw is None or isinstance(raw, FormSchema):
        return raw
    if isinstance(raw, dict):
        return FormSchema.model_validate(raw)
    return None


def _widget(field: FormField, key: str, initial: Any) -> Any:
    label = f"{field.label or field.name}{' *' if field.required else ''}"
    help_ = field.description or None

    if field.type in NUMERIC_TYPES:
        # Bounds are checked by validate_form; a stored value outside them
        # must still load into the edit form.
        return st.number_input(
            label,
            value=to_float(initial, None),
            step={"integer": 1.0, "number": None}.get(field.type, 0.01),
            placeholder=field.placeholder or None,
            help=help_,
            key=key,
        )
    if field.type == "select" and field.options:
        values = [o.value for o in field.options]
        labels = {o.value: o.label for o in field.options}
        index = values.index(str(initial)) if initial is not None and str(initial) in values else None
        return st.selectbox(
            label, values, index=index, format_func=lambda v: labels.get(v, v),
            placeholder=field.placeholder or "Choose an option", help=help_, key=key,
        )
    if field.type == "date":
        try:
            value = date.fromisoformat(str(initial)[:10]) if initial else None
        except ValueError:
            value = None
        return st.date_input(label, value=value, help=help_, key=key)
    if field.type in ("checkbox", "boolean"):
        return st.checkbox(label, value=bool(initial), help=help_, key=key)
    if field.type == "textarea":
        return st.text_area(label, value=str(initial or ""), placeholder=field.placeholder, help=help_, key=key)
    return st.text_input(label, value=str(initial or ""), placeholder=field.placeholder, help=help_, key=key)


def render_schema_form(
    schema: FormSchema | dict | None,
    key: str,
    *,
    initial: dict[str, Any] | None = None,
    submit_label: str = "Save",
    disabled: bool = False,
) -> dict[str, Any] | None:
    schema = as_schema(schema)
    if schema is None or not schema.fields:
        st.info("No form definition available for this entry type.")
        return None

    initial = initial or {}
    values: dict[str, Any] = {}
    with st.form(key=key, clear_on_submit=False):
        if schema.description:
            st.caption(schema.description)
        for field in schema.fields:
            values[field.name] = _widget(
                field,
                f"{key}__{field.name}",
                initial.get(field.name, field.default_value),
            )
        submitted = st.form_submit_button(submit_label, disabled=disabled, type="primary")

    if not submitted:
        return None
    errors = validate_form(schema, values)
    if errors:
        for message in errors.values():
            st.error(message)
        return None
    return coerce_form_data(schema, values)
