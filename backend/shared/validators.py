"""Shared validation helpers for engine settings."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


def parse_int_list(value: str | list[int] | tuple[int, ...], *, length: int | None = None) -> list[int]:
    """Parse an integer list from an environment variable or config value.

    Accepts:
    - A list or tuple of ints (returned as a list)
    - A JSON array string: '[20, 10, -10, -20]'
    - A comma-separated string: '20,10,-10,-20'

    Raises ValueError for empty values, non-integers, malformed JSON, or a
    list whose length differs from ``length`` when one is given.
    """
    if isinstance(value, (list, tuple)):
        items: list[Any] = list(value)
    else:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Integer list value must not be empty")
        if stripped.startswith(("[", "{")):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON array: {e}") from e
            if not isinstance(parsed, list):
                raise ValueError("JSON value must be an array of integers")
            items = parsed
        else:
            try:
                items = [int(part) for part in stripped.split(",") if part.strip()]
            except ValueError as e:
                raise ValueError(f"Invalid integer list {stripped!r}") from e

    # bool is an int subclass; reject it explicitly
    if not all(isinstance(item, int) and not isinstance(item, bool) for item in items):
        raise ValueError("Integer list must contain only integers")
    if not items:
        raise ValueError("Integer list value must not be empty")
    if length is not None and len(items) != length:
        raise ValueError(f"Expected {length} integers, got {len(items)}")
    return items


_INT_LIST_FIELDS = {"default_uma"}


class IntListEnvSettingsSource(EnvSettingsSource):
    """Env settings source that passes integer-list fields as raw strings to validators.

    pydantic-settings tries to JSON-decode sequence-typed fields from env vars
    before validators run, which rejects the CSV form. This subclass leaves
    those fields alone so parse_int_list handles both formats.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if field_name in _INT_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
