"""Shared validation helpers for service settings."""

import json


def parse_string_list(value: str | list[str], *, allow_empty: bool = False) -> list[str]:
    """Parse a string list from an environment variable or config value.

    Accepts a list of strings (returned as-is), a JSON array string such as
    '["a","b"]', or a comma-separated string such as 'a,b'. Blank strings
    and malformed JSON raise ValueError; so does an empty result unless
    allow_empty is set.
    """
    if isinstance(value, list):
        result = value
    else:
        stripped = value.strip()
        if not stripped:
            raise ValueError("String list value must not be empty")
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON array: {e}") from e
            if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
                raise ValueError("JSON value must be an array of strings")
            result = parsed
        else:
            result = [part.strip() for part in stripped.split(",") if part.strip()]

    if not allow_empty and not result:
        raise ValueError("String list value must not be empty")
    return result
