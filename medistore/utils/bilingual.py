"""Indonesian/English parallel columns.

Every translatable field is stored twice, ``<name>_id`` (Indonesian) and
``<name>_en`` (English). The English column falls back to the Indonesian
value when it is blank at write time; readers never apply the fallback.
"""
from typing import Iterable


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return all(_is_blank(v) for v in value)
    return False


def clean_list(values) -> list:
    """Strip entries and drop the empty ones, keeping order."""
    return [v.strip() for v in values or [] if isinstance(v, str) and v.strip()]


def fill_english_fallback(obj, fields: Iterable[str]):
    for name in fields:
        source = getattr(obj, f"{name}_id")
        if _is_blank(getattr(obj, f"{name}_en")):
            setattr(obj, f"{name}_en", list(source) if isinstance(source, list) else source)
    return obj
