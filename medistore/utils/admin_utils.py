from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

from fastapi import HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from medistore.utils.bilingual import clean_list, fill_english_fallback


def get_or_404(session: Session, model, obj_id: str, label: str):
    obj = session.get(model, obj_id)
    if not obj:
        raise HTTPException(404, f"{label} not found")
    return obj


def build_record(model, data: BaseModel, bilingual: Sequence[str] = (), list_fields: Iterable[str] = ()):
    values = data.model_dump()
    for name in list_fields:
        values[name] = clean_list(values.get(name))
    obj = model(**values)
    return fill_english_fallback(obj, bilingual)


def _rejects_null(obj, key: str, bilingual: Sequence[str]) -> bool:
    column = obj.__table__.columns.get(key)
    if column is None or column.nullable:
        return False
    # a blank English column is refilled from the Indonesian one
    return not any(key == f"{name}_en" for name in bilingual)


def apply_update(obj, data: BaseModel, bilingual: Sequence[str] = (), list_fields: Iterable[str] = ()):
    list_fields = set(list_fields)
    changes = data.model_dump(exclude_unset=True)

    for key, value in changes.items():
        if value is None and key not in list_fields and _rejects_null(obj, key, bilingual):
            raise HTTPException(400, {"error": f"{key} cannot be null", "field": key})

    for key, value in changes.items():
        if key in list_fields:
            value = clean_list(value)
        elif isinstance(value, Enum):
            value = value.value
        setattr(obj, key, value)

    fill_english_fallback(obj, bilingual)
    obj.updated_at = datetime.utcnow()
    return obj
