from __future__ import annotations

import re

from ..core.enums import EntryType
from ..core.exceptions import ValidationError

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} no es válido")
    return str(value).strip()


def require_entry_type(value: str) -> EntryType:
    try:
        return EntryType(value)
    except ValueError:
        raise ValidationError("tipoRegistro inválido.") from None


def require_hhmm(value: str, field_name: str) -> str:
    if not value or not _HHMM.match(value.strip()):
        raise ValidationError(f"{field_name} debe tener formato HH:MM")
    return value.strip()
