from datetime import date, datetime
from typing import Any, Optional

def to_iso(value: Any) -> Optional[str]:
    # Supabase returns ISO strings, in-process rows may carry datetimes
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)

def as_float(value: Any, default: float = 0.0) -> float:
    # numeric columns come back as strings from PostgREST
    if value is None or value == "":
        return default
    return float(value)
