# connectlist/core/timefmt.py
import re
from datetime import datetime, timezone
from typing import Optional, Union

# (límite superior en segundos, divisor, unidad)
_BUCKETS = (
    (60, 1, "s"),
    (3600, 60, "m"),
    (86400, 3600, "h"),
    (604800, 86400, "d"),
)
_WEEK = 604800

# Postgres recorta los ceros finales: ".12345+00:00"
_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Convierte un ISO-8601 (o datetime) a datetime con zona horaria.
    Los naive se asumen UTC. Devuelve None si no se puede parsear.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        # fromisoformat antes de 3.11 no acepta la 'Z' final ni fracciones
        # que no sean de 3 o 6 dígitos
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(_six_digit_fraction, text, count=1)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_time_ago(
    timestamp: Union[str, datetime, None],
    now: Optional[datetime] = None,
    suffix: bool = False,
) -> str:
    """
    "45s", "2m", "2h", "2d", "3w" (o "2m ago" con suffix=True).
    Cada bucket trunca el cociente, no redondea.
    """
    created = parse_timestamp(timestamp)
    if created is None:
        return ""

    current = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    elapsed = int((current - created).total_seconds())
    if elapsed < 0:
        elapsed = 0

    for limit, divisor, unit in _BUCKETS:
        if elapsed < limit:
            text = f"{elapsed // divisor}{unit}"
            break
    else:
        text = f"{elapsed // _WEEK}w"

    return f"{text} ago" if suffix else text
