from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

PROG = "flatblog"


class BuildError(Exception):
    """Fatal failure that aborts the whole run."""


def warn(message: str) -> None:
    print(f"{PROG}: {message}", file=sys.stderr)


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_positive_int(value: object, default: int, option: str) -> int:
    if value is None or str(value).strip() == "":
        return default
    number = parse_int(value, 0)
    if number <= 0:
        warn(f"Invalid {option} option `{value}'; using {default}.")
        return default
    return number


def rfc822_date(value: dt.date) -> str:
    if not isinstance(value, dt.datetime):
        value = dt.datetime.combine(value, dt.time())
    value = value.replace(tzinfo=dt.timezone.utc)
    return value.strftime("%a, %d %b %Y %H:%M:%S %z")


def make_directories(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(f"Creating `{path}': {exc.strerror or exc}") from exc
