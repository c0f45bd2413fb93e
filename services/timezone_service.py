"""Timezone resolution.

Every date computation in one invocation uses a single IANA zone: the
profile's stored preference, else the configured default, else the zone
the host runs in.
"""

import os
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from schemas import Profile

FALLBACK_TIMEZONE = "UTC"

_LOCALTIME_PATH = Path("/etc/localtime")
_TIMEZONE_FILE_PATH = Path("/etc/timezone")


class InvalidTimezoneError(ValueError):
    """A timezone identifier is not a known IANA zone."""

    def __init__(self, timezone: object) -> None:
        self.timezone = timezone
        super().__init__(f"Unknown timezone: {timezone!r}")


def get_zone(timezone: str | tzinfo) -> tzinfo:
    """Return the tzinfo for an IANA identifier (tzinfo passes through)."""
    if isinstance(timezone, tzinfo):
        return timezone
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, TypeError):
        raise InvalidTimezoneError(timezone) from None


def is_valid_timezone(timezone: str) -> bool:
    try:
        get_zone(timezone)
    except InvalidTimezoneError:
        return False
    return True


def _zone_from_localtime_link(path: Path) -> str | None:
    # /etc/localtime -> /usr/share/zoneinfo/Europe/Berlin
    try:
        target = str(path.resolve(strict=True))
    except OSError:
        return None
    marker = "zoneinfo/"
    if marker not in target:
        return None
    return target.split(marker, 1)[1]


def _zone_from_timezone_file(path: Path) -> str | None:
    # Debian-style /etc/timezone holds the identifier on its first line
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return None
    return lines[0].strip() if lines else None


@lru_cache(maxsize=1)
def get_device_timezone() -> str:
    """Detect the host's IANA zone once per process.

    Checks the TZ environment variable, then the /etc/localtime link,
    then /etc/timezone, and falls back to UTC. An /etc/localtime that is
    a plain copy of a zone file carries no identifier, so on hosts without
    /etc/timezone such a copy is reported as UTC. Like any device setting
    read at startup, a change while the process runs is picked up only
    after a restart.
    """
    candidates = [
        os.environ.get("TZ", "").lstrip(":"),
        _zone_from_localtime_link(_LOCALTIME_PATH),
        _zone_from_timezone_file(_TIMEZONE_FILE_PATH),
    ]
    for candidate in candidates:
        if candidate and is_valid_timezone(candidate):
            return candidate
    return FALLBACK_TIMEZONE


def resolve_timezone(
    profile: Profile | None,
    default_timezone: str | None = None,
) -> str:
    """Pick the single timezone used for a computation.

    Args:
        profile: The user's profile; its stored timezone wins when set.
        default_timezone: Explicit fallback (usually Settings.default_timezone).
            When empty, the detected device timezone is used.

    Returns:
        An IANA timezone identifier.
    """
    if profile is not None and profile.timezone:
        return profile.timezone
    if default_timezone:
        return default_timezone
    return get_device_timezone()
