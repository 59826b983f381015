"""Read cookies out of a Firefox profile's cookie database."""

from __future__ import annotations

import getpass
import sqlite3
from pathlib import Path
from typing import Iterable


def default_profiles_dir(username: str | None = None) -> Path:
    """Return the Firefox profiles directory of a Windows user."""
    if username is None:
        username = getpass.getuser()
    return Path(f"C:/Users/{username}/AppData/Roaming/Mozilla/Firefox/Profiles/")


def find_profile(profiles_dir: str | Path) -> Path:
    """Return the first profile directory whose name ends in ``release``."""
    for entry in sorted(Path(profiles_dir).iterdir()):
        if str(entry).endswith("release"):
            return entry
    raise FileNotFoundError("No valid Firefox profile found")


class FirefoxCookies:
    """A connection to a Firefox ``cookies.sqlite`` database."""

    def __init__(self, db_path: str | Path):
        self._db = sqlite3.connect(db_path)

    @classmethod
    def from_profile(cls, profiles_dir: str | Path | None = None) -> FirefoxCookies:
        """Open the cookie database of the release profile in ``profiles_dir``."""
        if profiles_dir is None:
            profiles_dir = default_profiles_dir()
        return cls(find_profile(profiles_dir) / "cookies.sqlite")

    def get_cookies(self, select: Iterable[str], host: str, names: Iterable[str]) -> str:
        """Return matching cookies as a ``Cookie`` header value.

        ``select`` names the columns to read, the name column first and the
        value column second; cookies are matched by a host containing
        ``host`` and a name in ``names``.
        """
        columns = list(select)
        if len(columns) < 2:
            raise ValueError("select needs a name column and a value column")
        wanted = list(names)
        placeholders = ", ".join("?" for _ in wanted)
        query = (
            f"SELECT {', '.join(columns)} FROM moz_cookies "
            f"WHERE host LIKE ? AND name IN ({placeholders})"
        )
        cookies = [
            (row[0], row[1]) for row in self._db.execute(query, (f"%{host}%", *wanted))
        ]

        # Firefox can hold a stale second steamLoginSecure; it comes last.
        if sum(1 for name, _ in cookies if name == "steamLoginSecure") > 1:
            cookies.pop()

        return " ".join(f"{name}={value};" for name, value in cookies)

    def close(self) -> None:
        self._db.close()

    def __enter__(self) -> FirefoxCookies:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def browser_cookie_header(host: str, names: Iterable[str]) -> str | None:
    """Fetch cookies for ``host`` from the current user's Firefox profile.

    Returns None when the profile or its database cannot be read.
    """
    try:
        with FirefoxCookies.from_profile() as db:
            return db.get_cookies(["name", "value"], host, names)
    except (OSError, sqlite3.Error):
        return None