import sqlite3
from contextlib import closing
from pathlib import Path
from unittest import mock

import pytest

from cs2excel.cookies import (
    FirefoxCookies,
    browser_cookie_header,
    default_profiles_dir,
    find_profile,
)


def build_db(path, rows):
    with closing(sqlite3.connect(path)) as conn:
        conn.execute(
            "CREATE TABLE moz_cookies (id INTEGER PRIMARY KEY, host TEXT, name TEXT, value TEXT)"
        )
        conn.executemany("INSERT INTO moz_cookies (host, name, value) VALUES (?, ?, ?)", rows)
        conn.commit()
    return path


ROWS = [
    (".csgoskins.gg", "XSRF-TOKEN", "token"),
    ("csgoskins.gg", "csgoskinsgg_session", "secret"),
    (".csgoskins.gg", "unrelated", "placeholder"),
    ("steamcommunity.com", "steamLoginSecure", "token"),
]


@pytest.fixture
def cookie_db(tmp_path):
    return build_db(tmp_path / "cookies.sqlite", ROWS)


def test_get_cookies_selects_named_cookies(cookie_db):
    with FirefoxCookies(cookie_db) as db:
        header = db.get_cookies(
            ["name", "value"], "csgoskins.gg", ["XSRF-TOKEN", "csgoskinsgg_session"]
        )
    assert header == "XSRF-TOKEN=token; csgoskinsgg_session=secret;"


def test_get_cookies_matches_host_substring(cookie_db):
    with FirefoxCookies(cookie_db) as db:
        assert db.get_cookies(["name", "value"], "steamcommunity", ["steamLoginSecure"]) == (
            "steamLoginSecure=token;"
        )


def test_get_cookies_without_match_is_empty(cookie_db):
    with FirefoxCookies(cookie_db) as db:
        assert db.get_cookies(["name", "value"], "csgoskins.gg", ["missing"]) == ""
        assert db.get_cookies(["name", "value"], "example.com", ["XSRF-TOKEN"]) == ""


def test_duplicate_steam_login_drops_last(tmp_path):
    path = build_db(
        tmp_path / "cookies.sqlite",
        [
            ("steamcommunity.com", "steamLoginSecure", "token"),
            ("steamcommunity.com", "steamLoginSecure", "placeholder"),
        ],
    )
    with FirefoxCookies(path) as db:
        assert db.get_cookies(["name", "value"], "steamcommunity.com", ["steamLoginSecure"]) == (
            "steamLoginSecure=token;"
        )


def test_select_needs_two_columns(cookie_db):
    with FirefoxCookies(cookie_db) as db:
        with pytest.raises(ValueError):
            db.get_cookies(["name"], "csgoskins.gg", ["XSRF-TOKEN"])


def test_closed_connection_rejects_queries(cookie_db):
    db = FirefoxCookies(cookie_db)
    db.close()
    with pytest.raises(sqlite3.ProgrammingError):
        db.get_cookies(["name", "value"], "csgoskins.gg", ["XSRF-TOKEN"])


def test_find_profile_picks_release(tmp_path):
    (tmp_path / "abc.default").mkdir()
    (tmp_path / "xyz.default-release").mkdir()
    assert find_profile(tmp_path) == tmp_path / "xyz.default-release"


def test_find_profile_without_release(tmp_path):
    (tmp_path / "abc.default").mkdir()
    with pytest.raises(FileNotFoundError):
        find_profile(tmp_path)


def test_find_profile_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_profile(tmp_path / "absent")


def test_from_profile_opens_profile_database(tmp_path):
    profile = tmp_path / "xyz.default-release"
    profile.mkdir()
    build_db(profile / "cookies.sqlite", ROWS)
    with FirefoxCookies.from_profile(tmp_path) as db:
        assert db.get_cookies(["name", "value"], "csgoskins.gg", ["unrelated"]) == (
            "unrelated=placeholder;"
        )


def test_default_profiles_dir():
    assert default_profiles_dir("alice") == Path(
        "C:/Users/alice/AppData/Roaming/Mozilla/Firefox/Profiles/"
    )


def test_default_profiles_dir_uses_login_name():
    with mock.patch("getpass.getuser", return_value="bob"):
        assert default_profiles_dir() == default_profiles_dir("bob")


def test_browser_cookie_header_without_profile():
    with mock.patch("getpass.getuser", return_value="no-such-user-cs2excel-test"):
        assert browser_cookie_header("csgoskins.gg", ["XSRF-TOKEN"]) is None