"""User and sheet settings: validation of form input and JSON save files."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

MARKETS: frozenset[str] = frozenset(
    {
        "skinport", "gamerpay", "buff163", "skinout", "skinswap", "dmarket",
        "buff market", "csfloat", "shadowpay", "waxpeer", "lis-skins", "haloskins",
        "avan.market", "cs.money", "market.csgo", "tradeit.gg", "skinbaron", "steam",
        "mannco.store", "cs.deals", "skinflow", "skinbid",
    }
)

DEFAULT_PAUSE_MS = 2500.0
MIN_PAUSE_MS = 1000.0
MAX_PAUSE_MS = 5000.0


class SettingsError(ValueError):
    """Raised when settings are invalid; ``problems`` lists every complaint."""

    def __init__(self, problems: str | list[str]):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("".join(f"{p}\n" for p in self.problems))


@dataclass
class UserInfo:
    """What to fetch from Steam and how to pick prices."""

    prefer_markets: list[str]
    ignore_urls: list[str]
    steamid: int
    pause_time_ms: int
    appid: int
    steamloginsecure: str | None
    percent_threshold: int
    update_prices: bool
    fetch_steam: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> UserInfo:
        data = _mapping(data, "user")
        return cls(
            prefer_markets=_str_list(data, "prefer_markets"),
            ignore_urls=_str_list(data, "ignore_urls"),
            steamid=_uint(data, "steamid", 64),
            pause_time_ms=_uint(data, "pause_time_ms", 64),
            appid=_uint(data, "appid", 32),
            steamloginsecure=_optional(data, "steamloginsecure", _str),
            percent_threshold=_uint(data, "percent_threshold", 8),
            update_prices=_bool(data, "update_prices"),
            fetch_steam=_bool(data, "fetch_steam"),
        )


@dataclass
class SheetInfo:
    """Where the table lives in the workbook and which columns hold what."""

    path_to_sheet: Path
    row_start_table: int
    row_start_write_in_table: int
    row_stop_write_in_table: int | None
    sheet_name: str
    rowcol_usd_to_x: str
    rowcol_date: str | None
    col_url: str
    col_market: str | None
    col_price: str
    col_quantity: str
    col_gun_sticker_case: str
    col_skin_name: str
    col_wear: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["path_to_sheet"] = str(self.path_to_sheet)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> SheetInfo:
        data = _mapping(data, "sheet")
        return cls(
            path_to_sheet=Path(_str(data, "path_to_sheet")),
            row_start_table=_uint(data, "row_start_table", 32),
            row_start_write_in_table=_uint(data, "row_start_write_in_table", 32),
            row_stop_write_in_table=_optional(
                data, "row_stop_write_in_table", lambda d, k: _uint(d, k, 32)
            ),
            sheet_name=_str(data, "sheet_name"),
            rowcol_usd_to_x=_str(data, "rowcol_usd_to_x"),
            rowcol_date=_optional(data, "rowcol_date", _str),
            col_url=_str(data, "col_url"),
            col_market=_optional(data, "col_market", _str),
            col_price=_str(data, "col_price"),
            col_quantity=_str(data, "col_quantity"),
            col_gun_sticker_case=_str(data, "col_gun_sticker_case"),
            col_skin_name=_str(data, "col_skin_name"),
            col_wear=_str(data, "col_wear"),
        )


@dataclass
class SaveLoad:
    """The contents of a settings save file."""

    user: UserInfo
    sheet: SheetInfo

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user.to_dict(), "sheet": self.sheet.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> SaveLoad:
        data = _mapping(data, "save file")
        return cls(
            user=UserInfo.from_dict(_field(data, "user")),
            sheet=SheetInfo.from_dict(_field(data, "sheet")),
        )


@dataclass
class UserForm:
    """User settings as typed into the form, before validation."""

    appid: str = ""
    steamid: str = ""
    percent_threshold: str = ""
    prefer_markets: str = ""
    ignore_urls: str = ""
    steamloginsecure: str = ""
    pause_time_ms: float = DEFAULT_PAUSE_MS
    update_prices: bool = False
    fetch_steam: bool = False


@dataclass
class SheetForm:
    """Sheet settings as typed into the form, before validation."""

    path_to_sheet: str = ""
    sheet_name: str = ""
    row_start_table: str = ""
    row_start_write_in_table: str = ""
    row_stop_write_in_table: str = ""
    rowcol_usd_to_x: str = ""
    rowcol_date: str = ""
    col_url: str = ""
    col_market: str = ""
    col_price: str = ""
    col_quantity: str = ""
    col_gun_sticker_case: str = ""
    col_skin_name: str = ""
    col_wear: str = ""


def _field(data: dict, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise SettingsError(f"missing field `{key}`") from None


def _mapping(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise SettingsError(f"{what} must be a JSON object")
    return data


def _uint(data: dict, key: str, bits: int) -> int:
    value = _field(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 1 << bits:
        raise SettingsError(f"field `{key}` must be an unsigned {bits}-bit integer")
    return value


def _bool(data: dict, key: str) -> bool:
    value = _field(data, key)
    if not isinstance(value, bool):
        raise SettingsError(f"field `{key}` must be a boolean")
    return value


def _str(data: dict, key: str) -> str:
    value = _field(data, key)
    if not isinstance(value, str):
        raise SettingsError(f"field `{key}` must be a string")
    return value


def _str_list(data: dict, key: str) -> list[str]:
    value = _field(data, key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SettingsError(f"field `{key}` must be a list of strings")
    return list(value)


def _optional(data: dict, key: str, convert: Callable[[dict, str], Any]) -> Any:
    if data.get(key) is None:
        return None
    return convert(data, key)


def _parse_unsigned(text: str, bits: int) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value < 1 << bits else None


def _looks_like_cell(text: str) -> bool:
    if len(text.encode()) == 1:
        return True
    return bool(text) and text[-1].isnumeric() and (text[0].isalpha() or text[0] == "$")


def _has_letter(text: str) -> bool:
    return any(c.isalpha() for c in text)


def _to_millis(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= 2**64:
        return 2**64 - 1
    return int(value)


def parse_settings(user_form: UserForm, sheet_form: SheetForm) -> tuple[UserInfo, SheetInfo]:
    """Validate the forms and return the settings they describe.

    Raises SettingsError listing every problem found.
    """
    problems: list[str] = []

    if not sheet_form.sheet_name:
        problems.append("Sheet to update/edit cannot be empty.")

    percent = _parse_unsigned(user_form.percent_threshold.strip(), 8)
    if percent is None:
        problems.append("Percent threshold is invalid.")
        percent = 0
    elif not 0 < percent <= 100:
        problems.append(
            "Percent threshold is invalid, needs to be a number between 0 -> 100."
        )
        percent = 0

    appid = _parse_unsigned(user_form.appid.strip(), 32)
    if appid is None:
        problems.append("AppID is invalid, needs to be a positive number (730 for CS2).")
        appid = 0

    steamid = _parse_unsigned(user_form.steamid.strip(), 64)
    if steamid is None:
        problems.append("SteamID is invalid, needs to be a positive number.")
        steamid = 0

    prefer_markets = [m.strip().lower() for m in user_form.prefer_markets.split(", ")]
    problems.extend(
        f"Market named '{m}' not allowed/available." for m in prefer_markets if m not in MARKETS
    )

    if not sheet_form.path_to_sheet.strip().endswith(".xlsx"):
        problems.append("Path to sheet is an invalid system path.")

    row_start_table = _parse_unsigned(sheet_form.row_start_table.strip(), 32)
    if row_start_table is None:
        problems.append("Row start of table is invalid, needs to be a positive number.")
        row_start_table = 0

    row_start_write = _parse_unsigned(sheet_form.row_start_write_in_table.strip(), 32)
    if row_start_write is None:
        problems.append("Row start of writing is invalid, needs to be a positive number.")
        row_start_write = 0

    row_stop: int | None = None
    if sheet_form.row_stop_write_in_table:
        row_stop = _parse_unsigned(sheet_form.row_stop_write_in_table.strip(), 32)
        if row_stop is None:
            problems.append(
                "Row stop of writing is invalid, needs to be a positive number or an empty field."
            )
            row_stop = 1

    usd_to_x = sheet_form.rowcol_usd_to_x.strip()
    if not _looks_like_cell(usd_to_x):
        problems.append(
            "Cell USD to x conversion is invalid, needs to be valid Cell coordinates, or 1."
        )

    rowcol_date: str | None = sheet_form.rowcol_date.strip() or None
    if rowcol_date is not None and not _looks_like_cell(rowcol_date):
        problems.append("Cell date is invalid, needs to be valid Cell coordinates, or 1.")
        rowcol_date = None

    for value, label in (
        (sheet_form.col_gun_sticker_case, "Column gun/sticker/case"),
        (sheet_form.col_skin_name, "Column skin/name"),
        (sheet_form.col_wear, "Column name of wear"),
        (sheet_form.col_quantity, "Column quantity"),
        (sheet_form.col_price, "Column price"),
    ):
        if not _has_letter(value):
            problems.append(f"{label} is invalid, needs to be only A-Z letter(s).")
    if sheet_form.col_market and not _has_letter(sheet_form.col_market):
        problems.append("Column market is invalid, needs to be only A-Z letter(s) or empty.")

    if problems:
        raise SettingsError(problems)

    user = UserInfo(
        prefer_markets=prefer_markets,
        ignore_urls=[u.strip() for u in user_form.ignore_urls.split(", ")],
        steamid=steamid,
        pause_time_ms=_to_millis(user_form.pause_time_ms),
        appid=appid,
        steamloginsecure=user_form.steamloginsecure.strip() if user_form.steamloginsecure else None,
        percent_threshold=percent,
        update_prices=user_form.update_prices,
        fetch_steam=user_form.fetch_steam,
    )
    sheet = SheetInfo(
        path_to_sheet=Path(sheet_form.path_to_sheet.strip()),
        row_start_table=row_start_table,
        row_start_write_in_table=row_start_write,
        row_stop_write_in_table=row_stop,
        sheet_name=sheet_form.sheet_name.strip(),
        rowcol_usd_to_x=usd_to_x,
        rowcol_date=rowcol_date,
        col_url=sheet_form.col_url.strip(),
        col_market=sheet_form.col_market.strip() if sheet_form.col_market else None,
        col_price=sheet_form.col_price.strip(),
        col_quantity=sheet_form.col_quantity.strip(),
        col_gun_sticker_case=sheet_form.col_gun_sticker_case.strip(),
        col_skin_name=sheet_form.col_skin_name.strip(),
        col_wear=sheet_form.col_wear.strip(),
    )
    return user, sheet


def to_forms(user: UserInfo, sheet: SheetInfo) -> tuple[UserForm, SheetForm]:
    """Render settings back into form fields; missing values become empty text."""
    user_form = UserForm(
        appid=str(user.appid),
        steamid=str(user.steamid),
        percent_threshold=str(user.percent_threshold),
        prefer_markets=", ".join(user.prefer_markets).strip(),
        ignore_urls=", ".join(user.ignore_urls).strip(),
        steamloginsecure=user.steamloginsecure or "",
        pause_time_ms=float(user.pause_time_ms),
        update_prices=user.update_prices,
        fetch_steam=user.fetch_steam,
    )

    def text(value: object) -> str:
        return "" if value is None else str(value)

    sheet_form = SheetForm(
        path_to_sheet=str(sheet.path_to_sheet),
        sheet_name=sheet.sheet_name,
        row_start_table=str(sheet.row_start_table),
        row_start_write_in_table=str(sheet.row_start_write_in_table),
        row_stop_write_in_table=text(sheet.row_stop_write_in_table),
        rowcol_usd_to_x=sheet.rowcol_usd_to_x,
        rowcol_date=text(sheet.rowcol_date),
        col_url=sheet.col_url,
        col_market=text(sheet.col_market),
        col_price=sheet.col_price,
        col_quantity=sheet.col_quantity,
        col_gun_sticker_case=sheet.col_gun_sticker_case,
        col_skin_name=sheet.col_skin_name,
        col_wear=sheet.col_wear,
    )
    return user_form, sheet_form


def load_save(path: str | Path) -> SaveLoad:
    """Read a JSON save file. Raises SettingsError if its contents are malformed."""
    with open(path, encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise SettingsError("Failed to properly parse JSON in file.") from exc
    return SaveLoad.from_dict(data)


def write_save(save: SaveLoad, path: str | Path) -> None:
    """Write settings to a pretty-printed JSON save file."""
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(save.to_dict(), handle, indent=2)


def workbook_display_name(path: str | Path) -> str:
    """Return the file name part of a Windows-style workbook path."""
    return str(path).split("\\")[-1]


def clamp_pause_time(text: str) -> float:
    """Parse a pause time in milliseconds, falling back to the default when
    the text is not a number between 1000 and 5000."""
    if text != text.strip() or "_" in text:
        return DEFAULT_PAUSE_MS
    try:
        value = float(text)
    except ValueError:
        return DEFAULT_PAUSE_MS
    if not MIN_PAUSE_MS <= value <= MAX_PAUSE_MS:
        return DEFAULT_PAUSE_MS
    return value