"""Bring a spreadsheet of CS2 items up to date with a Steam inventory and market prices."""

from __future__ import annotations

import random
import time
from datetime import datetime
from functools import lru_cache
from typing import Callable, Mapping, Sequence

from cs2excel.cookies import browser_cookie_header
from cs2excel.csgoskins import fetch_offers, name_prices
from cs2excel.market_name import item_metadata
from cs2excel.settings import SheetInfo, UserInfo
from cs2excel.steam import SteamInventory
from cs2excel.urls import create_csgoskins_url
from cs2excel.workbook import Workbook, Worksheet

URL_PREFIX = "https://csgoskins.gg/items/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:136.0) Gecko/20100101 Firefox/136.0"
)
CS2_APPID = 730
DATE_FORMAT = "%d/%m/%Y %H:%M:%S"

Report = Callable[[str, "float | None"], None]


class SyncError(Exception):
    """Raised when the spreadsheet cannot be brought up to date."""


def _parse_u16(text: str) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= 0xFFFF else None


def _parse_float(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _debug_str(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _debug_prices(prices: Mapping[str, float]) -> str:
    return "{" + ", ".join(f"{_debug_str(k)}: {v!r}" for k, v in prices.items()) + "}"


def read_table(sheet: Worksheet, info: SheetInfo) -> dict[str, int]:
    """Read URLs and quantities from the table, in row order.

    Reading stops at the first row whose URL cell is missing or does not
    start with ``http``; a quantity that is not a whole number counts as 1.
    """
    table: dict[str, int] = {}
    row = info.row_start_table
    while True:
        url = sheet.get(f"{info.col_url}{row}")
        if url is None or not url.lstrip().startswith("http"):
            break
        raw_quantity = sheet.get(f"{info.col_quantity}{row}")
        quantity = _parse_u16(raw_quantity) if raw_quantity is not None else None
        table[url.strip()] = 1 if quantity is None else quantity
        row += 1
    return table


def _preferred_prices(prices: Mapping[str, float], preferred: Sequence[str]) -> dict[str, float]:
    chosen: dict[str, float] = {}
    for market in preferred:
        if market in prices and market not in chosen:
            chosen[market] = prices[market]
    return chosen


def choose_market(
    prices: Mapping[str, float], preferred: Sequence[str], percent_threshold: int
) -> tuple[str, float]:
    """Pick the market whose price goes in the sheet.

    ``prices`` runs cheapest first. Preferred markets are walked in the
    user's order, moving on to the next one only while it is cheaper by at
    least ``percent_threshold`` percent; a threshold of 0 takes the first
    preferred market. Without any preferred market the cheapest one wins.
    """
    candidates = _preferred_prices(prices, preferred)
    if candidates:
        entries = iter(candidates.items())
        best_market, best_price = next(entries)
        if percent_threshold != 0:
            for market, price in entries:
                if price <= best_price * (1.0 - percent_threshold / 100.0):
                    best_market, best_price = market, price
                else:
                    break
        return best_market, best_price
    if not prices:
        raise SyncError(
            "Market_price IndexMap is empty! Possible you're flagged by the website "
            "and can't fetch prices anymore."
        )
    market = next(iter(prices))
    return market, prices[market]


def conversion_rate(sheet: Worksheet | None, cell: str) -> float:
    """Return the USD conversion rate: read from ``cell`` if it names a cell,
    otherwise ``cell`` itself is the rate."""
    if any(c.isalpha() for c in cell):
        if sheet is None:
            raise SyncError(f"No sheet to read the conversion rate in cell {cell} from.")
        raw = sheet.get(cell) or ""
        rate = _parse_float(raw.strip())
        if rate is None:
            raise SyncError(f"Failed to parse conversion rate as an f64 found in cell {cell}.")
        return rate
    rate = _parse_float(cell.strip())
    if rate is None:
        raise SyncError(
            "Failed to parse conversion rate as an f64 of custom conversion rate "
            "fetched from spreadsheet."
        )
    return rate


def write_range(info: SheetInfo, table_length: int) -> tuple[int, int]:
    """Return the first and last sheet rows whose prices are updated."""
    row_write = info.row_start_table + info.row_start_write_in_table - 1
    stop = info.row_stop_write_in_table
    if stop is None:
        row_stop = table_length + 1
    elif stop < row_write:
        row_stop = row_write
    else:
        row_stop = info.row_start_table + stop - 1
    return row_write, row_stop


def jittered_pause(pause_time_ms: int, rng: random.Random | None = None) -> int:
    """Return the pause in milliseconds, shifted randomly by up to a fifth either way."""
    rng = rng if rng is not None else random.Random()
    spread = pause_time_ms // 5
    return pause_time_ms - rng.randint(0, spread) + rng.randint(0, spread)


def _default_inventory(user: UserInfo) -> SteamInventory:
    cookie = user.steamloginsecure
    if cookie is None:
        cookie = browser_cookie_header("steamcommunity.com", ["steamLoginSecure"]) or ""
    return SteamInventory.fetch(user.steamid, user.appid, cookie)


@lru_cache(maxsize=1)
def _csgoskins_cookie() -> str:
    return (
        browser_cookie_header(
            "csgoskins.gg", ["XSRF-TOKEN", "csgoskinsgg_session", "GvZ18GVkcDBO"]
        )
        or ""
    )


def _default_prices(url: str) -> dict[str, float]:
    return name_prices(fetch_offers(url, _csgoskins_cookie(), USER_AGENT))


def _no_report(text: str, progress: float | None = None) -> None:
    return None


def _steam_items(
    user: UserInfo, fetch_inventory: Callable[[UserInfo], SteamInventory]
) -> tuple[dict[str, tuple[str, int]], int, int]:
    if not user.fetch_steam:
        return {}, 0, 0
    inventory = fetch_inventory(user)
    items = {
        name: (create_csgoskins_url(name), quantity)
        for name, quantity in inventory.item_names(True).items()
    }
    return items, inventory.assets_length(), inventory.total_inventory_length()


def update_spreadsheet(
    user: UserInfo,
    info: SheetInfo,
    report: Report | None = None,
    fetch_inventory: Callable[[UserInfo], SteamInventory] | None = None,
    fetch_prices: Callable[[str], Mapping[str, float]] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> str:
    """Add inventory items to the sheet, refresh prices and save the workbook.

    ``report`` is called with the whole log so far and, while prices are
    being updated, the fraction done (None otherwise). Returns the log.
    Only CS2 (app 730) is updated; other apps just check the sheet opens.
    """
    report = report or _no_report
    fetch_inventory = fetch_inventory or _default_inventory
    fetch_prices = fetch_prices or _default_prices
    sleep = sleep or time.sleep

    book = Workbook.open(info.path_to_sheet)
    sheet = book.sheet(info.sheet_name)

    if user.appid != CS2_APPID:
        sheet.get(info.rowcol_usd_to_x)
        return ""

    items, assets_length, inventory_length = _steam_items(user, fetch_inventory)
    table = read_table(sheet, info)

    if assets_length < inventory_length:
        log = (
            f"-- NOTE --\nFetched {assets_length} items, but {inventory_length} items are "
            "in inventory!\nIf this is not the desired result, login to steam using Firefox "
            "or set SteamLoginSecure manually again.\n\n"
        )
    else:
        log = f"Fetched all {assets_length} items from inventory successfully.\n\n"
    log += f"-- FOUND LENGTH OF TABLE --\n {len(table)}\n\n"
    urls = list(table)
    first = (urls[0], table[urls[0]]) if urls else ("Nothing (for now)", 0)
    last = (urls[-1], table[urls[-1]]) if urls else ("Nothing (for now)", 0)
    log += f"-- FIRST URL AND QUANTITY --\n({_debug_str(first[0])}, {first[1]})\n\n"
    log += f"-- LAST URL AND QUANTITY --\n({_debug_str(last[0])}, {last[1]})\n\n"
    report(log, None)

    positions = {url: index for index, url in enumerate(table)}
    for name, (suffix, quantity) in items.items():
        url = f"{URL_PREFIX}{suffix}"
        old_length = len(table)
        index = positions.get(url, old_length)
        row = index + info.row_start_table
        coord_quantity = f"{info.col_quantity}{row}"

        if url in table:
            if table[url] < quantity:
                table[url] = quantity
                sheet.set(coord_quantity, quantity)
                log += (
                    f"-- UPDATED ITEM AT ROW --\n{row}\n-- URL --\n{url}\n"
                    f"-- QUANTITY --\n{quantity}\n\n"
                )
                report(log, None)
            continue

        table[url] = quantity
        positions[url] = old_length
        group, skin, wear = item_metadata(name)
        sheet.set(f"{info.col_gun_sticker_case}{row}", group)
        sheet.set(f"{info.col_skin_name}{row}", skin)
        sheet.set(f"{info.col_wear}{row}", wear)
        sheet.set(f"{info.col_url}{row}", url)
        sheet.set(coord_quantity, quantity)
        log += (
            f"-- NEW ITEM AT ROW --\n{row}\n-- URL --\n{url}\n-- Quantity --\n{quantity}\n\n"
        )
        report(log, None)

    rate = conversion_rate(sheet, info.rowcol_usd_to_x)
    row_write, row_stop = write_range(info, len(table))
    iterations = row_stop + 1 - row_write

    for index, url in enumerate(list(table)):
        if not user.update_prices:
            break
        row = info.row_start_table + index
        if row > row_stop:
            break
        if row < row_write or url in user.ignore_urls:
            continue

        prices = fetch_prices(url)
        preferred = _preferred_prices(prices, user.prefer_markets)
        market, price = choose_market(prices, user.prefer_markets, user.percent_threshold)
        progress = (index + 1) / iterations
        converted = price * rate

        sheet.set(f"{info.col_price}{row}", converted)
        if info.col_market is not None and info.col_market.strip():
            sheet.set(f"{info.col_market}{row}", market)

        log += (
            f"-- ROW -- \n{row}\n-- PREFERRED MARKETS -- \n{_debug_prices(preferred)}\n"
            f"--MARKET-- \n{market}\n-- PRICE -- \n{converted:.2f}\n-- URL -- \n{url}\n\n"
        )
        report(log, progress)

        pause = jittered_pause(user.pause_time_ms)
        if progress != 1.0:
            sleep(pause / 1000)

    if info.rowcol_date is not None and info.rowcol_date.strip():
        sheet.set(info.rowcol_date, datetime.now().strftime(DATE_FORMAT))

    book.save(info.path_to_sheet)
    log += "Finished successfully!"
    report(log, None)
    return log