"""Command line front end: check and save settings, and run a spreadsheet update."""

from __future__ import annotations

import argparse
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from cs2excel.csgoskins import ScrapeError
from cs2excel.settings import (
    SaveLoad,
    SettingsError,
    SheetForm,
    UserForm,
    clamp_pause_time,
    load_save,
    parse_settings,
    to_forms,
    workbook_display_name,
    write_save,
)
from cs2excel.steam import SteamError
from cs2excel.sync import SyncError, update_spreadsheet
from cs2excel.workbook import WorkbookError

ADDITIONAL_INFO = """IMPORTANT INFO:

THE EXCEL FILE NEEDS TO BE CLOSED WHEN THE UPDATE STARTS AND WHEN IT ENDS! IF THE FILE IS OPEN AT THE END, WRITING TO IT WILL NOT BE SUCCESSFUL.

MAKE A BACKUP OF YOUR EXCEL FILE!
MAKE SURE THE ROWS OF THE TABLE HAVE NO GAPS IN THEM. IF THEY DO, THE PROGRAM WILL NOT RECOGNIZE THE WHOLE TABLE AND WILL ADD INFORMATION IN UNINTENDED PLACES!

SHEET NAME is the name of the sheet inside your excel file that you want to edit.

PERCENT THRESHOLD is the difference between your first preferred market and the second. For example, preferred markets are buff163 and csfloat. Buff163 price is 1$, csfloat is 0.9$, and a % threshold of 5 makes the program choose csfloat because the difference between the buff163 price and csfloat is greater than 5%.

PAUSE TIME is how big the gap between individual price updates is, in milliseconds (1000 to 5000).

STEAMLOGINSECURE is the value of the cookie steamLoginSecure and it's necessary to fetch items from YOUR inventory that are under trade hold. If you have Firefox and are logged in to steamcommunity.com, the program fetches it automatically.

IGNORE URLS are urls that you want to skip during pricechecking.

CELL USD TO X is the coordinates of the cell that holds the conversion rate between usd and x currency. Set to 1 if you don't want to convert, or set it to the conversion rate itself.

ROW START OF TABLE defines the top row of the table that you want to either make or update.

ROW START OF WRITING defines which row inside the table you want to start at.

ROW STOP OF WRITING defines which row inside the table ends the range. It can be left out, which makes the program go through to the end of the table.

CELL DATE defines where to save the time of the last pricecheck in your spreadsheet.

PREFERRED MARKETS are the markets whose prices you want to use, for example 'buff163, csfloat, gamerpay, buff market'. Given your percent threshold, buff163 may be favored over csfloat, csfloat over gamerpay, and gamerpay over buff market. If none of these markets has the item, the cheapest of the other markets is used.

ALL ALLOWED MARKETS:
skinport, gamerpay, buff163, skinout, skinswap, dmarket, buff market, csfloat, shadowpay, waxpeer, lis-skins, haloskins, avan.market, cs.money, market.csgo, tradeit.gg, skinbaron, steam, mannco.store, cs.deals, skinflow, skinbid
"""

_RUN_ERRORS = (
    SettingsError,
    WorkbookError,
    SyncError,
    SteamError,
    ScrapeError,
    OSError,
    ValueError,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cs2excel",
        description="Keep a spreadsheet of CS2 items in step with a Steam inventory and market prices.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("info", help="explain the settings")

    save = commands.add_parser("save", help="check settings and write them to a JSON file")
    save.add_argument("output", help="JSON file to write")
    save.add_argument("--sheet-path", default="", help="path of the .xlsx workbook")
    save.add_argument("--sheet-name", default="", help="sheet to update")
    save.add_argument("--appid", default="730")
    save.add_argument("--steamid", default="")
    save.add_argument("--percent-threshold", default="")
    save.add_argument("--prefer-markets", default="", help="comma separated, e.g. 'buff163, csfloat'")
    save.add_argument("--ignore-urls", default="", help="comma separated urls")
    save.add_argument("--steamloginsecure", default="")
    save.add_argument("--pause-time-ms", default="2500")
    save.add_argument("--update-prices", action="store_true")
    save.add_argument("--fetch-steam", action="store_true")
    save.add_argument("--row-start-table", default="")
    save.add_argument("--row-start-write", default="")
    save.add_argument("--row-stop-write", default="")
    save.add_argument("--cell-usd-to-x", default="")
    save.add_argument("--cell-date", default="")
    save.add_argument("--col-url", default="")
    save.add_argument("--col-market", default="")
    save.add_argument("--col-price", default="")
    save.add_argument("--col-quantity", default="")
    save.add_argument("--col-gun", default="")
    save.add_argument("--col-skin", default="")
    save.add_argument("--col-wear", default="")

    show = commands.add_parser("show", help="print the settings held in a JSON file")
    show.add_argument("settings")

    run = commands.add_parser("run", help="update the spreadsheet described by a JSON file")
    run.add_argument("settings")
    return parser


def _forms_from_args(args: argparse.Namespace) -> tuple[UserForm, SheetForm]:
    user_form = UserForm(
        appid=args.appid,
        steamid=args.steamid,
        percent_threshold=args.percent_threshold,
        prefer_markets=args.prefer_markets,
        ignore_urls=args.ignore_urls,
        steamloginsecure=args.steamloginsecure,
        pause_time_ms=clamp_pause_time(args.pause_time_ms),
        update_prices=args.update_prices,
        fetch_steam=args.fetch_steam,
    )
    sheet_form = SheetForm(
        path_to_sheet=args.sheet_path,
        sheet_name=args.sheet_name,
        row_start_table=args.row_start_table,
        row_start_write_in_table=args.row_start_write,
        row_stop_write_in_table=args.row_stop_write,
        rowcol_usd_to_x=args.cell_usd_to_x,
        rowcol_date=args.cell_date,
        col_url=args.col_url,
        col_market=args.col_market,
        col_price=args.col_price,
        col_quantity=args.col_quantity,
        col_gun_sticker_case=args.col_gun,
        col_skin_name=args.col_skin,
        col_wear=args.col_wear,
    )
    return user_form, sheet_form


def _load(path: str) -> SaveLoad:
    try:
        return load_save(path)
    except OSError:
        raise SettingsError("Error! : Couldn't read file path.") from None
    except (SettingsError, UnicodeDecodeError):
        raise SettingsError("Error! : Failed to properly parse JSON in file.") from None


def _save(args: argparse.Namespace) -> int:
    try:
        user, sheet = parse_settings(*_forms_from_args(args))
    except SettingsError as exc:
        sys.stderr.write(str(exc))
        return 1
    try:
        write_save(SaveLoad(user, sheet), args.output)
    except OSError:
        print("Error! : Failed to create new file.", file=sys.stderr)
        return 1
    print("Saved successfully!")
    return 0


def _show(args: argparse.Namespace) -> int:
    try:
        save = _load(args.settings)
    except SettingsError as exc:
        print(exc.problems[0], file=sys.stderr)
        return 1
    user_form, sheet_form = to_forms(save.user, save.sheet)
    print(f"workbook: {workbook_display_name(save.sheet.path_to_sheet)}")
    for key, value in {**asdict(user_form), **asdict(sheet_form)}.items():
        print(f"{key}: {value}")
    return 0


def _run(args: argparse.Namespace) -> int:
    try:
        save = _load(args.settings)
    except SettingsError as exc:
        print(exc.problems[0], file=sys.stderr)
        return 1
    try:
        # Settings from a file are checked exactly like settings typed in.
        user, sheet = parse_settings(*to_forms(save.user, save.sheet))
    except SettingsError as exc:
        sys.stderr.write(str(exc))
        return 1

    printed = 0

    def report(log: str, progress: float | None = None) -> None:
        nonlocal printed
        sys.stdout.write(log[printed:])
        sys.stdout.flush()
        printed = len(log)

    try:
        update_spreadsheet(user, sheet, report)
    except _RUN_ERRORS as exc:
        print(f"\nError! : {exc}", file=sys.stderr)
        return 1
    if printed:
        sys.stdout.write("\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the exit status."""
    args = _build_parser().parse_args(argv)
    if args.command == "info":
        sys.stdout.write(ADDITIONAL_INFO)
        return 0
    if args.command == "save":
        return _save(args)
    if args.command == "show":
        return _show(args)
    return _run(args)


if __name__ == "__main__":
    raise SystemExit(main())