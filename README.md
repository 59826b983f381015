# cs2excel

cs2excel keeps a spreadsheet of your Counter-Strike 2 items current. It reads
the table in an `.xlsx` workbook, adds items it finds in your Steam inventory,
raises quantities that have grown, and writes a price for every row in a
chosen range from the market offers listed on csgoskins.gg.

## Installing

```
pip install cs2excel
```

This installs the `cs2excel` command.

## Before you run it

- **Close the workbook.** It is read when a run starts and written back when
  the run ends. If another program holds it open, the write may fail.
- **Keep a backup** of the workbook.
- **No gaps in the table.** The table is read from its first row downwards and
  stops at the first row whose URL cell is empty or does not start with
  `http`. Rows after a gap are not seen, and new items are written straight
  after the last row that was seen.

## The command

```
cs2excel info
```

prints an explanation of every setting.

```
cs2excel save settings.json --sheet-path C:\items\skins.xlsx --sheet-name Items \
    --steamid 76561190000000000 --percent-threshold 5 \
    --prefer-markets "buff163, csfloat" --fetch-steam --update-prices \
    --row-start-table 2 --row-start-write 1 --cell-usd-to-x 1 \
    --col-url A --col-gun B --col-skin C --col-wear D --col-quantity E --col-price F
```

checks the settings and writes them to a JSON file. Every problem found is
listed at once and nothing is written while any remain. `--pause-time-ms`
outside 1000–5000 (or not a number) falls back to 2500. `--appid` defaults to
`730`. Run `cs2excel save --help` for the full list of options.

```
cs2excel show settings.json
```

prints the workbook's file name and every setting held in the file.

```
cs2excel run settings.json
```

checks the settings again and updates the workbook, printing a log as it
goes. All commands exit with status 1 on an error.

## Settings

The JSON file has a `user` part and a `sheet` part.

### User settings

- **appid** – the Steam app id. Only `730` (CS2) is updated; for any other
  app the run just opens the sheet and stops.
- **steamid** – your 64-bit Steam id.
- **fetch_steam** – add items from your Steam inventory to the table.
- **update_prices** – fetch a price for every row in the write range.
- **prefer_markets** – markets to prefer, in order, for example
  `buff163, csfloat, gamerpay, buff market`.
- **percent_threshold** – between 1 and 100. Walking along your preferred
  markets, the next one is chosen only while it is cheaper than the current
  choice by at least this percentage. With buff163 at 1.00 and csfloat at
  0.90, a threshold of 5 picks csfloat. If no preferred market lists the item,
  the cheapest market of all is used.
- **pause_time_ms** – the pause between price requests; each pause is varied
  at random by up to a fifth either way.
- **ignore_urls** – URLs in the table that are skipped when pricing.
- **steamloginsecure** – the value of Steam's `steamLoginSecure` cookie,
  needed to see items under trade hold. When it is empty, the cookie is read
  from the Firefox profile of the current Windows user, if there is one.

Allowed markets: skinport, gamerpay, buff163, skinout, skinswap, dmarket,
buff market, csfloat, shadowpay, waxpeer, lis-skins, haloskins, avan.market,
cs.money, market.csgo, tradeit.gg, skinbaron, steam, mannco.store, cs.deals,
skinflow, skinbid.

### Sheet settings

- **path_to_sheet** – the `.xlsx` file.
- **sheet_name** – the worksheet to edit.
- **row_start_table** – the row where the table begins.
- **row_start_write_in_table** / **row_stop_write_in_table** – the range of
  table rows, counted from 1, to price. Leave the stop empty to go to the end.
- **rowcol_usd_to_x** – a cell holding the USD-to-your-currency rate, or a
  number such as `1` to use directly.
- **rowcol_date** – optional cell that receives the time of the run, as
  `dd/mm/YYYY HH:MM:SS`.
- **col_url**, **col_quantity**, **col_price**, **col_gun_sticker_case**,
  **col_skin_name**, **col_wear** – the table's columns, by letter.
- **col_market** – optional column for the market each price came from.

Writing a cell replaces any formula it held. Sheets that were not changed are
copied into the saved file untouched.

## Using it as a library

```python
from cs2excel.urls import create_csgoskins_url
from cs2excel.market_name import item_metadata

create_csgoskins_url("AK-47 | Redline (Field-Tested)")
# 'ak-47-redline/field-tested'

item_metadata("AK-47 | Redline (Field-Tested)")
# ('ak', 'redline', 'ft')
```

Other entry points:

- `cs2excel.settings` – `parse_settings` checks `UserForm` and `SheetForm`
  input and raises a `SettingsError` listing every problem; `load_save` and
  `write_save` read and write the JSON file.
- `cs2excel.sync` – `update_spreadsheet` performs a whole run;
  `choose_market` applies the preferred-market rule to a mapping of market
  names to prices (cheapest first).
- `cs2excel.workbook` – `Workbook.open`, `Workbook.sheet`, `Worksheet.get`,
  `Worksheet.set` and `Workbook.save` read and write cell values.
- `cs2excel.steam.SteamInventory` and `cs2excel.csgoskins.fetch_offers` fetch
  an inventory and an item's market offers.

## What it does not do

- There is no graphical interface; settings come from command-line options or
  a JSON file.
- Prices come only from csgoskins.gg, and browser cookies are read only from
  Firefox at its Windows profile location.
- Cell formatting for new values is not set; text and numbers are written
  plainly.

## Development

```
pip install -e ".[test]"
pytest
```