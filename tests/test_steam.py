import pytest
import responses
from responses import matchers

from cs2excel.steam import SteamError, SteamInventory

INVENTORY = {
    "assets": [
        {"classid": "1", "assetid": "10"},
        {"classid": "1", "assetid": "11"},
        {"classid": "2", "assetid": "12"},
        {"classid": "3", "assetid": "13"},
    ],
    "descriptions": [
        {"classid": "1", "market_name": "AK-47 | Redline (Field-Tested)", "tradable": 1},
        {
            "classid": "2",
            "market_name": "Sticker | Lefty (CT)",
            "tradable": 0,
            "owner_descriptions": [{"value": "hold"}],
        },
        {"classid": "3", "market_name": "StatTrak Swap Tool", "tradable": 0},
    ],
    "total_inventory_count": 6,
    "success": 1,
    "rwgrsn": -2,
}

STEAMID = 76561190000000001
BASE_URL = f"https://steamcommunity.com/inventory/{STEAMID}/730/2"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_marketable_items_counted_by_name():
    inventory = SteamInventory.from_json(INVENTORY)
    assert inventory.item_names(True) == {
        "AK-47 | Redline (Field-Tested)": 2,
        "Sticker | Lefty (CT)": 1,
    }


def test_all_items_when_not_marketable_only():
    inventory = SteamInventory.from_json(INVENTORY)
    names = inventory.item_names(False)
    assert names["StatTrak Swap Tool"] == 1
    assert sum(names.values()) == len(INVENTORY["assets"])


def test_lengths():
    inventory = SteamInventory.from_json(INVENTORY)
    assert inventory.assets_length() == 4
    assert inventory.total_inventory_length() == 6


def test_untradable_description_skipped_for_later_match():
    data = dict(INVENTORY)
    data["assets"] = [{"classid": "7"}]
    data["descriptions"] = [
        {"classid": "7", "market_name": "first", "tradable": 0},
        {"classid": "7", "market_name": "second", "tradable": 1},
    ]
    assert SteamInventory.from_json(data).item_names(True) == {"second": 1}


def test_null_json_rejected():
    with pytest.raises(SteamError, match="null"):
        SteamInventory.from_json(None)


@pytest.mark.parametrize(
    "change",
    [
        {"assets": None},
        {"total_inventory_count": 70000},
        {"success": 300},
        {"rwgrsn": "1"},
    ],
)
def test_malformed_json_rejected(change):
    data = {**INVENTORY, **change}
    with pytest.raises(SteamError, match="SteamJson"):
        SteamInventory.from_json(data)


def test_missing_field_rejected():
    data = {k: v for k, v in INVENTORY.items() if k != "descriptions"}
    with pytest.raises(SteamError, match="descriptions"):
        SteamInventory.from_json(data)


def test_asset_without_classid():
    data = {**INVENTORY, "assets": [{"assetid": "1"}]}
    with pytest.raises(SteamError, match="classid"):
        SteamInventory.from_json(data).item_names(True)


def test_description_without_market_name():
    data = {
        **INVENTORY,
        "assets": [{"classid": "9"}],
        "descriptions": [{"classid": "9", "tradable": 1}],
    }
    with pytest.raises(SteamError, match="market_name"):
        SteamInventory.from_json(data).item_names(True)


def test_fetch_sends_cookie_and_parses(mocked):
    cookie = "token"
    mocked.add(
        responses.GET,
        BASE_URL,
        json=INVENTORY,
        match=[matchers.query_param_matcher({"l": "english", "count": "2000"})],
    )
    inventory = SteamInventory.fetch(STEAMID, 730, cookie)
    assert inventory.assets_length() == 4
    assert mocked.calls[0].request.headers["Cookie"] == cookie


def test_fetch_null_body(mocked):
    mocked.add(responses.GET, BASE_URL, body="null", content_type="application/json")
    with pytest.raises(SteamError, match="null"):
        SteamInventory.fetch(STEAMID, 730, "token")


def test_fetch_non_json_body(mocked):
    mocked.add(responses.GET, BASE_URL, body="<html></html>")
    with pytest.raises(SteamError):
        SteamInventory.fetch(STEAMID, 730, "token")