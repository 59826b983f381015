import pytest

from cs2excel.market_name import item_metadata


@pytest.mark.parametrize(
    "market_name, expected",
    [
        ("AK-47 | Redline (Field-Tested)", ("ak", "redline", "ft")),
        ("StatTrak™ M4A1-S | Hyper Beast (Minimal Wear)", ("m4a1", "hyper beast", "st mw")),
        ("★ Butterfly Knife | Fade (Factory New)", ("butterfly", "fade", "fn")),
        ("★ Sport Gloves | Vice (Minimal Wear)", ("gloves", "vice", "mw")),
        ("Souvenir AWP | Dragon Lore (Field-Tested)", ("awp", "dragon lore", "sv ft")),
    ],
)
def test_weapons(market_name, expected):
    assert item_metadata(market_name) == expected


def test_sealed_graffiti_with_colour():
    assert item_metadata("Sealed Graffiti | Lambda (Battle Green)") == (
        "graffiti",
        "lambda",
        "battle green",
    )


def test_souvenir_package():
    assert item_metadata("Shanghai 2024 Dust II Souvenir Package") == (
        "shanghai 2024",
        "dust 2 package",
        "",
    )


def test_autograph_capsule():
    assert item_metadata("Paris 2023 Contenders Autograph Capsule") == (
        "paris 2023",
        "contenders auto",
        "",
    )


def test_capsule_without_year():
    assert item_metadata("Enfu Sticker Capsule") == ("capsule", "enfu sticker capsule", "")


def test_case_and_pin():
    assert item_metadata("Chroma 2 Case") == ("case", "chroma 2", "")
    assert item_metadata("Howl Pin") == ("pin", "howl", "")


def test_paper_sticker():
    assert item_metadata("Sticker | Lefty (CT)") == ("sticker", "lefty ct", "paper")


def test_tournament_sticker_with_finish():
    assert item_metadata("Sticker | paiN Gaming (Gold) | Paris 2023") == (
        "paris 2023",
        "pain gaming",
        "gold",
    )


def test_charm():
    assert item_metadata("Charm | Baby Karat T") == ("charm", "baby karat t", "")


def test_special_items():
    assert item_metadata("StatTrak™ Swap Tool") == ("misc", "stattrak swap tool", "")
    assert item_metadata("Gift Package") == ("gift", "gift package", "")
    assert item_metadata("Name Tag") == ("misc", "name tag", "")


def test_agent():
    assert item_metadata("Sir Bloody Miami Darryl | The Professionals") == (
        "agent",
        "sir bloody miami darryl",
        "",
    )


def test_pass_drops_suffix():
    group, skin, wear = item_metadata("Operation Riptide Premium Pass")
    assert group == "pass"
    assert not skin.endswith("pass")
    assert skin.split() == ["operation", "riptide", "premium"]
    assert wear == ""


def test_music_kit_box_moves_tag_to_end():
    group, skin, _ = item_metadata("StatTrak™ Masterminds Music Kit Box")
    assert group == "music box"
    assert skin.split() == ["masterminds", "stattrak"]


def test_old_style_capsule_uses_event_and_finish():
    group, skin, wear = item_metadata("ESL One Cologne 2015 Legends (Foil)")
    assert group == "cologne 2015"
    assert wear == "foil"
    assert "foil" not in skin
    assert "2015" not in skin


@pytest.mark.parametrize(
    "market_name",
    [
        "AK-47 | Redline (Field-Tested)",
        "Chroma 2 Case",
        "Sticker | Lefty (CT)",
        "Name Tag",
        "Gift Package",
    ],
)
def test_results_are_lowercase_without_dropped_characters(market_name):
    for field in item_metadata(market_name):
        assert field == field.lower()
        assert not set(field) & set("'™★():")


def test_weapon_without_skin_raises():
    with pytest.raises(ValueError):
        item_metadata("AK-47 (Field-Tested)")