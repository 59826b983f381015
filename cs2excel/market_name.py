"""Split Steam market names into spreadsheet columns."""

import re

from cs2excel.constants import (
    FINISHES,
    SPECIAL,
    WEAPON_ABBREVIATIONS,
    WEAR_ABBREVIATIONS,
    WEARS,
)

_DROPPED = frozenset("'™★():")
_PREFIXES = ("charm", "patch", "sticker")
_SUFFIXES = ("capsule", "case", "package", "pin", "key")
_GIFTS = ("gift package", "audience participation parcel", "pallet of presents")
_YEAR = re.compile(r"\b\d{4}\b")
_EVENT = re.compile(r"([a-z\-]+\s+\d{4})")

Metadata = tuple[str, str, str]


def _is_u16(text: str) -> bool:
    digits = text[1:] if text.startswith("+") else text
    return digits.isascii() and digits.isdigit() and int(digits) <= 0xFFFF


def _first(candidates, predicate, default=""):
    return next((c for c in candidates if predicate(c)), default)


def _container(name: str) -> Metadata:
    parts = " ".join(name.split(" | ")).split(" ")
    wear = ""

    if name.startswith("charm") or name.startswith("patch"):
        group = parts[0]
        skin = " ".join(parts[1:])
        for finish in FINISHES:
            if finish in parts:
                skin = skin.replace(f"{finish} ", "")
                wear = finish
                break
        return group, skin, wear

    if "capsule" in name:
        if _YEAR.search(name) is None:
            return "capsule", name, wear
        group = f"{parts[0]} {parts[1]}"
        skin = " ".join(parts[2:len(parts) - 2])
        if "autograph" in parts:
            skin += " auto"
        return group, skin, wear

    if name.endswith(("case", "pin", "key")):
        return parts[-1], " ".join(parts[:-1]).replace(" case", ""), wear

    if name.startswith("sticker"):
        group = " ".join(parts[-2:]) if _is_u16(parts[-1]) else "sticker"
        wear = _first(FINISHES, lambda f: f in parts, "paper")
        skin = (
            name.replace(wear, "")
            .replace(group, "")
            .replace(" | ", "")
            .replace("sticker", "")
            .strip()
        )
        return group, skin, wear

    group = " ".join(parts[0:2])
    skin = " ".join(parts[2:]).replace(" souvenir", "").replace("ii", "2")
    return group, skin, wear


def _weapon(name: str) -> Metadata:
    parts = name.split(" | ")
    wear_name = _first(WEARS, lambda w: w in name, "n/a")
    tag = _first(SPECIAL, lambda t: t in name)
    weapon = parts[0].replace(tag, "").strip()

    wear = (
        f"{WEAR_ABBREVIATIONS.get(tag, '')} {WEAR_ABBREVIATIONS.get(wear_name, '')}"
    ).strip()
    skin = parts[1].replace(wear_name, "").strip()
    if not wear:
        wear = wear_name

    group = WEAPON_ABBREVIATIONS.get(weapon, weapon)
    words = group.split()
    last = words[-1]
    if last == "knife":
        group = words[0]
    elif last == "gloves":
        group = "gloves"
    return group, skin, wear


def _graffiti(name: str) -> Metadata:
    tokens = name.replace(" | ", " ").split(" ")
    group = "graffiti"
    wear = _first(WEARS, lambda w: w in tokens)
    skin = " ".join(
        t for t in tokens if t != group and t not in wear and t != "sealed"
    )
    return group, skin, wear


def _box(name: str) -> Metadata:
    group = "graffiti box" if "graffiti" in name else "music box"
    skin = name.replace(" graffiti box", "").replace(" music kit box", "").replace(" box", "")
    found = _first(SPECIAL, lambda s: s in skin, None)
    if found is not None:
        skin = skin.replace(f"{found} ", "") + f" {found}"
    return group, skin, ""


def _labelled(name: str, group: str) -> Metadata:
    tag = _first(SPECIAL, lambda s: s in name)
    skin = name.replace(group, "").replace(tag, "").replace("|", "").strip()
    return group, skin, WEAR_ABBREVIATIONS.get(tag, "")


def _event(name: str) -> Metadata:
    match = _EVENT.search(name)
    group = match.group(0) if match else "This shouldn't happen lol lamo"

    finishes = [f for f in FINISHES if f in name]
    # Among equally long finishes the last one listed wins.
    wear = max(reversed(finishes), key=len) if finishes else ""

    stripped = (
        name.replace(group, "")
        .replace(wear, "")
        .replace("()", "")
        .replace("|", "")
        .replace("capsule", "")
        .replace("sticker", "")
        .replace("sealed", "")
    )
    skin = " ".join(stripped.split())
    if "auto" in skin:
        skin = f"{skin.replace('autograph', '')} auto".strip()
    elif "graffiti" in skin:
        skin = f"{skin.replace('graffiti', '')} graffiti".strip()
    return group, skin, wear


def _classify(name: str) -> Metadata:
    if (name.startswith(_PREFIXES) or name.endswith(_SUFFIXES)) and name != "gift package":
        return _container(name)
    if any(w in name for w in WEARS):
        return _weapon(name)
    if name.startswith("sealed graffiti"):
        return _graffiti(name)
    if name.endswith("box"):
        return _box(name)
    if name.endswith("pass") or "viewer pass" in name:
        return "pass", name.replace(" pass", "") if name.endswith("pass") else name, ""
    if name.startswith("music kit"):
        return _labelled(name, "music kit")
    if name in _GIFTS:
        return "gift", name, ""
    if name == "stattrak swap tool":
        return "misc", name, ""
    if _YEAR.search(name):
        return _event(name)
    if "|" in name:
        return "agent", name.split(" | ")[0], ""
    return _labelled(name, "misc")


def item_metadata(market_name: str) -> Metadata:
    """Return ``(gun/sticker/case, skin/name, wear)`` for a Steam market name.

    Raises ValueError when the name does not have the shape its kind needs.
    """
    name = "".join(
        c.lower() if c.isascii() else c for c in market_name if c not in _DROPPED
    ).lstrip()
    try:
        return _classify(name)
    except IndexError as exc:
        raise ValueError(f"unrecognised market name: {market_name!r}") from exc