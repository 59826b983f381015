"""Build csgoskins.gg item paths from Steam market names."""

from cs2excel.constants import SPECIAL, WEARS

_DROPPED = frozenset("'™★.&$:+")
_PREFIXES = ("charm", "patch", "sticker")
_SUFFIXES = ("capsule", "case", "package", "pin")


def _normalise(market_name: str) -> str:
    return "".join(
        c.lower() if c.isascii() else c for c in market_name if c not in _DROPPED
    )


def _container_url(name: str) -> str:
    joined = "".join(
        part.replace("(", "").replace(")", "").replace(" ", "-") for part in name.split("|")
    )
    return joined.replace("--", "-")


def _weapon_url(name: str, market_name: str) -> str:
    parts = name.split("(")
    if len(parts) < 2 or not parts[1]:
        raise ValueError(f"market name has no wear in parentheses: {market_name!r}")
    wear = parts[1][:-1]

    halves = parts[0].split("|")
    if len(halves) < 2 or not halves[1]:
        raise ValueError(f"market name has no skin after '|': {market_name!r}")
    gun = halves[0].replace("★ ", "").lstrip()
    skin = halves[1]

    tag = ""
    for spec in SPECIAL:
        if spec in gun:
            gun = gun.replace(f"{spec}-", "").lstrip()
            tag = f"{spec}-"
            break

    gun_part = gun.replace(" ", "-").replace(tag, "")
    skin_part = skin[1:].strip().replace(" ", "-")
    return f"{gun_part}-{skin_part}/{tag}{wear.replace(' ', '-')}".replace("--", "-")


def _plain_url(name: str) -> str:
    cleaned = "".join(c for c in name if c not in "(),")
    tag = ""
    pieces = []
    for sub in cleaned.split("|"):
        part = sub
        for spec in SPECIAL:
            if spec in sub:
                part = sub.replace(spec, "").lstrip()
                tag = f"/{spec}"
        pieces.append(part)
    return "".join(pieces).replace("  ", " ").replace(" ", "-") + tag


def create_csgoskins_url(market_name: str) -> str:
    """Return the path that follows ``/items/`` on csgoskins.gg for an item.

    Raises ValueError when a name that carries a wear is not shaped
    ``weapon | skin (wear)``.
    """
    name = _normalise(market_name)

    if name.startswith(_PREFIXES) or name.endswith(_SUFFIXES):
        return _container_url(name)
    if any(wear in name for wear in WEARS):
        return _weapon_url(name, market_name)
    if name.endswith("swap tool") or name.endswith("box"):
        return name.replace(" ", "-")
    return _plain_url(name)