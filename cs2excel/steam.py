"""Read the contents of a Steam inventory."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

import requests

INVENTORY_URL = "https://steamcommunity.com/inventory/{steamid}/{appid}/2?l=english&count=2000"


class SteamError(Exception):
    """Raised when the Steam inventory cannot be fetched or understood."""


def _is_int(value: Any, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


@dataclass(frozen=True)
class SteamInventory:
    """A Steam inventory as returned by the community inventory endpoint."""

    assets: list[Any]
    descriptions: list[Any]
    total_inventory_count: int
    success: int
    rwgrsn: int

    @classmethod
    def from_json(cls, data: Any) -> SteamInventory:
        """Build an inventory from decoded JSON. Raises SteamError if malformed."""
        if data is None:
            raise SteamError(
                "Oopsie JSON data is null! steamID and/or gameID might be wrong "
                "double check pls thank you!"
            )
        problem = cls._problem(data)
        if problem:
            raise SteamError(
                "Parsing the json data from steam into the SteamJson struct did not work!\n"
                + problem
            )
        return cls(
            assets=list(data["assets"]),
            descriptions=list(data["descriptions"]),
            total_inventory_count=data["total_inventory_count"],
            success=data["success"],
            rwgrsn=data["rwgrsn"],
        )

    @staticmethod
    def _problem(data: Any) -> str | None:
        if not isinstance(data, dict):
            return "expected a JSON object"
        for key in ("assets", "descriptions"):
            if key not in data:
                return f"missing field `{key}`"
            if not isinstance(data[key], list):
                return f"field `{key}` must be a list"
        limits = {
            "total_inventory_count": (0, 0xFFFF),
            "success": (-128, 127),
            "rwgrsn": (-128, 127),
        }
        for key, (low, high) in limits.items():
            if key not in data:
                return f"missing field `{key}`"
            if not _is_int(data[key], low, high):
                return f"field `{key}` must be an integer from {low} to {high}"
        return None

    @classmethod
    def fetch(
        cls,
        steamid: int,
        appid: int,
        cookie: str,
        session: requests.Session | None = None,
    ) -> SteamInventory:
        """Download the inventory of ``steamid`` for game ``appid``."""
        http = session if session is not None else requests.Session()
        url = INVENTORY_URL.format(steamid=steamid, appid=appid)
        try:
            response = http.get(url, headers={"Cookie": cookie})
            data = response.json()
        except requests.RequestException as exc:
            raise SteamError(f"Request to Steam failed: {exc}") from exc
        except ValueError as exc:
            raise SteamError(f"Steam did not answer with JSON: {exc}") from exc
        return cls.from_json(data)

    def item_names(self, marketable: bool = True) -> dict[str, int]:
        """Count the items in the inventory by market name.

        With ``marketable`` set, items that are neither tradable nor carry
        owner descriptions (such as trade-held items) are left out.
        """
        names: list[str] = []
        for asset in self.assets:
            asset_class = _classid(asset, "asset")
            for desc in self.descriptions:
                if asset_class != _classid(desc, "description"):
                    continue
                tradable = desc.get("tradable")
                if not _is_int(tradable, -(2**63), 2**63 - 1):
                    tradable = 0
                owner = desc.get("owner_descriptions")
                if not isinstance(owner, list):
                    owner = []
                if marketable and tradable == 0 and not owner:
                    continue
                market_name = desc.get("market_name")
                if not isinstance(market_name, str):
                    raise SteamError(f"'market_name' missing in the description {desc!r}")
                names.append(market_name)
                break
        return dict(Counter(names))

    def assets_length(self) -> int:
        """Number of assets Steam returned."""
        return len(self.assets)

    def total_inventory_length(self) -> int:
        """Number of items Steam says the inventory holds."""
        return self.total_inventory_count


def _classid(entry: Any, what: str) -> Any:
    if not isinstance(entry, dict) or "classid" not in entry:
        raise SteamError(f"'classid' not found in the {what} {entry!r} from the steam json")
    return entry["classid"]