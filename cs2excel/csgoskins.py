"""Scrape market offers for an item from csgoskins.gg."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import requests
from bs4 import BeautifulSoup

OFFER_SELECTOR = (
    "div.active-offer.bg-gray-800.rounded-sm.shadow-md.relative.flex.items-center.flex-wrap.my-4"
)

_SESSION = requests.Session()


class ScrapeError(Exception):
    """Raised when offers cannot be fetched or read from a page."""


@dataclass(frozen=True)
class MarketOffer:
    """One market's offer for an item."""

    name: str
    price: float
    stars: float
    reviews: int
    active_offers: int


def _parse_u32(text: str) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value < 2**32 else None


def _parse_float(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _expand_thousands(text: str) -> str:
    return text.replace("k", "00" if "." in text else "000").replace(".", "")


def _offer(fields: list[str], url: str) -> MarketOffer:
    star_and_review = fields[1].split("•")
    if len(star_and_review) < 2:
        raise ScrapeError(
            f"Failed to parse review from csgoskins given the value {fields[1]}\nURL: {url}"
        )

    review_text = _expand_thousands(star_and_review[1].replace("reviews", "")).strip()
    reviews = _parse_u32(review_text)
    if reviews is None:
        raise ScrapeError(
            f"Failed to parse review from csgoskins given the value {review_text}\nURL: {url}"
        )

    stars = _parse_float(star_and_review[0].rstrip())
    if stars is None:
        raise ScrapeError(
            f"Failed to parse stars from csgoskins given the value {star_and_review[0]}\nURL: {url}"
        )

    active_offers = _parse_u32(_expand_thousands(fields[3]))
    if active_offers is None:
        raise ScrapeError(
            "Failed to parse active offers from csgoskins offers given the value "
            f"{fields[3]}\nURL: {url}"
        )

    price = _parse_float(fields[5].lstrip("$").replace(",", ""))
    if price is None:
        raise ScrapeError(
            f"Failed to parse price from csgoskins given the value {fields[5]}\nURL: {url}"
        )

    return MarketOffer(
        name=fields[0],
        price=price,
        stars=stars,
        reviews=reviews,
        active_offers=active_offers,
    )


def parse_offers(html: str, url: str = "") -> list[MarketOffer]:
    """Read the offers listed on an item page, in page order."""
    document = BeautifulSoup(html, "html.parser")
    offers = []
    for block in document.select(OFFER_SELECTOR):
        # Sponsored offers carry extra text up front; the last 8 pieces are the offer.
        fields = [text.lower() for text in block.stripped_strings][-8:]
        if len(fields) != 8:
            raise ScrapeError(
                f"Market_info is not the expected size!\nLength: {len(fields)}\n"
                f"market_info: {fields!r}"
            )
        offers.append(_offer(fields, url))
    return offers


def fetch_offers(
    url: str,
    cookie: str,
    user_agent: str,
    session: requests.Session | None = None,
) -> list[MarketOffer]:
    """Download an item page and read its offers.

    The shared default session keeps cookies the site sets between calls.
    """
    http = session if session is not None else _SESSION
    try:
        response = http.get(url, headers={"Cookie": cookie, "User-Agent": user_agent})
    except requests.RequestException as exc:
        raise ScrapeError(f"Request failed!\nURL: {url}\n{exc}") from exc
    if not response.ok:
        raise ScrapeError(
            f"Response was not successfull!\nURL: {url}\n"
            f"Status code: {response.status_code} {response.reason}"
        )
    return parse_offers(response.text, url)


def name_prices(offers: Iterable[MarketOffer]) -> dict[str, float]:
    """Map market names to prices, cheapest first.

    A market listed twice keeps its first position and its last price.
    """
    prices: dict[str, float] = {}
    for offer in offers:
        prices[offer.name] = offer.price
    if any(math.isnan(price) for price in prices.values()):
        raise ScrapeError("Cannot order prices that are not numbers.")
    return dict(sorted(prices.items(), key=lambda item: item[1]))