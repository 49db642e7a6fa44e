from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
from loguru import logger as log

from .base import BaseExtractor, afetch_html, fetch_html, load_html
from .common import (
    HEADERS, REQ_TIMEOUT, LISTING_LINK_TEMPLATE,
    DomainValidationError, RetrievalError,
    strip_br, to_float, to_uint,
)
from .grammar import DOCUMENT, Fragment, apartment_links, is_apartment_link, is_apartment_list_link
from .models import (
    Apartment, Area, Commission, Currency, Price, SubwayLine, SubwayStation, Views,
)

PRICE_CURRENCIES = {"$": Currency.USD, "€": Currency.EUR}
FEE_CURRENCIES = {"$": Currency.USD, "USD": Currency.USD, "€": Currency.EUR, "EUR": Currency.EUR}
SUBWAY_LINES = {"red": SubwayLine.RED, "green": SubwayLine.GREEN, "blue": SubwayLine.BLUE}


def _currency(symbol: Optional[Fragment], table: Dict[str, Currency]) -> Currency:
    # anything unrecognized (or no symbol at all) is hryvnia
    if symbol is None:
        return Currency.UAH
    return table.get(symbol.text.strip(), Currency.UAH)


# --------- Sections ---------

def _on_offer_id(apartment: Apartment, frag: Fragment) -> None:
    apartment.id = frag.inner_text()
    apartment.link = LISTING_LINK_TEMPLATE.format(apartment.id)


def _on_price(apartment: Apartment, frag: Fragment) -> None:
    apartment.price = Price(
        price_number=to_uint(frag.first("price_number").text),
        currency=_currency(frag.first("currency"), PRICE_CURRENCIES),
    )


def _on_address(apartment: Apartment, frag: Fragment) -> None:
    # house number may be missing: "Петропавловсклівська" without ", 13/8"
    for part in frag:
        setattr(apartment.address, part.rule, part.text.strip())


def _on_characteristics(apartment: Apartment, frag: Fragment) -> None:
    room_count, area, floor_info, renewed, published, views = frag.children
    ch = apartment.characteristics

    ch.room_count = to_uint(room_count.inner_text())
    total, living, kitchen = (to_float(c.text) for c in area)
    ch.area = Area(total=total, living=living, kitchen=kitchen)
    floor, max_floor = (to_uint(c.text) for c in floor_info)
    ch.floor = floor
    ch.max_floor = max_floor

    ch.statistics.renewed = renewed.inner_text()
    ch.statistics.published = published.inner_text()
    views_total, today, yesterday = (to_uint(c.text) for c in views)
    ch.statistics.views = Views(total=views_total, today=today, yesterday=yesterday)


def _on_description(apartment: Apartment, frag: Fragment) -> None:
    apartment.description.advert_description = strip_br(frag.inner_text())


def _on_details(apartment: Apartment, frag: Fragment) -> None:
    text = frag.first("det_descr_text")
    if text is None:
        return
    apartment.description.details_description = strip_br(text.text)
    ch = apartment.characteristics
    for item in text:
        if item.rule == "bargain":
            apartment.permits.bargain = True
        elif item.rule == "house_value":
            ch.house_type = item.text.strip()
        elif item.rule == "planning_value":
            ch.room_planning = item.text.strip()
        elif item.rule == "state_value":
            ch.state = item.text.strip()


def _on_rieltor(apartment: Apartment, frag: Fragment) -> None:
    phone, name, position, *agency = frag.children
    apartment.rieltor.rieltor_phone_number = phone.text
    apartment.rieltor.rieltor_name = name.inner_text().strip()
    apartment.rieltor.rieltor_position = position.inner_text().strip()
    apartment.rieltor.rieltor_agency = agency[0].inner_text().strip() if agency else None


def _on_photo_list(apartment: Apartment, frag: Fragment) -> None:
    apartment.photo.extend(photo.text for photo in frag)


# --------- Labels ---------

def _on_subway_station(apartment: Apartment, frag: Fragment) -> None:
    line, name = frag.children
    tag = line.text.strip().lower()
    if tag not in SUBWAY_LINES:
        raise DomainValidationError("metro line", line.text)
    apartment.infrastructure.subway_station.append(
        SubwayStation(name=name.text.strip(), line=SUBWAY_LINES[tag])
    )


def _on_commission(apartment: Apartment, frag: Fragment) -> None:
    value = frag.children[0]
    if value.rule == "commission_rate":
        apartment.permits.commission = Commission.rate(to_uint(value.text))
    elif value.rule == "commission_fee":
        price = Price(
            price_number=to_uint(value.text),
            currency=_currency(frag.first("commission_currency"), FEE_CURRENCIES),
        )
        apartment.permits.commission = Commission.fee(price)


def _flag(name: str) -> Callable[[Apartment, Fragment], None]:
    def _set(apartment: Apartment, frag: Fragment) -> None:
        setattr(apartment.permits, name, True)
    return _set


def _on_landmark(apartment: Apartment, frag: Fragment) -> None:
    apartment.infrastructure.landmarks.append(frag.inner_text().strip())


def _on_residential_complex(apartment: Apartment, frag: Fragment) -> None:
    apartment.infrastructure.residential_complex = frag.inner_text().strip()


_LABEL_HANDLERS: Dict[str, Callable[[Apartment, Fragment], None]] = {
    "premium_advert": _flag("premium_advert"),
    "short_period": _flag("short_period"),
    "allow_children": _flag("allow_children"),
    "allow_pets": _flag("allow_pets"),
    "commission": _on_commission,
    "subway_station": _on_subway_station,
    "landmark": _on_landmark,
    "residential_complex": _on_residential_complex,
}


def _on_label_section(apartment: Apartment, frag: Fragment) -> None:
    for label in frag:
        handler = _LABEL_HANDLERS.get(label.rule)
        if handler is not None:
            handler(apartment, label)


_HANDLERS: Dict[str, Callable[[Apartment, Fragment], None]] = {
    "offer_id": _on_offer_id,
    "price": _on_price,
    "address": _on_address,
    "characteristics": _on_characteristics,
    "description": _on_description,
    "details_description": _on_details,
    "label_section": _on_label_section,
    "rieltor": _on_rieltor,
    "photo_list": _on_photo_list,
}


def parse(html_content: str) -> Apartment:
    """
    Single apartment page -> ``Apartment``.

    Sections missing from the page keep their defaults. Raises
    ``StructureMismatchError`` when no section is recognized at all,
    ``ConversionError`` for a non-numeric number and
    ``DomainValidationError`` for an unknown metro line.
    """
    apartment = Apartment()
    for frag in DOCUMENT.parse(html_content):
        _HANDLERS[frag.rule](apartment, frag)
    return apartment


# --------- Retrieval ---------

def _is_remote(src: str) -> bool:
    return bool(re.match(r"^https?://", src.strip(), re.I)) and not Path(src).is_file()


def fetch_apartment_html_from_url(url: str) -> str:
    if not is_apartment_link(url):
        raise RetrievalError("Incorrect apartment link.")
    return fetch_html(url.strip())


async def afetch_apartment_html_from_url(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    if not is_apartment_link(url):
        raise RetrievalError("Incorrect apartment link.")
    return await afetch_html(url.strip(), client)


async def afetch_apartment_list_html_from_url(url: str) -> str:
    if not is_apartment_list_link(url):
        raise RetrievalError("Incorrect apartment list link.")
    return await afetch_html(url.strip())


class RieltorExtractor(BaseExtractor):
    """rieltor.ua single apartment page."""

    def fetch(self) -> str:
        return fetch_apartment_html_from_url(self.url)

    def extract(self) -> Apartment:
        return parse(self.fetch())


def parse_apartment(src: str) -> Apartment:
    """``src`` is a listing URL or a path to a saved page."""
    if _is_remote(src):
        return RieltorExtractor(src).extract()
    return parse(load_html(src))


async def _fetch_and_parse(link: str, client: httpx.AsyncClient) -> Apartment:
    html = await afetch_apartment_html_from_url(link, client)
    return parse(html)


async def parse_apartment_list(src: str) -> List[Apartment]:
    """
    Every apartment linked from an index page (URL or saved file).

    Links are de-duplicated and fetched concurrently; the first failure
    fails the whole batch. Result order is unspecified.
    """
    if _is_remote(src):
        html = await afetch_apartment_list_html_from_url(src)
    else:
        html = load_html(src)

    found = apartment_links(html)
    links = set(found)
    if not links:
        log.warning("No apartment links found in {}", src)
        return []
    log.info("{} apartment links ({} unique) in {}", len(found), len(links), src)

    async with httpx.AsyncClient(headers=HEADERS, follow_redirects=True, timeout=REQ_TIMEOUT) as client:
        # every task settles before the client closes
        results = await asyncio.gather(
            *(_fetch_and_parse(link, client) for link in links), return_exceptions=True
        )
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        log.error("{} of {} apartments failed, discarding the batch", len(failures), len(results))
        raise failures[0]
    return list(results)
