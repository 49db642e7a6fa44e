"""
Pattern grammar for rieltor.ua apartment pages.

Rules never build a DOM. Each one locates its own fragment of markup with a
regular expression and exposes the interesting parts as tagged child
fragments, so the rest of the page may be arbitrary noise:

  * ``Pattern``  - one regex; named groups become children, nested by span.
  * ``Sequence`` - several rules that must be found one after another.
  * ``Repeat``   - any number of item rules, in any order, inside a container.
  * ``Document`` - independent sections found wherever they occur.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence as Seq, Tuple

from .common import StructureMismatchError


@dataclass
class Fragment:
    rule: str
    text: str
    start: int
    end: int
    children: List["Fragment"] = field(default_factory=list)

    def __iter__(self) -> Iterator["Fragment"]:
        return iter(self.children)

    def first(self, rule: Optional[str] = None) -> Optional["Fragment"]:
        for child in self.children:
            if rule is None or child.rule == rule:
                return child
        return None

    def inner_text(self) -> str:
        """Text of the first child, or of the fragment itself for a leaf."""
        return self.children[0].text if self.children else self.text


Located = Tuple[Fragment, int, int]  # fragment, match start, match end


class Rule:
    name: str

    def locate(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Located]:
        raise NotImplementedError

    def search(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Fragment]:
        found = self.locate(text, pos, endpos)
        return found[0] if found else None

    def parse(self, text: str) -> Fragment:
        frag = self.search(text)
        if frag is None:
            raise StructureMismatchError(self.name)
        return frag

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Pattern(Rule):
    """
    A single regex. Every named group that took part in the match becomes a
    child fragment; groups nested inside other groups become their children.
    A group named like the rule itself narrows the fragment to that group.
    ``inner`` grafts the children of another rule under a group's fragment.
    """

    def __init__(self, name: str, regex: str, inner: Optional[Mapping[str, Rule]] = None, flags: int = re.S):
        self.name = name
        self.regex = re.compile(regex, flags)
        self.inner = dict(inner or {})

    def locate(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Located]:
        m = self.regex.search(text, pos, len(text) if endpos is None else endpos)
        if not m:
            return None
        return self._build(text, m), m.start(), m.end()

    def fullmatch(self, text: str) -> Optional[Fragment]:
        m = self.regex.fullmatch(text)
        return self._build(text, m) if m else None

    def _build(self, text: str, m: re.Match) -> Fragment:
        index = self.regex.groupindex
        if self.name in index and m.start(self.name) != -1:
            start, end = m.span(self.name)
        else:
            start, end = m.span()
        root = Fragment(self.name, text[start:end], start, end)

        # outer groups sort before the groups they contain
        spans = sorted(
            (m.start(g), -m.end(g), i, g)
            for g, i in index.items()
            if g != self.name and m.start(g) != -1
        )
        stack = [root]
        for s, neg_e, _, g in spans:
            e = -neg_e
            while len(stack) > 1 and not (stack[-1].start <= s and e <= stack[-1].end):
                stack.pop()
            frag = Fragment(g, text[s:e], s, e)
            stack[-1].children.append(frag)
            stack.append(frag)
            sub = self.inner.get(g)
            if sub is not None:
                grafted = sub.search(text, s, e)
                if grafted is not None:
                    frag.children.extend(grafted.children)
        return root


class Sequence(Rule):
    """Steps found in order, each searched after the end of the previous one."""

    def __init__(self, name: str, steps: Seq[Rule]):
        self.name = name
        self.steps = list(steps)

    def locate(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Located]:
        children: List[Fragment] = []
        first_start = None
        for step in self.steps:
            found = step.locate(text, pos, endpos)
            if found is None:
                return None
            frag, mstart, pos = found
            if first_start is None:
                first_start = mstart
            children.append(frag)
        if first_start is None:
            return None
        return Fragment(self.name, text[first_start:pos], first_start, pos, children), first_start, pos


class Repeat(Rule):
    """
    Zero or more items of any of ``items``, in whatever order they appear.
    Without a container the whole searched region is scanned.
    """

    def __init__(self, name: str, items: Seq[Rule], container: Optional[str] = None, flags: int = re.S):
        self.name = name
        self.items = list(items)
        self.container = re.compile(container, flags) if container else None

    def locate(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Located]:
        endpos = len(text) if endpos is None else endpos
        if self.container is not None:
            m = self.container.search(text, pos, endpos)
            if not m:
                return None
            pos, endpos = m.span()
        frag = Fragment(self.name, text[pos:endpos], pos, endpos, list(self.scan(text, pos, endpos)))
        return frag, pos, endpos

    def scan(self, text: str, pos: int, endpos: int) -> Iterator[Fragment]:
        while pos < endpos:
            best: Optional[Located] = None
            for item in self.items:
                found = item.locate(text, pos, endpos)
                if found is not None and (best is None or found[1] < best[1]):
                    best = found
            if best is None:
                return
            frag, _, mend = best
            yield frag
            pos = max(mend, pos + 1)


class Document(Rule):
    """Independent sections; unrecognized markup in between is skipped."""

    def __init__(self, name: str, sections: Seq[Rule]):
        self.name = name
        self.sections = list(sections)

    def locate(self, text: str, pos: int = 0, endpos: Optional[int] = None) -> Optional[Located]:
        endpos = len(text) if endpos is None else endpos
        found = [f for f in (s.search(text, pos, endpos) for s in self.sections) if f is not None]
        if not found:
            return None
        found.sort(key=lambda f: f.start)
        return Fragment(self.name, text[pos:endpos], pos, endpos, found), pos, endpos


# --------- Atoms ---------

NUMBER = r"\d+"
PRICE_NUMBER = r"\d{1,3}(?:[ \u00a0\u2009\u202f]\d{3})+|\d+"
# "1.2.3" still matches here and is rejected by to_float
AREA_NUMBER = r"\d[\d.,]*"
ROOM_NUMBER = r"\d+\+?"
CURRENCY = r"\$|€|грн"
FEE_CURRENCY = r"\$|€|грн|USD|EUR|UAH"
URL = r"https?://[^\s\"'<>]+"
EVENT_DATE = (
    r"(?:вчора"
    r"|\d+\s+р\.\s+\d+\s+міс\.\s+тому"
    r"|\d+\s+(?:день|дні|днів)\s+тому"
    r"|\d+\s+тиж\.\s+тому"
    r"|\d+\s+міс\.\s+тому)"
)
_TEXT = r"[^<]+?"


# --------- Links ---------

APARTMENT_LINK = Pattern(
    "apartment_link",
    r"https?://rieltor\.ua/(?:[a-z0-9-]+/)?flats-rent/view/\d+/?",
)
APARTMENT_LIST_LINK = Pattern(
    "apartment_list_link",
    r"https?://rieltor\.ua/(?:[a-z0-9-]+/)?flats-rent(?!/view/)(?:/[^\s\"'<>?#]*)?(?:\?[^\s\"'<>#]*)?",
)
APARTMENT_LIST = Repeat("apartment_list", [APARTMENT_LINK])


# --------- Listing sections ---------

EVENT_DATE_RULE = Pattern("event_date", EVENT_DATE)

OFFER_ID = Pattern(
    "offer_id",
    r'class="offer-view-id"[^>]*>\s*(?:ID:?\s*)?(?P<offer_number>' + NUMBER + r")",
)

PRICE = Pattern(
    "price",
    r'class="offer-view-price-title"[^>]*>\s*'
    r"(?P<price_number>" + PRICE_NUMBER + r")\s*(?P<currency>" + CURRENCY + r")?",
)

ADDRESS = Pattern(
    "address",
    r'class="offer-view-address"[^>]*>\s*'
    r"(?P<street>[^,<]+?)(?:\s*,\s*(?P<house_number>[^<]+?))?\s*</div>"
    r'.*?class="offer-view-region"[^>]*>\s*'
    r"<a\b[^>]*>\s*(?P<city>" + _TEXT + r")\s*</a>\s*,\s*"
    r"<a\b[^>]*>\s*(?P<district>" + _TEXT + r")\s*</a>",
)

DESCRIPTION = Pattern(
    "description",
    r'class="offer-view-section-title"[^>]*>\s*Опис\s*</div>\s*'
    r'<div class="offer-view-section-text"[^>]*>\s*(?P<description_text>.*?)\s*</div>',
)

CHARACTERISTICS = Sequence("characteristics", [
    Pattern(
        "room_count",
        r'class="offer-view-details-column"[^>]*>.*?'
        r"(?P<room_count>(?P<rooms>" + ROOM_NUMBER + r")\s*кімнат\w*)",
    ),
    Pattern(
        "area",
        r"(?P<area_total>" + AREA_NUMBER + r")\s*/\s*"
        r"(?P<area_living>" + AREA_NUMBER + r")\s*/\s*"
        r"(?P<area_kitchen>" + AREA_NUMBER + r")\s*м²",
    ),
    Pattern("floor_info", r"поверх\s+(?P<floor>\d+)\s+з\s+(?P<max_floor>\d+)"),
    Pattern(
        "renewed",
        r'class="offer-view-details-column-aside"[^>]*>.*?'
        r"<span>\s*(?P<renewed>(?P<event_date>" + EVENT_DATE + r"))\s*</span>",
    ),
    Pattern("published", r"<span>\s*(?P<published>(?P<event_date>" + EVENT_DATE + r"))\s*</span>"),
    Pattern(
        "views",
        r"<span>\s*(?P<views>(?P<views_total>\d+)\s*"
        r"\(\s*сьогодні\s+(?P<views_today>\d+)\s*,\s*вчора\s+(?P<views_yesterday>\d+)\s*\))",
    ),
])

# facts picked out of the free-text "Деталі" block
_VALUE_END = r"(?=\s*(?:[,.<]|$))"
HOUSE_VALUE = Pattern("house_value", r"Будинок\s*-\s*(?P<house_value>[^,.<]+?)" + _VALUE_END)
PLANNING_VALUE = Pattern(
    "planning_value", r"Планування\s+кімнат\s*(?:-\s*)?(?P<planning_value>[^,.<]+?)" + _VALUE_END
)
STATE_VALUE = Pattern(
    "state_value", r"Загальний\s+стан\s+квартири\s*-\s*(?P<state_value>[^,.<]+?)" + _VALUE_END
)
BARGAIN = Pattern("bargain", r"Торг\s+(?:доречний|можливий)")
DETAILS_TEXT = Repeat("det_descr_text", [HOUSE_VALUE, PLANNING_VALUE, STATE_VALUE, BARGAIN])

DETAILS_DESCRIPTION = Pattern(
    "details_description",
    r'class="offer-view-section-title"[^>]*>\s*Деталі\s*</div>\s*'
    r'<div class="offer-view-section-text"[^>]*>\s*(?P<det_descr_text>.*?)\s*</div>',
    inner={"det_descr_text": DETAILS_TEXT},
)


def _chip(event: str, group: str) -> str:
    return (
        r'<a\b[^>]*data-analytics-event="card-click-' + event + r'_chip"[^>]*>\s*'
        r"(?:<img[^>]*>\s*)?(?P<" + group + r">" + _TEXT + r")\s*</a>"
    )


_LABEL_SPAN = r'<span\b[^>]*class="uilabel[^"]*"[^>]*>\s*'

PREMIUM_ADVERT = Pattern(
    "premium_advert",
    r'<span\b[^>]*class="[^"]*-premium[^"]*"[^>]*>\s*(?P<premium_advert>' + _TEXT + r")\s*</span>",
)
SHORT_PERIOD = Pattern("short_period", _chip("short_period", "short_period"))
COMMISSION_RATE = Pattern(
    "commission",
    _LABEL_SPAN + r"Комісія\s*(?P<commission_rate>" + NUMBER + r")\s*%\s*</span>",
)
COMMISSION_FEE = Pattern(
    "commission",
    _LABEL_SPAN + r"Комісія\s*(?P<commission_fee>" + PRICE_NUMBER + r")\s*"
    r"(?P<commission_currency>" + FEE_CURRENCY + r")\s*</span>",
)
SUBWAY_STATION = Pattern(
    "subway_station",
    r'<a\b[^>]*class="[^"]*-subway-(?P<subway_line>[^\s"]+)[^"]*"[^>]*>'
    r"(?:(?!</a>).)*?<span>\s*(?P<subway_name>" + _TEXT + r")\s*</span>",
)
LANDMARK = Pattern("landmark", _chip("landmark", "landmark_name"))
RESIDENTIAL_COMPLEX = Pattern("residential_complex", _chip("newhouse", "complex_name"))
ALLOW_CHILDREN = Pattern("allow_children", _chip("allow_children", "allow_children"))
ALLOW_PETS = Pattern("allow_pets", _chip("allow_pets", "allow_pets"))

LABEL_SECTION = Repeat(
    "label_section",
    [
        PREMIUM_ADVERT, SHORT_PERIOD, COMMISSION_RATE, COMMISSION_FEE, SUBWAY_STATION,
        LANDMARK, RESIDENTIAL_COMPLEX, ALLOW_CHILDREN, ALLOW_PETS,
    ],
    container=r'<div\b[^>]*class="offer-view-labels[^"]*"[^>]*>.*?</div>',
)

RIELTOR = Pattern(
    "rieltor",
    r'class="offer-view-rieltor-header-info"[^>]*>\s*'
    r'<a(?=[^>]*class="offer-view-rieltor-name")[^>]*?href="https?://(?P<phone_number>\d+)\.rieltor\.ua/?"[^>]*>'
    r"(?P<rieltor_name>\s*(?P<rieltor_name_value>" + _TEXT + r")\s*)</a>\s*"
    r'<div class="offer-view-rieltor-position"[^>]*>'
    r"(?P<rieltor_position>\s*(?P<rieltor_position_value>" + _TEXT + r")\s*)</div>"
    r'(?:\s*<a\b[^>]*class="offer-view-rieltor-agency-link"[^>]*>'
    r"(?P<rieltor_agency>\s*(?P<rieltor_agency_value>" + _TEXT + r")\s*)</a>)?",
)

_GALLERY_IMG = r'<img(?=[^>]*class="offer-photo-gallery__image")'
PHOTO = Pattern("photo", _GALLERY_IMG + r'[^>]*?\ssrc="(?P<photo>' + URL + r')"')
PHOTO_LIST = Repeat("photo_list", [PHOTO], container=r"(?:" + _GALLERY_IMG + r"[^>]*>\s*)+")

DOCUMENT = Document("document", [
    OFFER_ID, PRICE, ADDRESS, LABEL_SECTION, CHARACTERISTICS,
    DESCRIPTION, DETAILS_DESCRIPTION, RIELTOR, PHOTO_LIST,
])

RULES: Dict[str, Rule] = {
    r.name: r for r in (
        APARTMENT_LINK, APARTMENT_LIST_LINK, APARTMENT_LIST, EVENT_DATE_RULE,
        OFFER_ID, PRICE, ADDRESS, DESCRIPTION, CHARACTERISTICS, DETAILS_DESCRIPTION,
        LABEL_SECTION, RIELTOR, PHOTO_LIST, DOCUMENT,
    )
}


def parse(rule: str, text: str) -> Fragment:
    if rule not in RULES:
        raise ValueError(f"Unknown rule: {rule}")
    return RULES[rule].parse(text)


def is_apartment_link(url: str) -> bool:
    return APARTMENT_LINK.fullmatch((url or "").strip()) is not None


def is_apartment_list_link(url: str) -> bool:
    return APARTMENT_LIST_LINK.fullmatch((url or "").strip()) is not None


def apartment_links(html: str) -> List[str]:
    """Every single-listing link on an index page, in page order, duplicates kept."""
    return [f.text for f in APARTMENT_LIST.parse(html or "")]
