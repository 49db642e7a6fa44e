from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import httpx

# --------- Config / constants ---------

UA = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
      "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36")

HTTP_TIMEOUT_S = float(os.getenv("RIELTOR_HTTP_TIMEOUT", "45.0"))
HTTP_CONNECT_TIMEOUT_S = float(os.getenv("RIELTOR_HTTP_CONNECT_TIMEOUT", "30.0"))
FETCH_ATTEMPTS = max(1, int(os.getenv("RIELTOR_FETCH_ATTEMPTS", "1")))
OUTPUT_ROOT = Path(os.getenv("RIELTOR_OUTDIR", "output"))

REQ_TIMEOUT = httpx.Timeout(HTTP_TIMEOUT_S, connect=HTTP_CONNECT_TIMEOUT_S)
HEADERS = {
    "User-Agent": UA,
    "Accept-Language": "uk-UA,uk;q=0.95,ru;q=0.6,en-US;q=0.5,en;q=0.4",
}

LISTING_LINK_TEMPLATE = "https://rieltor.ua/flats-rent/view/{}/"

U32_MAX = 2 ** 32 - 1

# thin / no-break / regular spaces used as thousands separators
_RE_SEPARATORS = re.compile(r"[\s\u00a0\u2009\u202f]+")
_RE_BR = re.compile(r"<br\s*/?>", re.I)


# --------- Errors ---------

class ScrapeError(Exception):
    pass


class StructureMismatchError(ScrapeError):
    """The grammar could not align the input at all."""

    def __init__(self, rule: str):
        self.rule = rule
        super().__init__(f"Parsing failed: no '{rule}' structure found")


class ConversionError(ScrapeError):
    """A fragment expected to be numeric was not."""

    def __init__(self, text: str, target: str):
        self.text = text
        self.target = target
        super().__init__(f"Cannot convert {text!r} to {target}")


class DomainValidationError(ScrapeError):
    """A captured value falls outside a closed enumeration."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Parsing error: unexpected {field} {value!r}")


class RetrievalError(ScrapeError):
    pass


class PersistenceError(ScrapeError):
    pass


# --------- Utils ---------

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def to_uint(text: str) -> int:
    """Unsigned 32-bit integer from a captured number; separators are stripped."""
    raw = _RE_SEPARATORS.sub("", text or "")
    if not raw.isdigit():
        raise ConversionError(text, "unsigned integer")
    value = int(raw)
    if value > U32_MAX:
        raise ConversionError(text, "unsigned integer")
    return value


def to_float(text: str) -> float:
    raw = (text or "").strip().replace(",", ".")
    if not re.fullmatch(r"\d+(?:\.\d+)?", raw):
        raise ConversionError(text, "float")
    return float(raw)


def strip_br(text: Optional[str]) -> str:
    if not text:
        return ""
    return _RE_BR.sub("", text).strip()
