from .common import (
    ScrapeError, StructureMismatchError, ConversionError, DomainValidationError,
    RetrievalError, PersistenceError,
)
from .models import Apartment
from .rieltor import parse, parse_apartment, parse_apartment_list

__all__ = [
    "Apartment", "parse", "parse_apartment", "parse_apartment_list",
    "ScrapeError", "StructureMismatchError", "ConversionError", "DomainValidationError",
    "RetrievalError", "PersistenceError",
]
