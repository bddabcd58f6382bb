"""
ISO 20022 Base Mapping

Core helpers for mapping ISO 20022 XML elements onto typed entities:
tokenizing, local-name child lookup, cardinality rules and scalar
conversion.
"""

from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Tuple, TypeVar, Union
from xml.etree import ElementTree as ET
import logging
import re

from camt_reader.core.exceptions import (
    MalformedXmlError,
    MissingFieldError,
    InvalidDateError,
    InvalidTimestampError,
    InvalidAmountError,
    InvalidValueError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ISO 20022 DecimalNumber: ASCII digits, no exponent, no digit separators
AMOUNT_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")

# strptime's %f takes at most 6 digits; ISODateTime may carry more
EXCESS_FRACTION_PATTERN = re.compile(r"(\.[0-9]{6})[0-9]+")

TIMESTAMP_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
]

NAIVE_TIMESTAMP_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
]


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def namespace_of(element: ET.Element) -> Optional[str]:
    """Namespace URI of an element, or None when it has none."""
    tag = element.tag
    if tag.startswith("{"):
        return tag[1 : tag.index("}")]
    return None


def parse_xml(xml_content: Union[str, bytes]) -> ET.Element:
    """Parse XML text to its root element."""
    # Remove BOM if present
    if isinstance(xml_content, bytes):
        if xml_content.startswith(b"\xef\xbb\xbf"):
            xml_content = xml_content[3:]
    elif xml_content.startswith("\ufeff"):
        xml_content = xml_content[1:]

    try:
        return ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise MalformedXmlError(f"XML parsing error: {e}", position=e.position) from e


def parse_date(text: Optional[str], field_name: str) -> date:
    """Parse an ISODate (``YYYY-MM-DD``)."""
    value = (text or "").strip()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateError(text, field_name) from None


def parse_timestamp(text: Optional[str], field_name: str, assume_utc: bool = False) -> datetime:
    """
    Parse an ISODateTime into an offset-aware datetime.

    Values without a UTC offset are rejected unless ``assume_utc`` is set,
    in which case they are read as UTC. Fractions finer than microseconds
    are truncated.
    """
    value = EXCESS_FRACTION_PATTERN.sub(r"\1", (text or "").strip())

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    if assume_utc:
        for fmt in NAIVE_TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
            except ValueError:
                continue

    raise InvalidTimestampError(text, field_name)


def parse_amount(text: Optional[str], field_name: str) -> Decimal:
    """Parse a monetary amount as an exact decimal."""
    value = (text or "").strip()
    if not AMOUNT_PATTERN.match(value):
        raise InvalidAmountError(text, field_name)
    return Decimal(value)


def parse_int(text: Optional[str], field_name: str) -> int:
    value = (text or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidValueError(text, field_name)
    return int(value)


class ElementMapper:
    """
    Maps one XML element's attributes, text and children onto an entity.

    Children are matched by local name, so documents with and without a
    default namespace map the same way. Every failure names the missing or
    offending field and the entity being built.
    """

    def __init__(self, element: ET.Element, entity: Optional[str] = None):
        self.element = element
        self.entity = entity or local_name(element.tag)

    @property
    def tag(self) -> str:
        return local_name(self.element.tag)

    def children(self, tag: Optional[str] = None) -> List[ET.Element]:
        """Element children in document order, optionally filtered by local name."""
        if tag is None:
            return list(self.element)
        return [child for child in self.element if local_name(child.tag) == tag]

    def required(self, tag: str, build: Callable[[ET.Element], T]) -> T:
        """Map the first ``tag`` child; fail when there is none."""
        matches = self.children(tag)
        if not matches:
            raise MissingFieldError(tag, self.entity)
        return build(matches[0])

    def optional(self, tag: str, build: Callable[[ET.Element], T]) -> Optional[T]:
        """Map the first ``tag`` child, or None when absent."""
        matches = self.children(tag)
        if not matches:
            return None
        return build(matches[0])

    def repeated(self, tag: str, build: Callable[[ET.Element], T]) -> Tuple[T, ...]:
        """Map every ``tag`` child in document order."""
        return tuple(build(child) for child in self.children(tag))

    def attribute(self, name: str) -> str:
        value = self.element.get(name)
        if value is None:
            raise MissingFieldError(f"@{name}", self.entity)
        return value.strip()

    def optional_attribute(self, name: str) -> Optional[str]:
        value = self.element.get(name)
        return value.strip() if value is not None else None

    def text(self) -> str:
        """Direct text content, stripped."""
        return (self.element.text or "").strip()

    def required_text(self, tag: str) -> str:
        return self.required(tag, _text_of)

    def optional_text(self, tag: str) -> Optional[str]:
        return self.optional(tag, _text_of)

    def repeated_text(self, tag: str) -> Tuple[str, ...]:
        return self.repeated(tag, _text_of)


def _text_of(element: ET.Element) -> str:
    return (element.text or "").strip()
