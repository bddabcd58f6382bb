"""
ISO 20022 Financial Messaging Standard

Typed reading of ISO 20022 XML messages:
- base: element mapping and scalar conversion
- choice: schema choice resolution
- camt.* (Cash Management): camt.053 Bank to Customer Statement
"""

from camt_reader.iso20022.base import ElementMapper, parse_xml
from camt_reader.iso20022.choice import ChoiceResolver
from camt_reader.iso20022.camt.camt053 import Camt053Document, Camt053Parser

__all__ = [
    "ElementMapper",
    "parse_xml",
    "ChoiceResolver",
    "Camt053Document",
    "Camt053Parser",
]
