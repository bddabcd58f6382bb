"""
camt_reader - ISO 20022 camt.053 statement reader

Decodes camt.053.001.02 Bank-to-Customer Statement XML into an immutable,
typed model.
"""

from typing import Optional, Union

from camt_reader.core.config import ReaderConfig
from camt_reader.iso20022.camt.camt053 import Camt053Document, Camt053Parser

__version__ = "1.0.0"

def parse_statement(
    xml_content: Union[str, bytes], config: Optional[ReaderConfig] = None
) -> Camt053Document:
    """Parse a camt.053 document; raises a ParseException on the first failure."""
    return Camt053Parser(config).parse(xml_content)

__all__ = [
    "Camt053Document",
    "Camt053Parser",
    "ReaderConfig",
    "parse_statement",
]
