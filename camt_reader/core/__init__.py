"""
camt_reader core: configuration and exceptions.
"""

from .config import ReaderConfig, LogLevel, get_config, set_config, load_config
from .exceptions import (
    CamtReaderException,
    ConfigurationException,
    ParseException,
    MalformedXmlError,
    UnknownVariantError,
    MissingFieldError,
    InvalidValueError,
    InvalidDateError,
    InvalidTimestampError,
    InvalidAmountError,
    InvalidCodeError,
    MissingAccountError,
)

__all__ = [
    "ReaderConfig",
    "LogLevel",
    "get_config",
    "set_config",
    "load_config",
    "CamtReaderException",
    "ConfigurationException",
    "ParseException",
    "MalformedXmlError",
    "UnknownVariantError",
    "MissingFieldError",
    "InvalidValueError",
    "InvalidDateError",
    "InvalidTimestampError",
    "InvalidAmountError",
    "InvalidCodeError",
    "MissingAccountError",
]
