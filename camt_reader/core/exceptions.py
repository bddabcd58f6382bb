"""
camt_reader - Custom Exceptions

This module defines the exception hierarchy raised while reading
camt.053 statements.
"""

from typing import Any, Dict, Optional


class CamtReaderException(Exception):
    """Base exception for all camt_reader errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "CAMT_READER_ERROR"
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (Code: {self.error_code}, Context: {self.context})"
        return f"{self.message} (Code: {self.error_code})"


class ConfigurationException(CamtReaderException):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message,
            error_code="CONFIG_ERROR",
            context={"config_key": config_key} if config_key else {},
        )


class ParseException(CamtReaderException):
    """Base class for failures while mapping a document onto the model."""


class MalformedXmlError(ParseException):
    """Input is not well-formed XML."""

    def __init__(self, message: str, position: Optional[tuple] = None):
        context = {"position": position} if position else {}
        super().__init__(message, error_code="MALFORMED_XML", context=context)
        self.position = position


class UnknownVariantError(ParseException):
    """A choice point holds a child tag outside its recognized set."""

    def __init__(self, tag: Optional[str], choice_point: str, expected: tuple = ()):
        if tag is None:
            message = f"No variant present at choice point {choice_point}"
        else:
            message = f"Unknown variant <{tag}> at choice point {choice_point}"
        context: Dict[str, Any] = {"tag": tag, "choice_point": choice_point}
        if expected:
            context["expected"] = list(expected)
        super().__init__(message, error_code="UNKNOWN_VARIANT", context=context)
        self.tag = tag
        self.choice_point = choice_point
        self.expected = tuple(expected)


class MissingFieldError(ParseException):
    """A required element or attribute is absent."""

    def __init__(self, field_name: str, entity: str):
        super().__init__(
            f"Missing required field {field_name} in {entity}",
            error_code="MISSING_FIELD",
            context={"field": field_name, "entity": entity},
        )
        self.field_name = field_name
        self.entity = entity


class InvalidValueError(ParseException):
    """A scalar value does not convert to its expected type."""

    kind = "value"
    code = "INVALID_VALUE"

    def __init__(self, value: Optional[str], field_name: str):
        super().__init__(
            f"Invalid {self.kind} {value!r} in {field_name}",
            error_code=self.code,
            context={"value": value, "field": field_name},
        )
        self.value = value
        self.field_name = field_name


class InvalidDateError(InvalidValueError):
    kind = "date"
    code = "INVALID_DATE"


class InvalidTimestampError(InvalidValueError):
    kind = "timestamp"
    code = "INVALID_TIMESTAMP"


class InvalidAmountError(InvalidValueError):
    kind = "amount"
    code = "INVALID_AMOUNT"


class InvalidCodeError(InvalidValueError):
    """A closed code list (e.g. CdtDbtInd) holds an unlisted code."""

    kind = "code"
    code = "INVALID_CODE"


class MissingAccountError(CamtReaderException):
    """A counterparty's account was demanded but is not on file."""

    def __init__(self, role: str, party_name: Optional[str] = None):
        context: Dict[str, Any] = {"role": role}
        if party_name:
            context["party"] = party_name
        super().__init__(
            f"No account on file for {role}",
            error_code="MISSING_ACCOUNT",
            context=context,
        )
        self.role = role
        self.party_name = party_name
