"""
Tests for the ISO 20022 element mapper

Tests cover:
- XML tokenizing and malformed input
- Required / optional / repeated cardinality
- Attribute and text captured from the same element
- Scalar conversion of dates, timestamps and amounts
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from xml.etree import ElementTree as ET

from camt_reader.core.exceptions import (
    MalformedXmlError,
    MissingFieldError,
    InvalidDateError,
    InvalidTimestampError,
    InvalidAmountError,
    InvalidValueError,
    ParseException,
)
from camt_reader.iso20022.base import (
    ElementMapper,
    local_name,
    namespace_of,
    parse_amount,
    parse_date,
    parse_int,
    parse_timestamp,
    parse_xml,
)


def _text(element):
    return element.text


class TestParseXml:
    """Tests for tokenizing input text."""

    def test_parse_str(self):
        root = parse_xml("<Document><A/></Document>")
        assert root.tag == "Document"

    def test_parse_bytes_with_bom(self):
        root = parse_xml(b"\xef\xbb\xbf<Document/>")
        assert root.tag == "Document"

    def test_parse_str_with_bom(self):
        root = parse_xml("\ufeff<Document/>")
        assert root.tag == "Document"

    def test_malformed_xml(self):
        with pytest.raises(MalformedXmlError) as exc_info:
            parse_xml("<Document><Unclosed></Document>")

        assert exc_info.value.error_code == "MALFORMED_XML"
        assert isinstance(exc_info.value, ParseException)
        assert isinstance(exc_info.value.__cause__, ET.ParseError)

    def test_empty_input_is_malformed(self):
        with pytest.raises(MalformedXmlError):
            parse_xml("")


class TestNames:
    """Tests for namespace handling."""

    def test_local_name(self):
        assert local_name("{urn:x}Stmt") == "Stmt"
        assert local_name("Stmt") == "Stmt"

    def test_namespace_of(self):
        assert namespace_of(ET.fromstring('<a xmlns="urn:x"/>')) == "urn:x"
        assert namespace_of(ET.fromstring("<a/>")) is None


class TestElementMapper:
    """Tests for cardinality handling."""

    def setup_method(self):
        self.element = ET.fromstring(
            '<Stmt xmlns="urn:x"><Id>S1</Id><Ntry>a</Ntry><Other/><Ntry>b</Ntry></Stmt>'
        )
        self.node = ElementMapper(self.element, "Statement")

    def test_entity_defaults_to_tag(self):
        assert ElementMapper(self.element).entity == "Stmt"
        assert self.node.tag == "Stmt"

    def test_required_present(self):
        assert self.node.required("Id", _text) == "S1"

    def test_required_missing_names_field_and_entity(self):
        with pytest.raises(MissingFieldError) as exc_info:
            self.node.required("Acct", _text)

        error = exc_info.value
        assert error.field_name == "Acct"
        assert error.entity == "Statement"
        assert error.error_code == "MISSING_FIELD"
        assert "Acct" in str(error)

    def test_optional_absent_is_none(self):
        assert self.node.optional("Acct", _text) is None

    def test_optional_present(self):
        assert self.node.optional("Id", _text) == "S1"

    def test_repeated_keeps_document_order(self):
        assert self.node.repeated("Ntry", _text) == ("a", "b")

    def test_repeated_none_is_empty_tuple(self):
        assert self.node.repeated("Bal", _text) == ()

    def test_children_filtered(self):
        assert [e.text for e in self.node.children("Ntry")] == ["a", "b"]
        assert len(self.node.children()) == 4

    def test_required_takes_first_match(self):
        assert self.node.required("Ntry", _text) == "a"

    def test_optional_text_of_empty_element(self):
        assert self.node.optional_text("Other") == ""

    def test_attribute_and_text_captured_independently(self):
        node = ElementMapper(ET.fromstring('<Amt Ccy="EUR"> 123.45 </Amt>'), "Amount")
        assert node.attribute("Ccy") == "EUR"
        assert node.text() == "123.45"

    def test_missing_attribute(self):
        node = ElementMapper(ET.fromstring("<Amt>1.00</Amt>"), "Amount")
        with pytest.raises(MissingFieldError) as exc_info:
            node.attribute("Ccy")
        assert exc_info.value.field_name == "@Ccy"
        assert node.optional_attribute("Ccy") is None

    def test_repeated_text(self):
        node = ElementMapper(ET.fromstring("<RmtInf><Ustrd>a</Ustrd><Ustrd> b </Ustrd></RmtInf>"))
        assert node.repeated_text("Ustrd") == ("a", "b")


class TestScalarConversion:
    """Tests for scalar parsing."""

    def test_parse_date(self):
        assert parse_date("2024-03-01", "Dt") == date(2024, 3, 1)

    @pytest.mark.parametrize("text", ["2024-13-01", "01.03.2024", "", None, "2024-03-01T10:00:00"])
    def test_parse_date_invalid(self, text):
        with pytest.raises(InvalidDateError) as exc_info:
            parse_date(text, "BookgDt/Dt")
        assert exc_info.value.field_name == "BookgDt/Dt"
        assert exc_info.value.error_code == "INVALID_DATE"

    def test_parse_timestamp_keeps_offset(self):
        value = parse_timestamp("2024-03-01T08:15:30+01:00", "CreDtTm")
        assert value == datetime(2024, 3, 1, 8, 15, 30, tzinfo=timezone(timedelta(hours=1)))
        assert value.utcoffset() == timedelta(hours=1)

    def test_parse_timestamp_zulu_and_fraction(self):
        value = parse_timestamp("2024-03-01T08:15:30.123Z", "CreDtTm")
        assert value.utcoffset() == timedelta(0)
        assert value.microsecond == 123000

    @pytest.mark.parametrize(
        "text", ["2024-03-01T08:15:30.1234567+01:00", "2024-03-01T08:15:30.123456789+01:00"]
    )
    def test_parse_timestamp_truncates_sub_microsecond_fraction(self, text):
        value = parse_timestamp(text, "CreDtTm")
        assert value == datetime(2024, 3, 1, 8, 15, 30, 123456, tzinfo=timezone(timedelta(hours=1)))

    def test_parse_timestamp_long_fraction_without_offset(self):
        value = parse_timestamp("2024-03-01T08:15:30.1234567", "CreDtTm", assume_utc=True)
        assert value.microsecond == 123456
        assert value.tzinfo == timezone.utc

    def test_parse_timestamp_without_offset_rejected(self):
        with pytest.raises(InvalidTimestampError):
            parse_timestamp("2024-03-01T08:15:30", "CreDtTm")

    def test_parse_timestamp_without_offset_assumed_utc(self):
        value = parse_timestamp("2024-03-01T08:15:30", "CreDtTm", assume_utc=True)
        assert value.tzinfo == timezone.utc

    def test_parse_timestamp_garbage(self):
        with pytest.raises(InvalidTimestampError) as exc_info:
            parse_timestamp("yesterday", "CreDtTm", assume_utc=True)
        assert exc_info.value.value == "yesterday"

    @pytest.mark.parametrize(
        "text,expected",
        [("123.45", Decimal("123.45")), ("0", Decimal("0")), ("-5.1", Decimal("-5.1")), (" 7.00 ", Decimal("7.00"))],
    )
    def test_parse_amount(self, text, expected):
        assert parse_amount(text, "Amt") == expected

    @pytest.mark.parametrize(
        "text", ["abc", "", "1e5", "NaN", "Infinity", "1_000", "1,00", "\u0661\u0662\u0663", "1.\u0665"]
    )
    def test_parse_amount_invalid(self, text):
        with pytest.raises(InvalidAmountError) as exc_info:
            parse_amount(text, "Amt")
        assert exc_info.value.error_code == "INVALID_AMOUNT"

    def test_parse_int(self):
        assert parse_int("42", "ElctrncSeqNb") == 42
        with pytest.raises(InvalidValueError):
            parse_int("4x", "ElctrncSeqNb")
        with pytest.raises(InvalidValueError):
            parse_int("\u0664\u0662", "ElctrncSeqNb")
