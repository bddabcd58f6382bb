"""
Tests for the statement report and command line entry point
"""

import json
import pytest

from camt_reader.__main__ import main
from camt_reader.iso20022.camt import Camt053Parser
from camt_reader.report import NO_ACCOUNT, format_json_report, format_text_report
from camt_reader.tests.xml_samples import entry_xml, statement_document


class TestTextReport:
    """Tests for the plain text report."""

    def test_sample_report(self, reader_config, sample_statement_xml):
        document = Camt053Parser(reader_config).parse(sample_statement_xml)
        lines = format_text_report(document).splitlines()

        assert lines[0] == "Creation date: 2024-03-01T08:15:30+01:00"
        assert lines[1] == "Opening balance: EUR 1000.00 CRDT (2024-02-29)"
        assert lines[2] == "Closing balance: EUR 1073.45 CRDT (2024-03-01)"
        assert lines[3] == "Entries:"
        assert lines[4:9] == [
            "== 2024-03-01 ==",
            "A: EUR 123.45 CRDT",
            "P: ACME Corp - IBAN FR1420041010050500013M02606",
            "Info: Invoice 100",
            "Additional: SEPA credit transfer",
        ]
        assert lines[9:] == [
            "== 2024-03-01 ==",
            "A: EUR 50.00 DBIT",
            "P: Power Utility - BBAN 12345678",
        ]

    def test_party_without_account(self, reader_config):
        extra = (
            "<NtryDtls><TxDtls>"
            "<RltdPties><Cdtr><Nm>ACME</Nm></Cdtr></RltdPties>"
            "<RmtInf><Ustrd>Invoice 100</Ustrd></RmtInf>"
            "</TxDtls></NtryDtls>"
        )
        document = Camt053Parser(reader_config).parse(statement_document(entry_xml(extra=extra)))

        report = format_text_report(document)

        assert f"P: ACME - {NO_ACCOUNT}" in report
        assert "Info: Invoice 100" in report

    def test_balance_lines_omitted_without_balances(self, reader_config):
        document = Camt053Parser(reader_config).parse(statement_document(entry_xml()))
        lines = format_text_report(document).splitlines()

        assert lines[1] == "Entries:"
        assert not any(line.startswith(("Opening balance", "Closing balance")) for line in lines)

    def test_multiple_statements_are_labelled(self, reader_config):
        xml = (
            "<Document><BkToCstmrStmt>"
            "<GrpHdr><CreDtTm>2024-03-01T08:15:30Z</CreDtTm></GrpHdr>"
            "<Stmt><Id>A</Id></Stmt><Stmt/>"
            "</BkToCstmrStmt></Document>"
        )
        report = format_text_report(Camt053Parser(reader_config).parse(xml))

        assert "Statement: A" in report
        assert "Statement: (no id)" in report
        assert report.count("Entries:") == 2


class TestJsonReport:
    """Tests for the JSON report."""

    def test_json_report(self, reader_config, sample_statement_xml):
        document = Camt053Parser(reader_config).parse(sample_statement_xml)
        data = json.loads(format_json_report(document))

        assert data["message"]["header"]["message_id"] == "MSG-2024-0001"
        assert len(data["message"]["statements"][0]["entries"]) == 2

    def test_compact_json(self, reader_config, sample_statement_xml):
        document = Camt053Parser(reader_config).parse(sample_statement_xml)
        assert "\n" not in format_json_report(document, indent=0)


class TestMain:
    """Tests for the command line entry point."""

    def test_text_output(self, sample_statement_file, capsys):
        assert main([str(sample_statement_file)]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Creation date: 2024-03-01T08:15:30+01:00")
        assert "A: EUR 123.45 CRDT" in out

    def test_json_output(self, sample_statement_file, capsys):
        assert main([str(sample_statement_file), "--format", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["message_definition"] == "camt.053.001.02"

    def test_parse_failure_exits_non_zero(self, tmp_path, capsys):
        path = tmp_path / "bad.xml"
        path.write_text("<Document><UnknownMsg/></Document>")

        assert main([str(path)]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "UnknownMsg" in captured.err

    def test_malformed_file(self, tmp_path, capsys):
        path = tmp_path / "bad.xml"
        path.write_text("<Document>")

        assert main([str(path)]) == 1
        assert "MALFORMED_XML" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.xml")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_config_file(self, tmp_path, capsys):
        statement = tmp_path / "naive.xml"
        statement.write_text(
            statement_document(
                entry_xml(),
                header="<GrpHdr><CreDtTm>2024-03-01T08:15:30</CreDtTm></GrpHdr>",
            )
        )
        config = tmp_path / "reader.yaml"
        config.write_text("assume_utc: true\n")

        assert main([str(statement)]) == 1
        capsys.readouterr()

        assert main([str(statement), "--config", str(config)]) == 0
        assert "Creation date: 2024-03-01T08:15:30+00:00" in capsys.readouterr().out

    def test_bad_config_file(self, sample_statement_file, tmp_path, capsys):
        config = tmp_path / "reader.yaml"
        config.write_text("json_indent: -1\n")

        assert main([str(sample_statement_file), "--config", str(config)]) == 1
        assert "CONFIG_ERROR" in capsys.readouterr().err

    @pytest.mark.parametrize("content", ["expected_namespace: 5\n", "assume_utc: maybe\n"])
    def test_mistyped_config_value(self, sample_statement_file, tmp_path, capsys, content):
        config = tmp_path / "reader.yaml"
        config.write_text(content)

        assert main([str(sample_statement_file), "--config", str(config)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "CONFIG_ERROR" in captured.err

    def test_missing_path_argument(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
