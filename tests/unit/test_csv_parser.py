"""Tests for CSV parsing and delimiter detection."""

from __future__ import annotations

from comphygiene.hygiene.csv_parser import detect_delimiter, parse_csv


class TestDetectDelimiter:
    def test_comma_default(self):
        assert detect_delimiter("just one column\nvalue") == ","

    def test_semicolon(self):
        assert detect_delimiter("a;b;c\n1;2;3") == ";"

    def test_tab(self):
        assert detect_delimiter("a\tb\tc\n1\t2\t3") == "\t"

    def test_pipe(self):
        assert detect_delimiter("a|b\n1|2") == "|"

    def test_ignores_delimiters_inside_quotes(self):
        assert detect_delimiter('"a,b,c";x\n"1,2,3";y') == ";"


class TestParseCsv:
    def test_headers_and_rows(self):
        parsed = parse_csv("id,name\n1,Ann\n2,Bob\n")
        assert parsed.headers == ["id", "name"]
        assert parsed.rows == [["1", "Ann"], ["2", "Bob"]]
        assert parsed.delimiter == ","

    def test_quoted_fields(self):
        parsed = parse_csv('id,note\n1,"hello, world"\n2,"say ""hi"""\n')
        assert parsed.rows == [["1", "hello, world"], ["2", 'say "hi"']]

    def test_multiline_quoted_field(self):
        parsed = parse_csv('id,address\n1,"1 Main St\nSpringfield"\n')
        assert parsed.rows == [["1", "1 Main St\nSpringfield"]]

    def test_crlf_and_blank_lines(self):
        parsed = parse_csv("id,name\r\n1,Ann\r\n\r\n2,Bob\r\n")
        assert parsed.rows == [["1", "Ann"], ["2", "Bob"]]

    def test_without_headers(self):
        parsed = parse_csv("1,Ann\n2,Bob,extra\n", has_headers=False)
        assert parsed.headers == ["Column 1", "Column 2", "Column 3"]
        assert len(parsed.rows) == 2

    def test_explicit_delimiter(self):
        parsed = parse_csv("a;b\n1;2\n", delimiter=";")
        assert parsed.rows == [["1", "2"]]

    def test_empty_text(self):
        parsed = parse_csv("")
        assert parsed.headers == []
        assert parsed.rows == []

    def test_nul_bytes_survive(self):
        parsed = parse_csv("id\nab\x00c\n")
        assert parsed.rows == [["ab\ufffdc"]]


class TestLargeFields:
    def test_unclosed_quote_runs_to_end_of_input(self):
        body = "".join(f"E{i},user{i}@example.com,Name {i}\n" for i in range(1, 10_000))
        text = 'Employee ID,Email,Name\nE0,"bad@example.com,Oops\n' + body
        assert len(text) > 300_000
        parsed = parse_csv(text)
        assert len(parsed.rows) == 1
        assert parsed.rows[0][0] == "E0"
        assert parsed.rows[0][1].startswith("bad@example.com,Oops\nE1,")
        assert parsed.rows[0][1].endswith("Name 9999\n")

    def test_cell_larger_than_default_limit(self):
        big = "x" * 200_000
        parsed = parse_csv(f"id,notes\n1,{big}\n2,\"{big}\"\n")
        assert parsed.rows == [["1", big], ["2", big]]
