"""Tests for the booking file parser."""

import logging

import pytest

from histomanager.config.parser import (
    ConfigReadError,
    parse_line,
    parse_lines,
    parse_yaml_entries,
    read_config,
)
from histomanager.histograms.schemas import HistoConfig1D, HistoConfig2D, HistogramKind


class TestParseLine:
    """Test single lines of the line format."""

    def test_one_axis_line(self):
        result = parse_line('TH1F h1 "Energy" 100 0 50', 3)

        assert result.ok
        assert result.line_number == 3
        assert isinstance(result.config, HistoConfig1D)
        assert result.config.kind is HistogramKind.TH1F
        assert result.config.name == "h1"
        assert result.config.title == "Energy"
        assert result.config.nbinsx == 100
        assert (result.config.xmin, result.config.xmax) == (0.0, 50.0)
        assert result.config.directory == ""

    def test_two_axis_line(self):
        result = parse_line("TProfile2D p2 XY 10 0 10 20 -1 1")

        assert result.ok
        assert isinstance(result.config, HistoConfig2D)
        assert result.config.nbinsy == 20
        assert result.config.ymin == -1.0

    def test_leading_directory(self):
        result = parse_line('data/sub TH2D h2 "XY" 10 0 10 10 0 10')

        assert result.ok
        assert result.config.kind is HistogramKind.TH2D
        assert result.config.directory == "data/sub"

    def test_quoted_title_with_spaces(self):
        result = parse_line("TH1D h1 'Energy deposit;E [GeV]' 10 0 1")

        assert result.ok
        assert result.config.title == "Energy deposit;E [GeV]"

    @pytest.mark.parametrize("text", ["", "   ", "# TH1F h1 t 10 0 1", "   # indented comment"])
    def test_blank_and_comment_lines(self, text):
        assert parse_line(text) is None

    def test_unknown_type(self):
        result = parse_line("TH3F h3 t 10 0 1 10 0 1 10 0 1")

        assert not result.ok
        assert result.config is None
        assert "Unknown histogram type: TH3F" in result.error

    def test_unknown_type_after_directory(self):
        result = parse_line("data TH3F h3 t 10 0 1 10 0 1 10 0 1")

        assert not result.ok
        assert "Unknown histogram type: TH3F" in result.error

    def test_unknown_first_token(self):
        result = parse_line("bogus line")

        assert "Unknown histogram type: bogus" in result.error

    def test_missing_numeric_fields(self):
        result = parse_line("TH1F h1 Energy 100 0")

        assert not result.ok
        assert "expected 5 fields" in result.error

    def test_wrong_typed_field(self):
        result = parse_line("TH2F h2 XY 10 0 10 ten 0 10")

        assert not result.ok
        assert result.error.startswith("Invalid 2D histogram configuration")
        assert "nbinsy" in result.error

    def test_empty_range(self):
        result = parse_line("TH1F h1 Energy 10 5 1")

        assert not result.ok
        assert "xmax" in result.error

    def test_unterminated_quote(self):
        result = parse_line('TH1F h1 "Energy 10 0 1')

        assert not result.ok
        assert "Could not split line" in result.error

    def test_extra_fields_are_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = parse_line("TH1F h1 Energy 10 0 1 surplus", 7)

        assert result.ok
        assert result.config.xmax == 1.0
        assert "Line 7: ignoring extra fields ['surplus']" in caplog.text


class TestParseLines:
    def test_line_numbers_skip_blanks_and_comments(self):
        lines = [
            "# header\n",
            "\n",
            "TH1F h1 E 10 0 1\n",
            "bogus line\n",
            "TH2F h2 XY 2 0 1 2 0 1\n",
        ]
        parsed = parse_lines(lines)

        assert [p.line_number for p in parsed] == [3, 4, 5]
        assert [p.ok for p in parsed] == [True, False, True]


class TestYamlEntries:
    def test_entries(self):
        data = {
            "histograms": [
                {"kind": "TH1F", "name": "h1", "title": "Energy", "nbinsx": 100, "xmin": 0, "xmax": 50},
                {"type": "TH2D", "name": "h2", "nbinsx": 10, "xmin": 0, "xmax": 10,
                 "nbinsy": 10, "ymin": 0, "ymax": 10, "directory": "data/sub"},
            ]
        }
        parsed = parse_yaml_entries(data)

        assert all(p.ok for p in parsed)
        assert parsed[0].config.name == "h1"
        assert parsed[1].config.kind is HistogramKind.TH2D
        assert parsed[1].config.directory == "data/sub"

    def test_bad_entries(self):
        data = {
            "histograms": [
                "TH1F h1",
                {"kind": "TH9", "name": "h9"},
                {"kind": "TH1F", "name": "h1", "nbinsx": 10},
            ]
        }
        parsed = parse_yaml_entries(data)

        assert [p.ok for p in parsed] == [False, False, False]
        assert "not a mapping" in parsed[0].error
        assert "Unknown histogram type: TH9" in parsed[1].error
        assert "xmin" in parsed[2].error

    def test_empty_document(self):
        assert parse_yaml_entries(None) == []

    def test_histograms_must_be_a_list(self):
        with pytest.raises(ConfigReadError):
            parse_yaml_entries({"histograms": {"name": "h1"}})


class TestReadConfig:
    def test_line_format(self, write_config):
        path = write_config(
            """
            # energy plots
            TH1F h1 "Energy" 100 0 50
            data TProfile p1 "Mean" 10 0 1
            """
        )
        parsed = read_config(path)

        assert [p.config.name for p in parsed] == ["h1", "p1"]

    def test_yaml_format(self, write_config):
        path = write_config(
            """
            histograms:
              - kind: TProfile
                name: p1
                nbinsx: 10
                xmin: 0
                xmax: 1
            """,
            name="histos.yaml",
        )
        parsed = read_config(path)

        assert len(parsed) == 1
        assert parsed[0].config.kind is HistogramKind.TPROFILE

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigReadError, match="Could not open config file"):
            read_config(tmp_path / "missing.cfg")

    def test_invalid_yaml(self, write_config):
        path = write_config("histograms: [unclosed\n", name="broken.yml")

        with pytest.raises(ConfigReadError):
            read_config(path)
