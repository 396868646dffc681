"""Histogram booking file parser.

Two formats are understood:

Line format (any suffix other than .yaml/.yml), one histogram per line:
    # comment
    TH1F       h1 "Energy;E [GeV]" 100 0 50
    TH2D       h2 "XY" 10 0 10 10 0 10
    data/sub   TProfile p1 "Mean y vs x" 20 -1 1

A line whose first token is not a histogram type but whose second token is
carries a leading output directory. Titles may be quoted to contain spaces.

YAML format:
    histograms:
      - kind: TH1F
        name: h1
        title: Energy
        nbinsx: 100
        xmin: 0
        xmax: 50
        directory: data

The parser never raises for bad entries: each one yields a ParsedLine with
an error message and the caller decides how to report it.
"""

import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml
from pydantic import ValidationError

from histomanager.histograms.factory import HistoConfig
from histomanager.histograms.schemas import HistoConfig1D, HistoConfig2D, HistogramKind

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")

# Positional fields following the type token
FIELDS_1D = ("name", "title", "nbinsx", "xmin", "xmax")
FIELDS_2D = FIELDS_1D + ("nbinsy", "ymin", "ymax")

# ROOT class names: TH1F, TProfile2D, TGraph, ...
ROOT_CLASS_NAME = re.compile(r"^T[A-Z]")


class ConfigReadError(Exception):
    """A configuration file could not be opened or read as a whole."""


@dataclass
class ParsedLine:
    """Outcome of parsing one configuration line (or one YAML entry)."""
    line_number: int                      # 1-based line, or entry index for YAML
    text: str
    config: Optional[HistoConfig] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into one line."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def _validate(kind: HistogramKind, data: dict[str, Any]) -> tuple[Optional[HistoConfig], Optional[str]]:
    model = HistoConfig1D if kind.ndim == 1 else HistoConfig2D
    try:
        return model.model_validate({**data, "kind": kind}), None
    except ValidationError as e:
        return None, (
            f"Invalid {kind.ndim}D histogram configuration: "
            f"{describe_validation_error(e)}"
        )


def _type_token(tokens: list[str]) -> str:
    """Pick the token meant as the type of a line whose type is unknown."""
    if (
        len(tokens) > 1
        and not ROOT_CLASS_NAME.match(tokens[0])
        and ROOT_CLASS_NAME.match(tokens[1])
    ):
        return tokens[1]
    return tokens[0]


def parse_line(text: str, line_number: int = 0) -> Optional[ParsedLine]:
    """Parse one line of the line format.

    Returns None for blank and comment lines.
    """
    stripped = text.strip()
    if not stripped or stripped.startswith("#"):
        return None

    try:
        tokens = shlex.split(stripped)
    except ValueError as e:
        return ParsedLine(line_number, stripped, error=f"Could not split line into fields: {e}")
    if not tokens:
        return ParsedLine(line_number, stripped, error="Could not read histogram type")

    directory = ""
    kind = HistogramKind.from_token(tokens[0])
    if kind is None and len(tokens) > 1:
        kind = HistogramKind.from_token(tokens[1])
        if kind is not None:
            directory, tokens = tokens[0], tokens[1:]
    if kind is None:
        return ParsedLine(line_number, stripped, error=f"Unknown histogram type: {_type_token(tokens)}")

    fields = FIELDS_1D if kind.ndim == 1 else FIELDS_2D
    values = tokens[1:]
    if len(values) < len(fields):
        return ParsedLine(
            line_number,
            stripped,
            error=(
                f"Invalid {kind.ndim}D histogram configuration: expected "
                f"{len(fields)} fields after {kind.value}, got {len(values)}"
            ),
        )
    if len(values) > len(fields):
        logger.warning(
            f"Line {line_number}: ignoring extra fields {values[len(fields):]}"
        )

    data = dict(zip(fields, values))
    data["directory"] = directory
    config, error = _validate(kind, data)
    return ParsedLine(line_number, stripped, config=config, error=error)


def parse_lines(lines: Iterable[str]) -> list[ParsedLine]:
    """Parse every line of the line format, skipping blanks and comments."""
    parsed = []
    for line_number, text in enumerate(lines, start=1):
        result = parse_line(text, line_number)
        if result is not None:
            parsed.append(result)
    return parsed


def parse_yaml_entries(data: Any) -> list[ParsedLine]:
    """Parse the already-loaded content of a YAML booking file."""
    if data is None:
        return []
    entries = data.get("histograms", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ConfigReadError("Expected a list of histograms under 'histograms'")

    parsed = []
    for index, entry in enumerate(entries, start=1):
        text = repr(entry)
        if not isinstance(entry, dict):
            parsed.append(ParsedLine(index, text, error="Histogram entry is not a mapping"))
            continue

        token = entry.get("kind", entry.get("type"))
        kind = HistogramKind.from_token(str(token))
        if kind is None:
            parsed.append(ParsedLine(index, text, error=f"Unknown histogram type: {token}"))
            continue

        data = {key: value for key, value in entry.items() if key not in ("kind", "type")}
        if data.get("directory") is None:
            data["directory"] = ""
        config, error = _validate(kind, data)
        parsed.append(ParsedLine(index, text, config=config, error=error))
    return parsed


def read_config(path: Union[str, Path]) -> list[ParsedLine]:
    """Read a booking file in the format implied by its suffix.

    Raises ConfigReadError if the file cannot be read at all; bad entries
    are reported through the returned ParsedLine objects instead.
    """
    path = Path(path)
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            with open(path, "r") as f:
                return parse_yaml_entries(yaml.safe_load(f))
        with open(path, "r") as f:
            return parse_lines(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigReadError(f"Could not open config file {path}: {e}") from e
