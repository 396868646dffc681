"""Histogram registry - books, serves and writes histograms and profiles.

Objects are kept in four name-keyed collections (1D histograms, 2D
histograms, 1D profiles, 2D profiles), selected by the kind tag of the
booking record. Names are unique across the whole registry.

Nothing in here raises on bad input: missing files, malformed lines,
unknown kinds, duplicate names, a missing output file and unknown names are
all logged and the offending unit of work is skipped.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

import hist
import uproot
from pydantic import ValidationError

from histomanager.config.parser import ConfigReadError, describe_validation_error, read_config
from histomanager.output.directories import DirectoryResolver, normalize_path
from histomanager.output.profiles import to_writable_profile_2d

from .factory import HistoConfig, build_histogram, split_title
from .schemas import (
    HistoConfig1D,
    HistoConfig2D,
    HistogramCollection,
    HistogramKind,
    HistogramSummary,
)

logger = logging.getLogger(__name__)


@dataclass
class HistogramEntry:
    """A booked object and where it will be written."""
    name: str
    kind: HistogramKind
    histogram: hist.Hist
    title: str = ""
    directory: str = ""                                  # normalized sub-path
    target: Optional[uproot.WritableDirectory] = None    # resolved at booking time


class HistogramRegistry:
    """Registry of histograms booked for one output file.

    The output file is an already-open ``uproot`` writable directory (as
    returned by ``uproot.recreate``). Its lifecycle belongs to the caller;
    the registry only creates sub-directories in it and writes into it.
    Without an output file objects can still be booked and filled, but
    nothing is written.
    """

    def __init__(self, output: Optional[uproot.WritableDirectory] = None):
        self.output = output
        self._directories = DirectoryResolver(output)
        self._histos_1d: dict[str, HistogramEntry] = {}
        self._histos_2d: dict[str, HistogramEntry] = {}
        self._profiles_1d: dict[str, HistogramEntry] = {}
        self._profiles_2d: dict[str, HistogramEntry] = {}
        # Also the search order of write()
        self._collections: dict[HistogramCollection, dict[str, HistogramEntry]] = {
            HistogramCollection.HISTO_1D: self._histos_1d,
            HistogramCollection.HISTO_2D: self._histos_2d,
            HistogramCollection.PROFILE_1D: self._profiles_1d,
            HistogramCollection.PROFILE_2D: self._profiles_2d,
        }

    # Configuration
    def load_config(self, config_path: Union[str, Path]) -> bool:
        """Book every histogram described in a configuration file.

        Returns False only if the file cannot be read. Bad lines are logged
        and skipped without stopping the load.
        """
        try:
            parsed = read_config(config_path)
        except ConfigReadError as e:
            logger.error(str(e))
            return False

        booked = 0
        for line in parsed:
            if not line.ok:
                logger.error(f"{config_path}:{line.line_number}: {line.error} in line: {line.text}")
                continue
            if self.add(line.config) is not None:
                booked += 1

        logger.info(
            f"Booked {booked} histograms from {config_path} "
            f"({len(parsed) - booked} entries skipped)"
        )
        return True

    # Booking
    def add(self, config: HistoConfig) -> Optional[hist.Hist]:
        """Book the object described by a record of either dimension.

        Returns the new histogram, or None if it was not booked.
        """
        existing = self.get_entry(config.name)
        if existing is not None:
            logger.warning(
                f"Histogram '{config.name}' already booked as {existing.kind.value}, "
                f"ignoring duplicate {config.kind.value}"
            )
            return None

        try:
            histogram = build_histogram(config)
        except Exception as e:
            logger.error(f"Failed to create {config.kind.value} '{config.name}': {e}")
            return None

        directory = normalize_path(config.directory)
        target = None
        if self.output is not None:
            target = self._directories.resolve(directory)

        title, _ = split_title(config.title)
        entry = HistogramEntry(
            name=config.name,
            kind=config.kind,
            histogram=histogram,
            title=title,
            directory=directory,
            target=target,
        )
        self._collections[config.kind.collection][config.name] = entry
        logger.debug(f"Booked {config.kind.value} '{config.name}' in '/{directory}'")
        return histogram

    def add_histo_1d(self, config: HistoConfig1D) -> Optional[hist.Hist]:
        """Book a TH1F, TH1D or TProfile from its record."""
        return self.add(config)

    def add_histo_2d(self, config: HistoConfig2D) -> Optional[hist.Hist]:
        """Book a TH2F, TH2D or TProfile2D from its record."""
        return self.add(config)

    def create_histo_1d(
        self,
        name: str,
        title: str,
        nbinsx: int,
        xmin: float,
        xmax: float,
        kind: Union[HistogramKind, str] = HistogramKind.TH1F,
        directory: str = "",
    ) -> Optional[hist.Hist]:
        """Book a one-axis object from plain arguments."""
        try:
            config = HistoConfig1D(
                kind=kind, name=name, title=title,
                nbinsx=nbinsx, xmin=xmin, xmax=xmax,
                directory=directory,
            )
        except ValidationError as e:
            logger.error(f"Invalid 1D histogram configuration for '{name}': {describe_validation_error(e)}")
            return None
        return self.add(config)

    def create_histo_2d(
        self,
        name: str,
        title: str,
        nbinsx: int,
        xmin: float,
        xmax: float,
        nbinsy: int,
        ymin: float,
        ymax: float,
        kind: Union[HistogramKind, str] = HistogramKind.TH2F,
        directory: str = "",
    ) -> Optional[hist.Hist]:
        """Book a two-axis object from plain arguments."""
        try:
            config = HistoConfig2D(
                kind=kind, name=name, title=title,
                nbinsx=nbinsx, xmin=xmin, xmax=xmax,
                nbinsy=nbinsy, ymin=ymin, ymax=ymax,
                directory=directory,
            )
        except ValidationError as e:
            logger.error(f"Invalid 2D histogram configuration for '{name}': {describe_validation_error(e)}")
            return None
        return self.add(config)

    # Lookups
    def get_histo_1d(self, name: str) -> Optional[hist.Hist]:
        """Get a TH1F/TH1D by name."""
        return self._get(HistogramCollection.HISTO_1D, name)

    def get_histo_2d(self, name: str) -> Optional[hist.Hist]:
        """Get a TH2F/TH2D by name."""
        return self._get(HistogramCollection.HISTO_2D, name)

    def get_profile_1d(self, name: str) -> Optional[hist.Hist]:
        """Get a TProfile by name."""
        return self._get(HistogramCollection.PROFILE_1D, name)

    def get_profile_2d(self, name: str) -> Optional[hist.Hist]:
        """Get a TProfile2D by name."""
        return self._get(HistogramCollection.PROFILE_2D, name)

    def _get(self, collection: HistogramCollection, name: str) -> Optional[hist.Hist]:
        entry = self._collections[collection].get(name)
        return entry.histogram if entry is not None else None

    def get_entry(self, name: str) -> Optional[HistogramEntry]:
        """Find a booked entry in any collection."""
        for entries in self._collections.values():
            entry = entries.get(name)
            if entry is not None:
                return entry
        return None

    def __contains__(self, name: str) -> bool:
        return self.get_entry(name) is not None

    def _iter_entries(self) -> Iterator[HistogramEntry]:
        for entries in self._collections.values():
            yield from entries.values()

    # Output
    def resolve_directory(self, path: str) -> Optional[uproot.WritableDirectory]:
        """Get (creating as needed) the output directory for a slash-delimited path."""
        return self._directories.resolve(path)

    def write_all(self, flush: bool = False) -> int:
        """Write every booked object into its directory of the output file.

        Returns the number of objects written.
        """
        if self.output is None:
            logger.warning("Output file not set. Histograms will not be written to disk.")
            return 0

        written = 0
        total = 0
        for entry in self._iter_entries():
            total += 1
            target = entry.target if entry.target is not None else self.output
            if self._write_entry(entry, target):
                written += 1

        if flush:
            self.flush()

        logger.info(f"Wrote {written}/{total} histograms")
        return written

    def write(
        self, name: str, directory: Optional[uproot.WritableDirectory] = None
    ) -> bool:
        """Write one object by name.

        Goes into ``directory`` if given, otherwise into the directory
        resolved when the object was booked.
        """
        entry = self.get_entry(name)
        if entry is None:
            logger.error(f"Histogram {name} not found.")
            return False

        target = directory
        if target is None:
            target = entry.target if entry.target is not None else self.output
        if target is None:
            logger.warning(f"Output file not set. Histogram {name} will not be written to disk.")
            return False

        return self._write_entry(entry, target)

    def _write_entry(
        self, entry: HistogramEntry, directory: uproot.WritableDirectory
    ) -> bool:
        try:
            if entry.kind is HistogramKind.TPROFILE2D:
                directory[entry.name] = to_writable_profile_2d(
                    entry.histogram, entry.name, entry.title
                )
            else:
                directory[entry.name] = entry.histogram
        except Exception as e:
            logger.error(f"Failed to write {entry.kind.value} '{entry.name}': {e}")
            return False
        logger.debug(f"Wrote {entry.kind.value} '{entry.name}' to '/{entry.directory}'")
        return True

    def flush(self) -> None:
        """Flush the output file to disk."""
        if self.output is None:
            return
        try:
            self.output.file.sink.flush()
        except Exception as e:
            logger.error(f"Failed to flush output file: {e}")

    # Introspection
    def count(self, collection: Optional[HistogramCollection] = None) -> int:
        """Number of booked objects, overall or in one collection."""
        if collection is not None:
            return len(self._collections[collection])
        return sum(len(entries) for entries in self._collections.values())

    def get_keys(self, collection: Optional[HistogramCollection] = None) -> list[str]:
        """Names of booked objects, in booking order per collection."""
        if collection is not None:
            return list(self._collections[collection].keys())
        return [entry.name for entry in self._iter_entries()]

    def list_summaries(self) -> list[HistogramSummary]:
        """List lightweight descriptions of every booked object."""
        summaries = []
        for entry in self._iter_entries():
            x = entry.histogram.axes[0]
            binning = {
                "nbinsx": x.size,
                "xmin": float(x.edges[0]),
                "xmax": float(x.edges[-1]),
            }
            if entry.kind.ndim == 2:
                y = entry.histogram.axes[1]
                binning.update(
                    nbinsy=y.size, ymin=float(y.edges[0]), ymax=float(y.edges[-1])
                )
            summaries.append(HistogramSummary(
                name=entry.name,
                kind=entry.kind,
                collection=entry.kind.collection,
                title=entry.title,
                directory=entry.directory,
                **binning,
            ))
        return summaries

    def get_stats(self) -> dict:
        """Get registry statistics."""
        stats = {c.value: len(entries) for c, entries in self._collections.items()}
        stats["total"] = self.count()
        stats["directories"] = self._directories.count()
        return stats

    def clear(self) -> None:
        """Release every booked object and forget resolved directories."""
        for entries in self._collections.values():
            entries.clear()
        self._directories.clear()
        logger.info("Cleared histogram registry")
