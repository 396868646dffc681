"""Construction of ``hist.Hist`` objects from booking records."""

from typing import Union

import hist

from .schemas import HistoConfig1D, HistoConfig2D, HistogramKind

HistoConfig = Union[HistoConfig1D, HistoConfig2D]


def split_title(title: str) -> tuple[str, list[str]]:
    """Split a ROOT-style ``"title;x label;y label"`` string.

    Returns the histogram title and the list of axis labels (possibly empty).
    """
    title, *labels = title.split(";")
    return title.strip(), [label.strip() for label in labels]


def storage_for(kind: HistogramKind):
    """Pick the bin storage matching a kind.

    Profiles accumulate a mean per bin. Double-precision histograms keep
    sum of squared weights so errors survive weighted fills, like ROOT's
    Sumw2; single-precision ones keep plain sums.
    """
    if kind.is_profile:
        return hist.storage.Mean()
    if kind.single_precision:
        return hist.storage.Double()
    return hist.storage.Weight()


def build_histogram(config: HistoConfig) -> hist.Hist:
    """Create the empty histogram or profile described by a record."""
    title, labels = split_title(config.title)
    labels += [""] * (2 - len(labels))

    axes = [
        hist.axis.Regular(
            config.nbinsx, config.xmin, config.xmax, name="x", label=labels[0]
        )
    ]
    if config.kind.ndim == 2:
        axes.append(
            hist.axis.Regular(
                config.nbinsy, config.ymin, config.ymax, name="y", label=labels[1]
            )
        )

    return hist.Hist(
        *axes,
        storage=storage_for(config.kind),
        name=config.name,
        label=title,
    )
