"""Conversion of two-axis profiles into writable ROOT ``TProfile2D`` objects.

uproot writes ``hist`` objects with Mean storage only when they have one
axis. Two-axis profiles are converted here from the per-bin accumulators
(entries, mean and sum of squared deviations) into the members ROOT keeps.
"""

import hist
import numpy as np
from uproot.writing.identify import to_TAxis, to_TProfile2D


def _root_order(values: np.ndarray) -> np.ndarray:
    # ROOT stores 2D bins with x running fastest, flow bins included
    return np.ascontiguousarray(values.T, dtype=np.float64).reshape(-1)


def _axis(name: str, axis):
    edges = axis.edges
    return to_TAxis(
        fName=name,
        fTitle=axis.label,
        fNbins=len(axis),
        fXmin=float(edges[0]),
        fXmax=float(edges[-1]),
    )


def to_writable_profile_2d(histogram: hist.Hist, name: str, title: str = ""):
    """Build the ``TProfile2D`` model for a two-axis Mean-storage histogram."""
    view = histogram.view(flow=True)
    entries = np.asarray(view["count"], dtype=np.float64)
    mean = np.asarray(view["value"], dtype=np.float64)
    deviations = np.asarray(view["_sum_of_deltas_squared"], dtype=np.float64)

    sumwz = entries * mean
    sumwz2 = deviations + entries * mean**2

    # Position moments only count in-range bins
    inner = entries[1:-1, 1:-1]
    x_edges = histogram.axes[0].edges
    y_edges = histogram.axes[1].edges
    x_centers = (x_edges[:-1] + x_edges[1:]) / 2.0
    y_centers = (y_edges[:-1] + y_edges[1:]) / 2.0

    total_entries = float(entries.sum())
    bin_entries = _root_order(entries)

    return to_TProfile2D(
        fName=name,
        fTitle=title,
        data=_root_order(sumwz),
        fEntries=total_entries,
        fTsumw=total_entries,
        fTsumw2=total_entries,
        fTsumwx=float((inner.T * x_centers).sum()),
        fTsumwx2=float((inner.T * x_centers**2).sum()),
        fTsumwy=float((inner * y_centers).sum()),
        fTsumwy2=float((inner * y_centers**2).sum()),
        fTsumwxy=float(((inner * y_centers).T * x_centers).sum()),
        fTsumwz=float(sumwz.sum()),
        fTsumwz2=float(sumwz2.sum()),
        fSumw2=_root_order(sumwz2),
        fBinEntries=bin_entries,
        fBinSumw2=bin_entries.copy(),
        fXaxis=_axis("xaxis", histogram.axes[0]),
        fYaxis=_axis("yaxis", histogram.axes[1]),
    )
