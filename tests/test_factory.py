"""Tests for building hist objects from booking records."""

import hist

from histomanager.histograms.factory import build_histogram, split_title, storage_for
from histomanager.histograms.schemas import HistoConfig1D, HistoConfig2D, HistogramKind


class TestSplitTitle:
    def test_plain_title(self):
        assert split_title("Energy") == ("Energy", [])

    def test_axis_labels(self):
        assert split_title("Energy;E [GeV];Entries") == ("Energy", ["E [GeV]", "Entries"])

    def test_empty(self):
        assert split_title("") == ("", [])


class TestStorage:
    def test_profiles_use_mean_storage(self):
        assert isinstance(storage_for(HistogramKind.TPROFILE), hist.storage.Mean)
        assert isinstance(storage_for(HistogramKind.TPROFILE2D), hist.storage.Mean)

    def test_double_precision_keeps_variances(self):
        assert isinstance(storage_for(HistogramKind.TH1D), hist.storage.Weight)
        assert isinstance(storage_for(HistogramKind.TH1F), hist.storage.Double)


class TestBuildHistogram:
    def test_one_axis(self):
        config = HistoConfig1D(
            kind="TH1F", name="h1", title="Energy;E [GeV]", nbinsx=100, xmin=0, xmax=50
        )
        h = build_histogram(config)

        assert h.ndim == 1
        assert h.name == "h1"
        assert h.label == "Energy"
        assert h.axes[0].size == 100
        assert h.axes[0].edges[0] == 0.0
        assert h.axes[0].edges[-1] == 50.0
        assert h.axes[0].label == "E [GeV]"
        assert h.sum() == 0

    def test_two_axis(self):
        config = HistoConfig2D(
            kind="TH2D", name="h2", title="XY", nbinsx=10, xmin=0, xmax=10,
            nbinsy=4, ymin=-2, ymax=2,
        )
        h = build_histogram(config)

        assert h.ndim == 2
        assert h.axes[1].size == 4
        assert h.axes[1].edges[0] == -2.0

    def test_profile_accumulates_mean(self):
        config = HistoConfig1D(kind="TProfile", name="p1", nbinsx=2, xmin=0, xmax=2)
        p = build_histogram(config)

        p.fill([0.5, 0.5], sample=[1.0, 3.0])

        assert p.values()[0] == 2.0
