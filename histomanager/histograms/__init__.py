"""Histograms module - booking and bookkeeping of histogram objects.

Each registered object is a ``hist.Hist`` built from a configuration record:
- 1D histograms (TH1F, TH1D)
- 2D histograms (TH2F, TH2D)
- 1D and 2D profiles (TProfile, TProfile2D)
"""
