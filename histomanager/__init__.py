"""histomanager - histogram booking registry.

Books histograms and profiles described in a configuration file and writes
them into a ROOT output file:
- Histogram registry (create, look up, write by name)
- Configuration parsing (line-oriented text or YAML)
- Output directory resolution inside the ROOT file
"""

__version__ = "0.1.0"
