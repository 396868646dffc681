import textwrap

import pytest
import uproot

from histomanager.histograms.registry import HistogramRegistry


@pytest.fixture
def output_path(tmp_path):
    return tmp_path / "histograms.root"


@pytest.fixture
def output_file(output_path):
    """Writable ROOT file, closed after the test if still open."""
    f = uproot.recreate(output_path)
    yield f
    if not f.closed:
        f.close()


@pytest.fixture
def registry(output_file):
    return HistogramRegistry(output_file)


@pytest.fixture
def write_config(tmp_path):
    """Write a booking file into the test directory and return its path."""
    def _write(text: str, name: str = "histos.cfg"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text))
        return path
    return _write


@pytest.fixture
def reopen(output_file, output_path):
    """Close the output file and open it again for reading."""
    def _reopen():
        output_file.close()
        return uproot.open(output_path)
    return _reopen
