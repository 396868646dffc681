"""Output module - directory handling inside the ROOT output file."""
