"""Stable I/O boundaries: persistence and logging."""
