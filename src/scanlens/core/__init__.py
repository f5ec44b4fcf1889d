"""Inspection engine: change tracking, context resolution, snapshot collection."""
