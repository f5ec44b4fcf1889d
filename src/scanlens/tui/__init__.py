"""Textual consumer UI for the inspector."""
