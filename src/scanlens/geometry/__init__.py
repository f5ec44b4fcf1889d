"""Floating inspector panel geometry."""
