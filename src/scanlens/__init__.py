"""scanlens: live component inspection engine and floating inspector panel."""

__version__ = "0.1.0"
