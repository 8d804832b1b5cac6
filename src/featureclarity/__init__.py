"""Feature clarity analysis: turn a feature description into a structured clarity report."""

__version__ = "0.1.0"
