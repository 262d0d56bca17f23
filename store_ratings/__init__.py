"""Store ratings service: role gated store browsing with derived rating aggregates."""

__version__ = "0.1.0"
