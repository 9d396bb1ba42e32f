"""Dynamic Quota Cap: per-category caps on a host's profit quota."""

__version__ = "1.0.0"
