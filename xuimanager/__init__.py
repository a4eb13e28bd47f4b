"""Multi 3x-ui Docker manager with per-panel monthly traffic quota."""

__version__ = "1.0.0"
