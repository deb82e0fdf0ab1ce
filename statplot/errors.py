from __future__ import annotations


class PlotDataError(ValueError):
    """Invalid plot input: bad data, out-of-domain parameters or unusable canvas sizes."""


class TickGenerationError(RuntimeError):
    """Tick stepping reached a state that only a logic defect can produce."""
