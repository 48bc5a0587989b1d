"""Plotting session state and logging setup."""

from .controller import BatchResult, PlotSession

__all__ = ["BatchResult", "PlotSession"]
