"""Experiment output writers."""

from .logging import CurveCSVWriter, write_run_info

__all__ = ["CurveCSVWriter", "write_run_info"]
