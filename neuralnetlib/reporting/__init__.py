"""Reporting utilities for neuralnetlib training runs."""

from .artifacts import write_manifest
from .metrics import CSV_FIELDS, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["write_manifest", "CSV_FIELDS", "JsonlSink", "CsvSink", "PlotAdapter", "write_summary"]
