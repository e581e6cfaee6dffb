"""Batch pipelines that turn bellows parameters into export files."""

from .export_pattern import DEFAULT_FORMATS, SUPPORTED_FORMATS, describe_outputs, export_pattern

__all__ = ["DEFAULT_FORMATS", "SUPPORTED_FORMATS", "describe_outputs", "export_pattern"]
