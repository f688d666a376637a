"""Post-run validation reporting and input field analysis."""

from registry_loader.reporting.field_lengths import FieldLengthStats, analyze_field_lengths
from registry_loader.reporting.validation import ValidationReport, ValidationReporter

__all__ = ["FieldLengthStats", "ValidationReport", "ValidationReporter", "analyze_field_lengths"]
