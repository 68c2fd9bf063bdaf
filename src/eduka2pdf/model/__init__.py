"""Data structures shared across eduka2pdf stages."""
