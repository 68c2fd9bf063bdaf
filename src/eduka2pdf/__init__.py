"""eduka2pdf: download Eduka teaching tools as bookmarked PDFs."""

__version__ = "0.3.0"

__all__ = ["__version__"]
