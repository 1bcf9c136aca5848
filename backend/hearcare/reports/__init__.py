"""Report renderers for stored test results."""

from .pdf_report import generate_pdf_report

__all__ = ["generate_pdf_report"]
