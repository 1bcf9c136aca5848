# -*- coding: utf-8 -*-
"""Shareable PDF summary of a single hearing test result."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from io import BytesIO
from textwrap import wrap
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from hearcare.analyzers.history import overall_status
from hearcare.analyzers.results_processor import frequency_breakdown, recommendations_for
from hearcare.domain.test_result import TestResult


logger = logging.getLogger(__name__)

PDF_FONT_REGULAR = "Helvetica"
PDF_FONT_BOLD = "Helvetica-Bold"
REPORT_TITLE = "HearCare Hearing Test Results"


def _format_level(value: float) -> str:
    return f"{float(value):.1f} dB"


class _ReportCanvas:
    """Top-down text layout on letter pages, starting a new page when full."""

    margin = 2 * cm
    line_height = 14.0
    wrap_width = 90

    def __init__(self, buffer: BytesIO) -> None:
        self.pdf = canvas.Canvas(buffer, pagesize=letter)
        self.pdf.setTitle(REPORT_TITLE)
        self.width, self.height = letter
        self.cursor = self.height - self.margin

    def _reserve(self, height: float) -> None:
        if self.cursor - height < self.margin:
            self.pdf.showPage()
            self.cursor = self.height - self.margin

    def lines(self, lines: Sequence[str], font: str = PDF_FONT_REGULAR, size: int = 11,
              height: Optional[float] = None, indent: float = 0.0) -> None:
        height = height or self.line_height
        for line in lines:
            self._reserve(height)
            self.pdf.setFont(font, size)
            self.pdf.drawString(self.margin + indent, self.cursor, line)
            self.cursor -= height

    def heading(self, text: str, major: bool = False) -> None:
        if major:
            self.lines([text], PDF_FONT_BOLD, 20, height=24)
        else:
            self.lines([text], PDF_FONT_BOLD, 14, height=18)

    def paragraph(self, text: str, font: str = PDF_FONT_REGULAR) -> None:
        wrapped = wrap(text, self.wrap_width)
        self._reserve(len(wrapped) * self.line_height)
        self.lines(wrapped, font)
        self.gap(4)

    def bullet(self, text: str) -> None:
        first, *rest = wrap(text, self.wrap_width - 4) or [""]
        self._reserve((1 + len(rest)) * self.line_height)
        self.lines(["• " + first])
        if rest:
            self.lines(rest, indent=12)
        self.gap(4)

    def table(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        column_width = (self.width - 2 * self.margin) / len(header)
        for index, row in enumerate([header, *rows]):
            self._reserve(self.line_height)
            self.pdf.setFont(PDF_FONT_BOLD if index == 0 else PDF_FONT_REGULAR, 11)
            for column, cell in enumerate(row):
                self.pdf.drawString(self.margin + column * column_width, self.cursor, cell)
            self.cursor -= self.line_height
        self.gap(6)

    def gap(self, height: float) -> None:
        self.cursor -= height

    def finish(self) -> None:
        self.pdf.showPage()
        self.pdf.save()


def _classification_lines(result: TestResult) -> List[str]:
    status = overall_status(result)
    return [
        f"Right Ear: {result.right_ear_classification} "
        f"(average {_format_level(result.right_ear_average_level)})",
        f"Left Ear: {result.left_ear_classification} "
        f"(average {_format_level(result.left_ear_average_level)})",
        f"Overall: {result.overall_hearing_status} - {status.title}",
        status.description,
    ]


def generate_pdf_report(result: TestResult, recommendations: Optional[List[str]] = None) -> bytes:
    """Render ``result`` as a one or more page PDF document."""
    buffer = BytesIO()
    report = _ReportCanvas(buffer)

    report.heading(REPORT_TITLE, major=True)
    report.paragraph(f"Test Date: {result.test_date.strftime('%B %d, %Y')}")
    if result.id:
        report.paragraph(f"Result ID: {result.id}")

    report.heading("Classification")
    for line in _classification_lines(result):
        report.paragraph(line)
    if result.has_asymmetric_hearing:
        report.paragraph("Hearing levels differ significantly between your ears.", PDF_FONT_BOLD)

    report.heading("Frequency Breakdown")
    report.table(
        ["Frequency", "Right Ear", "Left Ear"],
        [
            [item.frequency_label, _format_level(item.right_level), _format_level(item.left_level)]
            for item in frequency_breakdown(result)
        ],
    )

    items = recommendations if recommendations is not None else recommendations_for(result)
    if items:
        report.heading("Recommendations")
        for item in items:
            report.bullet(item)

    generated_at = datetime.now(timezone.utc).astimezone().strftime("%d %B %Y %H:%M")
    report.paragraph(f"Generated: {generated_at}")
    report.finish()

    logger.debug("Rendered PDF report for result %s", result.id or "<unsaved>")
    return buffer.getvalue()
