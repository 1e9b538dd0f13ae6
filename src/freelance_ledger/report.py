# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report renderer for FreelanceLedger.

This module turns a reporting period, its entries and the collaborations
into two downloadable artifacts:

1. A paginated PDF document
   -------------------------
   Sections, in fixed order:

   1) title and period line,
   2) income table   (Date, Job Title, Client Name, Amount),
   3) expense table  (Date, Description, Amount),
   4) financial summary (Total Income, Total Expenses, Net Profit),
   5) profit sharing: one sub-table (Member, Share %, Profit Share $) per
      collaboration with at least one named member.

   A section whose input list is empty keeps its header and prints the
   placeholder "No entries recorded". Rows are rendered in the order
   received; nothing is re-sorted. When the net profit is zero or negative,
   every collaboration prints a notice and all shares are printed as 0.00.

   Rendering happens in two steps:

   - ``layout_report()`` is pure: it walks the sections with a vertical
     cursor and returns a list of ``Page`` objects holding positioned text
     items. A new page starts whenever the next block would not fit in the
     printable area; section and table headers are always kept on the same
     page as their first row, and table column headers are repeated on
     continuation pages.
   - ``render_pdf()`` draws those pages with the reportlab canvas.

2. A flat CSV export
   -----------------
   One row per entry (income first, then expenses), built by
   ``views.build_export_table``.

All amounts are printed with exactly two decimals and no thousands
separator. The renderer never touches the file system: artifacts are
returned as bytes, together with a deterministic file name.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .config import ReportSettings
from .engine import compute_totals, member_share
from .models import Collaboration, ExpenseEntry, IncomeEntry, Totals
from .periods import ReportPeriod
from .views import build_export_table, format_amount

logger = logging.getLogger(__name__)

PLACEHOLDER = "No entries recorded"
NO_PROFIT_NOTICE = "No net profit to distribute for this period."
UNNAMED_COLLABORATION = "Unnamed collaboration"

PDF_MEDIA_TYPE = "application/pdf"
CSV_MEDIA_TYPE = "text/csv"

# Vertical advances (mm) after each kind of line.
TITLE_ADVANCE = 15.0
PERIOD_ADVANCE = 20.0
SECTION_ADVANCE = 10.0
SUBSECTION_ADVANCE = 8.0
ROW_ADVANCE = 8.0
SUMMARY_HEADER_ADVANCE = 15.0
SECTION_GAP = 10.0
FOOTER_OFFSET = 10.0

# Column offsets (mm from the left margin).
INCOME_COLUMNS = (("Date", 0.0), ("Job Title", 30.0), ("Client Name", 80.0), ("Amount", 130.0))
EXPENSE_COLUMNS = (("Date", 0.0), ("Description", 30.0), ("Amount", 130.0))
SHARING_COLUMNS = (("Member", 0.0), ("Share %", 80.0), ("Profit Share $", 130.0))

HEADER_STYLES = frozenset(
    {
        "section_income",
        "section_expense",
        "section_summary",
        "section_sharing",
        "subsection",
        "table_header",
    }
)


@dataclass(frozen=True)
class TextItem:
    """A piece of text positioned on a page.

    ``x`` is measured from the left edge, ``y`` (the baseline) from the top
    edge, both in points.
    """

    x: float
    y: float
    text: str
    style: str
    align: str = "left"


@dataclass
class Page:
    number: int
    items: list[TextItem] = field(default_factory=list)

    def texts(self) -> list[str]:
        return [item.text for item in self.items]


@dataclass(frozen=True)
class ReportArtifact:
    """A downloadable artifact: file name, raw bytes and media type."""

    filename: str
    content: bytes
    media_type: str


def page_dimensions(settings: ReportSettings) -> tuple[float, float]:
    """Return (width, height) in points for the configured page size."""
    if settings.page_size.upper() == "LETTER":
        return letter
    return A4


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class _Cursor:
    """Vertical cursor over a growing list of pages."""

    def __init__(self, settings: ReportSettings) -> None:
        self.width, self.height = page_dimensions(settings)
        self.margin = settings.margin_mm * mm
        self.pages: list[Page] = [Page(number=1)]
        self.y = self.margin

    @property
    def bottom(self) -> float:
        return self.height - self.margin

    def new_page(self) -> None:
        self.pages.append(Page(number=len(self.pages) + 1))
        self.y = self.margin

    def ensure(self, space_mm: float) -> bool:
        """Start a new page unless ``space_mm`` fits; return True on a break."""
        if self.y + space_mm * mm > self.bottom + 1e-6 and self.y > self.margin:
            self.new_page()
            return True
        return False

    def line(
        self,
        cells: Sequence[tuple[float, str]],
        style: str,
        advance_mm: float,
        repeat_header: Optional[Sequence[tuple[float, str]]] = None,
    ) -> None:
        """Place one line of cells, breaking the page first if needed.

        When the line triggers a page break and ``repeat_header`` is given,
        the table column header is re-emitted at the top of the new page.
        """
        if self.ensure(advance_mm) and repeat_header is not None:
            self._place(repeat_header, "table_header", ROW_ADVANCE)
        self._place(cells, style, advance_mm)

    def gap(self, advance_mm: float) -> None:
        self.y += advance_mm * mm

    def _place(
        self, cells: Sequence[tuple[float, str]], style: str, advance_mm: float
    ) -> None:
        page = self.pages[-1]
        for offset_mm, text in cells:
            page.items.append(
                TextItem(x=self.margin + offset_mm * mm, y=self.y, text=text, style=style)
            )
        self.y += advance_mm * mm


def _truncate(text: Optional[str], limit: int) -> str:
    return (text or "")[:limit]


def _format_percent(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".") + "%"


def _header_cells(columns: Sequence[tuple[str, float]]) -> list[tuple[float, str]]:
    return [(offset, label) for label, offset in columns]


def _layout_table(
    cur: _Cursor,
    title: str,
    title_style: str,
    columns: Sequence[tuple[str, float]],
    rows: Sequence[Sequence[str]],
) -> None:
    """Section header + column header + rows, or header + placeholder."""
    if not rows:
        cur.ensure(2 * SECTION_ADVANCE)
        cur.line([(0.0, title)], title_style, SECTION_ADVANCE)
        cur.line([(0.0, PLACEHOLDER)], "placeholder", SECTION_ADVANCE)
        return

    header = _header_cells(columns)
    # Title, column header and first row travel together.
    cur.ensure(SECTION_ADVANCE + 2 * ROW_ADVANCE)
    cur.line([(0.0, title)], title_style, SECTION_ADVANCE)
    cur.line(header, "table_header", ROW_ADVANCE)
    for values in rows:
        cells = [(offset, value) for (_, offset), value in zip(columns, values)]
        cur.line(cells, "body", ROW_ADVANCE, repeat_header=header)


def _collaboration_heading(collab: Collaboration) -> str:
    name = collab.name or UNNAMED_COLLABORATION
    if collab.description:
        return f"{name} - {collab.description}"
    return name


def _layout_profit_sharing(
    cur: _Cursor,
    collaborations: Sequence[Collaboration],
    totals: Totals,
) -> None:
    named = [c for c in collaborations if c.named_members]
    has_profit = totals.net_profit > 0

    if not named:
        cur.ensure(2 * SECTION_ADVANCE)
        cur.line([(0.0, "Profit Sharing")], "section_sharing", SECTION_ADVANCE)
        cur.line([(0.0, PLACEHOLDER)], "placeholder", SECTION_ADVANCE)
        return

    header = _header_cells(SHARING_COLUMNS)
    notice_space = 0.0 if has_profit else ROW_ADVANCE
    first_block = SUBSECTION_ADVANCE + notice_space + 2 * ROW_ADVANCE

    # Section title stays with the first collaboration's opening block.
    cur.ensure(SECTION_ADVANCE + first_block)
    cur.line([(0.0, "Profit Sharing")], "section_sharing", SECTION_ADVANCE)

    for index, collab in enumerate(named):
        if index:
            cur.gap(ROW_ADVANCE / 2)
        cur.ensure(first_block)
        cur.line([(0.0, _collaboration_heading(collab))], "subsection", SUBSECTION_ADVANCE)
        if not has_profit:
            cur.line([(0.0, NO_PROFIT_NOTICE)], "notice", ROW_ADVANCE)
        cur.line(header, "table_header", ROW_ADVANCE)

        # Shares are computed per row: member ids may repeat or be blank.
        for member in collab.named_members:
            share = member_share(totals.net_profit, member)
            cells = [
                (SHARING_COLUMNS[0][1], _truncate(member.name, 40)),
                (SHARING_COLUMNS[1][1], _format_percent(member.share_percentage)),
                (SHARING_COLUMNS[2][1], format_amount(share)),
            ]
            cur.line(cells, "body", ROW_ADVANCE, repeat_header=header)


def _add_footers(
    cur: _Cursor, generated_on: date
) -> None:
    total = len(cur.pages)
    y = cur.height - FOOTER_OFFSET * mm
    for page in cur.pages:
        page.items.append(
            TextItem(
                x=cur.margin,
                y=y,
                text=f"Generated on {generated_on.isoformat()}",
                style="footer",
            )
        )
        page.items.append(
            TextItem(
                x=cur.width - cur.margin,
                y=y,
                text=f"Page {page.number} of {total}",
                style="footer",
                align="right",
            )
        )


def layout_report(
    period: ReportPeriod,
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    collaborations: Sequence[Collaboration],
    settings: Optional[ReportSettings] = None,
    generated_on: Optional[date] = None,
) -> list[Page]:
    """Lay the report out into pages of positioned text items.

    Totals and shares are recomputed from the entries given; the entries
    are expected to be already filtered to the period by the caller.
    """
    settings = settings or ReportSettings()
    generated_on = generated_on or date.today()
    totals = compute_totals(income_entries, expense_entries)
    symbol = settings.currency_symbol

    cur = _Cursor(settings)

    # 1) Title and period
    cur.line([(0.0, settings.title)], "title", TITLE_ADVANCE)
    cur.line([(0.0, period.period_line)], "period", PERIOD_ADVANCE)

    # 2) Income
    income_rows = [
        (
            e.date.isoformat(),
            _truncate(e.job_title, 25),
            _truncate(e.client_name, 25),
            format_amount(e.amount),
        )
        for e in income_entries
    ]
    _layout_table(cur, "Income Entries", "section_income", INCOME_COLUMNS, income_rows)
    cur.gap(SECTION_GAP)

    # 3) Expenses
    expense_rows = [
        (e.date.isoformat(), _truncate(e.title, 50), format_amount(e.amount))
        for e in expense_entries
    ]
    _layout_table(cur, "Expense Entries", "section_expense", EXPENSE_COLUMNS, expense_rows)
    cur.gap(SECTION_GAP)

    # 4) Financial summary (header + three lines kept together)
    cur.ensure(SUMMARY_HEADER_ADVANCE + 3 * ROW_ADVANCE)
    cur.line([(0.0, "Financial Summary")], "section_summary", SUMMARY_HEADER_ADVANCE)
    cur.line(
        [(0.0, f"Total Income: {symbol}{format_amount(totals.total_income)}")],
        "summary_income",
        ROW_ADVANCE,
    )
    cur.line(
        [(0.0, f"Total Expenses: {symbol}{format_amount(totals.total_expenses)}")],
        "summary_expense",
        ROW_ADVANCE,
    )
    cur.line(
        [(0.0, f"Net Profit: {symbol}{format_amount(totals.net_profit)}")],
        "summary_net" if totals.net_profit >= 0 else "summary_net_negative",
        ROW_ADVANCE,
    )
    cur.gap(SECTION_GAP)

    # 5) Profit sharing
    _layout_profit_sharing(cur, collaborations, totals)

    _add_footers(cur, generated_on)
    logger.debug(
        "Laid out report for %s: %d page(s), %d income, %d expense entries",
        period.label,
        len(cur.pages),
        len(income_entries),
        len(expense_entries),
    )
    return cur.pages


# ---------------------------------------------------------------------------
# PDF drawing
# ---------------------------------------------------------------------------


def _styles(settings: ReportSettings) -> dict[str, tuple[str, float, tuple[int, int, int]]]:
    """Style name -> (font, size, RGB colour)."""
    black = (0, 0, 0)
    section = settings.section_font_size
    body = settings.body_font_size
    return {
        "title": ("Helvetica-Bold", settings.title_font_size, black),
        "period": ("Helvetica", 16.0, black),
        "section_income": ("Helvetica-Bold", section, (34, 197, 94)),
        "section_expense": ("Helvetica-Bold", section, (239, 68, 68)),
        "section_summary": ("Helvetica-Bold", section, (37, 99, 235)),
        "section_sharing": ("Helvetica-Bold", section, (147, 51, 234)),
        "subsection": ("Helvetica-Bold", 12.0, black),
        "table_header": ("Helvetica-Bold", body, black),
        "body": ("Helvetica", body, black),
        "placeholder": ("Helvetica-Oblique", body, (100, 100, 100)),
        "notice": ("Helvetica-Oblique", body, (234, 88, 58)),
        "summary_income": ("Helvetica", 12.0, (34, 197, 94)),
        "summary_expense": ("Helvetica", 12.0, (239, 68, 68)),
        "summary_net": ("Helvetica", 12.0, (37, 99, 235)),
        "summary_net_negative": ("Helvetica", 12.0, (234, 88, 58)),
        "footer": ("Helvetica", 8.0, (128, 128, 128)),
    }


def render_pdf(pages: Sequence[Page], settings: Optional[ReportSettings] = None) -> bytes:
    """Draw laid-out pages into a PDF document and return its bytes."""
    settings = settings or ReportSettings()
    width, height = page_dimensions(settings)
    styles = _styles(settings)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    c.setTitle(settings.title)

    for page in pages:
        for item in page.items:
            font, size, (r, g, b) = styles.get(item.style, styles["body"])
            c.setFont(font, size)
            c.setFillColorRGB(r / 255.0, g / 255.0, b / 255.0)
            baseline = height - item.y
            if item.align == "right":
                c.drawRightString(item.x, baseline, item.text)
            else:
                c.drawString(item.x, baseline, item.text)
        c.showPage()

    c.save()
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def report_filename(period: ReportPeriod) -> str:
    """``Income_Expense_Report_<Month>_<Year>.pdf`` (or the period's token)."""
    return f"Income_Expense_Report_{period.filename_token}.pdf"


def csv_filename(generated_on: date) -> str:
    return f"income_report_{generated_on.isoformat()}.csv"


def generate_report(
    period: ReportPeriod,
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    collaborations: Sequence[Collaboration],
    settings: Optional[ReportSettings] = None,
    generated_on: Optional[date] = None,
) -> ReportArtifact:
    """Build the PDF report for a period and return it as an artifact."""
    settings = settings or ReportSettings()
    pages = layout_report(
        period,
        income_entries,
        expense_entries,
        collaborations,
        settings=settings,
        generated_on=generated_on,
    )
    content = render_pdf(pages, settings)
    logger.info("Generated %s (%d bytes)", report_filename(period), len(content))
    return ReportArtifact(
        filename=report_filename(period),
        content=content,
        media_type=PDF_MEDIA_TYPE,
    )


def generate_csv(
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    generated_on: Optional[date] = None,
) -> ReportArtifact:
    """Build the flattened CSV export and return it as an artifact."""
    generated_on = generated_on or date.today()
    table = build_export_table(income_entries, expense_entries)
    text = table.to_csv(index=False, lineterminator="\n")
    return ReportArtifact(
        filename=csv_filename(generated_on),
        content=text.encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
    )
