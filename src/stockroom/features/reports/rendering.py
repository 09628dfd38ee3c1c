"""
Export renderers for reports.

Both formats are driven by the same three helpers (``report_columns``,
``record_row`` and ``summary_lines``) so a spreadsheet and a PDF of the same
report always carry the same information.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, List, Protocol, Sequence, Tuple, assert_never

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .aggregation import Summary
from .filters import ExportFormat, ReportKind
from .schemas import ItemsSummary, LedgerSummary, SalesSummary

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"
ELLIPSIS = "..."

SummaryLine = Tuple[str, str]


@dataclass
class ReportDocument:
    kind: ReportKind
    records: Sequence[Any]
    summary: Summary

    @property
    def title(self) -> str:
        return f"{self.kind.value.capitalize()} Report"


def money(value: float) -> str:
    return f"${value:.2f}"


def percent(value: float) -> str:
    return f"{value:.2f}%"


def report_columns(kind: ReportKind) -> List[str]:
    if kind in (ReportKind.SALES, ReportKind.LEDGER):
        return ["Item", "Customer", "Quantity", "Unit Price", "Total", "Date", "Payment Type"]
    elif kind is ReportKind.ITEMS:
        return ["Name", "Description", "Quantity", "Price", "Total Value", "Created By"]
    else:
        assert_never(kind)


def record_row(kind: ReportKind, record: Any) -> List[Any]:
    """One table row, in ``report_columns`` order. Quantities stay integers."""
    if kind in (ReportKind.SALES, ReportKind.LEDGER):
        return [
            record.item_name,
            record.customer_name,
            record.quantity,
            money(record.unit_price),
            money(record.total_price),
            record.date.strftime("%Y-%m-%d %H:%M"),
            record.payment_type.value,
        ]
    elif kind is ReportKind.ITEMS:
        return [
            record.name,
            record.description,
            record.quantity,
            money(record.price),
            money(record.total_value),
            record.created_by,
        ]
    else:
        assert_never(kind)


def _breakdown_lines(breakdown) -> List[SummaryLine]:
    lines: List[SummaryLine] = [("Payment Types", "")]
    lines += [(share.type, f"{share.count} ({percent(share.percentage)})") for share in breakdown]
    return lines


def _sales_lines(summary: SalesSummary) -> List[SummaryLine]:
    lines: List[SummaryLine] = [
        ("Total Revenue", money(summary.total_revenue)),
        ("Total Sales", str(summary.total_sales)),
        ("Average Sale Price", money(summary.average_sale_price)),
        ("Top Items", ""),
    ]
    lines += [(t.item_name, f"{t.quantity} units, {money(t.revenue)}") for t in summary.top_items]
    lines.append(("Sales by Date", ""))
    lines += [(d.date, f"{d.total} units, {money(d.revenue)}") for d in summary.sales_by_date]
    if summary.payment_type_breakdown is not None:
        lines += _breakdown_lines(summary.payment_type_breakdown)
    return lines


def _items_lines(summary: ItemsSummary) -> List[SummaryLine]:
    lines: List[SummaryLine] = [
        ("Total Inventory Value", money(summary.total_inventory_value)),
        ("Total Items", str(summary.total_items)),
        ("Average Price", money(summary.average_price)),
        ("Low Stock Items", str(summary.low_stock_items)),
        ("Turnover Rate", ""),
    ]
    lines += [(t.item_name, f"{t.rate:.2f}") for t in summary.turnover_rate]
    return lines


def _ledger_lines(summary: LedgerSummary) -> List[SummaryLine]:
    lines: List[SummaryLine] = [
        ("Total Spent", money(summary.total_spent)),
        ("Total Transactions", str(summary.total_transactions)),
        ("Average Transaction Value", money(summary.average_transaction_value)),
    ]
    return lines + _breakdown_lines(summary.payment_type_breakdown)


def summary_lines(kind: ReportKind, summary: Summary) -> List[SummaryLine]:
    """``(label, value)`` pairs for the summary block. Section headings have an empty value."""
    if kind is ReportKind.SALES:
        return _sales_lines(summary)
    elif kind is ReportKind.ITEMS:
        return _items_lines(summary)
    elif kind is ReportKind.LEDGER:
        return _ledger_lines(summary)
    else:
        assert_never(kind)


class Renderer(Protocol):
    media_type: str
    extension: str

    def render(self, report: ReportDocument) -> bytes: ...


class ExcelRenderer:
    media_type = XLSX_MEDIA_TYPE
    extension = "xlsx"

    def render(self, report: ReportDocument) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = report.kind.value.capitalize()

        ws.append(report_columns(report.kind))
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for record in report.records:
            ws.append(record_row(report.kind, record))

        ws.append([])
        ws.append(["Summary"])
        ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
        for label, value in summary_lines(report.kind, report.summary):
            ws.append([label, value])

        buffer = io.BytesIO()
        wb.save(buffer)
        logger.debug(f"Rendered {len(report.records)} {report.kind.value} rows to xlsx")
        return buffer.getvalue()


# A PDF page is a list of layout lines: (style, payload)
Line = Tuple[str, Any]
Pages = List[List[Line]]


def paginate_lines(lines: Sequence[Line], per_page: int) -> Pages:
    """
    First layout pass: splits the lines into pages of at most ``per_page``.

    A page that starts inside the record table gets the table header repeated
    at its top, so it never starts with a bare row.
    """
    header = next((line for line in lines if line[0] == "header"), None)
    pages: Pages = [[]]
    for line in lines:
        page = pages[-1]
        if len(page) >= per_page:
            page = []
            pages.append(page)
            if line[0] == "row" and header is not None:
                page.append(header)
        page.append(line)
    return pages


class PdfRenderer:
    media_type = PDF_MEDIA_TYPE
    extension = "pdf"

    page_size = landscape(A4)
    margin = 15 * mm
    line_height = 16
    lines_per_page = 30
    font = "Helvetica"
    bold_font = "Helvetica-Bold"
    font_size = 9

    def __init__(self, page_compression: int = 1):
        self.page_compression = page_compression

    def layout(self, report: ReportDocument) -> List[Line]:
        lines: List[Line] = [("title", report.title), ("header", report_columns(report.kind))]
        lines += [("row", record_row(report.kind, r)) for r in report.records]
        lines.append(("blank", None))
        lines.append(("section", "Summary"))
        for label, value in summary_lines(report.kind, report.summary):
            lines.append(("section", label) if not value else ("summary", (label, value)))
        return lines

    def _column_positions(self, count: int) -> List[float]:
        width = (self.page_size[0] - 2 * self.margin) / count
        return [self.margin + i * width for i in range(count)]

    def _fit(self, text: str, font: str, width: float) -> str:
        """``text`` as is when it fits the cell, otherwise cut short and marked with an ellipsis."""
        text = str(text)
        if stringWidth(text, font, self.font_size) <= width:
            return text
        while text and stringWidth(text + ELLIPSIS, font, self.font_size) > width:
            text = text[:-1]
        return text + ELLIPSIS if text else ""

    def _draw_cells(self, c: canvas.Canvas, cells: Sequence[Any], y: float, font: str):
        xs = self._column_positions(len(cells))
        cell_width = xs[1] - xs[0] - 4 if len(xs) > 1 else self.page_size[0]
        c.setFont(font, self.font_size)
        for x, value in zip(xs, cells):
            c.drawString(x, y, self._fit(value, font, cell_width))

    def _draw_page(self, c: canvas.Canvas, page: List[Line], number: int, count: int):
        width, height = self.page_size
        y = height - self.margin
        for style, payload in page:
            if style == "title":
                c.setFont(self.bold_font, 14)
                c.drawString(self.margin, y, payload)
            elif style == "header":
                self._draw_cells(c, payload, y, self.bold_font)
            elif style == "row":
                self._draw_cells(c, payload, y, self.font)
            elif style == "section":
                c.setFont(self.bold_font, self.font_size + 1)
                c.drawString(self.margin, y, payload)
            elif style == "summary":
                label, value = payload
                c.setFont(self.font, self.font_size)
                c.drawString(self.margin + 5 * mm, y, label)
                c.drawString(self.margin + 90 * mm, y, value)
            y -= self.line_height

        c.setFont(self.font, 8)
        c.drawCentredString(width / 2, self.margin / 2, f"Page {number} of {count}")

    def render(self, report: ReportDocument) -> bytes:
        pages = paginate_lines(self.layout(report), self.lines_per_page)

        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=self.page_size, pageCompression=self.page_compression)
        c.setTitle(report.title)
        # Second pass: the page count is known, so every footer can be stamped
        for number, page in enumerate(pages, start=1):
            self._draw_page(c, page, number, len(pages))
            c.showPage()
        c.save()
        logger.debug(f"Rendered {len(report.records)} {report.kind.value} rows to {len(pages)} PDF pages")
        return buffer.getvalue()


def get_renderer(export_format: ExportFormat) -> Renderer:
    if export_format is ExportFormat.EXCEL:
        return ExcelRenderer()
    elif export_format is ExportFormat.PDF:
        return PdfRenderer()
    else:
        assert_never(export_format)
