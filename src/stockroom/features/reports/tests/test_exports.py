import datetime
import io
import smtplib

import pytest
from fastapi import status
from httpx import AsyncClient
from openpyxl import load_workbook
from reportlab.pdfbase.pdfmetrics import stringWidth

from stockroom.core.config import MailSettings
from stockroom.core.errors import DeliveryError
from stockroom.features.customers.models import Customer
from stockroom.features.inventory.models import Item
from stockroom.features.reports import delivery
from stockroom.features.reports.aggregation import summarize_sales
from stockroom.features.reports.delivery import SmtpMailer, get_mailer
from stockroom.features.reports.filters import ReportKind, normalize_export_request
from stockroom.features.reports.rendering import (
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    PdfRenderer,
    ReportDocument,
    paginate_lines,
)
from stockroom.features.reports.service import export_report
from stockroom.features.sales.models import PaymentType
from stockroom.features.sales.schemas import SaleCreate, SaleRecord
from stockroom.features.sales.service import create_sale

MAIL_SETTINGS = MailSettings(
    host="smtp.example.com",
    port=587,
    username="reports@example.com",
    password="secret",
    sender="reports@example.com",
)


def sheet_rows(content: bytes) -> list[tuple]:
    ws = load_workbook(io.BytesIO(content)).active
    return list(ws.iter_rows(values_only=True))


@pytest.mark.asyncio
async def test_items_excel_download(staff_client: AsyncClient):
    await Item.create(name="Lamp", description="warm light", quantity=20, price=5.0)
    await Item.create(name="Chair", description="oak", quantity=4, price=50.0)
    await Item.create(name="Desk", description="oak top", quantity=0, price=100.0)

    response = await staff_client.get("/api/v1/reports/export", params={"type": "items", "format": "excel"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "filename=items-report.xlsx" in response.headers["content-disposition"]

    rows = sheet_rows(response.content)
    assert rows[0][:6] == ("Name", "Description", "Quantity", "Price", "Total Value", "Created By")

    summary_at = next(i for i, row in enumerate(rows) if row[0] == "Summary")
    item_rows = [row for row in rows[1:summary_at] if any(v is not None for v in row)]
    assert len(item_rows) == 3
    by_name = {row[0]: row for row in item_rows}
    assert by_name["Chair"][2] == 4
    assert by_name["Chair"][4] == "$200.00"

    summary = {row[0]: row[1] for row in rows[summary_at + 1:]}
    assert summary["Total Inventory Value"] == "$300.00"
    assert summary["Total Items"] == "3"
    assert summary["Average Price"] == "$51.67"
    assert summary["Low Stock Items"] == "2"


@pytest.mark.asyncio
async def test_sales_pdf_download(staff_client: AsyncClient):
    item = await Item.create(name="Widget", quantity=100, price=2.5)
    await create_sale(SaleCreate(item_id=item.public_id, quantity=2, payment_type=PaymentType.DEBIT))

    response = await staff_client.get("/api/v1/reports/export", params={"type": "sales", "format": "pdf"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == PDF_MEDIA_TYPE
    assert "filename=sales-report.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_ledger_export(staff_client: AsyncClient):
    item = await Item.create(name="Widget", quantity=100, price=10.0)
    ada = await Customer.create(name="Ada", address="1 Engine St", phone="555")
    await create_sale(
        SaleCreate(
            item_id=item.public_id, quantity=3, payment_type=PaymentType.CUSTOMER, customer_id=ada.public_id
        )
    )
    await create_sale(SaleCreate(item_id=item.public_id, quantity=1, payment_type=PaymentType.CASH))

    response = await staff_client.get(
        "/api/v1/reports/export", params={"type": "ledger", "format": "excel", "customerId": ada.public_id}
    )
    assert response.status_code == status.HTTP_200_OK
    rows = sheet_rows(response.content)
    summary_at = next(i for i, row in enumerate(rows) if row[0] == "Summary")
    assert [row[1] for row in rows[1:summary_at] if row[0] is not None] == ["Ada"]
    summary = {row[0]: row[1] for row in rows[summary_at + 1:]}
    assert summary["Total Spent"] == "$30.00"
    assert summary["customer"] == "1 (100.00%)"

    response = await staff_client.get(
        "/api/v1/reports/export", params={"type": "ledger", "format": "excel", "customerId": "nobody"}
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_export_parameter_errors(staff_client: AsyncClient):
    response = await staff_client.get("/api/v1/reports/export", params={"type": "sales", "format": "csv"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["field"] == "format"

    response = await staff_client.get("/api/v1/reports/export", params={"type": "ledger", "format": "pdf"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["field"] == "customerId"

    response = await staff_client.get(
        "/api/v1/reports/export", params={"type": "sales", "format": "pdf", "email": "nope"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["field"] == "email"


@pytest.mark.asyncio
async def test_export_by_email(staff_client: AsyncClient, fake_mailer):
    await Item.create(name="Lamp", quantity=20, price=5.0)

    response = await staff_client.get(
        "/api/v1/reports/export",
        params={"type": "items", "format": "pdf", "email": "boss@example.com"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "message": "Report sent successfully",
        "email": "boss@example.com",
        "filename": "items-report.pdf",
    }

    assert len(fake_mailer.sent) == 1
    message = fake_mailer.sent[0]
    assert message["to"] == "boss@example.com"
    assert message["subject"] == "Items Report"
    assert message["filename"] == "items-report.pdf"
    assert message["media_type"] == PDF_MEDIA_TYPE
    assert message["attachment"].startswith(b"%PDF")


@pytest.mark.asyncio
async def test_export_delivery_failure(staff_client: AsyncClient, fake_mailer):
    fake_mailer.fail_with = DeliveryError("Connection refused")

    response = await staff_client.get(
        "/api/v1/reports/export",
        params={"type": "sales", "format": "excel", "email": "boss@example.com"},
    )
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    body = response.json()
    assert body["filename"] == "sales-report.xlsx"
    assert body["retryable"] is False
    assert fake_mailer.sent == []


@pytest.mark.asyncio
async def test_export_by_email_without_mailer():
    request = normalize_export_request("sales", "pdf", email="boss@example.com")
    with pytest.raises(DeliveryError) as exc_info:
        await export_report(request, mailer=None)
    assert exc_info.value.filename == "sales-report.pdf"


@pytest.mark.asyncio
async def test_export_without_mail_transport_is_a_delivery_failure(app_for_testing, staff_client: AsyncClient):
    app_for_testing.dependency_overrides[get_mailer] = lambda: None

    response = await staff_client.get(
        "/api/v1/reports/export",
        params={"type": "sales", "format": "pdf", "email": "boss@example.com"},
    )
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["filename"] == "sales-report.pdf"


def test_paginate_lines_repeats_header_inside_table():
    header = ("header", ["Name"])
    lines = [("title", "Items Report"), header]
    lines += [("row", [f"Item {i}"]) for i in range(12)]
    lines += [("blank", None), ("section", "Summary")]

    pages = paginate_lines(lines, per_page=5)

    assert [len(page) for page in pages] == [5, 5, 5, 4]
    assert all(page[0] == header for page in pages[1:])
    rows = [line for page in pages for line in page if line[0] == "row"]
    assert rows == lines[2:14]


def test_paginate_lines_no_header_outside_table():
    lines = [("title", "T"), ("header", ["A"]), ("row", ["1"]), ("blank", None), ("section", "Summary")]
    pages = paginate_lines(lines, per_page=3)
    assert pages == [lines[:3], lines[3:]]


def test_pdf_footer_counts_pages():
    records = [
        SaleRecord(
            public_id=f"sale-{i}",
            item_id="item-1",
            item_name="Widget",
            customer_name="Cash",
            quantity=1,
            unit_price=2.0,
            total_price=2.0,
            payment_type=PaymentType.CASH,
            date=datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc),
            created_at=datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc),
        )
        for i in range(70)
    ]
    document = ReportDocument(kind=ReportKind.SALES, records=records, summary=summarize_sales(records))
    renderer = PdfRenderer(page_compression=0)

    page_count = len(paginate_lines(renderer.layout(document), renderer.lines_per_page))
    content = renderer.render(document)

    assert page_count == 3
    assert b"(Page 1 of 3)" in content
    assert b"(Page 2 of 3)" in content
    assert b"(Page 3 of 3)" in content


def test_pdf_of_empty_report_has_one_page():
    document = ReportDocument(kind=ReportKind.SALES, records=[], summary=summarize_sales([]))
    content = PdfRenderer(page_compression=0).render(document)
    assert b"(Page 1 of 1)" in content


def test_pdf_cells_mark_cut_text():
    renderer = PdfRenderer()

    assert renderer._fit("Lamp", renderer.font, 50) == "Lamp"

    cut = renderer._fit("x" * 200, renderer.font, 50)
    assert cut.endswith("...")
    assert len(cut) < 200
    assert stringWidth(cut, renderer.font, renderer.font_size) <= 50

    assert renderer._fit("long name", renderer.font, 1) == ""


def test_smtp_message_carries_attachment():
    msg = SmtpMailer(MAIL_SETTINGS).build_message(
        "boss@example.com", "Sales Report", "Attached.", b"%PDF-1.4", "sales-report.pdf", PDF_MEDIA_TYPE
    )
    assert msg["To"] == "boss@example.com"
    assert msg["From"] == "reports@example.com"
    attachments = list(msg.iter_attachments())
    assert len(attachments) == 1
    assert attachments[0].get_filename() == "sales-report.pdf"
    assert attachments[0].get_content_type() == PDF_MEDIA_TYPE
    assert attachments[0].get_content() == b"%PDF-1.4"


class RecordingSMTP:
    instances: list = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.calls = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username))

    def send_message(self, msg):
        self.calls.append(("send", msg["To"]))


@pytest.mark.asyncio
async def test_smtp_mailer_sends(monkeypatch):
    RecordingSMTP.instances = []
    monkeypatch.setattr(delivery.smtplib, "SMTP", RecordingSMTP)

    await SmtpMailer(MAIL_SETTINGS).send(
        "boss@example.com", "Sales Report", "Attached.", b"data", "sales-report.pdf", PDF_MEDIA_TYPE
    )

    (smtp,) = RecordingSMTP.instances
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.calls == ["starttls", ("login", "reports@example.com"), ("send", "boss@example.com")]


@pytest.mark.asyncio
async def test_smtp_mailer_maps_transport_errors(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(delivery.smtplib, "SMTP", refuse)

    with pytest.raises(DeliveryError) as exc_info:
        await SmtpMailer(MAIL_SETTINGS).send(
            "boss@example.com", "Sales Report", "Attached.", b"data", "sales-report.pdf", PDF_MEDIA_TYPE
        )
    assert exc_info.value.filename == "sales-report.pdf"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_smtp_mailer_auth_failure(monkeypatch):
    mailer = SmtpMailer(MAIL_SETTINGS)

    def reject(msg):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(mailer, "_deliver", reject)
    with pytest.raises(DeliveryError):
        await mailer.send("boss@example.com", "S", "B", b"data", "sales-report.pdf", PDF_MEDIA_TYPE)


@pytest.mark.asyncio
async def test_smtp_mailer_timeout_is_retryable(monkeypatch):
    mailer = SmtpMailer(MAIL_SETTINGS)

    def stall(msg):
        raise TimeoutError("timed out")

    monkeypatch.setattr(mailer, "_deliver", stall)
    with pytest.raises(DeliveryError) as exc_info:
        await mailer.send("boss@example.com", "S", "B", b"data", "sales-report.pdf", PDF_MEDIA_TYPE)
    assert exc_info.value.retryable is True
