"""
PDF receipts, fee statements and completion certificates (reportlab).

Rendering is a pure function of its input: the generation time is passed
in and the canvas is created with invariant=1, so the same data always
produces the same bytes.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from typing import List, Optional

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.core.config import INSTITUTE_NAME

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
BOTTOM_LIMIT = 30 * mm
ROW_HEIGHT = 7 * mm

FOOTER_TEXT = f"{INSTITUTE_NAME} - Hatisala & Satulia"


def format_money(amount: Optional[int]) -> str:
    # Standard PDF fonts have no rupee glyph
    return f"Rs. {amount or 0:,}"


def _format_date(value: Optional[datetime]) -> str:
    return value.strftime("%d %b %Y") if value else ""


@dataclass(frozen=True)
class ReceiptData:
    receipt_number: str
    student_name: str
    course_name: str
    course_full_name: str
    payment_date: datetime
    amount: int
    payment_method: str
    total_fee: int
    total_paid: int
    balance_due: int
    generated_at: datetime
    student_email: Optional[str] = None
    center_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class StatementLine:
    payment_date: datetime
    receipt_number: Optional[str]
    payment_method: str
    amount: int


@dataclass(frozen=True)
class StatementData:
    student_name: str
    course_name: str
    course_full_name: str
    total_fee: int
    generated_at: datetime
    student_email: Optional[str] = None
    center_name: Optional[str] = None
    enrollment_date: Optional[datetime] = None
    payments: List[StatementLine] = field(default_factory=list)

    @property
    def total_paid(self) -> int:
        return sum(line.amount for line in self.payments)

    @property
    def balance_due(self) -> int:
        return self.total_fee - self.total_paid


def _new_canvas(buffer: BytesIO, title: str) -> canvas.Canvas:
    c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    c.setTitle(title)
    c.setAuthor(INSTITUTE_NAME)
    return c


def _draw_header(c: canvas.Canvas, title: str) -> float:
    y = PAGE_HEIGHT - MARGIN
    c.setFont("Helvetica-Bold", 18)
    c.drawCentredString(PAGE_WIDTH / 2, y, INSTITUTE_NAME)
    y -= 9 * mm
    c.setFont("Helvetica-Bold", 13)
    c.drawCentredString(PAGE_WIDTH / 2, y, title)
    y -= 5 * mm
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    return y - 8 * mm


def _draw_footer(c: canvas.Canvas, generated_at: datetime) -> None:
    c.setFont("Helvetica", 8)
    c.drawCentredString(PAGE_WIDTH / 2, 15 * mm, FOOTER_TEXT)
    c.drawCentredString(
        PAGE_WIDTH / 2, 11 * mm, f"Generated on {generated_at.strftime('%d %b %Y %H:%M')}"
    )


def _draw_pair(c: canvas.Canvas, y: float, label: str, value: str) -> float:
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, label)
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN + 45 * mm, y, value)
    return y - 6 * mm


def render_receipt(data: ReceiptData) -> bytes:
    buffer = BytesIO()
    c = _new_canvas(buffer, f"Receipt {data.receipt_number}")

    y = _draw_header(c, "PAYMENT RECEIPT")
    y = _draw_pair(c, y, "Receipt No:", data.receipt_number)
    y = _draw_pair(c, y, "Date:", _format_date(data.payment_date))
    y -= 4 * mm

    y = _draw_pair(c, y, "Student:", data.student_name)
    if data.student_email:
        y = _draw_pair(c, y, "Email:", data.student_email)
    y = _draw_pair(c, y, "Course:", f"{data.course_name} - {data.course_full_name}")
    if data.center_name:
        y = _draw_pair(c, y, "Center:", data.center_name)
    y -= 4 * mm

    c.setFillGray(0.93)
    c.rect(MARGIN, y - 14 * mm, PAGE_WIDTH - 2 * MARGIN, 18 * mm, stroke=0, fill=1)
    c.setFillGray(0)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN + 5 * mm, y - 7 * mm, "Amount Received")
    c.drawRightString(PAGE_WIDTH - MARGIN - 5 * mm, y - 7 * mm, format_money(data.amount))
    y -= 24 * mm

    y = _draw_pair(c, y, "Payment Method:", data.payment_method.title())
    y = _draw_pair(c, y, "Total Course Fee:", format_money(data.total_fee))
    y = _draw_pair(c, y, "Total Paid:", format_money(data.total_paid))
    y = _draw_pair(c, y, "Balance Due:", format_money(data.balance_due))
    if data.notes:
        y -= 2 * mm
        y = _draw_pair(c, y, "Notes:", data.notes)

    _draw_footer(c, data.generated_at)
    c.showPage()
    c.save()
    return buffer.getvalue()


def _draw_table_header(c: canvas.Canvas, y: float) -> float:
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Date")
    c.drawString(MARGIN + 35 * mm, y, "Receipt No")
    c.drawString(MARGIN + 85 * mm, y, "Method")
    c.drawRightString(PAGE_WIDTH - MARGIN, y, "Amount")
    y -= 3 * mm
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    return y - 5 * mm


def render_statement(data: StatementData) -> bytes:
    buffer = BytesIO()
    c = _new_canvas(buffer, f"Fee Statement - {data.student_name}")

    y = _draw_header(c, "FEE STATEMENT")
    y = _draw_pair(c, y, "Student:", data.student_name)
    if data.student_email:
        y = _draw_pair(c, y, "Email:", data.student_email)
    y = _draw_pair(c, y, "Course:", f"{data.course_name} - {data.course_full_name}")
    if data.center_name:
        y = _draw_pair(c, y, "Center:", data.center_name)
    if data.enrollment_date:
        y = _draw_pair(c, y, "Enrolled On:", _format_date(data.enrollment_date))
    y -= 6 * mm

    y = _draw_table_header(c, y)
    c.setFont("Helvetica", 10)

    if not data.payments:
        c.drawString(MARGIN, y, "No payments recorded yet.")
        y -= ROW_HEIGHT

    for line in data.payments:
        if y < BOTTOM_LIMIT:
            _draw_footer(c, data.generated_at)
            c.showPage()
            y = _draw_table_header(c, PAGE_HEIGHT - MARGIN)
            c.setFont("Helvetica", 10)
        c.drawString(MARGIN, y, _format_date(line.payment_date))
        c.drawString(MARGIN + 35 * mm, y, line.receipt_number or "-")
        c.drawString(MARGIN + 85 * mm, y, line.payment_method.title())
        c.drawRightString(PAGE_WIDTH - MARGIN, y, format_money(line.amount))
        y -= ROW_HEIGHT

    if y < BOTTOM_LIMIT + 25 * mm:
        _draw_footer(c, data.generated_at)
        c.showPage()
        y = PAGE_HEIGHT - MARGIN

    y -= 2 * mm
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    y -= 7 * mm
    for label, amount in (
        ("Total Course Fee", data.total_fee),
        ("Total Paid", data.total_paid),
        ("Balance Due", data.balance_due),
    ):
        c.setFont("Helvetica-Bold", 11)
        c.drawString(MARGIN + 85 * mm, y, label)
        c.drawRightString(PAGE_WIDTH - MARGIN, y, format_money(amount))
        y -= ROW_HEIGHT

    _draw_footer(c, data.generated_at)
    c.showPage()
    c.save()
    return buffer.getvalue()


@dataclass(frozen=True)
class CertificateData:
    student_name: str
    course_name: str
    certificate_number: str
    issue_date: date


CERTIFICATE_ACCENT = (0.91, 0.27, 0.38)
CERTIFICATE_TEXT = (
    "For successfully completing the course with dedication and excellence,",
    "demonstrating outstanding commitment to learning and professional development.",
)


def _draw_corners(c: canvas.Canvas, width: float, height: float, inset: float, size: float) -> None:
    for x, y, dx, dy in (
        (inset, height - inset, 1, -1),
        (width - inset, height - inset, -1, -1),
        (inset, inset, 1, 1),
        (width - inset, inset, -1, 1),
    ):
        c.line(x, y, x + dx * size, y)
        c.line(x, y, x, y + dy * size)


def render_certificate(data: CertificateData) -> bytes:
    """Landscape completion certificate; the issue date is part of the input"""
    width, height = landscape(A4)
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height), invariant=1)
    c.setTitle(f"Certificate {data.certificate_number}")
    c.setAuthor(INSTITUTE_NAME)
    center_x = width / 2

    c.setStrokeColorRGB(*CERTIFICATE_ACCENT)
    c.setLineWidth(3)
    c.roundRect(8 * mm, 8 * mm, width - 16 * mm, height - 16 * mm, 4 * mm)
    c.setLineWidth(0.75)
    c.roundRect(13 * mm, 13 * mm, width - 26 * mm, height - 26 * mm, 3 * mm)
    c.setLineWidth(3)
    _draw_corners(c, width, height, 18 * mm, 28 * mm)

    c.setFillColorRGB(*CERTIFICATE_ACCENT)
    c.setFont("Times-Bold", 20)
    c.drawCentredString(center_x, height - 40 * mm, INSTITUTE_NAME)

    c.setFillGray(0.1)
    c.setFont("Times-Bold", 40)
    c.drawCentredString(center_x, height - 58 * mm, "CERTIFICATE")
    c.setFont("Helvetica", 12)
    c.drawCentredString(center_x, height - 66 * mm, "OF COMPLETION")

    c.setFillGray(0.4)
    c.setFont("Helvetica", 10)
    c.drawCentredString(center_x, height - 80 * mm, "THIS IS PROUDLY PRESENTED TO")

    c.setFillColorRGB(*CERTIFICATE_ACCENT)
    c.setFont("Times-BoldItalic", 36)
    c.drawCentredString(center_x, height - 96 * mm, data.student_name)

    c.setFillGray(0.25)
    c.setFont("Helvetica", 10)
    y = height - 108 * mm
    for line in CERTIFICATE_TEXT:
        c.drawCentredString(center_x, y, line)
        y -= 5 * mm

    c.setFillGray(0.1)
    c.setFont("Times-Bold", 20)
    c.drawCentredString(center_x, height - 128 * mm, data.course_name)

    details_y = height - 146 * mm
    for x, label, value in (
        (center_x - 50 * mm, "CERTIFICATE NO.", data.certificate_number),
        (center_x + 50 * mm, "DATE OF ISSUE", data.issue_date.strftime("%d %B %Y")),
    ):
        c.setFillGray(0.45)
        c.setFont("Helvetica", 8)
        c.drawCentredString(x, details_y, label)
        c.setFillGray(0.1)
        c.setFont("Helvetica-Bold", 11)
        c.drawCentredString(x, details_y - 6 * mm, value)

    c.setStrokeGray(0.6)
    c.setLineWidth(1)
    signature_y = 32 * mm
    for x, role in ((center_x - 70 * mm, "Director"), (center_x + 70 * mm, "Instructor")):
        c.line(x - 27 * mm, signature_y, x + 27 * mm, signature_y)
        c.setFont("Helvetica", 9)
        c.drawCentredString(x, signature_y - 5 * mm, role)

    c.setStrokeColorRGB(*CERTIFICATE_ACCENT)
    c.setFillColorRGB(*CERTIFICATE_ACCENT)
    c.setLineWidth(2)
    c.circle(width - 45 * mm, 45 * mm, 15 * mm)
    c.setFont("Times-Bold", 8)
    c.drawCentredString(width - 45 * mm, 46 * mm, "VERIFIED")
    c.drawCentredString(width - 45 * mm, 42 * mm, "AUTHENTIC")

    c.showPage()
    c.save()
    return buffer.getvalue()
