from __future__ import annotations

import logging
from dataclasses import dataclass

from reportlab.lib import colors
from reportlab.lib.units import mm

from inspectreport.adapters.images import ReportAssets
from inspectreport.config import Settings, get_settings
from inspectreport.types import InvoiceConfig, InvoiceRecord, InvoiceStatus, ServiceItem

from .builder import RenderedDocument, format_date
from .layout import (
    BRAND_NAVY,
    MUTED_TEXT,
    TEXT_COLOR,
    RenderContext,
    build_context,
    draw_paragraph,
    draw_section_header,
    line_height,
    or_placeholder,
    sanitize_text,
    wrap_text,
)


logger = logging.getLogger(__name__)

STATUS_BADGE_COLORS = {
    InvoiceStatus.paid: colors.HexColor('#22C55E'),
    InvoiceStatus.unpaid: colors.HexColor('#EF4444'),
    InvoiceStatus.partial: colors.HexColor('#F59E0B'),
    InvoiceStatus.draft: colors.HexColor('#6B7280'),
}

_COLUMNS: tuple[tuple[str, float, str], ...] = (
    ('Description', 85, 'left'),
    ('Quantity', 25, 'center'),
    ('Unit Price', 35, 'right'),
    ('Total', 35, 'right'),
)
_BODY_FONT_SIZE = 9
_CELL_PADDING = 1.8 * mm
_HEADER_BAND_HEIGHT = 8 * mm


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax: float
    total: float


def format_currency(amount: float, currency: str) -> str:
    return f'{currency} {float(amount):.2f}'


def _format_quantity(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else f'{number:g}'


def compute_totals(services: tuple[ServiceItem, ...] | list[ServiceItem], config: InvoiceConfig) -> InvoiceTotals:
    subtotal = round(sum(float(service.total) for service in services), 2)
    tax = round(subtotal * float(config.vat_rate_percent) / 100, 2)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=round(subtotal + tax, 2))


def suggest_invoice_status(amount_paid: float, total_amount: float) -> InvoiceStatus:
    if amount_paid <= 0:
        return InvoiceStatus.unpaid
    if amount_paid >= total_amount:
        return InvoiceStatus.paid
    return InvoiceStatus.partial


def display_status(record: InvoiceRecord, totals: InvoiceTotals) -> InvoiceStatus:
    """A draft that already carries a payment shows the status the payment implies."""
    if record.status is InvoiceStatus.draft and record.amount_paid > 0:
        return suggest_invoice_status(float(record.amount_paid), totals.total)
    return record.status


def property_service_line(record: InvoiceRecord, config: InvoiceConfig) -> ServiceItem | None:
    """Area-based inspection line, or None when type or area is missing."""
    property_type = sanitize_text(record.property_type)
    area = float(record.property_area or 0)
    if not property_type or area <= 0:
        return None
    if property_type.lower() == 'residential':
        rate = float(config.residential_rate_per_sqm)
    else:
        rate = float(config.commercial_rate_per_sqm)
    return ServiceItem(
        id='property_service',
        description=f'{property_type} Property Inspection ({_format_quantity(area)} m²)',
        quantity=area,
        unit_price=rate,
        total=round(area * rate, 2),
    )


def billable_services(record: InvoiceRecord, config: InvoiceConfig) -> list[ServiceItem]:
    services = list(record.services)
    extra = property_service_line(record, config)
    if extra is not None and not any(service.description == extra.description for service in services):
        services.append(extra)
    return services


def resolve_totals(record: InvoiceRecord, services: list[ServiceItem], config: InvoiceConfig) -> InvoiceTotals:
    if record.total_amount > 0 and len(services) == len(record.services):
        return InvoiceTotals(subtotal=record.subtotal, tax=record.tax, total=record.total_amount)
    return compute_totals(services, config)


def _column_layout(ctx: RenderContext) -> list[tuple[str, float, float, str]]:
    scale = ctx.content_width / sum(width for _, width, _ in _COLUMNS)
    layout = []
    x = ctx.left
    for title, width, align in _COLUMNS:
        layout.append((title, x, width * scale, align))
        x += width * scale
    return layout


def _anchor_x(x: float, width: float, align: str) -> float:
    if align == 'center':
        return x + width / 2
    if align == 'right':
        return x + width - _CELL_PADDING
    return x + _CELL_PADDING


def _draw_table_header(ctx: RenderContext, columns) -> None:
    top = ctx.cursor_y
    ctx.fill_rect(ctx.left, top, ctx.content_width, _HEADER_BAND_HEIGHT, BRAND_NAVY)
    for title, x, width, align in columns:
        ctx.draw_string(
            _anchor_x(x, width, align),
            top + _HEADER_BAND_HEIGHT / 2 + 10 * 0.35,
            title,
            font=ctx.fonts.bold,
            size=10,
            color=colors.white,
            align=align,
        )
    ctx.advance(_HEADER_BAND_HEIGHT)


def _draw_services_table(ctx: RenderContext, services: list[ServiceItem], currency: str) -> None:
    columns = _column_layout(ctx)
    ctx.ensure_space(_HEADER_BAND_HEIGHT + line_height(_BODY_FONT_SIZE) + 2 * _CELL_PADDING)
    _draw_table_header(ctx, columns)
    if not services:
        ctx.draw_string(ctx.left + _CELL_PADDING, ctx.cursor_y + 5 * mm, 'No billable services.', size=9, color=MUTED_TEXT)
        ctx.advance(8 * mm)
        return

    for service in services:
        values = (
            sanitize_text(service.description) or '-',
            _format_quantity(service.quantity),
            format_currency(service.unit_price, currency),
            format_currency(service.total, currency),
        )
        cells = [
            wrap_text(value, width - 2 * _CELL_PADDING, ctx.fonts.regular, _BODY_FONT_SIZE) or ['']
            for value, (_, _, width, _) in zip(values, columns)
        ]
        height = max(len(lines) for lines in cells) * line_height(_BODY_FONT_SIZE) + 2 * _CELL_PADDING
        if ctx.ensure_space(height):
            _draw_table_header(ctx, columns)
        top = ctx.cursor_y
        for lines, (_, x, width, align) in zip(cells, columns):
            ctx.draw_lines(lines, _anchor_x(x, width, align), top + _CELL_PADDING, font=ctx.fonts.regular, size=_BODY_FONT_SIZE, align=align)
        ctx.hline(top + height, color=colors.HexColor('#E2E8F0'))
        ctx.advance(height)


def _draw_heading(ctx: RenderContext, record: InvoiceRecord, status: InvoiceStatus, settings: Settings) -> None:
    top = ctx.cursor_y
    ctx.draw_string(ctx.left, top + 8 * mm, settings.company_name_en.upper(), font=ctx.fonts.bold, size=16, color=BRAND_NAVY)
    ctx.draw_string(ctx.left, top + 14 * mm, settings.company_name_ar, font=ctx.fonts.arabic, size=10, color=BRAND_NAVY)
    ctx.draw_string(ctx.right, top + 8 * mm, 'INVOICE', font=ctx.fonts.bold, size=20, align='right')
    ctx.draw_string(ctx.right, top + 14 * mm, 'فاتورة', font=ctx.fonts.arabic_bold, size=11, align='right')

    meta = (
        f'Invoice #: {or_placeholder(record.invoice_number)}',
        f'Date: {format_date(record.invoice_date)}',
        f'Due Date: {format_date(record.due_date)}',
    )
    for position, line in enumerate(meta):
        ctx.draw_string(ctx.right, top + (22 + position * 6) * mm, line, size=10, align='right')

    badge_width = 30 * mm
    badge_top = top + 41 * mm
    ctx.fill_rect(ctx.right - badge_width, badge_top, badge_width, 7 * mm, STATUS_BADGE_COLORS[status])
    ctx.draw_string(
        ctx.right - badge_width / 2,
        badge_top + 4.8 * mm,
        status.value.upper(),
        font=ctx.fonts.bold,
        size=8,
        color=colors.white,
        align='center',
    )

    ctx.draw_string(ctx.left, top + 24 * mm, 'Bill To:', font=ctx.fonts.bold, size=12)
    bill_to = [or_placeholder(record.client_name)]
    if sanitize_text(record.client_email):
        bill_to.append(sanitize_text(record.client_email))
    bill_to.extend(line for line in sanitize_text(record.client_address).split('\n') if line.strip())
    for position, line in enumerate(bill_to[:5]):
        ctx.draw_string(ctx.left, top + (31 + position * 5.5) * mm, line, size=10, color=TEXT_COLOR)
    ctx.advance(58 * mm)

    location = sanitize_text(record.property_location)
    if location:
        ctx.draw_string(ctx.left, ctx.cursor_y + 5 * mm, 'Property:', font=ctx.fonts.bold, size=12)
        ctx.draw_string(ctx.left, ctx.cursor_y + 11 * mm, location, size=10)
        detail_height = 14 * mm
        if record.property_type and record.property_area:
            ctx.draw_string(
                ctx.left,
                ctx.cursor_y + 17 * mm,
                f'Type: {record.property_type} - Area: {_format_quantity(record.property_area)} m²',
                size=10,
            )
            detail_height = 20 * mm
        ctx.advance(detail_height)
    ctx.advance(4 * mm)


def _draw_totals(ctx: RenderContext, record: InvoiceRecord, totals: InvoiceTotals, config: InvoiceConfig) -> None:
    currency = config.currency
    balance = max(0.0, round(totals.total - float(record.amount_paid), 2))
    rows = (
        ('Subtotal:', format_currency(totals.subtotal, currency), False),
        (f'VAT ({config.vat_rate_percent:g}%):', format_currency(totals.tax, currency), False),
        ('Total:', format_currency(totals.total, currency), True),
        ('Amount Paid:', format_currency(record.amount_paid, currency), False),
        ('Balance Due:', format_currency(balance, currency), True),
    )
    step = 7 * mm
    ctx.ensure_space(len(rows) * step + 6 * mm)
    ctx.advance(4 * mm)
    label_x = ctx.right - 80 * mm
    for label, value, bold in rows:
        font = ctx.fonts.bold if bold else ctx.fonts.regular
        size = 11 if bold else 10
        if label == 'Total:':
            ctx.hline(ctx.cursor_y, color=BRAND_NAVY, x1=label_x, x2=ctx.right)
            ctx.advance(1.5 * mm)
        ctx.draw_string(label_x, ctx.cursor_y + 4.5 * mm, label, font=font, size=size)
        ctx.draw_string(ctx.right, ctx.cursor_y + 4.5 * mm, value, font=font, size=size, align='right')
        ctx.advance(step)


def generate_invoice_pdf(
    record: InvoiceRecord,
    *,
    config: InvoiceConfig | None = None,
    settings: Settings | None = None,
    assets: ReportAssets | None = None,
) -> RenderedDocument:
    settings = settings or get_settings()
    config = config or record.config or settings.invoice_config()
    assets = assets or ReportAssets()
    invoice_number = sanitize_text(record.invoice_number) or 'DRAFT'

    ctx = build_context(
        settings,
        header_title=f'Invoice {invoice_number}',
        header_title_ar='فاتورة',
        footer_left=f'{settings.company_name_en} | Thank you for your business!',
        logo=assets.logo,
        title=f'Invoice {invoice_number}',
    )

    with ctx.section('invoice_totals'):
        services = billable_services(record, config)
        totals = resolve_totals(record, services, config)
        status = display_status(record, totals)

    with ctx.section('invoice_heading'):
        _draw_heading(ctx, record, status, settings)
    with ctx.section('invoice_services'):
        _draw_services_table(ctx, services, config.currency)
    with ctx.section('invoice_totals'):
        _draw_totals(ctx, record, totals, config)
    notes = sanitize_text(record.notes)
    if notes:
        with ctx.section('invoice_notes'):
            ctx.advance(6 * mm)
            draw_section_header(ctx, 'Notes', 'ملاحظات')
            draw_paragraph(ctx, notes, font_size=9)
    with ctx.section('finalize'):
        pdf_bytes = ctx.finish()

    logger.info('Rendered invoice %s: %d pages, %d service lines', invoice_number, ctx.page_count, len(services))
    return RenderedDocument(
        pdf_bytes=pdf_bytes,
        page_count=ctx.page_count,
        report_id=invoice_number,
        footer_labels=list(ctx.footer_labels),
    )
