from __future__ import annotations

import pytest

from conftest import page_texts
from inspectreport.report.invoice import (
    billable_services,
    compute_totals,
    display_status,
    format_currency,
    generate_invoice_pdf,
    property_service_line,
    resolve_totals,
    suggest_invoice_status,
)
from inspectreport.types import InvoiceConfig, InvoiceRecord, InvoiceStatus, ServiceItem


def test_compute_totals_applies_vat():
    services = [ServiceItem(total=100), ServiceItem(total=50)]
    totals = compute_totals(services, InvoiceConfig(vat_rate_percent=5))
    assert totals.subtotal == pytest.approx(150)
    assert totals.tax == pytest.approx(7.5)
    assert totals.total == pytest.approx(157.5)


def test_suggest_invoice_status():
    assert suggest_invoice_status(0, 100) is InvoiceStatus.unpaid
    assert suggest_invoice_status(40, 100) is InvoiceStatus.partial
    assert suggest_invoice_status(100, 100) is InvoiceStatus.paid


def test_property_service_line_uses_rate_by_type():
    config = InvoiceConfig(residential_rate_per_sqm=1.5, commercial_rate_per_sqm=2.0)
    residential = InvoiceRecord(property_type='Residential', property_area=200)
    line = property_service_line(residential, config)
    assert line is not None
    assert line.description == 'Residential Property Inspection (200 m²)'
    assert line.total == pytest.approx(300)

    commercial = property_service_line(InvoiceRecord(property_type='Commercial', property_area=100), config)
    assert commercial.unit_price == pytest.approx(2.0)

    assert property_service_line(InvoiceRecord(property_type='Residential'), config) is None


def test_property_line_is_not_duplicated(invoice_payload):
    invoice_payload.update(propertyType='Residential', propertyArea=120)
    record = InvoiceRecord.model_validate(invoice_payload)
    config = InvoiceConfig()
    services = billable_services(record, config)
    assert len(services) == 3
    again = record.model_copy(update={'services': tuple(services)})
    assert len(billable_services(again, config)) == 3


def test_format_currency():
    assert format_currency(12, 'OMR') == 'OMR 12.00'


def test_invoice_pdf_lists_totals_and_status(invoice_payload, settings):
    record = InvoiceRecord.model_validate(invoice_payload)
    document = generate_invoice_pdf(record, settings=settings)
    texts = page_texts(document.pdf_bytes)
    assert document.page_count == len(texts) == 1
    assert document.report_id == 'INV-2026-0042'
    body = texts[0]
    assert 'INVOICE' in body
    assert 'PARTIAL' in body
    assert 'OMR 157.50' in body
    assert 'OMR 107.50' in body
    assert 'Page 1 of 1' in body


def test_invoice_services_table_repeats_header(invoice_payload, settings):
    invoice_payload['services'] = [
        {'id': f's{n}', 'description': f'Service {n}', 'quantity': 1, 'unitPrice': 10, 'total': 10}
        for n in range(90)
    ]
    invoice_payload['totalAmount'] = 0
    record = InvoiceRecord.model_validate(invoice_payload)
    document = generate_invoice_pdf(record, settings=settings)
    texts = page_texts(document.pdf_bytes)
    assert document.page_count > 1
    for index, text in enumerate(texts, start=1):
        assert f'Page {index} of {len(texts)}' in text
    pages_with_services = [text for text in texts if 'Service ' in text]
    for text in pages_with_services:
        assert 'Unit Price' in text
    assert any('OMR 945.00' in text for text in texts)


def test_paid_draft_shows_payment_status(invoice_payload, settings):
    invoice_payload.update(status='Draft', amountPaid=157.5)
    record = InvoiceRecord.model_validate(invoice_payload)
    totals = resolve_totals(record, billable_services(record, InvoiceConfig()), InvoiceConfig())
    assert display_status(record, totals) is InvoiceStatus.paid
    body = page_texts(generate_invoice_pdf(record, settings=settings).pdf_bytes)[0]
    assert 'PAID' in body
    assert 'DRAFT' not in body


def test_unpaid_draft_stays_draft(invoice_payload):
    invoice_payload.update(status='Draft', amountPaid=0)
    record = InvoiceRecord.model_validate(invoice_payload)
    totals = resolve_totals(record, list(record.services), InvoiceConfig())
    assert display_status(record, totals) is InvoiceStatus.draft
