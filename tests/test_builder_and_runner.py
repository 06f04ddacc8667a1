from __future__ import annotations

import asyncio
import json
import logging
from datetime import date

import httpx
import pytest

from conftest import data_uri, page_texts, png_bytes
from inspectreport.adapters.images import (
    AssetFetcher,
    AssetFetcherConfig,
    ImageDecodeError,
    decode_data_uri,
    sniff_format,
)
from inspectreport.report.builder import ReportBuilder, format_date, generate_inspection_pdf
from inspectreport.report.layout import DocumentGenerationError, load_image
from inspectreport.runner import run_export
from inspectreport.types import InspectionRecord


def _fetcher(handler) -> AssetFetcher:
    return AssetFetcher(
        AssetFetcherConfig(logo_url='https://assets.example.test/logo.png', logo_path=None, timeout_seconds=5),
        transport=httpx.MockTransport(handler),
    )


def test_format_date():
    assert format_date('2026-10-18') == '18 October 2026'
    assert format_date('') == 'Not Specified'
    assert format_date('next week') == 'next week'


def test_decode_data_uri():
    decoded = decode_data_uri('data:image/jpeg;base64,aGVsbG8=')
    assert decoded.data == b'hello'
    assert decoded.fmt == 'JPEG'
    with pytest.raises(ImageDecodeError):
        decode_data_uri('aGVsbG8=')
    with pytest.raises(ImageDecodeError):
        decode_data_uri('data:image/png;base64,')


def test_standard_report_has_consistent_footers(inspection_payload, settings):
    record = InspectionRecord.model_validate(inspection_payload)
    document = generate_inspection_pdf(record, settings=settings, report_id='WASLA-2026-0001')
    texts = page_texts(document.pdf_bytes)
    total = len(texts)
    assert document.page_count == total
    for index, text in enumerate(texts, start=1):
        assert f'Page {index} of {total}' in text
    joined = '\n'.join(texts)
    assert 'INSPECTION FINDINGS' in joined
    assert 'Executive AI Summary' in joined
    assert document.tally.total_items == 4
    assert document.photo_failures == 0


def test_compact_report_starts_with_cover(inspection_payload, settings):
    record = InspectionRecord.model_validate(inspection_payload)
    document = generate_inspection_pdf(record, style='compact', settings=settings, report_id='WASLA-2026-0002')
    first_page = page_texts(document.pdf_bytes)[0]
    assert 'WASLA-2026-0002' in first_page
    assert "Jane O'Brien" in first_page


def test_missing_header_fields_use_placeholder(settings):
    record = InspectionRecord.model_validate({'areas': []})
    document = generate_inspection_pdf(record, style='compact', settings=settings, report_id='R-1')
    joined = '\n'.join(page_texts(document.pdf_bytes))
    assert 'Not Specified' in joined
    assert 'No inspection items were recorded for this property.' in joined


def test_builder_chain(inspection_payload, settings):
    record = InspectionRecord.model_validate(inspection_payload)
    document = (
        ReportBuilder(record, settings=settings, report_id='R-2')
        .add_findings()
        .add_summary()
        .build()
    )
    assert document.report_id == 'R-2'
    assert document.tally.pass_rate == 67


def test_unknown_style_is_rejected(inspection_payload, settings):
    record = InspectionRecord.model_validate(inspection_payload)
    with pytest.raises(ValueError):
        generate_inspection_pdf(record, style='glossy', settings=settings)


def test_fetcher_returns_logo_bytes():
    logo = png_bytes()
    fetcher = _fetcher(lambda request: httpx.Response(200, content=logo))
    assets = asyncio.run(fetcher.resolve())
    assert assets.logo == logo
    assert assets.watermark == logo


def test_fetcher_failure_yields_no_logo():
    fetcher = _fetcher(lambda request: httpx.Response(503))
    assets = asyncio.run(fetcher.resolve())
    assert assets.logo is None


def test_run_export_writes_pdf_and_event(inspection_payload, settings, tmp_path):
    fetcher = _fetcher(lambda request: httpx.Response(200, content=png_bytes()))
    result = run_export(
        'inspection',
        inspection_payload,
        output_dir=tmp_path,
        settings=settings,
        fetcher=fetcher,
        today=date(2026, 10, 18),
    )
    assert result.filename.startswith('WASLA_Report_Jane_O_Brien_2026-10-18_')
    assert result.filename.endswith(f'_{result.report_id}.pdf')
    assert (tmp_path / result.filename).read_bytes().startswith(b'%PDF')
    assert result.metadata['pass_rate'] == 67
    events = [json.loads(line) for line in (tmp_path / 'events.jsonl').read_text(encoding='utf-8').splitlines()]
    assert events[-1]['event'] == 'exported'


def test_run_export_invoice(invoice_payload, settings, tmp_path):
    fetcher = _fetcher(lambda request: httpx.Response(404))
    result = run_export('invoice', invoice_payload, output_dir=tmp_path, settings=settings, fetcher=fetcher,
                        today=date(2026, 10, 18))
    assert result.filename == 'WASLA_Invoice_Salim_Al_Harthy_2026-10-18_INV-2026-0042.pdf'
    assert result.page_count == 1


def test_run_export_reports_bad_input(settings, tmp_path):
    fetcher = _fetcher(lambda request: httpx.Response(404))
    with pytest.raises(DocumentGenerationError) as info:
        run_export('inspection', {'areas': 'nope'}, output_dir=tmp_path, settings=settings, fetcher=fetcher)
    assert info.value.section == 'input'
    events = [json.loads(line) for line in (tmp_path / 'events.jsonl').read_text(encoding='utf-8').splitlines()]
    assert events[-1]['event'] == 'export_failed'
    assert events[-1]['section'] == 'input'


def test_run_export_wraps_render_failures(inspection_payload, settings, tmp_path):
    fetcher = _fetcher(lambda request: httpx.Response(404))
    with pytest.raises(DocumentGenerationError) as info:
        run_export('inspection', inspection_payload, style='glossy', output_dir=tmp_path, settings=settings,
                   fetcher=fetcher)
    assert info.value.section == 'export'


def test_standard_report_opens_with_property_details(inspection_payload, settings):
    inspection_payload.pop('propertyType')
    record = InspectionRecord.model_validate(inspection_payload)
    document = generate_inspection_pdf(record, settings=settings, report_id='WASLA-2026-0777')
    first_page = page_texts(document.pdf_bytes)[0]
    assert 'WASLA-2026-0777' in first_page
    assert 'Property Location' in first_page
    assert 'Property Type' in first_page
    assert 'Not Specified' in first_page


def test_sniff_format_defaults_to_jpeg():
    assert sniff_format('data:image/webp;') == 'WEBP'
    assert sniff_format('data:image/PNG;') == 'PNG'
    assert sniff_format('data:application/octet-stream;') == 'JPEG'
    assert sniff_format('') == 'JPEG'


def test_mislabelled_image_is_embedded_and_logged(caplog):
    decoded = decode_data_uri(data_uri(png_bytes(), 'image/jpeg'))
    assert decoded.fmt == 'JPEG'
    with caplog.at_level(logging.INFO, logger='inspectreport.report.layout'):
        load_image(decoded.data, decoded.fmt)
    assert 'declared as JPEG decoded as PNG' in caplog.text


def test_fetcher_prefers_logo_file(tmp_path):
    logo = png_bytes()
    (tmp_path / 'logo.png').write_bytes(logo)
    fetcher = AssetFetcher(AssetFetcherConfig(logo_url=None, logo_path=tmp_path / 'logo.png', timeout_seconds=5))
    assets = asyncio.run(fetcher.resolve())
    assert assets.logo == logo
