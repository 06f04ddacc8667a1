from __future__ import annotations

import asyncio
import logging
import traceback
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from inspectreport.adapters.images import AssetFetcher, AssetFetcherConfig, ReportAssets
from inspectreport.config import Settings, get_settings
from inspectreport.report.builder import RenderedDocument, generate_inspection_pdf
from inspectreport.report.invoice import generate_invoice_pdf
from inspectreport.report.layout import DocumentGenerationError
from inspectreport.storage import append_event, exports_root, report_filename, write_bytes_atomic
from inspectreport.types import ExportResult, InspectionRecord, InvoiceRecord


logger = logging.getLogger(__name__)

EXPORT_KINDS = ('inspection', 'invoice')


def _build_fetcher(settings: Settings) -> AssetFetcher:
    return AssetFetcher(
        AssetFetcherConfig(
            logo_url=settings.logo_url,
            logo_path=settings.logo_path,
            timeout_seconds=settings.asset_fetch_timeout_seconds,
        )
    )


async def _resolve_assets(settings: Settings, fetcher: AssetFetcher | None) -> ReportAssets:
    fetcher = fetcher or _build_fetcher(settings)
    assets = await fetcher.resolve()
    if assets.logo is None:
        logger.info('No logo available; rendering without branding image')
    return assets


def _write_document(
    document: RenderedDocument,
    *,
    kind: str,
    prefix: str,
    client_name: str,
    output_dir: Path | None,
    today: date | None,
    metadata: dict[str, Any],
) -> ExportResult:
    root = exports_root(output_dir)
    filename = report_filename(prefix, client_name, today or date.today(), document.report_id)
    path = root / filename
    write_bytes_atomic(path, document.pdf_bytes)
    append_event(
        'exported',
        output_dir=root,
        kind=kind,
        filename=filename,
        report_id=document.report_id,
        page_count=document.page_count,
        photo_failures=document.photo_failures,
    )
    logger.info('Wrote %s (%d pages)', path, document.page_count)
    return ExportResult(
        kind=kind,
        filename=filename,
        path=str(path),
        report_id=document.report_id,
        page_count=document.page_count,
        photo_failures=document.photo_failures,
        metadata=metadata,
    )


async def export_inspection_async(
    record: InspectionRecord,
    *,
    style: str = 'standard',
    output_dir: Path | None = None,
    settings: Settings | None = None,
    fetcher: AssetFetcher | None = None,
    report_id: str | None = None,
    today: date | None = None,
) -> ExportResult:
    settings = settings or get_settings()
    assets = await _resolve_assets(settings, fetcher)
    document = generate_inspection_pdf(
        record,
        style=style,
        settings=settings,
        assets=assets,
        report_id=report_id,
    )
    tally = document.tally
    metadata: dict[str, Any] = {'style': style}
    if tally is not None:
        metadata.update(
            total_pass=tally.total_pass,
            total_fail=tally.total_fail,
            total_na=tally.total_na,
            pass_rate=tally.pass_rate,
        )
    return _write_document(
        document,
        kind='inspection',
        prefix=settings.report_file_prefix,
        client_name=record.client_name,
        output_dir=output_dir or settings.output_dir,
        today=today,
        metadata=metadata,
    )


async def export_invoice_async(
    record: InvoiceRecord,
    *,
    output_dir: Path | None = None,
    settings: Settings | None = None,
    fetcher: AssetFetcher | None = None,
    today: date | None = None,
) -> ExportResult:
    settings = settings or get_settings()
    assets = await _resolve_assets(settings, fetcher)
    document = generate_invoice_pdf(record, settings=settings, assets=assets)
    return _write_document(
        document,
        kind='invoice',
        prefix=settings.invoice_file_prefix,
        client_name=record.client_name,
        output_dir=output_dir or settings.output_dir,
        today=today,
        metadata={'status': record.status.value},
    )


def _parse_record(kind: str, payload: dict[str, Any]) -> InspectionRecord | InvoiceRecord:
    try:
        if kind == 'inspection':
            return InspectionRecord.model_validate(payload)
        return InvoiceRecord.model_validate(payload)
    except ValidationError as exc:
        raise DocumentGenerationError('input', f'{exc.error_count()} invalid field(s): {exc}') from exc


def run_export(
    kind: str,
    payload: dict[str, Any],
    *,
    style: str = 'standard',
    output_dir: Path | None = None,
    settings: Settings | None = None,
    fetcher: AssetFetcher | None = None,
    today: date | None = None,
) -> ExportResult:
    """Render one document and write it to disk.

    Every failure leaves as a DocumentGenerationError and is recorded as an
    ``export_failed`` event next to the exports.
    """
    if kind not in EXPORT_KINDS:
        raise ValueError(f'unknown export kind: {kind}')
    try:
        record = _parse_record(kind, payload)
        if isinstance(record, InspectionRecord):
            coro = export_inspection_async(
                record,
                style=style,
                output_dir=output_dir,
                settings=settings,
                fetcher=fetcher,
                today=today,
            )
        else:
            coro = export_invoice_async(
                record,
                output_dir=output_dir,
                settings=settings,
                fetcher=fetcher,
                today=today,
            )
        return asyncio.run(coro)
    except Exception as exc:
        if isinstance(exc, DocumentGenerationError):
            error = exc
        else:
            error = DocumentGenerationError('export', f'{type(exc).__name__}: {exc}')
        stack = traceback.format_exc()
        logger.error('Export of %s failed: %s', kind, error, exc_info=True)
        append_event(
            'export_failed',
            output_dir=output_dir or (settings or get_settings()).output_dir,
            kind=kind,
            section=error.section,
            error=error.message,
            stack=stack,
        )
        if error is exc:
            raise
        raise error from exc
