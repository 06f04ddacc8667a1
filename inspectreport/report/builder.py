from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from reportlab.lib.units import mm

from inspectreport.adapters.images import ReportAssets
from inspectreport.config import Settings, get_settings
from inspectreport.storage import new_report_id
from inspectreport.types import InspectionRecord

from .disclaimer import DISCLAIMER_BLOCKS, contact_paragraph, greeting
from .findings import FindingsTally, draw_findings_table, draw_summary, tally_findings
from .layout import (
    BRAND_NAVY,
    MUTED_TEXT,
    NOT_SPECIFIED,
    RenderContext,
    build_context,
    draw_paragraph,
    draw_section_header,
    draw_two_column,
    or_placeholder,
    sanitize_text,
)
from .photos import PhotoGridStats, draw_photos_section


logger = logging.getLogger(__name__)

REPORT_STYLES: dict[str, tuple[str, ...]] = {
    'standard': ('cover_page', 'disclaimer', 'ai_summary', 'findings', 'photos', 'summary', 'signature_page'),
    'compact': ('cover_page', 'findings', 'summary', 'signature_page'),
}


@dataclass
class RenderedDocument:
    pdf_bytes: bytes
    page_count: int
    report_id: str
    footer_labels: list[str] = field(default_factory=list)
    tally: FindingsTally | None = None
    photo_stats: PhotoGridStats | None = None

    @property
    def photo_failures(self) -> int:
        return self.photo_stats.placeholders if self.photo_stats else 0


def format_date(value: str | None) -> str:
    text = sanitize_text(value)
    if not text:
        return NOT_SPECIFIED
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        return text
    return f'{parsed.day} {parsed.strftime("%B %Y")}'


class ReportBuilder:
    """Compose an inspection report section by section.

    Each ``add_*`` call renders straight onto the shared ``RenderContext`` and
    returns the builder, so a report reads as a chain ending in ``build()``.
    """

    def __init__(
        self,
        record: InspectionRecord,
        *,
        settings: Settings | None = None,
        assets: ReportAssets | None = None,
        report_id: str | None = None,
    ):
        self.record = record
        self.settings = settings or get_settings()
        self.assets = assets or ReportAssets()
        self.report_id = report_id or new_report_id(self.settings.report_id_prefix)
        footer = f'{or_placeholder(record.client_name)} | {or_placeholder(record.property_location)}'
        self.ctx: RenderContext = build_context(
            self.settings,
            header_title='Property Inspection Report',
            header_title_ar='تقرير فحص العقار',
            footer_left=footer,
            logo=self.assets.logo,
            watermark=self.assets.watermark,
            title=f'Property Inspection Report {self.report_id}',
        )
        self._tally: FindingsTally | None = None
        self._photo_stats: PhotoGridStats | None = None

    @property
    def tally(self) -> FindingsTally:
        if self._tally is None:
            self._tally = tally_findings(self.record)
        return self._tally

    def _start_on_fresh_page(self) -> None:
        if not self.ctx.at_page_top:
            self.ctx.new_page()

    def add_cover_page(self) -> 'ReportBuilder':
        ctx = self.ctx
        record = self.record
        with ctx.section('cover_page'):
            self._start_on_fresh_page()
            ctx.advance(20 * mm)
            ctx.draw_string(
                ctx.page_width / 2,
                ctx.cursor_y,
                self.settings.company_name_en.upper(),
                font=ctx.fonts.bold,
                size=18,
                color=BRAND_NAVY,
                align='center',
            )
            ctx.draw_string(
                ctx.page_width / 2,
                ctx.cursor_y + 8 * mm,
                self.settings.company_name_ar,
                font=ctx.fonts.arabic,
                size=12,
                color=BRAND_NAVY,
                align='center',
            )
            ctx.advance(20 * mm)
            draw_section_header(ctx, 'PROPERTY INSPECTION REPORT', 'تقرير فحص العقار')
            rows = (
                ('Report ID', 'رقم التقرير', self.report_id),
                ('Client', 'العميل', or_placeholder(record.client_name)),
                ('Property Location', 'موقع العقار', or_placeholder(record.property_location)),
                ('Property Type', 'نوع العقار', or_placeholder(record.property_type)),
                ('Inspector', 'المفتش', or_placeholder(record.inspector_name)),
                ('Inspection Date', 'تاريخ الفحص', format_date(record.inspection_date)),
            )
            for label, label_ar, value in rows:
                draw_two_column(ctx, f'{label}: {value}', f'{label_ar}: {value}', font_size=10)
                ctx.advance(2 * mm)
        return self

    def add_disclaimer(self) -> 'ReportBuilder':
        ctx = self.ctx
        settings = self.settings
        with ctx.section('disclaimer'):
            draw_section_header(ctx, 'OVERVIEW', 'نظرة عامة')
            client = sanitize_text(self.record.client_name)
            for block in (
                greeting(client),
                contact_paragraph(settings.company_name_en, settings.company_email, settings.company_phone),
                *DISCLAIMER_BLOCKS,
            ):
                if block.page_break_before:
                    self._start_on_fresh_page()
                if block.heading:
                    draw_section_header(ctx, block.english, block.arabic)
                    continue
                draw_two_column(
                    ctx,
                    block.english,
                    block.arabic,
                    bold=block.bold,
                    font_size=10 if block.bold else 9,
                )
                ctx.advance(4 * mm)
        return self

    def add_ai_summary(self) -> 'ReportBuilder':
        summary = sanitize_text(self.record.ai_summary)
        if not summary:
            return self
        ctx = self.ctx
        with ctx.section('ai_summary'):
            self._start_on_fresh_page()
            draw_section_header(ctx, 'Executive AI Summary', 'ملخص الذكاء الاصطناعي')
            draw_paragraph(ctx, summary, font_size=10)
            ctx.advance(5 * mm)
        return self

    def add_findings(self) -> 'ReportBuilder':
        ctx = self.ctx
        with ctx.section('findings'):
            self._start_on_fresh_page()
            ctx.draw_string(
                ctx.page_width / 2,
                ctx.cursor_y + 6 * mm,
                'INSPECTION FINDINGS',
                font=ctx.fonts.bold,
                size=16,
                align='center',
            )
            ctx.draw_string(
                ctx.page_width / 2,
                ctx.cursor_y + 12 * mm,
                'نتائج الفحص',
                font=ctx.fonts.arabic_bold,
                size=11,
                align='center',
            )
            ctx.advance(18 * mm)
            self._tally = draw_findings_table(ctx, self.record)
        return self

    def add_photos(self) -> 'ReportBuilder':
        ctx = self.ctx
        with ctx.section('photos'):
            self._photo_stats = draw_photos_section(
                ctx,
                self.tally.photos,
                limit=self.settings.pdf_max_inline_photos,
            )
        return self

    def add_summary(self) -> 'ReportBuilder':
        with self.ctx.section('summary'):
            draw_summary(self.ctx, self.tally)
        return self

    def add_signature_page(self) -> 'ReportBuilder':
        ctx = self.ctx
        record = self.record
        with ctx.section('signature_page'):
            if ctx.cursor_y > ctx.page_height - 90 * mm:
                ctx.new_page()
            ctx.move_to(max(ctx.cursor_y, ctx.page_height - 100 * mm))
            ctx.hline(ctx.cursor_y, color=MUTED_TEXT)
            ctx.advance(8 * mm)

            client = or_placeholder(record.client_name)
            inspector = or_placeholder(record.inspector_name)
            inspected_on = format_date(record.inspection_date)
            for english, arabic in (
                (f'Client Name: {client}', f'اسم العميل: {client}'),
                ('Signature: ______________________', 'التوقيع: ______________________'),
                (f'Prepared by: {inspector}', f'أعد التقرير بواسطة: {inspector}'),
                ('Stamp:', 'الختم:'),
                (f'Date: {inspected_on}', f'التاريخ: {inspected_on}'),
            ):
                draw_two_column(ctx, english, arabic)
                ctx.advance(3 * mm)

            ctx.advance(3 * mm)
            draw_two_column(
                ctx,
                f'Property Inspection report is annexed\n{self.settings.company_name_en} CR. '
                f'{self.settings.company_cr_number}',
                f'مرفق تقرير الفحص\n{self.settings.company_name_ar} س ت {self.settings.company_cr_number}',
                font_size=8,
            )
        return self

    def run_script(self, style: str) -> 'ReportBuilder':
        script = REPORT_STYLES.get(style)
        if script is None:
            raise ValueError(f'unknown report style: {style}')
        for name in script:
            getattr(self, f'add_{name}')()
        return self

    def build(self) -> RenderedDocument:
        with self.ctx.section('finalize'):
            pdf_bytes = self.ctx.finish()
        logger.info(
            'Rendered inspection report %s: %d pages',
            self.report_id,
            self.ctx.page_count,
        )
        return RenderedDocument(
            pdf_bytes=pdf_bytes,
            page_count=self.ctx.page_count,
            report_id=self.report_id,
            footer_labels=list(self.ctx.footer_labels),
            tally=self.tally,
            photo_stats=self._photo_stats,
        )


def generate_inspection_pdf(
    record: InspectionRecord,
    *,
    style: str = 'standard',
    settings: Settings | None = None,
    assets: ReportAssets | None = None,
    report_id: str | None = None,
) -> RenderedDocument:
    if style not in REPORT_STYLES:
        raise ValueError(f'unknown report style: {style}')
    builder = ReportBuilder(record, settings=settings, assets=assets, report_id=report_id)
    return builder.run_script(style).build()
