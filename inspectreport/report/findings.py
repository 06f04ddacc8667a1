from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from reportlab.lib import colors
from reportlab.lib.units import mm

from inspectreport.types import InspectionArea, InspectionItem, InspectionRecord, ItemStatus

from .layout import (
    BRAND_NAVY,
    TEXT_COLOR,
    RenderContext,
    draw_section_header,
    line_height,
    sanitize_text,
    wrap_text,
)


logger = logging.getLogger(__name__)

STATUS_COLORS = {
    ItemStatus.passed: colors.HexColor('#22C55E'),
    ItemStatus.failed: colors.HexColor('#EF4444'),
    ItemStatus.not_applicable: colors.HexColor('#9CA3AF'),
}

NO_ITEMS_NOTICE = 'No inspection items were recorded for this property.'

# Widths in mm for a 180 mm content area; scaled to the real content width.
_COLUMNS: tuple[tuple[str, float, str], ...] = (
    ('#', 10, 'center'),
    ('Category', 35, 'left'),
    ('Inspection Point', 60, 'left'),
    ('Status', 25, 'center'),
    ('Notes', 50, 'left'),
)

_BODY_FONT_SIZE = 8
_HEADER_FONT_SIZE = 9
_CELL_PADDING = 1.5 * mm
_HEADER_BAND_HEIGHT = 8 * mm
_AREA_BAND_HEIGHT = 7 * mm
_ALT_ROW_FILL = colors.HexColor('#FAFAFA')
_AREA_FILL = colors.HexColor('#F0F5FA')


@dataclass(frozen=True)
class PhotoRef:
    base64: str
    caption: str


@dataclass
class FindingsTally:
    total_pass: int = 0
    total_fail: int = 0
    total_na: int = 0
    photos: list[PhotoRef] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return self.total_pass + self.total_fail + self.total_na

    @property
    def pass_rate(self) -> int:
        return pass_rate(self.total_pass, self.total_fail)

    def record(self, area: InspectionArea, item: InspectionItem) -> None:
        status = ItemStatus.coerce(item.status)
        if status is ItemStatus.passed:
            self.total_pass += 1
        elif status is ItemStatus.failed:
            self.total_fail += 1
        else:
            self.total_na += 1
        for photo in item.photos:
            if photo.base64:
                caption = f'{sanitize_text(area.name)} - {sanitize_text(item.point)}'.strip(' -')
                self.photos.append(PhotoRef(base64=photo.base64, caption=caption))


def pass_rate(total_pass: int, total_fail: int) -> int:
    """Percentage of decided items that passed, halves rounded up; N/A is not counted."""
    decided = total_pass + total_fail
    if decided <= 0:
        return 0
    return max(0, min(100, math.floor(total_pass * 100 / decided + 0.5)))


def tally_findings(record: InspectionRecord) -> FindingsTally:
    tally = FindingsTally()
    for area in record.areas:
        for item in area.items:
            tally.record(area, item)
    return tally


def status_color(status) -> colors.Color:
    return STATUS_COLORS[ItemStatus.coerce(status)]


def item_notes(item: InspectionItem) -> str:
    parts: list[str] = []
    comments = sanitize_text(item.comments)
    if comments:
        parts.append(comments)
    location = sanitize_text(item.location)
    if location:
        parts.append(f'Location: {location}')
    if item.photos:
        parts.append(f'Photos: {len(item.photos)}')
    return ' | '.join(parts) or '-'


def _column_layout(ctx: RenderContext) -> list[tuple[str, float, float, str]]:
    scale = ctx.content_width / sum(width for _, width, _ in _COLUMNS)
    layout: list[tuple[str, float, float, str]] = []
    x = ctx.left
    for title, width, align in _COLUMNS:
        real_width = width * scale
        layout.append((title, x, real_width, align))
        x += real_width
    return layout


def _draw_column_header(ctx: RenderContext, columns: list[tuple[str, float, float, str]]) -> None:
    top = ctx.cursor_y
    ctx.fill_rect(ctx.left, top, ctx.content_width, _HEADER_BAND_HEIGHT, BRAND_NAVY)
    baseline = top + _HEADER_BAND_HEIGHT / 2 + _HEADER_FONT_SIZE * 0.35
    for title, x, width, align in columns:
        anchor = _anchor_x(x, width, align)
        ctx.draw_string(anchor, baseline, title, font=ctx.fonts.bold, size=_HEADER_FONT_SIZE, color=colors.white, align=align)
    ctx.advance(_HEADER_BAND_HEIGHT)


def _anchor_x(x: float, width: float, align: str) -> float:
    if align == 'center':
        return x + width / 2
    if align == 'right':
        return x + width - _CELL_PADDING
    return x + _CELL_PADDING


def _row_cells(ctx: RenderContext, index: int, item: InspectionItem, columns) -> tuple[list[list[str]], float]:
    status = ItemStatus.coerce(item.status)
    values = [
        str(index),
        sanitize_text(item.category),
        sanitize_text(item.point),
        status.value,
        item_notes(item),
    ]
    cells: list[list[str]] = []
    for column_index, (value, (_, _, width, _)) in enumerate(zip(values, columns)):
        font = ctx.fonts.bold if column_index == 3 else ctx.fonts.regular
        cells.append(wrap_text(value, width - 2 * _CELL_PADDING, font, _BODY_FONT_SIZE) or [''])
    height = max(len(lines) for lines in cells) * line_height(_BODY_FONT_SIZE) + 2 * _CELL_PADDING
    return cells, height


def _draw_area_band(ctx: RenderContext, area: InspectionArea) -> None:
    top = ctx.cursor_y
    ctx.fill_rect(ctx.left, top, ctx.content_width, _AREA_BAND_HEIGHT, _AREA_FILL)
    ctx.draw_string(
        ctx.left + ctx.content_width / 2,
        top + _AREA_BAND_HEIGHT / 2 + 10 * 0.35,
        sanitize_text(area.name).upper() or 'UNNAMED AREA',
        font=ctx.fonts.bold,
        size=10,
        color=BRAND_NAVY,
        align='center',
    )
    ctx.advance(_AREA_BAND_HEIGHT)


def _draw_row(ctx: RenderContext, cells: list[list[str]], height: float, status: ItemStatus, columns, *, shaded: bool) -> None:
    top = ctx.cursor_y
    if shaded:
        ctx.fill_rect(ctx.left, top, ctx.content_width, height, _ALT_ROW_FILL)
    for column_index, (lines, (_, x, width, align)) in enumerate(zip(cells, columns)):
        is_status = column_index == 3
        ctx.draw_lines(
            lines,
            _anchor_x(x, width, align),
            top + _CELL_PADDING,
            font=ctx.fonts.bold if is_status else ctx.fonts.regular,
            size=_BODY_FONT_SIZE,
            color=status_color(status) if is_status else TEXT_COLOR,
            align=align,
        )
    ctx.hline(top + height, color=colors.HexColor('#E5E7EB'))
    ctx.advance(height)


def draw_findings_table(ctx: RenderContext, record: InspectionRecord) -> FindingsTally:
    """Render areas and items as one table, counting statuses as rows are drawn."""
    tally = FindingsTally()
    areas = [area for area in record.areas if area.items]
    if not areas:
        ctx.ensure_space(line_height(10) * 2)
        ctx.draw_string(ctx.left, ctx.cursor_y + 10, NO_ITEMS_NOTICE, size=10)
        ctx.advance(line_height(10) * 2)
        logger.info('Inspection %s has no recorded items', record.id or '-')
        return tally

    columns = _column_layout(ctx)
    index = 1
    first_row = True
    for area in areas:
        first_cells, first_height = _row_cells(ctx, index, area.items[0], columns)
        needed = _AREA_BAND_HEIGHT + first_height + (_HEADER_BAND_HEIGHT if first_row else 0)
        if ctx.ensure_space(needed) or first_row:
            _draw_column_header(ctx, columns)
        first_row = False
        _draw_area_band(ctx, area)

        for position, item in enumerate(area.items):
            if position == 0:
                cells, height = first_cells, first_height
            else:
                cells, height = _row_cells(ctx, index, item, columns)
            if ctx.ensure_space(height):
                _draw_column_header(ctx, columns)
            _draw_row(ctx, cells, height, ItemStatus.coerce(item.status), columns, shaded=index % 2 == 0)
            tally.record(area, item)
            index += 1

    ctx.advance(4 * mm)
    return tally


def draw_summary(ctx: RenderContext, tally: FindingsTally) -> None:
    card_height = 35 * mm
    bar_height = 20 * mm
    draw_section_header(ctx, 'INSPECTION SUMMARY', 'ملخص الفحص')
    ctx.ensure_space(card_height + bar_height + 10 * mm)

    rate = tally.pass_rate
    if rate >= 80:
        rate_color = STATUS_COLORS[ItemStatus.passed]
    elif rate >= 60:
        rate_color = colors.HexColor('#FBBF24')
    else:
        rate_color = STATUS_COLORS[ItemStatus.failed]

    spacing = 7.5 * mm
    card_width = (ctx.content_width - 2 * spacing) / 3
    cards = (
        ('Total Items', 'إجمالي البنود', str(tally.total_items), BRAND_NAVY),
        ('Pass Rate', 'نسبة النجاح', f'{rate}%', rate_color),
        ('Photos', 'الصور', str(len(tally.photos)), BRAND_NAVY),
    )
    top = ctx.cursor_y
    for position, (label, label_ar, value, accent) in enumerate(cards):
        x = ctx.left + position * (card_width + spacing)
        center = x + card_width / 2
        ctx.fill_rect(x, top, card_width, card_height, colors.HexColor('#F8FAFC'), stroke=accent)
        ctx.draw_string(center, top + 10 * mm, label, font=ctx.fonts.bold, size=9, color=BRAND_NAVY, align='center')
        ctx.draw_string(center, top + 15 * mm, label_ar, font=ctx.fonts.arabic_bold, size=9, color=BRAND_NAVY, align='center')
        ctx.draw_string(center, top + 27 * mm, value, font=ctx.fonts.bold, size=20, color=accent, align='center')
    ctx.advance(card_height + 10 * mm)

    top = ctx.cursor_y
    ctx.fill_rect(ctx.left, top, ctx.content_width, bar_height, colors.HexColor('#F0F8FF'))
    bar_width = ctx.content_width - 20 * mm
    x = ctx.left + 10 * mm
    total = tally.total_items
    for count, status in (
        (tally.total_pass, ItemStatus.passed),
        (tally.total_fail, ItemStatus.failed),
        (tally.total_na, ItemStatus.not_applicable),
    ):
        width = (count / total) * bar_width if total else 0
        if width > 0:
            ctx.fill_rect(x, top + 7 * mm, width, 6 * mm, STATUS_COLORS[status])
        x += width
    labels = (f'Pass: {tally.total_pass}', f'Fail: {tally.total_fail}', f'N/A: {tally.total_na}')
    for position, label in enumerate(labels):
        ctx.draw_string(ctx.left + 10 * mm + position * 55 * mm, top + 17 * mm, label, size=8)
    ctx.advance(bar_height + 6 * mm)
