from __future__ import annotations

from reportlab.lib.units import mm

from conftest import data_uri, jpeg_bytes, page_texts, png_bytes
from inspectreport.report.findings import (
    NO_ITEMS_NOTICE,
    STATUS_COLORS,
    PhotoRef,
    draw_findings_table,
    item_notes,
    pass_rate,
    status_color,
    tally_findings,
)
from inspectreport.report.photos import PLACEHOLDER_TEXT, draw_photo_grid, draw_photos_section
from inspectreport.types import InspectionItem, InspectionRecord, ItemStatus


def _record(statuses: list[str], *, area_count: int = 1) -> InspectionRecord:
    areas = []
    for area_index in range(area_count):
        areas.append(
            {
                'name': f'Area {area_index}',
                'items': [
                    {'id': f'{area_index}-{n}', 'category': 'General', 'point': f'Point {n}', 'status': status}
                    for n, status in enumerate(statuses)
                ],
            }
        )
    return InspectionRecord.model_validate({'clientName': 'Test', 'areas': areas})


def test_tally_accounts_for_every_item():
    record = _record(['Pass', 'Fail', 'N/A', 'weird', 'pass'], area_count=3)
    tally = tally_findings(record)
    assert tally.total_pass + tally.total_fail + tally.total_na == 15
    assert (tally.total_pass, tally.total_fail, tally.total_na) == (6, 3, 6)


def test_pass_rate_bounds():
    assert pass_rate(0, 0) == 0
    assert pass_rate(3, 0) == 100
    assert pass_rate(0, 4) == 0
    assert pass_rate(2, 1) == 67


def test_pass_rate_rounds_halves_up():
    assert pass_rate(1, 7) == 13
    assert pass_rate(5, 3) == 63
    assert pass_rate(1, 1) == 50


def test_pass_rate_ignores_not_applicable():
    tally = tally_findings(_record(['Pass', 'N/A', 'N/A', 'Fail']))
    assert tally.pass_rate == 50


def test_item_notes_joins_comment_location_and_photo_count(good_photo):
    item = InspectionItem.model_validate(
        {'comments': 'Crack', 'location': 'North wall', 'photos': [{'base64': good_photo}]}
    )
    assert item_notes(item) == 'Crack | Location: North wall | Photos: 1'
    assert item_notes(InspectionItem()) == '-'


def test_findings_table_counts_while_drawing(ctx):
    record = _record(['Pass', 'Fail', 'N/A'], area_count=2)
    tally = draw_findings_table(ctx, record)
    assert tally.total_items == 6
    assert tally.total_fail == 2


def test_findings_header_repeats_on_every_page(ctx):
    record = _record(['Pass'] * 120)
    draw_findings_table(ctx, record)
    assert ctx.page_count > 1
    texts = page_texts(ctx.finish())
    for text in texts:
        assert 'Inspection Point' in text


def test_empty_areas_render_notice(ctx):
    record = InspectionRecord.model_validate({'clientName': 'Nobody', 'areas': []})
    tally = draw_findings_table(ctx, record)
    assert tally.total_items == 0
    texts = page_texts(ctx.finish())
    assert len(texts) == 1
    assert NO_ITEMS_NOTICE in texts[0]


def test_corrupt_photos_become_placeholders(ctx):
    photos = [
        PhotoRef(data_uri(png_bytes()), 'Kitchen - Sink'),
        PhotoRef(data_uri(b'definitely not an image'), 'Kitchen - Tap'),
        PhotoRef(data_uri(jpeg_bytes(), 'image/jpeg'), 'Garden - Wall'),
        PhotoRef('data:image/png;base64,@@@@', 'Garden - Gate'),
        PhotoRef(data_uri(png_bytes()[:40]), 'Roof - Tiles'),
    ]
    stats = draw_photo_grid(ctx, photos, limit=6)
    assert stats.slots == 5
    assert stats.placeholders == 3
    assert stats.embedded == 2
    texts = page_texts(ctx.finish())
    assert sum(text.count(PLACEHOLDER_TEXT) for text in texts) == 3


def test_photo_grid_respects_limit(ctx):
    photos = [PhotoRef(data_uri(png_bytes()), f'Photo {n}') for n in range(9)]
    stats = draw_photo_grid(ctx, photos, limit=6)
    assert stats.slots == 6
    assert stats.overflow == 3
    texts = page_texts(ctx.finish())
    assert any('+ 3 more photos available in full report' in text for text in texts)


def test_photo_rows_break_pages(ctx):
    photos = [PhotoRef(data_uri(png_bytes()), f'Photo {n}') for n in range(12)]
    draw_photo_grid(ctx, photos, limit=12)
    assert ctx.page_count >= 2


def test_status_color_lookup():
    assert status_color('Pass') is STATUS_COLORS[ItemStatus.passed]
    assert status_color('Fail') is STATUS_COLORS[ItemStatus.failed]
    assert status_color('whatever') is STATUS_COLORS[ItemStatus.not_applicable]


def test_photos_header_moves_with_first_row(ctx):
    ctx.move_to(ctx.bottom_limit - 30 * mm)
    draw_photos_section(ctx, [PhotoRef(data_uri(png_bytes()), 'Kitchen - Sink')], limit=6)
    assert ctx.page_count == 2
    texts = page_texts(ctx.finish())
    assert 'INSPECTION PHOTOS' not in texts[0]
    assert 'INSPECTION PHOTOS' in texts[1]
