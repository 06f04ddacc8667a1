from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.units import mm

from inspectreport.adapters.images import decode_data_uri

from .findings import PhotoRef
from .layout import MUTED_TEXT, RenderContext, draw_section_header, load_image, wrap_text


logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = 'Image Not Available'

_FRAME_COLOR = colors.HexColor('#C8C8C8')
_PLACEHOLDER_FILL = colors.HexColor('#F5F5F5')
_FRAME_HEIGHT = 60 * mm
_CAPTION_HEIGHT = 5 * mm
# Section header band plus the gap below it.
_SECTION_HEADER_HEIGHT = 12 * mm


@dataclass
class PhotoGridStats:
    slots: int = 0
    embedded: int = 0
    placeholders: int = 0
    overflow: int = 0


def _draw_placeholder(ctx: RenderContext, x: float, top: float, width: float, height: float) -> None:
    ctx.fill_rect(x + 1, top + 1, width - 2, height - 2, _PLACEHOLDER_FILL)
    ctx.draw_string(x + width / 2, top + height / 2, PLACEHOLDER_TEXT, size=8, color=MUTED_TEXT, align='center')


def _embed(ctx: RenderContext, photo: PhotoRef, x: float, top: float, width: float, height: float) -> bool:
    try:
        decoded = decode_data_uri(photo.base64)
        image = load_image(decoded.data, decoded.fmt)
        ctx.draw_image(image, x + 1, top + 1, width - 2, height - 2)
    except Exception as exc:
        logger.warning('Failed to embed photo %r: %s', photo.caption, exc)
        return False
    return True


def draw_photo_grid(
    ctx: RenderContext,
    photos: Sequence[PhotoRef],
    *,
    limit: int = 6,
    columns: int = 2,
    frame_height: float = _FRAME_HEIGHT,
    caption_height: float = _CAPTION_HEIGHT,
    row_gap: float = 10 * mm,
    column_gap: float = 10 * mm,
) -> PhotoGridStats:
    """Lay photos out in rows; a photo that cannot be decoded becomes a placeholder."""
    stats = PhotoGridStats()
    shown = list(photos[: max(0, limit)])
    stats.overflow = max(0, len(photos) - len(shown))
    if not shown:
        return stats

    columns = max(1, columns)
    frame_width = (ctx.content_width - (columns - 1) * column_gap) / columns
    row_advance = frame_height + caption_height + row_gap

    for row_start in range(0, len(shown), columns):
        ctx.ensure_space(frame_height + caption_height)
        top = ctx.cursor_y
        for offset, photo in enumerate(shown[row_start:row_start + columns]):
            x = ctx.left + offset * (frame_width + column_gap)
            ctx.stroke_rect(x, top, frame_width, frame_height, _FRAME_COLOR)
            if _embed(ctx, photo, x, top, frame_width, frame_height):
                stats.embedded += 1
            else:
                _draw_placeholder(ctx, x, top, frame_width, frame_height)
                stats.placeholders += 1
            stats.slots += 1
            caption = wrap_text(photo.caption, frame_width, ctx.fonts.regular, 7)
            if caption:
                ctx.draw_string(x, top + frame_height + 4 * mm, caption[0], size=7)
        ctx.advance(row_advance)

    if stats.overflow:
        ctx.ensure_space(10 * mm)
        ctx.draw_string(
            ctx.left,
            ctx.cursor_y + 4 * mm,
            f'+ {stats.overflow} more photos available in full report',
            font='Helvetica-Oblique',
            size=9,
            color=MUTED_TEXT,
        )
        ctx.advance(10 * mm)
    return stats


def draw_photos_section(ctx: RenderContext, photos: Sequence[PhotoRef], *, limit: int) -> PhotoGridStats:
    if not photos:
        return PhotoGridStats()
    # Keep the header with the first row of photos.
    ctx.ensure_space(_SECTION_HEADER_HEIGHT + _FRAME_HEIGHT + _CAPTION_HEIGHT)
    draw_section_header(ctx, 'INSPECTION PHOTOS', 'صور الفحص')
    stats = draw_photo_grid(ctx, photos, limit=limit)
    logger.info(
        'Rendered %d photo slots (%d placeholders, %d not shown)',
        stats.slots,
        stats.placeholders,
        stats.overflow,
    )
    return stats
