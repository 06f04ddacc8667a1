from __future__ import annotations

import io
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas as pdfcanvas

from inspectreport.config import Settings


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4

LINE_HEIGHT_FACTOR = 1.15
NOT_SPECIFIED = 'Not Specified'

BRAND_NAVY = colors.HexColor('#001F3F')
TEXT_COLOR = colors.HexColor('#111827')
MUTED_TEXT = colors.HexColor('#6B7280')
RULE_COLOR = colors.HexColor('#DCDCDC')
BAND_FILL = colors.HexColor('#F5F5F5')

FONT_ARABIC_NAME = 'IR-Arabic'
FONT_ARABIC_BOLD_NAME = 'IR-Arabic-Bold'
FONT_ARABIC_CANDIDATES = (
    Path('assets/fonts/NotoNaskhArabic-Regular.ttf'),
    Path('/usr/share/fonts/truetype/noto/NotoNaskhArabic-Regular.ttf'),
    Path('/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf'),
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf'),
)
FONT_ARABIC_BOLD_CANDIDATES = (
    Path('assets/fonts/NotoNaskhArabic-Bold.ttf'),
    Path('/usr/share/fonts/truetype/noto/NotoNaskhArabic-Bold.ttf'),
    Path('/usr/share/fonts/truetype/noto/NotoSansArabic-Bold.ttf'),
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf'),
)

_CONTROL_CHARS_PATTERN = re.compile(r'[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F-\u009F]')
_ZERO_WIDTH_PATTERN = re.compile(r'[\u200B-\u200D\uFEFF]')


class DocumentGenerationError(RuntimeError):
    """Raised once per document; ``section`` names what was being rendered."""

    def __init__(self, section: str, message: str):
        super().__init__(f'[{section}] {message}')
        self.section = section
        self.message = message


@dataclass(frozen=True)
class Margins:
    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def from_settings(cls, settings: Settings) -> 'Margins':
        return cls(
            top=settings.pdf_margin_top_mm * mm,
            right=settings.pdf_margin_right_mm * mm,
            bottom=settings.pdf_margin_bottom_mm * mm,
            left=settings.pdf_margin_left_mm * mm,
        )


@dataclass(frozen=True)
class ReportFonts:
    regular: str
    bold: str
    arabic: str
    arabic_bold: str


_FONTS_CACHE: dict[tuple[str, str, str], ReportFonts] = {}


def _register_ttf_font(font_name: str, font_path: Path) -> bool:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return True
    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
        return True
    except Exception as exc:
        logger.warning('Failed to register PDF font %s from %s: %s', font_name, font_path, exc)
        return False


def _register_first(font_name: str, candidates: tuple[Path, ...]) -> bool:
    for candidate in candidates:
        if candidate.is_file() and _register_ttf_font(font_name, candidate):
            return True
    return False


def resolve_fonts(settings: Settings) -> ReportFonts:
    cache_key = (settings.pdf_font_name, settings.pdf_bold_font_name, str(settings.pdf_arabic_font_path or ''))
    cached = _FONTS_CACHE.get(cache_key)
    if cached is not None:
        return cached

    regular = settings.pdf_font_name
    bold = settings.pdf_bold_font_name
    arabic_candidates = FONT_ARABIC_CANDIDATES
    if settings.pdf_arabic_font_path is not None:
        arabic_candidates = (Path(settings.pdf_arabic_font_path), *FONT_ARABIC_CANDIDATES)

    arabic = regular
    arabic_bold = bold
    if _register_first(FONT_ARABIC_NAME, arabic_candidates):
        arabic = FONT_ARABIC_NAME
        arabic_bold = FONT_ARABIC_NAME
        if _register_first(FONT_ARABIC_BOLD_NAME, FONT_ARABIC_BOLD_CANDIDATES):
            arabic_bold = FONT_ARABIC_BOLD_NAME
    else:
        logger.warning('No Arabic-capable font found; right-hand columns fall back to %s', regular)

    fonts = ReportFonts(regular=regular, bold=bold, arabic=arabic, arabic_bold=arabic_bold)
    _FONTS_CACHE[cache_key] = fonts
    return fonts


def sanitize_text(value: str | None) -> str:
    text = str(value or '').replace('\r\n', '\n').replace('\r', '\n')
    text = _CONTROL_CHARS_PATTERN.sub('', text)
    text = _ZERO_WIDTH_PATTERN.sub('', text)
    return text.strip()


def or_placeholder(value: str | None) -> str:
    text = sanitize_text(value)
    return text or NOT_SPECIFIED


def line_height(font_size: float) -> float:
    return float(font_size) * LINE_HEIGHT_FACTOR


def text_width(text: str, font_name: str, font_size: float) -> float:
    return float(pdfmetrics.stringWidth(text, font_name, float(font_size)))


def _split_token_by_width(token: str, *, max_width: float, font_name: str, font_size: float) -> list[str]:
    chunks: list[str] = []
    current = ''
    for char in token:
        candidate = f'{current}{char}'
        if text_width(candidate, font_name, font_size) <= max_width:
            current = candidate
            continue
        if current:
            chunks.append(current)
            current = char
            continue
        chunks.append(char)
        current = ''
    if current:
        chunks.append(current)
    return chunks


def wrap_text(text: str | None, max_width: float, font_name: str, font_size: float) -> list[str]:
    """Greedy word wrap by measured width.

    Newlines are paragraph breaks and survive as their own lines; an empty
    input wraps to no lines at all.
    """
    cleaned = sanitize_text(text)
    if not cleaned:
        return []

    lines: list[str] = []
    for paragraph in cleaned.split('\n'):
        words = paragraph.split()
        if not words:
            lines.append('')
            continue
        current = ''
        for word in words:
            candidate = f'{current} {word}' if current else word
            if text_width(candidate, font_name, font_size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
                current = ''
            if text_width(word, font_name, font_size) <= max_width:
                current = word
                continue
            chunks = _split_token_by_width(word, max_width=max_width, font_name=font_name, font_size=font_size)
            lines.extend(chunks[:-1])
            current = chunks[-1] if chunks else ''
        if current:
            lines.append(current)
    return lines


def load_image(data: bytes, declared_format: str | None = None) -> ImageReader:
    """Fully decode image bytes; raises on truncated or unsupported data."""
    with PILImage.open(io.BytesIO(data)) as opened:
        if declared_format and opened.format and opened.format != declared_format:
            logger.info('Image declared as %s decoded as %s', declared_format, opened.format)
        opened.load()
        image = opened.copy()
    if image.mode not in ('RGB', 'L'):
        image = image.convert('RGB')
    return ImageReader(image)


StampFn = Callable[['StampedCanvas', int, int], None]


class StampedCanvas(pdfcanvas.Canvas):
    """Canvas that holds every page back until ``save`` so decorations know the page count."""

    def __init__(self, *args, stamp: StampFn | None = None, **kwargs):
        pdfcanvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states: list[dict] = []
        self._stamp = stamp

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            if self._stamp is not None:
                self._stamp(self, self._pageNumber, page_count)
            pdfcanvas.Canvas.showPage(self)
        pdfcanvas.Canvas.save(self)


class RenderContext:
    """Cursor and page state for one document.

    ``cursor_y`` is measured in points from the top edge of the page and
    grows downward. Headers and footers are never drawn here directly; they
    are stamped on every page when ``finish`` saves the canvas.
    """

    def __init__(
        self,
        *,
        fonts: ReportFonts,
        margins: Margins,
        gutter: float = 10 * mm,
        header_title: str = '',
        header_title_ar: str = '',
        footer_left: str = '',
        logo: bytes | None = None,
        watermark: bytes | None = None,
        watermark_opacity: float = 0.08,
        title: str = '',
        author: str = '',
    ):
        self.fonts = fonts
        self.margins = margins
        self.gutter = gutter
        self.page_width = PAGE_WIDTH
        self.page_height = PAGE_HEIGHT
        self.header_title = header_title
        self.header_title_ar = header_title_ar
        self.footer_left = footer_left
        self.watermark_opacity = watermark_opacity
        self.footer_labels: list[str] = []
        self.section_name = 'setup'

        self.logo = self._safe_image(logo, 'logo')
        self.watermark = self._safe_image(watermark, 'watermark')

        self._buffer = io.BytesIO()
        self.canvas = StampedCanvas(self._buffer, pagesize=A4, stamp=self._stamp_page)
        if title:
            self.canvas.setTitle(title)
        if author:
            self.canvas.setAuthor(author)
        self.canvas.setProducer('inspectreport')

        self.page_number = 1
        self.cursor_y = margins.top
        self._finished = False
        self._draw_watermark()

    # -- geometry --------------------------------------------------------

    @property
    def left(self) -> float:
        return self.margins.left

    @property
    def right(self) -> float:
        return self.page_width - self.margins.right

    @property
    def content_width(self) -> float:
        return self.page_width - self.margins.left - self.margins.right

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margins.bottom

    @property
    def usable_height(self) -> float:
        return self.bottom_limit - self.margins.top

    @property
    def at_page_top(self) -> bool:
        return self.cursor_y <= self.margins.top

    @property
    def page_count(self) -> int:
        return self.page_number

    def pdf_y(self, y: float) -> float:
        return self.page_height - y

    # -- state machine ---------------------------------------------------

    def fits(self, block_height: float) -> bool:
        return self.cursor_y + block_height <= self.bottom_limit

    def ensure_space(self, block_height: float) -> bool:
        if self.fits(block_height) or self.at_page_top:
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        if self._finished:
            raise DocumentGenerationError(self.section_name, 'cannot add a page after the document was finished')
        self.canvas.showPage()
        self.page_number += 1
        self.cursor_y = self.margins.top
        self._draw_watermark()
        logger.debug('Started page %d while rendering %s', self.page_number, self.section_name)

    def advance(self, height: float) -> None:
        self.move_to(self.cursor_y + height)

    def move_to(self, y: float) -> None:
        if y < 0:
            raise DocumentGenerationError(self.section_name, f'cursor moved above the page top ({y:.2f})')
        self.cursor_y = y

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        previous = self.section_name
        self.section_name = name
        try:
            yield
        except DocumentGenerationError:
            raise
        except Exception as exc:
            raise DocumentGenerationError(name, f'{type(exc).__name__}: {exc}') from exc
        finally:
            self.section_name = previous

    def finish(self) -> bytes:
        if self._finished:
            return self._buffer.getvalue()
        self.canvas.showPage()
        self.canvas.save()
        self._finished = True
        return self._buffer.getvalue()

    # -- primitives ------------------------------------------------------

    def draw_string(
        self,
        x: float,
        y: float,
        text: str,
        *,
        font: str | None = None,
        size: float = 9,
        color=TEXT_COLOR,
        align: str = 'left',
    ) -> None:
        c = self.canvas
        c.saveState()
        c.setFillColor(color)
        c.setFont(font or self.fonts.regular, size)
        baseline = self.pdf_y(y)
        if align == 'right':
            c.drawRightString(x, baseline, text)
        elif align == 'center':
            c.drawCentredString(x, baseline, text)
        else:
            c.drawString(x, baseline, text)
        c.restoreState()

    def draw_lines(
        self,
        lines: list[str],
        x: float,
        top: float,
        *,
        font: str,
        size: float,
        color=TEXT_COLOR,
        align: str = 'left',
    ) -> None:
        step = line_height(size)
        for index, line in enumerate(lines):
            if not line:
                continue
            self.draw_string(x, top + index * step + size * 0.9, line, font=font, size=size, color=color, align=align)

    def fill_rect(self, x: float, y: float, width: float, height: float, color, *, stroke=None) -> None:
        c = self.canvas
        c.saveState()
        c.setFillColor(color)
        if stroke is not None:
            c.setStrokeColor(stroke)
        c.rect(x, self.pdf_y(y + height), width, height, fill=1, stroke=1 if stroke is not None else 0)
        c.restoreState()

    def stroke_rect(self, x: float, y: float, width: float, height: float, color, *, line_width: float = 0.5) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(color)
        c.setLineWidth(line_width)
        c.rect(x, self.pdf_y(y + height), width, height, fill=0, stroke=1)
        c.restoreState()

    def hline(self, y: float, *, color=RULE_COLOR, x1: float | None = None, x2: float | None = None) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(color)
        c.setLineWidth(0.5)
        c.line(self.left if x1 is None else x1, self.pdf_y(y), self.right if x2 is None else x2, self.pdf_y(y))
        c.restoreState()

    def draw_image(self, image: ImageReader, x: float, y: float, width: float, height: float) -> None:
        self.canvas.drawImage(
            image,
            x,
            self.pdf_y(y + height),
            width=width,
            height=height,
            preserveAspectRatio=True,
            anchor='c',
            mask='auto',
        )

    # -- decorations -----------------------------------------------------

    def _safe_image(self, data: bytes | None, label: str) -> ImageReader | None:
        if not data:
            return None
        try:
            return load_image(data)
        except Exception as exc:
            logger.warning('Failed to decode %s image: %s', label, exc)
            return None

    def _draw_watermark(self) -> None:
        if self.watermark is None:
            return
        size = 90 * mm
        c = self.canvas
        c.saveState()
        try:
            c.setFillAlpha(self.watermark_opacity)
            c.drawImage(
                self.watermark,
                (self.page_width - size) / 2,
                (self.page_height - size) / 2,
                width=size,
                height=size,
                preserveAspectRatio=True,
                mask='auto',
            )
        except Exception as exc:
            logger.warning('Failed to draw watermark: %s', exc)
        finally:
            c.restoreState()

    def _stamp_page(self, c: StampedCanvas, page_number: int, page_count: int) -> None:
        c.saveState()

        if self.logo is not None:
            try:
                c.drawImage(
                    self.logo,
                    self.left,
                    self.pdf_y(20 * mm),
                    width=25 * mm,
                    height=12.5 * mm,
                    preserveAspectRatio=True,
                    mask='auto',
                )
            except Exception as exc:
                logger.warning('Failed to draw header logo: %s', exc)

        c.setFillColor(MUTED_TEXT)
        if self.header_title:
            c.setFont(self.fonts.bold, 9)
            c.drawRightString(self.right, self.pdf_y(15 * mm), self.header_title)
        if self.header_title_ar:
            c.setFont(self.fonts.arabic, 8)
            c.drawRightString(self.right, self.pdf_y(11 * mm), self.header_title_ar)

        c.setStrokeColor(RULE_COLOR)
        c.setLineWidth(0.5)
        c.line(self.left, self.pdf_y(20 * mm), self.right, self.pdf_y(20 * mm))

        footer_y = self.page_height - 15 * mm
        c.line(self.left, self.pdf_y(footer_y - 3 * mm), self.right, self.pdf_y(footer_y - 3 * mm))
        c.setFont(self.fonts.regular, 8)
        if self.footer_left:
            wrapped = wrap_text(self.footer_left, self.content_width / 2, self.fonts.regular, 8)
            if wrapped:
                c.drawString(self.left, self.pdf_y(footer_y), wrapped[0])
        label = f'Page {page_number} of {page_count}'
        c.drawRightString(self.right, self.pdf_y(footer_y), label)
        self.footer_labels.append(label)

        c.restoreState()


def build_context(
    settings: Settings,
    *,
    header_title: str,
    header_title_ar: str = '',
    footer_left: str = '',
    logo: bytes | None = None,
    watermark: bytes | None = None,
    title: str = '',
) -> RenderContext:
    return RenderContext(
        fonts=resolve_fonts(settings),
        margins=Margins.from_settings(settings),
        gutter=settings.pdf_gutter_mm * mm,
        header_title=header_title,
        header_title_ar=header_title_ar,
        footer_left=footer_left,
        logo=logo,
        watermark=watermark,
        watermark_opacity=settings.watermark_opacity,
        title=title,
        author=settings.company_name_en,
    )


def draw_two_column(
    ctx: RenderContext,
    english: str | None,
    arabic: str | None,
    *,
    bold: bool = False,
    font_size: float = 9,
) -> int:
    """Render English (left) and Arabic (right) side by side.

    Returns the number of lines consumed; the cursor moves by exactly that
    many line heights.
    """
    column_width = (ctx.content_width - ctx.gutter) / 2
    english_font = ctx.fonts.bold if bold else ctx.fonts.regular
    arabic_font = ctx.fonts.arabic_bold if bold else ctx.fonts.arabic

    english_lines = wrap_text(english, column_width, english_font, font_size)
    arabic_lines = wrap_text(arabic, column_width, arabic_font, font_size)
    line_count = max(len(english_lines), len(arabic_lines))
    if line_count == 0:
        return 0

    block_height = line_count * line_height(font_size)
    ctx.ensure_space(block_height)
    top = ctx.cursor_y
    ctx.draw_lines(english_lines, ctx.left, top, font=english_font, size=font_size)
    ctx.draw_lines(arabic_lines, ctx.right, top, font=arabic_font, size=font_size, align='right')
    ctx.advance(block_height)
    return line_count


def draw_section_header(ctx: RenderContext, english: str, arabic: str, *, font_size: float = 11) -> None:
    band_height = 8 * mm
    ctx.ensure_space(band_height + 7 * mm)
    top = ctx.cursor_y
    ctx.fill_rect(ctx.left, top, ctx.content_width, band_height, BAND_FILL)
    baseline = top + band_height / 2 + font_size * 0.35
    ctx.draw_string(ctx.left + 3 * mm, baseline, sanitize_text(english), font=ctx.fonts.bold, size=font_size)
    ctx.draw_string(
        ctx.right - 3 * mm,
        baseline,
        sanitize_text(arabic),
        font=ctx.fonts.arabic_bold,
        size=font_size,
        align='right',
    )
    ctx.advance(band_height + 4 * mm)


def draw_paragraph(
    ctx: RenderContext,
    text: str | None,
    *,
    font_size: float = 10,
    bold: bool = False,
    color=TEXT_COLOR,
    indent: float = 0,
) -> int:
    font = ctx.fonts.bold if bold else ctx.fonts.regular
    lines = wrap_text(text, ctx.content_width - indent, font, font_size)
    step = line_height(font_size)
    for line in lines:
        ctx.ensure_space(step)
        ctx.draw_lines([line], ctx.left + indent, ctx.cursor_y, font=font, size=font_size, color=color)
        ctx.advance(step)
    return len(lines)
