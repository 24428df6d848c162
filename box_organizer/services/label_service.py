"""
services/label_service.py
-------------------------
Printable QR labels.

Two steps:
  1. plan_labels()  - pure layout arithmetic in millimetres; every short id
                      appears exactly once, in input order, across the pages.
  2. render_pdf()   - draws each planned page with qrcode + Pillow and
                      writes a multi-page PDF.

Formats:
  a4-grid         210 x 297 mm sheet, rows x cols cells (default 5 x 4)
  brother-62x29   one small label per page, QR left / text right
  brother-62x100  one tall label per page, QR on top / text below
Labels lower than SMALL_LABEL_HEIGHT use the side-by-side layout.
"""

import io
from dataclasses import dataclass, field
from typing import Optional, Sequence

import qrcode
from PIL import Image, ImageDraw, ImageFont

from box_organizer.core.config import settings
from box_organizer.core.logging import get_logger
from box_organizer.schemas.qr_code import LabelFormat

logger = get_logger(__name__)

SMALL_LABEL_HEIGHT = 50.0
GRID_QR_WIDTH_RATIO = 0.75
GRID_QR_HEIGHT_RATIO = 0.65
GRID_QR_TOP_OFFSET = 5.0
TEXT_GAP = 3.0
DEFAULT_DPI = 150


@dataclass(frozen=True)
class LabelSpec:
    width: float  # mm
    height: float  # mm
    margin: float  # mm
    font_size: int  # pt
    grid: bool = False
    rows: int = 1
    cols: int = 1
    qr_size: float = 0.0  # mm, single-label formats only


LABEL_SPECS: dict[LabelFormat, LabelSpec] = {
    LabelFormat.a4_grid: LabelSpec(
        width=210.0, height=297.0, margin=10.0, font_size=8, grid=True, rows=5, cols=4
    ),
    LabelFormat.brother_62x29: LabelSpec(
        width=62.0, height=29.0, margin=2.0, font_size=9, qr_size=25.0
    ),
    LabelFormat.brother_62x100: LabelSpec(
        width=62.0, height=100.0, margin=5.0, font_size=12, qr_size=50.0
    ),
}


@dataclass(frozen=True)
class PlacedLabel:
    short_id: str
    qr_x: float
    qr_y: float
    qr_size: float
    text_x: float
    text_y: float
    text_centered: bool


@dataclass
class LabelPage:
    number: int
    labels: list[PlacedLabel] = field(default_factory=list)


# ── Layout ────────────────────────────────────────────────────────────────────

def _grid_labels(short_ids: Sequence[str], spec: LabelSpec, rows: int, cols: int) -> list[LabelPage]:
    cell_w = (spec.width - 2 * spec.margin) / cols
    cell_h = (spec.height - 2 * spec.margin) / rows
    qr_size = min(cell_w * GRID_QR_WIDTH_RATIO, cell_h * GRID_QR_HEIGHT_RATIO)
    per_page = rows * cols

    pages: list[LabelPage] = []
    for index, short_id in enumerate(short_ids):
        slot = index % per_page
        if slot == 0:
            pages.append(LabelPage(number=len(pages) + 1))
        row, col = divmod(slot, cols)
        cell_x = spec.margin + col * cell_w
        cell_y = spec.margin + row * cell_h
        qr_y = cell_y + GRID_QR_TOP_OFFSET
        pages[-1].labels.append(
            PlacedLabel(
                short_id=short_id,
                qr_x=cell_x + (cell_w - qr_size) / 2,
                qr_y=qr_y,
                qr_size=qr_size,
                text_x=cell_x + cell_w / 2,
                text_y=qr_y + qr_size + TEXT_GAP,
                text_centered=True,
            )
        )
    return pages


def _single_label(short_id: str, spec: LabelSpec, number: int) -> LabelPage:
    if spec.height < SMALL_LABEL_HEIGHT:
        qr_size = min(spec.qr_size, spec.height - 2 * spec.margin)
        label = PlacedLabel(
            short_id=short_id,
            qr_x=spec.margin,
            qr_y=(spec.height - qr_size) / 2,
            qr_size=qr_size,
            text_x=spec.margin + qr_size + TEXT_GAP,
            text_y=spec.height / 2,
            text_centered=False,
        )
    else:
        qr_size = min(spec.qr_size, spec.width - 2 * spec.margin)
        qr_y = spec.margin + 5
        label = PlacedLabel(
            short_id=short_id,
            qr_x=(spec.width - qr_size) / 2,
            qr_y=qr_y,
            qr_size=qr_size,
            text_x=spec.width / 2,
            text_y=qr_y + qr_size + TEXT_GAP * 2,
            text_centered=True,
        )
    return LabelPage(number=number, labels=[label])


def plan_labels(
    short_ids: Sequence[str],
    label_format: LabelFormat = LabelFormat.a4_grid,
    rows: Optional[int] = None,
    cols: Optional[int] = None,
) -> list[LabelPage]:
    """
    Lay out ``short_ids`` on pages of ``label_format``.
    ``rows`` / ``cols`` only apply to the grid format.
    """
    spec = LABEL_SPECS[label_format]
    if spec.grid:
        return _grid_labels(short_ids, spec, rows or spec.rows, cols or spec.cols)
    return [_single_label(s, spec, i + 1) for i, s in enumerate(short_ids)]


# ── Rendering ─────────────────────────────────────────────────────────────────

def _px(mm: float, dpi: int) -> int:
    return int(round(mm * dpi / 25.4))


def _load_font(size_px: int):
    """LABEL_FONT_PATH when set and loadable, else Pillow's bundled scalable font."""
    if settings.LABEL_FONT_PATH:
        try:
            return ImageFont.truetype(settings.LABEL_FONT_PATH, size_px)
        except OSError as exc:
            logger.warning("Label font not loadable", path=settings.LABEL_FONT_PATH, error=str(exc))
    return ImageFont.load_default(size=size_px)


def qr_url(short_id: str) -> str:
    return settings.QR_URL_TEMPLATE.format(short_id=short_id)


def qr_image(short_id: str, size_px: int) -> Image.Image:
    """Scannable QR image for ``short_id`` with high error correction."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=1,
    )
    qr.add_data(qr_url(short_id))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    return img.resize((size_px, size_px), Image.Resampling.NEAREST)


def render_pdf(
    pages: Sequence[LabelPage],
    label_format: LabelFormat = LabelFormat.a4_grid,
    dpi: int = DEFAULT_DPI,
) -> bytes:
    """Draw planned pages and return the PDF document bytes."""
    if not pages:
        raise ValueError("Nothing to render")

    spec = LABEL_SPECS[label_format]
    page_size = (_px(spec.width, dpi), _px(spec.height, dpi))
    font = _load_font(max(8, int(spec.font_size * dpi / 72)))

    images: list[Image.Image] = []
    for page in pages:
        img = Image.new("RGB", page_size, color="white")
        draw = ImageDraw.Draw(img)
        for label in page.labels:
            size = _px(label.qr_size, dpi)
            img.paste(qr_image(label.short_id, size), (_px(label.qr_x, dpi), _px(label.qr_y, dpi)))

            bbox = draw.textbbox((0, 0), label.short_id, font=font)
            text_w, text_h = bbox[2] - bbox[0], bbox[3] - bbox[1]
            x = _px(label.text_x, dpi)
            y = _px(label.text_y, dpi)
            if label.text_centered:
                x -= text_w // 2
            else:
                y -= text_h // 2
            draw.text((x, y), label.short_id, fill="black", font=font)
        images.append(img)

    buffer = io.BytesIO()
    images[0].save(
        buffer,
        format="PDF",
        save_all=True,
        append_images=images[1:],
        resolution=float(dpi),
    )
    return buffer.getvalue()
