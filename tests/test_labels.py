"""Label layout planning and PDF rendering."""

import pytest

from box_organizer.schemas.qr_code import LabelFormat
from box_organizer.core.config import settings
from box_organizer.services.label_service import _load_font, plan_labels, qr_url, render_pdf


def _codes(n: int) -> list[str]:
    return [f"QR-{i:06d}" for i in range(n)]


def test_grid_keeps_every_code_once_in_order() -> None:
    codes = _codes(45)
    pages = plan_labels(codes, LabelFormat.a4_grid)

    assert [len(p.labels) for p in pages] == [20, 20, 5]
    assert [p.number for p in pages] == [1, 2, 3]
    assert [label.short_id for p in pages for label in p.labels] == codes


def test_grid_cell_geometry() -> None:
    page = plan_labels(_codes(5), LabelFormat.a4_grid)[0]
    cell_w = (210 - 20) / 4
    cell_h = (297 - 20) / 5
    qr_size = min(cell_w * 0.75, cell_h * 0.65)

    first, second, fifth = page.labels[0], page.labels[1], page.labels[4]
    assert first.qr_size == pytest.approx(qr_size)
    assert first.qr_x == pytest.approx(10 + (cell_w - qr_size) / 2)
    assert first.qr_y == pytest.approx(10 + 5)
    assert second.qr_x == pytest.approx(first.qr_x + cell_w)
    # fifth label wraps to the second row
    assert fifth.qr_x == pytest.approx(first.qr_x)
    assert fifth.qr_y == pytest.approx(first.qr_y + cell_h)


def test_grid_rows_and_cols_override() -> None:
    pages = plan_labels(_codes(9), LabelFormat.a4_grid, rows=2, cols=2)
    assert [len(p.labels) for p in pages] == [4, 4, 1]


@pytest.mark.parametrize(
    "label_format,centered",
    [(LabelFormat.brother_62x29, False), (LabelFormat.brother_62x100, True)],
)
def test_single_label_formats(label_format: LabelFormat, centered: bool) -> None:
    codes = _codes(3)
    pages = plan_labels(codes, label_format)
    assert [len(p.labels) for p in pages] == [1, 1, 1]
    assert [p.labels[0].short_id for p in pages] == codes
    assert all(p.labels[0].text_centered is centered for p in pages)


def test_small_label_puts_text_beside_qr() -> None:
    label = plan_labels(["QR-ABC123"], LabelFormat.brother_62x29)[0].labels[0]
    assert label.qr_size == pytest.approx(25)
    assert label.text_x > label.qr_x + label.qr_size


def test_qr_url_uses_template() -> None:
    assert qr_url("QR-ABC123").endswith("/app/scan?code=QR-ABC123")


def test_render_pdf_produces_document() -> None:
    pages = plan_labels(_codes(3), LabelFormat.brother_62x29)
    pdf = render_pdf(pages, LabelFormat.brother_62x29, dpi=72)
    assert pdf.startswith(b"%PDF")


def test_render_nothing_is_an_error() -> None:
    with pytest.raises(ValueError):
        render_pdf([], LabelFormat.a4_grid)


def _text_height(font) -> float:
    top, bottom = font.getbbox("QR-ABC123")[1::2]
    return bottom - top


def test_default_font_scales_with_size(monkeypatch) -> None:
    monkeypatch.setattr(settings, "LABEL_FONT_PATH", None)
    # the fixed bitmap fallback is about 11 px tall whatever size is asked for
    assert _text_height(_load_font(40)) > 20
    assert _text_height(_load_font(40)) > _text_height(_load_font(12))


def test_missing_font_file_falls_back_to_sized_font(monkeypatch) -> None:
    monkeypatch.setattr(settings, "LABEL_FONT_PATH", "/nonexistent/fonts/Missing.ttf")
    assert _text_height(_load_font(40)) > 20

    pages = plan_labels(_codes(2), LabelFormat.brother_62x100)
    assert render_pdf(pages, LabelFormat.brother_62x100, dpi=72).startswith(b"%PDF")
