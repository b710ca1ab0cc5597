"""Tests for the signature pad and capture form."""

from __future__ import annotations

import base64
import io
from typing import TYPE_CHECKING

import pytest
from PIL import Image

from contractmark.errors import EmptyCanvas, MissingSignerName
from contractmark.models import SignerInfo
from contractmark.signature import SignatureCapture, SignaturePad

if TYPE_CHECKING:
    from contractmark.overlay import OverlayManager
    from contractmark.sync import HostModel


def _decode(data_url: str) -> Image.Image:
    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    return Image.open(io.BytesIO(base64.b64decode(data_url[len(prefix) :])))


def _sign(pad: SignaturePad) -> None:
    pad.begin_stroke(10, 20)
    pad.extend_stroke(100, 20)
    pad.end_stroke()


class TestSignaturePad:
    """Stroke recording and rendering."""

    def test_starts_empty(self) -> None:
        pad = SignaturePad()
        assert not pad.has_content
        assert (pad.width, pad.height) == (600, 200)

    @pytest.mark.parametrize(("given", "expected"), [(0, 1), (5, 5), (15, 10)])
    def test_pen_width_is_clamped(self, given: int, expected: int) -> None:
        pad = SignaturePad(pen_width=given)
        assert pad.pen_width == expected

    def test_unknown_pen_color_is_rejected(self) -> None:
        pad = SignaturePad()
        with pytest.raises(ValueError):
            pad.pen_color = "not-a-colour"

    def test_begin_stroke_marks_content(self) -> None:
        began: list[int] = []
        pad = SignaturePad(on_begin=lambda: began.append(1))
        _sign(pad)
        _sign(pad)
        assert pad.has_content
        assert began == [1]

    def test_extend_without_begin_is_ignored(self) -> None:
        pad = SignaturePad()
        pad.extend_stroke(5, 5)
        assert pad.strokes == []

    def test_extend_after_end_is_ignored(self) -> None:
        pad = SignaturePad()
        _sign(pad)
        pad.extend_stroke(300, 300)
        assert pad.strokes[0].points == [(10, 20), (100, 20)]

    def test_pen_change_applies_to_later_strokes(self) -> None:
        pad = SignaturePad(pen_color="#000000", pen_width=2)
        _sign(pad)
        pad.pen_color = "#ff0000"
        pad.pen_width = 6
        _sign(pad)
        assert [(s.color, s.width) for s in pad.strokes] == [
            ("#000000", 2),
            ("#ff0000", 6),
        ]

    def test_clear_removes_strokes(self) -> None:
        pad = SignaturePad()
        _sign(pad)
        pad.clear()
        assert not pad.has_content
        assert pad.to_svg() == ""

    def test_empty_pad_has_no_image(self) -> None:
        with pytest.raises(EmptyCanvas):
            SignaturePad().to_image()

    def test_image_is_transparent_png_of_canvas_size(self) -> None:
        pad = SignaturePad(300, 100, pen_width=4)
        _sign(pad)
        image = _decode(pad.to_image())
        assert image.format == "PNG"
        assert image.size == (300, 100)
        rgba = image.convert("RGBA")
        assert rgba.getpixel((50, 20))[3] == 255
        assert rgba.getpixel((250, 80))[3] == 0

    def test_single_point_stroke_renders_dot(self) -> None:
        pad = SignaturePad(pen_width=6)
        pad.begin_stroke(30, 30)
        pad.end_stroke()
        rgba = _decode(pad.to_image()).convert("RGBA")
        assert rgba.getpixel((30, 30))[3] == 255

    def test_svg_preview(self) -> None:
        pad = SignaturePad(pen_color="#123456")
        _sign(pad)
        pad.begin_stroke(5, 5)
        svg = pad.to_svg()
        assert '<polyline points="10.0,20.0 100.0,20.0"' in svg
        assert 'stroke="#123456"' in svg
        assert "<circle" in svg


class TestSignatureCapture:
    """Signer form validation and hand-off."""

    def test_missing_name_is_refused(self) -> None:
        pad = SignaturePad()
        _sign(pad)
        saved: list[str] = []
        capture = SignatureCapture(pad, on_save=lambda img, s: saved.append(img))
        capture.update_signer("name", "   ")
        with pytest.raises(MissingSignerName):
            capture.save()
        assert saved == []

    def test_empty_canvas_is_refused(self) -> None:
        capture = SignatureCapture(SignaturePad(), on_save=lambda img, s: None)
        capture.update_signer("name", "Ayşe")
        with pytest.raises(EmptyCanvas):
            capture.preview()
        assert not capture.show_preview

    def test_can_submit_tracks_name_and_strokes(self) -> None:
        pad = SignaturePad()
        capture = SignatureCapture(pad, on_save=lambda img, s: None)
        assert not capture.can_submit
        capture.update_signer("name", "Ayşe")
        assert not capture.can_submit
        _sign(pad)
        assert capture.can_submit

    def test_unknown_field_is_rejected(self) -> None:
        capture = SignatureCapture(SignaturePad(), on_save=lambda img, s: None)
        with pytest.raises(ValueError, match="unknown signer field"):
            capture.update_signer("email", "x")

    def test_save_hands_image_and_signer_copy(self) -> None:
        pad = SignaturePad()
        _sign(pad)
        saved: list[tuple[str, SignerInfo]] = []
        capture = SignatureCapture(
            pad, on_save=lambda img, s: saved.append((img, s))
        )
        capture.update_signer("name", "Ayşe Yılmaz")
        capture.update_signer("tc_no", "12345678901")

        image = capture.save()

        [(saved_image, signer)] = saved
        assert saved_image == image
        assert signer.name == "Ayşe Yılmaz"
        assert signer.tc_no == "12345678901"
        assert signer is not capture.signer

    def test_preview_shows_image(self) -> None:
        pad = SignaturePad()
        _sign(pad)
        capture = SignatureCapture(pad, on_save=lambda img, s: None)
        capture.update_signer("name", "Ayşe")
        assert capture.preview().startswith("data:image/png;base64,")
        assert capture.show_preview
        capture.clear()
        assert not capture.show_preview
        assert not pad.has_content

    def test_pen_settings_reach_pad(self) -> None:
        pad = SignaturePad()
        capture = SignatureCapture(pad, on_save=lambda img, s: None)
        capture.set_pen_color("#0000ff")
        capture.set_pen_width(12)
        assert (pad.pen_color, pad.pen_width) == ("#0000ff", 10)

    def test_close_calls_back(self) -> None:
        closed: list[int] = []
        capture = SignatureCapture(
            SignaturePad(),
            on_save=lambda img, s: None,
            on_close=lambda: closed.append(1),
        )
        capture.close()
        assert closed == [1]

    def test_save_commits_pending_overlay(
        self, manager: OverlayManager, host: HostModel
    ) -> None:
        overlay = manager.create()
        pad = SignaturePad()
        _sign(pad)
        capture = SignatureCapture(pad, on_save=manager.commit)
        capture.update_signer("name", "Ayşe Yılmaz")
        capture.update_signer("company", "Örnek A.Ş.")

        capture.save()

        assert not overlay.is_pending
        assert overlay.signer.company == "Örnek A.Ş."
        assert [s.signer.name for s in host.signatures] == ["Ayşe Yılmaz"]
