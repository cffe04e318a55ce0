import pytest

from src.school_attendance.school_attendance.attendance.qr import decode_qr_image, render_qr_png


def test_render_qr_png_returns_png_bytes():
    png = render_qr_png("eyJjb3Vyc2VfaWQiOjF9")

    assert png.startswith(b"\x89PNG\r\n\x1a\n")


def test_decode_reads_back_rendered_token():
    pytest.importorskip("pyzbar.pyzbar")

    assert decode_qr_image(render_qr_png("eyJjb3Vyc2VfaWQiOjF9")) == "eyJjb3Vyc2VfaWQiOjF9"
