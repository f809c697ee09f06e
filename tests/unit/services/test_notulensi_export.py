"""회의록 HTML 내보내기 테스트"""

from datetime import datetime, timezone
from types import SimpleNamespace

from toolbox.services.notulensi_export import export_filename, render_notulensi_html


def _notulensi(**overrides):
    creator = SimpleNamespace(name="Siti Rahma")
    meeting = SimpleNamespace(
        title="Rapat Koordinasi Q2",
        date_time=datetime(2025, 5, 5, 9, 30, tzinfo=timezone.utc),
        duration=90,
        location="Ruang Rapat 1",
        meeting_type="onsite",
        agenda=["Evaluasi", "Rencana"],
        creator=creator,
    )
    values = {
        "meeting": meeting,
        "content": "Rapat dibuka pukul 09.30",
        "decisions": ["Anggaran disetujui"],
        "action_items": [],
        "next_meeting_date": None,
        "creator": creator,
        "approver": None,
        "approved_at": None,
        "created_at": datetime(2025, 5, 5, 11, 0),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_export_filename_sanitizes_title():
    notulensi = _notulensi()

    assert export_filename(notulensi) == "Notulensi_Rapat_Koordinasi_Q2_2025-05-05.html"


def test_export_filename_without_meeting():
    notulensi = _notulensi(meeting=None)

    assert export_filename(notulensi) == "Notulensi_Notulensi_2025-05-05.html"


def test_render_contains_meeting_info():
    html = render_notulensi_html(_notulensi())

    assert "<title>Notulensi - Rapat Koordinasi Q2</title>" in html
    assert "Senin, 5 Mei 2025 09.30" in html
    assert "1 jam 30 menit" in html
    assert "Ruang Rapat 1" in html
    assert "Onsite" in html
    assert "1. Evaluasi\n2. Rencana" in html
    assert "Keputusan Rapat" in html
    assert "Mengetahui" in html
    assert "Tindak Lanjut" not in html
    assert "Rapat Selanjutnya" not in html


def test_render_escapes_user_text():
    """사용자 입력은 escape"""
    html = render_notulensi_html(
        _notulensi(content="<script>alert(1)</script>", decisions=["A & B"])
    )

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "1. A &amp; B" in html


def test_render_action_items_and_approval():
    item = SimpleNamespace(
        description="Kirim laporan",
        assignee=SimpleNamespace(name="Andi Pratama"),
        due_date=datetime(2025, 5, 10, 17, 0, tzinfo=timezone.utc),
        priority="high",
        status="completed",
    )
    html = render_notulensi_html(
        _notulensi(
            action_items=[item],
            approver=SimpleNamespace(name="Budi Manager"),
            approved_at=datetime(2025, 5, 6, 8, 0, tzinfo=timezone.utc),
            next_meeting_date=datetime(2025, 5, 12, 9, 0, tzinfo=timezone.utc),
        )
    )

    assert "1. Kirim laporan (PIC: Andi Pratama)" in html
    assert "Deadline: Sabtu, 10 Mei 2025 17.00" in html
    assert "Prioritas: high" in html
    assert 'class="badge badge-done">Status: Selesai' in html
    assert "Disetujui oleh" in html
    assert "Budi Manager" in html
    assert "Selasa, 6 Mei 2025 08.00" in html
    assert "Dijadwalkan pada: Senin, 12 Mei 2025 09.00" in html
