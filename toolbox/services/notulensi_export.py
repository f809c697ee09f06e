"""회의록 인쇄용 HTML 생성

브라우저에서 인쇄/PDF 저장을 할 수 있는 단일 HTML 문서를 만듭니다.
사용자가 입력한 모든 텍스트는 escape 처리합니다.
"""

import re
from html import escape
from string import Template

from toolbox.models.notulensi import ActionItemStatus, Notulensi
from toolbox.utils.dates import ensure_aware, format_duration, format_indonesian_datetime, utcnow

_MEETING_TYPE_LABELS = {"onsite": "Onsite", "virtual": "Virtual", "hybrid": "Hybrid"}

_DOCUMENT = Template(
    """<!DOCTYPE html>
<html lang="id">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Notulensi - $title</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; padding: 20px; font-size: 18px; }
    @page { size: A4 portrait; margin: 20mm 15mm 25mm 15mm; }
    .header { text-align: center; margin-bottom: 20px; padding-bottom: 15px; border-bottom: 2px solid #e5e7eb; }
    .header h1 { color: #1f2937; font-size: 32px; margin-bottom: 8px; }
    .header .subtitle { color: #6b7280; font-size: 18px; }
    .meeting-info { background: #f9fafb; padding: 15px; border-radius: 6px; margin-bottom: 18px; border-left: 4px solid #3b82f6; }
    .info-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 12px; }
    .info-label { font-weight: 600; color: #374151; font-size: 16px; }
    .info-value { color: #6b7280; font-size: 16px; }
    .content-section { margin-bottom: 18px; page-break-inside: avoid; }
    .content-section h3 { color: #2563eb; margin-bottom: 12px; font-size: 22px; border-bottom: 1px solid #e5e7eb; padding-bottom: 6px; }
    .content { padding: 15px 18px; border: 1px solid #e5e7eb; border-radius: 6px; white-space: pre-wrap; font-size: 16px; }
    .badge { padding: 2px 6px; border-radius: 4px; font-size: 11px; font-weight: 500; }
    .badge-deadline { background: #fecaca; color: #991b1b; }
    .badge-priority { background: #e0e7ff; color: #3730a3; }
    .badge-pending { background: #fef3c7; color: #92400e; }
    .badge-done { background: #d1fae5; color: #065f46; }
    .signature-section { margin-top: 25px; display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 30px; }
    .signature { text-align: center; }
    .signature-label { font-weight: 600; font-size: 16px; }
    .signature-line { border-bottom: 1px solid #000; margin: 150px 15px 15px 15px; }
    .signature-name { font-size: 15px; color: #6b7280; }
    .signature-date { font-size: 14px; color: #6b7280; margin-top: 8px; }
    .footer { margin-top: 30px; padding-top: 15px; border-top: 1px solid #e5e7eb; text-align: center; color: #6b7280; font-size: 11px; }
    @media print { .no-print { display: none; } }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>NOTULENSI RAPAT</h1>
      <div class="subtitle">Dokumen Resmi Hasil Rapat</div>
    </div>
    <div class="meeting-info">
      <h2>Informasi Rapat</h2>
      <div class="info-grid">
        <div><div class="info-label">Judul Rapat</div><div class="info-value">$title</div></div>
        <div><div class="info-label">Tanggal &amp; Waktu</div><div class="info-value">$date_time</div></div>
        <div><div class="info-label">Durasi</div><div class="info-value">$duration</div></div>
        <div><div class="info-label">Lokasi</div><div class="info-value">$location</div></div>
        <div><div class="info-label">Jenis Rapat</div><div class="info-value">$meeting_type</div></div>
        <div><div class="info-label">Penyelenggara</div><div class="info-value">$organizer</div></div>
      </div>
    </div>
$agenda_section
    <div class="content-section">
      <h3>Isi Notulensi</h3>
      <div class="content">$content</div>
    </div>
$decisions_section
$action_items_section
$next_meeting_section
    <div class="signature-section">
      <div class="signature">
        <div class="signature-label">Dibuat oleh</div>
        <div class="signature-line"></div>
        <div class="signature-name">$creator_name</div>
        <div class="signature-date">$created_at</div>
      </div>
      <div class="signature">
        <div class="signature-label">$approver_label</div>
        <div class="signature-line"></div>
        <div class="signature-name">$approver_name</div>
$approved_at
      </div>
    </div>
    <div class="footer">
      <p>Dokumen ini dibuat secara otomatis oleh sistem Web Toolbox PKC</p>
      <p>Dicetak pada: $printed_at</p>
    </div>
  </div>
  <div class="no-print" style="text-align: center; margin: 20px 0;">
    <button onclick="window.print()">Print</button>
  </div>
</body>
</html>
"""
)

_SECTION = Template(
    """    <div class="content-section">
      <h3>$heading</h3>
      <div class="content">$body</div>
    </div>"""
)


def _numbered(lines: list[str]) -> str:
    return "\n".join(f"{index}. {escape(line)}" for index, line in enumerate(lines, start=1))


def _action_item_line(index: int, item) -> str:
    parts = [f"{index}. {escape(item.description)}"]
    if item.assignee is not None:
        parts.append(f" (PIC: {escape(item.assignee.name)})")
    if item.due_date is not None:
        parts.append(
            f' <span class="badge badge-deadline">Deadline: '
            f"{format_indonesian_datetime(item.due_date)}</span>"
        )
    if item.priority:
        parts.append(f' <span class="badge badge-priority">Prioritas: {escape(item.priority)}</span>')
    if item.status:
        done = item.status == ActionItemStatus.COMPLETED.value
        css = "badge-done" if done else "badge-pending"
        label = "Selesai" if done else "Pending"
        parts.append(f' <span class="badge {css}">Status: {label}</span>')
    return "".join(parts)


def export_filename(notulensi: Notulensi) -> str:
    """Notulensi_<회의 제목>_<YYYY-MM-DD>.html"""
    title = notulensi.meeting.title if notulensi.meeting else "Notulensi"
    safe_title = re.sub(r"[^a-zA-Z0-9]", "_", title)
    date = ensure_aware(notulensi.created_at).date().isoformat()
    return f"Notulensi_{safe_title}_{date}.html"


def render_notulensi_html(notulensi: Notulensi) -> str:
    """회의록 HTML 문서 생성 (meeting, creator, approver, action_items 로드 필요)"""
    meeting = notulensi.meeting

    agenda_section = ""
    if meeting is not None and meeting.agenda:
        agenda_section = _SECTION.substitute(heading="Agenda Rapat", body=_numbered(meeting.agenda))

    decisions_section = ""
    if notulensi.decisions:
        decisions_section = _SECTION.substitute(
            heading="Keputusan Rapat", body=_numbered(notulensi.decisions)
        )

    action_items_section = ""
    if notulensi.action_items:
        lines = [
            _action_item_line(index, item)
            for index, item in enumerate(notulensi.action_items, start=1)
        ]
        action_items_section = _SECTION.substitute(heading="Tindak Lanjut", body="\n".join(lines))

    next_meeting_section = ""
    if notulensi.next_meeting_date is not None:
        next_meeting_section = _SECTION.substitute(
            heading="Rapat Selanjutnya",
            body=f"Dijadwalkan pada: {format_indonesian_datetime(notulensi.next_meeting_date)}",
        )

    approver = notulensi.approver
    approved_at = ""
    if approver is not None and notulensi.approved_at is not None:
        approved_at = (
            f'        <div class="signature-date">'
            f"{format_indonesian_datetime(notulensi.approved_at)}</div>"
        )

    return _DOCUMENT.substitute(
        title=escape(meeting.title) if meeting else "Meeting",
        date_time=format_indonesian_datetime(meeting.date_time) if meeting else "-",
        duration=format_duration(meeting.duration) if meeting and meeting.duration else "-",
        location=escape(meeting.location) if meeting and meeting.location else "Virtual",
        meeting_type=_MEETING_TYPE_LABELS.get(meeting.meeting_type, "Hybrid") if meeting else "-",
        organizer=escape(meeting.creator.name) if meeting and meeting.creator else "-",
        agenda_section=agenda_section,
        content=escape(notulensi.content),
        decisions_section=decisions_section,
        action_items_section=action_items_section,
        next_meeting_section=next_meeting_section,
        creator_name=escape(notulensi.creator.name) if notulensi.creator else "-",
        created_at=format_indonesian_datetime(notulensi.created_at),
        approver_label="Disetujui oleh" if approver else "Mengetahui",
        approver_name=escape(approver.name) if approver else "(...........................)",
        approved_at=approved_at,
        printed_at=format_indonesian_datetime(utcnow()),
    )
