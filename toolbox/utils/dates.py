"""날짜/시간 유틸리티"""

from datetime import datetime, timezone

_ID_WEEKDAYS = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
_ID_MONTHS = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime | None) -> datetime | None:
    """timezone 정보가 없는 값은 UTC로 간주

    SQLite 드라이버는 DateTime(timezone=True) 컬럼도 naive 값으로 돌려줍니다.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_indonesian_datetime(value: datetime) -> str:
    """인도네시아어 날짜 표기 (예: Senin, 5 Mei 2025 09.30)"""
    value = ensure_aware(value)
    weekday = _ID_WEEKDAYS[value.weekday()]
    month = _ID_MONTHS[value.month - 1]
    return f"{weekday}, {value.day} {month} {value.year} {value:%H.%M}"


def format_duration(minutes: int) -> str:
    """회의 시간 표기 (예: 1 jam 30 menit)"""
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours} jam {mins} menit"
    return f"{mins} menit"
