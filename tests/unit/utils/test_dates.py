"""날짜 유틸리티 단위 테스트"""

from datetime import datetime, timedelta, timezone

from toolbox.utils.dates import ensure_aware, format_duration, format_indonesian_datetime, utcnow


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None


def test_ensure_aware():
    """naive 값은 UTC로 간주"""
    naive = datetime(2025, 5, 5, 9, 30)
    aware = datetime(2025, 5, 5, 9, 30, tzinfo=timezone(timedelta(hours=7)))

    assert ensure_aware(naive) == datetime(2025, 5, 5, 9, 30, tzinfo=timezone.utc)
    assert ensure_aware(aware) is aware
    assert ensure_aware(None) is None


def test_format_indonesian_datetime():
    """요일, 일, 월, 연도, 시각 (HH.MM)"""
    value = datetime(2025, 5, 5, 9, 30, tzinfo=timezone.utc)  # 월요일

    assert format_indonesian_datetime(value) == "Senin, 5 Mei 2025 09.30"


def test_format_indonesian_datetime_sunday():
    value = datetime(2025, 12, 28, 14, 5, tzinfo=timezone.utc)  # 일요일

    assert format_indonesian_datetime(value) == "Minggu, 28 Desember 2025 14.05"


def test_format_duration():
    assert format_duration(45) == "45 menit"
    assert format_duration(60) == "1 jam 0 menit"
    assert format_duration(90) == "1 jam 30 menit"
