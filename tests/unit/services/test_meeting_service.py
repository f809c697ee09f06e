"""회의 서비스 단위 테스트

- create_meeting: 참여자 초대, 알 수 없는 ID 무시
- list_meetings: 정렬, 필터
- update_meeting: 권한, 참여자 동기화
- delete_meeting: 하위 데이터 함께 삭제
- get_attendance_stats: 월별 집계, 반올림
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from toolbox.models.meeting import (
    Meeting,
    MeetingAttendance,
    MeetingParticipant,
    MeetingStatus,
    MeetingType,
    ParticipantStatus,
)
from toolbox.models.notulensi import ActionItem, Notulensi
from toolbox.models.profile import Profile
from toolbox.schemas.meeting import CreateMeetingRequest, UpdateMeetingRequest
from toolbox.services.meeting_service import MeetingService, attendance_rate


# ===== attendance_rate 테스트 =====


def test_attendance_rate_rounding():
    """0.5는 올림"""
    assert attendance_rate(1, 8) == 13  # 12.5
    assert attendance_rate(2, 3) == 67
    assert attendance_rate(1, 3) == 33
    assert attendance_rate(5, 5) == 100


def test_attendance_rate_no_participants():
    assert attendance_rate(3, 0) == 0


# ===== create_meeting 테스트 =====


async def test_create_meeting_success(
    db_session, test_user: Profile, test_user2: Profile, manager_user: Profile
):
    """회의 생성 + 참여자 invited 상태로 추가"""
    service = MeetingService(db_session)
    when = datetime.now(timezone.utc) + timedelta(days=2)

    result = await service.create_meeting(
        CreateMeetingRequest(
            title="Rapat Anggaran",
            date_time=when,
            duration=60,
            meeting_type=MeetingType.HYBRID,
            meeting_link="https://meet.example.com/abc",
            agenda=["Anggaran Q3"],
            participant_ids=[test_user2.id, manager_user.id],
        ),
        test_user.id,
    )

    assert result.title == "Rapat Anggaran"
    assert result.status == MeetingStatus.SCHEDULED.value
    assert result.meeting_type == "hybrid"
    assert result.agenda == ["Anggaran Q3"]
    assert result.created_by == test_user.id
    assert result.creator.name == test_user.name
    assert {p.user_id for p in result.participants} == {test_user2.id, manager_user.id}
    assert all(p.status == ParticipantStatus.INVITED.value for p in result.participants)
    assert result.attendance == []


async def test_create_meeting_skips_unknown_participants(
    db_session, test_user: Profile, test_user2: Profile
):
    """존재하지 않는 사용자 ID는 건너뜀"""
    service = MeetingService(db_session)

    result = await service.create_meeting(
        CreateMeetingRequest(
            title="Rapat",
            date_time=datetime.now(timezone.utc),
            duration=30,
            participant_ids=[test_user2.id, uuid4(), test_user2.id],
        ),
        test_user.id,
    )

    assert [p.user_id for p in result.participants] == [test_user2.id]


# ===== list_meetings 테스트 =====


async def _create_meeting(db_session, creator: Profile, title: str, days: int, **kwargs) -> Meeting:
    meeting = Meeting(
        title=title,
        date_time=datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc) + timedelta(days=days),
        duration=60,
        created_by=creator.id,
        **kwargs,
    )
    db_session.add(meeting)
    await db_session.commit()
    return meeting


async def test_list_meetings_sorted_by_date(db_session, test_user: Profile):
    """일시 오름차순"""
    await _create_meeting(db_session, test_user, "Ketiga", 3)
    await _create_meeting(db_session, test_user, "Pertama", 1)
    await _create_meeting(db_session, test_user, "Kedua", 2)
    service = MeetingService(db_session)

    result = await service.list_meetings()

    assert [m.title for m in result.data] == ["Pertama", "Kedua", "Ketiga"]
    assert result.pagination.total == 3


async def test_list_meetings_filters(db_session, test_user: Profile, manager_user: Profile):
    await _create_meeting(db_session, test_user, "Daring", 1, meeting_type="virtual")
    await _create_meeting(
        db_session, manager_user, "Selesai", 2, status=MeetingStatus.COMPLETED.value
    )
    await _create_meeting(db_session, test_user, "Evaluasi proyek", 10, description="Sprint review")
    service = MeetingService(db_session)

    virtual = await service.list_meetings(meeting_type="virtual")
    completed = await service.list_meetings(status="completed")
    by_creator = await service.list_meetings(created_by=manager_user.id)
    searched = await service.list_meetings(search="sprint")
    ranged = await service.list_meetings(
        date_from=datetime(2025, 6, 2, tzinfo=timezone.utc),
        date_to=datetime(2025, 6, 5, tzinfo=timezone.utc),
    )

    assert [m.title for m in virtual.data] == ["Daring"]
    assert [m.title for m in completed.data] == ["Selesai"]
    assert [m.title for m in by_creator.data] == ["Selesai"]
    assert [m.title for m in searched.data] == ["Evaluasi proyek"]
    assert [m.title for m in ranged.data] == ["Daring", "Selesai"]


# ===== get_meeting 테스트 =====


async def test_get_meeting_detail(db_session, test_meeting: Meeting, test_user: Profile):
    db_session.add(
        MeetingAttendance(meeting_id=test_meeting.id, user_id=test_user.id, check_in_method="manual")
    )
    await db_session.commit()
    service = MeetingService(db_session)

    result = await service.get_meeting(test_meeting.id)

    assert result.id == test_meeting.id
    assert len(result.participants) == 2
    assert [a.user_id for a in result.attendance] == [test_user.id]
    assert result.attendance[0].user.name == test_user.name


async def test_get_meeting_not_found(db_session):
    service = MeetingService(db_session)

    with pytest.raises(ValueError, match="MEETING_NOT_FOUND"):
        await service.get_meeting(uuid4())


# ===== update_meeting 테스트 =====


async def test_update_meeting_by_creator(db_session, test_meeting: Meeting, test_user: Profile):
    service = MeetingService(db_session)

    result = await service.update_meeting(
        test_meeting.id,
        UpdateMeetingRequest(status=MeetingStatus.IN_PROGRESS, location="Ruang 2"),
        test_user.id,
    )

    assert result.status == "in-progress"
    assert result.location == "Ruang 2"
    assert result.title == "Rapat Koordinasi"


async def test_update_meeting_by_admin(db_session, test_meeting: Meeting, admin_user: Profile):
    service = MeetingService(db_session)

    result = await service.update_meeting(
        test_meeting.id, UpdateMeetingRequest(duration=120), admin_user.id
    )

    assert result.duration == 120


async def test_update_meeting_forbidden(db_session, test_meeting: Meeting, test_user2: Profile):
    """참여자라도 작성자/관리자가 아니면 수정 불가"""
    service = MeetingService(db_session)

    with pytest.raises(ValueError, match="PERMISSION_DENIED"):
        await service.update_meeting(
            test_meeting.id, UpdateMeetingRequest(title="X"), test_user2.id
        )


async def test_update_meeting_syncs_participants(
    db_session,
    test_meeting: Meeting,
    test_user: Profile,
    test_user2: Profile,
    manager_user: Profile,
):
    """participant_ids로 교체 (유지되는 참여자는 상태 보존)"""
    service = MeetingService(db_session)

    result = await service.update_meeting(
        test_meeting.id,
        UpdateMeetingRequest(participant_ids=[test_user.id, manager_user.id]),
        test_user.id,
    )

    statuses = {p.user_id: p.status for p in result.participants}
    assert statuses == {
        test_user.id: ParticipantStatus.ACCEPTED.value,
        manager_user.id: ParticipantStatus.INVITED.value,
    }
    remaining = await db_session.execute(
        select(MeetingParticipant).where(
            MeetingParticipant.meeting_id == test_meeting.id,
            MeetingParticipant.user_id == test_user2.id,
        )
    )
    assert remaining.scalar_one_or_none() is None


async def test_update_meeting_without_participant_ids_keeps_participants(
    db_session, test_meeting: Meeting, test_user: Profile
):
    service = MeetingService(db_session)

    result = await service.update_meeting(
        test_meeting.id, UpdateMeetingRequest(title="Rapat Baru"), test_user.id
    )

    assert len(result.participants) == 2


# ===== delete_meeting 테스트 =====


async def test_delete_meeting_cascades(db_session, test_meeting: Meeting, test_user: Profile):
    """참여자, 출석, 회의록, 액션 아이템 함께 삭제"""
    db_session.add(
        MeetingAttendance(meeting_id=test_meeting.id, user_id=test_user.id, check_in_method="manual")
    )
    notulensi = Notulensi(meeting_id=test_meeting.id, content="Isi", created_by=test_user.id)
    db_session.add(notulensi)
    await db_session.flush()
    db_session.add(ActionItem(notulensi_id=notulensi.id, description="Kirim laporan"))
    await db_session.commit()
    service = MeetingService(db_session)

    title = await service.delete_meeting(test_meeting.id, test_user.id)

    assert title == "Rapat Koordinasi"
    for model in (Meeting, MeetingParticipant, MeetingAttendance, Notulensi, ActionItem):
        count = (await db_session.execute(select(func.count()).select_from(model))).scalar()
        assert count == 0


async def test_delete_meeting_forbidden(db_session, test_meeting: Meeting, test_user2: Profile):
    service = MeetingService(db_session)

    with pytest.raises(ValueError, match="PERMISSION_DENIED"):
        await service.delete_meeting(test_meeting.id, test_user2.id)


async def test_delete_meeting_not_found(db_session, test_user: Profile):
    service = MeetingService(db_session)

    with pytest.raises(ValueError, match="MEETING_NOT_FOUND"):
        await service.delete_meeting(uuid4(), test_user.id)


# ===== get_attendance_stats 테스트 =====


async def test_get_attendance_stats(
    db_session, test_user: Profile, test_user2: Profile, manager_user: Profile
):
    """완료된 회의만, 참여자가 있는 회의만 집계"""
    march = Meeting(
        title="Maret",
        date_time=datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc),
        duration=60,
        status=MeetingStatus.COMPLETED.value,
        created_by=test_user.id,
    )
    no_participants = Meeting(
        title="Kosong",
        date_time=datetime(2025, 3, 12, 9, 0, tzinfo=timezone.utc),
        duration=60,
        status=MeetingStatus.COMPLETED.value,
        created_by=test_user.id,
    )
    scheduled = Meeting(
        title="Belum",
        date_time=datetime(2025, 3, 20, 9, 0, tzinfo=timezone.utc),
        duration=60,
        created_by=test_user.id,
    )
    db_session.add_all([march, no_participants, scheduled])
    await db_session.flush()

    for user, status in (
        (test_user, ParticipantStatus.ACCEPTED),
        (test_user2, ParticipantStatus.ACCEPTED),
        (manager_user, ParticipantStatus.DECLINED),
    ):
        db_session.add(MeetingParticipant(meeting_id=march.id, user_id=user.id, status=status.value))
        db_session.add(MeetingParticipant(meeting_id=scheduled.id, user_id=user.id, status=status.value))
    db_session.add(MeetingAttendance(meeting_id=march.id, user_id=test_user.id, check_in_method="qr_code"))
    await db_session.commit()
    service = MeetingService(db_session)

    stats = await service.get_attendance_stats(2025)

    assert len(stats) == 12
    assert [s.month for s in stats][:3] == ["Jan", "Feb", "Mar"]
    assert stats[2].total_meetings == 1
    assert stats[2].total_participants == 2
    assert stats[2].total_attendees == 1
    assert stats[2].attendance_rate == 50
    assert stats[0].total_meetings == 0
    assert stats[0].attendance_rate == 0


async def test_get_attendance_stats_other_year(db_session, test_user: Profile):
    service = MeetingService(db_session)

    stats = await service.get_attendance_stats(1999)

    assert all(s.total_meetings == 0 for s in stats)


async def test_get_attendance_stats_year_boundaries(
    db_session, test_user: Profile, test_user2: Profile
):
    """12월 31일 마지막 회의는 포함, 다음 해 1월 1일 회의는 제외"""
    last = Meeting(
        title="Akhir tahun",
        date_time=datetime(2025, 12, 31, 23, 30, tzinfo=timezone.utc),
        duration=30,
        status=MeetingStatus.COMPLETED.value,
        created_by=test_user.id,
    )
    next_year = Meeting(
        title="Tahun baru",
        date_time=datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc),
        duration=30,
        status=MeetingStatus.COMPLETED.value,
        created_by=test_user.id,
    )
    db_session.add_all([last, next_year])
    await db_session.flush()
    for meeting in (last, next_year):
        db_session.add(
            MeetingParticipant(
                meeting_id=meeting.id,
                user_id=test_user2.id,
                status=ParticipantStatus.ACCEPTED.value,
            )
        )
    await db_session.commit()
    service = MeetingService(db_session)

    stats = await service.get_attendance_stats(2025)

    assert stats[11].total_meetings == 1
    assert stats[0].total_meetings == 0


async def test_get_attendance_stats_max_year(db_session):
    """허용 범위의 마지막 연도(9999)도 계산 가능"""
    service = MeetingService(db_session)

    stats = await service.get_attendance_stats(9999)

    assert len(stats) == 12
    assert all(s.attendance_rate == 0 for s in stats)
