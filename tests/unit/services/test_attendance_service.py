"""출석(체크인) 서비스 단위 테스트

검증 순서: 방식 -> 회의 -> 권한 -> 참여자 -> 중복
"""

from unittest.mock import patch
from uuid import uuid4

import pytest

from toolbox.core.realtime import PENDING_CHANGES_KEY
from toolbox.models.meeting import Meeting
from toolbox.models.profile import Profile
from toolbox.schemas.attendance import CheckInRequest
from toolbox.services.attendance_service import AttendanceService


async def test_check_in_self(db_session, test_meeting: Meeting, test_user2: Profile):
    """본인 체크인 (user_id 생략)"""
    service = AttendanceService(db_session)

    result = await service.check_in(
        test_meeting.id,
        CheckInRequest(
            check_in_method="qr_code",
            location_lat=-6.2,
            location_lng=106.8,
            device_info="Android",
        ),
        test_user2.id,
    )

    assert result.user_id == test_user2.id
    assert result.meeting_id == test_meeting.id
    assert result.check_in_method == "qr_code"
    assert result.location_lat == -6.2
    assert result.device_info == "Android"
    assert result.user.name == test_user2.name

    changes = db_session.info[PENDING_CHANGES_KEY]
    assert changes[-1]["table"] == "meeting_attendance"
    assert changes[-1]["record"]["meeting_id"] == test_meeting.id


async def test_check_in_records_metric(db_session, test_meeting: Meeting, test_user2: Profile):
    service = AttendanceService(db_session)

    with patch("toolbox.services.attendance_service.get_toolbox_metrics") as mock_metrics:
        await service.check_in(test_meeting.id, CheckInRequest(), test_user2.id)

    mock_metrics.return_value.check_ins_total.add.assert_called_once_with(1, {"method": "manual"})


async def test_creator_checks_in_other_user(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    """작성자는 다른 참여자를 체크인할 수 있음"""
    service = AttendanceService(db_session)

    result = await service.check_in(
        test_meeting.id, CheckInRequest(user_id=test_user2.id), test_user.id
    )

    assert result.user_id == test_user2.id


async def test_check_in_other_user_forbidden(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    service = AttendanceService(db_session)

    with pytest.raises(ValueError, match="CHECK_IN_PERMISSION_DENIED"):
        await service.check_in(test_meeting.id, CheckInRequest(user_id=test_user.id), test_user2.id)


async def test_check_in_not_participant(db_session, test_meeting: Meeting, admin_user: Profile):
    """참여자가 아니면 체크인 불가 (admin 포함)"""
    service = AttendanceService(db_session)

    with pytest.raises(ValueError, match="NOT_A_PARTICIPANT"):
        await service.check_in(test_meeting.id, CheckInRequest(), admin_user.id)


async def test_check_in_twice(db_session, test_meeting: Meeting, test_user2: Profile):
    service = AttendanceService(db_session)
    await service.check_in(test_meeting.id, CheckInRequest(), test_user2.id)

    with pytest.raises(ValueError, match="ALREADY_CHECKED_IN"):
        await service.check_in(test_meeting.id, CheckInRequest(), test_user2.id)


async def test_check_in_invalid_method_checked_first(db_session, test_user: Profile):
    """방식 검증이 회의 조회보다 먼저"""
    service = AttendanceService(db_session)

    with pytest.raises(ValueError, match="INVALID_CHECK_IN_METHOD"):
        await service.check_in(uuid4(), CheckInRequest(check_in_method="nfc"), test_user.id)


async def test_check_in_meeting_not_found(db_session, test_user: Profile):
    service = AttendanceService(db_session)

    with pytest.raises(ValueError, match="MEETING_NOT_FOUND"):
        await service.check_in(uuid4(), CheckInRequest(), test_user.id)


async def test_list_attendance(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    service = AttendanceService(db_session)
    await service.check_in(test_meeting.id, CheckInRequest(), test_user2.id)
    await service.check_in(test_meeting.id, CheckInRequest(check_in_method="auto"), test_user.id)

    result = await service.list_attendance(test_meeting.id)

    assert result.meeting.id == test_meeting.id
    assert result.meeting.title == "Rapat Koordinasi"
    assert [a.user_id for a in result.attendance] == [test_user2.id, test_user.id]


async def test_list_attendance_meeting_not_found(db_session):
    service = AttendanceService(db_session)

    with pytest.raises(ValueError, match="MEETING_NOT_FOUND"):
        await service.list_attendance(uuid4())
