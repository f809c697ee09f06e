"""참여자 서비스 단위 테스트"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from toolbox.models.meeting import Meeting, MeetingParticipant, ParticipantStatus
from toolbox.models.profile import Profile
from toolbox.services.participant_service import ParticipantService


# ===== list_participants 테스트 =====


async def test_list_participants(db_session, test_meeting: Meeting, test_user: Profile):
    service = ParticipantService(db_session)

    result = await service.list_participants(test_meeting.id)

    assert len(result) == 2
    assert test_user.id in {p.user_id for p in result}
    assert all(p.user is not None for p in result)


async def test_list_participants_meeting_not_found(db_session):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="MEETING_NOT_FOUND"):
        await service.list_participants(uuid4())


# ===== add_participants 테스트 =====


async def test_add_participants_by_creator(
    db_session, test_meeting: Meeting, test_user: Profile, manager_user: Profile
):
    service = ParticipantService(db_session)

    result = await service.add_participants(
        test_meeting.id, [manager_user.id], "invited", test_user.id
    )

    assert len(result) == 1
    assert result[0].user_id == manager_user.id
    assert result[0].status == "invited"
    assert result[0].user.name == manager_user.name


async def test_add_participants_upsert_overwrites_status(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    """이미 있는 참여자는 상태만 갱신 (중복 행 없음)"""
    service = ParticipantService(db_session)

    result = await service.add_participants(
        test_meeting.id, [test_user2.id], "tentative", test_user.id
    )

    assert result[0].status == "tentative"
    rows = await db_session.execute(
        select(MeetingParticipant).where(
            MeetingParticipant.meeting_id == test_meeting.id,
            MeetingParticipant.user_id == test_user2.id,
        )
    )
    assert len(rows.scalars().all()) == 1


async def test_add_participants_skips_unknown_ids(
    db_session, test_meeting: Meeting, test_user: Profile, admin_user: Profile
):
    service = ParticipantService(db_session)

    result = await service.add_participants(
        test_meeting.id, [uuid4(), admin_user.id], "accepted", test_user.id
    )

    assert [p.user_id for p in result] == [admin_user.id]


async def test_add_participants_by_manager(
    db_session, test_meeting: Meeting, manager_user: Profile, admin_user: Profile
):
    service = ParticipantService(db_session)

    result = await service.add_participants(
        test_meeting.id, [admin_user.id], "invited", manager_user.id
    )

    assert len(result) == 1


async def test_add_participants_forbidden(
    db_session, test_meeting: Meeting, test_user2: Profile, admin_user: Profile
):
    """일반 참여자는 다른 사람을 추가할 수 없음"""
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="PERMISSION_DENIED"):
        await service.add_participants(test_meeting.id, [admin_user.id], "invited", test_user2.id)


async def test_add_participants_empty(db_session, test_meeting: Meeting, test_user: Profile):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="USER_IDS_REQUIRED"):
        await service.add_participants(test_meeting.id, [], "invited", test_user.id)


async def test_add_participants_invalid_status(
    db_session, test_meeting: Meeting, test_user: Profile, admin_user: Profile
):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="INVALID_PARTICIPANT_STATUS"):
        await service.add_participants(test_meeting.id, [admin_user.id], "maybe", test_user.id)


# ===== update_participant_status 테스트 =====


async def test_participant_updates_own_status(
    db_session, test_meeting: Meeting, test_user2: Profile
):
    """참여자 본인은 자기 응답 상태를 바꿀 수 있음"""
    service = ParticipantService(db_session)

    result = await service.update_participant_status(
        test_meeting.id, test_user2.id, ParticipantStatus.DECLINED.value, test_user2.id
    )

    assert result.status == "declined"


async def test_update_other_participant_forbidden(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    """작성자가 아닌 참여자는 다른 참여자 상태 변경 불가"""
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="PERMISSION_DENIED"):
        await service.update_participant_status(
            test_meeting.id, test_user.id, "declined", test_user2.id
        )


async def test_update_participant_not_found(
    db_session, test_meeting: Meeting, test_user: Profile, admin_user: Profile
):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="PARTICIPANT_NOT_FOUND"):
        await service.update_participant_status(
            test_meeting.id, admin_user.id, "accepted", test_user.id
        )


async def test_update_participant_invalid_status(
    db_session, test_meeting: Meeting, test_user: Profile
):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="INVALID_PARTICIPANT_STATUS"):
        await service.update_participant_status(
            test_meeting.id, test_user.id, "going", test_user.id
        )


# ===== remove_participant 테스트 =====


async def test_remove_participant_by_creator(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    service = ParticipantService(db_session)

    name = await service.remove_participant(test_meeting.id, test_user2.id, test_user.id)

    assert name == test_user2.name
    remaining = await service.list_participants(test_meeting.id)
    assert [p.user_id for p in remaining] == [test_user.id]


async def test_participant_leaves_meeting(
    db_session, test_meeting: Meeting, test_user2: Profile
):
    """참여자 본인은 스스로 빠질 수 있음"""
    service = ParticipantService(db_session)

    name = await service.remove_participant(test_meeting.id, test_user2.id, test_user2.id)

    assert name == test_user2.name


async def test_remove_participant_forbidden(
    db_session, test_meeting: Meeting, test_user: Profile, test_user2: Profile
):
    service = ParticipantService(db_session)

    with pytest.raises(ValueError, match="PERMISSION_DENIED"):
        await service.remove_participant(test_meeting.id, test_user.id, test_user2.id)
