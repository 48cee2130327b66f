"""Aggregation tests for user, team and organization-wide statistics."""

from datetime import date

from crm_attendance.api.v1.attendance import service, stats
from crm_attendance.api.v1.attendance.schemas import AttendanceMarkRequest

MAY_6 = date(2024, 5, 6)


async def _mark(db, user, admin, day: str, **fields):
    payload = AttendanceMarkRequest.model_validate({"memberId": str(user.id), "date": day, **fields})
    return await service.mark_attendance(db, payload, admin.id)


async def _full_day(db, user, admin, day: str = "2024-05-06"):
    return await _mark(db, user, admin, day, checkIn=f"{day}T09:00:00", checkOut=f"{day}T18:00:00")


async def _half_day(db, user, admin, day: str = "2024-05-06"):
    return await _mark(db, user, admin, day, checkIn=f"{day}T09:00:00", checkOut=f"{day}T13:30:00")


async def test_user_stats_over_range(db_session, member, admin) -> None:
    await _full_day(db_session, member, admin, "2024-05-06")
    await _half_day(db_session, member, admin, "2024-05-07")
    await _mark(db_session, member, admin, "2024-05-08", status="leave")
    await _full_day(db_session, member, admin, "2024-06-01")  # outside range

    result = await stats.get_user_stats(db_session, member.id, date(2024, 5, 1), date(2024, 5, 31))

    assert result.total_days == 3
    assert result.present_days == 1
    assert result.half_days == 1
    assert result.leave_days == 1
    assert result.absent_days == 0
    assert result.total_work_hours == 13.5
    # zero-hour leave day counts toward the average
    assert result.avg_work_hours == 4.5


async def test_user_stats_range_is_inclusive(db_session, member, admin) -> None:
    await _full_day(db_session, member, admin, "2024-05-01")
    await _full_day(db_session, member, admin, "2024-05-31")

    result = await stats.get_user_stats(db_session, member.id, date(2024, 5, 1), date(2024, 5, 31))
    assert result.total_days == 2


async def test_user_stats_empty_is_zeroed(db_session, member) -> None:
    result = await stats.get_user_stats(db_session, member.id, date(2024, 5, 1), date(2024, 5, 31))
    assert result.model_dump() == {
        "total_days": 0,
        "present_days": 0,
        "half_days": 0,
        "absent_days": 0,
        "leave_days": 0,
        "total_work_hours": 0,
        "avg_work_hours": 0,
    }


async def test_team_daily_stats_partition_records(db_session, make_user, sales, admin) -> None:
    users = [
        await make_user(f"Rep {i}", f"rep{i}@example.com", team=sales) for i in range(5)
    ]
    await _full_day(db_session, users[0], admin)
    await _full_day(db_session, users[1], admin)
    await _half_day(db_session, users[2], admin)
    await _mark(db_session, users[3], admin, "2024-05-06", status="leave")
    await _mark(db_session, users[4], admin, "2024-05-06", notes="no show")
    await _full_day(db_session, users[0], admin, "2024-05-07")  # other day

    breakdown = await stats.get_team_daily_stats(db_session, sales.id, MAY_6)
    by_status = {row.status: row for row in breakdown}

    assert sum(row.count for row in breakdown) == 5
    assert by_status["present"].count == 2
    assert by_status["present"].total_work_hours == 18.0
    assert by_status["half-day"].count == 1
    assert by_status["half-day"].total_work_hours == 4.5
    assert by_status["leave"].count == 1
    assert by_status["absent"].count == 1


async def test_team_daily_stats_omit_missing_statuses(db_session, member, sales, admin) -> None:
    await _full_day(db_session, member, admin)

    breakdown = await stats.get_team_daily_stats(db_session, sales.id, MAY_6)
    assert [row.status for row in breakdown] == ["present"]


async def test_all_teams_summary_lists_every_team(db_session, make_team, member, sales, admin) -> None:
    support = await make_team("Support")
    await _full_day(db_session, member, admin)

    summary = await stats.get_all_teams_summary(db_session, MAY_6)

    assert [s.team_name for s in summary] == ["Sales", "Support"]
    assert summary[0].team_id == sales.id
    assert summary[0].statistics[0].count == 1
    assert summary[1].team_id == support.id
    assert summary[1].statistics == []


async def test_snapshot_without_records_marks_everyone_absent(db_session, make_user, sales) -> None:
    await make_user("A", "a@example.com", team=sales)
    await make_user("B", "b@example.com", team=sales)
    await make_user("C", "c@example.com")

    snapshot = await stats.get_all_members_snapshot(db_session, MAY_6)

    assert snapshot.date == MAY_6
    assert snapshot.overall_stats.total_employees == 3
    assert snapshot.overall_stats.absent_count == 3
    assert snapshot.overall_stats.present_count == 0
    assert snapshot.overall_stats.avg_work_hours == 0
    for m in snapshot.members:
        assert m.attendance.status == "absent"
        assert m.attendance.work_hours == 0
        assert m.attendance.check_in is None
        assert m.daily_stats.absent is True
        assert m.daily_stats.present is False


async def test_snapshot_with_no_users(db_session) -> None:
    snapshot = await stats.get_all_members_snapshot(db_session, MAY_6)
    assert snapshot.overall_stats.total_employees == 0
    assert snapshot.overall_stats.avg_work_hours == 0
    assert snapshot.members == []


async def test_snapshot_rollup(db_session, make_user, sales, admin) -> None:
    alice = await make_user("Alice", "alice@example.com", team=sales)
    bob = await make_user("Bob", "bob@example.com", team=sales)
    cara = await make_user("Cara", "cara@example.com", team=sales)
    await _full_day(db_session, alice, admin)
    await _half_day(db_session, bob, admin)
    await _mark(db_session, cara, admin, "2024-05-06", status="leave", leaveReason="vacation")

    snapshot = await stats.get_all_members_snapshot(db_session, MAY_6)
    overall = snapshot.overall_stats
    members = {m.name: m for m in snapshot.members}

    # admin has no record and counts as absent
    assert overall.total_employees == 4
    assert overall.present_count == 1
    assert overall.half_day_count == 1
    assert overall.leave_count == 1
    assert overall.absent_count == 1
    assert overall.total_work_hours == 13.5
    assert overall.avg_work_hours == 3.38

    assert members["Alice"].daily_stats.present is True
    assert members["Alice"].team.name == "Sales"
    assert members["Bob"].daily_stats.half_day is True
    assert members["Cara"].attendance.leave_reason == "vacation"
    assert members["Ada Admin"].team is None
    assert members["Ada Admin"].daily_stats.absent is True
