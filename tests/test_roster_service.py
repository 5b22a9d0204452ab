import asyncio
import logging

from app.schemas.progress import NextActivityReason, ProgressSummary, RosterEntry
from app.services.roster_service import RosterService, reduce_entry, reduce_roster


def test_end_to_end_roster(completed_curriculum: list[dict], partial_curriculum: list[dict]) -> None:
    results = reduce_roster([
        RosterEntry(enrollment_id=1, curriculum=completed_curriculum),
        RosterEntry(enrollment_id=2, curriculum={"curriculum": partial_curriculum}),
    ])

    assert [r.enrollment_id for r in results] == [1, 2]

    first, second = results
    assert first.summary == ProgressSummary(total=4, completed=4, percent=100)
    assert first.next is None
    assert first.degraded is False

    assert second.summary == ProgressSummary(total=3, completed=1, percent=33)
    assert (second.next.module_index, second.next.activity_index) == (0, 1)
    assert second.next.title == "second"
    assert second.next.reason == NextActivityReason.PENDING


def test_missing_curriculum_degrades_without_blocking_others(partial_curriculum: list[dict]) -> None:
    results = reduce_roster([
        {"enrollment_id": "a", "curriculum": None},
        {"enrollmentId": "b", "curriculum": partial_curriculum},
        {"id": "c"},
    ])

    assert [r.enrollment_id for r in results] == ["a", "b", "c"]
    assert results[0].degraded is True
    assert results[0].summary == ProgressSummary()
    assert results[0].next is None
    assert results[1].degraded is False
    assert results[1].summary.percent == 33
    assert results[2].degraded is True


def test_invalid_entry_still_produces_one_result(partial_curriculum: list[dict]) -> None:
    results = reduce_roster([
        {"curriculum": partial_curriculum},
        "garbage",
        {"enrollment_id": 9, "curriculum": partial_curriculum},
    ])

    assert len(results) == 3
    assert results[0].degraded is True and results[0].enrollment_id is None
    assert results[1].degraded is True and results[1].enrollment_id is None
    assert results[2].enrollment_id == 9 and results[2].degraded is False


def test_failure_while_normalizing_is_isolated(caplog) -> None:
    entry = RosterEntry(enrollment_id=1, curriculum=[{"atividades": [{}]}])

    with caplog.at_level(logging.WARNING, logger="app.services.roster_service"):
        broken = reduce_entry(entry, activity_title_template="{missing}")

    assert broken.degraded is True
    assert broken.summary == ProgressSummary()
    assert "matrícula 1" in caplog.text


def test_malformed_snapshot_is_not_degraded() -> None:
    result = reduce_entry(RosterEntry(enrollment_id=3, curriculum="not a curriculum"))
    assert result.degraded is False
    assert result.summary == ProgressSummary()
    assert result.next is None


def test_empty_roster() -> None:
    assert reduce_roster([]) == []


def test_service_uses_configured_templates() -> None:
    service = RosterService(module_title_template="Módulo {n}", activity_title_template="Atividade {n}")
    result = service.reduce([RosterEntry(enrollment_id=1, curriculum=[{"atividades": [{}]}])])[0]
    assert result.next.title == "Atividade 1"
    assert result.next.module_title == "Módulo 1"


def test_reduce_enrollments_isolates_fetch_failures(
        completed_curriculum: list[dict], partial_curriculum: list[dict]
) -> None:
    snapshots = {1: completed_curriculum, 4: {"curriculum": partial_curriculum}}

    async def fetch(enrollment_id):
        if enrollment_id == 2:
            raise RuntimeError("backend indisponível")
        if enrollment_id == 3:
            await asyncio.sleep(1)
        return snapshots.get(enrollment_id)

    service = RosterService(max_concurrency=4, fetch_timeout=0.05)
    results = asyncio.run(service.reduce_enrollments([1, 2, 3, 4, 5], fetch))

    assert [r.enrollment_id for r in results] == [1, 2, 3, 4, 5]
    assert [r.degraded for r in results] == [False, True, True, False, True]
    assert results[0].summary.percent == 100
    assert results[3].summary == ProgressSummary(total=3, completed=1, percent=33)
    assert results[3].next.title == "second"


def test_reduce_enrollments_respects_max_concurrency(partial_curriculum: list[dict]) -> None:
    in_flight = 0
    peak = 0

    async def fetch(enrollment_id):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return partial_curriculum

    service = RosterService(max_concurrency=2, fetch_timeout=5)
    results = asyncio.run(service.reduce_enrollments(range(6), fetch))

    assert len(results) == 6
    assert peak <= 2
    assert all(r.summary.percent == 33 for r in results)


def test_missing_or_non_list_roster_is_empty() -> None:
    assert reduce_roster(None) == []
    assert reduce_roster(42) == []
    assert reduce_roster("123") == []
    assert reduce_roster({"enrollment_id": 1, "curriculum": []}) == []


def test_reduce_enrollments_degrades_invalid_ids(partial_curriculum: list[dict]) -> None:
    async def fetch(enrollment_id):
        return partial_curriculum

    service = RosterService(fetch_timeout=1)
    results = asyncio.run(service.reduce_enrollments([1, None, 2.5, 3], fetch))

    assert len(results) == 4
    assert [r.degraded for r in results] == [False, True, True, False]
    assert [r.enrollment_id for r in results] == [1, None, None, 3]
    assert results[0].summary.percent == 33
    assert results[3].next.title == "second"


def test_reduce_enrollments_without_ids() -> None:
    async def fetch(enrollment_id):
        return []

    assert asyncio.run(RosterService().reduce_enrollments(None, fetch)) == []
