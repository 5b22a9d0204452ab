import pytest

from app.schemas.progress import ActivityStatus, ProgressSummary
from app.utils.curriculum_normalizer import normalize
from app.utils.progress_utils import activity_status, calculate_percent, summarize


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [(0, 0, 0), (0, 5, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (5, 8, 63), (4, 4, 100)],
)
def test_calculate_percent_rounds_half_up(completed: int, total: int, expected: int) -> None:
    assert calculate_percent(completed, total) == expected


def test_empty_curriculum_summary() -> None:
    summary = summarize(normalize(None))
    assert summary.per_module == {}
    assert summary.overall == ProgressSummary(total=0, completed=0, percent=0)


def test_mixed_curriculum_summary(mixed_curriculum: list[dict]) -> None:
    summary = summarize(normalize(mixed_curriculum))
    assert summary.per_module[0] == ProgressSummary(total=2, completed=1, percent=50)
    assert summary.per_module[1] == ProgressSummary(total=1, completed=0, percent=0)
    assert summary.overall == ProgressSummary(total=3, completed=1, percent=33)


def test_overall_uses_summed_counts_not_averaged_percentages() -> None:
    raw = [
        {"atividades": [{"completed": True}]},
        {"atividades": [{"completed": False}] * 9},
    ]
    summary = summarize(raw)
    assert summary.per_module[0].percent == 100
    assert summary.per_module[1].percent == 0
    # average of module percentages would be 50
    assert summary.overall == ProgressSummary(total=10, completed=1, percent=10)


def test_completed_with_resume_flag_counts_as_completed(completed_curriculum: list[dict]) -> None:
    summary = summarize(completed_curriculum)
    assert summary.overall == ProgressSummary(total=4, completed=4, percent=100)


def test_module_without_activities_has_zero_summary() -> None:
    summary = summarize([{"titulo": "Vazio"}, {"atividades": [{"completed": True}]}])
    assert summary.per_module[0] == ProgressSummary()
    assert summary.overall == ProgressSummary(total=1, completed=1, percent=100)


def test_summary_bounds_hold(mixed_curriculum: list[dict], partial_curriculum: list[dict]) -> None:
    for raw in (mixed_curriculum, partial_curriculum, None, []):
        overall = summarize(raw).overall
        assert 0 <= overall.completed <= overall.total
        assert 0 <= overall.percent <= 100


def test_summarize_is_idempotent(mixed_curriculum: list[dict]) -> None:
    curriculum = normalize(mixed_curriculum)
    assert summarize(curriculum) == summarize(curriculum)


def test_summary_rejects_completed_above_total() -> None:
    with pytest.raises(ValueError):
        ProgressSummary(total=1, completed=2, percent=100)


def test_activity_status() -> None:
    module = normalize([
        {
            "atividades": [
                {"completed": True, "needs_resume": True},
                {"needs_resume": True},
                {},
            ]
        }
    ]).modules[0]
    assert [activity_status(a) for a in module.activities] == [
        ActivityStatus.COMPLETED,
        ActivityStatus.RESUME,
        ActivityStatus.PENDING,
    ]
