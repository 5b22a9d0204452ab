# app/utils/progress_utils.py
from typing import Any, Dict, Iterable

from app.schemas.progress import (
    Activity,
    ActivityStatus,
    CurriculumSummary,
    ProgressSummary,
)
from app.utils.curriculum_normalizer import normalize


def calculate_percent(completed: int, total: int) -> int:
    """
    Calcula a porcentagem inteira (arredondamento half-up) de concluídas

    Feito só com inteiros para que 1/2 vire 50 e 1/3 vire 33 sem depender
    de arredondamento de ponto flutuante.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def build_summary(activities: Iterable[Activity]) -> ProgressSummary:
    """Conta total e concluídas de uma sequência de atividades"""
    total = 0
    completed = 0
    for activity in activities:
        total += 1
        if activity.completed:
            completed += 1

    return ProgressSummary(
        total=total,
        completed=completed,
        percent=calculate_percent(completed, total)
    )


def summarize(curriculum: Any) -> CurriculumSummary:
    """
    Calcula o progresso por módulo e o geral do curso

    O geral soma os inteiros de todos os módulos antes de calcular a
    porcentagem; nunca é a média das porcentagens dos módulos.

    Args:
        curriculum: Curriculum normalizado (ou snapshot bruto)

    Returns:
        CurriculumSummary com ``per_module`` indexado pela posição do módulo
    """
    curriculum = normalize(curriculum)

    per_module: Dict[int, ProgressSummary] = {}
    total = 0
    completed = 0

    for module in curriculum.modules:
        module_summary = build_summary(module.activities)
        per_module[module.index] = module_summary
        total += module_summary.total
        completed += module_summary.completed

    overall = ProgressSummary(
        total=total,
        completed=completed,
        percent=calculate_percent(completed, total)
    )
    return CurriculumSummary(per_module=per_module, overall=overall)


def activity_status(activity: Activity) -> ActivityStatus:
    """
    Status de exibição da atividade; concluída sempre vence o flag de retomada
    """
    if activity.completed:
        return ActivityStatus.COMPLETED
    if activity.needs_resume:
        return ActivityStatus.RESUME
    return ActivityStatus.PENDING
