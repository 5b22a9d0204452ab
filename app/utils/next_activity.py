# app/utils/next_activity.py
from typing import Any, Iterator, Optional, Tuple

from app.schemas.progress import (
    Activity,
    Curriculum,
    Module,
    NextActivityReason,
    NextActivityRef,
)
from app.utils.curriculum_normalizer import normalize


def iter_activities(curriculum: Curriculum) -> Iterator[Tuple[Module, Activity]]:
    """Percorre as atividades na ordem do currículo (módulo, depois atividade)"""
    for module in curriculum.modules:
        for activity in module.activities:
            yield module, activity


def _build_ref(module: Module, activity: Activity, reason: NextActivityReason) -> NextActivityRef:
    return NextActivityRef(
        module_index=module.index,
        activity_index=activity.index,
        title=activity.title,
        activity_id=activity.id,
        module_title=module.title,
        reason=reason
    )


def resolve_next(curriculum: Any) -> Optional[NextActivityRef]:
    """
    Determina a próxima atividade sugerida para o aluno

    Regras, a primeira que casar vence:
        1. primeira atividade com ``needs_resume`` e não concluída;
        2. primeira atividade não concluída;
        3. nenhuma (tudo concluído ou currículo vazio) -> None.

    Args:
        curriculum: Curriculum normalizado (ou snapshot bruto)

    Returns:
        NextActivityRef ou None
    """
    curriculum = normalize(curriculum)

    first_pending = None
    for module, activity in iter_activities(curriculum):
        if activity.completed:
            continue
        if activity.needs_resume:
            return _build_ref(module, activity, NextActivityReason.RESUME)
        if first_pending is None:
            first_pending = (module, activity)

    if first_pending is None:
        return None

    module, activity = first_pending
    return _build_ref(module, activity, NextActivityReason.PENDING)
