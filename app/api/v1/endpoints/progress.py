# app/api/v1/endpoints/progress.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from app.api.deps import get_roster_service
from app.config import get_settings
from app.schemas.progress import (
    ActivityProgress,
    CurriculumProgressResponse,
    CurriculumSnapshotRequest,
    CurriculumSummary,
    ModuleProgress,
    NextActivityResponse,
    RosterRequest,
    RosterResponse,
)
from app.services.roster_service import RosterService
from app.utils.curriculum_normalizer import normalize
from app.utils.next_activity import resolve_next
from app.utils.progress_utils import activity_status, summarize

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


def _normalize_snapshot(payload: CurriculumSnapshotRequest):
    """Normaliza o snapshot usando os títulos padrão configurados"""
    return normalize(
        payload.curriculum,
        module_title_template=settings.module_title_template,
        activity_title_template=settings.activity_title_template
    )


@router.post("/summary", response_model=CurriculumSummary)
async def get_progress_summary(payload: CurriculumSnapshotRequest):
    """
    Calcula total, concluídas e porcentagem por módulo e do curso
    """
    try:
        return summarize(_normalize_snapshot(payload))
    except Exception as e:
        logger.error(f"Erro ao calcular resumo de progresso: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erro ao calcular progresso: {str(e)}"
        )


@router.post("/next", response_model=NextActivityResponse)
async def get_next_activity(payload: CurriculumSnapshotRequest):
    """
    Retorna a atividade a retomar ou a primeira pendente (null se tudo concluído)
    """
    try:
        return NextActivityResponse(next=resolve_next(_normalize_snapshot(payload)))
    except Exception as e:
        logger.error(f"Erro ao determinar próxima atividade: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erro ao determinar próxima atividade: {str(e)}"
        )


@router.post("/curriculum", response_model=CurriculumProgressResponse)
async def get_curriculum_progress(payload: CurriculumSnapshotRequest):
    """
    Detalha o progresso de uma matrícula: módulos, status de cada atividade,
    resumo geral e próxima atividade
    """
    try:
        curriculum = _normalize_snapshot(payload)
        summary = summarize(curriculum)

        modules: List[ModuleProgress] = []
        for module in curriculum.modules:
            modules.append(ModuleProgress(
                id=module.id,
                index=module.index,
                title=module.title,
                summary=summary.per_module[module.index],
                activities=[
                    ActivityProgress(
                        id=activity.id,
                        index=activity.index,
                        title=activity.title,
                        completed=activity.completed,
                        needs_resume=activity.needs_resume,
                        seconds=activity.seconds,
                        status=activity_status(activity)
                    )
                    for activity in module.activities
                ]
            ))

        return CurriculumProgressResponse(
            modules=modules,
            overall=summary.overall,
            next=resolve_next(curriculum)
        )
    except Exception as e:
        logger.error(f"Erro ao detalhar progresso do currículo: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erro ao detalhar progresso: {str(e)}"
        )


@router.post("/roster", response_model=RosterResponse)
async def get_roster_progress(
        payload: RosterRequest,
        roster_service: RosterService = Depends(get_roster_service)
):
    """
    Calcula o progresso de várias matrículas; matrículas sem dados
    retornam progresso zerado sem bloquear as demais
    """
    results = roster_service.reduce(payload.entries)
    logger.info(f"Roster: {len(results)} matrícula(s) processada(s)")
    return RosterResponse(results=results)
