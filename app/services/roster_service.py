# app/services/roster_service.py
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Union
import asyncio
import logging

from pydantic import ValidationError

from app.config import get_settings
from app.schemas.progress import Identifier, ProgressSummary, RosterEntry, RosterProgress
from app.utils.curriculum_normalizer import (
    DEFAULT_ACTIVITY_TITLE,
    DEFAULT_MODULE_TITLE,
    normalize,
)
from app.utils.next_activity import resolve_next
from app.utils.progress_utils import summarize

logger = logging.getLogger(__name__)

FetchCurriculum = Callable[[Identifier], Awaitable[Any]]


def _degraded(enrollment_id: Optional[Identifier]) -> RosterProgress:
    return RosterProgress(
        enrollment_id=enrollment_id,
        summary=ProgressSummary(),
        next=None,
        degraded=True
    )


def _coerce_entry(entry: Any) -> RosterEntry:
    if isinstance(entry, RosterEntry):
        return entry
    return RosterEntry.model_validate(entry)


def _entry_id(entry: Any) -> Optional[Identifier]:
    if isinstance(entry, RosterEntry):
        return entry.enrollment_id
    if isinstance(entry, Mapping):
        for key in ("enrollment_id", "enrollmentId", "id"):
            value = entry.get(key)
            if isinstance(value, (int, str)) and not isinstance(value, bool):
                return value
    return None


def reduce_entry(
        entry: Any,
        module_title_template: str = DEFAULT_MODULE_TITLE,
        activity_title_template: str = DEFAULT_ACTIVITY_TITLE
) -> RosterProgress:
    """
    Calcula resumo e próxima atividade de uma matrícula

    Qualquer falha vira progresso zerado (``degraded=True``) em vez de erro.
    """
    try:
        roster_entry = _coerce_entry(entry)
    except ValidationError as e:
        logger.warning(f"Entrada de roster inválida, usando progresso zerado: {e.error_count()} erro(s)")
        return _degraded(_entry_id(entry))

    if roster_entry.curriculum is None:
        logger.info(f"Matrícula {roster_entry.enrollment_id} sem currículo, usando progresso zerado")
        return _degraded(roster_entry.enrollment_id)

    try:
        curriculum = normalize(
            roster_entry.curriculum,
            module_title_template=module_title_template,
            activity_title_template=activity_title_template
        )
        summary = summarize(curriculum)
        next_activity = resolve_next(curriculum)
    except Exception as e:
        logger.warning(f"Erro ao calcular progresso da matrícula {roster_entry.enrollment_id}: {e}")
        return _degraded(roster_entry.enrollment_id)

    return RosterProgress(
        enrollment_id=roster_entry.enrollment_id,
        summary=summary.overall,
        next=next_activity,
        degraded=False
    )


def reduce_roster(
        entries: Iterable[Any],
        module_title_template: str = DEFAULT_MODULE_TITLE,
        activity_title_template: str = DEFAULT_ACTIVITY_TITLE
) -> List[RosterProgress]:
    """
    Aplica resumo e próxima atividade a cada matrícula do roster

    Args:
        entries: RosterEntry ou dicts ``{"enrollment_id", "curriculum"}``
        module_title_template: Título padrão de módulo
        activity_title_template: Título padrão de atividade

    Returns:
        Um resultado por entrada, na mesma ordem da entrada
    """
    if entries is None or isinstance(entries, (str, bytes, Mapping)) or not isinstance(entries, Iterable):
        logger.warning(f"Roster sem lista de matrículas ({type(entries).__name__}), nada a calcular")
        return []

    return [
        reduce_entry(entry, module_title_template, activity_title_template)
        for entry in entries
    ]


class RosterService:
    """Busca os currículos de várias matrículas em paralelo e reduz o roster"""

    def __init__(
            self,
            max_concurrency: Optional[int] = None,
            fetch_timeout: Optional[float] = None,
            module_title_template: Optional[str] = None,
            activity_title_template: Optional[str] = None
    ):
        settings = get_settings()
        self.max_concurrency = max_concurrency or settings.roster_max_concurrency
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.roster_fetch_timeout_seconds
        self.module_title_template = module_title_template or settings.module_title_template
        self.activity_title_template = activity_title_template or settings.activity_title_template

    def reduce(self, entries: Iterable[Any]) -> List[RosterProgress]:
        """Reduz entradas que já trazem o snapshot do currículo"""
        return reduce_roster(entries, self.module_title_template, self.activity_title_template)

    async def _fetch_one(
            self,
            enrollment_id: Identifier,
            fetch_curriculum: FetchCurriculum,
            semaphore: asyncio.Semaphore
    ) -> Union[RosterEntry, dict]:
        async with semaphore:
            try:
                if self.fetch_timeout:
                    snapshot = await asyncio.wait_for(fetch_curriculum(enrollment_id), self.fetch_timeout)
                else:
                    snapshot = await fetch_curriculum(enrollment_id)
            except asyncio.TimeoutError:
                logger.warning(f"Timeout ao buscar currículo da matrícula {enrollment_id}")
                snapshot = None
            except Exception as e:
                logger.warning(f"Erro ao buscar currículo da matrícula {enrollment_id}: {e}")
                snapshot = None

        try:
            return RosterEntry(enrollment_id=enrollment_id, curriculum=snapshot)
        except ValidationError:
            # reduce_entry degrada a entrada inválida sem afetar as demais
            logger.warning(f"ID de matrícula inválido no roster: {enrollment_id!r}")
            return {"enrollment_id": enrollment_id, "curriculum": snapshot}

    async def fetch_entries(
            self,
            enrollment_ids: Iterable[Identifier],
            fetch_curriculum: FetchCurriculum
    ) -> List[Union[RosterEntry, dict]]:
        """
        Busca os snapshots de todas as matrículas, um por chamada isolada

        Uma busca que falha ou estoura o timeout gera uma entrada sem
        currículo; um ID inválido segue como dict bruto para ser degradado
        na redução. As demais seguem normalmente.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            self._fetch_one(enrollment_id, fetch_curriculum, semaphore)
            for enrollment_id in enrollment_ids
        ]
        return list(await asyncio.gather(*tasks))

    async def reduce_enrollments(
            self,
            enrollment_ids: Iterable[Identifier],
            fetch_curriculum: FetchCurriculum
    ) -> List[RosterProgress]:
        """
        Busca e reduz o roster completo

        Args:
            enrollment_ids: IDs das matrículas na ordem de exibição
            fetch_curriculum: Corrotina que retorna o snapshot de uma matrícula

        Returns:
            Lista de RosterProgress na ordem de ``enrollment_ids``
        """
        enrollment_ids = list(enrollment_ids or [])
        entries = await self.fetch_entries(enrollment_ids, fetch_curriculum)
        results = self.reduce(entries)

        degraded = sum(1 for result in results if result.degraded)
        logger.info(f"Roster calculado: {len(results)} matrícula(s), {degraded} sem dados")
        return results
