# app/utils/curriculum_normalizer.py
from typing import Any, Callable, List, Mapping, Optional, Sequence
import logging
import math

from app.schemas.progress import Activity, Curriculum, Module

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_TITLE = "Activity {n}"
DEFAULT_MODULE_TITLE = "Module {n}"

# Aliases aceitos por campo, em ordem de preferência
TITLE_ALIASES = ("titulo", "title")
ACTIVITIES_ALIASES = ("atividades", "activities", "items")
COMPLETED_ALIASES = ("completed", "concluido")
RESUME_ALIASES = ("needs_resume", "needsResume")
MODULE_ID_ALIASES = ("module_id", "id")
ACTIVITY_ID_ALIASES = ("id", "activity_id")
SECONDS_ALIASES = ("seconds", "segundos")
ENVELOPE_KEYS = ("curriculum", "modules")

TRUTHY_STRINGS = {"1", "true", "yes", "sim"}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def pick_alias(
        data: Any,
        aliases: Sequence[str],
        default: Any = None,
        accept: Optional[Callable[[Any], bool]] = None
) -> Any:
    """
    Retorna o valor do primeiro alias presente e não vazio

    Args:
        data: Objeto bruto vindo do backend
        aliases: Nomes do campo em ordem de preferência
        default: Valor quando nenhum alias serve
        accept: Filtro extra (ex.: só aceitar listas)

    Returns:
        Valor encontrado ou o default
    """
    if not isinstance(data, Mapping):
        return default

    for key in aliases:
        value = data.get(key)
        if _is_empty(value):
            continue
        if accept is not None and not accept(value):
            continue
        return value

    return default


def coerce_flag(value: Any) -> bool:
    """
    Converte flags soltas do backend (bool, 0/1, "true", "sim") em bool
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return False


def _coerce_id(value: Any):
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, str)):
        return value
    return str(value)


def coerce_seconds(value: Any) -> int:
    """
    Converte o tempo gasto na atividade em segundos inteiros (0 se inválido)
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        return 0
    return int(math.floor(value + 0.5))


def _coerce_title(value: Any, template: str, index: int) -> str:
    if _is_empty(value):
        return template.format(n=index + 1)
    return str(value).strip()


def unwrap_snapshot(raw: Any) -> List[Any]:
    """
    Extrai a lista de módulos do snapshot

    O endpoint de currículo por matrícula responde ``{"curriculum": [...]}``,
    mas algumas telas repassam a lista direto.
    """
    if _is_sequence(raw):
        return list(raw)

    modules = pick_alias(raw, ENVELOPE_KEYS, default=[], accept=_is_sequence)
    return list(modules)


def normalize_activity(raw: Any, index: int, title_template: str = DEFAULT_ACTIVITY_TITLE) -> Activity:
    """Normaliza uma atividade na posição ``index`` do módulo"""
    return Activity(
        id=_coerce_id(pick_alias(raw, ACTIVITY_ID_ALIASES)),
        index=index,
        title=_coerce_title(pick_alias(raw, TITLE_ALIASES), title_template, index),
        completed=coerce_flag(pick_alias(raw, COMPLETED_ALIASES, default=False)),
        needs_resume=coerce_flag(pick_alias(raw, RESUME_ALIASES, default=False)),
        seconds=coerce_seconds(pick_alias(raw, SECONDS_ALIASES, default=0)),
    )


def normalize_module(
        raw: Any,
        index: int,
        module_title_template: str = DEFAULT_MODULE_TITLE,
        activity_title_template: str = DEFAULT_ACTIVITY_TITLE
) -> Module:
    """Normaliza um módulo e suas atividades, preservando a ordem"""
    raw_activities = pick_alias(raw, ACTIVITIES_ALIASES, default=[], accept=_is_sequence)

    activities = tuple(
        normalize_activity(item, position, activity_title_template)
        for position, item in enumerate(raw_activities)
    )

    return Module(
        id=_coerce_id(pick_alias(raw, MODULE_ID_ALIASES)),
        index=index,
        title=_coerce_title(pick_alias(raw, TITLE_ALIASES), module_title_template, index),
        activities=activities,
    )


def normalize(
        raw: Any,
        module_title_template: str = DEFAULT_MODULE_TITLE,
        activity_title_template: str = DEFAULT_ACTIVITY_TITLE
) -> Curriculum:
    """
    Converte o currículo bruto do backend na estrutura canônica

    Aceita ``None``, uma lista de módulos, o envelope ``{"curriculum": [...]}``
    ou um ``Curriculum`` já normalizado. Nunca lança erro: snapshots
    malformados viram um currículo vazio.

    Args:
        raw: Snapshot bruto do currículo
        module_title_template: Título padrão de módulo ({n} = posição + 1)
        activity_title_template: Título padrão de atividade ({n} = posição + 1)

    Returns:
        Curriculum imutável
    """
    if isinstance(raw, Curriculum):
        return raw

    raw_modules = unwrap_snapshot(raw)
    if not raw_modules and raw is not None and not _is_sequence(raw):
        logger.debug(f"Snapshot sem módulos reconhecíveis: {type(raw).__name__}")

    modules = tuple(
        normalize_module(item, position, module_title_template, activity_title_template)
        for position, item in enumerate(raw_modules)
    )
    return Curriculum(modules=modules)
