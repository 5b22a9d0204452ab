# app/schemas/progress.py
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

Identifier = Union[int, str]


class ActivityStatus(str, Enum):
    """Situação de uma atividade para o aluno"""
    COMPLETED = "completed"
    RESUME = "resume"
    PENDING = "pending"


class NextActivityReason(str, Enum):
    """Regra que escolheu a próxima atividade"""
    RESUME = "resume"
    PENDING = "pending"


class Activity(BaseModel):
    """Unidade de aprendizagem dentro de um módulo"""
    model_config = ConfigDict(frozen=True)

    id: Optional[Identifier] = None
    index: int = Field(..., ge=0)
    title: str
    completed: bool = False
    needs_resume: bool = False
    seconds: int = Field(0, ge=0)


class Module(BaseModel):
    """Módulo do currículo com suas atividades ordenadas"""
    model_config = ConfigDict(frozen=True)

    id: Optional[Identifier] = None
    index: int = Field(..., ge=0)
    title: str
    activities: Tuple[Activity, ...] = ()


class Curriculum(BaseModel):
    """Currículo completo de uma matrícula (somente leitura)"""
    model_config = ConfigDict(frozen=True)

    modules: Tuple[Module, ...] = ()


class ProgressSummary(BaseModel):
    """Totais de atividades, concluídas e porcentagem"""
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0)
    completed: int = Field(0, ge=0)
    percent: int = Field(0, ge=0, le=100)

    @model_validator(mode="after")
    def validate_counts(self):
        if self.completed > self.total:
            raise ValueError("completed cannot exceed total")
        return self


class CurriculumSummary(BaseModel):
    """Resumo de progresso por módulo e do curso inteiro"""
    model_config = ConfigDict(frozen=True)

    per_module: Dict[int, ProgressSummary] = {}
    overall: ProgressSummary = ProgressSummary()


class NextActivityRef(BaseModel):
    """Referência à atividade que o aluno deve retomar ou iniciar"""
    model_config = ConfigDict(frozen=True)

    module_index: int = Field(..., ge=0)
    activity_index: int = Field(..., ge=0)
    title: str
    activity_id: Optional[Identifier] = None
    module_title: Optional[str] = None
    reason: NextActivityReason


class RosterEntry(BaseModel):
    """Matrícula com o snapshot bruto do currículo (pode faltar)"""
    model_config = ConfigDict(frozen=True)

    enrollment_id: Identifier = Field(
        ..., validation_alias=AliasChoices("enrollment_id", "enrollmentId", "id")
    )
    curriculum: Any = None


class RosterProgress(BaseModel):
    """Resultado do progresso de uma matrícula no roster"""
    model_config = ConfigDict(frozen=True)

    enrollment_id: Optional[Identifier] = None
    summary: ProgressSummary = ProgressSummary()
    next: Optional[NextActivityRef] = None
    degraded: bool = False


# ---------------------------------------------------------------------------
# Requisições e respostas da API
# ---------------------------------------------------------------------------

class CurriculumSnapshotRequest(BaseModel):
    """Requisição com o currículo bruto retornado pelo backend"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "curriculum": [
                    {
                        "titulo": "Introdução",
                        "atividades": [
                            {"id": 1, "titulo": "Boas-vindas", "completed": True},
                            {"id": 2, "titulo": "Primeiros passos", "needs_resume": True}
                        ]
                    }
                ]
            }
        }
    )

    curriculum: Any = None


class NextActivityResponse(BaseModel):
    """Resposta com a próxima atividade (ou nula quando não há pendências)"""
    next: Optional[NextActivityRef] = None


class ActivityProgress(BaseModel):
    """Atividade normalizada acompanhada do seu status"""
    id: Optional[Identifier] = None
    index: int
    title: str
    completed: bool
    needs_resume: bool
    seconds: int = 0
    status: ActivityStatus


class ModuleProgress(BaseModel):
    """Módulo normalizado com resumo e atividades"""
    id: Optional[Identifier] = None
    index: int
    title: str
    summary: ProgressSummary
    activities: List[ActivityProgress] = []


class CurriculumProgressResponse(BaseModel):
    """Detalhamento completo do progresso de uma matrícula"""
    modules: List[ModuleProgress] = []
    overall: ProgressSummary
    next: Optional[NextActivityRef] = None


class RosterRequest(BaseModel):
    """Requisição com várias matrículas para o acompanhamento do curso"""
    entries: List[Any] = []


class RosterResponse(BaseModel):
    """Resultados na mesma ordem das matrículas recebidas"""
    results: List[RosterProgress] = []
