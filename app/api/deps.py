# app/api/deps.py
from app.services.roster_service import RosterService

# Instância singleton do RosterService
_roster_service = None


def get_roster_service() -> RosterService:
    """
    Dependency para obter instância do RosterService
    """
    global _roster_service
    if _roster_service is None:
        _roster_service = RosterService()
    return _roster_service
