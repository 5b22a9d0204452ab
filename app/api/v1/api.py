# app/api/v1/api.py
from fastapi import APIRouter

from app.api.v1.endpoints import progress

api_router = APIRouter()

# Incluir todos os endpoints
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
