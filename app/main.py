# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.api.v1.api import api_router

settings = get_settings()

# Configurar logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação
    """
    # Startup
    logger.info("Starting up the application...")
    logger.info(f"Project: {settings.project_name}")
    logger.info(f"Version: {settings.version}")

    yield

    # Shutdown
    logger.info("Shutting down the application...")


# Criar aplicação FastAPI
app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description=settings.description,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Incluir rotas da API
app.include_router(api_router, prefix=settings.api_v1_str)


# Health check endpoint
@app.get("/", tags=["health"])
async def root():
    """
    Health check endpoint
    """
    return {
        "status": "ok",
        "project": settings.project_name,
        "version": settings.version,
        "message": "EAD Progress API"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Verifica a saúde da aplicação e suas configurações
    """
    return {
        "status": "healthy",
        "services": {
            "progress": "healthy"
        },
        "roster": {
            "max_concurrency": settings.roster_max_concurrency,
            "fetch_timeout_seconds": settings.roster_fetch_timeout_seconds
        }
    }


# Middleware para logging
@app.middleware("http")
async def log_requests(request, call_next):
    """
    Log todas as requisições HTTP
    """
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Status: {response.status_code}")
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
