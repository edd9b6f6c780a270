"""
Radar Habilitações - Aplicação Principal FastAPI
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

from radar.core.config import settings
from radar.core.database import init_db, close_db
from radar.core import database
from radar.core.exceptions import RadarError
from radar.api.routes import auth_router, admin_router, consulta_router, historico_router
from radar.services.auth_service import AuthService

# Configurar logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

logger.info("="*80)
logger.info("Radar Habilitações - Inicializando aplicação")
logger.info(f"Ambiente: {settings.ENVIRONMENT}")
logger.info(f"Debug: {settings.DEBUG}")
logger.info(f"CORS Origins: {settings.allowed_origins_list}")
logger.info("="*80)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerenciamento do ciclo de vida da aplicação"""
    # Startup
    logger.info("="*80)
    logger.info("[STARTUP] Iniciando aplicação Radar Habilitações...")
    logger.info(f"[STARTUP] Versão: {settings.APP_VERSION}")
    logger.info(f"[STARTUP] Ambiente: {settings.ENVIRONMENT}")

    try:
        logger.info("[STARTUP] Conectando ao banco de dados...")
        await init_db()
        logger.info("[STARTUP] ✓ Banco de dados inicializado com sucesso")
    except Exception as e:
        logger.error(f"[STARTUP] ✗ Erro ao inicializar banco de dados: {e}", exc_info=True)
        raise

    try:
        logger.info("[STARTUP] Verificando usuário admin...")
        async with database.AsyncSessionLocal() as session:
            admin = await AuthService.create_admin_user(session)
            if admin:
                logger.info(f"[STARTUP] ✓ Usuário admin criado: {admin.email}")
            else:
                logger.info("[STARTUP] Usuários já cadastrados, admin padrão não criado")
    except Exception as e:
        logger.error(f"[STARTUP] ✗ Erro ao criar admin: {e}", exc_info=True)

    if not settings.radar_configured:
        logger.warning("[STARTUP] ⚠ API_TOKEN ou URL_RADAR não definidos: consultas à RADAR vão falhar")

    logger.info("[STARTUP] ✓ Aplicação iniciada com sucesso")
    logger.info("="*80)
    yield

    # Shutdown
    logger.info("="*80)
    logger.info("[SHUTDOWN] Encerrando aplicação...")
    await close_db()
    logger.info("[SHUTDOWN] ✓ Aplicação encerrada")
    logger.info("="*80)


# Criar aplicação
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Radar Habilitações API

    Consulta de habilitação Siscomex (RADAR) e dados cadastrais (ReceitaWS) por CNPJ.

    ### Funcionalidades:
    - 🔐 Autenticação com JWT (8 horas)
    - 🔎 Consulta completa com cache por CNPJ
    - 📦 Consulta em lote para usuários autorizados
    - 🗂️ Histórico de consultas com registro de exportação
    - 👥 Painel ADM de usuários

    ### Autenticação:
    1. Faça login em `/auth/login`
    2. Use o token Bearer em todas as requisições
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Handlers de erro
@app.exception_handler(RadarError)
async def radar_exception_handler(request: Request, exc: RadarError):
    """Erros da aplicação com o status HTTP de cada exceção"""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.warning(f"[API] {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler para erros de validação"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Erro de validação",
            "errors": errors
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handler geral de exceções"""
    logger.error(f"Erro não tratado: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Erro interno do servidor",
            "message": str(exc) if settings.DEBUG else "Ocorreu um erro inesperado"
        }
    )


# Registrar rotas
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(consulta_router)
app.include_router(historico_router)


# Rotas de health check
@app.get("/", tags=["Health"])
async def root():
    """Rota raiz"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Verificação de saúde da aplicação"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "radar_configurado": settings.radar_configured
    }
