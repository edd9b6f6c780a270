"""
Configuração do banco de dados com SQLAlchemy async
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from radar.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Base para modelos
Base = declarative_base()

# Variáveis globais que serão inicializadas depois
async_engine = None
AsyncSessionLocal = None


def _engine_options(url: str) -> dict:
    """Opções de pool por driver (SQLite não aceita pool_size)."""
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}
    return {
        "echo": settings.DEBUG,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


def _init_engines():
    """Inicializar engine e session factory - chamado apenas quando necessário"""
    global async_engine, AsyncSessionLocal

    if async_engine is not None:
        return  # Já inicializado

    logger.info(f"[DATABASE] Inicializando com DATABASE_URL: {settings.DATABASE_URL[:50]}...")

    async_engine = create_async_engine(
        settings.DATABASE_URL,
        **_engine_options(settings.DATABASE_URL)
    )
    logger.info("[DATABASE] Engine assíncrono criado com sucesso")

    AsyncSessionLocal = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def get_db() -> AsyncSession:
    """Dependency para injetar sessão do banco"""
    _init_engines()
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Inicializar tabelas do banco"""
    _init_engines()

    # Registra os modelos no metadata antes do create_all
    from radar.models import consulta, user  # noqa: F401

    try:
        logger.info("[DATABASE] Iniciando conexão com o banco...")
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("[DATABASE] ✓ Tabelas criadas/verificadas com sucesso")
    except Exception as e:
        logger.error(f"[DATABASE] ✗ Erro ao inicializar banco: {e}", exc_info=True)
        raise


async def close_db():
    """Fechar conexões do banco"""
    global async_engine, AsyncSessionLocal
    if async_engine is not None:
        await async_engine.dispose()
        async_engine = None
        AsyncSessionLocal = None
