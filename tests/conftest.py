# ruff: noqa: S101
"""Fixtures compartilhadas: banco SQLite temporário e usuários."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from radar.core.database import Base
from radar.core.security import create_access_token, get_password_hash
from radar.models import consulta, user  # noqa: F401
from radar.models.user import Usuario, UserRole


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'radar.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def criar_usuario(db):
    """Factory de usuários gravados no banco."""

    async def _criar(
        nome: str = "Usuário Teste",
        email: str = "usuario@radar.com.br",
        senha: str = "senha123",
        role: UserRole = UserRole.USER,
        ativo: bool = True,
        pode_lote: bool = True,
    ) -> Usuario:
        usuario = Usuario(
            nome=nome,
            email=email,
            senha_hash=get_password_hash(senha),
            role=role,
            ativo=ativo,
            pode_lote=pode_lote,
        )
        db.add(usuario)
        await db.commit()
        await db.refresh(usuario)
        return usuario

    return _criar


def token_para(usuario: Usuario) -> str:
    return create_access_token({"sub": str(usuario.id), "id": usuario.id, "nome": usuario.nome})
