"""
Rotas de administração (usuários)
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.database import get_db
from radar.models.user import Usuario
from radar.schemas.user import (
    UsuarioCreate,
    UsuarioUpdate,
    UsuarioResponse,
    UsuarioDesativadoResponse,
)
from radar.services.auth_service import UserService
from radar.api.deps import get_current_admin

router = APIRouter(prefix="/admin", tags=["Administração"])


@router.get("/usuarios", response_model=List[UsuarioResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_admin: Usuario = Depends(get_current_admin)
):
    """Lista todos os usuários"""
    return await UserService.get_users(db)


@router.post("/usuarios", response_model=UsuarioResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UsuarioCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: Usuario = Depends(get_current_admin)
):
    """Cria usuário (role diferente de 'admin' vira 'user')"""
    return await UserService.create_user(db, data)


@router.put("/usuarios/{user_id}", response_model=UsuarioResponse)
async def update_user(
    user_id: int,
    data: UsuarioUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: Usuario = Depends(get_current_admin)
):
    """Atualiza somente os campos informados"""
    return await UserService.update_user(db, user_id, data)


@router.delete("/usuarios/{user_id}", response_model=UsuarioDesativadoResponse)
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_admin: Usuario = Depends(get_current_admin)
):
    """Desativa o usuário (não remove do banco)"""
    user = await UserService.deactivate_user(db, user_id)
    return UsuarioDesativadoResponse(
        message="Usuário desativado com sucesso.",
        usuario=UsuarioResponse.model_validate(user),
    )
