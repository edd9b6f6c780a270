"""
Rotas de autenticação
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.database import get_db
from radar.core.exceptions import UnauthorizedError
from radar.models.user import Usuario
from radar.schemas.user import LoginRequest, LoginResponse, MeResponse, UsuarioToken
from radar.services.auth_service import AuthService
from radar.api.deps import get_current_user

router = APIRouter(prefix="/auth", tags=["Autenticação"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Autenticar usuário e retornar o token (válido por 8 horas).
    """
    user = await AuthService.authenticate_user(db, login_data.email, login_data.senha)

    if not user:
        raise UnauthorizedError("Credenciais inválidas.")

    usuario = UsuarioToken.model_validate(user)
    token = await AuthService.create_token(db, user)

    return LoginResponse(token=token, usuario=usuario)


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    current_user: Usuario = Depends(get_current_user)
):
    """Retorna informações do usuário atual"""
    return MeResponse(usuario=UsuarioToken.model_validate(current_user))
