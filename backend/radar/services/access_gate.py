"""Controle de acesso: autenticação por token e permissões por usuário."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.exceptions import ForbiddenError, UnauthorizedError
from radar.core.security import decode_token
from radar.models.user import Usuario, UserRole
from radar.services.auth_service import AuthService

logger = logging.getLogger(__name__)


async def authenticate(db: AsyncSession, token: Optional[str]) -> Usuario:
    """Token -> usuário; rejeita token ausente, inválido, expirado ou de usuário inativo."""
    if not token:
        raise UnauthorizedError("Token não informado")

    payload = decode_token(token)
    if payload is None:
        raise UnauthorizedError("Token inválido ou expirado")

    user_id = payload.get("sub") or payload.get("id")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise UnauthorizedError("Token inválido ou expirado") from None

    user = await AuthService.get_user_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("Token inválido ou expirado")

    if not user.ativo:
        raise ForbiddenError("Usuário desativado")

    return user


def require_admin(user: Usuario) -> Usuario:
    if user.role != UserRole.ADMIN:
        raise ForbiddenError("Acesso restrito ao administrador")
    return user


def pode_consultar_em_lote(user: Optional[Usuario]) -> bool:
    if user is None or not user.ativo:
        return False
    return bool(user.pode_lote) or user.role == UserRole.ADMIN


def require_batch_permission(user: Optional[Usuario]) -> Usuario:
    """Consulta em lote exige usuário ativo com pode_lote (ou admin)."""
    if user is None or not user.ativo:
        raise ForbiddenError("Usuário inativo ou não encontrado.")
    if not pode_consultar_em_lote(user):
        logger.info(f"[ACESSO] Consulta em lote negada para usuário {user.id}")
        raise ForbiddenError("Você não tem permissão para consultas em lote.")
    return user
