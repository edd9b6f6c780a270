"""
Serviço de autenticação e gerenciamento de usuários
"""
from datetime import datetime, timezone
from typing import Optional, List
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func

from radar.models.user import Usuario, UserRole
from radar.core.security import verify_password, get_password_hash, create_access_token
from radar.core.config import settings
from radar.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from radar.schemas.user import UsuarioCreate, UsuarioUpdate

logger = logging.getLogger(__name__)


def _role_final(role: Optional[str]) -> UserRole:
    return UserRole.ADMIN if role == UserRole.ADMIN.value else UserRole.USER


class AuthService:
    """Serviço de autenticação"""

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[Usuario]:
        """Busca usuário por email"""
        result = await db.execute(select(Usuario).where(Usuario.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[Usuario]:
        """Busca usuário por ID"""
        result = await db.execute(select(Usuario).where(Usuario.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_admin_user(db: AsyncSession) -> Optional[Usuario]:
        """Cria usuário admin padrão se a tabela de usuários estiver vazia"""
        total = (await db.execute(select(func.count(Usuario.id)))).scalar() or 0
        if total > 0:
            return None

        admin = Usuario(
            nome=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            senha_hash=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            ativo=True,
            pode_lote=True,
        )

        db.add(admin)
        await db.commit()
        await db.refresh(admin)

        logger.info(f"[AUTH] Usuário ADMIN criado: {admin.email} (altere a senha pelo painel ADM)")
        return admin

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[Usuario]:
        """Autentica usuário ativo"""
        user = await AuthService.get_user_by_email(db, email.strip())

        if not user or not user.ativo:
            return None

        if not verify_password(password, user.senha_hash):
            return None

        return user

    @staticmethod
    async def create_token(db: AsyncSession, user: Usuario) -> str:
        """Cria token de acesso (8h) e atualiza último login"""
        token = create_access_token({
            "sub": str(user.id),
            "id": user.id,
            "nome": user.nome,
            "email": user.email,
            "role": user.role.value,
        })

        user.last_login = datetime.now(timezone.utc)
        await db.commit()

        return token


class UserService:
    """Serviço de gerenciamento de usuários (painel ADM)"""

    @staticmethod
    async def get_users(db: AsyncSession) -> List[Usuario]:
        """Lista todos os usuários"""
        result = await db.execute(select(Usuario).order_by(Usuario.id.asc()))
        return list(result.scalars().all())

    @staticmethod
    async def create_user(db: AsyncSession, data: UsuarioCreate) -> Usuario:
        """Cria usuário; role diferente de 'admin' vira 'user'"""
        user = Usuario(
            nome=data.nome,
            email=data.email,
            senha_hash=get_password_hash(data.senha),
            role=_role_final(data.role),
            ativo=True if data.ativo is None else data.ativo,
            pode_lote=True if data.pode_lote is None else data.pode_lote,
        )
        db.add(user)
        await UserService._commit_unique_email(db)
        await db.refresh(user)
        return user

    @staticmethod
    async def update_user(db: AsyncSession, user_id: int, data: UsuarioUpdate) -> Usuario:
        """Atualiza somente os campos informados"""
        campos = {}
        if data.nome is not None:
            campos["nome"] = data.nome
        if data.email is not None:
            campos["email"] = data.email
        if data.senha:
            campos["senha_hash"] = get_password_hash(data.senha)
        if data.role is not None:
            campos["role"] = _role_final(data.role)
        if data.ativo is not None:
            campos["ativo"] = data.ativo
        if data.pode_lote is not None:
            campos["pode_lote"] = data.pode_lote

        if not campos:
            raise InvalidInputError("Nenhum campo informado para atualização.")

        user = await AuthService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("Usuário não encontrado.")

        for key, value in campos.items():
            setattr(user, key, value)

        await UserService._commit_unique_email(db)
        await db.refresh(user)
        return user

    @staticmethod
    async def deactivate_user(db: AsyncSession, user_id: int) -> Usuario:
        """'Exclui' o usuário desativando-o"""
        user = await AuthService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("Usuário não encontrado.")

        user.ativo = False
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def _commit_unique_email(db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError("Já existe um usuário com esse e-mail.") from e
