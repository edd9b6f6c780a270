"""
Modelo de usuário (identidade consumida pela consulta e pelo painel ADM)
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from radar.core.database import Base
import enum


class UserRole(str, enum.Enum):
    """Tipos de usuário"""
    ADMIN = "admin"
    USER = "user"


class Usuario(Base):
    """Modelo de usuário"""
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(255), nullable=False)
    email = Column(String(120), unique=True, index=True, nullable=False)
    senha_hash = Column(String(255), nullable=False)

    role = Column(
        SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=UserRole.USER,
        nullable=False
    )
    ativo = Column(Boolean, default=True, nullable=False)

    # Permissão para consultas em lote
    pode_lote = Column(Boolean, default=True, nullable=False)

    # Timestamps
    criado_em = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<Usuario {self.email}>"
