"""
Schemas Pydantic para usuários e autenticação
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from radar.models.user import UserRole


# ============ Schemas de Autenticação ============

class LoginRequest(BaseModel):
    """Request de login"""
    email: str = Field(..., min_length=1)
    senha: str = Field(..., min_length=1)


class UsuarioToken(BaseModel):
    """Identidade contida no token"""
    id: int
    nome: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """Resposta de login"""
    token: str
    usuario: UsuarioToken


class MeResponse(BaseModel):
    usuario: UsuarioToken


# ============ Schemas de Usuário (painel ADM) ============

class UsuarioCreate(BaseModel):
    """Criação de usuário pelo admin"""
    nome: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    senha: str = Field(..., min_length=1)
    role: Optional[str] = None
    ativo: Optional[bool] = None
    pode_lote: Optional[bool] = None


class UsuarioUpdate(BaseModel):
    """Atualização parcial de usuário pelo admin"""
    nome: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    senha: Optional[str] = None
    role: Optional[str] = None
    ativo: Optional[bool] = None
    pode_lote: Optional[bool] = None


class UsuarioResponse(BaseModel):
    """Resposta de usuário"""
    id: int
    nome: str
    email: str
    role: UserRole
    ativo: bool
    pode_lote: bool
    criado_em: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsuarioDesativadoResponse(BaseModel):
    message: str
    usuario: UsuarioResponse
