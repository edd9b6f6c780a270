"""
Dependencies para autenticação e serviços
"""
from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.database import get_db
from radar.models.user import Usuario
from radar.services import access_gate
from radar.services.consulta_service import ConsultaService
from radar.services.radar_client import RadarClient
from radar.services.receitaws_client import ReceitaWsClient

# auto_error=False: token ausente vira 401 com a mensagem da aplicação
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Usuario:
    """Obtém usuário atual do token"""
    token = credentials.credentials if credentials else None
    return await access_gate.authenticate(db, token)


async def get_current_admin(
    current_user: Usuario = Depends(get_current_user)
) -> Usuario:
    """Obtém usuário admin"""
    return access_gate.require_admin(current_user)


def get_consulta_service() -> ConsultaService:
    """Serviço de consulta com os clientes configurados pelo ambiente"""
    return ConsultaService()


def get_receitaws_client() -> ReceitaWsClient:
    return ReceitaWsClient()


def get_radar_client_factory() -> Callable[[], RadarClient]:
    """Fábrica do cliente RADAR; a criação levanta ConfigurationError sem API_TOKEN/URL_RADAR"""
    return RadarClient
