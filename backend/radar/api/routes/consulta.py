"""Rotas de consulta por CNPJ: consulta completa e acesso direto às APIs externas."""

from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from radar.api.deps import (
    get_consulta_service,
    get_current_user,
    get_radar_client_factory,
    get_receitaws_client,
)
from radar.core.database import get_db
from radar.models.user import Usuario
from radar.schemas.consulta import ConsultaCompletaResponse, DadosCadastrais, DadosHabilitacao
from radar.services.consulta_service import ORIGEM_UNITARIA, ConsultaService, validar_cnpj
from radar.services.radar_client import RadarClient
from radar.services.receitaws_client import ReceitaWsClient

router = APIRouter(tags=["Consulta"])

VALORES_FORCE = ("1", "true")


@router.get("/consulta-completa", response_model=ConsultaCompletaResponse)
async def consulta_completa(
    cnpj: Optional[str] = Query(None, description="CNPJ com ou sem pontuação"),
    force: Optional[str] = Query(None, description="'1' ou 'true' ignora o cache"),
    origem: str = Query(ORIGEM_UNITARIA, description="'unitaria' ou 'lote'"),
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
    service: ConsultaService = Depends(get_consulta_service),
):
    """Consulta RADAR + ReceitaWS com cache de CACHE_DIAS dias."""
    return await service.consulta_completa(
        db,
        current_user,
        cnpj,
        force=(force or "").lower() in VALORES_FORCE,
        origem=origem,
    )


@router.get("/consulta-receitaws", response_model=DadosCadastrais)
async def consulta_receitaws(
    cnpj: Optional[str] = Query(None),
    receita_client: ReceitaWsClient = Depends(get_receitaws_client),
):
    """Dados cadastrais direto da ReceitaWS, sem cache."""
    return await receita_client.consultar(validar_cnpj(cnpj))


@router.get("/consulta-radar", response_model=DadosHabilitacao)
async def consulta_radar(
    cnpj: Optional[str] = Query(None),
    radar_client_factory: Callable[[], RadarClient] = Depends(get_radar_client_factory),
):
    """Habilitação direto da API RADAR, sem cache."""
    cnpj = validar_cnpj(cnpj)
    return await radar_client_factory().consultar(cnpj)
