"""Rotas do histórico de consultas salvas."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from radar.api.deps import get_current_user
from radar.core.database import get_db
from radar.core.exceptions import InvalidInputError
from radar.models.user import Usuario
from radar.schemas.consulta import HistoricoDataItem, HistoricoItem
from radar.services.consulta_store import HistoricoService
from radar.services.normalizer import registro_para_campos

router = APIRouter(prefix="/historico", tags=["Histórico"])


@router.get("/datas", response_model=List[HistoricoDataItem])
async def listar_datas(
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    """Datas com consultas salvas e total por data (mais recente primeiro)."""
    return await HistoricoService.listar_datas(db)


@router.get("", response_model=List[HistoricoItem])
async def listar_historico(
    data: Optional[date] = Query(None, description="YYYY-MM-DD"),
    inicio: Optional[date] = Query(None, alias="from"),
    fim: Optional[date] = Query(None, alias="to"),
    registrar_export: Optional[str] = Query(None, alias="registrarExport"),
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    """
    Consultas de uma data (`data`) ou de um intervalo (`from` e `to`).

    Com `registrarExport=1` grava o nome do usuário em `exportado_por`.
    """
    if data:
        inicio = fim = data
    elif not (inicio and fim):
        raise InvalidInputError(
            "Informe ?data=YYYY-MM-DD ou ?from=YYYY-MM-DD&to=YYYY-MM-DD para consultar o histórico."
        )

    exportado_por = current_user.nome if registrar_export == "1" else None
    registros = await HistoricoService.listar(db, inicio, fim, exportado_por)

    return [
        HistoricoItem(
            data_consulta=r.data_consulta,
            cnpj=r.cnpj,
            exportado_por=r.exportado_por or "",
            **registro_para_campos(r),
        )
        for r in registros
    ]
