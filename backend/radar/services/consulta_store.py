"""Cache de consultas (tabela consultas_radar) e histórico."""

import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.config import settings
from radar.models.consulta import ConsultaRadar
from radar.schemas.consulta import CamposConsulta

logger = logging.getLogger(__name__)


def limite_retencao(hoje: Optional[date] = None, dias: Optional[int] = None) -> date:
    """Data mais antiga ainda dentro da janela de retenção."""
    hoje = hoje or date.today()
    dias = settings.CACHE_DIAS if dias is None else dias
    return hoje - timedelta(days=dias)


class ConsultaStore:
    """Leitura/gravação do cache com retenção de CACHE_DIAS dias."""

    @staticmethod
    async def get_recent(
        db: AsyncSession,
        cnpj: str,
        hoje: Optional[date] = None,
        dias: Optional[int] = None,
    ) -> Optional[ConsultaRadar]:
        """Consulta mais recente do CNPJ dentro da janela de retenção."""
        result = await db.execute(
            select(ConsultaRadar)
            .where(
                ConsultaRadar.cnpj == cnpj,
                ConsultaRadar.data_consulta >= limite_retencao(hoje, dias),
            )
            .order_by(ConsultaRadar.data_consulta.desc(), ConsultaRadar.id.desc())
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def save(
        db: AsyncSession,
        cnpj: str,
        campos: CamposConsulta,
        hoje: Optional[date] = None,
    ) -> ConsultaRadar:
        """Grava nova consulta com data de hoje (não verifica duplicidade no dia)."""
        valores = {campo: (valor or None) for campo, valor in campos.model_dump().items()}
        registro = ConsultaRadar(
            cnpj=cnpj,
            data_consulta=hoje or date.today(),
            **valores,
        )
        db.add(registro)
        await db.commit()
        await db.refresh(registro)
        logger.info(f"[CACHE] Consulta salva no banco: {registro.id} {cnpj}")
        return registro

    @staticmethod
    async def purge_expired(
        db: AsyncSession,
        hoje: Optional[date] = None,
        dias: Optional[int] = None,
    ) -> int:
        """Apaga consultas fora da janela de retenção."""
        result = await db.execute(
            delete(ConsultaRadar).where(
                ConsultaRadar.data_consulta < limite_retencao(hoje, dias)
            )
        )
        await db.commit()
        removidos = result.rowcount or 0
        if removidos > 0:
            logger.info(f"[CACHE] Limpeza: {removidos} registro(s) antigo(s) removido(s)")
        return removidos


class HistoricoService:
    """Consultas salvas por data, com registro de exportação."""

    @staticmethod
    async def listar(
        db: AsyncSession,
        inicio: date,
        fim: date,
        exportado_por: Optional[str] = None,
    ) -> List[ConsultaRadar]:
        """Consultas entre `inicio` e `fim` (inclusive).

        Com `exportado_por`, marca os registros com o nome de quem exportou.
        """
        if exportado_por:
            await db.execute(
                update(ConsultaRadar)
                .where(ConsultaRadar.data_consulta.between(inicio, fim))
                .values(exportado_por=exportado_por)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            logger.info(f"[HISTORICO] Exportação {inicio} a {fim} registrada por {exportado_por}")

        result = await db.execute(
            select(ConsultaRadar)
            .where(ConsultaRadar.data_consulta.between(inicio, fim))
            .order_by(ConsultaRadar.data_consulta, ConsultaRadar.cnpj)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def listar_datas(db: AsyncSession) -> List[dict]:
        """Datas com consultas salvas e total por data, mais recente primeiro."""
        result = await db.execute(
            select(ConsultaRadar.data_consulta, func.count(ConsultaRadar.id).label("total"))
            .group_by(ConsultaRadar.data_consulta)
            .order_by(ConsultaRadar.data_consulta.desc())
        )
        return [
            {"data_consulta": row.data_consulta, "total": int(row.total)}
            for row in result.all()
        ]
