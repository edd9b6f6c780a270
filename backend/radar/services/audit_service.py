"""Log de auditoria das consultas (tabela consultas_log)."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from radar.models.consulta import ConsultaLog

logger = logging.getLogger(__name__)

ORIGEM_PADRAO = "desconhecida"
ORIGEM_MAX_CHARS = 20


class AuditService:
    """Trilha de auditoria somente escrita; uma entrada por consulta."""

    @staticmethod
    async def registrar(
        db: AsyncSession,
        usuario_id: int,
        cnpj: str,
        origem: Optional[str],
        sucesso: bool,
        mensagem: Optional[str] = None,
    ) -> bool:
        """Grava a entrada de log.

        Falha ao gravar o log não derruba a consulta: o erro é logado e a
        função devolve False.
        """
        entrada = ConsultaLog(
            usuario_id=usuario_id,
            cnpj=cnpj[:14],
            origem=(origem or ORIGEM_PADRAO)[:ORIGEM_MAX_CHARS],
            sucesso=bool(sucesso),
            mensagem=mensagem or None,
        )
        try:
            db.add(entrada)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"[AUDITORIA] Erro ao registrar log de consulta: {e}", exc_info=True)
            await db.rollback()
            return False
        return True
