"""Consulta completa: cache + RADAR + ReceitaWS + log de auditoria.

Fluxo de uma consulta:
1. Consulta em lote exige permissão (`pode_lote` ou admin).
2. Limpa registros fora da janela de retenção.
3. Sem `force`, devolve o cache recente, a não ser que esteja sem dados de
   habilitação (cache "podre").
4. Consulta RADAR e ReceitaWS em paralelo; a falha de uma não interrompe a outra.
   As duas falhando -> BadGatewayError (502).
5. Salva o resultado, exceto quando só a ReceitaWS respondeu.
6. Registra uma entrada no log de auditoria.
"""

import asyncio
import logging
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from radar.core.exceptions import BadGatewayError, InvalidInputError, UpstreamError
from radar.models.user import Usuario
from radar.schemas.consulta import ConsultaCompletaResponse, DadosCadastrais, DadosHabilitacao
from radar.services.access_gate import require_batch_permission
from radar.services.audit_service import AuditService
from radar.services.auth_service import AuthService
from radar.services.consulta_store import ConsultaStore
from radar.services.normalizer import (
    combinar_resultados,
    inferir_nao_habilitada,
    is_cache_stale,
    normalizar_cnpj,
    registro_para_campos,
)
from radar.services.radar_client import RadarClient
from radar.services.receitaws_client import ReceitaWsClient

logger = logging.getLogger(__name__)

ORIGEM_UNITARIA = "unitaria"
ORIGEM_LOTE = "lote"

MSG_CACHE = "resposta do cache"
MSG_SALVA = "consulta salva"
MSG_SALVA_SEM_RECEITA = "consulta salva (ReceitaWS falhou, somente dados de habilitação)"
MSG_PARCIAL = "consulta parcial (somente ReceitaWS, não salva no banco)"


def deve_persistir(radar_falhou: bool, receita_respondeu: bool) -> bool:
    """Resultado só com dados cadastrais (RADAR falhou) nunca vai para o cache."""
    return not (radar_falhou and receita_respondeu)


def validar_cnpj(cnpj: Optional[str]) -> str:
    cnpj_limpo = normalizar_cnpj(cnpj)
    if not cnpj_limpo:
        raise InvalidInputError("CNPJ obrigatório")
    if len(cnpj_limpo) != 14:
        raise InvalidInputError("CNPJ inválido. Deve conter 14 dígitos.")
    return cnpj_limpo


class ConsultaService:
    """Orquestra uma consulta completa por CNPJ."""

    def __init__(
        self,
        radar_client: Optional[RadarClient] = None,
        receita_client: Optional[ReceitaWsClient] = None,
    ):
        self._radar_client = radar_client
        self.receita_client = receita_client or ReceitaWsClient()

    @property
    def radar_client(self) -> RadarClient:
        # Criado só na primeira consulta online: sem token/URL levanta ConfigurationError
        if self._radar_client is None:
            self._radar_client = RadarClient()
        return self._radar_client

    async def consulta_completa(
        self,
        db: AsyncSession,
        usuario: Usuario,
        cnpj: Optional[str],
        force: bool = False,
        origem: Optional[str] = None,
        hoje: Optional[date] = None,
    ) -> ConsultaCompletaResponse:
        cnpj = validar_cnpj(cnpj)
        origem = origem or ORIGEM_UNITARIA
        usuario_id = usuario.id

        if origem == ORIGEM_LOTE:
            # Permissão lida do banco: pode ter mudado depois da emissão do token
            require_batch_permission(await AuthService.get_user_by_id(db, usuario_id))

        try:
            return await self._consultar(db, usuario_id, cnpj, force, origem, hoje or date.today())
        except BadGatewayError:
            raise
        except Exception as e:
            logger.error(f"[CONSULTA] Erro na consulta completa do CNPJ {cnpj}: {e}", exc_info=True)
            await db.rollback()
            await AuditService.registrar(db, usuario_id, cnpj, origem, False, str(e) or type(e).__name__)
            raise

    async def _consultar(
        self,
        db: AsyncSession,
        usuario_id: int,
        cnpj: str,
        force: bool,
        origem: str,
        hoje: date,
    ) -> ConsultaCompletaResponse:
        await ConsultaStore.purge_expired(db, hoje)

        if not force:
            cache = await ConsultaStore.get_recent(db, cnpj, hoje)
            if cache is not None:
                if not is_cache_stale(cache):
                    resposta = ConsultaCompletaResponse(
                        from_cache=True,
                        data_consulta=cache.data_consulta,
                        cnpj=cnpj,
                        **registro_para_campos(cache),
                    )
                    await AuditService.registrar(db, usuario_id, cnpj, origem, True, MSG_CACHE)
                    return resposta
                logger.warning(f"[CACHE] Cache ignorado por estar sem dados de habilitação: {cnpj}")

        radar, erro_radar, receita, erro_receita = await self._consultar_apis(cnpj)

        if radar is None and receita is None:
            await AuditService.registrar(
                db, usuario_id, cnpj, origem, False,
                f"RADAR e ReceitaWS não responderam (RADAR: {erro_radar}; ReceitaWS: {erro_receita})",
            )
            raise BadGatewayError("Nenhuma das APIs (RADAR/Receita) respondeu.")

        radar_falhou = radar is None
        if radar is not None:
            radar = inferir_nao_habilitada(radar)

        campos = combinar_resultados(radar, receita, radar_falhou)

        if deve_persistir(radar_falhou, receita is not None):
            registro = await ConsultaStore.save(db, cnpj, campos, hoje)
            data_consulta = registro.data_consulta
            mensagem = MSG_SALVA if receita is not None else MSG_SALVA_SEM_RECEITA
        else:
            logger.info(f"[CONSULTA] Consulta NÃO salva (somente ReceitaWS, RADAR falhou): {cnpj}")
            data_consulta = hoje
            mensagem = MSG_PARCIAL

        await AuditService.registrar(db, usuario_id, cnpj, origem, True, mensagem)

        return ConsultaCompletaResponse(
            from_cache=False,
            data_consulta=data_consulta,
            cnpj=cnpj,
            **campos.model_dump(),
        )

    async def _consultar_apis(
        self, cnpj: str
    ) -> Tuple[Optional[DadosHabilitacao], str, Optional[DadosCadastrais], str]:
        """Chama as duas APIs em paralelo e espera ambas terminarem."""
        radar_client = self.radar_client
        resultado_radar, resultado_receita = await asyncio.gather(
            radar_client.consultar(cnpj),
            self.receita_client.consultar(cnpj),
            return_exceptions=True,
        )

        radar, erro_radar = self._separar(resultado_radar, "RADAR", cnpj)
        receita, erro_receita = self._separar(resultado_receita, "ReceitaWS", cnpj)
        return radar, erro_radar, receita, erro_receita

    @staticmethod
    def _separar(resultado, fonte: str, cnpj: str):
        """(dados, "") em caso de sucesso; (None, mensagem) se a API falhou."""
        if isinstance(resultado, UpstreamError):
            logger.warning(f"[CONSULTA] Falha {fonte} no CNPJ {cnpj}: {resultado.message}")
            return None, resultado.message
        if isinstance(resultado, BaseException):
            raise resultado
        return resultado, ""
