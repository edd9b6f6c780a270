"""Cliente HTTP da ReceitaWS (dados cadastrais por CNPJ)."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from radar.core.config import settings
from radar.core.exceptions import UpstreamError, UpstreamTimeoutError
from radar.schemas.consulta import DadosCadastrais
from radar.services.normalizer import formatar_capital_social

logger = logging.getLogger(__name__)

REGIME_SIMPLES = "Simples Nacional"
REGIME_NORMAL = "Regime Normal (Lucro Real ou Presumido)"
SEM_DATA_OPCAO = "N/A"

# Status que valem nova tentativa (limite de requisições / instabilidade)
STATUS_RETENTAVEIS = {429, 500, 502, 503, 504}


def extrair_dados_cadastrais(d: Dict[str, Any]) -> DadosCadastrais:
    """Converte o payload da ReceitaWS no conjunto fixo de campos cadastrais."""
    regime_tributario = ""
    data_opcao_simples = SEM_DATA_OPCAO

    simples = d.get("simples")
    if isinstance(simples, dict) and isinstance(simples.get("optante"), bool):
        if simples["optante"]:
            regime_tributario = REGIME_SIMPLES
            data_opcao_simples = simples.get("data_opcao") or ""
        else:
            regime_tributario = REGIME_NORMAL

    return DadosCadastrais(
        razao_social=d.get("nome") or "",
        nome_fantasia=d.get("fantasia") or "",
        municipio=d.get("municipio") or "",
        uf=d.get("uf") or "",
        data_constituicao=d.get("abertura") or "",
        regime_tributario=regime_tributario,
        data_opcao_simples=data_opcao_simples,
        capital_social=formatar_capital_social(d.get("capital_social")),
    )


class ReceitaWsClient:
    """Consulta a ReceitaWS com até `max_tentativas` e backoff linear.

    Com `max_tentativas=1` (padrão) não há retry.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tentativas: Optional[int] = None,
        backoff_segundos: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.RECEITAWS_URL).rstrip("/")
        self.timeout = timeout or settings.RECEITAWS_TIMEOUT_SECONDS
        self.max_tentativas = max(1, max_tentativas or settings.RECEITAWS_MAX_ATTEMPTS)
        self.backoff_segundos = (
            settings.RECEITAWS_BACKOFF_SECONDS if backoff_segundos is None else backoff_segundos
        )
        self._transport = transport

    async def consultar(self, cnpj: str) -> DadosCadastrais:
        url = f"{self.base_url}/{cnpj}"

        for tentativa in range(1, self.max_tentativas + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.get(url, headers={"Accept": "application/json"})
            except httpx.TimeoutException as e:
                erro = UpstreamTimeoutError(f"Timeout na ReceitaWS após {self.timeout:.0f}s")
                erro.__cause__ = e
            except httpx.HTTPError as e:
                erro = UpstreamError(f"Erro de conexão com a ReceitaWS: {e}")
                erro.__cause__ = e
            else:
                if response.status_code not in STATUS_RETENTAVEIS:
                    return self._processar_resposta(response)
                erro = UpstreamError(f"Erro na ReceitaWS: HTTP {response.status_code}")

            if tentativa >= self.max_tentativas:
                raise erro

            espera = self.backoff_segundos * tentativa
            logger.warning(
                f"[RECEITAWS] CNPJ {cnpj}: {erro.message}. "
                f"Tentativa {tentativa}/{self.max_tentativas}, aguardando {espera:.1f}s"
            )
            await asyncio.sleep(espera)

    @staticmethod
    def _processar_resposta(response: httpx.Response) -> DadosCadastrais:
        if not response.is_success:
            raise UpstreamError(f"Erro na ReceitaWS: HTTP {response.status_code}")

        try:
            d = response.json()
        except ValueError as e:
            raise UpstreamError("Resposta inválida da ReceitaWS") from e

        if not isinstance(d, dict):
            raise UpstreamError("Resposta inválida da ReceitaWS")

        if d.get("status") and d["status"] != "OK":
            raise UpstreamError(d.get("message") or "Erro na ReceitaWS (status != OK)")

        return extrair_dados_cadastrais(d)
