"""Cliente HTTP da API RADAR (Infosimples) - habilitação Siscomex por CNPJ.

A API pode levar até 300s para responder e já variou o formato do payload:
`data` pode vir como lista, objeto com chave "0" (ou 0) ou o próprio registro,
e cada campo já apareceu com nomes diferentes.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from radar.core.config import settings
from radar.core.exceptions import ConfigurationError, UpstreamError, UpstreamTimeoutError
from radar.schemas.consulta import DadosHabilitacao

logger = logging.getLogger(__name__)

# Nomes aceitos para cada campo, em ordem de preferência (o primeiro preenchido vence).
# Novas variações do schema da API entram aqui.
SINONIMOS_HABILITACAO: Dict[str, Tuple[str, ...]] = {
    "contribuinte": ("contribuinte", "nome_contribuinte", "contr_nome"),
    "situacao": ("situacao", "situacao_habilitacao", "status"),
    "data_situacao": ("data_situacao", "situacao_data", "data_situacao_habilitacao"),
    "submodalidade": ("submodalidade", "submodalidade_texto", "submodalidade_descricao"),
}


def extrair_registro(raw_data: Any) -> Optional[Dict[str, Any]]:
    """Normaliza os formatos conhecidos de `data` para um registro ou None."""
    registro = None
    if isinstance(raw_data, list):
        registro = raw_data[0] if raw_data else None
    elif isinstance(raw_data, dict):
        if raw_data.get(0):
            registro = raw_data[0]
        elif raw_data.get("0"):
            registro = raw_data["0"]
        else:
            registro = raw_data
    return registro if isinstance(registro, dict) else None


def primeiro_valor(registro: Dict[str, Any], nomes: Tuple[str, ...]) -> str:
    for nome in nomes:
        valor = registro.get(nome)
        # Só valores simples; texto em branco não conta como preenchido
        if valor is None or isinstance(valor, (dict, list)):
            continue
        texto = str(valor).strip()
        if texto:
            return texto
    return ""


def extrair_habilitacao(payload: Any) -> DadosHabilitacao:
    raw_data = payload.get("data") if isinstance(payload, dict) else None
    registro = extrair_registro(raw_data)
    if registro is None:
        return DadosHabilitacao(registro_encontrado=False)

    campos = {
        campo: primeiro_valor(registro, nomes)
        for campo, nomes in SINONIMOS_HABILITACAO.items()
    }
    return DadosHabilitacao(**campos)


class RadarClient:
    """Consulta a situação de habilitação na API RADAR."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token or settings.RADAR_API_TOKEN
        self.url = url or settings.RADAR_URL
        if not self.api_token or not self.url:
            raise ConfigurationError(
                "Backend não configurado: defina API_TOKEN e URL_RADAR no ambiente"
            )
        self.timeout = timeout or settings.radar_timeout
        self._transport = transport

    async def consultar(self, cnpj: str) -> DadosHabilitacao:
        form = {
            "cnpj": cnpj,
            "token": self.api_token,
            "timeout": str(int(self.timeout)),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, data=form)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Timeout na RADAR após {self.timeout:.0f}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Erro de conexão com a RADAR: {e}") from e

        if not response.is_success:
            raise UpstreamError(f"Erro na Infosimples RADAR: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("Resposta inválida da RADAR") from e

        dados = extrair_habilitacao(payload)
        if not dados.registro_encontrado:
            logger.info(f"[RADAR] CNPJ {cnpj}: resposta sem registro em 'data'")
        return dados
