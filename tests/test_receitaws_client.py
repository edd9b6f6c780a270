# ruff: noqa: S101
"""Tests for the ReceitaWS client."""

from __future__ import annotations

import httpx
import pytest

from radar.core.exceptions import UpstreamError, UpstreamTimeoutError
from radar.services.receitaws_client import (
    REGIME_NORMAL,
    REGIME_SIMPLES,
    SEM_DATA_OPCAO,
    ReceitaWsClient,
    extrair_dados_cadastrais,
)

CNPJ = "11222333000181"

PAYLOAD_OK = {
    "status": "OK",
    "nome": "ACME LTDA",
    "fantasia": "ACME",
    "municipio": "SAO PAULO",
    "uf": "SP",
    "abertura": "01/02/2010",
    "capital_social": "10000.00",
    "simples": {"optante": True, "data_opcao": "01/01/2015"},
}


def _client(handler, **kwargs) -> ReceitaWsClient:
    return ReceitaWsClient(
        base_url="https://receitaws.test/v1/CNPJ",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_consulta_ok() -> None:
    urls = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json=PAYLOAD_OK)

    dados = await _client(handler).consultar(CNPJ)

    assert urls == [f"https://receitaws.test/v1/CNPJ/{CNPJ}"]
    assert dados.razao_social == "ACME LTDA"
    assert dados.nome_fantasia == "ACME"
    assert dados.municipio == "SAO PAULO"
    assert dados.uf == "SP"
    assert dados.data_constituicao == "01/02/2010"
    assert dados.regime_tributario == REGIME_SIMPLES
    assert dados.data_opcao_simples == "01/01/2015"
    assert dados.capital_social == "R$ 10.000,00"


def test_regime_nao_optante() -> None:
    dados = extrair_dados_cadastrais({"nome": "X", "simples": {"optante": False}})

    assert dados.regime_tributario == REGIME_NORMAL
    assert dados.data_opcao_simples == SEM_DATA_OPCAO


def test_regime_sem_informacao_do_simples() -> None:
    dados = extrair_dados_cadastrais({"nome": "X"})

    assert dados.regime_tributario == ""
    assert dados.data_opcao_simples == SEM_DATA_OPCAO


def test_optante_sem_data_opcao() -> None:
    dados = extrair_dados_cadastrais({"simples": {"optante": True}})

    assert dados.regime_tributario == REGIME_SIMPLES
    assert dados.data_opcao_simples == ""


async def test_status_de_erro_no_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "ERROR", "message": "CNPJ inválido"})

    with pytest.raises(UpstreamError) as exc_info:
        await _client(handler).consultar(CNPJ)

    assert exc_info.value.message == "CNPJ inválido"


async def test_http_nao_sucesso() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(UpstreamError):
        await _client(handler).consultar(CNPJ)


async def test_json_invalido() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>erro</html>")

    with pytest.raises(UpstreamError):
        await _client(handler).consultar(CNPJ)


async def test_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timeout", request=request)

    with pytest.raises(UpstreamTimeoutError):
        await _client(handler).consultar(CNPJ)


async def test_sem_retry_por_padrao() -> None:
    chamadas = []

    def handler(request: httpx.Request) -> httpx.Response:
        chamadas.append(request)
        return httpx.Response(429)

    with pytest.raises(UpstreamError):
        await _client(handler, max_tentativas=1).consultar(CNPJ)

    assert len(chamadas) == 1


async def test_retry_em_429_ate_sucesso() -> None:
    respostas = [httpx.Response(429), httpx.Response(503), httpx.Response(200, json=PAYLOAD_OK)]
    chamadas = []

    def handler(request: httpx.Request) -> httpx.Response:
        chamadas.append(request)
        return respostas.pop(0)

    dados = await _client(handler, max_tentativas=3, backoff_segundos=0).consultar(CNPJ)

    assert len(chamadas) == 3
    assert dados.razao_social == "ACME LTDA"


async def test_retry_esgotado() -> None:
    chamadas = []

    def handler(request: httpx.Request) -> httpx.Response:
        chamadas.append(request)
        return httpx.Response(502)

    with pytest.raises(UpstreamError):
        await _client(handler, max_tentativas=2, backoff_segundos=0).consultar(CNPJ)

    assert len(chamadas) == 2
