# ruff: noqa: S101
"""Tests for the result normalization rules."""

from __future__ import annotations

import pytest

from radar.models.consulta import ConsultaRadar
from radar.schemas.consulta import DadosCadastrais, DadosHabilitacao
from radar.services.normalizer import (
    SEM_INFORMACAO,
    SEM_NOME_FANTASIA,
    SITUACAO_NAO_HABILITADA,
    combinar_resultados,
    format_cnpj,
    formatar_capital_social,
    has_no_usable_authorization_fields,
    inferir_nao_habilitada,
    is_cache_stale,
    normalizar_cnpj,
    registro_para_campos,
)


@pytest.mark.parametrize(
    ("entrada", "esperado"),
    [
        ("11.222.333/0001-81", "11222333000181"),
        ("11222333000181", "11222333000181"),
        (" 11 222 333 0001 81 ", "11222333000181"),
        (None, ""),
        ("abc", ""),
    ],
)
def test_normalizar_cnpj(entrada, esperado) -> None:
    assert normalizar_cnpj(entrada) == esperado


@pytest.mark.parametrize("entrada", ["11.222.333/0001-81", "11222333000181", "x1-1"])
def test_normalizar_cnpj_idempotente(entrada) -> None:
    uma_vez = normalizar_cnpj(entrada)
    assert normalizar_cnpj(uma_vez) == uma_vez


def test_format_cnpj() -> None:
    assert format_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_cnpj("123") == "123"


@pytest.mark.parametrize(
    ("entrada", "esperado"),
    [
        ("10000.00", "R$ 10.000,00"),
        ("1234567,8", "R$ 1.234.567,80"),
        (1500, "R$ 1.500,00"),
        ("0", "R$ 0,00"),
        ("abc", "R$ abc"),
        ("1_000", "R$ 1_000"),
        ("1e3", "R$ 1e3"),
        ("nan", "R$ nan"),
        ("-250,5", "R$ -250,50"),
        ("", ""),
        (None, ""),
    ],
)
def test_formatar_capital_social(entrada, esperado) -> None:
    assert formatar_capital_social(entrada) == esperado


def test_inferir_nao_habilitada_com_registro_vazio() -> None:
    resultado = inferir_nao_habilitada(DadosHabilitacao())

    assert resultado.situacao == SITUACAO_NAO_HABILITADA
    assert resultado.data_situacao == ""
    assert resultado.submodalidade == ""


def test_inferir_nao_habilitada_mantem_registro_preenchido() -> None:
    radar = DadosHabilitacao(contribuinte="ACME LTDA", situacao="DEFERIDA")

    assert not has_no_usable_authorization_fields(radar)
    assert inferir_nao_habilitada(radar) == radar


def test_combinar_resultados_radar_falhou() -> None:
    receita = DadosCadastrais(razao_social="ACME LTDA", nome_fantasia="")

    campos = combinar_resultados(None, receita, radar_falhou=True)

    assert campos.situacao == SEM_INFORMACAO
    assert campos.contribuinte == SEM_INFORMACAO
    assert campos.data_situacao == SEM_INFORMACAO
    assert campos.submodalidade == SEM_INFORMACAO
    assert campos.razao_social == "ACME LTDA"
    assert campos.nome_fantasia == SEM_NOME_FANTASIA


def test_combinar_resultados_receita_falhou() -> None:
    radar = DadosHabilitacao(contribuinte="ACME LTDA", situacao="DEFERIDA")

    campos = combinar_resultados(radar, None, radar_falhou=False)

    assert campos.situacao == "DEFERIDA"
    assert campos.razao_social == ""
    # Sem ReceitaWS não há fallback de nome fantasia
    assert campos.nome_fantasia == ""


def test_is_cache_stale() -> None:
    podre = ConsultaRadar(cnpj="11222333000181", razao_social="ACME LTDA")
    bom = ConsultaRadar(cnpj="11222333000181", situacao=SITUACAO_NAO_HABILITADA)

    assert is_cache_stale(podre)
    assert not is_cache_stale(bom)


def test_registro_para_campos_troca_none_por_vazio() -> None:
    campos = registro_para_campos(ConsultaRadar(cnpj="11222333000181", uf="SP"))

    assert campos["uf"] == "SP"
    assert campos["situacao"] == ""
    assert "cnpj" not in campos
