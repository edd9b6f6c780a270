# ruff: noqa: S101
"""Tests for the consultation engine (cache + upstream adapters + audit)."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import select

from radar.core.config import settings
from radar.core.exceptions import (
    BadGatewayError,
    ConfigurationError,
    ForbiddenError,
    InvalidInputError,
    UpstreamError,
    UpstreamTimeoutError,
)
from radar.models.consulta import ConsultaLog, ConsultaRadar
from radar.models.user import UserRole
from radar.schemas.consulta import CamposConsulta, DadosCadastrais, DadosHabilitacao
from radar.services.consulta_service import (
    MSG_CACHE,
    MSG_PARCIAL,
    MSG_SALVA,
    ORIGEM_LOTE,
    ConsultaService,
    deve_persistir,
)
from radar.services.consulta_store import ConsultaStore
from radar.services.normalizer import SEM_INFORMACAO, SITUACAO_NAO_HABILITADA

CNPJ = "11222333000181"


class StubAdapter:
    """Adapter falso que conta as chamadas."""

    def __init__(self, resultado=None, erro: Exception | None = None) -> None:
        self.resultado = resultado
        self.erro = erro
        self.chamadas: list[str] = []

    async def consultar(self, cnpj: str):
        self.chamadas.append(cnpj)
        if self.erro is not None:
            raise self.erro
        return self.resultado


def _receita() -> DadosCadastrais:
    return DadosCadastrais(razao_social="ACME LTDA", nome_fantasia="ACME", uf="SP")


def _radar() -> DadosHabilitacao:
    return DadosHabilitacao(
        contribuinte="ACME LTDA", situacao="DEFERIDA", data_situacao="10/03/2021",
        submodalidade="Ilimitada",
    )


async def _logs(db) -> list[ConsultaLog]:
    return list((await db.execute(select(ConsultaLog).order_by(ConsultaLog.id))).scalars().all())


async def _registros(db) -> list[ConsultaRadar]:
    return list((await db.execute(select(ConsultaRadar))).scalars().all())


def test_deve_persistir() -> None:
    assert deve_persistir(radar_falhou=False, receita_respondeu=True)
    assert deve_persistir(radar_falhou=False, receita_respondeu=False)
    assert not deve_persistir(radar_falhou=True, receita_respondeu=True)


async def test_registro_vazio_vira_nao_habilitada_e_e_salvo(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    radar = StubAdapter(DadosHabilitacao())
    receita = StubAdapter(_receita())
    service = ConsultaService(radar_client=radar, receita_client=receita)

    resposta = await service.consulta_completa(db, usuario, "11.222.333/0001-81")

    assert resposta.from_cache is False
    assert resposta.cnpj == CNPJ
    assert resposta.situacao == SITUACAO_NAO_HABILITADA
    assert resposta.data_situacao == ""
    assert resposta.submodalidade == ""
    assert resposta.razao_social == "ACME LTDA"
    assert radar.chamadas == [CNPJ]
    assert receita.chamadas == [CNPJ]

    registros = await _registros(db)
    assert len(registros) == 1
    assert registros[0].situacao == SITUACAO_NAO_HABILITADA

    logs = await _logs(db)
    assert [(log.sucesso, log.mensagem, log.origem) for log in logs] == [
        (True, MSG_SALVA, "unitaria")
    ]


async def test_segunda_consulta_vem_do_cache(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    radar = StubAdapter(_radar())
    receita = StubAdapter(_receita())
    service = ConsultaService(radar_client=radar, receita_client=receita)

    primeira = await service.consulta_completa(db, usuario, CNPJ)
    segunda = await service.consulta_completa(db, usuario, CNPJ)

    assert segunda.from_cache is True
    assert len(radar.chamadas) == 1
    assert len(receita.chamadas) == 1
    campos = CamposConsulta.model_fields
    assert {c: getattr(segunda, c) for c in campos} == {c: getattr(primeira, c) for c in campos}
    assert [log.mensagem for log in await _logs(db)] == [MSG_SALVA, MSG_CACHE]


async def test_force_ignora_cache(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    radar = StubAdapter(_radar())
    receita = StubAdapter(_receita())
    service = ConsultaService(radar_client=radar, receita_client=receita)

    await service.consulta_completa(db, usuario, CNPJ)
    resposta = await service.consulta_completa(db, usuario, CNPJ, force=True)

    assert resposta.from_cache is False
    assert len(radar.chamadas) == 2
    assert len(await _registros(db)) == 2


async def test_cache_podre_e_ignorado(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    await ConsultaStore.save(db, CNPJ, CamposConsulta(razao_social="ACME LTDA"))
    radar = StubAdapter(_radar())
    receita = StubAdapter(_receita())
    service = ConsultaService(radar_client=radar, receita_client=receita)

    resposta = await service.consulta_completa(db, usuario, CNPJ)

    assert resposta.from_cache is False
    assert resposta.situacao == "DEFERIDA"
    assert len(radar.chamadas) == 1


async def test_cache_expirado_e_removido_antes_da_leitura(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    antigo = date.today() - timedelta(days=settings.CACHE_DIAS + 1)
    await ConsultaStore.save(db, CNPJ, CamposConsulta(situacao="DEFERIDA"), hoje=antigo)
    service = ConsultaService(radar_client=StubAdapter(_radar()), receita_client=StubAdapter(_receita()))

    resposta = await service.consulta_completa(db, usuario, CNPJ)

    assert resposta.from_cache is False
    assert [r.data_consulta for r in await _registros(db)] == [date.today()]


async def test_radar_falhou_resultado_parcial_nao_e_salvo(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    service = ConsultaService(
        radar_client=StubAdapter(erro=UpstreamTimeoutError("Timeout na RADAR")),
        receita_client=StubAdapter(_receita()),
    )

    resposta = await service.consulta_completa(db, usuario, CNPJ)

    assert resposta.from_cache is False
    assert resposta.data_consulta == date.today()
    assert resposta.situacao == SEM_INFORMACAO
    assert resposta.contribuinte == SEM_INFORMACAO
    assert resposta.razao_social == "ACME LTDA"
    assert await _registros(db) == []
    assert await ConsultaStore.get_recent(db, CNPJ) is None
    assert [(log.sucesso, log.mensagem) for log in await _logs(db)] == [(True, MSG_PARCIAL)]


async def test_resultado_parcial_mantem_cache_anterior(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    service = ConsultaService(radar_client=StubAdapter(_radar()), receita_client=StubAdapter(_receita()))
    await service.consulta_completa(db, usuario, CNPJ)

    service = ConsultaService(
        radar_client=StubAdapter(erro=UpstreamError("HTTP 500")),
        receita_client=StubAdapter(_receita()),
    )
    await service.consulta_completa(db, usuario, CNPJ, force=True)

    registro = await ConsultaStore.get_recent(db, CNPJ)
    assert registro.situacao == "DEFERIDA"
    assert len(await _registros(db)) == 1


async def test_receita_falhou_salva_habilitacao(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    service = ConsultaService(
        radar_client=StubAdapter(_radar()),
        receita_client=StubAdapter(erro=UpstreamError("Erro na ReceitaWS: HTTP 429")),
    )

    resposta = await service.consulta_completa(db, usuario, CNPJ)

    assert resposta.situacao == "DEFERIDA"
    assert resposta.razao_social == ""
    assert resposta.nome_fantasia == ""
    assert len(await _registros(db)) == 1


async def test_duas_apis_falharam(db, criar_usuario) -> None:
    usuario = await criar_usuario()
    service = ConsultaService(
        radar_client=StubAdapter(erro=UpstreamError("HTTP 500")),
        receita_client=StubAdapter(erro=UpstreamError("HTTP 503")),
    )

    with pytest.raises(BadGatewayError) as exc_info:
        await service.consulta_completa(db, usuario, CNPJ)

    assert exc_info.value.status_code == 502
    assert await _registros(db) == []
    logs = await _logs(db)
    assert len(logs) == 1
    assert logs[0].sucesso is False
    assert "RADAR" in logs[0].mensagem and "ReceitaWS" in logs[0].mensagem


async def test_lote_sem_permissao(db, criar_usuario) -> None:
    usuario = await criar_usuario(pode_lote=False)
    radar = StubAdapter(_radar())
    receita = StubAdapter(_receita())
    service = ConsultaService(radar_client=radar, receita_client=receita)

    with pytest.raises(ForbiddenError):
        await service.consulta_completa(db, usuario, CNPJ, origem=ORIGEM_LOTE)

    assert radar.chamadas == []
    assert receita.chamadas == []


async def test_lote_admin_sem_flag(db, criar_usuario) -> None:
    admin = await criar_usuario(role=UserRole.ADMIN, pode_lote=False)
    service = ConsultaService(radar_client=StubAdapter(_radar()), receita_client=StubAdapter(_receita()))

    resposta = await service.consulta_completa(db, admin, CNPJ, origem=ORIGEM_LOTE)

    assert resposta.situacao == "DEFERIDA"
    assert [log.origem for log in await _logs(db)] == [ORIGEM_LOTE]


@pytest.mark.parametrize("cnpj", [None, "", "abc", "1122233300018"])
async def test_cnpj_invalido(db, criar_usuario, cnpj) -> None:
    usuario = await criar_usuario()
    radar = StubAdapter(_radar())
    service = ConsultaService(radar_client=radar, receita_client=StubAdapter(_receita()))

    with pytest.raises(InvalidInputError):
        await service.consulta_completa(db, usuario, cnpj)

    assert radar.chamadas == []


async def test_radar_nao_configurado(db, criar_usuario, monkeypatch) -> None:
    monkeypatch.setattr(settings, "RADAR_API_TOKEN", "")
    monkeypatch.setattr(settings, "RADAR_URL", "")
    usuario = await criar_usuario()
    await ConsultaStore.save(db, CNPJ, CamposConsulta(situacao="DEFERIDA"))
    service = ConsultaService(receita_client=StubAdapter(_receita()))

    # Cache continua atendendo sem a RADAR configurada
    resposta = await service.consulta_completa(db, usuario, CNPJ)
    assert resposta.from_cache is True

    with pytest.raises(ConfigurationError):
        await service.consulta_completa(db, usuario, CNPJ, force=True)

    logs = await _logs(db)
    assert [log.sucesso for log in logs] == [True, False]
