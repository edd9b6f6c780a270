"""Regras de normalização dos resultados da consulta.

- Sanitização e formatação de CNPJ.
- Formatação do capital social em reais.
- Inferência de "NÃO HABILITADA" e detecção de cache sem dados de habilitação.
- Montagem do resultado combinado RADAR + ReceitaWS.
"""

import re
from typing import Optional

from radar.models.consulta import CAMPOS_CADASTRAIS, CAMPOS_HABILITACAO, ConsultaRadar
from radar.schemas.consulta import CamposConsulta, DadosCadastrais, DadosHabilitacao

SITUACAO_NAO_HABILITADA = "NÃO HABILITADA"
SEM_INFORMACAO = "Sem informação"
SEM_NOME_FANTASIA = "Sem nome fantasia"

# Inteiro ou decimal com vírgula ou ponto (sem separador de milhar)
NUMERO_DECIMAL = re.compile(r"^-?\d+([.,]\d+)?$")


def normalizar_cnpj(cnpj: Optional[str]) -> str:
    """Remove todos os caracteres não numéricos."""
    return re.sub(r"\D", "", str(cnpj or ""))


def format_cnpj(cnpj: str) -> str:
    """Formata um CNPJ de 14 dígitos para 00.000.000/0000-00."""
    cnpj = normalizar_cnpj(cnpj)
    if len(cnpj) == 14:
        return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:12]}-{cnpj[12:]}"
    return cnpj


def formatar_moeda_brl(valor: float) -> str:
    """1234567.8 -> '1.234.567,80'"""
    texto = f"{valor:,.2f}"
    return texto.replace(",", "_").replace(".", ",").replace("_", ".")


def formatar_capital_social(valor_bruto) -> str:
    """Formata o capital social como 'R$ 1.234,56'.

    Aceita vírgula ou ponto como separador decimal; se não for numérico,
    devolve 'R$ ' + valor original; vazio devolve string vazia.
    """
    if valor_bruto is None or valor_bruto == "":
        return ""
    texto = str(valor_bruto).strip()
    if not NUMERO_DECIMAL.match(texto):
        return f"R$ {valor_bruto}"
    numero = float(texto.replace(",", "."))
    return f"R$ {formatar_moeda_brl(numero)}"


def has_no_usable_authorization_fields(radar: DadosHabilitacao) -> bool:
    """RADAR respondeu, mas sem nenhum campo de habilitação preenchido."""
    return not any(
        (radar.contribuinte, radar.situacao, radar.data_situacao, radar.submodalidade)
    )


def is_cache_stale(registro: ConsultaRadar) -> bool:
    """Cache "podre": registro salvo sem nenhuma informação de habilitação."""
    return not any(getattr(registro, campo) for campo in CAMPOS_HABILITACAO)


def inferir_nao_habilitada(radar: DadosHabilitacao) -> DadosHabilitacao:
    """Resposta vazia da RADAR significa empresa não habilitada."""
    if not has_no_usable_authorization_fields(radar):
        return radar
    return radar.model_copy(
        update={"situacao": SITUACAO_NAO_HABILITADA, "data_situacao": "", "submodalidade": ""}
    )


def nome_fantasia_ou_padrao(receita: Optional[DadosCadastrais]) -> str:
    """Nome fantasia em branco vira 'Sem nome fantasia', só quando a ReceitaWS respondeu."""
    if receita is None:
        return ""
    nome = (receita.nome_fantasia or "").strip()
    return nome or SEM_NOME_FANTASIA


def combinar_resultados(
    radar: Optional[DadosHabilitacao],
    receita: Optional[DadosCadastrais],
    radar_falhou: bool,
) -> CamposConsulta:
    """Junta habilitação e dados cadastrais num único conjunto de campos.

    `radar` já deve ter passado por `inferir_nao_habilitada`. Quando a RADAR
    falhou e a ReceitaWS respondeu, os campos de habilitação recebem
    'Sem informação' para distinguir "não sabemos" de "não habilitada".
    """
    texto_sem_info = SEM_INFORMACAO if radar_falhou and receita is not None else ""

    habilitacao = {
        campo: (getattr(radar, campo) if radar else "") or texto_sem_info
        for campo in ("contribuinte", "situacao", "data_situacao", "submodalidade")
    }
    cadastrais = {campo: (getattr(receita, campo) if receita else "") or "" for campo in CAMPOS_CADASTRAIS}
    cadastrais["nome_fantasia"] = nome_fantasia_ou_padrao(receita)

    return CamposConsulta(**habilitacao, **cadastrais)


def registro_para_campos(registro: ConsultaRadar) -> dict:
    """Campos de um registro salvo, com None convertido em string vazia."""
    return {
        campo: getattr(registro, campo) or ""
        for campo in CAMPOS_HABILITACAO + CAMPOS_CADASTRAIS
    }
