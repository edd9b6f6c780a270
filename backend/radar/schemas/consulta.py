"""Schemas da consulta completa, das APIs externas e do histórico.

No JSON os campos saem em camelCase (``razaoSocial``, ``fromCache``...),
formato consumido pelo front-end.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DadosHabilitacao(CamelModel):
    """Campos de habilitação normalizados da API RADAR."""

    contribuinte: str = ""
    situacao: str = ""
    data_situacao: str = ""
    submodalidade: str = ""
    # False quando o payload não trouxe nenhum registro em `data`
    registro_encontrado: bool = Field(default=True, exclude=True)


class DadosCadastrais(CamelModel):
    """Campos cadastrais normalizados da ReceitaWS."""

    razao_social: str = ""
    nome_fantasia: str = ""
    municipio: str = ""
    uf: str = ""
    data_constituicao: str = ""
    regime_tributario: str = ""
    data_opcao_simples: str = ""
    capital_social: str = ""


class CamposConsulta(DadosCadastrais):
    """União dos campos de habilitação e cadastrais."""

    contribuinte: str = ""
    situacao: str = ""
    data_situacao: str = ""
    submodalidade: str = ""


class ConsultaCompletaResponse(CamposConsulta):
    from_cache: bool
    data_consulta: date
    cnpj: str


class HistoricoItem(CamposConsulta):
    data_consulta: date
    cnpj: str
    exportado_por: str = ""


class HistoricoDataItem(CamelModel):
    data_consulta: date
    total: int
