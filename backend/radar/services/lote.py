"""Consulta em lote pelo lado cliente.

Lê CNPJs de um arquivo, remove repetidos (mantendo a ordem) e chama
`/consulta-completa?origem=lote` um CNPJ por vez, com pausa fixa entre as
chamadas para respeitar o limite das APIs externas. Falha em um CNPJ vira uma
linha "ERRO" e o lote continua.
"""

import asyncio
import csv
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from radar.core.config import settings
from radar.services.normalizer import normalizar_cnpj

logger = logging.getLogger(__name__)

SITUACAO_ERRO = "ERRO"
CONTRIBUINTE_ERRO = "(erro na consulta)"

# Ordem das colunas no CSV de saída (chaves camelCase da API)
COLUNAS_CSV = [
    "dataConsulta",
    "cnpj",
    "contribuinte",
    "situacao",
    "dataSituacao",
    "submodalidade",
    "razaoSocial",
    "nomeFantasia",
    "municipio",
    "uf",
    "dataConstituicao",
    "regimeTributario",
    "dataOpcaoSimples",
    "capitalSocial",
    "fromCache",
]

Progresso = Callable[[int, int], None]


def deduplicar_cnpjs(cnpjs: Iterable[str]) -> Tuple[List[str], int]:
    """Normaliza e remove CNPJs repetidos mantendo a ordem.

    Retorna (únicos, quantidade de repetidos removidos). Valores sem dígitos
    são descartados sem contar como repetidos.
    """
    vistos = set()
    unicos = []
    removidos = 0
    for cnpj in cnpjs:
        cnpj = normalizar_cnpj(cnpj)
        if not cnpj:
            continue
        if cnpj in vistos:
            removidos += 1
            continue
        vistos.add(cnpj)
        unicos.append(cnpj)
    return unicos, removidos


def ler_cnpjs_arquivo(caminho: Path) -> List[str]:
    """CNPJs da primeira coluna de um CSV (ou um por linha em texto)."""
    cnpjs = []
    with open(caminho, newline="", encoding="utf-8-sig") as f:
        amostra = f.read(2048)
        f.seek(0)
        delimitador = ";" if amostra.count(";") > amostra.count(",") else ","
        for linha in csv.reader(f, delimiter=delimitador):
            if linha and linha[0].strip():
                cnpjs.append(linha[0].strip())
    return cnpjs


def linha_erro(cnpj: str, data_consulta: str = "") -> Dict[str, object]:
    linha = {coluna: "" for coluna in COLUNAS_CSV}
    linha.update(
        cnpj=cnpj,
        dataConsulta=data_consulta,
        contribuinte=CONTRIBUINTE_ERRO,
        situacao=SITUACAO_ERRO,
        fromCache=False,
    )
    return linha


def precisa_reconsultar(resultado: Dict[str, object]) -> bool:
    """Linha com erro, ou faltando habilitação ou dados cadastrais."""
    if resultado.get("situacao") == SITUACAO_ERRO:
        return True
    tem_habilitacao = any(
        str(resultado.get(campo) or "").strip()
        for campo in ("contribuinte", "dataSituacao", "submodalidade")
    )
    tem_cadastro = bool(str(resultado.get("razaoSocial") or "").strip())
    return not tem_habilitacao or not tem_cadastro


def escrever_csv(resultados: List[Dict[str, object]], caminho: Path) -> None:
    with open(caminho, "w", newline="", encoding="utf-8-sig") as f:
        writer = csv.DictWriter(f, fieldnames=COLUNAS_CSV, delimiter=";", extrasaction="ignore")
        writer.writeheader()
        for resultado in resultados:
            writer.writerow(resultado)


class ConsultaLoteClient:
    """Cliente HTTP da API para consultas em lote."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        delay_segundos: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.delay_segundos = (
            settings.BATCH_DELAY_SECONDS if delay_segundos is None else delay_segundos
        )
        # A consulta completa pode esperar a RADAR até o timeout dela
        self.timeout = timeout or settings.radar_timeout + settings.RECEITAWS_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        )

    async def _pausar(self) -> None:
        if self.delay_segundos > 0:
            await asyncio.sleep(self.delay_segundos)

    async def login(self, email: str, senha: str) -> str:
        """Autentica e guarda o token para as próximas chamadas."""
        async with self._client() as client:
            response = await client.post("/auth/login", json={"email": email, "senha": senha})
            response.raise_for_status()
            self.token = response.json()["token"]
        return self.token

    async def consultar(
        self,
        client: httpx.AsyncClient,
        cnpj: str,
        force: bool = False,
    ) -> Dict[str, object]:
        params = {"cnpj": cnpj, "origem": "lote"}
        if force:
            params["force"] = "1"
        response = await client.get("/consulta-completa", params=params)
        response.raise_for_status()
        return response.json()

    async def processar(
        self,
        cnpjs: Iterable[str],
        force: bool = False,
        progresso: Optional[Progresso] = None,
    ) -> List[Dict[str, object]]:
        """Consulta os CNPJs em sequência; falhas viram linhas ERRO."""
        unicos, removidos = deduplicar_cnpjs(cnpjs)
        total = len(unicos)
        if removidos:
            logger.info(f"[LOTE] {removidos} CNPJ(s) repetido(s) removido(s)")
        logger.info(f"[LOTE] Iniciando consulta de {total} CNPJ(s)")

        resultados = []
        if progresso:
            progresso(0, total)

        async with self._client() as client:
            for i, cnpj in enumerate(unicos, start=1):
                try:
                    resultados.append(await self.consultar(client, cnpj, force=force))
                except httpx.HTTPError as e:
                    logger.warning(f"[LOTE] Erro na consulta do CNPJ {cnpj}: {e}")
                    resultados.append(linha_erro(cnpj))

                if progresso:
                    progresso(i, total)
                if i < total:
                    await self._pausar()

        erros = sum(1 for r in resultados if r.get("situacao") == SITUACAO_ERRO)
        logger.info(f"[LOTE] Concluído: {total} consultado(s), {erros} erro(s)")
        return resultados

    async def reconsultar_pendentes(
        self,
        resultados: List[Dict[str, object]],
        progresso: Optional[Progresso] = None,
    ) -> List[Dict[str, object]]:
        """Refaz (com force) as linhas com erro ou incompletas, no próprio lugar."""
        indices = [i for i, r in enumerate(resultados) if precisa_reconsultar(r)]
        if not indices:
            return resultados

        novos = await self.processar(
            [str(resultados[i]["cnpj"]) for i in indices], force=True, progresso=progresso
        )
        por_cnpj = {str(r["cnpj"]): r for r in novos if r.get("situacao") != SITUACAO_ERRO}
        for i in indices:
            novo = por_cnpj.get(normalizar_cnpj(str(resultados[i]["cnpj"])))
            if novo is not None:
                resultados[i] = novo
        return resultados
