"""
Consulta em lote de CNPJs pela API do Radar.

Lê os CNPJs da primeira coluna de um CSV (ou um por linha), remove repetidos
e consulta um por vez com pausa entre as chamadas (BATCH_DELAY_SECONDS).

Uso:
    python scripts/consulta_lote.py cnpjs.csv --email user@empresa.com.br --senha ... \
        [--api http://localhost:8000] [--saida resultado.csv] [--force] [--reconsultar-erros]

O token também pode vir de --token ou da variável RADAR_TOKEN.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from radar.core.config import settings
from radar.services.lote import SITUACAO_ERRO, ConsultaLoteClient, escrever_csv, ler_cnpjs_arquivo


def mostrar_progresso(processados: int, total: int) -> None:
    perc = round(processados / total * 100) if total else 100
    print(f"\r  Consultas em lote: {processados}/{total} ({perc}%)", end="", flush=True)
    if processados == total:
        print(flush=True)


async def executar(args) -> int:
    cnpjs = ler_cnpjs_arquivo(args.arquivo)
    if not cnpjs:
        print("  Nenhum CNPJ encontrado no arquivo.", flush=True)
        return 1

    client = ConsultaLoteClient(args.api, token=args.token, delay_segundos=args.delay)
    if not client.token:
        if not (args.email and args.senha):
            print("  Informe --token ou --email e --senha.", flush=True)
            return 1
        await client.login(args.email, args.senha)

    resultados = await client.processar(cnpjs, force=args.force, progresso=mostrar_progresso)

    if args.reconsultar_erros:
        print("  Reconsultando erros e registros incompletos...", flush=True)
        resultados = await client.reconsultar_pendentes(resultados, progresso=mostrar_progresso)

    erros = sum(1 for r in resultados if r.get("situacao") == SITUACAO_ERRO)
    print(f"  {len(resultados)} CNPJ(s) consultado(s), {erros} erro(s)", flush=True)

    if args.saida:
        escrever_csv(resultados, args.saida)
        print(f"  Resultado salvo em {args.saida}", flush=True)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Consulta em lote de CNPJs (RADAR + ReceitaWS)")
    parser.add_argument("arquivo", type=Path, help="CSV/TXT com CNPJs na primeira coluna")
    parser.add_argument("--api", default=os.getenv("RADAR_API", "http://localhost:8000"))
    parser.add_argument("--token", default=os.getenv("RADAR_TOKEN"))
    parser.add_argument("--email")
    parser.add_argument("--senha")
    parser.add_argument("--saida", type=Path, help="CSV de saída")
    parser.add_argument("--force", action="store_true", help="Ignorar cache")
    parser.add_argument("--reconsultar-erros", action="store_true",
                        help="Refazer linhas com erro ou incompletas ao final")
    parser.add_argument("--delay", type=float, default=settings.BATCH_DELAY_SECONDS,
                        help="Pausa entre consultas (segundos)")
    args = parser.parse_args()

    print("=" * 60, flush=True)
    print("  CONSULTA EM LOTE - RADAR", flush=True)
    print("=" * 60, flush=True)

    sys.exit(asyncio.run(executar(args)))


if __name__ == "__main__":
    main()
