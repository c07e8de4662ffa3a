"""
Script para processar todos os PDFs de relatório em tests/ e gerar relatório.

Compara os totais extraídos com o TOTAL GERAL do próprio PDF e com os
resultados esperados documentados abaixo.

Uso: python tests/testar_relatorios.py
"""

import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

# Adicionar diretório raiz ao path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules import extractor, validator

# ── Configuração ──────────────────────────────────────────────────────
TESTS_DIR = Path(__file__).parent
REPORT_DIR = TESTS_DIR / "relatorios"

# Resultados esperados (manualmente documentados após conferência).
# Os PDFs reais não vão para o repositório: coloque o arquivo em tests/ e
# registre aqui o que foi conferido, por exemplo
#   "comissao_mecanicos_2026_01.pdf": {"num_mecanicos": 14, "ano": 2026, "mes": 1},
RESULTADOS_ESPERADOS = {}


def processar_pdf(caminho_pdf: Path) -> dict:
    """Processa um PDF e retorna o resumo dos dados extraídos."""
    print(f"\n{'='*70}")
    print(f"Processando: {caminho_pdf.name}")
    print(f"{'='*70}")

    try:
        relatorio = extractor.extrair_relatorio_mecanicos(caminho_pdf.read_bytes())
    except ValueError as e:
        print(f"  [ERRO] {e}")
        return {
            "arquivo": caminho_pdf.name,
            "sucesso": False,
            "erro": str(e),
            "timestamp": datetime.now().isoformat(),
        }

    validacao = validator.validar_relatorio(relatorio)
    print(f"  {validacao['titulo']}")

    return {
        "arquivo": caminho_pdf.name,
        "sucesso": True,
        "timestamp": datetime.now().isoformat(),
        "ano": relatorio.ano,
        "mes": relatorio.mes,
        "num_mecanicos": len(relatorio.mecanicos),
        "total_geral_servicos": relatorio.total_geral_servicos,
        "total_geral_comissao": relatorio.total_geral_comissao,
        "mecanicos": [
            {
                "mecanico": m.mecanico,
                "valor_servicos": m.valor_servicos,
                "comissao_total": m.comissao_total,
                "percentual_comissao": m.percentual_comissao,
                "num_ordens": m.num_ordens,
                "ordens_extraidas": len(m.ordens),
                "ordens": [asdict(o) for o in m.ordens],
            }
            for m in relatorio.mecanicos
        ],
        "validacao": validacao,
    }


def comparar_resultados(extraido: dict, esperado: dict) -> list[dict]:
    """Compara resultados extraídos com esperados."""
    problemas = []

    if not extraido.get("sucesso"):
        problemas.append({
            "severidade": "erro",
            "campo": "processamento",
            "mensagem": f"Falha ao processar: {extraido.get('erro', 'Erro desconhecido')}",
        })
        return problemas

    for campo in ("num_mecanicos", "ano", "mes"):
        if campo in esperado and extraido.get(campo) != esperado[campo]:
            problemas.append({
                "severidade": "alta",
                "campo": campo,
                "mensagem": f"Esperado {esperado[campo]}, extraído {extraido.get(campo)}",
            })

    return problemas


def gerar_relatorio(resultados: list[dict]) -> str:
    """Gera relatório em formato texto."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    relatorio_path = REPORT_DIR / f"relatorio_testes_{timestamp}.txt"

    with open(relatorio_path, "w", encoding="utf-8") as f:
        f.write("="*70 + "\n")
        f.write("RELATÓRIO DE TESTES - EXTRAÇÃO DE COMISSÕES\n")
        f.write("="*70 + "\n")
        f.write(f"Data: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}\n")
        f.write(f"Total de PDFs testados: {len(resultados)}\n\n")

        com_problema = 0

        for res in resultados:
            f.write("\n" + "-"*70 + "\n")
            f.write(f"Arquivo: {res['arquivo']}\n")
            f.write("-"*70 + "\n")

            if not res.get("sucesso"):
                f.write(f"[ERRO] {res.get('erro', 'Erro desconhecido')}\n")
                com_problema += 1
                continue

            f.write(f"[OK] Período {res['mes']:02d}/{res['ano']}\n")
            f.write(f"Mecânicos: {res['num_mecanicos']}\n")
            for mec in res["mecanicos"]:
                f.write(
                    f"  - {mec['mecanico']}: serviços {mec['valor_servicos']:.2f}, "
                    f"comissão {mec['comissao_total']:.2f} "
                    f"({mec['percentual_comissao']:.2f}%), "
                    f"OS {mec['num_ordens']}/{mec['ordens_extraidas']}\n"
                )

            for ressalva in res["validacao"]["ressalvas"]:
                f.write(f"  ⚠️ {ressalva}\n")

            esperado = RESULTADOS_ESPERADOS.get(res["arquivo"], {})
            problemas = comparar_resultados(res, esperado) if esperado else []
            if problemas or res["validacao"]["ressalvas"]:
                com_problema += 1
            for prob in problemas:
                f.write(f"  [{prob['severidade'].upper()}] {prob['campo']}: {prob['mensagem']}\n")

        f.write("\n" + "="*70 + "\n")
        f.write("RESUMO FINAL\n")
        f.write("="*70 + "\n")
        f.write(f"Total de PDFs: {len(resultados)}\n")
        f.write(f"PDFs com problemas: {com_problema}\n")

    return str(relatorio_path)


def main():
    """Função principal."""
    pdfs = sorted(TESTS_DIR.glob("*.pdf"))
    if not pdfs:
        print("ERRO: Nenhum PDF encontrado em tests/")
        return

    REPORT_DIR.mkdir(exist_ok=True)
    print(f"Encontrados {len(pdfs)} arquivo(s) PDF")

    resultados = [processar_pdf(pdf) for pdf in pdfs]

    relatorio_path = gerar_relatorio(resultados)
    print(f"\nRelatorio gerado: {relatorio_path}")

    json_path = REPORT_DIR / f"resultados_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(resultados, f, ensure_ascii=False, indent=2)
    print(f"JSON salvo: {json_path}")


if __name__ == "__main__":
    main()
