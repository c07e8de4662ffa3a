# ══════════════════════════════════════════════════════════════════════
# modules/validator.py — Validações do upload e consolidação do resultado
# ══════════════════════════════════════════════════════════════════════
"""
Módulo responsável por:
1. Validar o arquivo enviado (só PDF)
2. Conferir o relatório extraído (mecânicos encontrados, TOTAL GERAL
   batendo com a soma dos mecânicos, contagem de OS)
3. Consolidar os achados num resultado final que decide se o upload
   pode ser gravado

Regras de severidade:
  🟢 conforme  — verificado e aprovado
  ⚠️ ressalva  — sinalização, o usuário decide se grava
  🔴 bloqueio  — o relatório não pode ser gravado
"""

from __future__ import annotations

from modules.extractor import RelatorioMecanicos, fmt_brl

# Diferença aceita entre a soma dos mecânicos e o TOTAL GERAL (arredondamentos)
TOLERANCIA_TOTAL = 0.05


class ArquivoInvalidoError(ValueError):
    """Arquivo enviado não é um PDF."""


# ══════════════════════════════════════════════════════════════════════
# ARQUIVO
# ══════════════════════════════════════════════════════════════════════

def validar_arquivo(nome_arquivo: str | None) -> None:
    """Levanta ArquivoInvalidoError se o arquivo não for .pdf."""
    if not nome_arquivo:
        raise ArquivoInvalidoError("Nenhum arquivo enviado")
    if not nome_arquivo.lower().endswith(".pdf"):
        raise ArquivoInvalidoError("Apenas arquivos PDF são aceitos")


# ══════════════════════════════════════════════════════════════════════
# RELATÓRIO EXTRAÍDO
# ══════════════════════════════════════════════════════════════════════

def _validar_mecanicos_encontrados(relatorio: RelatorioMecanicos) -> list[dict]:
    if not relatorio.mecanicos:
        return [{
            "verificacao": "Mecânicos",
            "descricao": "Nenhum mecânico encontrado no PDF",
            "severidade": "bloqueio",
        }]
    return [{
        "verificacao": "Mecânicos",
        "descricao": f"{len(relatorio.mecanicos)} mecânico(s) encontrado(s) "
                     f"no período {relatorio.mes:02d}/{relatorio.ano}",
        "severidade": "conforme",
    }]


def _validar_total_geral(relatorio: RelatorioMecanicos) -> list[dict]:
    """
    Compara a soma dos mecânicos com a linha TOTAL GERAL.

    Regras:
    - Sem mecânicos → nada a comparar
    - TOTAL GERAL ausente (ambos zerados) → ⚠️ ressalva
    - Soma diferente do total (acima da tolerância) → ⚠️ ressalva
    """
    if not relatorio.mecanicos:
        return []

    if not relatorio.total_geral_servicos and not relatorio.total_geral_comissao:
        return [{
            "verificacao": "TOTAL GERAL",
            "descricao": "Linha TOTAL GERAL não encontrada no PDF — conferir manualmente",
            "severidade": "ressalva",
        }]

    soma_servicos = sum(m.valor_servicos for m in relatorio.mecanicos)
    soma_comissao = sum(m.comissao_total for m in relatorio.mecanicos)

    achados = []
    for rotulo, soma, total in (
        ("serviços", soma_servicos, relatorio.total_geral_servicos),
        ("comissão", soma_comissao, relatorio.total_geral_comissao),
    ):
        if abs(soma - total) > TOLERANCIA_TOTAL:
            achados.append({
                "verificacao": "TOTAL GERAL",
                "descricao": f"Soma de {rotulo} dos mecânicos (R$ {fmt_brl(soma)}) "
                             f"difere do TOTAL GERAL (R$ {fmt_brl(total)})",
                "severidade": "ressalva",
            })
        else:
            achados.append({
                "verificacao": "TOTAL GERAL",
                "descricao": f"Soma de {rotulo} confere com o TOTAL GERAL "
                             f"(R$ {fmt_brl(total)})",
                "severidade": "conforme",
            })
    return achados


def _validar_cada_mecanico(relatorio: RelatorioMecanicos) -> list[dict]:
    """Sinaliza mecânico sem valor de serviços e contagem de OS divergente."""
    achados = []
    for mec in relatorio.mecanicos:
        if mec.valor_servicos == 0:
            achados.append({
                "verificacao": mec.mecanico,
                "descricao": f"{mec.mecanico}: valor de serviços não extraído "
                             "(percentual de comissão zerado)",
                "severidade": "ressalva",
            })
        if mec.num_ordens != len(mec.ordens):
            # Contagem e detalhe usam critérios diferentes; só avisa
            achados.append({
                "verificacao": mec.mecanico,
                "descricao": f"{mec.mecanico}: {mec.num_ordens} OS contadas, "
                             f"{len(mec.ordens)} com detalhe extraído",
                "severidade": "ressalva",
            })
    return achados


def validar_relatorio(relatorio: RelatorioMecanicos) -> dict:
    """
    Consolida as validações do relatório e determina o resultado final.

    Retorna dict com:
        tipo:       "approval" | "caveat" | "rejection"
        titulo:     texto do banner
        ressalvas:  lista de strings descrevendo problemas
        conformes:  lista de strings descrevendo pontos OK
        pode_salvar: False apenas quando há bloqueio
    """
    todos_achados = []
    todos_achados.extend(_validar_mecanicos_encontrados(relatorio))
    todos_achados.extend(_validar_total_geral(relatorio))
    todos_achados.extend(_validar_cada_mecanico(relatorio))

    ressalvas = []
    conformes = []
    tem_bloqueio = False
    tem_ressalva = False

    for achado in todos_achados:
        sev = achado["severidade"]
        if sev == "bloqueio":
            tem_bloqueio = True
            ressalvas.append(achado["descricao"])
        elif sev == "ressalva":
            tem_ressalva = True
            ressalvas.append(achado["descricao"])
        else:
            conformes.append(achado["descricao"])

    if tem_bloqueio:
        tipo = "rejection"
        titulo = "❌ RELATÓRIO NÃO PODE SER GRAVADO"
    elif tem_ressalva:
        tipo = "caveat"
        titulo = "⚠️ RELATÓRIO COM RESSALVAS"
    else:
        tipo = "approval"
        titulo = "✅ RELATÓRIO CONFERIDO"

    return {
        "tipo": tipo,
        "titulo": titulo,
        "ressalvas": ressalvas,
        "conformes": conformes,
        "pode_salvar": not tem_bloqueio,
    }
