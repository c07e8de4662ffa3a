"""
Dados de exemplo para desenvolvimento da interface e para os testes.

Gera o texto de um "Relatório de Comissão dos Mecânicos" no mesmo
formato que sai da extração do PDF do sistema da concessionária:
números concatenados, nome de cliente quebrado em linhas e cabeçalho
repetido a cada página.
"""

import calendar


PERIODO_EXEMPLO = (2026, 1)

MECANICOS_EXEMPLO = [
    {
        "mecanico": "JOAO SILVA",
        "quebra_pagina_apos": 2,
        "ordens": [
            {"numero_os": "68146", "cliente": "CLIENTE TESTE",
             "valor_servico": 275.00, "comissao": 110.00, "data": "15/01/2026"},
            {"numero_os": "68190", "cliente": "TRR ZANFORLIN COM\nCOMBUSTIVEIS LTDA",
             "valor_servico": 1450.00, "comissao": 580.00, "data": "16/01/2026"},
            {"numero_os": "68233", "cliente": "AUTO PECAS BOA VIAGEM",
             "valor_servico": 3521.01, "comissao": 1408.40, "data": None},
        ],
    },
    {
        "mecanico": "MARIA SOUZA",
        "quebra_pagina_apos": None,
        "ordens": [
            {"numero_os": "70012", "cliente": "TRANSPORTADORA RIO VERDE",
             "valor_servico": 980.00, "comissao": 294.00, "data": "20/01/2026"},
            {"numero_os": "70013", "cliente": "MARCOS ANTONIO PEREIRA",
             "valor_servico": 120.00, "comissao": 36.00, "data": "21/01/2026"},
        ],
    },
]


def _fmt_br(valor: float) -> str:
    """2098.4 → '2.098,40'"""
    return f"{valor:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _cabecalho_pagina(ano: int, mes: int, pagina: int, total_paginas: int) -> list[str]:
    ultimo_dia = calendar.monthrange(ano, mes)[1]
    return [
        "SANCES VEICULOS LTDA",
        "RELATÓRIO DE COMISSÃO DOS MECÂNICOS",
        f"De 01/{mes:02d}/{ano} até {ultimo_dia:02d}/{mes:02d}/{ano}",
        "N. OS",
        "COMISSÃO",
        "VALOR",
        "SERVIÇOS",
        "DATA DE",
        "FECHAMENTO",
        "VALOR COMISSÃO",
        "% COM",
        "CLIENTE",
        f"Página {pagina} de {total_paginas}",
    ]


def _rodape_pagina() -> list[str]:
    return [
        "EMITIDO EM 05/02/2026 10:32",
        "MATEUS@SANCES",
        "VERSÃO 3.2.1",
    ]


def _linhas_ordem(ordem: dict) -> list[str]:
    comissao = ordem.get("comissao", 0.0)
    valor = ordem.get("valor_servico", 0.0)
    percentual = comissao / valor * 100 if valor else 0.0

    linhas = [ordem["numero_os"], f"{_fmt_br(comissao)}{_fmt_br(valor)}"]
    if ordem.get("data"):
        linhas.append(ordem["data"])
    linhas.append(f"{_fmt_br(comissao)}{_fmt_br(percentual)}")
    if ordem.get("cliente"):
        linhas.extend(ordem["cliente"].split("\n"))
    return linhas


def gerar_texto_relatorio(
    mecanicos: list[dict] | None = None,
    periodo: tuple[int, int] = PERIODO_EXEMPLO,
    incluir_total_geral: bool = True,
) -> str:
    """
    Monta o texto do relatório para os mecânicos informados.

    Cada mecânico é um dict com "mecanico", "ordens" e, opcionalmente,
    "quebra_pagina_apos" (índice da OS depois da qual entra uma quebra de
    página, com o cabeçalho do mecânico repetido na página seguinte).
    """
    if mecanicos is None:
        mecanicos = MECANICOS_EXEMPLO
    ano, mes = periodo

    total_paginas = 1 + sum(1 for m in mecanicos if m.get("quebra_pagina_apos"))
    pagina = 1
    linhas = _cabecalho_pagina(ano, mes, pagina, total_paginas)

    total_servicos = 0.0
    total_comissao = 0.0

    for mec in mecanicos:
        nome = mec["mecanico"]
        linhas.append(f"Mecânico:  {nome}")

        soma_valor = 0.0
        soma_comissao = 0.0
        for i, ordem in enumerate(mec["ordens"], start=1):
            linhas.extend(_linhas_ordem(ordem))
            soma_valor += ordem.get("valor_servico", 0.0)
            soma_comissao += ordem.get("comissao", 0.0)

            if mec.get("quebra_pagina_apos") == i and i < len(mec["ordens"]):
                pagina += 1
                linhas.extend(_rodape_pagina())
                linhas.extend(_cabecalho_pagina(ano, mes, pagina, total_paginas))
                linhas.append(f"Mecânico:  {nome}")

        linhas.append(f"{_fmt_br(soma_comissao)}{_fmt_br(soma_valor)}")
        linhas.append("TOTAL MECÂNICO:")
        linhas.append(_fmt_br(soma_comissao))

        total_servicos += soma_valor
        total_comissao += soma_comissao

    if incluir_total_geral:
        linhas.append(
            f"{_fmt_br(total_comissao)}{_fmt_br(total_servicos)}"
            f"TOTAL GERAL:{_fmt_br(total_comissao)}"
        )
    linhas.extend(_rodape_pagina())

    return "\n".join(linhas)
