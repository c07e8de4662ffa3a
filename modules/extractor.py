"""
Módulo de extração do "Relatório de Comissão dos Mecânicos" (PDF).

Usa pdfplumber para extrair o texto do PDF e regex para reconstruir a
estrutura mecânico → ordens de serviço → cliente/valores a partir do
texto corrido, que chega sem nenhuma marcação de tabela.

O layout observado no texto extraído é, por OS:

    68146                    ← número da OS sozinho na linha
    110,00275,00             ← comissão + valor do serviço concatenados
    15/01/2026               ← data (às vezes ausente)
    TRR ZANFORLIN COM        ← nome do cliente (pode ocupar
    COMBUSTIVEIS LTDA        ←  várias linhas)

e, ao fim de cada mecânico:

    2.098,405.246,01         ← comissão + valor de serviços concatenados
    TOTAL MECÂNICO:
    2.098,40                 ← comissão total

Autor: Sistema de Fechamento — Oficina
"""

import io
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pdfplumber


# ══════════════════════════════════════════════════════════════════════
# CONSTANTES E PADRÕES
# ══════════════════════════════════════════════════════════════════════

# Faixa de numeração das ordens de serviço da oficina
OS_MIN = 60000
OS_MAX = 99999

# Número no formato brasileiro: "1.234,56", "56,00", "0,00"
_NUM_BR = r"\d{1,3}(?:\.\d{3})*,\d{2}"
_RE_NUM_BR = re.compile(_NUM_BR)
_RE_NUM_BR_INICIO = re.compile(rf"^({_NUM_BR})")
# Dois números seguidos: grudados ("2.098,405.246,01") ou separados por
# espaço quando vêm de colunas distintas ("2.098,40 5.246,01")
_RE_DOIS_NUM_BR = re.compile(rf"({_NUM_BR})\s*({_NUM_BR})")

# OS como marcador: 5 dígitos isolados (não grudados em vírgula/ponto,
# para não confundir "110,99650,00" com a OS 99650)
_RE_OS_MARCADOR = re.compile(r"(?<![\d.,])(\d{5})(?![\d.,])")

# OS para contagem: qualquer sequência de 5 dígitos entre fronteiras de palavra
_RE_OS_CONTAGEM = re.compile(r"\b(\d{5})\b")

_RE_DATA = re.compile(r"^\d{2}/\d{2}/\d{4}$")

# Os padrões abaixo rodam sobre o texto sem acentos (ver _sem_acentos)
_RE_TOTAL_MECANICO = re.compile(r"TOTAL\s+MECANICO:", re.IGNORECASE)
_RE_TOTAL_GERAL = re.compile(r"TOTAL\s+GERAL:", re.IGNORECASE)
_RE_CABECALHO_MECANICO = re.compile(r"Mecanico:\s+(.+)", re.IGNORECASE)
_RE_PERIODO = re.compile(
    r"De\s+(\d{2})/(\d{2})/(\d{4})\s+ate", re.IGNORECASE
)
_RE_TOTAL_GERAL_COMISSAO = re.compile(
    rf"TOTAL\s+GERAL:\s*({_NUM_BR})", re.IGNORECASE
)
_RE_TOTAL_GERAL_SERVICOS = re.compile(
    rf"({_NUM_BR})\s*({_NUM_BR})\s*TOTAL\s+GERAL:", re.IGNORECASE
)

# Cabeçalhos de página, títulos corridos, cabeçalhos de coluna e carimbos
# de emissão/versão do sistema da concessionária
PADROES_BOILERPLATE = [
    r"Pagina",
    r"RELATORIO",
    r"EMITIDO",
    r"\w+@",
    r"D\d+$",
    r"Empresa",
    r"finaliza",
    r"N\.\s*OS$",
    r"COMISSAO$",
    r"TOTAL$",
    r"VALOR$",
    r"SERVICOS$",
    r"DATA\s+DE$",
    r"FECHAMENTO$",
    r"VALOR\s+COM",
    r"%\s*COM",
    r"CLIENTE$",
    r"VERSAO",
    r"SANCES",
    r"De\s+\d{2}/\d{2}/\d{4}\s+ate",
]
_RE_BOILERPLATE = re.compile(
    r"^(?:" + "|".join(PADROES_BOILERPLATE) + r")", re.IGNORECASE
)


# ══════════════════════════════════════════════════════════════════════
# ESTRUTURAS DE DADOS
# ══════════════════════════════════════════════════════════════════════

class PeriodoNaoEncontradoError(ValueError):
    """O cabeçalho "De DD/MM/AAAA até ..." não foi encontrado no relatório."""


class PdfIlegivelError(ValueError):
    """O pdfplumber não conseguiu abrir o arquivo enviado."""


class TipoLinha(Enum):
    BOILERPLATE = "boilerplate"
    ORDEM_SERVICO = "ordem_servico"
    DATA = "data"
    VALORES = "valores"
    CABECALHO_MECANICO = "cabecalho_mecanico"
    TOTAL_MECANICO = "total_mecanico"
    TOTAL_GERAL = "total_geral"
    CLIENTE = "cliente"


@dataclass(frozen=True)
class PeriodoRelatorio:
    ano: int
    mes: int


@dataclass(frozen=True)
class OrdemServico:
    numero_os: str
    cliente: str = ""
    valor_servico: float = 0.0
    comissao: float = 0.0


@dataclass(frozen=True)
class ComissaoMecanico:
    """
    Resumo de um mecânico no período.

    num_ordens é contado direto no trecho de texto do mecânico e pode
    diferir de len(ordens): a contagem acha o número mesmo quando o bloco
    da OS não rende um registro.
    """

    mecanico: str
    valor_servicos: float
    comissao_total: float
    percentual_comissao: float
    num_ordens: int
    ordens: tuple[OrdemServico, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RelatorioMecanicos:
    periodo: PeriodoRelatorio
    mecanicos: tuple[ComissaoMecanico, ...] = field(default_factory=tuple)
    total_geral_servicos: float = 0.0
    total_geral_comissao: float = 0.0

    @property
    def ano(self) -> int:
        return self.periodo.ano

    @property
    def mes(self) -> int:
        return self.periodo.mes


# ══════════════════════════════════════════════════════════════════════
# FUNÇÕES PRINCIPAIS
# ══════════════════════════════════════════════════════════════════════

def extrair_relatorio_mecanicos(pdf_bytes: bytes) -> RelatorioMecanicos:
    """
    Recebe o PDF do relatório de comissões (bytes) e retorna o relatório
    estruturado. Levanta PdfIlegivelError se o PDF não abrir e
    PeriodoNaoEncontradoError se não houver período no cabeçalho.
    """
    texto = extrair_texto_pdf(pdf_bytes)
    return parse_relatorio_mecanicos(texto)


def extrair_texto_pdf(pdf_bytes: bytes) -> str:
    """
    Extrai o texto de todas as páginas, na ordem de leitura.
    Cada quebra de página vira uma quebra de linha. Valores de colunas
    diferentes na mesma linha saem separados por espaço ("2.098,40 5.246,01").
    """
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            textos = [pagina.extract_text() or "" for pagina in pdf.pages]
    except Exception as e:
        print(f"[PDF] Falha ao abrir PDF: {e}")
        raise PdfIlegivelError(f"Não foi possível ler o PDF: {e}") from e

    print(f"[PDF] {len(textos)} página(s) lida(s)")
    return "\n".join(textos)


def parse_relatorio_mecanicos(texto: str) -> RelatorioMecanicos:
    """
    Reconstrói o relatório a partir do texto já extraído do PDF.

    Etapas:
      1. período do cabeçalho (obrigatório)
      2. seções de cada mecânico + linha TOTAL MECÂNICO
      3. ordens de serviço dentro do trecho de cada mecânico
      4. linha TOTAL GERAL (opcional)

    Um relatório sem nenhum mecânico volta com a lista vazia; cabe a
    quem chamou tratar isso como erro.
    """
    periodo = _extrair_periodo(texto)
    linhas = texto.split("\n")

    mecanicos = []
    for secao in _agregar_secoes_mecanicos(linhas):
        valor_servicos = secao["valor_servicos"]
        comissao_total = secao["comissao_total"]

        percentual = 0.0
        if valor_servicos != 0:
            percentual = round(comissao_total / valor_servicos * 100, 2)

        mecanicos.append(ComissaoMecanico(
            mecanico=secao["nome"],
            valor_servicos=valor_servicos,
            comissao_total=comissao_total,
            percentual_comissao=percentual,
            num_ordens=_contar_ordens(secao["linhas"]),
            ordens=tuple(_segmentar_ordens(secao["linhas"])),
        ))

    total_servicos, total_comissao = _extrair_total_geral(linhas)

    print(
        f"[MECANICOS] Período {periodo.mes:02d}/{periodo.ano}: "
        f"{len(mecanicos)} mecânico(s) extraído(s)"
    )

    return RelatorioMecanicos(
        periodo=periodo,
        mecanicos=tuple(mecanicos),
        total_geral_servicos=total_servicos,
        total_geral_comissao=total_comissao,
    )


# ══════════════════════════════════════════════════════════════════════
# NÚMEROS NO FORMATO BRASILEIRO
# ══════════════════════════════════════════════════════════════════════

def _parse_valor_br(texto: str) -> float:
    """
    Converte valor monetário no formato brasileiro para float.
    Aceita: '1.999,80', '0,30', '9.000,00'. Valor inválido vira 0.0.
    """
    try:
        return float(texto.strip().replace(".", "").replace(",", "."))
    except (ValueError, AttributeError):
        return 0.0


def fmt_brl(valor: float) -> str:
    """Formata número para padrão brasileiro: 2000.00 → 2.000,00"""
    return f"{valor:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def extrair_numeros_br(texto: str) -> list[float]:
    """
    Extrai todos os números brasileiros da linha, mesmo quando vêm
    grudados: "110,00275,00" → [110.0, 275.0].

    Cada número termina obrigatoriamente em ",XX", então o próximo começa
    logo depois desses dois dígitos.
    """
    return [_parse_valor_br(m.group(0)) for m in _RE_NUM_BR.finditer(texto)]


def _dividir_numeros_concatenados(texto: str) -> Optional[tuple[float, float]]:
    """
    Separa dois números seguidos ("2.098,405.246,01" ou "2.098,40 5.246,01"
    → (2098.4, 5246.01)). Retorna None se a linha não tiver dois números.
    """
    m = _RE_DOIS_NUM_BR.search(texto)
    if not m:
        return None
    return _parse_valor_br(m.group(1)), _parse_valor_br(m.group(2))


# ══════════════════════════════════════════════════════════════════════
# CLASSIFICAÇÃO DE LINHAS
# ══════════════════════════════════════════════════════════════════════

def _sem_acentos(texto: str) -> str:
    """
    Remove acentos: 'MECÂNICO' → 'MECANICO', 'até' → 'ate'.
    Para texto em NFC o resultado tem o mesmo comprimento da entrada.
    """
    decomposto = unicodedata.normalize("NFD", texto)
    return "".join(c for c in decomposto if not unicodedata.combining(c))


def classificar_linha(linha: str) -> TipoLinha:
    """
    Classifica uma linha do texto extraído.

    A ordem dos testes importa: totais antes do cabeçalho (ambos contêm
    "MECÂNICO:"), e boilerplate/OS/data antes do teste genérico de
    valores e do fallback de nome de cliente.
    """
    linha = _sem_acentos(linha.strip())
    if not linha:
        return TipoLinha.BOILERPLATE

    if _RE_TOTAL_MECANICO.search(linha):
        return TipoLinha.TOTAL_MECANICO
    if _RE_TOTAL_GERAL.search(linha):
        return TipoLinha.TOTAL_GERAL
    if _RE_CABECALHO_MECANICO.search(linha):
        return TipoLinha.CABECALHO_MECANICO
    if _RE_BOILERPLATE.match(linha):
        return TipoLinha.BOILERPLATE
    if _numero_os(linha):
        return TipoLinha.ORDEM_SERVICO
    if _RE_DATA.match(linha):
        return TipoLinha.DATA
    if _RE_NUM_BR.search(linha):
        return TipoLinha.VALORES
    return TipoLinha.CLIENTE


def nome_mecanico(linha: str) -> Optional[str]:
    """
    Nome do mecânico em "Mecânico:  NOME", ou None.
    O rótulo é procurado sem acentos, mas o nome volta como está no PDF.
    """
    linha = unicodedata.normalize("NFC", linha.strip())
    m = _RE_CABECALHO_MECANICO.search(_sem_acentos(linha))
    if not m:
        return None
    return linha[m.start(1):].strip() or None


def _numero_os(linha: str) -> Optional[str]:
    """Primeiro número isolado de 5 dígitos dentro da faixa de OS."""
    for m in _RE_OS_MARCADOR.finditer(linha):
        if OS_MIN <= int(m.group(1)) <= OS_MAX:
            return m.group(1)
    return None


def numero_ordem_servico(linha: str) -> Optional[str]:
    """Número da OS se a linha for um marcador de ordem de serviço."""
    if classificar_linha(linha) is not TipoLinha.ORDEM_SERVICO:
        return None
    return _numero_os(linha.strip())


# ══════════════════════════════════════════════════════════════════════
# ORDENS DE SERVIÇO
# ══════════════════════════════════════════════════════════════════════

_FIM_DE_BLOCO = (
    TipoLinha.TOTAL_MECANICO,
    TipoLinha.TOTAL_GERAL,
    TipoLinha.CABECALHO_MECANICO,
)


def _segmentar_ordens(linhas: list[str]) -> list[OrdemServico]:
    """
    Agrupa as linhas do trecho de um mecânico em ordens de serviço.

    O bloco de cada OS vai da linha seguinte ao número até a próxima OS
    (ou o fim do trecho), parando antes em TOTAL ou em novo cabeçalho de
    mecânico. Números entram na fila de valores; texto livre forma o nome
    do cliente. Nos valores, o primeiro é a comissão e o segundo o valor
    do serviço (ordem fixa do layout do relatório).
    """
    tipos = [classificar_linha(linha) for linha in linhas]
    marcadores = []
    for i, linha in enumerate(linhas):
        numero_os = numero_ordem_servico(linha)
        if numero_os:
            marcadores.append((i, numero_os))

    ordens = []
    vistas = set()

    for k, (idx, numero_os) in enumerate(marcadores):
        if numero_os in vistas:
            continue  # OS repetida (quebra de página) — vale a primeira
        vistas.add(numero_os)

        fim = marcadores[k + 1][0] if k + 1 < len(marcadores) else len(linhas)

        partes_cliente = []
        nums = []
        for j in range(idx + 1, fim):
            tipo = tipos[j]
            if tipo in _FIM_DE_BLOCO:
                break
            if tipo is TipoLinha.VALORES:
                nums.extend(extrair_numeros_br(linhas[j]))
            elif tipo is TipoLinha.CLIENTE:
                partes_cliente.append(linhas[j].strip())

        comissao = 0.0
        valor_servico = 0.0
        if len(nums) >= 2:
            comissao, valor_servico = nums[0], nums[1]
        elif len(nums) == 1:
            valor_servico = nums[0]

        ordens.append(OrdemServico(
            numero_os=numero_os,
            cliente=" ".join(partes_cliente).strip(),
            valor_servico=valor_servico,
            comissao=comissao,
        ))

    return ordens


def _contar_ordens(linhas: list[str]) -> int:
    """Conta números distintos de 5 dígitos na faixa de OS em todo o trecho."""
    numeros = set()
    for m in _RE_OS_CONTAGEM.finditer("\n".join(linhas)):
        if OS_MIN <= int(m.group(1)) <= OS_MAX:
            numeros.add(m.group(1))
    return len(numeros)


# ══════════════════════════════════════════════════════════════════════
# SEÇÕES DOS MECÂNICOS
# ══════════════════════════════════════════════════════════════════════

def _cabecalho_anterior(cabecalhos: list[tuple[str, int]],
                        antes_de: int) -> Optional[str]:
    """Nome do cabeçalho de mecânico mais próximo antes da linha dada."""
    for nome, idx in reversed(cabecalhos):
        if idx < antes_de:
            return nome
    return None


def _trechos_mecanico(nome: str, cabecalhos: list[tuple[str, int]],
                      idx_total: int) -> list[tuple[int, int]]:
    """
    Intervalos [início, fim) do mecânico ao longo do documento.

    Um mecânico pode ser interrompido pela quebra de página e reaparecer
    com o mesmo cabeçalho. Cada ocorrência vai até o cabeçalho seguinte de
    outro mecânico, limitada pela linha do TOTAL. Intervalos sobrepostos
    são unidos, para nenhuma linha entrar duas vezes.
    """
    trechos = []
    for pos, (nome_cab, inicio) in enumerate(cabecalhos):
        if nome_cab != nome or inicio >= idx_total:
            continue
        fim = idx_total
        for outro_nome, outro_idx in cabecalhos[pos + 1:]:
            if outro_nome != nome:
                fim = min(fim, outro_idx)
                break
        if trechos and inicio < trechos[-1][1]:
            trechos[-1] = (trechos[-1][0], max(trechos[-1][1], fim))
        else:
            trechos.append((inicio, fim))
    return trechos


def _agregar_secoes_mecanicos(linhas: list[str]) -> list[dict]:
    """
    Localiza cada mecânico e sua linha TOTAL MECÂNICO.

    Retorna, na ordem em que aparecem, dicts com:
        nome, valor_servicos, comissao_total, linhas (trecho do mecânico)
    """
    cabecalhos = []
    totais = []
    for i, linha in enumerate(linhas):
        tipo = classificar_linha(linha)
        if tipo is TipoLinha.CABECALHO_MECANICO:
            nome = nome_mecanico(linha)
            if nome:
                cabecalhos.append((nome, i))
        elif tipo is TipoLinha.TOTAL_MECANICO:
            totais.append(i)

    secoes = {}
    for idx_total in totais:
        # Comissão total: número no início da linha seguinte ao TOTAL
        seguinte = linhas[idx_total + 1].strip() if idx_total + 1 < len(linhas) else ""
        m = _RE_NUM_BR_INICIO.match(seguinte)
        if not m:
            print(f"[MECANICOS] TOTAL na linha {idx_total + 1} sem valor de "
                  "comissão — ignorado")
            continue
        comissao_total = _parse_valor_br(m.group(1))

        dono = _cabecalho_anterior(cabecalhos, idx_total)
        if dono is None:
            print(f"[MECANICOS] TOTAL na linha {idx_total + 1} sem mecânico "
                  "anterior — ignorado")
            continue
        if dono in secoes:
            # Só o primeiro TOTAL de cada mecânico vale
            print(f"[MECANICOS] TOTAL repetido para '{dono}' na linha "
                  f"{idx_total + 1} — ignorado")
            continue

        # Valor de serviços: segundo número grudado na linha anterior ao TOTAL
        anterior = linhas[idx_total - 1].strip() if idx_total > 0 else ""
        par = _dividir_numeros_concatenados(anterior)
        valor_servicos = par[1] if par else 0.0

        trecho = []
        for inicio, fim in _trechos_mecanico(dono, cabecalhos, idx_total):
            trecho.extend(linhas[inicio:fim])

        secoes[dono] = {
            "nome": dono,
            "valor_servicos": valor_servicos,
            "comissao_total": comissao_total,
            "linhas": trecho,
        }

    return list(secoes.values())


# ══════════════════════════════════════════════════════════════════════
# CABEÇALHO E TOTAL GERAL
# ══════════════════════════════════════════════════════════════════════

def _extrair_periodo(texto: str) -> PeriodoRelatorio:
    """Lê mês/ano de "De 01/01/2026 até 31/01/2026"."""
    m = _RE_PERIODO.search(_sem_acentos(texto))
    if not m:
        raise PeriodoNaoEncontradoError("Período não encontrado no PDF")

    mes = int(m.group(2))
    ano = int(m.group(3))
    if not 1 <= mes <= 12:
        raise PeriodoNaoEncontradoError(
            f"Período inválido no PDF: {m.group(1)}/{m.group(2)}/{m.group(3)}"
        )
    return PeriodoRelatorio(ano=ano, mes=mes)


def _extrair_total_geral(linhas: list[str]) -> tuple[float, float]:
    """
    Lê a linha do TOTAL GERAL, que vem inteira numa linha só:
        "67.481,60156.942,75TOTAL GERAL:67.481,60"
    (ou com espaços entre as colunas, conforme o extrator de PDF)
    Retorna (total_servicos, total_comissao); (0.0, 0.0) se não houver.
    """
    for linha in linhas:
        if classificar_linha(linha) is not TipoLinha.TOTAL_GERAL:
            continue
        linha = _sem_acentos(linha)

        total_comissao = 0.0
        m = _RE_TOTAL_GERAL_COMISSAO.search(linha)
        if m:
            total_comissao = _parse_valor_br(m.group(1))

        total_servicos = 0.0
        m = _RE_TOTAL_GERAL_SERVICOS.search(linha)
        if m:
            total_servicos = _parse_valor_br(m.group(2))

        return total_servicos, total_comissao

    return 0.0, 0.0


# ══════════════════════════════════════════════════════════════════════
# FUNÇÃO DE TESTE RÁPIDO
# ══════════════════════════════════════════════════════════════════════

def _imprimir_relatorio(relatorio: RelatorioMecanicos) -> None:
    """Imprime o relatório extraído de forma legível (para debug)."""
    print(f"Período: {relatorio.mes:02d}/{relatorio.ano}")
    for mec in relatorio.mecanicos:
        print(f"  {mec.mecanico}: serviços={mec.valor_servicos:.2f} "
              f"comissão={mec.comissao_total:.2f} "
              f"({mec.percentual_comissao:.2f}%) "
              f"OS={mec.num_ordens}/{len(mec.ordens)}")
        for os_ in mec.ordens:
            print(f"    {os_.numero_os} {os_.cliente[:40]:<40} "
                  f"{os_.valor_servico:>10.2f} {os_.comissao:>10.2f}")
    print(f"TOTAL GERAL: serviços={relatorio.total_geral_servicos:.2f} "
          f"comissão={relatorio.total_geral_comissao:.2f}")


if __name__ == "__main__":
    import sys

    for caminho in sys.argv[1:]:
        print(f"\n{'='*70}")
        print(f"PROCESSANDO: {caminho}")
        print(f"{'='*70}")
        with open(caminho, "rb") as f:
            _imprimir_relatorio(extrair_relatorio_mecanicos(f.read()))
