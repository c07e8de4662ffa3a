"""
Schema do banco de dados SQLite.
Cria as tabelas na primeira execução.

Guarda o resumo de comissão por mecânico e período, o detalhe das ordens
de serviço de cada mecânico e o log dos uploads de PDF.
"""
import os
import sqlite3
from typing import Optional

from modules.extractor import RelatorioMecanicos

DB_PATH = os.environ.get("COMISSOES_DB_PATH", "data/comissoes_mecanicos.db")

# Linhas de detalhe inseridas por executemany
TAMANHO_LOTE_DETALHE = 500

# Uploads exibidos no histórico
LIMITE_UPLOADS = 20


def init_database():
    """Cria o banco e as tabelas se não existirem."""
    pasta = os.path.dirname(DB_PATH)
    if pasta:
        os.makedirs(pasta, exist_ok=True)
    conn = get_connection()
    cursor = conn.cursor()

    # ── Resumo por mecânico e período ────────────────────────────────
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS comissoes_mecanicos (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            mecanico TEXT NOT NULL,
            ano INTEGER NOT NULL,
            mes INTEGER NOT NULL,
            valor_servicos REAL DEFAULT 0,
            comissao_total REAL DEFAULT 0,
            percentual_comissao REAL DEFAULT 0,
            num_ordens INTEGER DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_comissoes_periodo
        ON comissoes_mecanicos (ano, mes)
    """)

    # ── Detalhe das ordens de serviço ────────────────────────────────
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS comissoes_mecanicos_detalhe (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            mecanico TEXT NOT NULL,
            ano INTEGER NOT NULL,
            mes INTEGER NOT NULL,
            numero_os TEXT NOT NULL,
            cliente TEXT,
            valor_servico REAL DEFAULT 0,
            comissao REAL DEFAULT 0
        )
    """)
    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_detalhe_periodo
        ON comissoes_mecanicos_detalhe (ano, mes, mecanico)
    """)

    # ── Log de uploads ───────────────────────────────────────────────
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS upload_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nome_arquivo TEXT NOT NULL,
            tamanho_bytes INTEGER,
            total_registros INTEGER DEFAULT 0,
            registros_inseridos INTEGER DEFAULT 0,
            status TEXT NOT NULL,
            erros TEXT,
            tipo TEXT DEFAULT 'mecanicos',
            ano INTEGER,
            mes INTEGER,
            uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    conn.commit()
    conn.close()


def get_connection():
    """Retorna conexão com o banco."""
    return sqlite3.connect(DB_PATH)


# ══════════════════════════════════════════════════════════════════════
# COMISSÕES DOS MECÂNICOS
# ══════════════════════════════════════════════════════════════════════

def salvar_relatorio_mecanicos(relatorio: RelatorioMecanicos) -> int:
    """
    Grava o relatório extraído, substituindo o que já existia no período.

    Tudo numa transação só: apaga resumo e detalhe de (ano, mes), insere
    um resumo por mecânico e as ordens em lotes de TAMANHO_LOTE_DETALHE.
    Retorna a quantidade de mecânicos inseridos.
    """
    ano, mes = relatorio.ano, relatorio.mes

    resumos = [
        (m.mecanico, ano, mes, m.valor_servicos, m.comissao_total,
         m.percentual_comissao, m.num_ordens)
        for m in relatorio.mecanicos
    ]
    detalhes = [
        (m.mecanico, ano, mes, o.numero_os, o.cliente,
         o.valor_servico, o.comissao)
        for m in relatorio.mecanicos
        for o in m.ordens
    ]

    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM comissoes_mecanicos WHERE ano = ? AND mes = ?",
            (ano, mes),
        )
        cursor.execute(
            "DELETE FROM comissoes_mecanicos_detalhe WHERE ano = ? AND mes = ?",
            (ano, mes),
        )
        cursor.executemany(
            """INSERT INTO comissoes_mecanicos
               (mecanico, ano, mes, valor_servicos, comissao_total,
                percentual_comissao, num_ordens)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            resumos,
        )
        for inicio in range(0, len(detalhes), TAMANHO_LOTE_DETALHE):
            cursor.executemany(
                """INSERT INTO comissoes_mecanicos_detalhe
                   (mecanico, ano, mes, numero_os, cliente,
                    valor_servico, comissao)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                detalhes[inicio:inicio + TAMANHO_LOTE_DETALHE],
            )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()

    print(f"[DB] Comissões {mes:02d}/{ano} salvas — {len(resumos)} mecânico(s), "
          f"{len(detalhes)} OS")
    return len(resumos)


def excluir_periodo(ano: int, mes: int) -> int:
    """
    Exclui resumo e detalhe de um período.
    Retorna quantos resumos de mecânico foram excluídos.
    """
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "DELETE FROM comissoes_mecanicos WHERE ano = ? AND mes = ?",
        (ano, mes),
    )
    excluidos = cursor.rowcount
    cursor.execute(
        "DELETE FROM comissoes_mecanicos_detalhe WHERE ano = ? AND mes = ?",
        (ano, mes),
    )
    conn.commit()
    conn.close()
    return excluidos


def listar_comissoes(ano: int, mes: Optional[int] = None) -> list[dict]:
    """
    Resumos de comissão do ano (e do mês, se informado),
    do maior para o menor valor de serviços.
    """
    sql = """SELECT id, mecanico, ano, mes, valor_servicos, comissao_total,
                    percentual_comissao, num_ordens
             FROM comissoes_mecanicos
             WHERE ano = ?"""
    params: list = [ano]
    if mes is not None:
        sql += " AND mes = ?"
        params.append(mes)
    sql += " ORDER BY valor_servicos DESC"

    conn = get_connection()
    conn.row_factory = sqlite3.Row
    cursor = conn.cursor()
    cursor.execute(sql, params)
    rows = cursor.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def listar_ordens(ano: int, mes: int, mecanico: Optional[str] = None) -> list[dict]:
    """Ordens de serviço do período, na ordem em que foram gravadas."""
    sql = """SELECT mecanico, numero_os, cliente, valor_servico, comissao
             FROM comissoes_mecanicos_detalhe
             WHERE ano = ? AND mes = ?"""
    params: list = [ano, mes]
    if mecanico:
        sql += " AND mecanico = ?"
        params.append(mecanico)
    sql += " ORDER BY id"

    conn = get_connection()
    conn.row_factory = sqlite3.Row
    cursor = conn.cursor()
    cursor.execute(sql, params)
    rows = cursor.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def listar_periodos() -> list[dict]:
    """Períodos (ano, mes) com comissões gravadas, do mais recente ao mais antigo."""
    conn = get_connection()
    conn.row_factory = sqlite3.Row
    cursor = conn.cursor()
    cursor.execute(
        """SELECT ano, mes, COUNT(*) AS mecanicos,
                  SUM(valor_servicos) AS valor_servicos,
                  SUM(comissao_total) AS comissao_total
           FROM comissoes_mecanicos
           GROUP BY ano, mes
           ORDER BY ano DESC, mes DESC"""
    )
    rows = cursor.fetchall()
    conn.close()
    return [dict(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════
# LOG DE UPLOADS
# ══════════════════════════════════════════════════════════════════════

def registrar_upload(
    nome_arquivo: str,
    tamanho_bytes: int,
    status: str,
    total_registros: int = 0,
    registros_inseridos: int = 0,
    erros: Optional[str] = None,
    ano: Optional[int] = None,
    mes: Optional[int] = None,
    tipo: str = "mecanicos",
) -> int:
    """Registra um upload (sucesso ou erro). Retorna o ID do log."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        """INSERT INTO upload_logs
           (nome_arquivo, tamanho_bytes, total_registros, registros_inseridos,
            status, erros, tipo, ano, mes)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (nome_arquivo, tamanho_bytes, total_registros, registros_inseridos,
         status, erros, tipo, ano, mes),
    )
    log_id = cursor.lastrowid
    conn.commit()
    conn.close()

    print(f"[DB] Upload registrado — ID {log_id}, {nome_arquivo} ({status})")
    return log_id


def listar_uploads(limite: int = LIMITE_UPLOADS) -> list[dict]:
    """Últimos uploads, do mais recente ao mais antigo."""
    conn = get_connection()
    conn.row_factory = sqlite3.Row
    cursor = conn.cursor()
    cursor.execute(
        """SELECT id, nome_arquivo, tamanho_bytes, total_registros,
                  registros_inseridos, status, erros, tipo, ano, mes,
                  uploaded_at
           FROM upload_logs
           ORDER BY uploaded_at DESC, id DESC
           LIMIT ?""",
        (limite,),
    )
    rows = cursor.fetchall()
    conn.close()
    return [dict(r) for r in rows]
