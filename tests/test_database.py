"""Testes da gravação das comissões no SQLite."""

import sqlite3

import pytest

from modules import database, extractor, mock_data
from modules.extractor import (
    ComissaoMecanico,
    OrdemServico,
    PeriodoRelatorio,
    RelatorioMecanicos,
)


def _relatorio(ano, mes, mecanicos):
    return RelatorioMecanicos(periodo=PeriodoRelatorio(ano, mes), mecanicos=tuple(mecanicos))


def _mecanico(nome, valor, comissao, ordens=()):
    return ComissaoMecanico(
        mecanico=nome,
        valor_servicos=valor,
        comissao_total=comissao,
        percentual_comissao=round(comissao / valor * 100, 2) if valor else 0.0,
        num_ordens=len(ordens),
        ordens=tuple(ordens),
    )


def test_init_database_cria_pasta_e_tabelas(banco_temporario):
    assert banco_temporario.exists()
    conn = sqlite3.connect(banco_temporario)
    tabelas = {r[0] for r in conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table'"
    )}
    conn.close()
    assert {"comissoes_mecanicos", "comissoes_mecanicos_detalhe", "upload_logs"} <= tabelas


def test_salvar_relatorio_de_exemplo(banco_temporario, relatorio_exemplo):
    inseridos = database.salvar_relatorio_mecanicos(relatorio_exemplo)
    assert inseridos == 2

    comissoes = database.listar_comissoes(2026, 1)
    assert [c["mecanico"] for c in comissoes] == ["JOAO SILVA", "MARIA SOUZA"]
    assert comissoes[0]["num_ordens"] == 3
    assert comissoes[0]["comissao_total"] == pytest.approx(2098.40)

    ordens = database.listar_ordens(2026, 1, mecanico="JOAO SILVA")
    assert [o["numero_os"] for o in ordens] == ["68146", "68190", "68233"]
    assert len(database.listar_ordens(2026, 1)) == 5


def test_salvar_substitui_o_periodo(banco_temporario):
    database.salvar_relatorio_mecanicos(_relatorio(2026, 1, [
        _mecanico("ANA", 100.0, 30.0, [OrdemServico("70001", "X", 100.0, 30.0)]),
        _mecanico("BRUNO", 200.0, 60.0),
    ]))
    database.salvar_relatorio_mecanicos(_relatorio(2026, 2, [
        _mecanico("ANA", 50.0, 10.0),
    ]))

    # Reenvio de janeiro: substitui só janeiro
    database.salvar_relatorio_mecanicos(_relatorio(2026, 1, [
        _mecanico("CARLA", 300.0, 90.0, [OrdemServico("70100", "Y", 300.0, 90.0)]),
    ]))

    assert [c["mecanico"] for c in database.listar_comissoes(2026, 1)] == ["CARLA"]
    assert [o["numero_os"] for o in database.listar_ordens(2026, 1)] == ["70100"]
    assert [c["mecanico"] for c in database.listar_comissoes(2026, 2)] == ["ANA"]


def test_listar_comissoes_do_ano_ordenado_por_valor(banco_temporario):
    database.salvar_relatorio_mecanicos(_relatorio(2026, 1, [_mecanico("ANA", 100.0, 30.0)]))
    database.salvar_relatorio_mecanicos(_relatorio(2026, 2, [_mecanico("BRUNO", 500.0, 50.0)]))
    database.salvar_relatorio_mecanicos(_relatorio(2025, 12, [_mecanico("CARLA", 900.0, 90.0)]))

    comissoes = database.listar_comissoes(2026)
    assert [(c["mecanico"], c["mes"]) for c in comissoes] == [("BRUNO", 2), ("ANA", 1)]


def test_detalhe_gravado_em_lotes(banco_temporario, monkeypatch):
    monkeypatch.setattr(database, "TAMANHO_LOTE_DETALHE", 3)
    ordens = [OrdemServico(str(70000 + i), f"CLIENTE {i}", 10.0, 1.0) for i in range(7)]
    database.salvar_relatorio_mecanicos(_relatorio(2026, 3, [_mecanico("ANA", 70.0, 7.0, ordens)]))

    gravadas = database.listar_ordens(2026, 3)
    assert [o["numero_os"] for o in gravadas] == [o.numero_os for o in ordens]


def test_falha_na_gravacao_mantem_dados_anteriores(banco_temporario, monkeypatch):
    database.salvar_relatorio_mecanicos(_relatorio(2026, 1, [_mecanico("ANA", 100.0, 30.0)]))

    conn = sqlite3.connect(banco_temporario)
    conn.execute("DROP TABLE comissoes_mecanicos_detalhe")
    conn.commit()
    conn.close()

    with pytest.raises(sqlite3.Error):
        database.salvar_relatorio_mecanicos(_relatorio(2026, 1, [_mecanico("BRUNO", 1.0, 1.0)]))

    assert [c["mecanico"] for c in database.listar_comissoes(2026, 1)] == ["ANA"]


def test_excluir_periodo(banco_temporario, relatorio_exemplo):
    database.salvar_relatorio_mecanicos(relatorio_exemplo)
    assert database.excluir_periodo(2026, 1) == 2
    assert database.listar_comissoes(2026, 1) == []
    assert database.listar_ordens(2026, 1) == []
    assert database.excluir_periodo(2026, 1) == 0


def test_listar_periodos(banco_temporario):
    database.salvar_relatorio_mecanicos(_relatorio(2025, 12, [_mecanico("ANA", 100.0, 30.0)]))
    database.salvar_relatorio_mecanicos(_relatorio(2026, 2, [
        _mecanico("ANA", 100.0, 30.0), _mecanico("BRUNO", 50.0, 5.0),
    ]))

    periodos = database.listar_periodos()
    assert [(p["ano"], p["mes"], p["mecanicos"]) for p in periodos] == [
        (2026, 2, 2), (2025, 12, 1),
    ]
    assert periodos[0]["valor_servicos"] == pytest.approx(150.0)


def test_registrar_e_listar_uploads(banco_temporario):
    id_erro = database.registrar_upload("planilha.xlsx", 120, status="erro",
                                        erros="Apenas arquivos PDF são aceitos")
    id_ok = database.registrar_upload("comissoes.pdf", 2048, status="sucesso",
                                      total_registros=2, registros_inseridos=2,
                                      ano=2026, mes=1)

    uploads = database.listar_uploads()
    assert [u["id"] for u in uploads] == [id_ok, id_erro]
    assert uploads[0]["tipo"] == "mecanicos"
    assert uploads[0]["ano"] == 2026
    assert uploads[1]["erros"] == "Apenas arquivos PDF são aceitos"
    assert len(database.listar_uploads(limite=1)) == 1


def test_ciclo_completo_a_partir_do_texto(banco_temporario):
    texto = mock_data.gerar_texto_relatorio(periodo=(2026, 4))
    relatorio = extractor.parse_relatorio_mecanicos(texto)
    database.salvar_relatorio_mecanicos(relatorio)

    assert [(p["ano"], p["mes"]) for p in database.listar_periodos()] == [(2026, 4)]
