"""Testes das funções de formatação e montagem de tabelas."""

from modules import components
from modules.extractor import OrdemServico


def test_fmt_brl():
    assert components.fmt_brl(2098.4) == "2.098,40"
    assert components.fmt_brl(0) == "0,00"
    assert components.fmt_brl(1234567.891) == "1.234.567,89"


def test_fmt_pct_e_periodo():
    assert components.fmt_pct(40.01) == "40,01%"
    assert components.fmt_periodo(2026, 1) == "Janeiro/2026"
    assert components.fmt_periodo(2025, 12) == "Dezembro/2025"


def test_montar_df_mecanicos_ordena_por_valor(relatorio_exemplo):
    mecanicos = tuple(reversed(relatorio_exemplo.mecanicos))
    df = components.montar_df_mecanicos(mecanicos)
    assert list(df["Mecânico"]) == ["JOAO SILVA", "MARIA SOUZA"]
    assert list(df["Nº OS"]) == [3, 2]


def test_montar_df_mecanicos_vazio():
    df = components.montar_df_mecanicos(())
    assert df.empty
    assert "Mecânico" in df.columns


def test_montar_df_ordens():
    df = components.montar_df_ordens([
        OrdemServico("68146", "CLIENTE TESTE", 275.0, 110.0),
        OrdemServico("68147", "", 0.0, 0.0),
    ])
    assert list(df["OS"]) == ["68146", "68147"]
    assert list(df["Cliente"]) == ["CLIENTE TESTE", "—"]
    assert df["Valor Serviço"].sum() == 275.0
