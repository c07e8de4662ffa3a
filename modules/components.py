"""
Componentes de UI reutilizáveis para a interface Streamlit.

Os componentes de HTML usam classes CSS definidas em assets/styles.css.
As funções montar_df_* só montam DataFrames e não dependem do Streamlit
estar rodando.
"""

import pandas as pd
import streamlit as st

from modules.extractor import fmt_brl


MESES_NOME = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def fmt_pct(valor):
    """40.01 → 40,01%"""
    return f"{fmt_brl(valor)}%"


def fmt_periodo(ano, mes):
    """(2026, 1) → Janeiro/2026"""
    return f"{MESES_NOME[mes - 1]}/{ano}"


def montar_df_mecanicos(mecanicos) -> pd.DataFrame:
    """Tabela resumo: uma linha por mecânico, maior valor de serviços primeiro."""
    colunas = ["Mecânico", "Valor Serviços", "Comissão", "% Comissão", "Nº OS"]
    df = pd.DataFrame(
        [
            {
                "Mecânico": m.mecanico,
                "Valor Serviços": m.valor_servicos,
                "Comissão": m.comissao_total,
                "% Comissão": m.percentual_comissao,
                "Nº OS": m.num_ordens,
            }
            for m in mecanicos
        ],
        columns=colunas,
    )
    if df.empty:
        return df
    return df.sort_values(by="Valor Serviços", ascending=False).reset_index(drop=True)


def montar_df_ordens(ordens) -> pd.DataFrame:
    """Tabela de ordens de serviço de um mecânico, na ordem do relatório."""
    return pd.DataFrame(
        [
            {
                "OS": o.numero_os,
                "Cliente": o.cliente or "—",
                "Valor Serviço": o.valor_servico,
                "Comissão": o.comissao,
            }
            for o in ordens
        ],
        columns=["OS", "Cliente", "Valor Serviço", "Comissão"],
    )


def render_resumo_relatorio(relatorio):
    """Métricas do topo: período, mecânicos e totais gerais."""
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Período", fmt_periodo(relatorio.ano, relatorio.mes))
    with col2:
        st.metric("Mecânicos", len(relatorio.mecanicos))
    with col3:
        st.metric("Total Serviços", f"R$ {fmt_brl(relatorio.total_geral_servicos)}")
    with col4:
        st.metric("Total Comissão", f"R$ {fmt_brl(relatorio.total_geral_comissao)}")


def render_tabela_mecanicos(df: pd.DataFrame):
    """Exibe a tabela resumo com colunas formatadas em reais."""
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Mecânico": st.column_config.TextColumn("Mecânico", width="large"),
            "Valor Serviços": st.column_config.NumberColumn("Valor Serviços", format="R$ %.2f"),
            "Comissão": st.column_config.NumberColumn("Comissão", format="R$ %.2f"),
            "% Comissão": st.column_config.NumberColumn("% Comissão", format="%.2f%%"),
            "Nº OS": st.column_config.NumberColumn("Nº OS", width="small"),
        },
    )


def render_resultado_banner(resultado):
    """Renderiza banner grande com resultado da conferência."""
    classe = {
        "approval": "banner-approval",
        "caveat": "banner-caveat",
        "rejection": "banner-rejection",
    }.get(resultado["tipo"], "banner-caveat")

    html = (
        f'<div class="banner-resultado {classe}">'
        f'{resultado["titulo"]}'
        '</div>'
    )
    st.markdown(html, unsafe_allow_html=True)


def render_findings(ressalvas, conformes):
    """Renderiza listas de ressalvas e pontos conformes."""
    if ressalvas:
        st.markdown("**Ressalvas / Problemas:**")
        for r in ressalvas:
            st.markdown(f"- ⚠️ {r}")
        st.markdown("")

    if conformes:
        st.markdown("**Pontos conformes:**")
        for c in conformes:
            st.markdown(f"- ✅ {c}")
