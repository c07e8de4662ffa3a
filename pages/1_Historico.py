"""
Página dedicada ao histórico de comissões gravadas.

Permite escolher um período gravado, ver o resumo e as ordens de serviço
de cada mecânico, exportar para CSV, excluir o período e consultar o log
de uploads.
"""

from datetime import datetime, timedelta, timezone

import pandas as pd
import streamlit as st

from modules import components, database

# ── Configuração de fuso horário (Campo Grande-MS: GMT-4) ──────────────
TZ_CAMPO_GRANDE = timezone(timedelta(hours=-4))


def agora_cg() -> datetime:
    """Retorna o datetime atual no fuso horário de Campo Grande (GMT-4)."""
    return datetime.now(TZ_CAMPO_GRANDE)


# ── Configuração da página ──────────────────────────────────────────
st.set_page_config(
    page_title="Histórico — Comissão dos Mecânicos",
    page_icon="📊",
    layout="wide"
)

# ── CSS customizado ─────────────────────────────────────────────────
try:
    with open("assets/styles.css", "r", encoding="utf-8") as f:
        st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
except FileNotFoundError:
    pass  # CSS opcional

# ── Banco de dados ──────────────────────────────────────────────────
database.init_database()

# ── Título ─────────────────────────────────────────────────────────
st.title("📊 Histórico de Comissões")

periodos = database.listar_periodos()

if not periodos:
    st.info("ℹ️ Nenhum relatório de comissões gravado ainda.")
else:
    # ── Seleção do período ──────────────────────────────────────────
    periodo_sel = st.selectbox(
        "Período",
        options=range(len(periodos)),
        format_func=lambda i: (
            f"{components.fmt_periodo(periodos[i]['ano'], periodos[i]['mes'])} "
            f"— {periodos[i]['mecanicos']} mecânico(s)"
        ),
        key="periodo_historico",
    )
    ano = periodos[periodo_sel]["ano"]
    mes = periodos[periodo_sel]["mes"]

    comissoes = database.listar_comissoes(ano, mes)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Mecânicos", len(comissoes))
    with col2:
        st.metric(
            "Total Serviços",
            f"R$ {components.fmt_brl(periodos[periodo_sel]['valor_servicos'] or 0)}",
        )
    with col3:
        st.metric(
            "Total Comissão",
            f"R$ {components.fmt_brl(periodos[periodo_sel]['comissao_total'] or 0)}",
        )

    df = pd.DataFrame([
        {
            "Mecânico": c["mecanico"],
            "Valor Serviços": c["valor_servicos"],
            "Comissão": c["comissao_total"],
            "% Comissão": c["percentual_comissao"],
            "Nº OS": c["num_ordens"],
        }
        for c in comissoes
    ])
    components.render_tabela_mecanicos(df)

    # ── Ordens de serviço ───────────────────────────────────────────
    st.markdown("### 📋 Ordens de serviço")
    mecanico_sel = st.selectbox(
        "Mecânico",
        ["Todos"] + [c["mecanico"] for c in comissoes],
        key="mecanico_historico",
    )
    ordens = database.listar_ordens(
        ano, mes, mecanico=None if mecanico_sel == "Todos" else mecanico_sel
    )
    if ordens:
        df_ordens = pd.DataFrame(ordens).rename(columns={
            "mecanico": "Mecânico",
            "numero_os": "OS",
            "cliente": "Cliente",
            "valor_servico": "Valor Serviço",
            "comissao": "Comissão",
        })
        st.dataframe(df_ordens, use_container_width=True, hide_index=True)
    else:
        st.caption("Nenhuma OS com detalhe gravado para a seleção.")

    # ── Ações ───────────────────────────────────────────────────────
    st.markdown("---")
    st.markdown("### Ações")

    col_acao1, col_acao2 = st.columns(2)

    with col_acao1:
        csv = df.to_csv(index=False, sep=";", decimal=",", encoding="utf-8-sig")
        st.download_button(
            label="📥 Exportar resumo para CSV",
            data=csv,
            file_name=f"comissoes_{ano}_{mes:02d}_{agora_cg().strftime('%Y%m%d_%H%M%S')}.csv",
            mime="text/csv",
            use_container_width=True,
        )

    with col_acao2:
        if st.button("🗑️ Excluir período", use_container_width=True):
            st.session_state.confirmar_exclusao = (ano, mes)

    if st.session_state.get("confirmar_exclusao") == (ano, mes):
        st.warning(
            f"Excluir todas as comissões de {components.fmt_periodo(ano, mes)}?"
        )
        col_sim, col_nao = st.columns(2)
        with col_sim:
            if st.button("Confirmar exclusão", type="primary"):
                database.excluir_periodo(ano, mes)
                st.session_state.pop("confirmar_exclusao", None)
                st.rerun()
        with col_nao:
            if st.button("Cancelar"):
                st.session_state.pop("confirmar_exclusao", None)
                st.rerun()

# ── Log de uploads ──────────────────────────────────────────────────
st.markdown("---")
st.markdown("### 📤 Uploads")

uploads = database.listar_uploads()
if uploads:
    dados_tabela = []
    for up in uploads:
        data_str = "—"
        if up.get("uploaded_at"):
            try:
                dt = datetime.fromisoformat(up["uploaded_at"])
                data_str = dt.strftime("%d/%m/%Y %H:%M")
            except (ValueError, TypeError):
                data_str = str(up["uploaded_at"])[:16]

        periodo = "—"
        if up.get("ano") and up.get("mes"):
            periodo = f"{up['mes']:02d}/{up['ano']}"

        dados_tabela.append({
            "Data": data_str,
            "Arquivo": up["nome_arquivo"],
            "Período": periodo,
            "Status": "🟢 Sucesso" if up["status"] == "sucesso" else "🔴 Erro",
            "Mecânicos": up.get("registros_inseridos") or 0,
            "Erro": up.get("erros") or "",
        })
    st.dataframe(pd.DataFrame(dados_tabela), use_container_width=True, hide_index=True)
else:
    st.caption("Nenhum upload registrado.")

# ── Rodapé ──────────────────────────────────────────────────────────
st.markdown("---")
st.caption("Histórico de Comissões • Fechamento mensal da oficina")
