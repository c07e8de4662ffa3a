import sqlite3
from datetime import datetime

import streamlit as st

from modules import components, database, extractor, mock_data, validator

# ── Configuração da página ──────────────────────────────────────────
st.set_page_config(
    page_title="Comissão dos Mecânicos — Fechamento",
    page_icon="🔧",
    layout="wide"
)

# ── Banco de dados ──────────────────────────────────────────────────
database.init_database()

# ── CSS customizado ─────────────────────────────────────────────────
try:
    with open("assets/styles.css", "r", encoding="utf-8") as f:
        st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
except FileNotFoundError:
    pass  # CSS opcional


# ══════════════════════════════════════════════════════════════════════
# FUNÇÕES DE PROCESSAMENTO
# ══════════════════════════════════════════════════════════════════════

def _processar_pdf(pdf_file) -> dict:
    """
    Valida o arquivo, extrai o relatório e confere o resultado.

    Retorna dict com "relatorio" e "validacao" em caso de sucesso, ou
    com "erro" (mensagem para o usuário). Erros também vão para o log
    de uploads.
    """
    conteudo = pdf_file.getvalue()
    try:
        validator.validar_arquivo(pdf_file.name)
        relatorio = extractor.extrair_relatorio_mecanicos(conteudo)
    except (validator.ArquivoInvalidoError, extractor.PdfIlegivelError,
            extractor.PeriodoNaoEncontradoError) as e:
        print(f"[UPLOAD] '{pdf_file.name}' recusado: {e}")
        database.registrar_upload(
            nome_arquivo=pdf_file.name,
            tamanho_bytes=len(conteudo),
            status="erro",
            erros=str(e),
        )
        return {"erro": str(e)}

    return {
        "relatorio": relatorio,
        "validacao": validator.validar_relatorio(relatorio),
        "nome_arquivo": pdf_file.name,
        "tamanho_bytes": len(conteudo),
    }


def _salvar_relatorio(dados: dict) -> None:
    """Grava o relatório (substituindo o período) e registra o upload."""
    relatorio = dados["relatorio"]
    try:
        inseridos = database.salvar_relatorio_mecanicos(relatorio)
    except sqlite3.Error as e:
        print(f"[ERRO] Falha ao gravar comissões: {e}")
        database.registrar_upload(
            nome_arquivo=dados["nome_arquivo"],
            tamanho_bytes=dados["tamanho_bytes"],
            status="erro",
            total_registros=len(relatorio.mecanicos),
            erros=str(e),
            ano=relatorio.ano,
            mes=relatorio.mes,
        )
        st.error(f"❌ Erro ao salvar: {e}")
        return

    database.registrar_upload(
        nome_arquivo=dados["nome_arquivo"],
        tamanho_bytes=dados["tamanho_bytes"],
        status="sucesso",
        total_registros=len(relatorio.mecanicos),
        registros_inseridos=inseridos,
        ano=relatorio.ano,
        mes=relatorio.mes,
    )
    st.session_state.relatorio_salvo_id = dados.get("pdf_id")
    st.success(
        f"✅ {inseridos} mecânico(s) gravado(s) para "
        f"{components.fmt_periodo(relatorio.ano, relatorio.mes)}"
    )


# ── Sidebar ─────────────────────────────────────────────────────────
st.sidebar.markdown("### 🔧 Comissão dos Mecânicos")
st.sidebar.markdown("**Fechamento mensal da oficina**")
st.sidebar.divider()

pdf_file = st.sidebar.file_uploader(
    "Arraste o PDF do relatório aqui ou clique para selecionar", type=["pdf"]
)
usar_exemplo = st.sidebar.toggle("Usar relatório de exemplo", value=False)

st.sidebar.divider()

# ── Últimos uploads ─────────────────────────────────────────────────
st.sidebar.markdown("### 📊 Últimos uploads")

uploads = database.listar_uploads(limite=10)
if uploads:
    for up in uploads:
        icone = "🟢" if up["status"] == "sucesso" else "🔴"
        periodo = ""
        if up.get("ano") and up.get("mes"):
            periodo = f" — {up['mes']:02d}/{up['ano']}"
        data_str = ""
        if up.get("uploaded_at"):
            try:
                dt = datetime.fromisoformat(up["uploaded_at"])
                data_str = dt.strftime("%d/%m %H:%M")
            except (ValueError, TypeError):
                data_str = str(up["uploaded_at"])[:16]
        st.sidebar.caption(f"{icone} {up['nome_arquivo'][:30]}{periodo} ({data_str})")
else:
    st.sidebar.markdown("*Nenhum upload ainda*")

st.sidebar.divider()
st.sidebar.markdown("**v1.0.0 — Comissões + Histórico**")


# ══════════════════════════════════════════════════════════════════════
# PROCESSAR PDF
# ══════════════════════════════════════════════════════════════════════
if not pdf_file and not usar_exemplo:
    st.markdown(
        '<div class="estado-vazio">'
        '<div class="icone">📄</div>'
        '<div class="titulo">Faça upload do Relatório de Comissão dos Mecânicos (PDF)</div>'
        '<div class="subtitulo">Formato aceito: PDF exportado do sistema da concessionária</div>'
        '</div>',
        unsafe_allow_html=True
    )
    st.stop()

# Usar file_id (único por upload) para detectar se é um novo PDF
_pdf_id = "exemplo" if not pdf_file else getattr(pdf_file, "file_id", pdf_file.name)
if st.session_state.get("ultimo_pdf_id") != _pdf_id:
    with st.spinner("Lendo e extraindo dados do PDF..."):
        if pdf_file:
            dados = _processar_pdf(pdf_file)
        else:
            relatorio_exemplo = extractor.parse_relatorio_mecanicos(
                mock_data.gerar_texto_relatorio()
            )
            dados = {
                "relatorio": relatorio_exemplo,
                "validacao": validator.validar_relatorio(relatorio_exemplo),
                "nome_arquivo": "exemplo.pdf",
                "tamanho_bytes": 0,
            }
    dados["pdf_id"] = _pdf_id
    st.session_state.resultado_extracao = dados
    st.session_state.ultimo_pdf_id = _pdf_id

dados = st.session_state.resultado_extracao

if "erro" in dados:
    st.error(f"🔴 {dados['erro']}")
    st.stop()

relatorio = dados["relatorio"]
validacao = dados["validacao"]

# ── Resultado da conferência ────────────────────────────────────────
st.title("🔧 Relatório de Comissão dos Mecânicos")
st.caption(f"Arquivo: {dados['nome_arquivo']}")

components.render_resultado_banner(validacao)
components.render_resumo_relatorio(relatorio)

with st.expander("Conferência do relatório", expanded=validacao["tipo"] != "approval"):
    components.render_findings(validacao["ressalvas"], validacao["conformes"])

if not relatorio.mecanicos:
    st.stop()

# ── Tabela resumo ───────────────────────────────────────────────────
st.markdown("### 👷 Mecânicos")
df_mecanicos = components.montar_df_mecanicos(relatorio.mecanicos)
components.render_tabela_mecanicos(df_mecanicos)

# ── Detalhe por mecânico ────────────────────────────────────────────
st.markdown("### 📋 Ordens de serviço")
for mec in relatorio.mecanicos:
    titulo = (
        f"{mec.mecanico} — {len(mec.ordens)} OS — "
        f"R$ {components.fmt_brl(mec.valor_servicos)} "
        f"({components.fmt_pct(mec.percentual_comissao)})"
    )
    with st.expander(titulo, expanded=False):
        df_ordens = components.montar_df_ordens(mec.ordens)
        if df_ordens.empty:
            st.caption("Nenhuma OS com detalhe extraído para este mecânico.")
        else:
            st.dataframe(df_ordens, use_container_width=True, hide_index=True)

# ── Gravar ──────────────────────────────────────────────────────────
st.markdown("---")
ja_salvo = st.session_state.get("relatorio_salvo_id") == dados["pdf_id"]

periodo_fmt = components.fmt_periodo(relatorio.ano, relatorio.mes)
existentes = database.listar_comissoes(relatorio.ano, relatorio.mes)
if existentes and not ja_salvo:
    st.warning(
        f"⚠️ Já existem {len(existentes)} mecânico(s) gravado(s) em {periodo_fmt}. "
        "Ao salvar, os dados do período serão substituídos."
    )

if st.button(
    "💾 Salvar no banco",
    type="primary",
    disabled=not validacao["pode_salvar"] or ja_salvo,
    use_container_width=True,
):
    _salvar_relatorio(dados)

if ja_salvo:
    st.info(f"Relatório de {periodo_fmt} já gravado.")
