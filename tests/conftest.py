import pytest

from modules import database, extractor, mock_data


@pytest.fixture
def banco_temporario(tmp_path, monkeypatch):
    """Aponta o banco SQLite para um arquivo temporário e cria as tabelas."""
    caminho = tmp_path / "dados" / "comissoes.db"
    monkeypatch.setattr(database, "DB_PATH", str(caminho))
    database.init_database()
    return caminho


@pytest.fixture
def texto_exemplo():
    return mock_data.gerar_texto_relatorio()


@pytest.fixture
def relatorio_exemplo(texto_exemplo):
    return extractor.parse_relatorio_mecanicos(texto_exemplo)
