import pandas as pd
import pytest
import requests

from memory_screen.enrichment import gene_lookup

from .conftest import FakeResponse, FakeSession

GENES = {
    "CG1": {"symbol": "rut", "FLYBASE": "FBgn0003301", "entrezgene": 32546},
    "CG2": {"symbol": "dnc", "FLYBASE": ["FBgn0000479", "FBgn0000480"], "entrezgene": "31327"},
}


def _client(session, **kwargs):
    kwargs.setdefault("retry_wait_ms", 0)
    return gene_lookup.GeneLookupClient(url="http://mygene.test/v3/query", session=session, **kwargs)


def test_parse_hits_first_hit_wins_and_notfound_kept():
    hits = [
        {"query": "CG1", "symbol": "rut", "FLYBASE": "FBgn0003301", "entrezgene": 32546},
        {"query": "CG1", "symbol": "other", "FLYBASE": "FBgn9999999"},
        {"query": "CG2", "symbol": "dnc", "FLYBASE": ["FBgn0000479"], "entrezgene": 31327},
        {"query": "CG404", "notfound": True},
    ]
    df = gene_lookup.parse_hits(hits)
    assert list(df.columns) == gene_lookup.GENE_COLUMNS
    rows = df.set_index("cg_number")
    assert rows.loc["CG1", "gene_symbol"] == "rut"
    assert rows.loc["CG1", "entrez_id"] == "32546"
    assert rows.loc["CG2", "flybase_id"] == "FBgn0000479"
    assert pd.isna(rows.loc["CG404", "flybase_id"])


def test_lookup_batches_requests():
    session = FakeSession(GENES)
    df = _client(session, batch_size=2).lookup(["CG1", "CG2", "CG3"])
    assert [call["q"] for call in session.calls] == ["CG1,CG2", "CG3"]
    assert session.calls[0]["species"] == "fruitfly"
    assert session.calls[0]["scopes"] == "symbol,alias"
    assert df["cg_number"].tolist() == ["CG1", "CG2", "CG3"]
    assert df.set_index("cg_number").loc["CG2", "flybase_id"] == "FBgn0000479"
    assert pd.isna(df.set_index("cg_number").loc["CG3", "gene_symbol"])


def test_lookup_treats_ids_missing_from_response_as_not_found():
    session = FakeSession(responses=[FakeResponse(200, [{"query": "CG1", **GENES["CG1"]}])])
    df = _client(session).lookup(["CG1", "CG7"])
    assert df["cg_number"].tolist() == ["CG1", "CG7"]
    assert pd.isna(df.set_index("cg_number").loc["CG7", "flybase_id"])


def test_query_batch_retries_server_errors():
    session = FakeSession(
        GENES,
        responses=[FakeResponse(503), FakeResponse(429)],
    )
    hits = _client(session).query_batch(["CG1"])
    assert len(session.calls) == 3
    assert hits[0]["symbol"] == "rut"


def test_query_batch_gives_up_after_max_attempts():
    session = FakeSession(responses=[FakeResponse(500)] * 5)
    with pytest.raises(gene_lookup.GeneLookupError):
        _client(session, max_attempts=3).query_batch(["CG1"])
    assert len(session.calls) == 3


def test_query_batch_does_not_retry_client_errors():
    session = FakeSession(responses=[FakeResponse(400)])
    with pytest.raises(gene_lookup.GeneLookupError):
        _client(session).query_batch(["CG1"])
    assert len(session.calls) == 1


def test_query_batch_retries_connection_errors():
    class FlakySession(FakeSession):
        def post(self, url, data=None, timeout=None):
            if not self.calls:
                self.calls.append(data)
                raise requests.ConnectionError("reset")
            return super().post(url, data=data, timeout=timeout)

    session = FlakySession(GENES)
    hits = _client(session).query_batch(["CG2"])
    assert len(session.calls) == 2
    assert hits[0]["symbol"] == "dnc"


def test_lookup_genes_uses_cache(tmp_path):
    cache = tmp_path / "genes.tsv"
    session = FakeSession(GENES)
    first = gene_lookup.lookup_genes(["CG1", "cg 2", None, "CG1"], client=_client(session), cache_path=cache)
    assert first["cg_number"].tolist() == ["CG1", "CG2"]
    assert cache.exists()
    assert len(session.calls) == 1

    class NoNetwork(FakeSession):
        def post(self, *args, **kwargs):
            raise AssertionError("cache should have been used")

    again = gene_lookup.lookup_genes(["CG2", "CG1"], client=_client(NoNetwork()), cache_path=cache)
    assert sorted(again["cg_number"]) == ["CG1", "CG2"]
    assert again.set_index("cg_number").loc["CG1", "entrez_id"] == "32546"


def test_lookup_genes_queries_only_new_ids(tmp_path):
    cache = tmp_path / "genes.tsv"
    session = FakeSession(GENES)
    gene_lookup.lookup_genes(["CG1"], client=_client(session), cache_path=cache)
    gene_lookup.lookup_genes(["CG1", "CG2"], client=_client(session), cache_path=cache)
    assert [call["q"] for call in session.calls] == ["CG1", "CG2"]


def test_attach_gene_ids(caplog):
    lines = pd.DataFrame({"vdrc_id": [101, 102, 103], "cg_number": ["CG1", "CG3", None]})
    genes = pd.DataFrame(
        {
            "cg_number": ["CG1", "CG3"],
            "gene_symbol": ["rut", None],
            "flybase_id": ["FBgn0003301", None],
            "entrez_id": ["32546", None],
        }
    )
    with caplog.at_level("WARNING"):
        result = gene_lookup.attach_gene_ids(lines, genes)
    assert result["gene_symbol"].tolist()[0] == "rut"
    assert len(result) == 3
    assert "1 line(s) with a CG number have no FlyBase id: CG3" in caplog.text
