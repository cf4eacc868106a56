"""Tests for building adapters from section declarations."""

import pytest
from clipping.intelligence.sources.feeds import FeedSourceAdapter
from clipping.intelligence.sources.registry import ConfigError, build_adapter, get_all_adapters
from clipping.intelligence.sources.scraper import ScrapeSourceAdapter
from clipping.intelligence.sources.search import SearchClient, SearchSourceAdapter


@pytest.fixture
def search_client(backoff):
    return SearchClient(api_key="k", backoff=backoff)


class TestGetAllAdapters:
    def test_one_adapter_per_section_in_order(self, fresh_config, cache):
        adapters = get_all_adapters(fresh_config, cache=cache)
        assert [a.section_id for a in adapters] == [s["id"] for s in fresh_config.sections]

    def test_adapter_types(self, fresh_config, cache):
        by_id = {a.section_id: a for a in get_all_adapters(fresh_config, cache=cache)}
        assert isinstance(by_id["pncp"], SearchSourceAdapter)
        assert isinstance(by_id["tcu_informativo"], FeedSourceAdapter)
        assert isinstance(by_id["tcesp_noticias"], ScrapeSourceAdapter)

    def test_search_domains_and_authors(self, fresh_config, cache):
        by_id = {a.section_id: a for a in get_all_adapters(fresh_config, cache=cache)}
        decisoes = by_id["decisoes"]
        assert "stj.jus.br" in decisoes.domains
        assert decisoes.domains[-2:] == ["jota.info", "conjur.com.br"]
        assert "Ronny Charles" in by_id["artigos"].prompt
        assert "{authors}" not in by_id["eventos"].prompt

    def test_feed_adapters_share_cache(self, fresh_config, cache):
        by_id = {a.section_id: a for a in get_all_adapters(fresh_config, cache=cache)}
        assert by_id["tcu_informativo"].cache is cache
        assert by_id["tcu_informativo"].cache_key == "tcu-info"
        assert by_id["tcu_noticias"].scraper.cache is cache

    def test_duplicate_ids_rejected(self, fresh_config):
        section = dict(fresh_config.sections[0])
        fresh_config._merge_config({"sections": [section, section]})
        with pytest.raises(ConfigError, match="Duplicate"):
            get_all_adapters(fresh_config)


class TestBuildAdapter:
    def test_unknown_type(self, fresh_config, search_client):
        with pytest.raises(ConfigError, match="unknown type"):
            build_adapter({"id": "x", "type": "ftp"}, fresh_config, None, search_client)

    def test_missing_field(self, fresh_config, search_client):
        with pytest.raises(ConfigError, match="missing field"):
            build_adapter({"id": "x", "type": "feed"}, fresh_config, None, search_client)

    def test_scrape_selectors(self, fresh_config, search_client):
        adapter = build_adapter(
            {
                "id": "x",
                "type": "scrape",
                "name": "X",
                "url": "https://x.gov.br",
                "selectors": {"container": "li", "title": "a", "date": "time"},
            },
            fresh_config,
            None,
            search_client,
        )
        assert adapter.selectors.date == "time"
        assert adapter.name == "X"
