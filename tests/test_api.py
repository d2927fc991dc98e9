import json

import pytest

from html2json import api
from html2json.config import Config
from html2json.exceptions import DocumentError, SpecError
from html2json.spec import ObjectSpec

HTML = '<h2>X</h2><div class="tags"><span>a</span><span>b</span></div>'
SPEC_JSON = json.dumps({"title": "h2", "tags": [{"$": ".tags span", "name": "$"}]})


@pytest.fixture(autouse=True)
def reset_extractor(monkeypatch):
    monkeypatch.setattr(api, "_extractor", None)


class TestBindings:
    """Test suite for the init / sync / async binding surface."""

    def test_sync_requires_init(self):
        assert not api.is_initialized()
        with pytest.raises(RuntimeError, match="not initialized"):
            api.extract_sync(HTML, SPEC_JSON)

    def test_init_is_idempotent(self):
        first = api.init()
        second = api.init(Config(parser="html.parser"))
        assert first is second
        assert second.config.parser == "lxml"
        assert api.is_initialized()

    def test_init_with_config(self):
        extractor = api.init(Config(parser="html.parser"))
        assert extractor.config.parser == "html.parser"

    def test_init_checks_parser_backend(self, monkeypatch):
        def missing_backend(parser):
            raise DocumentError(f"Parser backend not available: {parser}")

        monkeypatch.setattr(api, "check_parser", missing_backend)
        with pytest.raises(DocumentError):
            api.init()
        assert not api.is_initialized()

    def test_extract_sync(self):
        api.init()
        result = api.extract_sync(HTML, SPEC_JSON)
        assert json.loads(result) == {"title": "X", "tags": [{"name": "a"}, {"name": "b"}]}

    def test_extract_sync_keeps_unicode(self):
        api.init()
        assert api.extract_sync("<h1>Ñandú</h1>", '{"t": "h1"}') == '{"t": "Ñandú"}'

    def test_extract_sync_invalid_json(self):
        api.init()
        with pytest.raises(SpecError, match="Failed to parse spec JSON"):
            api.extract_sync(HTML, "{broken")

    def test_extract_sync_invalid_spec(self):
        api.init()
        with pytest.raises(SpecError):
            api.extract_sync(HTML, json.dumps({"title": "h2 | nope"}))

    @pytest.mark.asyncio
    async def test_extract_async_initializes(self):
        assert not api.is_initialized()
        result = await api.extract_async(HTML, SPEC_JSON)
        assert api.is_initialized()
        assert json.loads(result)["title"] == "X"

    @pytest.mark.asyncio
    async def test_sync_and_async_agree(self):
        api.init()
        assert await api.extract_async(HTML, SPEC_JSON) == api.extract_sync(HTML, SPEC_JSON)


class TestProgrammaticApi:
    """Test suite for the plain function API."""

    def test_extract(self):
        assert api.extract(HTML, {"title": "h2"}) == {"title": "X"}

    def test_extract_with_config(self):
        assert api.extract(HTML, {"title": "h2"}, Config(parser="html.parser")) == {"title": "X"}

    def test_loads_spec(self):
        node = api.loads_spec('{"$": ".card", "title": "h2"}')
        assert isinstance(node, ObjectSpec)
        assert node.scope.source == ".card"

    def test_extract_does_not_need_init(self):
        api.extract(HTML, {"title": "h2"})
        assert not api.is_initialized()
