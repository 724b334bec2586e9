import json

import httpx
import pytest
import respx

from ollama_client.tools.search_ddg import DDGSearcher, SearchResult, parse_search_results

PAGE = """
<div class="web-result">
  <a class="result__a">First title</a>
  <a class="result__url">  example.com/one  </a>
  <a class="result__snippet">First snippet</a>
</div>
<div class="web-result">
  <a class="result__a">Second title</a>
  <a class="result__url">example.com/two</a>
  <a class="result__snippet">Second snippet</a>
</div>
"""


def test_parse_search_results():
    results = parse_search_results(PAGE)
    assert results == [
        SearchResult("First title", "example.com/one", "First snippet"),
        SearchResult("Second title", "example.com/two", "Second snippet"),
    ]


def test_parse_search_results_missing_part_raises():
    with pytest.raises(ValueError):
        parse_search_results('<div class="web-result"><a class="result__a">t</a></div>')


def test_search_result_to_dict_round_trip():
    result = SearchResult("t", "l", "s")
    assert SearchResult(**result.to_dict()) == result


def test_tool_metadata():
    tool = DDGSearcher()
    assert tool.name() == "ddg_searcher"
    assert tool.parameters()["required"] == ["query"]


@pytest.mark.asyncio
async def test_run_requires_query():
    with pytest.raises(ValueError):
        await DDGSearcher().run({"other": "x"})


@pytest.mark.asyncio
async def test_run_searches_and_serializes():
    searcher = DDGSearcher(base_url="https://search.test")
    with respx.mock:
        route = respx.route(host="search.test").mock(return_value=httpx.Response(200, text=PAGE))
        output = await searcher.run({"query": "ollama"})
        request = route.calls.last.request
    assert request.url.path == "/html/"
    assert request.url.params["q"] == "ollama"
    assert json.loads(output) == [r.to_dict() for r in parse_search_results(PAGE)]