"""Tests for the OpenAI-compatible embedding client."""

import json

import httpx
import pytest

from agent_broker.embedding import Embedder, OpenAIEmbeddingClient
from agent_broker.errors import EmbeddingError


def make_client(handler, model=None) -> OpenAIEmbeddingClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenAIEmbeddingClient("http://embed.local/", dimensions=3, model=model, http_client=http)


def test_embed_orders_by_index():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": [
            {"index": 1, "embedding": [0.4, 0.5, 0.6]},
            {"index": 0, "embedding": [0.1, 0.2, 0.3]},
        ]})

    client = make_client(handler, model="text-embedding-3-small")
    vectors = client.embed(["first", "second"])

    assert vectors == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
    (request,) = requests
    assert request.method == "POST"
    assert request.url == "http://embed.local/v1/embeddings"
    assert json.loads(request.content) == {
        "input": ["first", "second"],
        "model": "text-embedding-3-small",
    }


def test_model_omitted_when_unset():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1, 2, 3]}]})

    make_client(handler).embed(["text"])

    assert bodies == [{"input": ["text"]}]


def test_empty_input_makes_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert make_client(handler).embed([]) == []


def test_non_200_status():
    client = make_client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(EmbeddingError) as exc:
        client.embed(["text"])

    assert str(exc.value) == "unexpected status: 500"


def test_undecodable_response():
    client = make_client(lambda request: httpx.Response(200, text="not json"))

    with pytest.raises(EmbeddingError):
        client.embed(["text"])


@pytest.mark.parametrize("data", [
    [{"index": 0}],
    ["not-an-object"],
    [{"index": 0, "embedding": ["a", "b", "c"]}],
    [{"index": 0, "embedding": None}],
    [{"index": "0", "embedding": [1, 2, 3]}],
])
def test_malformed_items(data):
    client = make_client(lambda request: httpx.Response(200, json={"data": data}))

    with pytest.raises(EmbeddingError):
        client.embed(["text"])


def test_missing_embeddings():
    client = make_client(lambda request: httpx.Response(
        200, json={"data": [{"index": 0, "embedding": [1, 2, 3]}]},
    ))

    with pytest.raises(EmbeddingError) as exc:
        client.embed(["a", "b"])

    assert str(exc.value) == "expected 2 embeddings, got 1"


def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmbeddingError):
        make_client(handler).embed(["text"])


def test_dimensions_and_protocol():
    client = make_client(lambda request: httpx.Response(200, json={"data": []}))

    assert client.dimensions() == 3
    assert isinstance(client, Embedder)


def test_close_leaves_borrowed_client_open():
    http = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    OpenAIEmbeddingClient("http://embed.local", dimensions=3, http_client=http).close()

    assert not http.is_closed
    http.close()
