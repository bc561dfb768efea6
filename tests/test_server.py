import pytest

from cyk_parser import EXAMPLE_GRAMMAR_TEXT, SENTENCE_GRAMMAR_TEXT
from server import MAX_INPUT_LENGTH, app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_compile_grammar(client):
    response = client.post("/compile-grammar", json={"grammar": "junk\n" + EXAMPLE_GRAMMAR_TEXT})
    body = response.get_json()

    assert response.status_code == 200
    assert body["success"]
    assert body["grammar_info"]["start_symbol"] == "S"
    assert body["grammar_info"]["production_count"] == 4
    assert body["skipped"] == ["Line 1: no arrow: 'junk'"]


def test_compile_grammar_strict_failure(client):
    response = client.post("/compile-grammar", json={"grammar": "S -> A B C", "strict": True})
    body = response.get_json()

    assert response.status_code == 400
    assert body["error_type"] == "grammar_error"
    assert body["issues"] == ["Line 1: alternative has 3 symbols: 'A B C'"]


def test_recognize_sentence(client):
    response = client.post("/recognize", json={
        "grammar": SENTENCE_GRAMMAR_TEXT,
        "input": "the cat chased a dog",
    })
    body = response.get_json()

    assert response.status_code == 200
    assert body["accepted"]
    assert body["tokens"] == ["the", "cat", "chased", "a", "dog"]
    assert body["tree"]["name"] == "S"
    assert [c["name"] for c in body["tree"]["children"]] == ["NP", "VP"]
    assert body["table"][0][4] == ["S"]
    assert body["table"][4][0] is None
    assert body["treeAscii"].startswith("S\n/ \\")
    assert body["treeDot"].startswith("digraph")


def test_recognize_rejected_input_is_not_an_error(client):
    response = client.post("/recognize", json={"grammar": EXAMPLE_GRAMMAR_TEXT, "input": "aa"})
    body = response.get_json()

    assert response.status_code == 200
    assert body["accepted"] is False
    assert body["tree"] is None
    assert body["treeDot"] is None
    assert body["treeAscii"] == ""


def test_compile_grammar_strict_false_is_lenient(client):
    response = client.post("/compile-grammar", json={"grammar": "S -> a\nnonsense", "strict": False})
    assert response.status_code == 200
    assert response.get_json()["skipped"] == ["Line 2: no arrow: 'nonsense'"]


@pytest.mark.parametrize("strict", ["false", "true", 1])
def test_compile_grammar_strict_must_be_boolean(client, strict):
    response = client.post("/compile-grammar", json={"grammar": "S -> a\nnonsense", "strict": strict})
    assert response.status_code == 400
    assert response.get_json()["error_type"] == "request_error"


def test_recognize_with_word_tokenization(client):
    response = client.post("/recognize", json={
        "grammar": 'S -> "ab"',
        "input": "ab",
        "tokenization": "words",
    })
    assert response.get_json()["accepted"]


def test_recognize_unknown_tokenization(client):
    response = client.post("/recognize", json={
        "grammar": EXAMPLE_GRAMMAR_TEXT,
        "input": "ab",
        "tokenization": "lines",
    })
    assert response.status_code == 400
    assert response.get_json()["error_type"] == "request_error"


@pytest.mark.parametrize("payload", [
    {},
    {"grammar": EXAMPLE_GRAMMAR_TEXT},
    {"grammar": "   ", "input": "ab"},
    {"grammar": EXAMPLE_GRAMMAR_TEXT, "input": "a" * (MAX_INPUT_LENGTH + 1)},
])
def test_recognize_bad_requests(client, payload):
    response = client.post("/recognize", json=payload)
    assert response.status_code == 400
    assert response.get_json()["error_type"] == "request_error"


def test_trace(client):
    response = client.post("/trace", json={"grammar": EXAMPLE_GRAMMAR_TEXT, "input": "ba"})
    body = response.get_json()

    assert response.status_code == 200
    assert body["accepted"]
    assert body["traceSteps"] == 3
    assert body["steps"][-1] == "Cell[0][1]: S → B A (from [0][0] and [1][1])"
    assert "cyk-trace" in body["traceHtml"]
