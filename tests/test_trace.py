import itertools

from cyk_parser import (
    EXAMPLE_GRAMMAR_TEXT,
    SIMULATOR_GRAMMAR_TEXT,
    CykRecognizer,
    CykTracer,
    GrammarCompiler,
)


def test_trace_messages_for_example():
    grammar = GrammarCompiler().compile(EXAMPLE_GRAMMAR_TEXT)
    result = CykTracer(grammar).trace(("a", "b"))

    assert result.accepted
    assert result.messages == [
        "Cell[0][0]: 'a' can be derived from A",
        "Cell[1][1]: 'b' can be derived from B",
        "Cell[0][1]: S → A B (from [0][0] and [1][1])",
    ]
    assert [step.step_number for step in result.steps] == [1, 2, 3]


def test_trace_of_empty_input():
    grammar = GrammarCompiler().compile(EXAMPLE_GRAMMAR_TEXT)
    result = CykTracer(grammar).trace(())
    assert not result.accepted
    assert result.steps == []


def test_trace_agrees_with_recognizer():
    grammar = GrammarCompiler().compile(SIMULATOR_GRAMMAR_TEXT)
    recognizer = CykRecognizer(grammar)
    tracer = CykTracer(grammar)
    for length in range(1, 6):
        for word in itertools.product("ab", repeat=length):
            recognized = recognizer.recognize(word)
            traced = tracer.trace(word)
            assert traced.accepted == recognized.accepted
            assert traced.table == recognized.table
