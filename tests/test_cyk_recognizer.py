import itertools
from functools import lru_cache

import pytest

from cyk_parser import (
    EXAMPLE_GRAMMAR_TEXT,
    SENTENCE_GRAMMAR_TEXT,
    SIMULATOR_GRAMMAR_TEXT,
    BinaryDerivation,
    CykRecognizer,
    GrammarCompiler,
    TerminalDerivation,
    Tokenizer,
    run,
)


def compile_text(text):
    return GrammarCompiler().compile(text)


def derives(grammar, tokens):
    """Brute-force check that the start symbol derives tokens by trying every split."""
    tokens = tuple(tokens)

    @lru_cache(maxsize=None)
    def can_derive(symbol, i, j):
        for prod in grammar.productions_for(symbol):
            if i == j and prod.is_unary and prod.rhs[0] == tokens[i]:
                return True
            if i < j and prod.is_binary:
                left, right = prod.rhs
                for k in range(i, j):
                    if can_derive(left, i, k) and can_derive(right, k + 1, j):
                        return True
        return False

    return bool(tokens) and can_derive(grammar.start_symbol, 0, len(tokens) - 1)


def test_scenario_a_accepts_ab():
    grammar = compile_text("S->AB|BA\nA->a\nB->b")
    result = CykRecognizer(grammar).parse(Tokenizer().tokenize("ab"))

    assert result.accepted
    assert "S" in result.table[0, 1]
    assert result.tree.label == "S"
    assert [child.label for child in result.tree.children] == ["A", "B"]


def test_scenario_b_rejects_aa():
    grammar = compile_text("S->AB|BA\nA->a\nB->b")
    result = CykRecognizer(grammar).parse(("a", "a"))

    assert not result.accepted
    assert result.tree is None
    assert result.table[0, 1] == frozenset()


def test_scenario_c_accepts_ababa():
    grammar = compile_text(SIMULATOR_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).parse(Tokenizer().tokenize("ababa"))

    assert result.accepted
    assert result.table[0, 0] == {"A", "C"}
    assert result.table[0, 1] == {"S", "C"}
    assert result.table[0, 2] == {"B"}
    assert result.tree.leaves() == list("ababa")


def test_scenario_d_sentence():
    result = run(SENTENCE_GRAMMAR_TEXT, "the cat chased a dog")

    assert result.accepted
    assert result.tokens == ("the", "cat", "chased", "a", "dog")
    tree = result.tree
    assert tree.label == "S"
    assert [c.label for c in tree.children] == ["NP", "VP"]
    vp = tree.right
    assert [c.label for c in vp.children] == ["V", "NP"]
    assert [c.label for c in vp.right.children] == ["Det", "N"]
    assert vp.right.left.child.label == "a"
    assert vp.right.left.child.is_terminal
    assert tree.leaves() == ["the", "cat", "chased", "a", "dog"]


def test_empty_input_is_rejected_with_empty_table():
    grammar = compile_text(EXAMPLE_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).parse(())

    assert not result.accepted
    assert result.table.n == 0
    assert list(result.table.cells()) == []
    assert result.table.to_matrix() == []
    assert result.tree is None


def test_empty_grammar_rejects_everything():
    result = run("", "ab")
    assert not result.accepted


def test_lower_triangle_is_never_readable():
    grammar = compile_text(EXAMPLE_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).recognize(("a", "b"))

    with pytest.raises(IndexError):
        result.table[1, 0]
    with pytest.raises(IndexError):
        result.table.ordered(0, 2)
    assert result.table.to_matrix() == [[["A"], ["S"]], [None, ["B"]]]


def test_recognize_does_not_build_tree():
    grammar = compile_text(EXAMPLE_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).recognize(("b", "a"))
    assert result.accepted
    assert result.tree is None


def test_matches_brute_force_on_all_short_strings():
    for text in (EXAMPLE_GRAMMAR_TEXT, SIMULATOR_GRAMMAR_TEXT, "S -> S S | a | b"):
        grammar = compile_text(text)
        recognizer = CykRecognizer(grammar)
        for length in range(1, 7):
            for word in itertools.product("ab", repeat=length):
                assert recognizer.recognize(word).accepted == derives(grammar, word), (text, word)


def test_repeated_runs_are_identical():
    grammar = compile_text(SIMULATOR_GRAMMAR_TEXT)
    first = CykRecognizer(grammar).parse(tuple("ababa"))
    second = CykRecognizer(grammar).parse(tuple("ababa"))

    assert first.table == second.table
    assert first.backpointers == second.backpointers
    assert first.tree == second.tree
    assert first.to_dict() == second.to_dict()


def test_earliest_registered_production_wins():
    grammar = compile_text("S -> A B | A C\nA -> a\nB -> b\nC -> b")
    result = CykRecognizer(grammar).parse(("a", "b"))

    assert result.backpointers.derivations(0, 1, "S") == (
        BinaryDerivation("A", "B", 0),
        BinaryDerivation("A", "C", 0),
    )
    assert [c.label for c in result.tree.children] == ["A", "B"]


def test_earliest_split_wins_for_same_production():
    grammar = compile_text("S -> S S | a")
    result = CykRecognizer(grammar).parse(("a", "a", "a"))

    assert [d.split for d in result.backpointers.derivations(0, 2, "S")] == [0, 1]
    assert result.tree.left.child.label == "a"
    assert result.tree.right.label == "S"
    assert len(result.tree.right.children) == 2


def test_cell_order_follows_derivation_order():
    grammar = compile_text(SIMULATOR_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).recognize(tuple("ab"))
    # A before C because A's rule line comes first
    assert result.table.ordered(0, 0) == ("A", "C")
    assert result.backpointers.first(0, 0, "C") == TerminalDerivation("a")


def test_alias_production_matches_token_literally():
    result = run("S -> word", "word")
    assert not result.accepted  # "word" has no whitespace, so it is split into characters

    grammar = compile_text("S -> X Y\nX -> hello\nY -> world")
    result = CykRecognizer(grammar).parse(Tokenizer().tokenize("hello world"))
    assert result.accepted
    assert result.tree.leaves() == ["hello", "world"]


def test_start_symbol_must_span_whole_input():
    grammar = compile_text(EXAMPLE_GRAMMAR_TEXT)
    result = CykRecognizer(grammar).recognize(("a", "b", "a"))
    assert "S" in result.table[0, 1]
    assert not result.accepted
