"""
CYK Parser Implementation - Grammar Compilation, Recognition and Tree Building

This module implements a recognizer for context-free grammars in Chomsky
Normal Form. Grammar text is compiled into a normalized rule set, input is
tokenized, the Cocke-Younger-Kasami table is filled bottom-up, and an
accepted input is turned into one canonical parse tree.
"""

from dataclasses import dataclass, field
from typing import List, Set, Dict, Tuple, Optional, Union, Any, Iterable, Iterator
from enum import Enum
import re


EXAMPLE_GRAMMAR_TEXT = "S -> AB | BA\nA -> a\nB -> b"

SIMULATOR_GRAMMAR_TEXT = "S -> AB | BC\nA -> BA | a\nB -> CC | b\nC -> AB | a"

SENTENCE_GRAMMAR_TEXT = (
    'S -> NP VP\n'
    'NP -> Det N\n'
    'VP -> V NP\n'
    'Det -> "the" | "a"\n'
    'N -> "cat" | "dog"\n'
    'V -> "chased"'
)

TOKENIZATION_MODES = ("auto", "words", "chars")


@dataclass
class ParserOptions:
    """Options controlling grammar compilation and tokenization."""
    strict: bool = False  # Reject unparsed lines/alternatives instead of skipping
    tokenization: str = "auto"  # One of TOKENIZATION_MODES
    default_start_symbol: str = "S"  # Used when no rule line is accepted

    def __post_init__(self):
        if self.tokenization not in TOKENIZATION_MODES:
            raise ValueError(
                f"Unknown tokenization mode '{self.tokenization}'. "
                f"Must be one of: {list(TOKENIZATION_MODES)}"
            )


class ProductionKind(Enum):
    """How a production's right-hand side was classified."""
    TERMINAL = "terminal"
    ALIAS = "alias"
    BINARY = "binary"


@dataclass(frozen=True)
class Production:
    """Represents a single CNF production rule."""
    lhs: str  # Variable being rewritten
    rhs: Tuple[str, ...]  # One token, or exactly two variables
    kind: ProductionKind

    def __str__(self) -> str:
        return f"{self.lhs} -> {' '.join(self.rhs)}"

    @property
    def is_unary(self) -> bool:
        return len(self.rhs) == 1

    @property
    def is_binary(self) -> bool:
        return self.kind == ProductionKind.BINARY

    def to_text(self) -> str:
        """Render the right-hand side the way the grammar compiler reads it back."""
        if self.kind == ProductionKind.TERMINAL:
            token = self.rhs[0]
            if re.fullmatch(r"[a-z]", token):
                return token
            return f'"{token}"'
        return " ".join(self.rhs)


@dataclass(frozen=True)
class Grammar:
    """Represents a compiled CNF grammar."""
    variables: frozenset
    terminals: frozenset
    start_symbol: str
    rules: Dict[str, Tuple[Production, ...]] = field(hash=False)

    def __str__(self) -> str:
        lines = [f"Start Symbol: {self.start_symbol}"]
        lines.append(f"Terminals: {sorted(self.terminals)}")
        lines.append(f"Variables: {sorted(self.variables)}")
        lines.append("Productions:")
        for prod in self.productions:
            lines.append(f"  {prod}")
        return "\n".join(lines)

    @property
    def productions(self) -> List[Production]:
        """All productions in compilation order."""
        return [prod for prods in self.rules.values() for prod in prods]

    def productions_for(self, symbol: str) -> Tuple[Production, ...]:
        return self.rules.get(symbol, ())

    def unary_productions(self) -> List[Production]:
        return [prod for prod in self.productions if prod.is_unary]

    def binary_productions(self) -> List[Production]:
        return [prod for prod in self.productions if prod.is_binary]

    def to_text(self) -> str:
        """Re-emit the grammar as rule lines, one variable per line."""
        lines = []
        for lhs, prods in self.rules.items():
            if not prods:
                continue
            lines.append(f"{lhs} -> {' | '.join(p.to_text() for p in prods)}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_symbol': self.start_symbol,
            'variables': sorted(self.variables),
            'terminals': sorted(self.terminals),
            'production_count': len(self.productions),
            'productions': [str(prod) for prod in self.productions],
        }


@dataclass
class CompileIssue:
    """A grammar line or alternative that the compiler could not classify."""
    line_number: int
    text: str
    reason: str

    def __str__(self) -> str:
        return f"Line {self.line_number}: {self.reason}: '{self.text}'"


class GrammarCompileError(ValueError):
    """Raised by strict compilation when any fragment of the grammar was dropped."""

    def __init__(self, issues: List[CompileIssue]):
        self.issues = issues
        details = "; ".join(str(issue) for issue in issues)
        super().__init__(f"Grammar has {len(issues)} unparsed fragment(s): {details}")


class GrammarCompiler:
    """
    Compiles grammar text into a Grammar.

    Each non-empty line has the form ``LHS -> alt | alt | ...`` where the
    arrow may also be written as ``→``. Alternatives are classified as:

    - ``"text"``: terminal production for a quoted (possibly multi-word) token
    - a single lowercase letter: terminal production
    - two uppercase letters such as ``AB``: shorthand for the binary ``A B``
    - two whitespace-separated symbols: binary production
    - any other single symbol: unary alias production

    Anything else is dropped. By default dropping is silent; with
    ``ParserOptions(strict=True)`` the compiler collects every dropped
    fragment and raises GrammarCompileError at the end.
    """

    arrow_regex = re.compile(r"->|→")
    quoted_regex = re.compile(r'^"([^"]+)"$')
    terminal_letter_regex = re.compile(r"^[a-z]$")
    compact_pair_regex = re.compile(r"^[A-Z]{2}$")

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()
        self._reset()

    def _reset(self):
        """Reset internal state for a new compilation."""
        self.rules: Dict[str, List[Production]] = {}
        self.variables: Set[str] = set()
        self.terminals: Set[str] = set()
        self.start_symbol: Optional[str] = None
        self.issues: List[CompileIssue] = []

    def compile(self, grammar_text: str) -> Grammar:
        """
        Compile grammar text into a Grammar.

        Args:
            grammar_text: Rule lines in ``LHS -> RHS1 | RHS2`` form

        Returns:
            The compiled Grammar

        Raises:
            GrammarCompileError: only in strict mode, when fragments were dropped
        """
        self._reset()

        for line_number, raw_line in enumerate(grammar_text.split("\n"), 1):
            line = raw_line.strip()
            if not line:
                continue
            self._compile_line(line_number, line)

        return self._finish()

    def compile_structured(self,
                           variables: Union[str, Iterable[str]],
                           terminals: Union[str, Iterable[str]],
                           start_symbol: str,
                           rules_text: str) -> Grammar:
        """
        Compile the form-based grammar layout.

        Variables and terminals are declared explicitly (comma-separated
        strings or iterables) and every alternative in ``rules_text`` is read
        character by character, so ``S->AB|BA`` yields ``S -> A B`` and
        ``S -> B A``.

        Args:
            variables: Declared variables
            terminals: Declared terminals
            start_symbol: Declared start symbol
            rules_text: Rule lines such as ``A->a``

        Returns:
            The compiled Grammar
        """
        self._reset()
        self.variables.update(self._split_declaration(variables))
        self.terminals.update(self._split_declaration(terminals))

        for line_number, raw_line in enumerate(rules_text.split("\n"), 1):
            line = raw_line.strip()
            if not line:
                continue

            split = self._split_rule_line(line_number, line)
            if split is None:
                continue
            lhs, rhs_text = split

            for alternative in rhs_text.split("|"):
                symbols = tuple(ch for ch in alternative if not ch.isspace())
                if len(symbols) == 1:
                    kind = ProductionKind.ALIAS if symbols[0] in self.variables else ProductionKind.TERMINAL
                    self._add_production(lhs, symbols, kind)
                elif len(symbols) == 2:
                    self._add_production(lhs, symbols, ProductionKind.BINARY)
                else:
                    self._drop(line_number, alternative.strip(), "alternative is not one or two symbols")

        self.start_symbol = start_symbol.strip() or self.start_symbol
        return self._finish()

    @staticmethod
    def _split_declaration(declaration: Union[str, Iterable[str]]) -> List[str]:
        if isinstance(declaration, str):
            declaration = declaration.split(",")
        return [item.strip() for item in declaration if item.strip()]

    def _split_rule_line(self, line_number: int, line: str) -> Optional[Tuple[str, str]]:
        """Split a line on its first arrow; returns None for lines that are skipped."""
        match = self.arrow_regex.search(line)
        if not match:
            self._drop(line_number, line, "no arrow")
            return None

        # Whitespace inside the left-hand side is removed, "N P" reads as "NP"
        lhs = re.sub(r"\s+", "", line[:match.start()])
        if not lhs:
            self._drop(line_number, line, "empty left-hand side")
            return None

        if self.start_symbol is None:
            self.start_symbol = lhs
        self.variables.add(lhs)
        self.rules.setdefault(lhs, [])
        return lhs, line[match.end():].strip()

    def _compile_line(self, line_number: int, line: str):
        split = self._split_rule_line(line_number, line)
        if split is None:
            return
        lhs, rhs_text = split

        for alternative in rhs_text.split("|"):
            self._compile_alternative(line_number, lhs, alternative.strip())

    def _compile_alternative(self, line_number: int, lhs: str, alternative: str):
        quoted = self.quoted_regex.match(alternative)
        if quoted:
            token = quoted.group(1)
            self.terminals.add(token)
            self._add_production(lhs, (token,), ProductionKind.TERMINAL)
            return

        parts = alternative.split()
        if len(parts) == 1:
            symbol = parts[0]
            if self.terminal_letter_regex.match(symbol):
                self.terminals.add(symbol)
                self._add_production(lhs, (symbol,), ProductionKind.TERMINAL)
            elif self.compact_pair_regex.match(symbol):
                self.variables.update(symbol)
                self._add_production(lhs, (symbol[0], symbol[1]), ProductionKind.BINARY)
            else:
                self.variables.add(symbol)
                self._add_production(lhs, (symbol,), ProductionKind.ALIAS)
        elif len(parts) == 2:
            self.variables.update(parts)
            self._add_production(lhs, tuple(parts), ProductionKind.BINARY)
        elif not parts:
            self._drop(line_number, alternative, "empty alternative")
        else:
            self._drop(line_number, alternative, f"alternative has {len(parts)} symbols")

    def _add_production(self, lhs: str, rhs: Tuple[str, ...], kind: ProductionKind):
        self.rules.setdefault(lhs, []).append(Production(lhs=lhs, rhs=rhs, kind=kind))

    def _drop(self, line_number: int, text: str, reason: str):
        self.issues.append(CompileIssue(line_number=line_number, text=text, reason=reason))

    def _finish(self) -> Grammar:
        if self.options.strict and self.issues:
            raise GrammarCompileError(list(self.issues))

        return Grammar(
            variables=frozenset(self.variables),
            terminals=frozenset(self.terminals),
            start_symbol=self.start_symbol or self.options.default_start_symbol,
            rules={lhs: tuple(prods) for lhs, prods in self.rules.items()},
        )


class Tokenizer:
    """
    Splits raw input into tokens.

    In ``auto`` mode, input containing whitespace is split into words and
    input without whitespace into single characters, so the same recognizer
    serves word grammars and single-letter grammars.
    """

    def __init__(self, mode: str = "auto"):
        if mode not in TOKENIZATION_MODES:
            raise ValueError(f"Unknown tokenization mode '{mode}'")
        self.mode = mode

    def tokenize(self, text: str) -> Tuple[str, ...]:
        if not text.strip():
            return ()

        # Leading or trailing whitespace also selects word mode
        if self.mode == "words" or (self.mode == "auto" and any(ch.isspace() for ch in text)):
            return tuple(text.split())
        return tuple(ch for ch in text if not ch.isspace())


def tokenize(text: str, mode: str = "auto") -> Tuple[str, ...]:
    return Tokenizer(mode).tokenize(text)


@dataclass(frozen=True)
class TerminalDerivation:
    """Backpointer: the variable produced the token directly."""
    token: str

    def __str__(self) -> str:
        return f"'{self.token}'"


@dataclass(frozen=True)
class BinaryDerivation:
    """Backpointer: the variable produced ``left right`` split after position ``split``."""
    left: str
    right: str
    split: int

    def __str__(self) -> str:
        return f"{self.left} {self.right} @ {self.split}"


Derivation = Union[TerminalDerivation, BinaryDerivation]


class CykTable:
    """
    Triangular derivability table.

    Cell ``(i, j)`` with ``0 <= i <= j < n`` holds the variables deriving
    ``tokens[i..j]``. Each cell keeps a set for membership tests and a list
    recording the order in which variables were first added. Reading a cell
    with ``i > j`` raises IndexError.
    """

    def __init__(self, n: int):
        self.n = n
        self._sets: List[List[Set[str]]] = [[set() for _ in range(n - i)] for i in range(n)]
        self._order: List[List[List[str]]] = [[[] for _ in range(n - i)] for i in range(n)]

    def _check(self, i: int, j: int):
        if not (0 <= i <= j < self.n):
            raise IndexError(f"Cell ({i}, {j}) is outside the triangular table of size {self.n}")

    def cell(self, i: int, j: int) -> Set[str]:
        """Live set for cell ``(i, j)``; callers must not mutate it."""
        self._check(i, j)
        return self._sets[i][j - i]

    def __getitem__(self, key: Tuple[int, int]) -> frozenset:
        i, j = key
        return frozenset(self.cell(i, j))

    def add(self, i: int, j: int, symbol: str) -> bool:
        """Add a variable to a cell; returns True if it was not already present."""
        cell = self.cell(i, j)
        if symbol in cell:
            return False
        cell.add(symbol)
        self._order[i][j - i].append(symbol)
        return True

    def ordered(self, i: int, j: int) -> Tuple[str, ...]:
        """Cell contents in the order they were derived."""
        self._check(i, j)
        return tuple(self._order[i][j - i])

    def cells(self) -> Iterator[Tuple[int, int, Tuple[str, ...]]]:
        for i in range(self.n):
            for j in range(i, self.n):
                yield i, j, self.ordered(i, j)

    def to_matrix(self) -> List[List[Optional[List[str]]]]:
        """JSON-ready ``n x n`` matrix: sorted lists for used cells, None below the diagonal."""
        return [
            [sorted(self._sets[i][j - i]) if j >= i else None for j in range(self.n)]
            for i in range(self.n)
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CykTable):
            return NotImplemented
        return self.n == other.n and self._order == other._order

    def __repr__(self) -> str:
        return f"CykTable(n={self.n})"


class BackpointerTable:
    """Per-cell mapping from variable to its derivation records, in derivation order."""

    def __init__(self, n: int):
        self.n = n
        self._cells: List[List[Dict[str, List[Derivation]]]] = [[{} for _ in range(n - i)] for i in range(n)]

    def _check(self, i: int, j: int):
        if not (0 <= i <= j < self.n):
            raise IndexError(f"Cell ({i}, {j}) is outside the triangular table of size {self.n}")

    def record(self, i: int, j: int, symbol: str, derivation: Derivation):
        self._check(i, j)
        self._cells[i][j - i].setdefault(symbol, []).append(derivation)

    def derivations(self, i: int, j: int, symbol: str) -> Tuple[Derivation, ...]:
        self._check(i, j)
        return tuple(self._cells[i][j - i].get(symbol, ()))

    def first(self, i: int, j: int, symbol: str) -> Optional[Derivation]:
        """The earliest recorded derivation, which tree building always follows."""
        if not (0 <= i <= j < self.n):
            return None
        records = self._cells[i][j - i].get(symbol)
        return records[0] if records else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BackpointerTable):
            return NotImplemented
        return self.n == other.n and self._cells == other._cells


def _fill_table(grammar: Grammar,
                tokens: Tuple[str, ...],
                table: CykTable) -> Iterator[Tuple[int, int, str, Derivation]]:
    """
    Run the CYK recurrence over ``tokens``, filling ``table`` in place.

    Yields ``(i, j, variable, derivation)`` every time a production succeeds,
    including repeated successes for a variable already in the cell. Rules
    are tried in compilation order, so the first event for a given cell and
    variable is deterministic. The generator must be exhausted for the
    table to be complete.
    """
    n = len(tokens)
    unary = grammar.unary_productions()
    binary = grammar.binary_productions()

    # Diagonal: single tokens
    for i, token in enumerate(tokens):
        for prod in unary:
            if prod.rhs[0] == token:
                table.add(i, i, prod.lhs)
                yield i, i, prod.lhs, TerminalDerivation(token)

    # Longer spans, shortest first
    for length in range(2, n + 1):
        for i in range(n - length + 1):
            j = i + length - 1
            for k in range(i, j):
                left_cell = table.cell(i, k)
                right_cell = table.cell(k + 1, j)
                if not left_cell or not right_cell:
                    continue
                for prod in binary:
                    left, right = prod.rhs
                    if left in left_cell and right in right_cell:
                        table.add(i, j, prod.lhs)
                        yield i, j, prod.lhs, BinaryDerivation(left, right, k)


@dataclass
class ParseTreeNode:
    """
    Represents a node in the parse tree.

    A variable node has no children (no recorded derivation), one terminal
    child, or exactly two variable children.
    """
    label: str
    children: List['ParseTreeNode'] = field(default_factory=list)
    is_terminal: bool = False

    def __str__(self) -> str:
        if self.is_terminal:
            return f"'{self.label}'"
        if not self.children:
            return self.label
        return f"({self.label} {' '.join(str(child) for child in self.children)})"

    @property
    def child(self) -> Optional['ParseTreeNode']:
        if len(self.children) == 1:
            return self.children[0]
        return None

    @property
    def left(self) -> Optional['ParseTreeNode']:
        return self.children[0] if len(self.children) == 2 else None

    @property
    def right(self) -> Optional['ParseTreeNode']:
        return self.children[1] if len(self.children) == 2 else None

    def leaves(self) -> List[str]:
        """Terminal labels left to right; equals the token sequence for a full parse."""
        result = []
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_terminal:
                result.append(node.label)
            stack.extend(reversed(node.children))
        return result

    def to_dict(self) -> Dict[str, Any]:
        """
        Export to the generic ``{"name", "children"}`` shape consumed by tree widgets.

        ``children`` is omitted for nodes without children.
        """
        root: Dict[str, Any] = {'name': self.label}
        stack = [(self, root)]
        while stack:
            node, exported = stack.pop()
            if not node.children:
                continue
            exported['children'] = []
            for child in node.children:
                exported_child = {'name': child.label}
                exported['children'].append(exported_child)
                stack.append((child, exported_child))
        return root


class ParseTreeBuilder:
    """Rebuilds one parse tree by following the first backpointer of each cell."""

    def build(self,
              grammar: Grammar,
              tokens: Tuple[str, ...],
              backpointers: BackpointerTable) -> Optional[ParseTreeNode]:
        """
        Build the canonical parse tree.

        Args:
            grammar: Grammar the table was filled with
            tokens: Recognized tokens
            backpointers: Backpointers from CykRecognizer

        Returns:
            Root node, or None when the start symbol has no derivation over
            the full input
        """
        n = len(tokens)
        if n == 0 or backpointers.first(0, n - 1, grammar.start_symbol) is None:
            return None

        root = ParseTreeNode(grammar.start_symbol)
        # Explicit stack so long inputs do not hit the recursion limit
        stack = [(root, 0, n - 1)]
        while stack:
            node, i, j = stack.pop()
            derivation = backpointers.first(i, j, node.label)
            if derivation is None:
                # Missing bookkeeping leaves a bare variable node
                continue

            if isinstance(derivation, TerminalDerivation):
                node.children.append(ParseTreeNode(derivation.token, is_terminal=True))
            else:
                left = ParseTreeNode(derivation.left)
                right = ParseTreeNode(derivation.right)
                node.children.extend([left, right])
                stack.append((right, derivation.split + 1, j))
                stack.append((left, i, derivation.split))

        return root


@dataclass
class RecognitionResult:
    """Represents the result of a recognition run."""
    accepted: bool
    tokens: Tuple[str, ...]
    table: CykTable
    backpointers: BackpointerTable
    tree: Optional[ParseTreeNode] = None

    def __str__(self) -> str:
        if self.accepted:
            return f"Accepted. Tree: {self.tree}"
        return f"Rejected: {' '.join(self.tokens)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accepted': self.accepted,
            'tokens': list(self.tokens),
            'table': self.table.to_matrix(),
            'tree': self.tree.to_dict() if self.tree else None,
        }


class CykRecognizer:
    """Fills the CYK table and backpointers for a grammar."""

    def __init__(self, grammar: Grammar):
        self.grammar = grammar

    def recognize(self, tokens: Iterable[str]) -> RecognitionResult:
        """
        Decide whether the start symbol derives ``tokens``.

        Args:
            tokens: Token sequence to recognize

        Returns:
            RecognitionResult without a tree; see ParseTreeBuilder
        """
        tokens = tuple(tokens)
        n = len(tokens)
        table = CykTable(n)
        backpointers = BackpointerTable(n)
        if n == 0:
            return RecognitionResult(False, tokens, table, backpointers)

        for i, j, symbol, derivation in _fill_table(self.grammar, tokens, table):
            backpointers.record(i, j, symbol, derivation)

        accepted = self.grammar.start_symbol in table.cell(0, n - 1)
        return RecognitionResult(accepted, tokens, table, backpointers)

    def parse(self, tokens: Iterable[str]) -> RecognitionResult:
        """Recognize ``tokens`` and attach the canonical tree when accepted."""
        result = self.recognize(tokens)
        if result.accepted:
            result.tree = ParseTreeBuilder().build(self.grammar, result.tokens, result.backpointers)
        return result


@dataclass
class TraceStep:
    """One addition made to a table cell during a traced run."""
    step_number: int
    i: int
    j: int
    variable: str
    derivation: Derivation

    def __str__(self) -> str:
        if isinstance(self.derivation, TerminalDerivation):
            return f"Cell[{self.i}][{self.j}]: '{self.derivation.token}' can be derived from {self.variable}"
        d = self.derivation
        return (f"Cell[{self.i}][{self.j}]: {self.variable} → {d.left} {d.right} "
                f"(from [{self.i}][{d.split}] and [{d.split + 1}][{self.j}])")


@dataclass
class TraceResult:
    """Represents the result of a traced recognition run."""
    accepted: bool
    tokens: Tuple[str, ...]
    table: CykTable
    steps: List[TraceStep] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [str(step) for step in self.steps]


class CykTracer:
    """
    Didactic CYK run that records each derivation as a readable step.

    Uses the same table-filling routine as CykRecognizer, so acceptance is
    always identical, but keeps no backpointers.
    """

    def __init__(self, grammar: Grammar):
        self.grammar = grammar

    def trace(self, tokens: Iterable[str]) -> TraceResult:
        tokens = tuple(tokens)
        n = len(tokens)
        table = CykTable(n)
        if n == 0:
            return TraceResult(False, tokens, table)

        steps = []
        for i, j, symbol, derivation in _fill_table(self.grammar, tokens, table):
            steps.append(TraceStep(len(steps) + 1, i, j, symbol, derivation))

        accepted = self.grammar.start_symbol in table.cell(0, n - 1)
        return TraceResult(accepted, tokens, table, steps)


def run(grammar_text: str, sentence: str, options: Optional[ParserOptions] = None) -> RecognitionResult:
    """
    Compile, tokenize, recognize and build the tree in one call.

    Args:
        grammar_text: Grammar rule lines
        sentence: Raw input string
        options: Compilation and tokenization options

    Returns:
        RecognitionResult with ``tree`` set when accepted
    """
    options = options or ParserOptions()
    grammar = GrammarCompiler(options).compile(grammar_text)
    tokens = Tokenizer(options.tokenization).tokenize(sentence)
    return CykRecognizer(grammar).parse(tokens)


class CYKParserVisualizer:
    """
    Main class that integrates the CYK components with visualization.

    Provides a high-level interface returning JSON-ready dictionaries for
    grammar compilation, recognition and tracing. Methods never raise;
    failures are reported with ``success: False`` and an error message.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()
        self.compiler = GrammarCompiler(self.options)
        self.tokenizer = Tokenizer(self.options.tokenization)
        self.grammar: Optional[Grammar] = None

    def process_grammar(self, grammar_text: str) -> Dict[str, Any]:
        """
        Compile grammar text.

        Args:
            grammar_text: Grammar rule lines

        Returns:
            Dictionary with ``success`` and ``grammar_info``, or ``error``
            and ``issues`` when strict compilation fails
        """
        try:
            self.grammar = self.compiler.compile(grammar_text)
            return {
                'success': True,
                'grammar_info': self.grammar.to_dict(),
                'skipped': [str(issue) for issue in self.compiler.issues],
                'error': None
            }

        except GrammarCompileError as e:
            from visualization import ErrorMessageFormatter
            self.grammar = None
            return {
                'success': False,
                'error': str(e),
                'issues': [str(issue) for issue in e.issues],
                'error_html': ErrorMessageFormatter().format_compile_issues(e.issues)
            }

        except Exception as e:
            from visualization import ErrorMessageFormatter
            self.grammar = None
            return {
                'success': False,
                'error': str(e),
                'error_html': ErrorMessageFormatter().format_parse_error(str(e))
            }

    def parse_input(self, sentence: str) -> Dict[str, Any]:
        """
        Recognize a sentence with the processed grammar.

        Args:
            sentence: Raw input string

        Returns:
            Dictionary containing acceptance, table and tree renderings
        """
        if self.grammar is None:
            return {
                'success': False,
                'error': 'No grammar processed. Call process_grammar() first.'
            }

        try:
            tokens = self.tokenizer.tokenize(sentence)
            result = CykRecognizer(self.grammar).parse(tokens)

            from visualization import VisualizationGenerator
            viz_generator = VisualizationGenerator()

            return {
                'success': True,
                'accepted': result.accepted,
                'start_symbol': self.grammar.start_symbol,
                'tokens': list(result.tokens),
                'table': result.table.to_matrix(),
                'table_html': viz_generator.generate_cyk_table_html(result.table, result.tokens),
                'tree': result.tree.to_dict() if result.tree else None,
                'tree_ascii': viz_generator.generate_ascii_tree(result.tree),
                'tree_dot': viz_generator.generate_parse_tree_dot(
                    result.tree, f"Parse Tree for '{sentence.strip()}'"
                ) if result.tree else None
            }

        except Exception as e:
            from visualization import ErrorMessageFormatter
            return {
                'success': False,
                'error': str(e),
                'error_html': ErrorMessageFormatter().format_parse_error(str(e))
            }

    def trace_input(self, sentence: str) -> Dict[str, Any]:
        """Run the step-by-step trace for a sentence with the processed grammar."""
        if self.grammar is None:
            return {
                'success': False,
                'error': 'No grammar processed. Call process_grammar() first.'
            }

        try:
            tokens = self.tokenizer.tokenize(sentence)
            result = CykTracer(self.grammar).trace(tokens)

            from visualization import VisualizationGenerator
            viz_generator = VisualizationGenerator()

            return {
                'success': True,
                'accepted': result.accepted,
                'tokens': list(result.tokens),
                'steps': result.messages,
                'trace_steps': len(result.steps),
                'trace_html': viz_generator.generate_trace_html(result.steps)
            }

        except Exception as e:
            from visualization import ErrorMessageFormatter
            return {
                'success': False,
                'error': str(e),
                'error_html': ErrorMessageFormatter().format_parse_error(str(e))
            }
