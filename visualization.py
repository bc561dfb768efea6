"""
Visualization and Output Formatting Module

This module provides visualization and formatting capabilities for the CYK
recognizer, including the triangular table as HTML, parse trees as DOT and
ASCII art, the generic tree export, and step-by-step trace formatting.
"""

from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass
import html


@dataclass
class VisualizationConfig:
    """Configuration options for visualization output."""
    table_css_classes: str = "cyk-table"
    trace_css_classes: str = "cyk-trace"
    error_css_classes: str = "error-message"
    include_inline_styles: bool = True
    ascii_indent: int = 2  # Extra indent for a right subtree in ASCII output
    max_trace_steps: int = 500


class HTMLTableGenerator:
    """Generates HTML for the triangular CYK table."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_cyk_table_html(self, table, tokens: Sequence[str]) -> str:
        """
        Generate an HTML table for a filled CYK table.

        Row ``i`` and column ``j`` show the variables deriving
        ``tokens[i..j]``; cells below the diagonal are marked unused.

        Args:
            table: CykTable from a recognition run
            tokens: Token sequence the table was filled for

        Returns:
            HTML string containing the table
        """
        if not tokens or table.n == 0:
            return self._generate_empty_table_html("No tokens to recognize")

        html_lines = []
        html_lines.append(f'<table class="grammar-table {self.config.table_css_classes}" role="table" aria-label="CYK table (lower triangular cells are unused)">')

        # Header: one column per token position
        html_lines.append('<thead>')
        html_lines.append('<tr>')
        html_lines.append('<th class="grammar-table-header grammar-table-header-primary" scope="col">i \\ j</th>')
        for j, token in enumerate(tokens):
            html_lines.append(f'<th class="grammar-table-header" scope="col">{j}: {html.escape(token)}</th>')
        html_lines.append('</tr>')
        html_lines.append('</thead>')

        html_lines.append('<tbody>')
        for i in range(table.n):
            html_lines.append('<tr>')
            html_lines.append(f'<th class="grammar-table-cell grammar-table-cell-primary" scope="row">{i}</th>')
            for j in range(table.n):
                if j < i:
                    html_lines.append('<td class="grammar-table-cell cyk-cell-unused"></td>')
                    continue
                variables = sorted(table[i, j])
                if variables:
                    content = ", ".join(html.escape(v) for v in variables)
                    html_lines.append(f'<td class="grammar-table-cell cyk-cell">{{{content}}}</td>')
                else:
                    html_lines.append('<td class="grammar-table-cell cyk-cell cyk-cell-empty">&empty;</td>')
            html_lines.append('</tr>')
        html_lines.append('</tbody>')

        html_lines.append('</table>')

        return '\n'.join(html_lines)

    def _generate_empty_table_html(self, message: str) -> str:
        """Generate HTML for an empty table with a message."""
        html_lines = []
        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append(f'<p>{html.escape(message)}</p>')
        html_lines.append('</div>')
        return '\n'.join(html_lines)


class DOTGenerator:
    """Generates DOT format output for parse trees."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_parse_tree_dot(self, parse_tree, title: str = "Parse Tree") -> str:
        """
        Generate compact DOT format representation of a parse tree.

        Args:
            parse_tree: ParseTreeNode object representing the root of the tree
            title: Title for the graph

        Returns:
            DOT format string
        """
        if not parse_tree:
            return self._generate_empty_tree_dot(title, "Parse tree is empty")

        lines = []

        # Graph header with compact styling
        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=TB;')
        lines.append('  node [fontname="Arial", fontsize=12];')
        lines.append('  edge [fontsize=9, color="#333333"];')
        lines.append('  bgcolor=white;')
        lines.append('  nodesep=0.4;')
        lines.append('  ranksep=0.6;')
        lines.append(self._generate_nodes_dot(parse_tree))
        lines.append('}')

        return '\n'.join(lines)

    def _generate_nodes_dot(self, root) -> str:
        """Emit node and edge statements in pre-order, numbering nodes as they are visited."""
        lines = []
        counter = 0
        stack = [(root, None)]
        while stack:
            node, parent_id = stack.pop()
            current_id = counter
            counter += 1

            escaped_label = self._escape_dot_string(node.label)
            if node.is_terminal:
                lines.append(f'  node{current_id} [label="{escaped_label}", shape=box, style=filled, fillcolor="#e3f2fd", color="#1976d2", fontname="Courier New", fontsize=11];')
            else:
                lines.append(f'  node{current_id} [label="{escaped_label}", shape=circle, style=filled, fillcolor="#e8f5e8", color="#388e3c", fontname="Arial", fontsize=12];')

            if parent_id is not None:
                lines.append(f'  node{parent_id} -> node{current_id} [color="#666666", penwidth=1.0];')

            for child in reversed(node.children):
                stack.append((child, current_id))

        return '\n'.join(lines)

    def _generate_empty_tree_dot(self, title: str, message: str) -> str:
        """Generate DOT for an empty or error tree."""
        lines = []
        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=TB;')
        lines.append('  node [fontname="Arial"];')
        lines.append(f'  empty [label="{self._escape_dot_string(message)}", shape=box, color=red];')
        lines.append('}')
        return '\n'.join(lines)

    def _escape_dot_string(self, text: str) -> str:
        """Escape a string for use in DOT format."""
        if not text:
            return ""

        text = str(text)
        text = text.replace('\\', '\\\\')
        text = text.replace('"', '\\"')
        text = text.replace('\n', '\\n')
        text = text.replace('\t', '\\t')
        text = text.replace('\r', '\\r')

        return text


class AsciiTreeRenderer:
    """
    Plain-text fallback for parse trees.

    A terminal child is drawn as ``|`` followed by the token. A binary node
    is drawn as ``/ \\`` followed by the left subtree at the same indent and
    the right subtree indented further.
    """

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def render(self, parse_tree) -> str:
        if not parse_tree:
            return ''

        lines = []
        stack = [(parse_tree, 0)]
        while stack:
            node, indent = stack.pop()
            pad = ' ' * indent
            lines.append(f'{pad}{node.label}')

            if len(node.children) == 1:
                lines.append(f'{pad}|')
                lines.append(f'{pad}{node.children[0].label}')
            elif len(node.children) == 2:
                lines.append(f'{pad}/ \\')
                left, right = node.children
                stack.append((right, indent + self.config.ascii_indent))
                stack.append((left, indent))

        return '\n'.join(lines)


def export_tree(parse_tree) -> Optional[Dict[str, Any]]:
    """Generic ``{"name", "children"}`` export for tree widgets, or None for no tree."""
    if not parse_tree:
        return None
    return parse_tree.to_dict()


class ParseTraceFormatter:
    """Formats CYK traces as HTML with step-by-step details."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_trace_html(self, trace_steps: List, title: str = "CYK Trace") -> str:
        """
        Generate HTML representation of a CYK trace.

        Args:
            trace_steps: List of TraceStep objects
            title: Title for the trace

        Returns:
            HTML string showing each cell addition
        """
        if not trace_steps:
            return self._generate_empty_trace_html("No derivations recorded")

        html_lines = []
        html_lines.append(f'<div class="{self.config.trace_css_classes}">')
        html_lines.append(f'<h3>{html.escape(title)}</h3>')

        html_lines.append('<table class="grammar-table trace-table" role="table" aria-label="Step-by-step CYK trace">')
        html_lines.append('<thead>')
        html_lines.append('<tr>')
        html_lines.append('<th class="grammar-table-header grammar-table-header-primary" scope="col">Step</th>')
        html_lines.append('<th class="grammar-table-header" scope="col">Cell</th>')
        html_lines.append('<th class="grammar-table-header" scope="col">Derivation</th>')
        html_lines.append('</tr>')
        html_lines.append('</thead>')
        html_lines.append('<tbody>')

        shown = trace_steps[:self.config.max_trace_steps]
        for step in shown:
            html_lines.append(self._format_trace_step(step))

        html_lines.append('</tbody>')
        html_lines.append('</table>')

        if len(trace_steps) > len(shown):
            html_lines.append(f'<p class="trace-truncated">{len(trace_steps) - len(shown)} more steps not shown</p>')

        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def _format_trace_step(self, step) -> str:
        """Format a single trace step as HTML table row."""
        step_class = 'diagonal-step' if step.i == step.j else 'span-step'
        lines = []
        lines.append(f'<tr class="{step_class}">')
        lines.append(f'<td class="grammar-table-cell grammar-table-cell-primary step-number">{step.step_number}</td>')
        lines.append(f'<td class="grammar-table-cell cell">[{step.i}][{step.j}]</td>')
        lines.append(f'<td class="grammar-table-cell derivation">{html.escape(str(step))}</td>')
        lines.append('</tr>')
        return '\n'.join(lines)

    def _generate_empty_trace_html(self, message: str) -> str:
        """Generate HTML for empty trace."""
        html_lines = []
        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append(f'<p>{html.escape(message)}</p>')
        html_lines.append('</div>')
        return '\n'.join(html_lines)


class ErrorMessageFormatter:
    """Formats error messages with proper styling."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def format_parse_error(self, error_message: str) -> str:
        """
        Format an error message as HTML.

        Args:
            error_message: The error message

        Returns:
            Formatted HTML error message
        """
        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append('<h4>Error</h4>')
        html_lines.append(f'<p class="error-text">{html.escape(error_message)}</p>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def format_compile_issues(self, issues: List) -> str:
        """
        Format the fragments rejected by strict grammar compilation.

        Args:
            issues: List of CompileIssue objects

        Returns:
            Formatted HTML report
        """
        if not issues:
            return '<div class="no-errors">No grammar errors found.</div>'

        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.error_css_classes} grammar-errors">')
        html_lines.append(f'<h4>Grammar Errors ({len(issues)} found)</h4>')
        html_lines.append('<ul>')
        for issue in issues:
            html_lines.append(
                f'<li><strong>Line {issue.line_number}:</strong> {html.escape(issue.reason)} '
                f'<code>{html.escape(issue.text)}</code></li>'
            )
        html_lines.append('</ul>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def _generate_error_styles(self) -> str:
        """Generate inline CSS styles for error messages."""
        return """
<style>
.error-message {
    color: #cc0000;
    background-color: #ffeeee;
    border: 1px solid #cc0000;
    border-radius: 4px;
    padding: 10px;
    margin: 10px 0;
    font-family: Arial, sans-serif;
}

.error-text {
    font-weight: bold;
    margin: 5px 0;
}
</style>"""


class VisualizationGenerator:
    """Main visualization generator that combines all formatting capabilities."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()
        self.table_generator = HTMLTableGenerator(self.config)
        self.dot_generator = DOTGenerator(self.config)
        self.ascii_renderer = AsciiTreeRenderer(self.config)
        self.trace_formatter = ParseTraceFormatter(self.config)

    def generate_cyk_table_html(self, table, tokens: Sequence[str]) -> str:
        """Generate HTML for the CYK table."""
        return self.table_generator.generate_cyk_table_html(table, tokens)

    def generate_parse_tree_dot(self, parse_tree, title: str = "Parse Tree") -> str:
        """Generate DOT format for parse tree."""
        return self.dot_generator.generate_parse_tree_dot(parse_tree, title)

    def generate_ascii_tree(self, parse_tree) -> str:
        return self.ascii_renderer.render(parse_tree)

    def generate_trace_html(self, trace_steps: List, title: str = "CYK Trace") -> str:
        """Generate HTML for a CYK trace."""
        return self.trace_formatter.generate_trace_html(trace_steps, title)
