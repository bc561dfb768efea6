import sys
import traceback
from flask import Flask, request, jsonify

from cyk_parser import CYKParserVisualizer, ParserOptions, TOKENIZATION_MODES

app = Flask(__name__)

HOST = '127.0.0.1'
PORT = 5000
MAX_INPUT_LENGTH = 10000  # Characters per request field

# --- HTML Escape Helper ---
def escapeHtml(unsafe):
    if unsafe is None: return ''
    unsafe = str(unsafe)
    return unsafe.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;').replace('"', '&quot;').replace("'", '&#039;')

# --- Request Helpers ---
def read_request_fields(data, *names):
    """
    Read required string fields from a JSON body.

    Returns (values, None) on success, or (None, (response, status)) when a
    field is missing or too long.
    """
    values = []
    for name in names:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            return None, (jsonify({"error": f"No {name} provided", "error_type": "request_error"}), 400)
        if len(value) > MAX_INPUT_LENGTH:
            return None, (jsonify({
                "error": f"Field '{name}' exceeds {MAX_INPUT_LENGTH} characters",
                "error_type": "request_error"
            }), 400)
        values.append(value)
    return values, None

def build_options(data):
    """Build ParserOptions from the optional 'strict' and 'tokenization' request fields."""
    tokenization = data.get('tokenization') or 'auto'
    if tokenization not in TOKENIZATION_MODES:
        raise ValueError(f"Unknown tokenization mode '{tokenization}'. Must be one of: {list(TOKENIZATION_MODES)}")
    strict = data.get('strict')
    if strict is None:
        strict = False
    if not isinstance(strict, bool):
        raise ValueError(f"Field 'strict' must be a boolean, got {strict!r}")
    return ParserOptions(strict=strict, tokenization=tokenization)

def compile_for_request(data, grammar_text):
    """
    Compile the request grammar.

    Returns (visualizer, grammar_result, None) on success or
    (None, None, (response, status)) on failure.
    """
    try:
        options = build_options(data)
    except ValueError as e:
        return None, None, (jsonify({"error": str(e), "error_type": "request_error"}), 400)

    visualizer = CYKParserVisualizer(options)
    print("--- Compiling Grammar ---", file=sys.stderr)
    grammar_result = visualizer.process_grammar(grammar_text)

    if not grammar_result['success']:
        print("--- Grammar Compilation FAILED ---", file=sys.stderr)
        print(f"Error: {grammar_result['error']}", file=sys.stderr)
        return None, None, (jsonify({
            "error": grammar_result['error'],
            "error_type": "grammar_error",
            "issues": grammar_result.get('issues', []),
            "errorHtml": grammar_result.get('error_html', '')
        }), 400)

    print("--- Grammar Compilation SUCCEEDED ---", file=sys.stderr)
    if grammar_result['skipped']:
        print(f"Skipped fragments: {len(grammar_result['skipped'])}", file=sys.stderr)
    return visualizer, grammar_result, None

def system_error_response(e):
    print(f"--- UNEXPECTED Python Error: {e} ---", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)
    error_message = f"Unexpected server error: {escapeHtml(str(e))}"
    return jsonify({"error": error_message, "error_type": "system_error"}), 500

# --- Flask Endpoints ---

@app.route('/health')
def health():
    return jsonify({"status": "ok"})

@app.route('/compile-grammar', methods=['POST'])
def compile_grammar():
    """
    Compile grammar text and return its productions, symbols and start symbol.

    With "strict": true, any skipped line or dropped alternative is reported
    as a grammar_error instead of being ignored.
    """
    data = request.get_json(silent=True) or {}
    fields, error = read_request_fields(data, 'grammar')
    if error:
        return error

    try:
        _, grammar_result, error = compile_for_request(data, fields[0])
        if error:
            return error

        info = grammar_result['grammar_info']
        print(f"Found {info['production_count']} productions", file=sys.stderr)
        print(f"Start symbol: {info['start_symbol']}", file=sys.stderr)

        return jsonify({
            "success": True,
            "grammar_info": info,
            "skipped": grammar_result['skipped']
        })

    except Exception as e:
        return system_error_response(e)

@app.route('/recognize', methods=['POST'])
def recognize():
    """
    Run CYK recognition for a grammar and an input string.

    A rejected input is a normal result (accepted: false), not an error.
    """
    data = request.get_json(silent=True) or {}
    fields, error = read_request_fields(data, 'grammar', 'input')
    if error:
        return error
    grammar_text, string_input = fields

    try:
        visualizer, _, error = compile_for_request(data, grammar_text)
        if error:
            return error

        print(f"--- Recognizing Input String: '{string_input}' ---", file=sys.stderr)
        parse_result = visualizer.parse_input(string_input)

        if not parse_result['success']:
            print("--- Recognition FAILED ---", file=sys.stderr)
            print(f"Error: {parse_result['error']}", file=sys.stderr)
            return jsonify({
                "error": parse_result['error'],
                "error_type": "recognition_error"
            }), 400

        if parse_result['accepted']:
            print("--- Recognition SUCCEEDED: input accepted ---", file=sys.stderr)
        else:
            print("--- Recognition SUCCEEDED: input rejected ---", file=sys.stderr)

        return jsonify({
            "accepted": parse_result['accepted'],
            "startSymbol": parse_result['start_symbol'],
            "tokens": parse_result['tokens'],
            "table": parse_result['table'],
            "tableHtml": parse_result['table_html'],
            "tree": parse_result['tree'],
            "treeAscii": parse_result['tree_ascii'],
            "treeDot": parse_result['tree_dot']
        })

    except Exception as e:
        return system_error_response(e)

@app.route('/trace', methods=['POST'])
def trace():
    """Run the step-by-step CYK trace for a grammar and an input string."""
    data = request.get_json(silent=True) or {}
    fields, error = read_request_fields(data, 'grammar', 'input')
    if error:
        return error
    grammar_text, string_input = fields

    try:
        visualizer, _, error = compile_for_request(data, grammar_text)
        if error:
            return error

        print(f"--- Tracing Input String: '{string_input}' ---", file=sys.stderr)
        trace_result = visualizer.trace_input(string_input)

        if not trace_result['success']:
            print("--- Trace FAILED ---", file=sys.stderr)
            return jsonify({
                "error": trace_result['error'],
                "error_type": "recognition_error"
            }), 400

        print(f"--- Trace SUCCEEDED: {trace_result['trace_steps']} steps ---", file=sys.stderr)
        return jsonify({
            "accepted": trace_result['accepted'],
            "tokens": trace_result['tokens'],
            "steps": trace_result['steps'],
            "traceSteps": trace_result['trace_steps'],
            "traceHtml": trace_result['trace_html']
        })

    except Exception as e:
        return system_error_response(e)

# --- Main Execution ---
if __name__ == '__main__':
    print("--- CYK Recognizer Server ---")
    print(f"Running on http://{HOST}:{PORT}")
    print("-" * 34)
    app.run(debug=True, host=HOST, port=PORT, use_reloader=False)
