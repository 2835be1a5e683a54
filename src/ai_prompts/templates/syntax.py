"""Translation of mustache-style template syntax into Jinja2.

Templates are authored with ``{{name}}`` interpolation and
``{{#if name}}...{{/if}}`` blocks. Rendering is done by Jinja2, so every
``{{ ... }}`` tag is rewritten into its Jinja2 equivalent before
compilation:

    {{name}}                    -> {{ name }}
    {{{raw}}}                   -> {{ raw }}
    {{upper name}}              -> {{ upper(name) }}
    {{default focus "general"}} -> {{ default(focus, "general") }}
    {{#if (eq a b)}}            -> {% if eq(a, b) %}
    {{#unless x}}               -> {% if not (x) %}
    {{else if y}} / {{else}}    -> {% elif y %} / {% else %}
    {{/if}} / {{/unless}}       -> {% endif %}
    {{! note }}                 -> {# note #}

A ``~`` next to the braces becomes Jinja2 whitespace control (``-``).
Expressions that are not mustache-style (``{{ x | upper }}``) are passed
through unchanged, so native Jinja2 expressions keep working. Text outside
the tags is plain text: a literal ``{%`` or ``{#`` (a shell ``${#arr[@]}``,
a Liquid example) renders verbatim instead of opening a Jinja2 block.
"""

import re

from ai_prompts.templates.errors import TemplateGenerationError

_TAG_PATTERN = re.compile(
    r"\{\{(?P<lstrip>~?)(?:"
    r"!--(?P<long_comment>.*?)--"
    r"|!(?P<comment>.*?)"
    r"|\{\s*(?P<raw>.*?)\s*\}"
    r"|\s*(?P<expr>.*?)\s*"
    r")(?P<rstrip>~?)\}\}",
    re.DOTALL,
)

_TOKEN_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'|[()]|[^\s()]+')
_PATH_PATTERN = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*")
_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_HASH_PATTERN = re.compile(r"([A-Za-z_]\w*)=(.+)")

_LITERALS = {"true": "true", "false": "false", "null": "none", "undefined": "none"}
_JINJA_KEYWORDS = frozenset({"and", "or", "not", "in", "is", "if", "else", "for", "recursive"})

_SUPPORTED_BLOCKS = ("if", "unless")

MAX_NESTING_DEPTH = 32

# Jinja2 markers that may appear in plain text: "{{", "{%" and "{#"
_JINJA_MARKER_START = re.compile(r"\{(?=[{%#])")


class _NotMustache(Exception):
    """The expression is not mustache-style and is passed through."""


def _parse_tokens(tokens: list[str]) -> list:
    root: list = []
    stack = [root]
    for token in tokens:
        if token == "(":
            if len(stack) > MAX_NESTING_DEPTH:
                raise TemplateGenerationError(
                    f"Subexpressions nested deeper than {MAX_NESTING_DEPTH} levels"
                )
            group: list = []
            stack[-1].append(group)
            stack.append(group)
        elif token == ")":
            if len(stack) == 1:
                raise _NotMustache
            stack.pop()
        else:
            stack[-1].append(token)

    if len(stack) != 1:
        raise _NotMustache
    return root


def _render_path(token: str) -> str:
    if token.startswith("this."):
        token = token[len("this.") :]
    if token in _JINJA_KEYWORDS or not _PATH_PATTERN.fullmatch(token):
        raise _NotMustache
    return token


def _render_atom(token: str) -> str:
    if token[0] in "\"'":
        return token
    if _NUMBER_PATTERN.fullmatch(token):
        return token
    if token in _LITERALS:
        return _LITERALS[token]
    return _render_path(token)


def _render_arg(arg: str | list) -> str:
    if isinstance(arg, list):
        return _render_call(arg)
    match = _HASH_PATTERN.fullmatch(arg)
    if match:
        return f"{match.group(1)}={_render_atom(match.group(2))}"
    return _render_atom(arg)


def _render_call(items: list) -> str:
    if not items:
        raise _NotMustache
    head, *args = items
    if isinstance(head, list):
        if args:
            raise _NotMustache
        return _render_call(head)
    if not args:
        return _render_atom(head)
    return f"{_render_path(head)}({', '.join(_render_arg(arg) for arg in args)})"


def translate_expression(expr: str) -> str:
    """Translate a mustache expression (``helper arg "lit"``) into a Jinja2 expression.

    Expressions that are not mustache-style are returned unchanged.
    """
    expr = expr.strip()
    try:
        items = _parse_tokens(_TOKEN_PATTERN.findall(expr))
        return _render_call(items)
    except _NotMustache:
        return expr


def escape_text(text: str) -> str:
    """Make plain text render verbatim by emitting Jinja2 markers as string literals."""
    return _JINJA_MARKER_START.sub("{{ '{' }}", text)


def translate(source: str) -> str:
    """Translate mustache-style template source into Jinja2 source.

    Raises:
        TemplateGenerationError: On unsupported or unbalanced block tags
    """
    open_blocks: list[str] = []

    def replace(match: re.Match[str]) -> str:
        left = "-" if match.group("lstrip") else ""
        right = "-" if match.group("rstrip") else ""

        if match.group("long_comment") is not None:
            return f"{{#{left}{match.group('long_comment')}{right}#}}"
        if match.group("comment") is not None:
            return f"{{#{left}{match.group('comment')}{right}#}}"
        if match.group("raw") is not None:
            return f"{{{{{left} {translate_expression(match.group('raw'))} {right}}}}}"

        expr = match.group("expr")
        if not expr:
            raise TemplateGenerationError("Empty expression '{{}}' in template")

        if expr.startswith("#"):
            block, _, condition = expr[1:].partition(" ")
            if block not in _SUPPORTED_BLOCKS:
                raise TemplateGenerationError(f"Unsupported block helper '#{block}'")
            if not condition.strip():
                raise TemplateGenerationError(f"Block '#{block}' requires a condition")
            open_blocks.append(block)
            condition = translate_expression(condition)
            if block == "unless":
                condition = f"not ({condition})"
            return f"{{%{left} if {condition} {right}%}}"

        if expr.startswith("/"):
            block = expr[1:].strip()
            if not open_blocks or open_blocks[-1] != block:
                expected = f"'{{{{/{open_blocks[-1]}}}}}'" if open_blocks else "no closing tag"
                raise TemplateGenerationError(
                    f"Unexpected '{{{{/{block}}}}}' in template, expected {expected}"
                )
            open_blocks.pop()
            return f"{{%{left} endif {right}%}}"

        if expr in ("else", "^"):
            return f"{{%{left} else {right}%}}"

        if expr.startswith("else "):
            block, _, condition = expr[len("else ") :].strip().partition(" ")
            if block not in _SUPPORTED_BLOCKS or not condition.strip():
                raise TemplateGenerationError(f"Unsupported chained block '{{{{{expr}}}}}'")
            condition = translate_expression(condition)
            if block == "unless":
                condition = f"not ({condition})"
            return f"{{%{left} elif {condition} {right}%}}"

        if expr[0] in "^>":
            raise TemplateGenerationError(f"Unsupported tag '{{{{{expr}}}}}'")

        return f"{{{{{left} {translate_expression(expr)} {right}}}}}"

    parts: list[str] = []
    position = 0
    for match in _TAG_PATTERN.finditer(source):
        parts.append(escape_text(source[position : match.start()]))
        parts.append(replace(match))
        position = match.end()
    parts.append(escape_text(source[position:]))
    translated = "".join(parts)

    if open_blocks:
        raise TemplateGenerationError(f"Unclosed block '{{{{#{open_blocks[-1]}}}}}' in template")

    return translated
