"""
Markdown to Bebop
Transpiles a markdown document into Bebop source built from the prelude's
HTML helpers, and renders it to HTML by evaluating that source
"""

from typing import List, Optional, Tuple
import re

from pyparsing import Regex, StringEnd, ZeroOrMore

from environment import Environment
from interpreter import run_program
from prelude import create_prelude_env
from values import Str


HEADING_PATTERN = re.compile(r"^(#{1,6}) (.*)$")
UNORDERED_ITEM_PATTERN = re.compile(r"^- (.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^\d+\. (.*)$")
FENCE = "```"


def quote(text: str) -> str:
    """Bebop string literal for arbitrary text (strings have no escapes)"""
    return '"' + text.replace('"', "&quot;") + '"'


# ============================================================================
# INLINE GRAMMAR
# ============================================================================

class InlineGrammar:
    """Inline markdown constructs, each turned into a Bebop form by its parse action

    Anything that does not match a construct falls through to plain text one
    character at a time, so an inline parse never fails.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        bold = Regex(r"\*\*(?P<text>[^*\n]+)\*\*").set_name("Bold")
        bold.set_parse_action(lambda t: ("form", f"(b {quote(t['text'])})"))

        italic = Regex(r"\*(?P<text>[^*\n]+)\*").set_name("Italic")
        italic.set_parse_action(lambda t: ("form", f"(i {quote(t['text'])})"))

        inline_code = Regex(r"`(?P<text>[^`\n]+)`").set_name("InlineCode")
        inline_code.set_parse_action(lambda t: ("form", f"(code {quote(t['text'])})"))

        image = Regex(r"!\[(?P<alt>[^\]\n]+)\]\((?P<src>[^)\n]+)\)").set_name("Image")
        image.set_parse_action(lambda t: ("form", f"(img {quote(t['src'])} {quote(t['alt'])})"))

        link = Regex(r"\[(?P<text>[^\]\n]+)\]\((?P<href>[^)\n]+)\)").set_name("Link")
        link.set_parse_action(lambda t: ("form", f"(a {quote(t['href'])} {quote(t['text'])})"))

        # Embedded source goes through untouched
        embedded = Regex(r"\|(?P<source>[^|\n]+)\|").set_name("Embedded")
        embedded.set_parse_action(lambda t: ("form", t['source']))

        plaintext = Regex(r"[^*`!\[|\n]+").set_name("Plaintext")
        stray_marker = Regex(r".").set_name("Plaintext")
        for element in (plaintext, stray_marker):
            element.set_parse_action(lambda t: ("text", t[0]))

        if self.debug:
            for element in (bold, italic, inline_code, image, link, embedded):
                element.set_debug()

        inline = bold | italic | inline_code | image | link | embedded | plaintext | stray_marker
        # Spaces between pieces are content here, not separators
        self.line = (ZeroOrMore(inline) + StringEnd()).leave_whitespace()

    def parse_line(self, text: str) -> List[Tuple[str, str]]:
        """Pieces of one line as ("form", source) or ("text", raw text) pairs"""
        return list(self.line.parse_string(text, parse_all=True))


_inline_grammar: Optional[InlineGrammar] = None


def inline_to_lisp(text: str) -> str:
    """Bebop forms for one line of inline markdown, plain runs merged into single strings"""
    global _inline_grammar
    if _inline_grammar is None:
        _inline_grammar = InlineGrammar()

    forms = []
    pending_text = ""
    for piece_kind, piece in _inline_grammar.parse_line(text):
        if piece_kind == "text":
            pending_text += piece
            continue
        if pending_text:
            forms.append(quote(pending_text))
            pending_text = ""
        forms.append(piece)
    if pending_text:
        forms.append(quote(pending_text))

    return " ".join(forms) if forms else '""'


# ============================================================================
# BLOCK TRANSPILER
# ============================================================================

def _list_block(lines: List[str], start: int, pattern, tag: str) -> Tuple[str, int]:
    items = []
    index = start
    while index < len(lines):
        match = pattern.match(lines[index])
        if not match:
            break
        items.append(f"(li (concat {inline_to_lisp(match.group(1))}))")
        index += 1
    return f"({tag} (concat {' '.join(items)}))\n", index


def _code_block(lines: List[str], start: int) -> Optional[Tuple[str, int]]:
    for end in range(start + 1, len(lines)):
        if lines[end].startswith(FENCE):
            body = "".join(line + "\n" for line in lines[start + 1:end])
            return f"(pre (code {quote(body)}))\n", end + 1
    return None


def _embedded_block(lines: List[str], start: int) -> Optional[Tuple[str, int]]:
    """Source between a leading | and the next |, possibly over several lines"""
    rest = "\n".join(lines[start:])[1:]
    close = rest.find("|")
    if close < 0:
        return None
    source = rest[:close]
    consumed = source.count("\n")
    remainder = rest[close + 1:].split("\n", 1)[0]
    next_index = start + consumed + 1
    if remainder.strip():
        # Text after the closing bar on the same line is a paragraph of its own
        return f"{source}\n(p (concat {inline_to_lisp(remainder)}))\n", next_index
    return f"{source}\n", next_index


def markdown_to_lisp(text: str) -> str:
    """
    Transpile a markdown document into Bebop source, one top-level form per block.

    Never fails: constructs that do not close fall back to paragraphs of
    plain text.
    """
    lines = text.splitlines()
    output = []
    index = 0

    while index < len(lines):
        line = lines[index]

        if line.startswith("|"):
            block = _embedded_block(lines, index)
            if block is not None:
                source, index = block
                output.append(source)
                continue

        if line.startswith(FENCE):
            block = _code_block(lines, index)
            if block is not None:
                source, index = block
                output.append(source)
                continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            level = len(heading.group(1))
            output.append(f"(h{level} (concat {inline_to_lisp(heading.group(2))}))\n")
            index += 1
        elif UNORDERED_ITEM_PATTERN.match(line):
            source, index = _list_block(lines, index, UNORDERED_ITEM_PATTERN, "ul")
            output.append(source)
        elif ORDERED_ITEM_PATTERN.match(line):
            source, index = _list_block(lines, index, ORDERED_ITEM_PATTERN, "ol")
            output.append(source)
        elif not line:
            output.append("hr\n")
            index += 1
        else:
            output.append(f"(p (concat {inline_to_lisp(line)}))\n")
            index += 1

    return "".join(output)


# ============================================================================
# RENDERING
# ============================================================================

def render_markdown(text: str, env: Optional[Environment] = None) -> str:
    """
    Render a markdown document to HTML.

    Args:
      text: Markdown source, possibly with embedded Bebop in | bars |
      env: Environment to evaluate in; a fresh one with the prelude by default

    Returns:
      Concatenation of every string the document's forms evaluate to
    """
    if env is None:
        env = create_prelude_env()

    results = run_program(env, markdown_to_lisp(text))
    return "".join(result.text for result in results if isinstance(result, Str))
