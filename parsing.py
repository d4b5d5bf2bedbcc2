"""
Bebop Parser
Source text parses straight into the runtime value types (no separate AST)
"""

import math
import sys
from typing import Any, List, Tuple

from pyparsing import (
    Combine, Forward, Literal, ParseBaseException, ParseFatalException,
    ParserElement, Regex, StringEnd, Suppress, Word, ZeroOrMore
)

from error_handling import BebopParseError
from values import Num, Qexpr, Sexpr, Str, Sym

# Enable packrat parsing for performance
ParserElement.enable_packrat()

# Each nesting level costs about a dozen Python frames in pyparsing and the evaluator
RECURSION_LIMIT = 20000
sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))


# Characters allowed in a symbol, in addition to letters and digits
SYMBOL_PUNCTUATION = "_+\\:-*/=<>|!&%"
SYMBOL_CHARS = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789" + SYMBOL_PUNCTUATION
)

# Optional sign, digits with an optional fraction (or a bare fraction), optional exponent
NUMBER_PATTERN = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"


class LispGrammar:
    """Bebop grammar definition using pyparsing

    The named productions double as the labels of the context trail that a
    BebopParseError carries.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._trail: List[Tuple[str, int]] = []
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the grammar: five kinds of expression and a program of many"""

        expression = Forward().set_name("Expression")

        number = Regex(NUMBER_PATTERN).set_name("Number")
        number.set_parse_action(self._number)

        symbol = Word(SYMBOL_CHARS).set_name("Symbol")
        symbol.set_parse_action(lambda t: Sym(t[0]))

        # No escapes: anything up to the next double quote, newlines included
        string_literal = Combine(
            Literal('"') - (Regex(r'[^"]*') + Literal('"'))
        ).set_name("String")
        string_literal.set_parse_action(lambda t: Str(t[0][1:-1]))

        # Once the opening bracket is seen a missing close is a hard error
        sexpression = (
            Suppress("(") - (ZeroOrMore(expression) + Suppress(")"))
        ).set_name("S-Expression")
        sexpression.set_parse_action(lambda t: Sexpr(tuple(t)))

        qexpression = (
            Suppress("[") - (ZeroOrMore(expression) + Suppress("]"))
        ).set_name("Q-Expression")
        qexpression.set_parse_action(lambda t: Qexpr(tuple(t)))

        expression <<= number | symbol | string_literal | sexpression | qexpression

        program = ZeroOrMore(expression) + StringEnd()
        program.set_parse_action(lambda t: Sexpr(tuple(t)))

        for element in (string_literal, sexpression, qexpression):
            element.set_fail_action(self._record_context)

        if self.debug:
            for element in (number, symbol, string_literal, sexpression, qexpression):
                element.set_debug()

        # Store the main parsers
        self.program = program
        self.expression = expression
        self.number = number
        self.symbol = symbol
        self.string_literal = string_literal
        self.sexpression = sexpression
        self.qexpression = qexpression

    @staticmethod
    def _number(s: str, loc: int, t) -> Num:
        value = float(t[0])
        if not math.isfinite(value):
            raise ParseFatalException(s, loc, f"Number literal {t[0]} is out of range")
        return Num(value)

    def _record_context(self, instring: str, loc: int, expr: ParserElement, err: Exception) -> None:
        """Fail action: remember each named production a hard error unwinds through"""
        if isinstance(err, ParseFatalException):
            self._trail.append((expr.name, loc))

    def _parse(self, element: ParserElement, text: str) -> Any:
        self._trail = []
        try:
            return element.parse_string(text, parse_all=True)[0]
        except ParseBaseException as e:
            raise BebopParseError.from_exception(e, text, list(self._trail)) from e
        except RecursionError as e:
            raise BebopParseError("Input is nested too deeply to parse", 0, 1, 1) from e

    def parse_program(self, text: str) -> Sexpr:
        """Parse zero or more top-level expressions into one root Sexpr"""
        return self._parse(self.program, text)

    def parse_expression(self, text: str) -> Any:
        """Parse exactly one expression"""
        return self._parse(self.expression, text)


class BebopParser:
    """Main Bebop parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = LispGrammar(debug)

    def parse_file(self, filepath: str) -> Sexpr:
        """Parse a Bebop source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.grammar.parse_program(content)

    def parse_string(self, text: str) -> Sexpr:
        """Parse Bebop source code from string"""
        return self.grammar.parse_program(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> BebopParser:
    """Create a Bebop parser"""
    return BebopParser(debug=debug)


def create_debug_parser() -> BebopParser:
    """Create a Bebop parser with debug enabled"""
    return BebopParser(debug=True)


_default_parser = None


def parse(text: str) -> Sexpr:
    """Parse source text with a shared parser instance"""
    global _default_parser
    if _default_parser is None:
        _default_parser = create_parser()
    return _default_parser.parse_string(text)


def pretty_print_form(form: Any, indent: int = 0) -> str:
    """Pretty print a parsed form for debugging, one node per line"""
    result = "  " * indent + form.kind
    if isinstance(form, (Sexpr, Qexpr)):
        result += "\n"
        for cell in form.cells:
            result += pretty_print_form(cell, indent + 1)
        return result
    if isinstance(form, Str):
        return result + f"({form.text!r})\n"
    return result + f"({form})\n"
