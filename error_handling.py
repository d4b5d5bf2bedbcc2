"""
Error handling for Bebop
Runtime error taxonomy plus parse diagnostics built from pyparsing exceptions
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from pyparsing import ParseBaseException
import re


# ============================================================================
# RUNTIME ERRORS
# ============================================================================

class ErrorKind(Enum):
    """Closed set of runtime failures"""
    DIV_ZERO = "DivZero"
    BAD_OP = "BadOp"
    BAD_NUM = "BadNum"
    INCORRECT_PARAM_COUNT = "IncorrectParamCount"
    EMPTY_LIST = "EmptyList"
    WRONG_TYPE = "WrongType"
    UNBOUND_SYMBOL = "UnboundSymbol"
    INTERRUPT = "Interrupt"


ERROR_DETAILS: Dict[ErrorKind, str] = {
    ErrorKind.DIV_ZERO: "Cannot Divide By Zero",
    ErrorKind.BAD_OP: "Invalid Operator",
    ErrorKind.BAD_NUM: "Invalid Operand",
    ErrorKind.INCORRECT_PARAM_COUNT: "Incorrect Number of Params passed to function",
    ErrorKind.WRONG_TYPE: "Incorrect Data Type used",
    ErrorKind.EMPTY_LIST: "Empty List passed to function",
    ErrorKind.UNBOUND_SYMBOL: "This Symbol has not been Defined",
    ErrorKind.INTERRUPT: "User defined Error",
}


class BebopRuntimeError(Exception):
    """Evaluation failure; unwinds to whoever started the evaluation"""
    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        self.details = ERROR_DETAILS[kind]
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"Error: {self.kind.value} - {self.details}; {self.message}"

    def __eq__(self, other) -> bool:
        return (isinstance(other, BebopRuntimeError)
                and (self.kind, self.message) == (other.kind, other.message))

    def __hash__(self) -> int:
        return hash((self.kind, self.message))


# ============================================================================
# PARSE ERROR DATA (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    trail: Optional[List[Tuple[str, int]]] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'trail': trail or [],
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['trail']:
        error_msg += "  While parsing:\n"
        for label, offset in error['trail']:
            error_msg += f"    - {label} starting at offset {offset}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract the expected construct from a pyparsing exception message"""
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found\b|\s+\(at\b|$)", exc.msg)
    if expected_match:
        return [expected_match.group(1)]
    return ["valid syntax"]


def extract_got(source_text: str, location: int) -> str:
    """Extract what was actually found at the error location"""
    if location >= len(source_text):
        return "end of input"

    got_text = source_text[location:location + 10].split('\n')[0].strip()
    if got_text:
        return f"'{got_text}'"
    return "end of line"


def unclosed_delimiters(source_text: str, location: int) -> List[str]:
    """Brackets and quotes still open at the error location, outermost first"""
    openers = {')': '(', ']': '['}
    opened = []
    in_string = False
    for char in source_text[:location]:
        if in_string:
            if char == '"':
                in_string = False
                opened.pop()
        elif char == '"':
            in_string = True
            opened.append('"')
        elif char in "([":
            opened.append(char)
        elif char in openers and opened and opened[-1] == openers[char]:
            opened.pop()
    return opened


def generate_suggestions(source_text: str, location: int, got: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []
    closers = {'(': "')'", '[': "']'", '"': "'\"'"}

    opened = unclosed_delimiters(source_text, location)
    if opened:
        suggestions.append(f"Add a closing {closers[opened[-1]]} for the one opened earlier")

    if got in ("')'", "']'") or got.startswith(("')", "']")):
        if not opened:
            suggestions.append("Remove the unmatched closing bracket")
        else:
            suggestions.append("Brackets are mismatched: ( closes with ) and [ closes with ]")

    if got.startswith("'{") or got.startswith("'}"):
        suggestions.append("Use [ ] for quoted lists instead of { }")

    return suggestions


def enhance_parse_exception_dict(
    exc: ParseBaseException,
    source_text: str,
    trail: Optional[List[Tuple[str, int]]] = None
) -> Dict:
    """Convert pyparsing exception to an enhanced Bebop error dict"""
    line_num = exc.lineno
    col_num = exc.column

    got = extract_got(source_text, exc.loc)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=extract_expected(exc),
        got=got,
        context=get_context_lines(source_text, line_num, col_num),
        trail=trail,
        suggestions=generate_suggestions(source_text, exc.loc, got)
    )


# ============================================================================
# PARSE ERROR EXCEPTION
# ============================================================================

class BebopParseError(Exception):
    """Source text did not match the grammar; never reaches the evaluator"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, trail: Optional[List[Tuple[str, int]]] = None,
                 suggestions: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.trail = trail or []
        self.suggestions = suggestions or []
        super().__init__(message)

    @classmethod
    def from_exception(cls, exc: ParseBaseException, source_text: str,
                       trail: Optional[List[Tuple[str, int]]] = None) -> 'BebopParseError':
        error_dict = enhance_parse_exception_dict(exc, source_text, trail)
        return cls(**error_dict)

    @property
    def labels(self) -> List[str]:
        """Context labels of the enclosing productions, innermost first"""
        return [label for label, _ in self.trail]

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.trail, self.suggestions
        )
        return format_parse_error(error_dict)
