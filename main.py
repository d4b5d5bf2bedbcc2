"""
Bebop Programming Language - Main Entry Point
A small Lisp with quoted lists, curried closures and a markdown front end
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from environment import Environment
from error_handling import BebopParseError, BebopRuntimeError
from interpreter import EVALUATOR_FUNCTIONS, create_builtin_runtime_env, lisp, run_program
from markdown_lisp import markdown_to_lisp, render_markdown
from parsing import create_parser, create_debug_parser, pretty_print_form
from prelude import PRELUDE_NAMES, load_prelude
from stdlib import list_builtin_functions

VERSION = "Bebop v0.1.0"
HISTORY_FILE = "~/.bebop_history"
PROMPT = ">> "


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Bebop - a small Lisp for writing HTML documents',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.bop                # Run a Bebop script, print its last value
  %(prog)s page.md                   # Render a markdown document to HTML
  %(prog)s -i                        # Interactive mode
  %(prog)s --parse script.bop        # Parse and show the forms
  %(prog)s --markdown page.md        # Show the Bebop source of a document
  %(prog)s --debug script.bop        # Run with evaluation trace
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Bebop script or markdown document to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show its forms (for debugging)'
  )

  parser.add_argument(
      '--markdown',
      action='store_true',
      help='Show the Bebop source a markdown document transpiles to'
  )

  parser.add_argument(
      '--no-prelude',
      action='store_true',
      help='Start from the builtins only, without the prelude'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def create_session_env(debug: bool = False, use_prelude: bool = True) -> Environment:
  """Root environment for a script or REPL session"""
  env = create_builtin_runtime_env(debug)
  if use_prelude:
    load_prelude(env)
  return env


def read_source(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def report_file_error(script_path: str, error: Exception, debug: bool = False) -> None:
  """Print a readable message for a failed script and exit"""
  if isinstance(error, FileNotFoundError):
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
  elif isinstance(error, PermissionError):
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
  elif isinstance(error, UnicodeDecodeError):
    print(f"Error: Cannot decode file '{script_path}': {error}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
  elif isinstance(error, BebopParseError):
    print(f"Parse error in '{script_path}': {error}")
  elif isinstance(error, BebopRuntimeError):
    print(f"{error}")
  elif isinstance(error, RecursionError):
    print(f"Error in '{script_path}': recursion too deep")
  else:
    print(f"Unexpected error while processing '{script_path}': {error}")
    if debug:
      import traceback
      traceback.print_exc()
  sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Bebop script file and show its forms"""
  try:
    parser = create_debug_parser() if debug else create_parser()

    print(f"Parsing {script_path}...")
    program = parser.parse_file(script_path)

    print(f"\nParsed {len(program.cells)} top-level forms:")
    print("=" * 50)

    for i, form in enumerate(program.cells, 1):
      print(f"\nForm {i}:")
      print(pretty_print_form(form), end="")

  except Exception as e:
    report_file_error(script_path, e, debug)


def show_markdown_source(script_path: str, debug: bool = False) -> None:
  """Print the Bebop source a markdown document transpiles to"""
  try:
    print(markdown_to_lisp(read_source(script_path)), end="")
  except Exception as e:
    report_file_error(script_path, e, debug)


def run_script_file(script_path: str, debug: bool = False, use_prelude: bool = True) -> None:
  """Run a Bebop script, or render a markdown document, and print the result"""
  try:
    source = read_source(script_path)
    env = create_session_env(debug, use_prelude)

    if Path(script_path).suffix == ".md":
      print(render_markdown(source, env))
      return

    results = run_program(env, source)
    if debug:
      print(f"Evaluated {len(results)} top-level forms")
    if results:
      print(results[-1])

  except Exception as e:
    report_file_error(script_path, e, debug)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  completions = list_builtin_functions() + list(EVALUATOR_FUNCTIONS) + PRELUDE_NAMES + [
      # REPL commands
      ":parse", ":env", ":help"
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.set_completer_delims(" ()[]\"")
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def describe_env(env: Environment) -> str:
  """User bindings of the root frame, one per line"""
  builtins = set(list_builtin_functions()) | set(EVALUATOR_FUNCTIONS)
  lines = []
  for name, value in env.frames[0].items():
    if name in builtins:
      continue
    val_str = str(value)
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    lines.append(f"  {name} = {val_str}")
  return "\n".join(lines) if lines else "  (no user-defined bindings)"


REPL_HELP = """REPL Commands:
  :parse <expr>     - Show parsed forms
  :env              - Show current environment
  :help             - Show this help

Language features:
  + 1 2                          - The whole line is one application
  def [x] 5                      - Global binding
  (\\ [a b] [+ a b]) 1            - Closures curry when given too few args
  \\ [x : rest] [rest]            - : collects the remaining args in a list
  if (> 2 1) [echo 1] [echo 0]   - Branches are quoted lists"""


def handle_repl_line(line: str, env: Environment, parser) -> Optional[str]:
  """Output for one line of REPL input, or None when there is nothing to show"""
  code = line.strip()

  if not code:
    return None

  if code == ":help":
    return REPL_HELP

  if code == ":env":
    return "Current environment:\n" + describe_env(env)

  if code.startswith(":parse"):
    try:
      program = parser.parse_string(code[len(":parse"):])
      return pretty_print_form(program).rstrip("\n")
    except BebopParseError as e:
      return f"Parse error: {e}"

  return lisp(env, line)


def repl_loop(env: Environment, parser, read: Callable[[str], str] = input,
              write: Callable[[str], None] = print) -> None:
  """Read lines until an interrupt, end of input or I/O failure"""
  while True:
    try:
      line = read(PROMPT)
    except KeyboardInterrupt:
      write("CTRL-C")
      break
    except EOFError:
      write("CTRL-D")
      break
    except OSError as e:
      write(f"Error: {e}")
      break

    try:
      output = handle_repl_line(line, env, parser)
    except RecursionError:
      output = "Error: recursion too deep"

    if output is not None:
      write(output)


def run_interactive_mode(debug: bool = False, use_prelude: bool = True) -> None:
  """Run Bebop in interactive mode"""
  print(f"{VERSION} - Interactive Mode")
  print("Type ':help' for commands, Ctrl-D to quit")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  env = create_session_env(debug, use_prelude)
  repl_loop(env, parser)


def main() -> None:
  """Main entry point for Bebop"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()
  use_prelude = not args.no_prelude

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    elif args.markdown:
      show_markdown_source(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug, use_prelude=use_prelude)

    if args.interactive:
      run_interactive_mode(debug=args.debug, use_prelude=use_prelude)

  else:
    # No script: interactive mode is the default
    run_interactive_mode(debug=args.debug, use_prelude=use_prelude)


if __name__ == "__main__":
  main()
