"""
treelox - Main Entry Point
A tree-walking interpreter for a small Lox-family scripting language
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, List, Optional
import atexit
import traceback
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from tokens import KEYWORDS
from scanning import tokenize
from parsing import create_parser, create_debug_parser, format_program
from interpreter import create_interpreter, create_debug_interpreter
from environment import iter_visible_bindings
from stdlib import stringify
from error_handling import LoxError, LoxRuntimeError, describe_error


VERSION = "0.1.0"
PROMPT = "lox> "
CONTINUATION_PROMPT = "...> "
HISTORY_FILE = "~/.treelox_history"
REPL_COMMANDS = [":tokens", ":ast", ":env", ":help", "exit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Build the treelox command line"""
  parser = argparse.ArgumentParser(
      prog='treelox',
      description='treelox - tree-walking interpreter for a small Lox dialect',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s hello.lox              # Run a script
  %(prog)s                        # Start the REPL
  %(prog)s --tokens hello.lox     # Print the token stream
  %(prog)s --parse hello.lox      # Print the syntax tree
  %(prog)s --debug hello.lox      # Trace every evaluated node
        """
  )

  parser.add_argument('script', nargs='?', help='Lox source file to run')
  parser.add_argument('-i', '--interactive', action='store_true',
                      help='Start the REPL (also the default with no arguments)')

  stages = parser.add_mutually_exclusive_group()
  stages.add_argument('--tokens', action='store_true',
                      help='Stop after scanning and print the tokens')
  stages.add_argument('--parse', action='store_true',
                      help='Stop after parsing and print the syntax tree')

  parser.add_argument('--debug', action='store_true',
                      help='Print stage summaries and trace evaluation')
  parser.add_argument('--version', action='version', version=f'treelox {VERSION}')

  return parser


def read_source(script_path: str) -> str:
  """Read a UTF-8 script, exiting with a hint when it cannot be read"""
  problem = None
  hint = None
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    problem = "was not found"
    hint = "check the path"
  except PermissionError:
    problem = "is not readable"
    hint = "check the file permissions"
  except UnicodeDecodeError as e:
    problem = f"is not valid UTF-8 ({e.reason})"
    hint = "save the script as UTF-8 text"

  print(f"Error: Script '{script_path}' {problem}")
  print(f"  Hint: {hint}")
  sys.exit(1)


def show_tokens_file(script_path: str, debug: bool = False) -> None:
  """Print the token stream of a script, one token per line"""
  source = read_source(script_path)
  front_end = create_parser(debug)
  try:
    tokens = front_end.tokenize(source)
  except LoxError as e:
    print(f"Scan error in '{script_path}':\n{describe_error(e, source)}")
    sys.exit(1)
  for token in tokens:
    print(token)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Print the syntax tree of every top-level statement"""
  source = read_source(script_path)
  try:
    statements = create_parser(debug).parse_string(source)
  except LoxError as e:
    print(f"Parse error in '{script_path}':\n{describe_error(e, source)}")
    sys.exit(1)

  print(f"Parsed {len(statements)} top-level statements:")
  print("=" * 50)
  print(format_program(statements))


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Scan, parse and run a script; any Lox error ends the process with status 1"""
  source = read_source(script_path)
  session = create_interpreter(debug)
  if debug:
    print(f"Running {script_path}...")

  try:
    session.run_source(source)
  except LoxRuntimeError as e:
    banner = '=' * 70
    print(f"\n{banner}\nRuntime Error in '{script_path}'\n{banner}")
    print(describe_error(e, source))
    print(f"{banner}\n")
    sys.exit(1)
  except LoxError as e:
    print(f"Error in '{script_path}':\n{describe_error(e, source)}")
    sys.exit(1)


def setup_readline():
  """Load REPL history and complete keywords and commands on Tab"""
  if not READLINE_AVAILABLE:
    return

  history_path = os.path.expanduser(HISTORY_FILE)
  if os.path.exists(history_path):
    try:
      readline.read_history_file(history_path)
    except OSError as e:
      print(f"Warning: could not read history from {history_path}: {e}")
  readline.set_history_length(1000)

  candidates = sorted(KEYWORDS) + REPL_COMMANDS

  def complete(text, state):
    matches = [word for word in candidates if word.startswith(text)]
    return matches[state] if state < len(matches) else None

  readline.set_completer(complete)
  readline.parse_and_bind("tab: complete")
  atexit.register(save_history, history_path)


def save_history(history_path: str) -> None:
  try:
    readline.write_history_file(history_path)
  except OSError as e:
    print(f"Warning: could not save history to {history_path}: {e}")


def needs_more_input(code: str) -> bool:
  """True while a brace, parenthesis or string opened in code is still open"""
  tokens, errors = tokenize(code)
  if any(error.message == "Unterminated string." for error in errors):
    return True

  depth = 0
  for token in tokens:
    if token.is_a('{', '('):
      depth += 1
    elif token.is_a('}', ')'):
      depth -= 1
  return depth > 0


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :tokens <code>    - Show scanned tokens")
  print("  :ast <code>       - Show parsed AST")
  print("  :env              - Show current environment")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  var x = 5;                        - Variable declaration")
  print("  x = x + 1;                        - Assignment")
  print("  print \"a\" + \"b\";                  - Print")
  print("  { var x = 2; print x; }           - Block scope")
  print("  if (x > 1) print x; else print 0; - Conditional")
  print("  while (x < 10) x = x + 1;         - Loop")
  print("  for (var i = 0; i < 3; i = i + 1) print i;")


def print_environment(session) -> None:
  print("Current environment:")
  bindings = list(iter_visible_bindings(session.global_env))
  if not bindings:
    print("  (no user-defined bindings)")
  for name, value in bindings:
    text = stringify(value)
    if len(text) > 60:
      text = text[:57] + "..."
    print(f"  {name} = {text}")


def run_repl_command(code: str, parser, session) -> bool:
  """Handle a ':' command; False when code is ordinary Lox source"""
  command, _, argument = code.strip().partition(' ')

  if command == ':env':
    print_environment(session)
  elif command == ':help':
    print_repl_help()
  elif command in (':tokens', ':ast'):
    try:
      if command == ':tokens':
        for token in parser.tokenize(argument):
          print(token)
      else:
        print(format_program(parser.parse_string(argument)))
    except LoxError as e:
      print(describe_error(e, argument))
  else:
    return False
  return True


def run_interactive_mode(
    debug: bool = False,
    input_func: Callable[[str], str] = input,
    use_readline: bool = True
) -> None:
  """Run the REPL; one root environment lives for the whole session"""
  print(f"treelox v{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE and use_readline:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  if use_readline:
    setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  session = create_debug_interpreter() if debug else create_interpreter()
  pending = ""

  while True:
    try:
      line = input_func(CONTINUATION_PROMPT if pending else PROMPT)
    except (EOFError, KeyboardInterrupt):
      print("\nGoodbye!")
      return

    code = f"{pending}\n{line}" if pending else line
    if not pending:
      if code.strip() == "exit":
        return
      if not code.strip() or run_repl_command(code, parser, session):
        continue

    if needs_more_input(code):
      pending = code
      continue
    pending = ""

    try:
      result = session.run_source(code)
    except LoxError as e:
      print(describe_error(e, code))
      continue
    except KeyboardInterrupt:
      print("\nInterrupted")
      continue
    except Exception as e:
      # A host-level failure must not end the session
      print(f"Unexpected error: {e}")
      if debug:
        traceback.print_exc()
      continue

    if result is not None:
      print(f"=> {stringify(result)}")


def show_language_info() -> None:
  print("treelox")
  print("=" * 50)
  print("A small dynamically typed scripting language with:")
  print("• Numbers, strings, booleans and nil")
  print("• Block-scoped variables")
  print("• if / else, while and for")
  print()


def main(argv: Optional[List[str]] = None) -> None:
  """Command line entry point"""
  if argv is None:
    argv = sys.argv[1:]
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script and args.interactive:
    arg_parser.error("-i/--interactive cannot be combined with a script")
  if not args.script and (args.tokens or args.parse):
    arg_parser.error("--tokens and --parse need a script")

  # No arguments - show info and start interactive mode
  if not argv:
    show_language_info()
    print("Use 'treelox --help' for command line options")
    print()
    run_interactive_mode(debug=False)

  elif args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      show_tokens_file(args.script, debug=args.debug)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
