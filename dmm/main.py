"""CLI entry point for the dmm interpreter."""
from __future__ import annotations
import sys
import os
import argparse
import traceback

from .lexer import Lexer, LexerError
from .parser import Parser
from .printer import dump
from .runtime import Interpreter, DmmError, FatigueAbort


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="dmm",
        description="dmm interpreter. Set USE_HUMANOIDS to meet the Worker and the Shouter.",
    )
    parser.add_argument("file", nargs="?", help="Source file to execute")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--lexer", action="store_true", help="Print the token stream and stop")
    mode.add_argument("--ast", action="store_true", help="Print the syntax tree and stop")
    parser.add_argument("--strict", action="store_true",
                        help="No Worker checks, plain output (the default unless USE_HUMANOIDS is set)")

    args = parser.parse_args(argv)

    flags = {
        "strict": args.strict or "USE_HUMANOIDS" not in os.environ,
    }

    if args.file:
        if args.lexer:
            mode_name = "lexer"
        elif args.ast:
            mode_name = "ast"
        else:
            mode_name = "run"
        run_file(args.file, flags, mode_name)
    else:
        run_repl(flags)


def read_source(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"[dmm] File not found: {path}")
        sys.exit(1)
    # Editors like to end files with a line break; the farewell must come last
    return source.rstrip("\n")


def print_tokens(source: str):
    try:
        for token in Lexer(source):
            print(token)
    except LexerError as e:
        print(e)
        sys.exit(1)


def print_ast(source: str):
    try:
        tree = Parser(Lexer(source)).parse()
    except LexerError as e:
        print(e)
        sys.exit(1)
    print(dump(tree))


def interpret_text(source: str, flags: dict) -> int:
    """Run one program. Returns a process exit code."""
    interp = Interpreter(flags=flags)
    try:
        interp.run(source)
    except LexerError as e:
        print(f"\n{e}")
        return 1
    except DmmError as e:
        print(f"\n[dmm] Runtime Error: {e}")
        return 1
    except FatigueAbort as e:
        print(f"\n[dmm] {interp.worker.mood} {e}")
        return 3
    except Exception as e:
        print(f"\n[dmm] Internal Error: {e}")
        traceback.print_exc()
        return 2
    return 0


def run_file(path: str, flags: dict, mode: str = "run"):
    """Execute, tokenize or parse a dmm file."""
    source = read_source(path)
    if mode == "lexer":
        print_tokens(source)
    elif mode == "ast":
        print_ast(source)
    else:
        code = interpret_text(source, flags)
        if code:
            sys.exit(code)


def run_repl(flags: dict):
    """Interactive REPL. Every line is a program of its own; type ``\\n`` for
    a line break, e.g. ``hallo\\na = 1\\nreicht dann auch mal``."""
    print("dmm REPL. Ctrl-D to leave.\n")

    while True:
        try:
            line = input("dmm> ")
        except (EOFError, KeyboardInterrupt):
            print("\n[dmm] Tschüss.")
            break

        if not line.strip():
            continue
        interpret_text(line.replace("\\n", "\n"), flags)


if __name__ == "__main__":
    main()
