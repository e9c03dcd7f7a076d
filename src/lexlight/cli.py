"""Command-line interface for lexlight."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from lexlight.errors import GrammarError, MarkupError, ThemeError
from lexlight.render import MARKUPS

if TYPE_CHECKING:
    from lexlight.themes import Theme

logger = logging.getLogger(__name__)

CONFIG_NAME = "lexlight.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    grammar: str | None
    theme: str | None  # built-in theme name or path to a theme file
    markup: str
    combine: bool
    extensions: dict[str, str]
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="lexlight",
        description="Tokenize source text and render it as highlighted markup",
    )
    p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("-g", "--grammar", help="Grammar name (default: from file extension)")
    p.add_argument("-t", "--theme", help="Built-in theme name or theme .toml file")
    p.add_argument(
        "-m",
        "--markup",
        choices=sorted(MARKUPS),
        help="Output markup (default: rich-text)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--no-combine",
        action="store_true",
        help="Keep raw tokens instead of merging runs of equal types",
    )
    p.add_argument("--list", action="store_true", help="List grammars, themes and markups")
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-render")
    p.add_argument("--debug", action="store_true", help="Dump tokens and debug logs to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        config = tomllib.load(f)
    logger.debug("loaded config from %s", path)
    return config


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    config_dir = config_path.parent if config_path is not None else input_dir

    grammar = config.get("grammar")
    if grammar is not None and not isinstance(grammar, str):
        raise argparse.ArgumentTypeError("config 'grammar' must be a string")
    if args.grammar:
        grammar = args.grammar

    # Theme files named in the config are relative to the config file
    theme = config.get("theme")
    if theme is not None:
        if not isinstance(theme, str):
            raise argparse.ArgumentTypeError("config 'theme' must be a string")
        if theme.endswith(".toml"):
            theme = str(config_dir / theme)
    if args.theme:
        theme = args.theme

    markup = config.get("markup", "rich-text")
    if args.markup:
        markup = args.markup
    if not isinstance(markup, str) or markup.lower() not in MARKUPS:
        known = ", ".join(sorted(MARKUPS))
        raise argparse.ArgumentTypeError(f"unknown markup {markup!r} (available: {known})")

    combine = config.get("combine", True)
    if not isinstance(combine, bool):
        raise argparse.ArgumentTypeError("config 'combine' must be true or false")
    if args.no_combine:
        combine = False

    extensions: dict[str, str] = {}
    cfg_ext = config.get("extensions")
    if isinstance(cfg_ext, dict):
        for k, v in cfg_ext.items():
            extensions[str(k)] = str(v)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        grammar=grammar,
        theme=theme,
        markup=markup.lower(),
        combine=combine,
        extensions=extensions,
        watch=args.watch,
        debug=args.debug,
    )


def resolve_grammar_name(options: CliOptions) -> str:
    """Pick the grammar: explicit name first, then the input file's extension."""
    from lexlight.grammars import grammar_name_for_path

    if options.grammar:
        return options.grammar
    if options.input_file is not None:
        name = grammar_name_for_path(options.input_file, options.extensions)
        if name is not None:
            return name
    raise argparse.ArgumentTypeError("cannot determine grammar; pass --grammar")


def resolve_theme(spec: str | None) -> Theme:
    """Return the Theme for a built-in name, a theme file path, or the default."""
    from lexlight.themes import DEFAULT_THEME, get_theme, load_theme

    if spec is None:
        return DEFAULT_THEME
    if spec.endswith(".toml") or Path(spec).is_file():
        return load_theme(Path(spec))
    return get_theme(spec)


def highlight_file(options: CliOptions) -> str:
    """Read, tokenize and render the input to markup."""
    from lexlight.debug import dump_tokens
    from lexlight.lexer import tokenize
    from lexlight.render import get_markup, render

    if options.input_file is None:
        source = sys.stdin.read()
    else:
        source = options.input_file.read_text(encoding="utf-8")

    grammar = resolve_grammar_name(options)
    theme = resolve_theme(options.theme)
    tokens = tokenize(source, grammar, combine=options.combine)

    if options.debug:
        dump_tokens(tokens, file=sys.stderr)

    return render(tokens, theme, markup=get_markup(options.markup))


def list_available(file: TextIO | None = None) -> None:
    """Print the known grammars, themes and markups."""
    from lexlight.grammars import available_grammars
    from lexlight.themes import THEMES

    out = file if file is not None else sys.stdout
    out.write(f"grammars: {', '.join(available_grammars())}\n")
    out.write(f"themes: {', '.join(sorted(THEMES))}\n")
    out.write(f"markups: {', '.join(sorted(MARKUPS))}\n")


def _write_output(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def _decode_error(path: Path | None, exc: UnicodeDecodeError) -> str:
    name = path if path is not None else "<stdin>"
    return f"error: cannot decode {name} as UTF-8: {exc.reason} at byte {exc.start}"


def watch_loop(options: CliOptions, input_file: Path) -> None:
    """Poll *input_file* for changes, re-render on each modification."""
    last_mtime = 0.0
    print(f"Watching {input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    _write_output(options, highlight_file(options))
                    print(f"Rendered {input_file}", file=sys.stderr)
                except (GrammarError, ThemeError, MarkupError) as exc:
                    print(str(exc), file=sys.stderr)
                except UnicodeDecodeError as exc:
                    print(_decode_error(input_file, exc), file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.list:
        list_available()
        return 0

    try:
        options = resolve_options(args)
        resolve_grammar_name(options)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        if options.input_file is None:
            print("error: --watch needs an input file", file=sys.stderr)
            return 2
        watch_loop(options, options.input_file)
        return 0

    try:
        text = highlight_file(options)
    except (GrammarError, ThemeError, MarkupError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(_decode_error(options.input_file, exc), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: cannot read {options.input_file}: {exc.strerror}", file=sys.stderr)
        return 1

    _write_output(options, text)
    return 0
