from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Command-line entrypoint. Rendering is intentionally plain: tokens go to
stdout as they arrive, errors go to stderr.
"""

import argparse
import logging
import re
import sys
import time
from pathlib import Path
from typing import Callable

import pyperclip

from .bootstrap import build_pipeline, default_registry
from .config import SageSettings, load_user_config, user_config_path
from .errors import ConfigurationError, SageError
from .logs import configure_logging
from .providers.registry import ProviderRegistry
from .stats import load_stats, record

logger = logging.getLogger("ssage.cli")

MAX_LOG_CHARS = 2000
TRUNCATION_MARKER = "\n...[truncated]..."

_LANG_PREAMBLE = "IMPORTANT: You MUST respond ONLY in {lang}. Do not use any other language.\n"

EXPLAIN_PROMPT = (
    _LANG_PREAMBLE
    + "Explain this shell command in max 3 bullet points. Be extremely concise, "
    "no intro, no extra text: '{command}'"
)
TIP_PROMPT = (
    _LANG_PREAMBLE
    + "Give me ONE practical, specific terminal/shell tip that most developers "
    "don't know. Be concise, max 3 sentences. No intro text."
)
ANALYZE_PROMPT = (
    _LANG_PREAMBLE
    + "You are a sysadmin. Analyze this log and summarize the critical errors in "
    "max 4 bullet points, no intro:\n\n{content}"
)
FIX_PROMPT = (
    _LANG_PREAMBLE
    + "You are a shell expert. Given these recent commands, identify if the last one "
    "likely failed and suggest a concise fix in max 3 bullet points. Commands: {commands}"
)

MAX_FIX_COMMANDS = 10

# leading entry numbers as printed by `history`
_HISTORY_NUMBER = re.compile(r"^\s*\d+\*?\s+")

Handler = Callable[[argparse.Namespace, SageSettings, ProviderRegistry], int]


def _resolve_lang(flag: str | None) -> str:
    if flag:
        return flag
    try:
        return load_user_config().lang or "English"
    except ConfigurationError:
        return "English"


def _error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def _copy_to_clipboard(text: str) -> None:
    """Copy a finished response; a missing clipboard only warns."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning("failed to copy to clipboard: %s", e)
        print(f"warning: could not copy: {e}", file=sys.stderr)
        return
    logger.info("response copied to clipboard")
    print("Copied to clipboard!", file=sys.stderr)


def _run_prompt(
    args: argparse.Namespace,
    settings: SageSettings,
    registry: ProviderRegistry,
    command: str,
    prompt: str,
) -> int:
    started = time.monotonic()
    logger.info("starting %r command", command)

    try:
        pipe = build_pipeline(
            registry,
            settings=settings,
            provider=args.provider,
            model=args.model or "",
            use_cache=not args.no_cache,
        )
    except SageError as e:
        logger.error("%r failed to build pipeline: %s", command, e)
        record(command, time.monotonic() - started, str(e))
        _error(str(e))
        return 1

    streamed = False

    def _print_token(token: str) -> None:
        nonlocal streamed
        streamed = True
        sys.stdout.write(token)
        sys.stdout.flush()

    try:
        response = pipe.run_stream(prompt, command, _print_token)
    except SageError as e:
        elapsed = time.monotonic() - started
        if streamed:
            sys.stdout.write("\n")
        logger.error("%r failed after %.0f ms: %s", command, elapsed * 1000, e)
        record(command, elapsed, str(e))
        _error(str(e))
        return 1

    elapsed = time.monotonic() - started
    sys.stdout.write("\n")
    logger.info("%r completed in %.0f ms", command, elapsed * 1000)
    record(command, elapsed)
    if args.copy:
        _copy_to_clipboard(response)
    return 0


def _cmd_explain(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    if not args.words:
        _error("explain needs a command, e.g. ssage explain ls -la")
        return 1
    target = " ".join(args.words)
    prompt = EXPLAIN_PROMPT.format(lang=_resolve_lang(args.lang), command=target)
    return _run_prompt(args, settings, registry, "explain", prompt)


def _cmd_tip(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    prompt = TIP_PROMPT.format(lang=_resolve_lang(args.lang))
    return _run_prompt(args, settings, registry, "tip", prompt)


def _cmd_analyze(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    path = Path(args.file)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error("failed to read log file %s: %s", path, e)
        record("analyze", 0.0, str(e))
        _error(f"reading file: {e}")
        return 1

    if len(content) > MAX_LOG_CHARS and not args.full:
        logger.info("log truncated at %d chars (was %d)", MAX_LOG_CHARS, len(content))
        content = content[:MAX_LOG_CHARS] + TRUNCATION_MARKER

    prompt = ANALYZE_PROMPT.format(lang=_resolve_lang(args.lang), content=content)
    return _run_prompt(args, settings, registry, "analyze", prompt)


def _recent_commands(given: list[str]) -> list[str]:
    """
    Commands come from argv, or from stdin when it is piped
    (`history | tail -n 10 | ssage fix`). Shell history files are not read.
    """
    if given:
        lines = given
    elif not sys.stdin.isatty():
        lines = sys.stdin.read().splitlines()
    else:
        lines = []
    commands = [_HISTORY_NUMBER.sub("", line).strip() for line in lines]
    return [c for c in commands if c][-MAX_FIX_COMMANDS:]


def _cmd_fix(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    commands = _recent_commands(args.commands)
    if not commands:
        _error("no recent commands given; pass them as arguments or pipe `history` in")
        return 1
    logger.info("fix called with %d commands", len(commands))
    prompt = FIX_PROMPT.format(lang=_resolve_lang(args.lang), commands=" | ".join(commands))
    return _run_prompt(args, settings, registry, "fix", prompt)


def _cmd_config(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    del settings, registry
    try:
        cfg = load_user_config()
        if args.config_action == "set":
            cfg.set_value(args.key, args.value)
            cfg.save()
            print(f"Successfully set {args.key} to {args.value}")
            return 0
    except ConfigurationError as e:
        _error(str(e))
        return 1

    print(f"Config file: {user_config_path()}")
    print(f"Model: {cfg.model}")
    print(f"Language: {cfg.lang}")
    print(f"Provider: {cfg.provider}")
    return 0


def _cmd_stats(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    del args, settings, registry
    store = load_stats()
    if not store.root:
        print("No stats recorded yet.")
        return 0
    for name in sorted(store.root):
        stat = store.root[name]
        print(f"{name}:")
        print(f"  Runs: {stat.runs}")
        print(f"  Failures: {stat.failures}")
        print(f"  Avg Duration: {stat.avg_time_ms}ms")
        if stat.last_run is not None:
            print(f"  Last Run: {stat.last_run.isoformat()}")
        if stat.last_error:
            print(f"  Last Error: {stat.last_error}")
    return 0


def _cmd_providers(args: argparse.Namespace, settings: SageSettings, registry: ProviderRegistry) -> int:
    del args, settings
    for name in registry.available():
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssage",
        description="Shell Sage - your AI terminal assistant.",
    )
    parser.add_argument("-m", "--model", help="model to use (e.g. llama3, mistral)")
    parser.add_argument("-l", "--lang", help="response language (e.g. 'es', 'French')")
    parser.add_argument("-p", "--provider", help="AI provider to use (e.g. ollama)")
    parser.add_argument(
        "-c", "--copy", action="store_true", help="copy the finished response to the clipboard"
    )
    parser.add_argument(
        "--no-cache", action="store_true", help="bypass the response cache for this run"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    explain = sub.add_parser("explain", help="explain a shell command")
    explain.add_argument("words", nargs=argparse.REMAINDER, metavar="COMMAND")
    explain.set_defaults(handler=_cmd_explain)

    tip = sub.add_parser("tip", help="get a terminal tip")
    tip.set_defaults(handler=_cmd_tip)

    analyze = sub.add_parser("analyze", help="summarize errors in a log file")
    analyze.add_argument("file")
    analyze.add_argument(
        "--full", action="store_true", help=f"send the whole file, not the first {MAX_LOG_CHARS} chars"
    )
    analyze.set_defaults(handler=_cmd_analyze)

    fix = sub.add_parser(
        "fix", help="suggest a fix for the last of some recent shell commands"
    )
    fix.add_argument(
        "commands", nargs="*", metavar="COMMAND", help="recent commands, oldest first (or piped on stdin)"
    )
    fix.set_defaults(handler=_cmd_fix)

    config = sub.add_parser("config", help="show or change persistent configuration")
    config_sub = config.add_subparsers(dest="config_action")
    config_set = config_sub.add_parser("set", help="set a configuration value")
    config_set.add_argument("key", choices=["model", "lang", "provider"])
    config_set.add_argument("value")
    config.set_defaults(handler=_cmd_config)

    stats = sub.add_parser("stats", help="show local usage statistics")
    stats.set_defaults(handler=_cmd_stats)

    providers = sub.add_parser("providers", help="list registered providers")
    providers.set_defaults(handler=_cmd_providers)

    return parser


def main(argv: list[str] | None = None, *, registry: ProviderRegistry | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = SageSettings.from_env()
    except ConfigurationError as e:
        _error(str(e))
        return 1

    configure_logging(settings.log_file, settings.log_level)
    handler: Handler = args.handler
    return handler(args, settings, registry or default_registry(settings))


if __name__ == "__main__":
    sys.exit(main())
