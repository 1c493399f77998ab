"""CLI entry point: argparse dispatcher for all subcommands."""
from __future__ import annotations

import argparse
import json
import sys
import traceback

from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Command registry: command name → (module_path, function_name)
# Lazy-imported at dispatch time to keep startup fast.
# ---------------------------------------------------------------------------
COMMANDS = {
    "list":         ("cli.commands.directories", "cmd_list"),
    "add":          ("cli.commands.directories", "cmd_add"),
    "delete":       ("cli.commands.directories", "cmd_delete"),
    "enable":       ("cli.commands.directories", "cmd_enable"),
    "disable":      ("cli.commands.directories", "cmd_disable"),
    "toggle":       ("cli.commands.directories", "cmd_toggle"),
    "git-interval": ("cli.commands.directories", "cmd_git_interval"),
    "pull":         ("cli.commands.directories", "cmd_pull"),
    "ignore show":  ("cli.commands.ignore",      "cmd_ignore_show"),
    "ignore save":  ("cli.commands.ignore",      "cmd_ignore_save"),
    "ignore edit":  ("cli.commands.ignore",      "cmd_ignore_edit"),
}

ROLE_CHOICES = ["frontend-business", "backend-business", "frontend-framework", "backend-framework",
                "前端业务", "后端业务", "前端框架", "后端框架"]
LANGUAGE_CHOICES = ["java", "js", "py", "go", "ts", "javascript", "csharp", "cpp",
                    "rust", "vue", "swift", "kotlin", "ruby", "php"]
INTERVAL_CHOICES = [0, 300, 600, 1800, 3600]


# ---------------------------------------------------------------------------
# Parser builder
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    from cli._version import __version__

    parser = argparse.ArgumentParser(
        prog="codex-admin",
        description="codex-mcp admin console: manage indexed directories and ignore rules",
    )
    parser.add_argument("--base-url", help="codex-mcp root URL (default: $CODEX_MCP_URL or http://localhost:6688)")
    parser.add_argument("--timeout", type=float, help="Read timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    parser.add_argument("--debug", action="store_true", help="Show stack traces on error")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List indexed directories")

    p = sub.add_parser("add", help="Add a directory to index")
    p.add_argument("name", help="Display name")
    p.add_argument("path", help="Absolute directory path")
    p.add_argument("-r", "--role", default="", choices=ROLE_CHOICES + [""], metavar="ROLE",
                   help="Directory role (required): " + ", ".join(ROLE_CHOICES[:4]))
    p.add_argument("-l", "--language", default="", choices=LANGUAGE_CHOICES + [""], metavar="LANG",
                   help="Restrict to a language (default: unrestricted)")

    p = sub.add_parser("delete", help="Remove a directory")
    p.add_argument("id", type=int)
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")

    for name, help_text in (("enable", "Enable a directory"),
                            ("disable", "Disable a directory"),
                            ("toggle", "Flip a directory's enabled flag")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id", type=int)

    p = sub.add_parser("git-interval", help="Set the Git auto-update interval")
    p.add_argument("id", type=int)
    p.add_argument("interval", type=int, choices=INTERVAL_CHOICES,
                   help="Seconds: 0 (off), 300, 600, 1800 or 3600")

    p = sub.add_parser("pull", help="Run a Git pull now")
    p.add_argument("id", type=int)

    p = sub.add_parser("ignore", help="Ignore rules (gitignore format)")
    ignore_sub = p.add_subparsers(dest="ignore_command", required=True)
    ignore_sub.add_parser("show", help="Print the ignore file")
    ip = ignore_sub.add_parser("save", help="Replace the ignore file from FILE or stdin")
    ip.add_argument("file", nargs="?", default="-", help="Source file (default: stdin)")
    ignore_sub.add_parser("edit", help="Edit the ignore file in $VISUAL/$EDITOR")

    return parser


def command_key(args: argparse.Namespace) -> str:
    if args.command == "ignore":
        return f"ignore {args.ignore_command}"
    return args.command


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    from codex_admin.config import json_logging
    from codex_admin.logger import use_json_logging

    if json_logging():
        use_json_logging()

    entry = COMMANDS.get(command_key(args))
    if not entry:
        parser.print_help()
        sys.exit(1)

    mod_path, fn_name = entry
    try:
        import importlib
        mod = importlib.import_module(mod_path)
        fn = getattr(mod, fn_name)
        fn(args)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as exc:
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, default=str, ensure_ascii=False)
        sys.stdout.write("\n")
        if args.debug:
            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
