"""CLI entry point for the project synthesis engine."""
import argparse
from dotenv import load_dotenv
import json
import logging
import sys
import traceback
from pathlib import Path

from project_synth.config import ConfigError, Settings, load_settings
from project_synth.correction import CorrectionError, make_diagnostic
from project_synth.models import CorrectionPhase, Diagnostic, FileTreeNode
from project_synth.orchestrator.exceptions import OrchestratorError
from project_synth.parsing import ParsingError
from project_synth.store import ProjectStore, StoreError, derive_tree, export_json, import_json

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_CONFIG_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_SURFACED = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

EXPORT_FORMATS = ("json", "zip", "html")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="project-synth",
        description="Turn AI responses into a virtual project and a live preview document",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--output-json", action="store_true", help="Output results as JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="List the file operations in a response")
    parse_cmd.add_argument("response", help="Response text file ('-' for stdin)")

    apply_cmd = subparsers.add_parser("apply", help="Apply a response to a project file")
    apply_cmd.add_argument("response", help="Response text file ('-' for stdin)")
    apply_cmd.add_argument(
        "--project", required=True, help="Project JSON file (created when missing)"
    )

    preview_cmd = subparsers.add_parser("preview", help="Compile a project into a preview document")
    preview_cmd.add_argument("--project", required=True, help="Project JSON file")
    preview_cmd.add_argument("--output", default="", help="Write the document here instead of stdout")
    preview_cmd.add_argument(
        "--allow-same-origin",
        action="store_true",
        help="Grant the preview frame same-origin privileges",
    )

    tree_cmd = subparsers.add_parser("tree", help="Print the project's folder tree")
    tree_cmd.add_argument("--project", required=True, help="Project JSON file")

    correct_cmd = subparsers.add_parser("correct", help="Build a correction prompt from diagnostics")
    correct_cmd.add_argument("--project", required=True, help="Project JSON file")
    correct_cmd.add_argument(
        "--diagnostics",
        required=True,
        help="JSON list of error messages or {kind, message} objects",
    )
    correct_cmd.add_argument(
        "--attempts",
        type=int,
        default=0,
        help="Corrections already requested in this session (default: 0)",
    )

    export_cmd = subparsers.add_parser("export", help="Export a project")
    export_cmd.add_argument("--project", required=True, help="Project JSON file")
    export_cmd.add_argument("--format", choices=EXPORT_FORMATS, default="json", help="Export format")
    export_cmd.add_argument("--output", required=True, help="Destination path")
    return parser


def configure_logging(settings: Settings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def read_text_input(source: str) -> str:
    """Read a text argument from a file path, or stdin for '-'."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def load_project(path: str, missing_ok: bool = False) -> tuple[ProjectStore, str]:
    """Load a project JSON file.

    Raises:
        FileNotFoundError: If the file is absent and ``missing_ok`` is False.
        ProjectImportError: If the file is not a project export.
    """
    project_path = Path(path)
    if missing_ok and not project_path.exists():
        return ProjectStore.empty(), project_path.stem or "project"
    return import_json(project_path.read_text(encoding="utf-8"))


def save_project(path: str, store: ProjectStore, name: str) -> None:
    project_path = Path(path)
    project_path.parent.mkdir(parents=True, exist_ok=True)
    project_path.write_text(export_json(store, name), encoding="utf-8")


def load_diagnostics(path: str) -> list[Diagnostic]:
    """Read diagnostics from a JSON list.

    Entries are plain messages (classified here) or objects with a
    ``message`` and optional ``kind``.

    Raises:
        ValueError: If the file is not a list of diagnostics.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Diagnostics file must hold a JSON list")
    diagnostics: list[Diagnostic] = []
    for entry in data:
        if isinstance(entry, str):
            diagnostics.append(make_diagnostic(entry))
        elif isinstance(entry, dict) and "kind" in entry:
            diagnostics.append(Diagnostic.model_validate(entry))
        elif isinstance(entry, dict) and isinstance(entry.get("message"), str):
            diagnostics.append(make_diagnostic(entry["message"]))
        else:
            raise ValueError(f"Invalid diagnostic entry: {entry!r}")
    return diagnostics


def format_tree(nodes: list[FileTreeNode], indent: int = 0) -> list[str]:
    lines: list[str] = []
    for node in nodes:
        suffix = "/" if node.is_folder else ""
        lines.append(f"{'  ' * indent}{node.name}{suffix}")
        lines.extend(format_tree(node.children or [], indent + 1))
    return lines


def print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    from project_synth.parsing import parse_response

    parsed = parse_response(read_text_input(args.response))
    if args.output_json:
        print_json(parsed.model_dump(mode="json"))
        return EXIT_SUCCESS

    print(f"Source: {parsed.source.value}")
    print(f"Operations ({len(parsed.operations)}):")
    for operation in parsed.operations:
        print(f"  {operation.op:<8} {operation.path}")
    if parsed.clean_text:
        print(f"\n{parsed.clean_text}")
    return EXIT_SUCCESS


def cmd_apply(args: argparse.Namespace, settings: Settings) -> int:
    from project_synth.orchestrator import EditingSession

    store, name = load_project(args.project, missing_ok=True)
    session = EditingSession(settings=settings, store=store)
    update = session.ingest_response(read_text_input(args.response))
    save_project(args.project, update.store, name)

    if args.output_json:
        print_json(
            {
                "source": update.source.value,
                "operations": [op.model_dump(mode="json") for op in update.operations],
                "changes": [change.model_dump(mode="json") for change in update.changes],
            }
        )
        return EXIT_SUCCESS

    print(f"Applied {len(update.operations)} operation(s) from {update.source.value} markers")
    for change in update.changes:
        print(f"  {change.change:<9} {change.path}")
        if args.verbose and change.diff_text:
            print(change.diff_text)
    return EXIT_SUCCESS


def cmd_preview(args: argparse.Namespace, settings: Settings) -> int:
    from project_synth.preview import compile_preview

    store, _ = load_project(args.project)
    allow_same_origin = True if args.allow_same_origin else None
    document = compile_preview(store, settings=settings, allow_same_origin=allow_same_origin)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document.html, encoding="utf-8")
    if args.output_json:
        print_json(document.model_dump(mode="json", exclude={"html"} if args.output else None))
    elif args.output:
        print(f"Preview written: {args.output} ({document.strategy.value}, sandbox=\"{document.sandbox}\")")
    else:
        print(document.html)
    return EXIT_SUCCESS


def cmd_tree(args: argparse.Namespace, settings: Settings) -> int:
    store, _ = load_project(args.project)
    tree = derive_tree(store)
    if args.output_json:
        print_json([node.model_dump(mode="json") for node in tree])
    else:
        print("\n".join(format_tree(tree)))
    return EXIT_SUCCESS


def cmd_correct(args: argparse.Namespace, settings: Settings) -> int:
    from project_synth.orchestrator.graph import build_graph, outcome_from_state
    from project_synth.orchestrator.state import make_initial_state

    store, _ = load_project(args.project)
    diagnostics = load_diagnostics(args.diagnostics)
    graph = build_graph()
    state = make_initial_state(
        diagnostics,
        store,
        attempts=args.attempts,
        max_attempts=settings.max_correction_attempts,
    )
    outcome = outcome_from_state(graph.invoke(state))

    if args.output_json:
        print_json(outcome.model_dump(mode="json"))
    elif outcome.prompt:
        print(outcome.prompt)
    elif outcome.phase == CorrectionPhase.SURFACED_TO_USER:
        print(f"Not corrected automatically ({outcome.reason.value}):")
        for diagnostic in outcome.surfaced:
            print(f"  - [{diagnostic.kind.value}] {diagnostic.message}")
    else:
        print("No diagnostics to correct.")

    if outcome.phase == CorrectionPhase.SURFACED_TO_USER:
        return EXIT_SURFACED
    return EXIT_SUCCESS


def cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    from project_synth.store import export_html, export_zip

    store, name = load_project(args.project)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if args.format == "zip":
        output_path.write_bytes(export_zip(store))
    elif args.format == "html":
        output_path.write_text(export_html(store, settings=settings), encoding="utf-8")
    else:
        output_path.write_text(export_json(store, name), encoding="utf-8")

    if args.verbose:
        print(f"Exported {len(store)} file(s) to {output_path} ({args.format})")
    return EXIT_SUCCESS


COMMANDS = {
    "parse": cmd_parse,
    "apply": cmd_apply,
    "preview": cmd_preview,
    "tree": cmd_tree,
    "correct": cmd_correct,
    "export": cmd_export,
}


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        return _handle_error("Configuration error", exc, args.verbose, EXIT_CONFIG_ERROR)

    configure_logging(settings, args.verbose)

    try:
        return COMMANDS[args.command](args, settings)

    except (OSError, ValueError, ParsingError, StoreError, CorrectionError) as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)

