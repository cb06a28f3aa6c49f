"""Command-line interface for the pull request reviewer."""

import argparse
import json
import sys
from pathlib import Path

from .git_utils import local_changed_files
from .models import Finding, Severity
from .orchestrator import decide_commit_status
from .scanner import SecretScanner, get_recommendation
from .severity import classify

SEVERITY_COLORS = {
    Severity.CRITICAL: "\033[91m",  # Red
    Severity.HIGH: "\033[93m",      # Yellow
    Severity.MEDIUM: "\033[94m",    # Blue
    Severity.LOW: "\033[90m",       # Gray
}
RESET = "\033[0m"


def format_findings_table(findings: list[Finding], title: str = "Findings") -> str:
    """Format findings as a readable table."""
    if not findings:
        return f"\n{title}: None\n"

    lines = [f"\n{title} ({len(findings)}):", "-" * 80]

    for f in findings:
        color = SEVERITY_COLORS.get(f.severity, "")
        lines.append(f"{color}[{f.severity.value:8}]{RESET} {f.pattern}")
        lines.append(f"           File: {f.file_path}:{f.line_number}")
        lines.append(f"           {f.description}")
        lines.append(f"           {get_recommendation(f.severity)}")
        lines.append("")

    return "\n".join(lines)


def scan_command(args: argparse.Namespace) -> int:
    repo_path = Path(args.path)
    if not repo_path.exists():
        print(f"Error: Path does not exist: {args.path}", file=sys.stderr)
        return 2
    if not (repo_path / ".git").exists():
        print(f"Error: Not a git repository: {args.path}", file=sys.stderr)
        return 2

    files = local_changed_files(repo_path, base=args.base, head=args.head)
    result = SecretScanner().scan_files(files)
    breakdown = classify(result)
    decision = decide_commit_status(result)

    if args.json_output:
        output = {
            "status": decision.model_dump(),
            "findings": [f.model_dump(mode="json") for f in result.findings],
            "summary": {
                "total_files": result.total_files,
                "total_findings": len(result.findings),
                **{s.value.lower(): breakdown.count(s) for s in Severity},
            },
        }
        print(json.dumps(output, indent=2))
    else:
        print(format_findings_table(result.findings, "Changed Files"))
        print(f"\nSummary: {len(result.findings)} findings in {result.total_files} file(s) "
              f"({breakdown.critical_count} critical)")
        print(f"Status: {decision.state} - {decision.description}")

    return 1 if decision.blocking else 0


def serve_command(args: argparse.Namespace) -> int:
    import uvicorn

    from .config import Settings
    from .main import create_app

    settings = Settings()
    uvicorn.run(create_app(settings), host=args.host, port=args.port or settings.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Review pull request changes for leaked secrets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  leak-reviewer scan ./my-project
  leak-reviewer scan ./my-project --base main --head feature-branch
  leak-reviewer scan ./my-project --json
  leak-reviewer serve --port 8080
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan local changes between two revisions")
    scan.add_argument("path", type=str, help="Path to the git repository")
    scan.add_argument("--base", type=str, default="HEAD", help="Base revision (default: HEAD)")
    scan.add_argument(
        "--head", type=str, default=None, help="Head revision (default: the working tree)"
    )
    scan.add_argument("--json", action="store_true", dest="json_output", help="Output results as JSON")
    scan.set_defaults(func=scan_command)

    serve = subparsers.add_parser("serve", help="Run the webhook server")
    serve.add_argument("--host", type=str, default="0.0.0.0", help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on (default: PORT)")
    serve.set_defaults(func=serve_command)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
