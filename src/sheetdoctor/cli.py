"""Command-line interface for SheetDoctor."""

import argparse
import logging
import sys

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SheetDoctor - Spreadsheet formula diagnostics"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Check command
    check_parser = subparsers.add_parser("check", help="Diagnose a single formula")
    check_parser.add_argument("formula", help='Formula text, e.g. "=SUM(A1:A10"')
    check_parser.add_argument(
        "--cell", default="A1", help="Cell holding the formula (default: A1)"
    )
    check_parser.add_argument(
        "--rows", type=int, default=settings.default_max_rows, help="Sheet row count"
    )
    check_parser.add_argument(
        "--cols", type=int, default=settings.default_max_cols, help="Sheet column count"
    )

    # Score command
    score_parser = subparsers.add_parser("score", help="Score a formula's performance")
    score_parser.add_argument("formula", help="Formula text")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help="Host to bind to (default: 127.0.0.1)"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help="Port to bind to (default: 8000)"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Auth command
    subparsers.add_parser("auth", help="Authenticate with Google Sheets API")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.command == "check":
        sys.exit(run_check(args.formula, args.cell, args.rows, args.cols))
    elif args.command == "score":
        sys.exit(run_score(args.formula))
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "auth":
        run_auth()
    else:
        parser.print_help()
        sys.exit(1)


def run_check(formula: str, cell: str, rows: int, cols: int) -> int:
    """Diagnose one formula as if it sat alone in an otherwise empty sheet."""
    from .service import FormulaDebugger
    from .sheets import InMemoryAccessor

    accessor = InMemoryAccessor({cell: formula}, max_rows=rows, max_cols=cols)
    response = FormulaDebugger(accessor).analyze_cell(cell)
    print(response.model_dump_json(indent=2))
    if not response.success:
        return 1
    return 1 if response.data.error_count else 0


def run_score(formula: str) -> int:
    """Print the performance report for one formula."""
    from .service import score_formula

    response = score_formula(formula)
    print(response.model_dump_json(indent=2))
    return 0 if response.success else 1


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "sheetdoctor.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_auth():
    """Run the Google authentication flow."""
    from .sheets import GoogleSheetsClient

    print("Authenticating with Google Sheets API...")
    try:
        client = GoogleSheetsClient()
        # Accessing the service property triggers auth
        _ = client.service
        print("Authentication successful!")
        print("Token saved. You can now use SheetDoctor with Google Sheets.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
