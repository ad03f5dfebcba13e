"""
CLI — Command interface over a catalog file

Prints one snapshot of the browser after issuing a few renderer
commands, as text or JSON:

    nsbrowser --catalog catalog.yaml namespaces --mode all
    nsbrowser --catalog catalog.yaml members clojure.core --filter "^ma"
    nsbrowser --catalog catalog.yaml doc clojure.core/map --facet Source
    nsbrowser --catalog catalog.yaml require clojure.set
    nsbrowser config browser.member_mode interns

Unknown names get "did you mean" suggestions.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import Config, ConfigManager
from .core.errors import HostUnavailable
from .core.model import DocFacet, MemberMode, NamespaceMode
from .engine import BrowserEngine
from .presentation.formatters import render_json, render_text
from .presentation.symbols import get_symbols, safe_print
from .services.host import StaticHost
from . import __version__

log = logging.getLogger(__name__)


class BrowserCLI:
    """Command-line interface for the namespace browser."""

    def __init__(self, project_dir: Path, catalog_path: Optional[Path] = None,
                 output_format: Optional[str] = None, symbols: Optional[str] = None,
                 full: bool = False):
        self.project_dir = Path(project_dir)
        self.catalog_path = Path(catalog_path) if catalog_path else None
        self.config_manager = ConfigManager(self.project_dir)
        self.config: Config = self.config_manager.load()
        self.output_format = output_format or self.config.display.format
        self.symbols = get_symbols(symbols or self.config.display.symbols)
        self.full = full

    # =========================================================================
    # Browsing commands
    # =========================================================================

    def namespaces(self, mode: Optional[str] = None, pattern: Optional[str] = None) -> int:
        """Show the namespace list under a mode and filter."""
        engine = self._open()
        if engine is None:
            return 1
        with engine:
            engine.set_namespace_filter(mode=mode, pattern=pattern)
            return self._show(engine)

    def members(self, namespace: str, mode: Optional[str] = None, pattern: Optional[str] = None) -> int:
        """Show the members of one namespace."""
        engine = self._open()
        if engine is None:
            return 1
        with engine:
            if not engine.select_namespace(namespace).accepted:
                return self._unknown(engine, namespace)
            engine.set_member_filter(mode=mode, pattern=pattern)
            return self._show(engine)

    def doc(self, qualified_name: str, facet: Optional[str] = None) -> int:
        """Resolve documentation for "ns/name"."""
        if facet:
            try:
                DocFacet.parse(facet)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        engine = self._open()
        if engine is None:
            return 1
        with engine:
            if facet:
                engine.set_doc_facet(facet)
            if not engine.browse_to(qualified_name).accepted:
                return self._unknown(engine, qualified_name)
            engine.wait_idle(timeout=engine.resolution.orchestrator.config.task_timeout)
            model = engine.display()
            self._print(engine)
            return 1 if model.doc_status.startswith("error") else 0

    def require(self, namespace: str) -> int:
        """Load a namespace and show the updated list."""
        engine = self._open()
        if engine is None:
            return 1
        with engine:
            engine.select_namespace(namespace)
            engine.require(namespace)
            engine.wait_idle(timeout=engine.resolution.orchestrator.config.task_timeout)
            model = engine.display()
            self._print(engine)
            return 1 if model.require_status.startswith("error") else 0

    # =========================================================================
    # Configuration
    # =========================================================================

    def config_cmd(self, key: Optional[str] = None, value: Optional[str] = None,
                   scope: str = "project") -> int:
        """Show all settings, one setting, or change one."""
        if key is None:
            safe_print(self.config_manager.display())
            return 0

        if value is None:
            current = self.config_manager.get(key)
            if current is None:
                print(f"Error: Unknown setting: {key}", file=sys.stderr)
                return 1
            safe_print(current)
            return 0

        error = self.config_manager.set(key, value, scope=scope)
        if error:
            print(f"Error: {error}", file=sys.stderr)
            return 1
        safe_print(f"Set {key} = {value} ({scope})")
        return 0

    # =========================================================================
    # Helpers
    # =========================================================================

    def _open(self) -> Optional[BrowserEngine]:
        if self.catalog_path is None:
            print("Error: No catalog given. Use --catalog FILE or set NSB_CATALOG.", file=sys.stderr)
            return None
        try:
            host = StaticHost.from_file(self.catalog_path)
        except HostUnavailable as e:
            print(f"Error: {e}", file=sys.stderr)
            return None
        try:
            return BrowserEngine(host, self.config)
        except ValueError as e:
            # Orchestrator settings from the environment are out of range
            print(f"Error: {e}", file=sys.stderr)
            return None

    def _show(self, engine: BrowserEngine) -> int:
        self._print(engine)
        return 1 if engine.catalog_error else 0

    def _print(self, engine: BrowserEngine) -> None:
        model = engine.display()
        if self.output_format == "json":
            safe_print(render_json(model))
        else:
            safe_print(render_text(model, self.symbols, full=self.full))

    def _unknown(self, engine: BrowserEngine, name: str) -> int:
        print(f"Error: Unknown name: {name}", file=sys.stderr)
        suggestions = engine.catalog.suggest(name)
        if suggestions:
            print(f"Did you mean: {', '.join(suggestions)}?", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nsbrowser",
        description="nsbrowser -- Browse namespaces, members and their documentation",
    )
    parser.add_argument(
        '--catalog', '-c',
        default=os.environ.get("NSB_CATALOG"),
        help='Catalog file (YAML). Default: NSB_CATALOG'
    )
    parser.add_argument(
        '--project', '-p',
        default=".",
        help='Directory holding .nsbrowser/config.yaml (default: current)'
    )
    parser.add_argument('--format', choices=["text", "json"], dest='output_format',
                        help='Output format (default: display.format setting)')
    parser.add_argument('--symbols', choices=["unicode", "ascii", "auto"],
                        help='Marker set for text output')
    parser.add_argument('--full', action='store_true',
                        help='Do not truncate documentation text')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log engine activity to stderr')
    parser.add_argument('--version', '-V', action='version',
                        version=f'nsbrowser {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    p = subparsers.add_parser('namespaces', help='List namespaces')
    p.add_argument('--mode', choices=NamespaceMode.labels(), help='Namespace list mode')
    p.add_argument('--filter', dest='pattern', help='Regex matched against names')

    p = subparsers.add_parser('members', help='List members of a namespace')
    p.add_argument('namespace', help='Namespace name')
    p.add_argument('--mode', choices=MemberMode.labels(), help='Member list mode')
    p.add_argument('--filter', dest='pattern', help='Regex matched against member names')

    p = subparsers.add_parser('doc', help='Show documentation for ns/name')
    p.add_argument('qualified_name', help='Qualified member name (ns/name)')
    p.add_argument('--facet', help=f'One of: {", ".join(DocFacet.labels())}')

    p = subparsers.add_parser('require', help='Load an unloaded namespace')
    p.add_argument('namespace', help='Namespace name')

    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('key', nargs='?', help='Setting (e.g., browser.member_mode)')
    p.add_argument('value', nargs='?', help='New value')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')

    return parser


COMMANDS: Dict[str, Callable[[BrowserCLI, argparse.Namespace], int]] = {
    'namespaces': lambda cli, args: cli.namespaces(mode=args.mode, pattern=args.pattern),
    'members': lambda cli, args: cli.members(args.namespace, mode=args.mode, pattern=args.pattern),
    'doc': lambda cli, args: cli.doc(args.qualified_name, facet=args.facet),
    'require': lambda cli, args: cli.require(args.namespace),
    'config': lambda cli, args: cli.config_cmd(
        args.key, args.value, scope="user" if args.user else "project"),
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the nsbrowser CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    cli = BrowserCLI(
        Path(args.project),
        catalog_path=args.catalog,
        output_format=args.output_format,
        symbols=args.symbols,
        full=args.full,
    )
    return COMMANDS[args.command](cli, args)


if __name__ == '__main__':
    sys.exit(main())
