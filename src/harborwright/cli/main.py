#!/usr/bin/env python3
"""
HARBORWRIGHT CLI
----------------
Runs one registry reconciliation pass for a Harbor manifest against an
in-memory resource graph and shows the result:

    harborwright render harbor.yaml [--config cfg.yaml] [--show-secrets] [-o out.yaml]
    harborwright graph harbor.yaml [--config cfg.yaml]

Author: Harborwright Team
Date: 2026-10-19
"""

import sys
import logging
import argparse
from pathlib import Path

from harborwright.cli.formatter import GraphFormatter, console
from harborwright.core.config import ConfigStore
from harborwright.core.context import ReconcileContext
from harborwright.core.engine import RegistryReconciler
from harborwright.core.errors import ConfigLookupError, DerivationError, SpecLoadError
from harborwright.core.loader import load_harbor
from harborwright.graph.resources import InMemoryGraph
from harborwright.render.exporter import ManifestExporter
from harborwright.rules.validator import ManifestValidator

VERSION = "0.1.0"


class HarborwrightCLI:
    """
    CLI wrapper that translates user commands into reconciler runs.
    """

    def __init__(self, formatter: GraphFormatter = None):
        self.parser = argparse.ArgumentParser(
            prog="harborwright",
            description="Harborwright - Harbor registry secrets & configuration derivation",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = formatter or GraphFormatter()
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=f"harborwright v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        render_parser = subparsers.add_parser("render", help="Derive and print the registry manifests")
        render_parser.add_argument("harbor", help="Path to a Harbor manifest")
        render_parser.add_argument("--config", help="YAML file of operator tunables")
        render_parser.add_argument("--show-secrets", action="store_true", help="Print secret values instead of redacting")
        render_parser.add_argument("-o", "--output", help="Write manifests to this file")

        graph_parser = subparsers.add_parser("graph", help="Show the registered resource graph")
        graph_parser.add_argument("harbor", help="Path to a Harbor manifest")
        graph_parser.add_argument("--config", help="YAML file of operator tunables")

    def _build_config(self, args: argparse.Namespace) -> ConfigStore:
        store = ConfigStore()
        if args.config:
            store = ConfigStore.from_yaml(args.config)
        return store.merged(ConfigStore.from_environ())

    def _reconcile(self, args: argparse.Namespace) -> InMemoryGraph:
        harbor = load_harbor(Path(args.harbor))
        graph = InMemoryGraph()
        reconciler = RegistryReconciler(graph, self._build_config(args))
        reconciler.reconcile(ReconcileContext(), harbor)
        return graph

    def _run_render(self, args: argparse.Namespace) -> int:
        graph = self._reconcile(args)
        objects = graph.objects()

        ok, problems = ManifestValidator().validate(objects)
        if not ok:
            self.formatter.show_problems(problems)
            return 1

        text = ManifestExporter().export(objects, redact=not args.show_secrets)
        if args.output:
            try:
                Path(args.output).write_text(text, encoding="utf-8")
            except OSError as e:
                self.formatter.show_error(f"cannot write {args.output}: {e}")
                return 1
            self.formatter.info(f"Wrote {len(objects)} manifest(s) to {args.output}")
        else:
            self.formatter.display_manifests(text, title=f"{len(objects)} manifest(s)")
        return 0

    def _run_graph(self, args: argparse.Namespace) -> int:
        graph = self._reconcile(args)
        self.formatter.print_graph_table(graph.nodes())
        return 0

    def run(self, argv=None) -> int:
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        handlers = {"render": self._run_render, "graph": self._run_graph}
        if args.command not in handlers:
            self.parser.print_help()
            return 0

        try:
            return handlers[args.command](args)
        except DerivationError as e:
            self.formatter.show_failure(e)
        except (SpecLoadError, ConfigLookupError) as e:
            self.formatter.show_error(str(e))
        return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(HarborwrightCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
