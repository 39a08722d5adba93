"""
CLI tool for k3singress.

Renders Ingress manifests from deploy intent files and applies or deletes
them on the cluster.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import IngressSettings, load_settings
from .deployer import IngressDeployer
from .errors import IngressError
from .generators import manifest_summary, render_manifests, write_manifests
from .types import DeployIntent


def load_intents(path: str) -> List[DeployIntent]:
    """
    Load deploy intents from a YAML file.

    The file holds one intent mapping, a list of them, or several YAML
    documents.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    intent_path = Path(path)
    if not intent_path.exists():
        raise FileNotFoundError(f"intent file not found: {path}")

    with open(intent_path) as f:
        documents = [doc for doc in yaml.safe_load_all(f) if doc]

    intents: List[DeployIntent] = []
    for doc in documents:
        entries = doc if isinstance(doc, list) else [doc]
        intents.extend(DeployIntent.from_dict(entry) for entry in entries)
    return intents


def get_settings(args: argparse.Namespace) -> IngressSettings:
    """Settings from env and --config, with CLI flags on top."""
    settings = load_settings(args.config)

    overrides: Dict[str, Any] = {}
    if getattr(args, "domain", None):
        overrides["root_domain"] = args.domain
    if getattr(args, "field_manager", None):
        overrides["field_manager"] = args.field_manager
    if getattr(args, "force", None) is not None:
        overrides["force_on_conflicts"] = args.force
    if getattr(args, "timeout", None) is not None:
        overrides["request_timeout"] = args.timeout
    if getattr(args, "context", None):
        overrides["kube_context"] = args.context

    return settings.merged_with(overrides)


def _print_summary(summary: Dict[str, str]) -> None:
    print(f"  {summary['namespace']}/{summary['name']}")
    print(f"    Host: {summary['host']}")
    print(f"    Backend: {summary['backend']}")
    print(f"    TLS secret: {summary['tls']}")


def cmd_render(args: argparse.Namespace) -> None:
    """Render Ingress manifests without contacting the cluster."""
    settings = get_settings(args)
    deployer = IngressDeployer(settings)
    manifests = [deployer.build(intent) for intent in load_intents(args.file)]

    if args.output:
        output_path = write_manifests(manifests, args.output)
        print(f"Wrote {len(manifests)} ingress manifests to {output_path}")
    else:
        sys.stdout.write(render_manifests(manifests))


def cmd_apply(args: argparse.Namespace) -> None:
    """Apply Ingress manifests to the cluster."""
    settings = get_settings(args)
    deployer = IngressDeployer(settings)
    intents = load_intents(args.file)

    print(f"Applying {len(intents)} ingresses (field manager: {settings.field_manager}, "
          f"force: {settings.force_on_conflicts})")

    for intent in intents:
        outcome = deployer.deploy(intent)
        _print_summary(manifest_summary(outcome.manifest))
        print(f"    Resource version: {outcome.resource_version or '(unknown)'}")


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete an Ingress from the cluster."""
    settings = get_settings(args)
    deployer = IngressDeployer(settings)

    if args.ignore_missing:
        deleted = deployer.delete_if_exists(args.namespace, args.name)
        if not deleted:
            print(f"Ingress {args.namespace}/{args.name} not found, nothing to delete")
            return
    else:
        deployer.delete(args.namespace, args.name)

    print(f"Deleted ingress {args.namespace}/{args.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="k3singress CLI - Generate and reconcile Ingress resources from deploy intents"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="YAML settings file (default: environment only)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render Ingress manifests as YAML")
    render_parser.add_argument(
        "--file", "-f",
        required=True,
        help="Deploy intent YAML file"
    )
    render_parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output file (default: stdout)"
    )
    render_parser.add_argument(
        "--domain", "-d",
        default=None,
        help="Root domain used when an intent has no ingress_host"
    )

    # Apply command
    apply_parser = subparsers.add_parser("apply", help="Server-side apply Ingress manifests")
    apply_parser.add_argument(
        "--file", "-f",
        required=True,
        help="Deploy intent YAML file"
    )
    apply_parser.add_argument(
        "--domain", "-d",
        default=None,
        help="Root domain used when an intent has no ingress_host"
    )
    apply_parser.add_argument(
        "--field-manager",
        default=None,
        help="Field manager name for server-side apply"
    )
    force_group = apply_parser.add_mutually_exclusive_group()
    force_group.add_argument(
        "--force",
        dest="force",
        action="store_true",
        default=None,
        help="Take ownership of conflicting fields"
    )
    force_group.add_argument(
        "--no-force",
        dest="force",
        action="store_false",
        help="Fail on field ownership conflicts"
    )
    apply_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds"
    )
    apply_parser.add_argument(
        "--context",
        default=None,
        help="Kubeconfig context"
    )

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete an Ingress")
    delete_parser.add_argument("name", help="Ingress name (the container name)")
    delete_parser.add_argument(
        "--namespace", "-n",
        required=True,
        help="Namespace of the Ingress"
    )
    delete_parser.add_argument(
        "--ignore-missing",
        action="store_true",
        help="Succeed when the Ingress does not exist"
    )
    delete_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds"
    )
    delete_parser.add_argument(
        "--context",
        default=None,
        help="Kubeconfig context"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "render": cmd_render,
        "apply": cmd_apply,
        "delete": cmd_delete,
    }

    command = commands.get(args.command)
    if not command:
        parser.print_help()
        return

    try:
        command(args)
    except (IngressError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
