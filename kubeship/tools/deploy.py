from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, TextIO

import yaml
from dotenv import load_dotenv
from kubernetes.client.rest import ApiException
from pydantic import ValidationError

from kubeship.common.config import ExecutorConfig
from kubeship.common.errors import (
    ClientConfigurationError,
    InvalidArgumentError,
    KubeshipError,
    ResourceNotFoundError,
    TeardownError,
)
from kubeship.common.models import RuntimeSpec, load_runtime_spec
from kubeship.runtime import KubernetesExecutor
from kubeship.runtime.manifests import render_manifests

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 3
EXIT_PARTIAL_TEARDOWN = 4


def setup_logging(verbose: bool) -> None:
    """Configure root logging based on verbosity level."""
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root = logging.getLogger()
    root.addHandler(console_handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Set log level for specific loggers to reduce noise
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)


def _add_spec_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("image", nargs="?", help="Image reference to run (overrides the spec file).")
    parser.add_argument("--name", help="App name for the Deployment, Service and app label.")
    parser.add_argument("-f", "--spec-file", type=Path, help="YAML or JSON runtime spec.")
    parser.add_argument("--replicas", type=int, help="Number of replicas.")
    parser.add_argument(
        "-p",
        "--port",
        dest="ports",
        type=int,
        action="append",
        help="Port to expose. Can be provided multiple times.",
    )
    parser.add_argument(
        "--public",
        dest="public_address",
        action="store_true",
        default=None,
        help="Expose ports through a LoadBalancer Service.",
    )


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Run container images on Kubernetes.")
    parser.add_argument("-n", "--namespace", help="Target namespace (default: $KUBESHIP_NAMESPACE or 'default').")
    parser.add_argument("--kubeconfig", help="Path to a kubeconfig file.")
    parser.add_argument("--context", help="Kubeconfig context to use.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    commands = parser.add_subparsers(dest="command", required=True)

    run_parser = commands.add_parser("run", help="Create or update the app and wait for a running pod.")
    _add_spec_arguments(run_parser)
    run_parser.add_argument("--timeout", type=float, help="Give up waiting for a running pod after N seconds.")
    run_parser.add_argument("--follow", action="store_true", help="Stream logs once the pod is running.")

    render_parser = commands.add_parser("render", help="Print the manifests without contacting the cluster.")
    _add_spec_arguments(render_parser)

    logs_parser = commands.add_parser("logs", help="Follow the logs of the app's running pod.")
    logs_parser.add_argument("name", help="App name.")

    cancel_parser = commands.add_parser("cancel", help="Delete the app's Service and Deployment.")
    cancel_parser.add_argument("name", help="App name.")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ExecutorConfig:
    overrides = {
        key: value
        for key, value in {
            "namespace": args.namespace,
            "kubeconfig": args.kubeconfig,
            "context": args.context,
        }.items()
        if value is not None
    }
    return ExecutorConfig(**overrides)


def build_spec(args: argparse.Namespace) -> RuntimeSpec:
    """Merge the optional spec file with command-line overrides."""
    base = load_runtime_spec(args.spec_file) if args.spec_file else RuntimeSpec()
    return base.with_overrides(
        image=args.image,
        name=args.name,
        replicas=args.replicas,
        ports=args.ports,
        public_address=args.public_address,
    )


def _render(spec: RuntimeSpec, config: ExecutorConfig, out: TextIO) -> None:
    if not spec.name or not spec.image:
        raise InvalidArgumentError("Both an image and a name are required")
    manifests = render_manifests(spec.name, spec.image, spec, config.namespace)
    yaml.safe_dump_all(list(manifests.values()), out, sort_keys=False)


def execute(args: argparse.Namespace, stdout: BinaryIO, text_out: Optional[TextIO] = None) -> int:
    """Dispatch a parsed command and return the process exit code."""
    config = build_config(args)

    if args.command == "render":
        _render(build_spec(args), config, text_out or sys.stdout)
        return EXIT_OK

    executor = KubernetesExecutor.from_config(config)

    if args.command == "run":
        spec = build_spec(args)
        result = executor.run(spec.image, spec.name, spec, stdout, timeout=args.timeout)
        logger.info(
            "Run finished for %s: deployment %s, service %s",
            result.name,
            result.deployment,
            result.service,
        )
        if args.follow:
            executor.logs(result.name, stdout)
        return EXIT_OK

    if args.command == "logs":
        executor.logs(args.name, stdout)
        return EXIT_OK

    if args.command == "cancel":
        result = executor.cancel(args.name)
        logger.info("Cancelled %s: service %s, deployment %s", result.name, result.service, result.deployment)
        return EXIT_OK

    raise InvalidArgumentError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the deploy CLI."""
    load_dotenv()
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.verbose)

    try:
        return execute(args, sys.stdout.buffer)
    except (InvalidArgumentError, ValidationError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return EXIT_INVALID
    except ResourceNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_NOT_FOUND
    except TeardownError as exc:
        logger.error("%s", exc)
        return EXIT_PARTIAL_TEARDOWN
    except (ApiException, ClientConfigurationError, KubeshipError) as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
