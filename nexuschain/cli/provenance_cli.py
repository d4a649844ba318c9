"""
Command-line interface for the provenance workflow.

Usage:
    nexuschain register --input <product.json> [--user-id <id> --wallet <address>] [options]
    nexuschain verify <identifier>
    nexuschain timeline <record_id>
    nexuschain checkpoint --product <record_id> --location <place> --status <status> [options]
    nexuschain list [--status <status>] [--search <text>]
    nexuschain metrics

Results are printed as JSON on stdout; logs go to stderr.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from nexuschain.config import Settings
from nexuschain.core.errors import ProvenanceError, ValidationError
from nexuschain.core.models import AuthenticatedIdentity, ProductStatus, Verified
from nexuschain.observability.logger import configure_logging, get_logger
from nexuschain.observability.metrics import generate_metrics, start_metrics_server
from nexuschain.services.gateway import ProvenanceGateway

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_VERIFIED = 2

# Private keys are read from the environment, never from argv
PRIVATE_KEY_ENV = "NEXUS_WALLET_PRIVATE_KEY"


def emit(data: Any) -> None:
    """Print a JSON document to stdout."""
    print(json.dumps(data, indent=2, default=str))


def load_settings(args) -> Settings:
    if args.config:
        settings = Settings.from_yaml(args.config)
    else:
        settings = Settings.from_env()
    if args.api_url:
        settings = settings.model_copy(update={"api_url": args.api_url.rstrip("/")})
    return settings


def read_json_input(path: str) -> dict[str, Any]:
    """Read a JSON object from a file, or stdin when path is '-'."""
    if path == "-":
        data = json.load(sys.stdin)
    else:
        input_path = Path(path)
        if not input_path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        with open(input_path) as f:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("Input must be a JSON object")
    return data


def build_identity(args) -> AuthenticatedIdentity | None:
    if not args.user_id:
        return None
    private_key = os.getenv(PRIVATE_KEY_ENV) or None
    return AuthenticatedIdentity(
        user_id=args.user_id,
        role=args.role,
        wallet_address=args.wallet,
        private_key=private_key,
    )


def register_command(args, gateway: ProvenanceGateway) -> int:
    """Register a product and optionally save its QR image."""
    data = read_json_input(args.input)
    result = gateway.register_product(data, identity=build_identity(args))

    output: dict[str, Any] = {
        "product": result.product.model_dump(by_alias=True, mode="json"),
        "anchor": result.anchor.model_dump(mode="json"),
        "identifier": None,
        "renderError": result.render_error,
    }

    if result.identifier is not None:
        output["identifier"] = {
            "payload": result.identifier.payload,
            "filename": result.identifier.filename,
        }
        if args.qr_dir:
            qr_path = Path(args.qr_dir) / result.identifier.filename
            qr_path.parent.mkdir(parents=True, exist_ok=True)
            qr_path.write_bytes(result.identifier.content)
            output["identifier"]["path"] = str(qr_path)

    emit(output)
    return EXIT_OK


def verify_command(args, gateway: ProvenanceGateway) -> int:
    """Verify an identifier; exit code 2 when it does not verify."""
    outcome = gateway.verify(args.identifier)
    emit(outcome.model_dump(by_alias=True, mode="json"))
    return EXIT_OK if isinstance(outcome, Verified) else EXIT_NOT_VERIFIED


def timeline_command(args, gateway: ProvenanceGateway) -> int:
    timeline = gateway.get_timeline(args.record_id)
    emit(timeline.model_dump(by_alias=True, mode="json"))
    return EXIT_OK


def checkpoint_command(args, gateway: ProvenanceGateway) -> int:
    data = {
        "product_record_id": args.product,
        "location": args.location,
        "status": args.status,
        "timestamp": args.timestamp,
        "latitude": args.lat,
        "longitude": args.lng,
        "temperature": args.temperature,
        "notes": args.notes,
        "handled_by": args.handled_by,
    }
    checkpoint = gateway.record_checkpoint({k: v for k, v in data.items() if v is not None})
    emit(checkpoint.model_dump(by_alias=True, mode="json"))
    return EXIT_OK


def list_command(args, gateway: ProvenanceGateway) -> int:
    products = gateway.list_products(
        status=args.status,
        search=args.search,
        page=args.page,
        limit=args.limit,
    )
    emit([p.model_dump(by_alias=True, mode="json") for p in products])
    return EXIT_OK


COMMANDS = {
    "register": register_command,
    "verify": verify_command,
    "timeline": timeline_command,
    "checkpoint": checkpoint_command,
    "list": list_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nexuschain",
        description="Product provenance: registration, verification and tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Register a product and save its QR code
  nexuschain register --input product.json --qr-dir labels/

  # Register and anchor on-chain (key read from ${PRIVATE_KEY_ENV})
  nexuschain register --input product.json --user-id usr_81f2 \\
      --wallet 0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1

  # Verify a scanned or typed identifier (exit code 2 if not verified)
  nexuschain verify PFZ-CV19-001

  # Record a checkpoint
  nexuschain checkpoint --product 65f1c2e4a9 --location "Memphis Hub" \\
      --status IN_TRANSIT --lat 35.1495 --lng -90.049
        """
    )
    parser.add_argument(
        "--config",
        help="Path to a settings YAML file (default: environment variables)"
    )
    parser.add_argument(
        "--api-url",
        help="Record store base URL (overrides NEXUS_API_URL)"
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while the command runs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Register command
    register_parser = subparsers.add_parser("register", help="Register a product")
    register_parser.add_argument(
        "--input",
        required=True,
        help="Path to product JSON file ('-' for stdin)"
    )
    register_parser.add_argument(
        "--qr-dir",
        help="Directory to save the QR code PNG into"
    )
    register_parser.add_argument("--user-id", help="Authenticated user id")
    register_parser.add_argument("--role", default="MANUFACTURER", help="User role (default: MANUFACTURER)")
    register_parser.add_argument("--wallet", help="Wallet address used to anchor the product")

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Verify a product identifier")
    verify_parser.add_argument("identifier", help="Product key, record id or scanned QR payload")

    # Timeline command
    timeline_parser = subparsers.add_parser("timeline", help="Show a product's provenance timeline")
    timeline_parser.add_argument("record_id", help="Product record id")

    # Checkpoint command
    checkpoint_parser = subparsers.add_parser("checkpoint", help="Record a checkpoint")
    checkpoint_parser.add_argument("--product", required=True, help="Product record id")
    checkpoint_parser.add_argument("--location", required=True, help="Checkpoint location")
    checkpoint_parser.add_argument(
        "--status",
        required=True,
        choices=[s.value for s in ProductStatus],
        help="Status tag"
    )
    checkpoint_parser.add_argument("--timestamp", help="ISO 8601 event time (default: set by the store)")
    checkpoint_parser.add_argument("--lat", type=float, help="Latitude")
    checkpoint_parser.add_argument("--lng", type=float, help="Longitude")
    checkpoint_parser.add_argument("--temperature", type=float, help="Temperature reading (Celsius)")
    checkpoint_parser.add_argument("--notes", help="Free text notes")
    checkpoint_parser.add_argument("--handled-by", help="Handler name")

    # List command
    list_parser = subparsers.add_parser("list", help="List registered products")
    list_parser.add_argument("--status", choices=[s.value for s in ProductStatus], help="Filter by status")
    list_parser.add_argument("--search", help="Search text")
    list_parser.add_argument("--page", type=int, help="Page number")
    list_parser.add_argument("--limit", type=int, help="Page size")

    # Metrics command
    subparsers.add_parser("metrics", help="Print metrics in Prometheus text format")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    if args.command == "metrics":
        sys.stdout.write(generate_metrics().decode("utf-8"))
        return EXIT_OK

    try:
        settings = load_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    configure_logging(settings.log_level, settings.log_format)

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    try:
        with ProvenanceGateway.from_settings(settings) as gateway:
            return COMMANDS[args.command](args, gateway)
    except ValidationError as e:
        emit(e.to_dict())
        return EXIT_ERROR
    except ProvenanceError as e:
        logger.error(f"{args.command} failed: {e}", extra={"error_type": type(e).__name__})
        emit({"error": type(e).__name__, "message": e.public_message})
        return EXIT_ERROR
    except (FileNotFoundError, ValueError) as e:
        # unreadable or malformed --input
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
