"""
Command-line interface for Store Sync operator tasks.

Provides configuration validation, schema management, explicit tenant
provisioning (the only way a tenant comes to exist) and the HTTP server.
"""

import argparse
import getpass
import json
import sys
from typing import List, Optional

from store_sync.database.gateway import PersistenceGateway
from store_sync.services.tenant_directory import TenantDirectory
from store_sync.utils.config import get_config, validate_configuration
from store_sync.utils.encryption import EncryptionService
from store_sync.utils.exceptions import StoreSyncError
from store_sync.utils.logger import get_logger, setup_logging


cli_logger = get_logger(__name__)


class StoreSyncCLI:
    """Command-line interface for Store Sync operations."""

    def __init__(self, gateway: Optional[PersistenceGateway] = None,
                 encryption: Optional[EncryptionService] = None):
        self._gateway = gateway
        self._encryption = encryption
        self._owns_gateway = gateway is None

    @property
    def gateway(self) -> PersistenceGateway:
        """Gateway (lazy loading)."""
        if self._gateway is None:
            self._gateway = PersistenceGateway.from_config(get_config())
        return self._gateway

    @property
    def encryption(self) -> EncryptionService:
        if self._encryption is None:
            self._encryption = EncryptionService()
        return self._encryption

    def close(self) -> None:
        """Release the gateway if this CLI created it."""
        if self._owns_gateway and self._gateway is not None:
            self._gateway.dispose()
            self._gateway = None

    def cmd_config(self, args) -> int:
        """Handle configuration commands."""
        result = validate_configuration()

        if not result["valid"]:
            print(f"❌ Configuration validation failed: {result['error']}")
            return 1

        print("✅ Configuration is valid")
        if args.config_action == "show":
            print(json.dumps(result["summary"], indent=2))
        return 0

    def cmd_db(self, args) -> int:
        """Handle schema commands."""
        if args.db_action == "init":
            self.gateway.create_all()
            print("✅ Database tables created")
            return 0

        if args.db_action == "drop":
            if not args.yes:
                print("❌ Refusing to drop tables without --yes")
                return 1
            self.gateway.drop_all()
            print("✅ Database tables dropped")
            return 0

        print(f"❌ Unknown db action: {args.db_action}")
        return 1

    def cmd_tenant(self, args) -> int:
        """Handle tenant provisioning commands."""
        if args.tenant_action != "register":
            print(f"❌ Unknown tenant action: {args.tenant_action}")
            return 1

        secret = args.secret or getpass.getpass("Webhook secret: ")
        directory = TenantDirectory(self.gateway, self.encryption)

        with self.gateway.session() as session:
            with self.gateway.transaction(session):
                tenant_id = directory.upsert(session, args.shop_domain, secret)

        print(f"✅ Webhook secret registered for {args.shop_domain} (tenant {tenant_id})")
        return 0

    def cmd_serve(self, args) -> int:
        """Run the HTTP server."""
        import uvicorn

        config = get_config()
        uvicorn.run(
            "store_sync.api.main:app",
            host=args.host or config.api_host,
            port=args.port or config.api_port,
            workers=args.workers,
        )
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="store-sync",
        description="Store Sync - multi-tenant webhook ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  store-sync config validate                               # Validate configuration
  store-sync db init                                       # Create tables
  store-sync tenant register shop.myshopify.com --secret S # Provision or rotate a tenant secret
  store-sync serve --port 4000                             # Run the API
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument("config_action", choices=["validate", "show"])

    db_parser = subparsers.add_parser("db", help="Database schema management")
    db_parser.add_argument("db_action", choices=["init", "drop"])
    db_parser.add_argument("--yes", action="store_true", help="Confirm destructive actions")

    tenant_parser = subparsers.add_parser("tenant", help="Tenant provisioning")
    tenant_parser.add_argument("tenant_action", choices=["register"])
    tenant_parser.add_argument("shop_domain", help="Shop domain, e.g. my-store.myshopify.com")
    tenant_parser.add_argument("--secret", help="Webhook signing secret (prompted if omitted)")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind host (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: API_PORT)")
    serve_parser.add_argument("--workers", type=int, default=1, help="Worker processes")

    return parser


def main(argv: Optional[List[str]] = None, cli: Optional[StoreSyncCLI] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()

    if not args.command:
        parser.print_help()
        return 1

    cli = cli or StoreSyncCLI()
    handlers = {
        "config": cli.cmd_config,
        "db": cli.cmd_db,
        "tenant": cli.cmd_tenant,
        "serve": cli.cmd_serve,
    }

    try:
        return handlers[args.command](args)
    except StoreSyncError as e:
        cli_logger.error(f"CLI operation failed: {e}")
        print(f"❌ Operation failed: {e.message}")
        return 1
    finally:
        cli.close()


def cli_entry_point():
    """Entry point for console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_point()
