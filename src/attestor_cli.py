#!/usr/bin/env python3
"""
Attestor - registry management and attestation verification

Keeps a registry of trusted attestor addresses and checks that attestation
records were signed by one of them.

Usage:
    attestor init [--owner ID] [--address 0x..] [--url URL]
    attestor add <address> <url> [--caller ID]
    attestor remove <address> [--caller ID]
    attestor list
    attestor verify <attestations.json> [--json]
    attestor hash <attestations.json>
"""

import argparse
import json
import logging
import os
import sys
from typing import Optional

from logger_utils import setup_logging

from attestation_encoder import (
    encode_attestation,
    encode_attestation_payload,
    encode_request,
    encode_response,
)
from attestation_errors import AttestationError
from attestation_models import Attestation, Attestor, format_address, parse_address
from attestation_verifier import AttestationVerifier
from config import create_registry_store, get_config_manager, set_global_config_override
from registry_events import CsvEventSink
from registry_store import RegistryStore

logger = logging.getLogger(__name__)


def _load_config_manager(args, required: bool = True):
    try:
        if args.config or args.config_file:
            return set_global_config_override(args.config, config_file=args.config_file)
        return get_config_manager()
    except FileNotFoundError as e:
        if required:
            raise
        logger.debug(f"No configuration loaded: {e}")
        return None


def _open_store(args) -> RegistryStore:
    """Registry store from --registry, falling back to the active profile"""
    config_manager = _load_config_manager(args, required=not args.registry)
    if config_manager is not None:
        return create_registry_store(config_manager, registry_path=args.registry)

    events_file = f"{os.path.splitext(args.registry)[0]}_events.csv"
    return RegistryStore(args.registry, sink=CsvEventSink(events_file))


def _resolve_caller(args) -> str:
    caller = args.caller or os.getenv('ATTESTOR_CALLER')
    if not caller:
        logger.error("❌ No caller identity; pass --caller or set ATTESTOR_CALLER")
        sys.exit(1)
    return caller


def cmd_init(args):
    config_manager = _load_config_manager(args, required=False)
    owner = args.owner or (config_manager.get_owner() if config_manager else None)
    address = args.address or (config_manager.get_default_attestor_address() if config_manager else None)
    url = args.url if args.url is not None else (config_manager.get_default_attestor_url() if config_manager else '')

    if not owner:
        logger.error("❌ No owner identity; pass --owner or set 'owner' in the profile")
        sys.exit(1)

    store = _open_store(args)
    registry = store.initialize(owner, address or '', url)
    logger.info(f"✅ Registry created at {store.path} (owner: {registry.owner})")


def cmd_add(args):
    store = _open_store(args)
    caller = _resolve_caller(args)
    with store.transaction() as registry:
        existed = registry.contains(args.address)
        registry.set_attestor(caller, Attestor(address=parse_address(args.address), url=args.url))
    logger.info(f"✅ Attestor {'updated' if existed else 'added'}: {args.address}")


def cmd_remove(args):
    store = _open_store(args)
    caller = _resolve_caller(args)
    with store.transaction() as registry:
        registry.remove_attestor(caller, args.address)
    logger.info(f"✅ Attestor removed: {args.address}")


def cmd_list(args):
    registry = _open_store(args).load()
    print(f"Owner: {registry.owner}")
    print(f"Attestors ({len(registry)}):")
    for attestor in registry.attestors():
        print(f"  {format_address(attestor.address)}  {attestor.url}")


def cmd_contains(args):
    registry = _open_store(args).load()
    if registry.contains(args.address):
        print(f"{args.address} is a registered attestor")
        return
    print(f"{args.address} is not registered")
    sys.exit(1)


def cmd_hash(args):
    for attestation in Attestation.from_json_file(args.file):
        print(f"request_hash:     0x{encode_request(attestation.request).hex()}")
        print(f"response_hash:    0x{encode_response(attestation.responses).hex()}")
        print(f"payload:          0x{encode_attestation_payload(attestation).hex()}")
        print(f"attestation_hash: 0x{encode_attestation(attestation).hex()}")
        print()


def cmd_verify(args):
    attestations = Attestation.from_json_file(args.file)
    registry = _open_store(args).load()
    results = AttestationVerifier(registry).check_all(attestations)

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        for i, result in enumerate(results):
            marker = "✅" if result['valid'] else "❌"
            detail = result['signer'] if result['valid'] else f"{result['status']}: {result['error_details']}"
            print(f"{marker} [{i}] {result['attestation_hash']} {detail}")

    if not all(result['valid'] for result in results):
        sys.exit(1)


def cmd_reset(args):
    store = _open_store(args)
    store.reset(backup=not args.no_backup)
    logger.info("✅ Registry reset")


def cmd_config(args):
    if args.config_command is None:
        logger.error("❌ No config subcommand specified")
        logger.info("💡 Use 'attestor config --help' for available commands")
        sys.exit(1)

    config_manager = _load_config_manager(args)

    if args.config_command == 'list':
        active_config = config_manager.get_active_config_name()
        for name, display_name in config_manager.list_configs().items():
            marker = "🔸" if name == active_config else "  "
            print(f"{marker} {name}: {display_name}")
        print(f"\n✅ Active: {active_config}")

    elif args.config_command == 'show':
        print(f"Name: {config_manager.get_active_config_name()}")
        print(f"Display Name: {config_manager.get_display_name()}")
        print(f"Data Directory: {config_manager.get_data_dir()}")
        print(f"Registry: {config_manager.get_registry_path()}")
        print(f"Events Log: {config_manager.get_events_file()}")
        print(f"Owner: {config_manager.get_owner()}")
        print(f"Default Attestor: {config_manager.get_default_attestor_address()} "
              f"({config_manager.get_default_attestor_url()})")

    elif args.config_command == 'validate':
        validation = config_manager.validate_config(args.config_name)
        for warning in validation['warnings']:
            logger.warning(f"⚠️ {warning}")
        if not validation['valid']:
            logger.error(f"❌ Configuration '{validation['config_name']}' is invalid:")
            for error in validation['errors']:
                print(f"  • {error}")
            sys.exit(1)
        logger.info(f"✅ Configuration '{validation['config_name']}' is valid")


COMMANDS = {
    'init': cmd_init,
    'add': cmd_add,
    'remove': cmd_remove,
    'list': cmd_list,
    'contains': cmd_contains,
    'hash': cmd_hash,
    'verify': cmd_verify,
    'reset': cmd_reset,
    'config': cmd_config,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='attestor',
        description="Attestor registry management and attestation verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  attestor init --owner admin --address 0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf --url https://attestor.example
  attestor add 0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF https://backup.example --caller admin
  attestor remove 0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF --caller admin
  attestor list
  attestor verify attestation.json
  attestor --registry /tmp/registry.json list   # use a registry file directly
  attestor --config staging config show         # use a specific profile
        """
    )

    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--config', type=str, help='Configuration profile to use (overrides ACTIVE_CONFIG)')
    parser.add_argument('--config-file', type=str, help='Configuration file (overrides ATTESTOR_CONFIG_FILE)')
    parser.add_argument('--registry', type=str, help='Registry file (overrides the profile registry_path)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    init_parser = subparsers.add_parser('init', help='Create the registry with its default attestor')
    init_parser.add_argument('--owner', type=str, help='Owner identity (default: profile owner)')
    init_parser.add_argument('--address', type=str, help='Default attestor address')
    init_parser.add_argument('--url', type=str, help='Default attestor URL')

    add_parser = subparsers.add_parser('add', help='Add or update an attestor')
    add_parser.add_argument('address', help='Attestor address (0x...)')
    add_parser.add_argument('url', help='Attestor URL')
    add_parser.add_argument('--caller', type=str, help='Caller identity (default: ATTESTOR_CALLER)')

    remove_parser = subparsers.add_parser('remove', help='Remove an attestor')
    remove_parser.add_argument('address', help='Attestor address (0x...)')
    remove_parser.add_argument('--caller', type=str, help='Caller identity (default: ATTESTOR_CALLER)')

    subparsers.add_parser('list', help='List registered attestors')

    contains_parser = subparsers.add_parser('contains', help='Check whether an address is registered')
    contains_parser.add_argument('address', help='Attestor address (0x...)')

    hash_parser = subparsers.add_parser('hash', help='Print canonical encodings of attestations')
    hash_parser.add_argument('file', help='JSON file with one attestation or a list')

    verify_parser = subparsers.add_parser('verify', help='Verify attestations against the registry')
    verify_parser.add_argument('file', help='JSON file with one attestation or a list')
    verify_parser.add_argument('--json', action='store_true', help='Print results as JSON')

    reset_parser = subparsers.add_parser('reset', help='Remove the registry file')
    reset_parser.add_argument('--no-backup', action='store_true', help='Delete instead of keeping a .bak copy')

    config_parser = subparsers.add_parser('config', help='Configuration management')
    config_subparsers = config_parser.add_subparsers(dest='config_command', help='Config commands')
    config_subparsers.add_parser('list', help='List all available configurations')
    config_subparsers.add_parser('show', help='Show active configuration details')
    config_validate_parser = config_subparsers.add_parser('validate', help='Validate a configuration')
    config_validate_parser.add_argument('config_name', nargs='?', help='Configuration to validate (default: active config)')

    return parser


def main(argv: Optional[list] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(verbose=args.verbose, no_color=args.no_color)

    try:
        COMMANDS[args.command](args)
    except AttestationError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        logger.debug("Traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
