"""CLI entry point for ServiceNow change automation."""

import argparse
import logging
import os
import sys

from snow_change.actions import close_change, create_change, wait_for_approval
from snow_change.client import ChangeClient
from snow_change.config import RunConfig, Settings, load_settings
from snow_change.errors import ChangeError
from snow_change.logger import setup_logging
from snow_change.output import OutputSink

logger = logging.getLogger("snow_change.cli")


class UsageError(Exception):
    """Raised when the command line cannot be parsed."""
    pass


class _Parser(argparse.ArgumentParser):
    """Argument parser that reports errors instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def _timeout_minutes(value: str) -> int:
    try:
        minutes = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value!r}")
    if minutes < 0:
        raise argparse.ArgumentTypeError(f"timeout must not be negative: {value}")
    return minutes


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _Parser(
        prog='snow-change',
        description='Create, wait for approval of, and close ServiceNow change requests',
        add_help=False,
        allow_abbrev=False,
    )

    parser.add_argument(
        '-a', '--action',
        default='',
        help='Action to perform (create | wait | close)'
    )
    parser.add_argument(
        '-i', '--instance',
        default='',
        help='ServiceNow instance (e.g. dev198952.service-now.com)'
    )
    parser.add_argument(
        '-t', '--token',
        default='',
        help='HMAC token (x-sn-hmac-signature-256)'
    )
    parser.add_argument(
        '-b', '--body',
        default='',
        help='JSON body for creating CR (required for create)'
    )
    parser.add_argument(
        '-c', '--cr-id',
        default='',
        help='Change Request ID (required for wait, close)'
    )
    parser.add_argument(
        '-m', '--timeout',
        type=_timeout_minutes,
        default=None,
        help='Timeout in minutes for wait (optional, default: indefinite)'
    )
    parser.add_argument(
        '-f', '--config',
        default=os.environ.get('SNOW_CHANGE_CONFIG'),
        help='Path to YAML settings file (optional)'
    )
    parser.add_argument(
        '-h', '--help',
        action='store_true',
        help='Show this help message'
    )

    return parser


def cmd_create(config: RunConfig, settings: Settings) -> int:
    """Create a change request."""
    with ChangeClient(config.api_url, config.token, settings.http.timeout_seconds) as client:
        create_change(client, config, OutputSink())
    return 0


def cmd_wait(config: RunConfig, settings: Settings) -> int:
    """Wait until a change request is approved."""
    with ChangeClient(config.api_url, config.token, settings.http.timeout_seconds) as client:
        wait_for_approval(
            client,
            config,
            interval_seconds=settings.polling.interval_seconds,
        )
    return 0


def cmd_close(config: RunConfig, settings: Settings) -> int:
    """Close a change request."""
    with ChangeClient(config.api_url, config.token, settings.http.timeout_seconds) as client:
        close_change(client, config, settings.close)
    return 0


COMMANDS = {
    'create': cmd_create,
    'wait': cmd_wait,
    'close': cmd_close,
}


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    if args.help or not (args.action and args.instance and args.token):
        parser.print_help()
        return 1

    handler = COMMANDS.get(args.action)
    if handler is None:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.config)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    try:
        setup_logging(settings.logging)
    except OSError as e:
        print(f"ERROR: Failed to set up logging: {e}", file=sys.stderr)
        return 1

    config = RunConfig(
        action=args.action,
        instance=args.instance,
        token=args.token,
        body=args.body,
        cr_id=args.cr_id,
        timeout_minutes=args.timeout,
    )

    try:
        return handler(config, settings)
    except ChangeError as e:
        logger.error(str(e), extra={'context': {'action': config.action}})
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        logger.error(
            f"Unexpected error: {type(e).__name__}: {e}",
            extra={'context': {'action': config.action}},
        )
        return 1


if __name__ == '__main__':
    sys.exit(main())
