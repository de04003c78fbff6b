"""SelfUpdate: entry point."""

import argparse
import logging
import os
import sys

from selfupdate.branding import AppBranding
from selfupdate.config.settings import UpdaterSettings
from selfupdate.core.orchestrator import UpdateOrchestrator
from selfupdate.core.policy import POLICIES


def setup_logging(log_dir: str, verbose: bool = False):
    """Configure logging to file and console."""
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'selfupdate.log')

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='selfupdate',
        description='Check for a newer published version and install it.',
    )
    parser.add_argument('--config', help='settings JSON file '
                        '(default: $SELFUPDATE_CONFIG or ~/.selfupdate/settings.json)')
    parser.add_argument('--identifier', help='version identifier to check')
    parser.add_argument('--remote-url', dest='remote_base_url',
                        help='base URL of the version registry')
    parser.add_argument('--download-url', dest='download_base_url',
                        help='base URL archives are downloaded from')
    parser.add_argument('--destination', dest='destination_dir',
                        help='directory updated files are installed into')
    parser.add_argument('--version-file', dest='local_version_path',
                        help='path of the local version record')
    parser.add_argument('--comparison', choices=sorted(POLICIES),
                        help='"different": any other version is an update; '
                             '"newer": only higher versions are')
    parser.add_argument('--strict-install', action='store_true', default=None,
                        help='fail when any staged entry cannot be installed')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='debug logging')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = UpdaterSettings.load(args.config)
    settings.apply_overrides(
        identifier=args.identifier,
        remote_base_url=args.remote_base_url,
        download_base_url=args.download_base_url,
        destination_dir=args.destination_dir,
        local_version_path=args.local_version_path,
        comparison=args.comparison,
        strict_install=args.strict_install,
    )

    setup_logging(settings.log_dir, args.verbose)
    logger = logging.getLogger(__name__)
    logger.info("%s starting, identifier=%s", AppBranding.banner(), settings.identifier)

    orchestrator = UpdateOrchestrator.from_settings(settings, status_callback=print)
    result = orchestrator.run()

    # Failures and skipped entries already went to the log handlers
    return 0 if result.ok else 1


if __name__ == '__main__':
    sys.exit(main())
