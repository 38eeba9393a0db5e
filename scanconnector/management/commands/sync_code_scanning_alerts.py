"""
Django management command to sync GitHub code scanning alerts.

Walks every organization installation of the configured GitHub App, lists
code scanning alerts updated since a watermark and writes each resulting
"Code Scanning Alert" connector object as one JSON line on stdout.

Usage:
    python manage.py sync_code_scanning_alerts [options]

Examples:
    # Sync every alert
    python manage.py sync_code_scanning_alerts

    # Incremental sync from a watermark
    python manage.py sync_code_scanning_alerts --since 2024-06-01T00:00:00Z

    # Only open alerts, stop after 50 objects
    python manage.py sync_code_scanning_alerts --state open --limit 50

    # Print the object schema and exit
    python manage.py sync_code_scanning_alerts --schema
"""

import json
import logging

import requests
from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_datetime

from scanconnector.connector_model import HandlerWrapper, OperationOptions
from scanconnector.finding_definitions import StaticCodeFindingDefinition
from scanconnector.github_connector import GitHubConnector, GitHubError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Sync GitHub code scanning alerts and print them as connector objects (JSON lines)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--since',
            type=str,
            help='Only sync alerts updated at or after this ISO 8601 timestamp'
        )
        parser.add_argument(
            '--limit',
            type=int,
            help='Stop after this many objects'
        )
        parser.add_argument(
            '--state',
            choices=['open', 'dismissed', 'fixed'],
            help='Only sync alerts in this state (default: all states)'
        )
        parser.add_argument(
            '--page-size',
            type=int,
            default=100,
            help='Alerts requested per API page (max 100)'
        )
        parser.add_argument(
            '--schema',
            action='store_true',
            help='Print the Code Scanning Alert schema and metadata, then exit'
        )
        parser.add_argument(
            '--app-id',
            type=str,
            help='GitHub App id (overrides SC_GITHUB_APP_ID setting)'
        )
        parser.add_argument(
            '--private-key',
            type=str,
            help='GitHub App private key, PEM text or file path (overrides SC_GITHUB_PRIVATE_KEY setting)'
        )
        # Note: --verbosity is provided by Django's BaseCommand, don't redefine it

    def handle(self, *args, **options):
        """Execute the sync command."""
        verbosity = options.get('verbosity', 1)

        # Configure logging based on verbosity
        if verbosity >= 2:
            logging.getLogger('scanconnector').setLevel(logging.DEBUG)
        elif verbosity == 1:
            logging.getLogger('scanconnector').setLevel(logging.INFO)
        else:
            logging.getLogger('scanconnector').setLevel(logging.WARNING)

        if options.get('schema'):
            self._write_schema()
            return

        since = None
        if options.get('since'):
            since = parse_datetime(options['since'])
            if since is None:
                raise CommandError(f"Invalid --since timestamp: {options['since']}")

        limit = options.get('limit')
        if limit is not None and limit < 1:
            raise CommandError('--limit must be a positive number')

        page_size = options.get('page_size')
        if page_size is None:
            page_size = 100
        if not 1 <= page_size <= 100:
            raise CommandError('--page-size must be between 1 and 100')

        try:
            connector = GitHubConnector.from_settings(
                app_id=options.get('app_id'),
                private_key=options.get('private_key'),
            )
        except GitHubError as e:
            raise CommandError(f'Failed to initialize GitHub connector: {e}')

        definition = StaticCodeFindingDefinition(connector)
        handler = HandlerWrapper(self._make_writer(limit))
        operation_options = OperationOptions(
            page_size=page_size,
            alert_state=options.get('state'),
        )

        try:
            definition.sync(since, handler, operation_options)
        except (GitHubError, requests.RequestException) as e:
            raise CommandError(f'Code scanning alert sync failed after {handler.handled} objects: {e}')
        finally:
            connector.close()

        summary = f"Synced {handler.handled} code scanning alert objects"
        if handler.stopped:
            summary += f" (stopped at --limit {limit})"
        self.stderr.write(self.style.SUCCESS(summary))

    def _make_writer(self, limit):
        """Handler callback writing JSON lines, asking to stop once `limit` objects are out."""
        written = 0

        def write(obj, timestamp_ms):
            nonlocal written
            record = obj.to_dict()
            record['last_updated'] = timestamp_ms
            self.stdout.write(json.dumps(record, sort_keys=True))
            written += 1
            return limit is None or written < limit

        return write

    def _write_schema(self):
        # Schema output needs no GitHub credentials
        definition = StaticCodeFindingDefinition(connector=None)
        payload = {
            'schema': definition.schema().to_dict(),
            'metadata': definition.schema_metadata().to_dict(),
        }
        self.stdout.write(json.dumps(payload, indent=2))
