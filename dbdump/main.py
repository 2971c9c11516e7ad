#!/usr/bin/env python3
"""
dbdump - CLI Entry Point
========================
Dump MySQL/MariaDB databases while skipping row data of noisy tables:
- Structure is kept for every table
- Data exclusions from defaults, global config, project config and flags
- Exact table names and glob patterns
- Dry-run preview of excluded tables
"""

import argparse
import logging
import os
import sys
from typing import Optional

import yaml
from mysql.connector import Error as MySQLError

from .classifier import TableClassifier
from .config import ConfigLoader, build_layers, load_project_config
from .connection import DatabaseConnection
from .dumper import MySQLDumper, check_mysqldump, default_output_file
from .exceptions import ConfigError, DumpError
from .merger import merge_layers
from .models import Classification, ConnectionSettings, DumpOptions, ExcludeConfig, TableInfo
from .profiles import load_profiles
from .utils import print_dry_run_info, print_summary, print_table_list, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dbdump',
        description='dbdump - MySQL dumps that keep structure but skip noisy table data'
    )
    parser.add_argument('-H', '--host', default=None, help='Database host (default: 127.0.0.1)')
    parser.add_argument('-P', '--port', type=int, default=None, help='Database port (default: 3306)')
    parser.add_argument('-u', '--user', default=None, help='Database user')
    parser.add_argument(
        '-p', '--password',
        default=None,
        help='Database password (or use MYSQL_PWD env)'
    )
    parser.add_argument('-d', '--database', default=None, help='Database name')
    parser.add_argument('--profile', help='Use a saved connection profile')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--log-file', help='Also write log output to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    dump_parser = subparsers.add_parser('dump', help='Dump database with exclusions')
    dump_parser.add_argument(
        '-o', '--output',
        help='Output file (default: {database}_{timestamp}.sql)'
    )
    dump_parser.add_argument('-c', '--config', help='Project config file path')
    dump_parser.add_argument(
        '--exclude',
        action='append',
        default=[],
        metavar='TABLE',
        help='Exclude data of a specific table (repeatable)'
    )
    dump_parser.add_argument(
        '--exclude-pattern',
        action='append',
        default=[],
        metavar='PATTERN',
        help='Exclude data of tables matching a glob pattern (repeatable)'
    )
    dump_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be dumped without actually dumping'
    )

    list_parser = subparsers.add_parser('list', help='List all tables in the database')
    list_parser.add_argument('-c', '--config', help='Project config file path')

    config_parser = subparsers.add_parser('config', help='Manage configuration and profiles')
    config_sub = config_parser.add_subparsers(dest='config_command', required=True)
    config_sub.add_parser('list', help='List saved connection profiles')

    return parser


def resolve_connection(args: argparse.Namespace) -> ConnectionSettings:
    """Combine profile values, flags and MYSQL_PWD into connection settings."""
    settings = ConnectionSettings()
    if args.profile:
        settings = load_profiles().get_profile(args.profile).to_settings()

    if args.host is not None:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.user is not None:
        settings.user = args.user
    if args.password is not None:
        settings.password = args.password
    if args.database is not None:
        settings.database = args.database

    if not settings.password:
        settings.password = os.environ.get('MYSQL_PWD', '')

    if not settings.user:
        raise ConfigError("database user is required (use -u or --user)")
    if not settings.database:
        raise ConfigError("database name is required (use -d or --database)")

    return settings


def build_exclude_config(
    project: Optional[ConfigLoader],
    exclude_tables: Optional[list[str]] = None,
    exclude_patterns: Optional[list[str]] = None
) -> ExcludeConfig:
    """Load every configuration layer and merge them."""
    layers = build_layers(project, exclude_tables, exclude_patterns)
    effective = merge_layers(layers)
    logging.debug(
        f"Effective excludes: exact={list(effective.exact)}, patterns={list(effective.patterns)}"
    )
    return effective


def classify_tables(
    conn: DatabaseConnection,
    excludes: ExcludeConfig
) -> tuple[list[TableInfo], Classification, TableClassifier]:
    tables_info = conn.get_tables_info()
    logging.info(f"Found {len(tables_info)} tables")

    classifier = TableClassifier(excludes)
    classification = classifier.classify(info.name for info in tables_info)
    return tables_info, classification, classifier


def run_dump(args: argparse.Namespace, project: Optional[ConfigLoader]) -> int:
    check_mysqldump()
    settings = resolve_connection(args)
    excludes = build_exclude_config(project, args.exclude, args.exclude_pattern)

    with DatabaseConnection.from_settings(settings) as conn:
        _, classification, classifier = classify_tables(conn, excludes)

    logging.info(f"Excluding data for {len(classification.excluded)} table(s) based on patterns")

    output_file = os.path.abspath(args.output) if args.output else default_output_file(settings.database)

    if args.dry_run:
        print_dry_run_info(classification, output_file, classifier.explain(classification.excluded))
        return 0

    logging.info(f"Starting dump to {output_file}")
    dumper = MySQLDumper(DumpOptions(
        connection=settings,
        output_file=output_file,
        exclude_tables=list(classification.excluded)
    ))
    result = dumper.dump()
    print_summary(result)
    return 0


def run_list(args: argparse.Namespace, project: Optional[ConfigLoader]) -> int:
    settings = resolve_connection(args)
    excludes = build_exclude_config(project)

    with DatabaseConnection.from_settings(settings) as conn:
        tables_info, classification, _ = classify_tables(conn, excludes)

    print_table_list(settings.database, tables_info, set(classification.excluded))
    return 0


def run_config_list() -> int:
    profiles = load_profiles()
    if not profiles.profiles:
        print("No saved profiles found")
        return 0

    print("\nSaved connection profiles:\n")
    for profile in profiles.profiles:
        print(f"  {profile.name}")
        print(f"    Host: {profile.host}:{profile.port}")
        print(f"    User: {profile.user}")
        if profile.database:
            print(f"    Database: {profile.database}")
        print()
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load the project config first so its logging section can be honoured
    project = None
    log_settings = {}
    config_path = getattr(args, 'config', None)
    try:
        if config_path:
            project = load_project_config(config_path)
            log_settings = dict(project.get_logging_settings())
    except FileNotFoundError:
        print(f"Error: Configuration file '{config_path}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.verbose:
        log_settings['level'] = 'DEBUG'
    if args.log_file:
        log_settings['file'] = args.log_file
    setup_logging(log_settings)

    try:
        if args.command == 'dump':
            code = run_dump(args, project)
        elif args.command == 'list':
            code = run_list(args, project)
        else:
            code = run_config_list()
    except (ConfigError, DumpError, MySQLError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)

    sys.exit(code)


if __name__ == '__main__':
    main()
