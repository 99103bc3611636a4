# === FILE: spider_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point of the SpiderScout crawler.

Commands:
  crawl SEED  Crawl everything reachable from SEED and print a summary
  config      Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --workers N         Concurrent fetch workers
  --delay SEC         Pause after each fetch, per worker
  --timeout SEC       Timeout of one fetch
  --sink KIND         none | json | http
  --endpoint URL      Upsert collection URL for the http sink
  --report PATH       Output file of the json sink
  --no-report-content Leave raw page bodies out of the json report
  --sink-policy NAME  fatal | log | retry
  --crawl-timeout SEC Stop queueing new pages after this many seconds

Example:
  spider-scout crawl https://example.com/ --sink json --report crawl.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from spider_scout import __version__
from spider_scout.config import load_config, parse_seed
from spider_scout.engine import start_crawl
from spider_scout.exceptions import InvalidSeed, SinkWriteFailure
from spider_scout.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SpiderScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stdout only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SpiderScout command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('seed')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None, help='Concurrent fetch workers')
@click.option('--delay', '-d', type=click.FloatRange(min=0), default=None, help='Pause after each fetch (seconds)')
@click.option('--timeout', '-t', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Timeout of a single fetch (seconds)')
@click.option('--sink', 'sink', type=click.Choice(['none', 'json', 'http']), default=None,
              help='Where fetched pages go')
@click.option('--endpoint', 'endpoint', default=None, help='Upsert collection URL for the http sink')
@click.option('--report', '-r', 'report_path', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Output file of the json sink')
@click.option('--report-content/--no-report-content', 'report_content', default=None,
              help='Keep raw page bodies in the json report')
@click.option('--sink-policy', 'sink_policy', type=click.Choice(['fatal', 'log', 'retry']), default=None,
              help='Reaction to a failed sink write')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None,
              help='Stop queueing new pages after this many seconds')
@click.pass_context
def crawl(ctx, seed, workers, delay, timeout, sink, endpoint, report_path, report_content, sink_policy,
          crawl_timeout):
    """Crawl everything reachable from SEED."""
    try:
        seed = parse_seed(seed)
    except InvalidSeed as e:
        print_error(str(e))

    overrides = {
        'workers': workers,
        'delay': delay,
        'timeout': timeout,
        'sink': sink,
        'sink_endpoint': endpoint,
        'report_path': report_path,
        'report_content': report_content,
        'sink_policy': sink_policy,
    }
    cfg = ctx.obj['config'].model_copy(update={k: v for k, v in overrides.items() if v is not None})

    click.echo(f'Starting crawl from {seed}')
    try:
        summary = asyncio.run(start_crawl(seed, cfg, crawl_timeout=crawl_timeout))
    except KeyboardInterrupt:
        print_error('Crawl interrupted by user')
    except SinkWriteFailure as e:
        print_error(f'Storing results failed: {e}')
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    click.echo(f'Pages fetched: {summary.pages}, errors: {summary.errors}')
    click.echo(f'Found {len(summary.visited)} unique urls:')
    for url in sorted(summary.visited):
        click.echo(url)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
