#!/usr/bin/env python3
"""
realtime-pipes: replay a recorded stream at real-time pacing

Reads JSON-lines records from a file (or stdin), releases them through one
of the pacing stages, and writes them to stdout as they become due.

Usage:
    # Replay at the absolute times in each record's "ts" field
    realtime-pipes --mode time --time-field ts events.jsonl

    # Replay relative to start, skipping records with negative offsets
    realtime-pipes --mode relative --offset-field t --drop-expired feed.jsonl

    # Synthetic pacing: 20 Hz steady, or Poisson at 5 Hz with a fixed seed
    realtime-pipes --mode steady --rate 20 < feed.jsonl
    realtime-pipes --mode poisson --rate 5 --seed 42 < feed.jsonl

    # Explicit schedule: release at +0.5s, +1s, +2s, then the rest at once
    realtime-pipes --mode schedule --offsets 0.5,1,2 < feed.jsonl

    # Absolute schedule (ISO-8601 or POSIX seconds)
    realtime-pipes --mode schedule --times 2024-01-01T12:00:00Z,1704110460 < feed.jsonl

Configuration (TOML, command-line flags override):

    [replay]
    mode = "time"          # time | relative | steady | poisson | schedule | passthrough
    rate = 10.0            # steady / poisson
    seed = 42              # poisson (omit for a random seed)
    offsets = [0.5, 1.0]   # schedule, seconds after start
    times = ["2024-01-01T12:00:00Z"]  # schedule, absolute (used instead of offsets)
    drop_expired = false   # time / relative

    [input]
    time_field = "ts"      # ISO-8601 string or POSIX seconds
    offset_field = "t"     # seconds

    [output]
    flush = true
"""

import argparse
import copy
import functools
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, TextIO

import toml

from . import __version__
from .stages import (
    cat,
    cat_at_relative_times,
    cat_at_times,
    drop_expired,
    drop_relative_expired,
    drop_result,
    gen_poisson_cat,
    poisson_cat,
    relative_time_cat,
    steady_cat,
    then,
    time_cat,
)
from .timing.clock import WallClock, resolve_clock
from .timing.conversions import as_instant, seconds_to_duration

logger = logging.getLogger('realtime-pipes')

MODES = ('time', 'relative', 'steady', 'poisson', 'schedule', 'passthrough')

DEFAULT_CONFIG: Dict[str, Any] = {
    'replay': {
        'mode': 'passthrough',
        'rate': 1.0,
        'seed': None,
        'offsets': [],
        'times': [],
        'drop_expired': False,
    },
    'input': {
        'time_field': 'ts',
        'offset_field': 't',
    },
    'output': {
        'flush': True,
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from TOML file.

    Sections missing from the file are filled in from DEFAULT_CONFIG;
    without a readable file the defaults are returned.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            loaded = toml.load(f)
        for section, values in loaded.items():
            if isinstance(values, dict):
                config.setdefault(section, {}).update(values)
            else:
                config[section] = values
    elif config_path:
        logger.warning(f"Config file not found: {config_path} - using defaults")

    return config


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a record timestamp.

    Accepts POSIX seconds (int/float, or a numeric string) and ISO-8601
    strings; a trailing 'Z' is read as UTC.

    Raises:
        ValueError: if the value cannot be interpreted as a timestamp
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            return as_instant(float(text))
        except (ValueError, OverflowError):
            pass
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return as_instant(datetime.fromisoformat(text))
    try:
        return as_instant(value)
    except (TypeError, OverflowError) as e:
        raise ValueError(str(e)) from e


def read_records(
    lines: Iterable[str],
    validate: Optional[Callable[[Dict[str, Any]], Any]] = None
) -> Iterator[Dict[str, Any]]:
    """
    Parse JSON-lines input, skipping blank and malformed lines.

    Args:
        lines: Text lines
        validate: Optional check run on each record; records for which it
            raises KeyError/ValueError/TypeError/OverflowError are skipped

    Yields:
        One dict per valid record
    """
    skipped = 0
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError(f"expected a JSON object, got {type(record).__name__}")
            if validate is not None:
                validate(record)
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            skipped += 1
            logger.warning(f"Skipping line {lineno}: {e}")
            continue
        yield record

    if skipped:
        logger.info(f"Skipped {skipped} malformed record(s)")


def build_pipeline(
    replay: Dict[str, Any],
    fields: Dict[str, Any],
    clock: Optional[WallClock] = None
) -> Callable[[Iterable[Dict[str, Any]]], Iterator[Dict[str, Any]]]:
    """
    Build the pacing stage selected by the [replay] configuration.

    Args:
        replay: [replay] section (mode, rate, seed, offsets, times, drop_expired)
        fields: [input] section (time_field, offset_field)
        clock: Clock for all stages (default: system clock)

    Returns:
        A stage taking the record stream

    Raises:
        ValueError: for an unknown mode, invalid rate or unparseable schedule time
    """
    mode = replay.get('mode', 'passthrough')
    clock = resolve_clock(clock)
    time_field = fields.get('time_field', 'ts')
    offset_field = fields.get('offset_field', 't')

    def time_key(record):
        return parse_timestamp(record[time_field])

    def offset_key(record):
        return float(record[offset_field])

    if mode == 'time':
        stage = functools.partial(time_cat, clock=clock, key=time_key)
        if replay.get('drop_expired'):
            stage = then(drop_result(functools.partial(drop_expired, clock=clock, key=time_key)), stage)
        return stage

    if mode == 'relative':
        stage = functools.partial(relative_time_cat, clock=clock, key=offset_key)
        if replay.get('drop_expired'):
            stage = then(drop_result(functools.partial(drop_relative_expired, key=offset_key)), stage)
        return stage

    if mode == 'steady':
        rate = float(replay.get('rate', 1.0))
        return lambda records: steady_cat(records, rate, clock=clock)

    if mode == 'poisson':
        rate = float(replay.get('rate', 1.0))
        seed = replay.get('seed')
        if seed is None:
            return lambda records: poisson_cat(records, rate, clock=clock)
        return lambda records: gen_poisson_cat(records, int(seed), rate, clock=clock)

    if mode == 'schedule':
        times = replay.get('times') or []
        if times:
            schedule = [parse_timestamp(t) for t in times]
            return functools.partial(cat_at_times, schedule=schedule, clock=clock)
        offsets = [float(x) for x in replay.get('offsets', [])]
        return functools.partial(cat_at_relative_times, offsets=offsets, clock=clock)

    if mode == 'passthrough':
        return cat

    raise ValueError(f"Unknown mode '{mode}' (expected one of: {', '.join(MODES)})")


def record_validator(replay: Dict[str, Any], fields: Dict[str, Any]) -> Optional[Callable]:
    """Field check for the selected mode, so bad records are skipped on input."""
    mode = replay.get('mode')
    if mode == 'time':
        field = fields.get('time_field', 'ts')
        return lambda record: parse_timestamp(record[field])
    if mode == 'relative':
        field = fields.get('offset_field', 't')
        return lambda record: seconds_to_duration(float(record[field]))
    return None


def replay_stream(
    lines: Iterable[str],
    out: TextIO,
    config: Dict[str, Any],
    clock: Optional[WallClock] = None
) -> int:
    """
    Replay JSON-lines input to `out` according to `config`.

    Returns:
        Number of records written
    """
    replay = config.get('replay', {})
    fields = config.get('input', {})
    flush = config.get('output', {}).get('flush', True)

    stage = build_pipeline(replay, fields, clock=clock)
    records = read_records(lines, validate=record_validator(replay, fields))

    count = 0
    for record in stage(records):
        out.write(json.dumps(record) + '\n')
        if flush:
            out.flush()
        count += 1
    return count


def parse_offsets(text: str) -> List[float]:
    """Parse a comma-separated list of offsets in seconds."""
    return [float(part) for part in text.split(',') if part.strip()]


def parse_times(text: str) -> List[str]:
    """Split a comma-separated list of schedule timestamps."""
    return [part.strip() for part in text.split(',') if part.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='realtime-pipes: replay a JSON-lines stream at real-time pacing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    realtime-pipes --mode time --time-field ts events.jsonl
    realtime-pipes --mode poisson --rate 5 --seed 42 < feed.jsonl
    realtime-pipes --config replay.toml feed.jsonl
        """
    )

    parser.add_argument(
        'input',
        nargs='?',
        help='JSON-lines input file (default: stdin)'
    )
    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--mode', '-m',
        choices=MODES,
        help='Pacing mode (overrides config)'
    )
    parser.add_argument(
        '--rate', '-r',
        type=float,
        help='Rate in Hz for steady/poisson modes'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for poisson mode (default: random)'
    )
    parser.add_argument(
        '--offsets',
        type=parse_offsets,
        help='Comma-separated offsets in seconds for schedule mode'
    )
    parser.add_argument(
        '--times',
        type=parse_times,
        help='Comma-separated absolute times (ISO-8601 or POSIX seconds) for schedule mode'
    )
    parser.add_argument(
        '--time-field',
        help='Record field holding the absolute timestamp (time mode)'
    )
    parser.add_argument(
        '--offset-field',
        help='Record field holding the relative offset (relative mode)'
    )
    parser.add_argument(
        '--drop-expired',
        action='store_true',
        help='Skip leading records that are already late (time/relative modes)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load configuration
    try:
        config = load_config(args.config)
    except (toml.TomlDecodeError, OSError) as e:
        logger.error(f"Failed to load config {args.config}: {e}")
        return 2

    # Apply command-line overrides
    replay = config.setdefault('replay', {})
    fields = config.setdefault('input', {})
    if args.mode:
        replay['mode'] = args.mode
    if args.rate is not None:
        replay['rate'] = args.rate
    if args.seed is not None:
        replay['seed'] = args.seed
    if args.offsets is not None:
        replay['offsets'] = args.offsets
        replay['times'] = []
    if args.times is not None:
        replay['times'] = args.times
    if args.drop_expired:
        replay['drop_expired'] = True
    if args.time_field:
        fields['time_field'] = args.time_field
    if args.offset_field:
        fields['offset_field'] = args.offset_field

    logger.info(f"Replay mode: {replay.get('mode')} (input: {args.input or 'stdin'})")

    try:
        if args.input:
            with open(args.input, 'r') as f:
                count = replay_stream(f, sys.stdout, config)
        else:
            count = replay_stream(sys.stdin, sys.stdout, config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    logger.info(f"Replayed {count} record(s)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
