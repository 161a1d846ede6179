"""
Conformance Harness: Main Entry Point

Command-line runner for replaying order-book scripts against the
reference engine. Runs headless by default; --interactive reads
operator controls from stdin while playing.
"""
import sys
import asyncio
import argparse
from pathlib import Path
from typing import List, Optional, Tuple
from ..core.errors import UnknownCommandError
from ..core.logger import configure_logging
from ..engine.order_book import OrderBook
from .context import HarnessConfig
from .controls import apply_command, help_text
from .playback import PlaybackController

def load_scripts(paths: List[str], scripts_dir: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Returns (name, text) pairs. Directory scripts are taken in name order.
    """
    files = [Path(p) for p in paths]
    if scripts_dir:
        files.extend(sorted(Path(scripts_dir).glob("*.txt")))
    return [(f.stem, f.read_text(encoding="utf-8")) for f in files]

def _attach_operator(controller: PlaybackController):
    loop = asyncio.get_running_loop()

    def on_input():
        line = sys.stdin.readline()
        if not line:
            loop.remove_reader(sys.stdin)
            return
        try:
            control = apply_command(controller, line)
        except UnknownCommandError as e:
            print(f"{e} ({help_text()})")
            return
        print(f"[{control}] status={controller.status.value} delay={controller.state.delay_ms}ms")

    loop.add_reader(sys.stdin, on_input)
    print(help_text())

async def run(scripts: List[Tuple[str, str]], config: HarnessConfig, interactive: bool):
    controller = PlaybackController(OrderBook(track_stats=True), config)
    if interactive:
        _attach_operator(controller)
    try:
        if len(scripts) == 1:
            name, text = scripts[0]
            verdicts = [await controller.start(text, name)]
        else:
            verdicts = await controller.run_all(scripts)
    finally:
        if interactive:
            asyncio.get_running_loop().remove_reader(sys.stdin)
        controller.event_log.close()
    return controller, verdicts

def main():
    parser = argparse.ArgumentParser(
        description="Order Book Conformance Harness"
    )
    parser.add_argument(
        "scripts",
        nargs="*",
        help="Script files to replay"
    )
    parser.add_argument(
        "--scripts-dir",
        help="Directory of *.txt scripts to replay as a batch"
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=0,
        help="Delay between directives in milliseconds"
    )
    parser.add_argument(
        "--paused",
        action="store_true",
        help="Start paused (single script only; use with --interactive)"
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Read operator controls from stdin"
    )
    parser.add_argument(
        "--output",
        help="Append verdict records to this JSON-lines file"
    )
    parser.add_argument(
        "--depth-rows",
        type=int,
        default=30,
        help="Minimum rows per book side in the rendered view"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level"
    )

    args = parser.parse_args()
    if args.paused and not args.interactive:
        parser.error("--paused needs --interactive to resume")

    configure_logging(args.log_level, json_output=not args.interactive)

    scripts = load_scripts(args.scripts, args.scripts_dir)
    if not scripts:
        parser.error("no scripts given")

    config = HarnessConfig(
        delay_ms=args.delay_ms,
        min_depth_rows=args.depth_rows,
        start_paused=args.paused,
        log_level=args.log_level,
        output_path=args.output,
    )

    print(f"=== Order Book Conformance Harness ===")
    print(f"Scripts: {len(scripts)}")
    print(f"Delay: {config.delay_ms}ms")
    print()

    controller, verdicts = asyncio.run(run(scripts, config, args.interactive))

    print("=== VERDICTS ===")
    for verdict in verdicts:
        print(verdict.summary())

    failures = [r for r in controller.records if not r.success]
    if failures:
        print()
        print("=== FAILED CHECKS (last script) ===")
        for record in failures:
            print(f"line {record.line}: {record.type} expected={record.expected} "
                  f"actual={record.actual} {record.message or ''}".rstrip())

    if verdicts and len(verdicts) == len(scripts) and all(v.is_pass() for v in verdicts):
        sys.exit(0)
    else:
        sys.exit(1)

if __name__ == "__main__":
    main()
