"""Command-line front end for the XR30256 block primitive.

Usage:
    xr30lab keygen [--seed N]
    xr30lab schedule --key HEX [--binary]
    xr30lab encrypt --key HEX --hex HEX            # or --in FILE [--out FILE]
    xr30lab decrypt --key HEX --hex HEX
    xr30lab evolve --hex HEX [--rule 30] [--generations 255] [--trace]
    xr30lab bench [--seconds 1.0] [--windows 3] [--threads 1]

Keys and blocks are 64 hex digits (32 bytes, big-endian limbs). Files hold
exactly 32 raw bytes. With -v the scheduled subkeys are logged in binary.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import logging
import random
import secrets
import sys
from pathlib import Path
from typing import List, Optional

from xr30lab.cipher.automaton import evolve, trace
from xr30lab.cipher.builder import CipherContext
from xr30lab.cipher.errors import XR30Error
from xr30lab.cipher.register import REGISTER_BITS, Register
from xr30lab.cipher.registry import RuleRegistry
from xr30lab.config import load_settings

logger = logging.getLogger("xr30lab")


def _render(register: Register, binary: bool) -> str:
    return register.to_binary() if binary else register.to_hex()


def _read_block(args: argparse.Namespace, what: str) -> Register:
    if args.infile:
        return Register.from_bytes(Path(args.infile).read_bytes(), what=what)
    if args.hex is None:
        raise ValueError(f"{what} required: pass --hex or --in")
    return Register.from_hex(args.hex, what=what)


def _context(key_hex: str) -> CipherContext:
    ctx = CipherContext.from_key(Register.from_hex(key_hex, what="key"))
    for i, subkey in enumerate(ctx.scheduled_key, start=1):
        logger.debug("K%d: %s", i, subkey.to_binary())
    return ctx


def _cmd_keygen(args: argparse.Namespace) -> None:
    if args.seed is not None:
        key = Register.from_int(random.Random(args.seed).getrandbits(REGISTER_BITS))
    else:
        key = Register.from_bytes(secrets.token_bytes(32))
    print(key.to_hex())


def _cmd_schedule(args: argparse.Namespace) -> None:
    ctx = _context(args.key)
    for i, subkey in enumerate(ctx.scheduled_key, start=1):
        print(f"K{i}: {_render(subkey, args.binary)}")


def _cmd_crypt(args: argparse.Namespace) -> None:
    what = "plaintext" if args.command == "encrypt" else "ciphertext"
    block = _read_block(args, what)
    ctx = _context(args.key)
    logger.debug("%s: %s", what, block.to_binary())

    out = ctx.encrypt(block) if args.command == "encrypt" else ctx.decrypt(block)
    logger.debug("result: %s", out.to_binary())

    if args.outfile:
        Path(args.outfile).write_bytes(out.to_bytes())
        logger.info("Wrote %d bytes to %s", len(out.to_bytes()), args.outfile)
    else:
        print(_render(out, args.binary))


def _cmd_evolve(args: argparse.Namespace) -> None:
    start = Register.from_hex(args.hex)
    table = RuleRegistry().get(args.rule)
    if args.trace:
        for gen in trace(start, table, args.generations):
            print(gen.to_binary().replace("0", " ").replace("1", "#"))
        return
    print(_render(evolve(start, table, args.generations), args.binary))


def _cmd_bench(args: argparse.Namespace) -> None:
    from xr30lab.evaluation.benchmark_runner import BenchmarkConfig, measure_throughput

    settings = load_settings()
    config = BenchmarkConfig(
        seconds=args.seconds if args.seconds is not None else settings.bench_seconds,
        windows=args.windows,
        threads=args.threads if args.threads is not None else settings.bench_threads,
        seed=settings.global_seed,
    )
    result = measure_throughput(config)
    print(result.summary())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xr30lab",
        description="XR30256 - experimental rule-30 cellular-automaton block cipher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("keygen", help="Print a random 256-bit key")
    p.add_argument("--seed", type=int, default=None, help="Deterministic key for reproducible runs")
    p.set_defaults(func=_cmd_keygen)

    p = sub.add_parser("schedule", help="Print the four scheduled subkeys")
    p.add_argument("--key", required=True, help="64 hex digits")
    p.add_argument("--binary", action="store_true", help="Print bits instead of hex")
    p.set_defaults(func=_cmd_schedule)

    for name in ("encrypt", "decrypt"):
        p = sub.add_parser(name, help=f"{name.capitalize()} one 256-bit block")
        p.add_argument("--key", required=True, help="64 hex digits")
        src = p.add_mutually_exclusive_group()
        src.add_argument("--hex", default=None, help="Block as 64 hex digits")
        src.add_argument("--in", dest="infile", default=None, help="File holding exactly 32 bytes")
        p.add_argument("--out", dest="outfile", default=None, help="Write the raw 32-byte result here")
        p.add_argument("--binary", action="store_true", help="Print bits instead of hex")
        p.set_defaults(func=_cmd_crypt)

    p = sub.add_parser("evolve", help="Run the cellular automaton on a register")
    p.add_argument("--hex", required=True, help="Register as 64 hex digits")
    p.add_argument("--rule", type=int, default=30, help="Wolfram rule number (default: 30)")
    p.add_argument("--generations", type=int, default=255, help="Generations (default: 255)")
    p.add_argument("--trace", action="store_true", help="Print every generation as a row of cells")
    p.add_argument("--binary", action="store_true", help="Print bits instead of hex")
    p.set_defaults(func=_cmd_evolve)

    p = sub.add_parser("bench", help="Measure encryptions per second")
    p.add_argument("--seconds", type=float, default=None, help="Window length in seconds")
    p.add_argument("--windows", type=int, default=3, help="Number of windows (default: 3)")
    p.add_argument("--threads", type=int, default=None, help="Worker threads")
    p.set_defaults(func=_cmd_bench)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else load_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except (XR30Error, ValueError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
