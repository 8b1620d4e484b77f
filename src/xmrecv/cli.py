from __future__ import annotations

import argparse
import json
import logging

from .constants import DEFAULT_HANDSHAKE_ATTEMPTS, DEFAULT_MAX_NAKS, DEFAULT_TIMEOUT_S
from .errors import XmodemError
from .net import Impairment, SocketTransport
from .receiver import Receiver

log = logging.getLogger(__name__)


def parse_endpoint(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    return host, int(port)


def open_transport(args: argparse.Namespace) -> SocketTransport:
    impair = Impairment(args.corrupt_rate)
    if args.connect is not None:
        host, port = args.connect
        log.info("connecting to %s:%d", host, port)
        return SocketTransport.connect(host, port, timeout_s=args.timeout_s, impairment=impair)
    log.info("waiting for sender on %s:%d", args.listen_host, args.listen_port)
    return SocketTransport.accept(args.listen_host, args.listen_port, impairment=impair)


def cmd_recv(args: argparse.Namespace) -> int:
    try:
        transport = open_transport(args)
    except XmodemError as exc:
        log.error("could not open connection: %s", exc)
        return 1

    receiver = Receiver(
        transport,
        timeout_s=args.timeout_s,
        handshake_attempts=args.handshake_attempts,
        max_naks=args.max_naks,
        expect_trailer=args.trailer,
        strip_padding=args.strip_padding,
    )
    try:
        data = receiver.run()
    except XmodemError as exc:
        log.error("transfer failed; phase=%s error=%s", receiver.phase.value, exc)
        return 1
    finally:
        transport.close()

    try:
        with open(args.out, "wb") as out:
            out.write(data)
    except OSError as exc:
        log.error("could not write %s: %s", args.out, exc)
        return 1

    metrics = receiver.metrics
    payload = {
        "role": "receiver",
        "bytes": len(data),
        "blocks": metrics.blocks_accepted,
        "naks": metrics.naks_sent,
        "seconds": metrics.duration_s,
        "mbps": metrics.throughput_mbps,
    }
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="xmrecv", description="Receive a file over XMODEM-1K/CRC.")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    recv = sub.add_parser("recv", help="receive a file and write it to disk")
    mode = recv.add_mutually_exclusive_group(required=True)
    mode.add_argument("--connect", type=parse_endpoint, metavar="HOST:PORT")
    mode.add_argument("--listen-port", type=int)
    recv.add_argument("--listen-host", default="0.0.0.0")
    recv.add_argument("--out", required=True)
    recv.add_argument("--timeout-s", type=float, default=DEFAULT_TIMEOUT_S)
    recv.add_argument("--handshake-attempts", type=int, default=DEFAULT_HANDSHAKE_ATTEMPTS)
    recv.add_argument("--max-naks", type=int, default=DEFAULT_MAX_NAKS)
    recv.add_argument("--no-trailer", dest="trailer", action="store_false", help="do not wait for ETB after EOT")
    recv.add_argument("--strip-padding", action="store_true", help="drop trailing SUB (0x1a) pad bytes")
    recv.add_argument("--corrupt-rate", type=float, default=0.0, help="simulate inbound bit errors")
    recv.add_argument("--json", action="store_true")
    recv.set_defaults(func=cmd_recv)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
