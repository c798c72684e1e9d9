"""
txcore.cli
==========

Small command line front-end over the transaction model.

    txcore id FILE                  display id of a transaction or signed transaction
    txcore inspect FILE             JSON summary (type, id, non-zero fields)
    txcore group FILE... [--out D]  group id; with --out, write each member with grp set
    txcore pay --sender HEX --receiver HEX --amount N [...]
                                    build a payment, print base64 msgpack and id

Input files hold either raw canonical msgpack or its base64 text. Grouping
rewrites the transaction, so signed inputs come out unsigned.

Exit codes: 0 success, 1 on a txcore error, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from txcore import config as txconfig
from txcore import logging as tlog
from txcore.encoding.msgpack import loads
from txcore.errors import DeserializationError, TxCoreError, wrap
from txcore.types.group import assign_group_id
from txcore.types.signed import SignedTxn
from txcore.types.tx import Transaction
from txcore.utils.bytes import b32encode_nopad, b64decode, from_hex
from txcore.version import __version__

log = tlog.get_logger("txcore.cli")

Decoded = Union[Transaction, SignedTxn]


# ----------------------------
# Input helpers
# ----------------------------


def _read_blob(path: Path) -> bytes:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise wrap(e, path=str(path))
    # Canonical msgpack maps start with a non-ASCII byte, so base64 text is unambiguous.
    try:
        return b64decode(data)
    except ValueError:
        return data


def decode_any(data: bytes) -> Decoded:
    """Transaction or SignedTxn, told apart by the presence of `txn`."""
    obj = loads(data)
    if not isinstance(obj, dict):
        raise DeserializationError("expected a msgpack map")
    if "txn" in obj:
        return SignedTxn.from_obj(obj)
    return Transaction.from_obj(obj)


def load_file(path: Union[str, Path]) -> Decoded:
    p = Path(path)
    try:
        return decode_any(_read_blob(p))
    except TxCoreError as e:
        raise e.with_context(path=str(p))


def _unwrap(item: Decoded) -> Transaction:
    return item.txn if isinstance(item, SignedTxn) else item


def _hex_arg(value: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True))


# ----------------------------
# Commands
# ----------------------------


def cmd_id(args: argparse.Namespace, cfg: txconfig.Config) -> int:
    item = load_file(args.file)
    txid = item.txid()
    tlog.bind(txid=txid)
    log.info("computed transaction id")
    print(txid)
    return 0


def cmd_inspect(args: argparse.Namespace, cfg: txconfig.Config) -> int:
    _print_json(load_file(args.file).summary())
    return 0


def cmd_group(args: argparse.Namespace, cfg: txconfig.Config) -> int:
    txns = [_unwrap(load_file(f)) for f in args.files]
    grouped = assign_group_id(txns, max_size=cfg.group.max_size)
    gid = b32encode_nopad(grouped[0].group)
    tlog.bind(group_id=gid)
    log.info("assigned group id", extra={"members": len(grouped)})

    written: List[str] = []
    if args.out:
        out_dir = Path(args.out)
        names = [Path(src).name for src in args.files]
        clashes = sorted({n for n in names if names.count(n) > 1})
        if clashes:
            # Each member is written under its input file name.
            raise ValueError(f"input files share output names: {', '.join(clashes)}")
        out_dir.mkdir(parents=True, exist_ok=True)
        for name, tx in zip(names, grouped):
            dest = out_dir / name
            dest.write_text(tx.to_base64() + "\n", encoding="ascii")
            written.append(str(dest))

    _print_json(
        {
            "group_id": gid,
            "members": [tx.txid() for tx in grouped],
            "written": written,
        }
    )
    return 0


def cmd_pay(args: argparse.Namespace, cfg: txconfig.Config) -> int:
    header: Dict[str, Any] = cfg.header_defaults()
    if args.genesis_id is not None:
        header["genesis_id"] = args.genesis_id
    if args.genesis_hash is not None:
        header["genesis_hash"] = txconfig.NetworkConfig(genesis_hash=args.genesis_hash).genesis_hash_bytes()
    tx = Transaction.payment(
        sender=args.sender,
        receiver=args.receiver,
        amount=args.amount,
        close_remainder_to=args.close_to,
        fee=args.fee,
        first_valid=args.first_valid,
        last_valid=args.last_valid,
        note=args.note.encode("utf-8") if args.note else b"",
        **header,
    )
    tx.check_well_formed()
    txid = tx.txid()
    tlog.bind(txid=txid)
    log.info("built payment", extra={"amount": args.amount})
    _print_json({"txid": txid, "msgpack_b64": tx.to_base64()})
    return 0


# ----------------------------
# Parser / entrypoint
# ----------------------------


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="txcore",
        description="Canonical encoding and identifiers for ledger transactions.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--config", type=str, default=None, help="TOML or JSON config file")
    ap.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (overrides config)",
    )
    ap.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["json", "text", "auto"],
        help="Log format (overrides config)",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p_id = sub.add_parser("id", help="print the transaction id")
    p_id.add_argument("file")
    p_id.set_defaults(func=cmd_id)

    p_inspect = sub.add_parser("inspect", help="print a JSON summary")
    p_inspect.add_argument("file")
    p_inspect.set_defaults(func=cmd_inspect)

    p_group = sub.add_parser("group", help="compute and assign a group id")
    p_group.add_argument("files", nargs="+")
    p_group.add_argument("--out", type=str, default=None, help="directory for grouped members")
    p_group.set_defaults(func=cmd_group)

    p_pay = sub.add_parser("pay", help="build a payment transaction")
    p_pay.add_argument("--sender", type=_hex_arg, required=True, help="32-byte hex")
    p_pay.add_argument("--receiver", type=_hex_arg, required=True, help="32-byte hex")
    p_pay.add_argument("--amount", type=int, required=True)
    p_pay.add_argument("--fee", type=int, default=0)
    p_pay.add_argument("--first-valid", type=int, default=0)
    p_pay.add_argument("--last-valid", type=int, default=0)
    p_pay.add_argument("--note", type=str, default=None)
    p_pay.add_argument("--close-to", type=_hex_arg, default=None, help="32-byte hex")
    p_pay.add_argument("--genesis-id", type=str, default=None)
    p_pay.add_argument("--genesis-hash", type=str, default=None, help="base64 or hex")
    p_pay.set_defaults(func=cmd_pay)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    log_overrides: Dict[str, Any] = {}
    if args.log_level:
        log_overrides["level"] = args.log_level.upper()
    if args.log_format:
        log_overrides["format"] = args.log_format

    try:
        cfg = txconfig.load(args.config, **({"log": log_overrides} if log_overrides else {}))
        tlog.configure_from_config(cfg)
        with tlog.trace_scope():
            tlog.bind(component="cli", command=args.command)
            return args.func(args, cfg)
    except TxCoreError as e:
        print(json.dumps({"error": e.to_dict()}, sort_keys=True), file=sys.stderr)
        return 1
    except ValueError as e:
        # Bad command-line values: wrong-length hex, clashing output names.
        print(json.dumps({"error": wrap(e, command=args.command).to_dict()}), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
