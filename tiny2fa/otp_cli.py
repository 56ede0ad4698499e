"""
otp_cli.py — command line front end for tiny2fa.

Subcommands:
- init <key> : store a base32 secret under --scope
- generate   : print the current 6-digit TOTP code for --scope

Global options (accepted before or after the subcommand):
  --scope NAME   scope to use (default: "default")
  --config PATH  config file (default: $TINY2FA_CONFIG or <config dir>/tiny2fa/config.yml)
  --verbose      debug logging on stderr

eg..:
    tiny2fa init JBSWY3DPEHPK3PXP
    tiny2fa --scope work init JBSWY3DPEHPK3PXP
    tiny2fa generate --scope work
"""

import argparse
import sys

from tiny2fa import otp_core
from tiny2fa.errors import Tiny2faError
from tiny2fa.keystore import FileKeyStore
from tiny2fa.log import logger, set_verbose

DEFAULT_SCOPE = "default"


# --- CLI command handlers ---
def cmd_help(args):
    args.parser.print_help()


def cmd_init(args):
    store = args.store.load()
    store.set(args.scope, args.key)
    store.save()
    logger.debug("Stored key for scope '%s'", args.scope)


def cmd_generate(args):
    store = args.store.load()
    secret = store.get(args.scope)
    code, remaining = otp_core.totp(secret, args.now)
    logger.debug("[scope=%s] code valid for ~%ds", args.scope, remaining)
    print(code)


# --- Argparse builder ---
def _add_global_options(p: argparse.ArgumentParser, defaults: bool) -> None:
    # Subparsers use SUPPRESS so a value given before the subcommand survives.
    p.add_argument("-s", "--scope",
                   default=DEFAULT_SCOPE if defaults else argparse.SUPPRESS,
                   help="Scope at which the secret key is stored")
    p.add_argument("-c", "--config",
                   default=None if defaults else argparse.SUPPRESS,
                   help="Path to the config file")
    p.add_argument("-v", "--verbose", action="store_true",
                   default=False if defaults else argparse.SUPPRESS,
                   help="Verbose output on stderr")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tiny2fa", description="Tiny TOTP (RFC 6238) generator with per-scope secrets")
    _add_global_options(p, defaults=True)
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # init
    pi = sub.add_parser("init", help="Initialize 2FA with a base32 secret key")
    pi.add_argument("key", help="Base32 secret (RFC 4648, '=' padded)")
    _add_global_options(pi, defaults=False)
    pi.set_defaults(func=cmd_init)

    # generate
    pg = sub.add_parser("generate", help="Generate the current one-time code")
    _add_global_options(pg, defaults=False)
    pg.set_defaults(func=cmd_generate)

    return p


def main(argv=None, store=None, now=None) -> int:
    """
    Entry point. `store` and `now` are injectable for tests; by default the
    YAML store at --config (or the default path) and the wall clock are used.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    args.parser = parser
    args.store = store if store is not None else FileKeyStore(args.config)
    args.now = now
    try:
        args.func(args)
    except Tiny2faError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
