#!/usr/bin/env python3
"""Revoke proxy access tokens so their links stop working immediately.

Responses already in the edge cache keep being served until they expire; pass
--evict-file-id to drop those as well.

Usage:
    python -m soutu.tools.revoke_token <token> [<token> ...] [--evict-file-id <file_id>]
"""

import argparse
import logging
import sys

from soutu.tools._common import initialize_tool_database
from soutu.utils.services import edge_cache_service, token_service

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Revoke proxy access tokens.")
    parser.add_argument("tokens", nargs="*", help="Tokens to revoke (the 'token' URL parameter)")
    parser.add_argument(
        "--evict-file-id",
        action="append",
        default=[],
        help="Also drop the cached response for this file id (repeatable)",
    )
    args = parser.parse_args()

    if not args.tokens and not args.evict_file_id:
        parser.error("nothing to do: pass at least one token or --evict-file-id")

    initialize_tool_database()

    missing = 0
    for token in args.tokens:
        if token_service.revoke_token(token):
            logger.info(f"Revoked {token}")
        else:
            logger.warning(f"Token {token} not found (already expired or revoked)")
            missing += 1

    for file_id in args.evict_file_id:
        if edge_cache_service.evict(file_id):
            logger.info(f"Evicted cached response for {file_id}")
        else:
            logger.info(f"No cached response for {file_id}")

    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
