#!/usr/bin/env python3
"""Issue a signed proxy URL for a Telegram file id.

Handy for checking a deployment end to end: paste the printed URL into a
browser and the image should load.

Usage:
    python -m soutu.tools.issue_link --file-id <file_id> [--user-id <user_id>]
"""

import argparse
import sys

from soutu.config import build_url_issuer
from soutu.tools._common import initialize_tool_database


def main():
    parser = argparse.ArgumentParser(description="Issue a signed proxy URL for a Telegram file.")
    parser.add_argument("--file-id", required=True, help="Telegram file_id to link to")
    parser.add_argument(
        "--user-id",
        default="",
        help="User the link is issued for (rate limits apply per user)",
    )
    args = parser.parse_args()

    initialize_tool_database()
    issuer = build_url_issuer()
    print(issuer.issue(args.file_id, args.user_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
