#!/usr/bin/env python3
"""Session revocation utility for urlmini.

Blocks refresh sessions so their refresh tokens stop renewing access tokens.
Access tokens already issued stay valid until they expire.

Usage:
    python scripts/block_session.py <session-uuid> [<session-uuid> ...]
    python scripts/block_session.py --user-id 42
    python scripts/block_session.py --user-id 42 --dry-run

DATABASE_URL is read from the environment (or .env) like the service does.
"""

import argparse
import asyncio
import sys
from uuid import UUID

from urlmini.services.store import NotFoundError, StoreError, database_store

# Upper bound for --user-id; one page is plenty for a single account
MAX_SESSIONS = 1000


async def _block(session_ids: list[UUID], user_id: int | None, dry_run: bool) -> int:
    blocked = 0
    errors = 0

    async with database_store() as store:
        if user_id is not None:
            sessions = await store.list_sessions(
                user_id, limit=MAX_SESSIONS, offset=0, active_only=True
            )
            if not sessions:
                print(f"No active sessions for user {user_id}")
            session_ids = session_ids + [s.id for s in sessions]

        for session_id in session_ids:
            if dry_run:
                print(f"  Would block session {session_id}")
                blocked += 1
                continue
            try:
                session = await store.block_session(session_id)
            except NotFoundError:
                print(f"  ERROR: session {session_id} not found")
                errors += 1
                continue
            print(f"  Blocked session {session.id} (user {session.user_id})")
            blocked += 1

    print(f"\n{'Would block' if dry_run else 'Blocked'} {blocked} session(s), {errors} error(s)")
    return 1 if errors else 0


def main():
    parser = argparse.ArgumentParser(description="Block urlmini refresh sessions")
    parser.add_argument("session_ids", nargs="*", type=UUID, help="Session UUIDs to block")
    parser.add_argument(
        "--user-id", type=int, help="Block every active session of this user"
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would change without writing"
    )
    args = parser.parse_args()

    if not args.session_ids and args.user_id is None:
        print("ERROR: Provide at least one session id or --user-id")
        sys.exit(1)

    try:
        code = asyncio.run(_block(args.session_ids, args.user_id, args.dry_run))
    except StoreError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
