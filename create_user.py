"""
Create an editor account in the active storage tier.

Once any user exists the bootstrap identity stops resolving, so run this
before going to production.

Usage::

    python create_user.py editor@example.com "Jane Editor"
    python create_user.py editor@example.com "Jane Editor" --password s3cret

    # Only print a bcrypt hash (to paste into an existing users table):
    python create_user.py --hash-only
"""

import argparse
import asyncio
import getpass
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("create_user")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Create a blog CMS editor account")
    parser.add_argument("email", nargs="?", help="Login email")
    parser.add_argument("name", nargs="?", default="Admin", help="Display name (default: Admin)")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument(
        "--hash-only",
        action="store_true",
        help="Print a bcrypt hash and exit without touching storage",
    )
    args = parser.parse_args()

    from blog_cms.auth import hash_password
    from blog_cms.exceptions import DatabaseError, ValidationError
    from blog_cms.storage import PostStore

    password = args.password or getpass.getpass("Password: ")
    try:
        password_hash = hash_password(password)
    except ValidationError as exc:
        logger.error("%s", exc)
        return 1

    if args.hash_only:
        print(password_hash)
        return 0

    if not args.email:
        parser.error("Provide an email or use --hash-only")

    store = await PostStore.from_settings()
    try:
        user = await store.create_user(args.email, password_hash, args.name)
    except (ValidationError, DatabaseError) as exc:
        logger.error("Could not create user: %s", exc)
        return 1

    logger.info("Created user %s (id=%s) in %s tier", user.email, user.id, store.tier)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(0)
