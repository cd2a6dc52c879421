"""Print a long-lived bearer token for an existing user.

Usage:
    python create_token.py admin@example.com [days]

The token is signed with the SECRET_KEY of the current environment, so
run this with the same configuration as the server.
"""
import sys

from informate_api.app.core.config import settings
from informate_api.app.core.db import Database
from informate_api.app.core.security import TokenCodec


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(1)
    email = sys.argv[1].strip().lower()
    days = int(sys.argv[2]) if len(sys.argv) > 2 else 365

    with Database(settings.database_url).cursor() as cursor:
        row = cursor.execute(
            "SELECT user_id, email, role FROM users WHERE email = ?", (email,)
        ).fetchone()
    if not row:
        print(f"[!] No user found with email: {email}", file=sys.stderr)
        sys.exit(2)

    codec = TokenCodec.from_settings(settings)
    print(codec.issue({"id": row["user_id"], "sub": row["email"], "role": row["role"]}, expires_in=days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
