"""
One-off job to hash plaintext user passwords

Older imports stored ``senha`` in clear text. This script replaces those
values with bcrypt hashes in place. Run it once after such an import:

    python -m tinbr.scripts.convert_passwords --target 123456 --target senhaboa
"""

import argparse
import sys
from typing import Iterable, Optional

from sqlmodel import Session, select
import structlog

from tinbr.core.database import engine
from tinbr.core.security import hash_password, is_password_hash
from tinbr.models.document import Document, utc_now
from tinbr.services.collections import USERS

logger = structlog.get_logger(__name__)


def convert_plaintext_passwords(
    session: Session,
    targets: Optional[Iterable[str]] = None,
) -> int:
    """Hash stored plaintext passwords, returning how many users were converted.

    With ``targets`` only passwords equal to one of them are converted;
    otherwise every value that is not already a bcrypt hash is.
    """
    targets = set(targets) if targets else None
    field = USERS.password_field
    converted = 0

    users = session.exec(select(Document).where(Document.collection == USERS.name)).all()
    try:
        for user in users:
            plain = (user.data or {}).get(field)
            if not isinstance(plain, str) or not plain:
                continue
            if targets is not None and plain not in targets:
                continue
            if targets is None and is_password_hash(plain):
                continue

            user.data = {**user.data, field: hash_password(plain)}
            user.updated_at = utc_now()
            session.add(user)
            converted += 1
            logger.info("Password converted", user_id=user.id, cliente_id=user.cliente_id)

        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Error converting passwords: {e}")
        raise

    return converted


def main(argv=None):
    """Main entry point for the conversion job"""
    parser = argparse.ArgumentParser(description="Hash plaintext user passwords")
    parser.add_argument(
        "--target",
        action="append",
        dest="targets",
        help="Only convert this exact plaintext value (repeatable)",
    )
    args = parser.parse_args(argv)

    try:
        with Session(engine) as session:
            total = convert_plaintext_passwords(session, args.targets)
    except Exception as e:
        logger.error(f"Fatal error in password conversion: {e}")
        sys.exit(1)

    logger.info("Password conversion complete", converted=total)


if __name__ == "__main__":
    main()
