"""Create an administrator account, written on behalf of the system user."""
import argparse

from eventlog.core.actor import system_actor
from eventlog.db import session_as
from eventlog.models.user import User


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--first-name", default=None)
    parser.add_argument("--last-name", default=None)
    args = parser.parse_args()

    with session_as(system_actor()) as db:
        user = User(
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
            is_admin=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        print("==========================================")
        print("Admin user created")
        print("Send this header with API requests:")
        print(f"    X-Actor-Uuid: {user.uuid}")
        print("==========================================")


if __name__ == "__main__":
    main()
