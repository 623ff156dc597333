#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from credhash.auth.users import ROLES, UserExistsError, default_users_path, register_user


def main() -> None:
    users_path = default_users_path()

    username = input("Username: ").strip()
    role = (input(f"Role [{'/'.join(ROLES)}]: ").strip().lower() or "viewer")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        register_user(username, pw1, role=role, path=users_path)
    except UserExistsError as e:
        raise SystemExit(str(e))
    except ValueError as e:
        raise SystemExit(f"Invalid input: {e}")
    print(f"OK -> {users_path}")


if __name__ == "__main__":
    main()
