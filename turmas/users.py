"""Registered users and the configuration file that holds them."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .errors import Rejected

MAX_USERNAME_LENGTH = 50
MAX_PASSWORD_LENGTH = 50
MAX_TYPE_LENGTH = 20
MAX_REPLY_LENGTH = 511

LISTING_HEADER = "----- REGISTERED USERS -----\n\n"


class UserType(str, Enum):
    """The kinds of account the server knows about."""

    ADMINISTRADOR = "administrador"
    ALUNO = "aluno"
    PROFESSOR = "professor"


@dataclass
class User:
    """One registered account."""

    username: str
    password: str
    user_type: str

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMINISTRADOR.value

    def to_line(self) -> str:
        """Return the configuration-file line for this user."""
        return f"{self.username};{self.password};{self.user_type}\n"


def parse_user_line(line: str) -> User:
    """Parse a ``username;password;type`` line of the configuration file."""
    fields = line.strip().split(";", 2)
    if len(fields) != 3:
        raise ValueError(f"malformed user entry: {line!r}")
    username, password, rest = fields
    type_tokens = rest.split()
    if not username or not password or not type_tokens:
        raise ValueError(f"malformed user entry: {line!r}")
    return User(
        username=username[: MAX_USERNAME_LENGTH - 1],
        password=password[: MAX_PASSWORD_LENGTH - 1],
        user_type=type_tokens[0][: MAX_TYPE_LENGTH - 1],
    )


def _type_name(user_type: Union[UserType, str]) -> str:
    if isinstance(user_type, UserType):
        return user_type.value
    return str(user_type)


class UserStore:
    """The users known to the server, kept in step with their file."""

    def __init__(self, path: Union[str, Path], users: Iterable[User] = ()) -> None:
        self.path = Path(path)
        self._users = list(users)
        self._lock = threading.RLock()

    @classmethod
    def load(cls, path: Union[str, Path]) -> "UserStore":
        """Read every user from the configuration file at ``path``."""
        path = Path(path)
        with path.open(encoding="utf-8") as handle:
            users = [parse_user_line(line) for line in handle if line.strip()]
        return cls(path, users)

    def __iter__(self) -> Iterator[User]:
        return iter(list(self._users))

    def __len__(self) -> int:
        return len(self._users)

    def find(self, username: str) -> Optional[User]:
        """Return the user called ``username``, if there is one."""
        return next((u for u in self._users if u.username == username), None)

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user matching both credentials, or None."""
        return next(
            (
                u
                for u in self._users
                if u.username == username and u.password == password
            ),
            None,
        )

    def add(self, username: str, password: str, user_type: Union[UserType, str]) -> User:
        """Register a new user and append it to the configuration file."""
        with self._lock:
            if self.find(username) is not None:
                raise Rejected("ALREADY EXISTS")
            user = User(username, password, _type_name(user_type))
            self._users.append(user)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(user.to_line())
            return user

    def remove(self, username: str) -> User:
        """Remove a user and rewrite the configuration file without it."""
        with self._lock:
            user = self.find(username)
            if user is None:
                raise Rejected("NOT FOUND")
            self._users.remove(user)
            self.save()
            return user

    def listing(self) -> str:
        """Return the reply listing every registered user."""
        with self._lock:
            if not self._users:
                raise Rejected("NO USERS")
            text = LISTING_HEADER + "".join(
                f"USER {u.username} TYPE {u.user_type}\n" for u in self._users
            )
        return text[:MAX_REPLY_LENGTH]

    def save(self) -> None:
        """Rewrite the configuration file with the current users."""
        with self._lock:
            with self.path.open("w", encoding="utf-8") as handle:
                handle.writelines(u.to_line() for u in self._users)