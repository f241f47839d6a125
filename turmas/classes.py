"""Classes that teachers create and students subscribe to."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .errors import Rejected

MAX_CLASSES = 10
MAX_STUDENTS = 50
MAX_REPLY_LENGTH = 1023
MULTICAST_PREFIX = "224.0.0."

NO_CLASSES = "NO CLASSES\n"
NO_CLASS_SUBSCRIBED = "NO CLASS SUBSCRIBED\n"
LISTING_HEADER = "----- CLASSES AVAILABLE -----\n\n"


@dataclass
class Turma:
    """A class with its multicast group and subscribed students."""

    name: str
    max_capacity: int
    multicast: str
    students: list = field(default_factory=list)
    messages: list = field(default_factory=list)

    @property
    def num_students(self) -> int:
        return len(self.students)

    @property
    def is_full(self) -> bool:
        return self.num_students >= min(self.max_capacity, MAX_STUDENTS)

    @property
    def first_student(self) -> str:
        return self.students[0] if self.students else ""


class ClassRegistry:
    """All classes known to the server, in order of creation."""

    def __init__(self, max_classes: int = MAX_CLASSES) -> None:
        self.max_classes = max_classes
        self._classes: dict = {}
        self._lock = threading.RLock()

    def __iter__(self) -> Iterator[Turma]:
        return iter(list(self._classes.values()))

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def get(self, name: str) -> Optional[Turma]:
        return self._classes.get(name)

    def create(self, name: str, max_capacity: int) -> Turma:
        """Create a class and give it the next multicast address."""
        with self._lock:
            if name in self._classes:
                raise Rejected("ALREADY EXISTS")
            if len(self._classes) >= self.max_classes:
                raise Rejected("LIMIT REACHED")
            turma = Turma(
                name=name,
                max_capacity=max_capacity,
                multicast=f"{MULTICAST_PREFIX}{len(self._classes) + 1}",
            )
            self._classes[name] = turma
            return turma

    def subscribe(self, username: str, name: str) -> Turma:
        """Subscribe ``username`` to the class called ``name``."""
        with self._lock:
            turma = self._classes.get(name)
            if turma is None:
                raise Rejected("NOT FOUND")
            if username in turma.students:
                raise Rejected("ALREADY SUBSCRIBED")
            if turma.is_full:
                raise Rejected("IS FULL")
            turma.students.append(username)
            return turma

    def listing(self) -> str:
        """Return the reply listing every class."""
        with self._lock:
            if not self._classes:
                return NO_CLASSES
            text = LISTING_HEADER + "".join(
                f"CLASS {t.name} {t.first_student} {t.max_capacity} {t.num_students}\n"
                for t in self._classes.values()
            )
        return text[:MAX_REPLY_LENGTH]

    def subscribed_listing(self, username: str) -> str:
        """Return the reply listing the classes ``username`` is subscribed to."""
        with self._lock:
            if not self._classes:
                return NO_CLASSES
            lines = [
                f"CLASS {t.name}/{t.multicast}\n"
                for t in self._classes.values()
                if username in t.students
            ]
        text = f"----- CLASSES SUBSCRIBED BY {username} -----\n\n"
        text += "".join(lines) if lines else NO_CLASS_SUBSCRIBED
        return text[:MAX_REPLY_LENGTH]

    def send(self, name: str, content: str) -> Turma:
        """Record ``content`` for the class called ``name`` and return the class."""
        with self._lock:
            turma = self._classes.get(name)
            if turma is None:
                raise Rejected("CLASS DOESN'T EXIST")
            turma.messages.append(content)
            return turma