from __future__ import annotations

from typing import Iterator


BASE = "base"


class Errors:
    """
    Field-keyed collection of human-readable validation messages.

    - errors["amount"] -> ["must be greater than 0"] (empty list when clean)
    - messages on "base" describe the record as a whole
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._messages.setdefault(field, []).append(message)

    def update(self, other: "Errors") -> None:
        for field, messages in other.items():
            for message in messages:
                self.add(field, message)

    def clear(self) -> None:
        self._messages.clear()

    def items(self):
        return self._messages.items()

    def __getitem__(self, field: str) -> list[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: str) -> bool:
        return bool(self._messages.get(field))

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return sum(len(m) for m in self._messages.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def full_messages(self) -> list[str]:
        out = []
        for field, messages in self._messages.items():
            for message in messages:
                if field == BASE:
                    out.append(message)
                else:
                    label = field.replace("_", " ").capitalize()
                    out.append(f"{label} {message}")
        return out

    def to_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._messages.items()}

    def __repr__(self) -> str:
        return f"<Errors {self.to_dict()!r}>"


class ValidationError(ValueError):
    """400-level input problem, carrying the offending field messages."""

    def __init__(self, errors: Errors, record=None):
        self.errors = errors
        self.record = record
        super().__init__(", ".join(errors.full_messages()) or "Validation failed")


class HasErrors:
    """
    Mixin giving model instances a non-persistent `errors` collection.

    SQLAlchemy does not run __init__ for rows loaded from the database,
    so the collection is created on first access.
    """

    @property
    def errors(self) -> Errors:
        errors = self.__dict__.get("_errors")
        if errors is None:
            errors = Errors()
            self.__dict__["_errors"] = errors
        return errors

    def is_valid(self) -> bool:
        return not self.errors
