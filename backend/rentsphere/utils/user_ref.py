from __future__ import annotations

from dataclasses import dataclass

USER_TYPES = ("google", "phone")


@dataclass(frozen=True)
class UserRef:
    """A user of either account kind.

    Google and phone accounts live in different identity stores but are one
    logical user for the rental core. Columns map to this value through
    ``db.composite``; comparisons are by (kind, id).
    """

    kind: str
    id: int

    def __post_init__(self):
        if self.kind not in USER_TYPES:
            raise ValueError(f"unknown user type: {self.kind!r}")
        object.__setattr__(self, "id", int(self.id))

    def __composite_values__(self):
        return self.kind, self.id

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"

    def to_dict(self) -> dict:
        return {"user_type": self.kind, "user_id": self.id}
