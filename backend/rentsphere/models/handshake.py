from __future__ import annotations

from dataclasses import dataclass, replace

PARTY_ROLES = ("renter", "lister")


@dataclass(frozen=True)
class TwoPartyHandshake:
    """Both counterparties must acknowledge an event before the rental advances.

    Used for the pickup handover and for the return. Mapped onto a pair of
    boolean columns with ``db.composite``; assign a new value to change it.
    """

    renter: bool = False
    lister: bool = False

    def __composite_values__(self):
        return self.renter, self.lister

    def confirm(self, role: str) -> "TwoPartyHandshake":
        if role not in PARTY_ROLES:
            raise ValueError(f"unknown party role: {role!r}")
        return replace(self, **{role: True})

    def confirmed_by(self, role: str) -> bool:
        return bool(getattr(self, role))

    def both_confirmed(self) -> bool:
        return bool(self.renter and self.lister)

    def to_dict(self) -> dict:
        return {"renter": bool(self.renter), "lister": bool(self.lister), "both": self.both_confirmed()}
