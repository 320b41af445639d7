from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from allocation.canonical.contracts import Lease


@dataclass(frozen=True)
class NoContract:
    def governing(self) -> Lease | None:
        return None

    def contracts(self) -> tuple[Lease, ...]:
        return ()


@dataclass(frozen=True)
class Current:
    contract: Lease

    def governing(self) -> Lease | None:
        return self.contract

    def contracts(self) -> tuple[Lease, ...]:
        return (self.contract,)


@dataclass(frozen=True)
class Upcoming:
    contract: Lease

    def governing(self) -> Lease | None:
        return self.contract

    def contracts(self) -> tuple[Lease, ...]:
        return (self.contract,)


@dataclass(frozen=True)
class Both:
    current: Lease
    upcoming: Lease

    def governing(self) -> Lease | None:
        # the applicant is moving; the upcoming home decides
        return self.upcoming

    def contracts(self) -> tuple[Lease, ...]:
        return (self.current, self.upcoming)


HousingStatus = Union[NoContract, Current, Upcoming, Both]


def housing_status_of(current: Lease | None, upcoming: Lease | None) -> HousingStatus:
    if current and upcoming:
        return Both(current=current, upcoming=upcoming)
    if upcoming:
        return Upcoming(contract=upcoming)
    if current:
        return Current(contract=current)
    return NoContract()
