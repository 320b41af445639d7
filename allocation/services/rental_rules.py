from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

from allocation.canonical.applicant import ListingView
from allocation.canonical.contracts import Lease
from allocation.canonical.housing import HousingStatus
from allocation.canonical.statuses import ApplicationType


class ContractHolder(Protocol):
    """Anything carrying the contracts rental rules look at (Tenant, DetailedApplicant)."""
    parking_space_contracts: tuple[Lease, ...]

    @property
    def housing_status(self) -> HousingStatus:
        ...


class RuleReason(str, Enum):
    NoPropertyRules = "No property rental rules applies to this listing"
    NoAreaRules = "No residential area rental rules applies to this listing"
    NotTenantInProperty = "Applicant is not a current or coming tenant in the property"
    NotTenantInArea = "Applicant does not have any current or upcoming housing contracts in the residential area"
    NoParkingSpaceInProperty = "Applicant does not have any active parking space contracts in the listings property"
    NoParkingSpaceInArea = "Applicant does not have any active parking space contracts in the listings residential area"
    MustReplaceInProperty = "Applicant already has an active parking space contract in the listings property and may only replace it"
    MustReplaceInArea = "Applicant already has an active parking space contract in the listings residential area and may only replace it"


class RuleFamily(str, Enum):
    Unrestricted = "none"
    Property = "property"
    ResidentialArea = "residential-area"


@dataclass(frozen=True)
class RentalRulesConfig:
    property_codes: frozenset[str]
    residential_area_codes: frozenset[str]

    @classmethod
    def from_settings(cls, settings) -> "RentalRulesConfig":
        return cls(
            property_codes=frozenset(settings.properties_with_specific_rules),
            residential_area_codes=frozenset(settings.residential_areas_with_specific_rules),
        )


@dataclass(frozen=True)
class RuleOutcome:
    eligible: bool
    application_type: ApplicationType | None
    reason: RuleReason
    rule: RuleFamily = RuleFamily.Unrestricted

    @classmethod
    def additional(cls, reason: RuleReason, rule: RuleFamily) -> "RuleOutcome":
        return cls(eligible=True, application_type=ApplicationType.Additional, reason=reason, rule=rule)

    @classmethod
    def replace(cls, reason: RuleReason, rule: RuleFamily) -> "RuleOutcome":
        return cls(eligible=True, application_type=ApplicationType.Replace, reason=reason, rule=rule)

    @classmethod
    def ineligible(cls, reason: RuleReason, rule: RuleFamily) -> "RuleOutcome":
        return cls(eligible=False, application_type=None, reason=reason, rule=rule)


def _any_in_property(contracts: Iterable[Lease], estate_code: str) -> bool:
    return any(c.estate_code and c.estate_code == estate_code for c in contracts)


def _any_in_area(contracts: Iterable[Lease], district_code: str) -> bool:
    return any(c.residential_area_code == district_code for c in contracts)


class RentalRuleEngine:
    """
    Decides whether a contact may apply for a parking space and as which
    application type.

    Two rule families exist: property-level rules keyed on estate code and
    residential-area rules keyed on district code. Estate codes of the
    applicant's contracts must already be resolved on the leases; the engine
    does no I/O.
    """

    def __init__(self, config: RentalRulesConfig):
        self._config = config

    @property
    def config(self) -> RentalRulesConfig:
        return self._config

    def has_property_rules(self, estate_code: str | None) -> bool:
        return bool(estate_code) and estate_code in self._config.property_codes

    def has_area_rules(self, district_code: str | None) -> bool:
        return bool(district_code) and district_code in self._config.residential_area_codes

    def evaluate_property_rules(self, estate_code: str | None, applicant: ContractHolder) -> RuleOutcome:
        if not self.has_property_rules(estate_code):
            return RuleOutcome.additional(RuleReason.NoPropertyRules, rule=RuleFamily.Unrestricted)

        if not _any_in_property(applicant.housing_status.contracts(), estate_code):
            return RuleOutcome.ineligible(RuleReason.NotTenantInProperty, rule=RuleFamily.Property)

        if not applicant.parking_space_contracts:
            return RuleOutcome.additional(RuleReason.NoParkingSpaceInProperty, rule=RuleFamily.Property)

        if _any_in_property(applicant.parking_space_contracts, estate_code):
            return RuleOutcome.replace(RuleReason.MustReplaceInProperty, rule=RuleFamily.Property)

        return RuleOutcome.additional(RuleReason.NoParkingSpaceInProperty, rule=RuleFamily.Property)

    def evaluate_area_rules(self, district_code: str | None, applicant: ContractHolder) -> RuleOutcome:
        if not self.has_area_rules(district_code):
            return RuleOutcome.additional(RuleReason.NoAreaRules, rule=RuleFamily.Unrestricted)

        governing = applicant.housing_status.governing()
        if governing is None or governing.residential_area_code != district_code:
            return RuleOutcome.ineligible(RuleReason.NotTenantInArea, rule=RuleFamily.ResidentialArea)

        if not _any_in_area(applicant.parking_space_contracts, district_code):
            return RuleOutcome.additional(RuleReason.NoParkingSpaceInArea, rule=RuleFamily.ResidentialArea)

        return RuleOutcome.replace(RuleReason.MustReplaceInArea, rule=RuleFamily.ResidentialArea)

    def evaluate(self, listing: ListingView, applicant: ContractHolder) -> RuleOutcome:
        # property rules win when a listing is covered by both families
        if self.has_property_rules(listing.estate_code):
            return self.evaluate_property_rules(listing.estate_code, applicant)
        return self.evaluate_area_rules(listing.district_code, applicant)
