from enum import Enum


class ListingStatus(str, Enum):
    Active = "Active"
    Assigned = "Assigned"
    Expired = "Expired"
    Closed = "Closed"


class ApplicantStatus(str, Enum):
    Active = "Active"
    Assigned = "Assigned"
    AssignedToOther = "AssignedToOther"
    WithdrawnByUser = "WithdrawnByUser"
    WithdrawnByAdmin = "WithdrawnByAdmin"
    OfferAccepted = "OfferAccepted"
    OfferDeclined = "OfferDeclined"
    OfferExpired = "OfferExpired"


# No transition leaves these
TERMINAL_APPLICANT_STATUSES: frozenset[str] = frozenset({
    ApplicantStatus.WithdrawnByUser.value,
    ApplicantStatus.WithdrawnByAdmin.value,
    ApplicantStatus.OfferAccepted.value,
    ApplicantStatus.OfferDeclined.value,
    ApplicantStatus.OfferExpired.value,
})


class OfferStatus(str, Enum):
    Active = "Active"
    Accepted = "Accepted"
    Declined = "Declined"
    Expired = "Expired"


class ApplicationType(str, Enum):
    Additional = "Additional"
    Replace = "Replace"
