from fastapi import HTTPException

from allocation.core.errors import ErrorKind

_STATUS_BY_ERR: dict[str, int] = {
    ErrorKind.NotFound.value: 404,
    ErrorKind.Conflict.value: 409,
    ErrorKind.InvalidState.value: 409,
    ErrorKind.Ineligible.value: 403,
    ErrorKind.InvariantViolation.value: 400,
    "already-applied": 409,
    "listing-not-active": 409,
    "contact-not-found": 404,
    "contact-not-tenant": 403,
    "waiting-list-not-found": 404,
    "housing-contracts-not-found": 404,
}

# registry lookups that could not be answered
_UPSTREAM = {"get-contact", "get-waiting-lists", "get-leases", "get-residential-area", "get-lease-property-info", "get-estate-code"}


def raise_for_error(err: str | None) -> None:
    if err in _UPSTREAM:
        raise HTTPException(status_code=502, detail=err)
    raise HTTPException(status_code=_STATUS_BY_ERR.get(err or "", 500), detail=err or ErrorKind.Unknown.value)
