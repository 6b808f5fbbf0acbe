"""Cart and order ownership.

An owner is either a signed-in member or an anonymous guest session, never
both. Commands carry the two identifiers as separate optional fields;
``owner_from`` turns them back into exactly one variant.
"""

from dataclasses import dataclass

from storefront.errors import Unauthorized

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Member:
    user_id: str

    def as_fields(self) -> dict:
        return {"user_id": self.user_id, "session_id": None}


@dataclass(frozen=True)
class Guest:
    session_id: str

    def as_fields(self) -> dict:
        return {"user_id": None, "session_id": self.session_id}


Owner = Member | Guest


def owner_from(user_id=None, session_id=None) -> Owner:
    """Build the owner for a request, preferring the member identity.

    A signed-in request that also carries a guest session id belongs to the
    member; the guest cart is only folded in through an explicit merge.
    """
    if user_id:
        return Member(user_id=str(user_id))
    if session_id:
        return Guest(session_id=str(session_id))
    raise Unauthorized("User ID or session ID is required")
