# bookcart/domain/identity.py
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UserOwner:
    user_id: int

    @property
    def key(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True)
class GuestOwner:
    session_id: str

    @property
    def key(self) -> str:
        return f"session:{self.session_id}"


CartOwner = Union[UserOwner, GuestOwner]


def resolve_owner(session_id: str | None, user_id: int | None) -> CartOwner:
    """Zalogowany user ma pierwszenstwo przed sesja goscia."""
    if user_id is not None:
        return UserOwner(user_id)
    if not session_id:
        raise ValueError("Brak ID sesji dla koszyka goscia")
    return GuestOwner(session_id)
