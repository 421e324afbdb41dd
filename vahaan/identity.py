# vahaan/identity.py
"""Who is making the request.

There is no authentication in this deployment: every request is attributed
to a fixed guest identity. Routes only ever depend on `get_current_user`, so
a real resolver can be installed on ``app.state.identity_resolver`` without
touching them.
"""
from dataclasses import asdict, dataclass
from typing import Optional, Protocol

from fastapi import Request


@dataclass(frozen=True)
class Identity:
    id: str
    name: str
    email: str
    phone: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class IdentityResolver(Protocol):
    def resolve(self, request: Request) -> Identity:
        ...


GUEST = Identity(
    id="64f1b2c3d4e5f6789abcdef0",
    name="Guest User",
    email="guest@vahaanbazaar.com",
    phone="+91 9876543210",
)


class GuestIdentityResolver:
    """Attributes every request to the shared guest account."""

    def __init__(self, identity: Identity = GUEST):
        self.identity = identity

    def resolve(self, request: Request) -> Identity:
        return self.identity


def get_current_user(request: Request) -> Identity:
    resolver = getattr(request.app.state, "identity_resolver", None) or GuestIdentityResolver()
    return resolver.resolve(request)
