"""Who is calling. Only a static identity is provided here."""

from typing import Protocol

from models.caller import Caller


class AuthService(Protocol):
    def current_user(self) -> Caller: ...


class StaticAuth:
    """Returns one fixed caller, e.g. the identity from the config file."""

    def __init__(self, caller: Caller):
        self._caller = caller

    def current_user(self) -> Caller:
        return self._caller
