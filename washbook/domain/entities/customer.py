from dataclasses import dataclass


@dataclass(frozen=True)
class Customer:
    id: str
    name: str = ""
    is_authenticated: bool = True  # False for guest sessions
