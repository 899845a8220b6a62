"""Exceptions raised by the skill store.

The HTTP layer maps them onto status codes; library callers can catch
``SkillRegistryError`` to handle every store failure at once.
"""

from __future__ import annotations


class SkillRegistryError(Exception):
    pass


class SkillNotFoundError(SkillRegistryError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Skill not found: {name}")


class InvalidRegistrationError(SkillRegistryError):
    """The registration references something the store cannot resolve."""

    def __init__(self, skill_name: str, reason: str) -> None:
        self.skill_name = skill_name
        self.reason = reason
        super().__init__(f"Invalid registration for skill '{skill_name}': {reason}")


class RegistrationError(SkillRegistryError):
    """A storage failure aborted a write; nothing from it was committed."""

    def __init__(self, name: str, step: str, reason: str, *, kind: str = "skill") -> None:
        self.name = name
        self.kind = kind
        self.step = step
        self.reason = reason
        super().__init__(f"register {kind} '{name}' failed at {step}: {reason}")
