"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar


@dataclasses.dataclass
class Settings:
    """Dataclass settings read from ``<PREFIX>_<FIELD>`` environment variables.

    ``_secret_fields`` never leave the object in clear text: :meth:`to_dict`
    and the loader's error messages show ``***`` instead.
    """

    _prefix: ClassVar[str] = ""
    _secret_fields: ClassVar[frozenset[str]] = frozenset({"password"})

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""

    @classmethod
    def env_key(cls, field_name: str) -> str:
        """``url`` → ``ADT_URL`` for ``_prefix = "ADT"``."""
        return f"{cls._prefix}_{field_name}".upper().lstrip("_")

    @classmethod
    def is_secret(cls, field_name: str) -> bool:
        return field_name in cls._secret_fields

    def to_dict(self) -> dict[str, Any]:
        return {
            f.name: ("***" if self.is_secret(f.name) and getattr(self, f.name) else getattr(self, f.name))
            for f in dataclasses.fields(self)
        }


__all__ = ["Settings"]
