"""Cut buffer storage shared by the editor and the edit modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal

RegisterType = Literal["character", "line"]

UNNAMED_REGISTER = '"'


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    type: RegisterType = "character"


class RegisterBank:
    """Named registers; writing any of them also fills the unnamed one."""

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {
            UNNAMED_REGISTER: RegisterValue(text="")
        }

    def get(self, name: str = UNNAMED_REGISTER) -> RegisterValue:
        return self._registers.get(name, RegisterValue(text=""))

    def set(self, name: str, value: RegisterValue) -> None:
        self._registers[name] = value
        if name != UNNAMED_REGISTER:
            self._registers[UNNAMED_REGISTER] = value

    def yank_to(
        self, name: str, text: str, *, register_type: RegisterType = "character"
    ) -> None:
        self.set(name, RegisterValue(text=text, type=register_type))

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._registers))


__all__ = ["RegisterBank", "RegisterType", "RegisterValue", "UNNAMED_REGISTER"]
