# =============================================================================
# File: tradebot/common/steam_id.py
# Description: Account identifier parsing (SteamID2 / SteamID3 / SteamID64)
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from tradebot.common.exceptions.exceptions import InvalidSteamIDError


class Universe(IntEnum):
    INVALID = 0
    PUBLIC = 1
    BETA = 2
    INTERNAL = 3
    DEV = 4


class AccountType(IntEnum):
    INVALID = 0
    INDIVIDUAL = 1
    MULTISEAT = 2
    GAMESERVER = 3
    ANON_GAMESERVER = 4
    PENDING = 5
    CONTENT_SERVER = 6
    CLAN = 7
    CHAT = 8
    ANON_USER = 10


# SteamID3 type letters
TYPE_LETTERS = {
    "I": AccountType.INVALID,
    "U": AccountType.INDIVIDUAL,
    "M": AccountType.MULTISEAT,
    "G": AccountType.GAMESERVER,
    "A": AccountType.ANON_GAMESERVER,
    "P": AccountType.PENDING,
    "C": AccountType.CONTENT_SERVER,
    "g": AccountType.CLAN,
    "T": AccountType.CHAT,
    "L": AccountType.CHAT,
    "c": AccountType.CHAT,
    "a": AccountType.ANON_USER,
}

DESKTOP_INSTANCE = 1

_STEAM2 = re.compile(r'^STEAM_([0-4]):([0-1]):([0-9]+)$')
_STEAM3 = re.compile(r'^\[([a-zA-Z]):([0-4]):([0-9]+)(?::([0-9]+))?\]$')


@dataclass(frozen=True)
class SteamID:
    """Immutable account identifier"""
    universe: Universe
    account_type: AccountType
    instance: int
    account_id: int

    @classmethod
    def parse(cls, value: Union[SteamID, int, str]) -> SteamID:
        """
        Parse any supported identifier format.

        Raises:
            InvalidSteamIDError: if the value is not a recognizable identifier
        """
        if isinstance(value, SteamID):
            return value
        if isinstance(value, bool):
            raise InvalidSteamIDError(f"Unknown SteamID input format: {value!r}")
        if isinstance(value, int):
            return cls.from_steam_id64(value)
        if not isinstance(value, str):
            raise InvalidSteamIDError(f"Unknown SteamID input format: {value!r}")

        text = value.strip()

        match = _STEAM2.match(text)
        if match:
            universe = int(match.group(1)) or Universe.PUBLIC
            account_id = int(match.group(3)) * 2 + int(match.group(2))
            return cls(Universe(universe), AccountType.INDIVIDUAL, DESKTOP_INSTANCE, account_id)

        match = _STEAM3.match(text)
        if match:
            letter, universe, account_id, instance = match.groups()
            account_type = TYPE_LETTERS.get(letter)
            if account_type is None:
                raise InvalidSteamIDError(f"Unknown SteamID3 type letter: {letter}")
            if instance is not None:
                instance_value = int(instance)
            elif account_type == AccountType.INDIVIDUAL:
                instance_value = DESKTOP_INSTANCE
            else:
                instance_value = 0
            return cls(Universe(int(universe)), account_type, instance_value, int(account_id))

        if text.isdigit():
            return cls.from_steam_id64(int(text))

        raise InvalidSteamIDError(f"Unknown SteamID input format: {value!r}")

    @classmethod
    def from_steam_id64(cls, value: int) -> SteamID:
        if value <= 0 or value >= 1 << 64:
            raise InvalidSteamIDError(f"SteamID64 out of range: {value}")
        try:
            universe = Universe(value >> 56)
            account_type = AccountType((value >> 52) & 0xF)
        except ValueError as e:
            raise InvalidSteamIDError(f"Invalid SteamID64: {value}") from e
        return cls(universe, account_type, (value >> 32) & 0xFFFFF, value & 0xFFFFFFFF)

    @property
    def steam_id64(self) -> int:
        return (
            (int(self.universe) << 56)
            | (int(self.account_type) << 52)
            | (self.instance << 32)
            | self.account_id
        )

    def is_valid(self) -> bool:
        if self.universe == Universe.INVALID or self.account_type == AccountType.INVALID:
            return False
        if self.account_type == AccountType.INDIVIDUAL:
            return self.account_id != 0 and self.instance <= 4
        return True

    def steam2(self) -> str:
        """STEAM_X:Y:Z rendering (individual accounts)."""
        return f"STEAM_{int(self.universe)}:{self.account_id & 1}:{self.account_id >> 1}"

    def steam3(self) -> str:
        letter = next(k for k, v in TYPE_LETTERS.items() if v == self.account_type)
        if self.account_type == AccountType.INDIVIDUAL and self.instance != DESKTOP_INSTANCE:
            return f"[{letter}:{int(self.universe)}:{self.account_id}:{self.instance}]"
        return f"[{letter}:{int(self.universe)}:{self.account_id}]"

    def __str__(self) -> str:
        return str(self.steam_id64)
