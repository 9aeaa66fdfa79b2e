"""Decoded game state and its mapping onto bitstream fields."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .bitstream import CHECKSUM_FIELD, payload_crc, write_fields
from .errors import FieldOutOfRangeError, InvalidGameStateError
from .normalize import HERO_NAME_LENGTH, normalize_hero_name
from .symbols import code_to_name_char, name_char_to_code

INVENTORY_SLOTS = 8

WEAPONS: Tuple[str, ...] = (
    "(なし)",
    "たけざお",
    "こんぼう",
    "どうのつるぎ",
    "てつのおの",
    "はがねのつるぎ",
    "ほのおのつるぎ",
    "ロトのつるぎ",
)
ARMORS: Tuple[str, ...] = (
    "(なし)",
    "ぬののふく",
    "かわのふく",
    "くさりかたびら",
    "てつのよろい",
    "はがねのよろい",
    "まほうのよろい",
    "ロトのよろい",
)
SHIELDS: Tuple[str, ...] = (
    "(なし)",
    "かわのたて",
    "てつのたて",
    "みかがみのたて",
)
TOOLS: Tuple[str, ...] = (
    "(なし)",
    "たいまつ",
    "せいすい",
    "キメラのつばさ",
    "りゅうのうろこ",
    "ようせいのふえ",
    "せんしのゆびわ",
    "ロトのしるし",
    "おうじょのあい",
    "のろいのベルト",
    "ぎんのたてごと",
    "しのくびかざり",
    "たいようのいし",
    "あまぐものつえ",
    "にじのしずく",
)

HERB_MAX = 6
KEY_MAX = 6
SALT_MAX = 7
COUNTER_MAX = 0xFFFF

# Largest value the game accepts for each range-checked bitstream field.
FIELD_LIMITS: Mapping[str, int] = MappingProxyType(
    {
        "hero_weapon": len(WEAPONS) - 1,
        "hero_armor": len(ARMORS) - 1,
        "hero_shield": len(SHIELDS) - 1,
        "herb_count": HERB_MAX,
        "key_count": KEY_MAX,
        **{f"inventory_{slot}": len(TOOLS) - 1 for slot in range(INVENTORY_SLOTS)},
    }
)

_FLAG_NAMES: Tuple[str, ...] = (
    "flag_equip_dragon_scale",
    "flag_equip_warrior_ring",
    "flag_got_death_necklace",
    "flag_beated_golem",
    "flag_beated_dragon",
)


def _check_range(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidGameStateError(f"{name} must be an integer: {value!r}")
    if not 0 <= value <= maximum:
        raise FieldOutOfRangeError(name, value, maximum)


@dataclass(frozen=True)
class GameState:
    """Game progress stored in a password.

    Construction normalises ``hero_name`` (see
    :func:`~dq1_password.normalize.normalize_hero_name`) and rejects values
    the game cannot represent, so every instance can be encoded.
    """

    hero_name: str = ""
    hero_xp: int = 0
    purse: int = 0
    hero_weapon: int = 0
    hero_armor: int = 0
    hero_shield: int = 0
    herb_count: int = 0
    key_count: int = 0
    inventory: Tuple[int, ...] = (0,) * INVENTORY_SLOTS
    flag_equip_dragon_scale: bool = False
    flag_equip_warrior_ring: bool = False
    flag_got_death_necklace: bool = False
    flag_beated_golem: bool = False
    flag_beated_dragon: bool = False
    salt: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "hero_name", normalize_hero_name(self.hero_name))
        inventory = tuple(self.inventory)
        if len(inventory) != INVENTORY_SLOTS:
            raise InvalidGameStateError(
                f"inventory must have exactly {INVENTORY_SLOTS} slots, got {len(inventory)}"
            )
        object.__setattr__(self, "inventory", inventory)
        for name in _FLAG_NAMES:
            object.__setattr__(self, name, bool(getattr(self, name)))
        self.validate()

    def validate(self) -> None:
        _check_range("hero_xp", self.hero_xp, COUNTER_MAX)
        _check_range("purse", self.purse, COUNTER_MAX)
        _check_range("hero_weapon", self.hero_weapon, FIELD_LIMITS["hero_weapon"])
        _check_range("hero_armor", self.hero_armor, FIELD_LIMITS["hero_armor"])
        _check_range("hero_shield", self.hero_shield, FIELD_LIMITS["hero_shield"])
        _check_range("herb_count", self.herb_count, HERB_MAX)
        _check_range("key_count", self.key_count, KEY_MAX)
        for slot, tool in enumerate(self.inventory):
            _check_range(f"inventory_{slot}", tool, FIELD_LIMITS[f"inventory_{slot}"])
        _check_range("salt", self.salt, SALT_MAX)

    def replace(self, **changes: object) -> "GameState":
        return dataclasses.replace(self, **changes)

    def to_fields(self) -> Dict[str, int]:
        """Split the state into bitstream field values (checksum excluded)."""

        fields: Dict[str, int] = {
            "xp_lo": self.hero_xp & 0xFF,
            "xp_hi": self.hero_xp >> 8,
            "purse_lo": self.purse & 0xFF,
            "purse_hi": self.purse >> 8,
            "hero_weapon": self.hero_weapon,
            "hero_armor": self.hero_armor,
            "hero_shield": self.hero_shield,
            "herb_count": self.herb_count,
            "key_count": self.key_count,
        }
        for index, char in enumerate(self.hero_name):
            fields[f"name_{index}"] = name_char_to_code(char)
        for slot, tool in enumerate(self.inventory):
            fields[f"inventory_{slot}"] = tool
        for name in _FLAG_NAMES:
            fields[name] = int(getattr(self, name))
        for bit in range(3):
            fields[f"salt_{bit}"] = (self.salt >> bit) & 1
        return fields

    @classmethod
    def from_fields(cls, fields: Mapping[str, int]) -> "GameState":
        """Rebuild a state from field values.

        Raises :class:`~dq1_password.errors.FieldOutOfRangeError` when a field
        holds a value the game does not recognise, for instance an item ID
        past the end of :data:`TOOLS`.
        """

        try:
            return cls(
                hero_name="".join(
                    code_to_name_char(fields[f"name_{index}"]) for index in range(HERO_NAME_LENGTH)
                ),
                hero_xp=fields["xp_lo"] | (fields["xp_hi"] << 8),
                purse=fields["purse_lo"] | (fields["purse_hi"] << 8),
                hero_weapon=fields["hero_weapon"],
                hero_armor=fields["hero_armor"],
                hero_shield=fields["hero_shield"],
                herb_count=fields["herb_count"],
                key_count=fields["key_count"],
                inventory=tuple(fields[f"inventory_{slot}"] for slot in range(INVENTORY_SLOTS)),
                salt=sum(fields[f"salt_{bit}"] << bit for bit in range(3)),
                **{name: bool(fields[name]) for name in _FLAG_NAMES},
            )
        except KeyError as exc:
            raise InvalidGameStateError(f"missing field {exc.args[0]!r}") from None


def compute_checksum(state: GameState) -> int:
    """Return the checksum byte a password for ``state`` must carry."""

    return payload_crc(write_fields(state.to_fields())) & 0xFF


def state_to_bitstream(state: GameState) -> bytes:
    fields = state.to_fields()
    fields[CHECKSUM_FIELD] = compute_checksum(state)
    return write_fields(fields)


__all__ = [
    "ARMORS",
    "COUNTER_MAX",
    "FIELD_LIMITS",
    "GameState",
    "HERB_MAX",
    "INVENTORY_SLOTS",
    "KEY_MAX",
    "SALT_MAX",
    "SHIELDS",
    "TOOLS",
    "WEAPONS",
    "compute_checksum",
    "state_to_bitstream",
]
