"""The blank slots a word is assembled into."""

from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import InvalidAction
from .letters import normalise_letter


class BlankPattern(BaseModel):
    """
    Fixed-length sequence of optional letters.

    Slot ``i`` holds the ``i``-th character of the word being assembled.
    Filled slots are never cleared individually, only by ``reset()``.
    """

    model_config = ConfigDict(frozen=True)

    slots: Tuple[Optional[str], ...]

    @field_validator("slots")
    @classmethod
    def _normalise(cls, slots: Tuple[Optional[str], ...]) -> Tuple[Optional[str], ...]:
        if not slots:
            raise ValueError("A blank pattern needs at least one slot")
        return tuple(normalise_letter(slot) for slot in slots)

    @classmethod
    def empty(cls, length: int) -> "BlankPattern":
        return cls(slots=(None,) * length)

    @classmethod
    def from_letters(cls, letters: Sequence[Optional[str]]) -> "BlankPattern":
        return cls(slots=tuple(letters))

    def __len__(self) -> int:
        return len(self.slots)

    def fill(self, slot: int, letter: str) -> "BlankPattern":
        """
        Place a letter in an empty slot.

        Args:
            slot: Index of the slot (the word-character position)
            letter: Letter to place

        Returns:
            New pattern with the slot filled

        Raises:
            InvalidAction: If the slot is out of range, already filled, or
                the letter is not a single alphabetic character
        """
        if not 0 <= slot < len(self.slots):
            raise InvalidAction(f"Slot {slot} out of range (0-{len(self.slots) - 1})")
        if self.slots[slot] is not None:
            raise InvalidAction(f"Slot {slot} is already filled")
        try:
            letter = normalise_letter(letter)
        except ValueError as e:
            raise InvalidAction(str(e)) from e
        if letter is None:
            raise InvalidAction("Cannot fill a slot with an empty cell")

        slots = list(self.slots)
        slots[slot] = letter
        return BlankPattern(slots=tuple(slots))

    def reset(self) -> "BlankPattern":
        return BlankPattern.empty(len(self.slots))

    def is_complete(self) -> bool:
        return all(slot is not None for slot in self.slots)

    def is_empty(self) -> bool:
        return all(slot is None for slot in self.slots)

    def empty_slots(self) -> List[int]:
        return [i for i, slot in enumerate(self.slots) if slot is None]

    def first_empty(self) -> Optional[int]:
        empty = self.empty_slots()
        return empty[0] if empty else None

    def word(self) -> str:
        """
        The assembled word in lowercase.

        Raises:
            InvalidAction: If any slot is still empty
        """
        if not self.is_complete():
            raise InvalidAction("Blank pattern is not complete")
        return "".join(self.slots).lower()

    def __str__(self) -> str:
        return "".join(slot or "_" for slot in self.slots)
