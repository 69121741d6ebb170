"""Back/forward history of cursor positions for the demo host."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from jump_beacon.host import CursorPosition


@dataclass(slots=True)
class JumpList:
    """Browser-style jump history.

    ``index == len(entries)`` means the cursor is not currently walking the
    list; walking back stores the live position so forward can return to it.
    """

    capacity: int = 100
    entries: list[CursorPosition] = field(default_factory=list)
    index: int = 0

    def record(self, position: CursorPosition) -> None:
        """Remember ``position`` as the origin of a new jump."""

        del self.entries[self.index :]
        if not self.entries or self.entries[-1] != position:
            self.entries.append(position)
        if len(self.entries) > self.capacity:
            del self.entries[: len(self.entries) - self.capacity]
        self.index = len(self.entries)

    def back(self, current: CursorPosition) -> Optional[CursorPosition]:
        if self.index == 0:
            return None
        if self.index >= len(self.entries):
            if self.entries[-1] != current:
                self.entries.append(current)
            self.index = len(self.entries) - 1
            if self.index == 0:
                return None
        self.index -= 1
        return self.entries[self.index]

    def forward(self) -> Optional[CursorPosition]:
        if self.index >= len(self.entries) - 1:
            return None
        self.index += 1
        return self.entries[self.index]

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["JumpList"]
