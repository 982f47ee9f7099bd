"""
Stamp grid layout shared by every card surface.

Stamps are laid out on two rows: the top row takes ceil(n / 2), the bottom
row the rest. The last stamp in the sequence is the reward stamp.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class StampSlot:
    """One stamp cell in the grid."""
    index: int
    row: int  # 1 or 2
    position: int  # 0-based position within its row
    is_filled: bool
    is_reward: bool


@dataclass(frozen=True)
class StampLayout:
    """Complete two-row layout for a stamp card."""
    total: int
    filled: int
    row1_count: int
    row2_count: int
    stamps: List[StampSlot] = field(default_factory=list)

    def row(self, number: int) -> List[StampSlot]:
        """Stamps in the given row (1 or 2), index ascending."""
        return [stamp for stamp in self.stamps if stamp.row == number]

    @property
    def reward(self) -> StampSlot | None:
        return self.stamps[-1] if self.stamps else None

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "filled": self.filled,
            "row1_count": self.row1_count,
            "row2_count": self.row2_count,
            "stamps": [
                {
                    "index": s.index,
                    "row": s.row,
                    "position": s.position,
                    "is_filled": s.is_filled,
                    "is_reward": s.is_reward,
                }
                for s in self.stamps
            ],
        }


def clamp_filled(filled: int, total: int) -> int:
    """Clamp a filled-stamp count into [0, total]."""
    return max(0, min(filled, total))


def get_row_distribution(total: int) -> tuple[int, int]:
    """Split stamps over two rows, larger row on top."""
    total = max(0, total)
    top_row = (total + 1) // 2  # Ceiling division
    return top_row, total - top_row


def layout(total: int, filled: int = 0) -> StampLayout:
    """
    Map a stamp count and a filled count onto the two-row grid.

    Args:
        total: Number of stamps on the card
        filled: Number of stamps already collected (clamped into [0, total])

    Returns:
        StampLayout with one StampSlot per stamp
    """
    total = max(0, total)
    filled = clamp_filled(filled, total)
    row1_count, row2_count = get_row_distribution(total)

    stamps = []
    for index in range(total):
        in_first_row = index < row1_count
        stamps.append(StampSlot(
            index=index,
            row=1 if in_first_row else 2,
            position=index if in_first_row else index - row1_count,
            is_filled=index < filled,
            is_reward=index == total - 1,
        ))

    return StampLayout(
        total=total,
        filled=filled,
        row1_count=row1_count,
        row2_count=row2_count,
        stamps=stamps,
    )


def icon_for(slot: StampSlot, stamp_icon: str, reward_icon: str) -> str | None:
    """Icon painted inside a stamp. Empty stamps carry no icon."""
    if not slot.is_filled:
        return None
    return reward_icon if slot.is_reward else stamp_icon
