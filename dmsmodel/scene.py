"""Layout and motion of the spinning-ball benchmark scene."""

from __future__ import annotations

from dataclasses import dataclass

NUM_BALLS = 10
GRID_COLUMNS = 4
GRID_ROWS = 5
CAMERA_Z = -15.0


@dataclass
class Ball:
    """One instance of the model: position, rotation angles and speeds (degrees)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0
    drx: float = 0.0
    dry: float = 0.0
    drz: float = 0.0

    def advance(self) -> None:
        """Step the X and Y rotations by one frame, wrapping at 360 degrees."""
        self.rx += self.drx
        self.ry += self.dry
        if self.rx >= 360.0:
            self.rx -= 360.0
        if self.ry >= 360.0:
            self.ry -= 360.0


def ball_grid(count: int = NUM_BALLS) -> list[Ball]:
    """Place ``count`` balls on a 4 by 5 grid, filled row by row."""
    capacity = GRID_COLUMNS * GRID_ROWS
    if not 0 <= count <= capacity:
        raise ValueError(f"ball count must be between 0 and {capacity}, got {count}")
    balls = []
    for index in range(count):
        row, column = divmod(index, GRID_COLUMNS)
        balls.append(
            Ball(
                x=column * 4.0 - 6.0,
                y=row * 4.0 - 8.0,
                z=0.0,
                drx=0.5 + (index & 3) * 0.2,
                dry=0.7 + (index & 1) * 0.2,
                drz=0.0,
            )
        )
    return balls