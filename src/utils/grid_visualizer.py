from typing import List

from ..engine.blanks import BlankPattern
from ..engine.grid import Grid
from ..game.models import GameState


def render_grid(grid: Grid) -> str:
    """Render the grid with row and column indices; empty cells show as '.'."""
    lines = ['   ' + ' '.join(str(col) for col in range(grid.cols))]
    for r, row in enumerate(grid.cells):
        marker = '>' if r == grid.rows - 1 else ' '
        lines.append(f"{r}{marker} " + ' '.join(cell or '.' for cell in row))
    return '\n'.join(lines)


def render_blanks(blanks: BlankPattern) -> str:
    """Render the blank slots, e.g. '[C] [A] [ ] [ ] [ ]'."""
    return ' '.join(f"[{slot or ' '}]" for slot in blanks.slots)


def render_words(words: List[str], per_line: int = 8) -> str:
    """Render a word list in uppercase columns."""
    if not words:
        return "No possible words available"
    upper = [w.upper() for w in words]
    return '\n'.join(
        '  '.join(upper[i:i + per_line])
        for i in range(0, len(upper), per_line)
    )


def render_state(state: GameState) -> str:
    """Render a full round: grid, blanks, budgets, possible words and message."""
    count = state.feasibility.count
    lines = [
        render_grid(state.grid),
        "",
        render_blanks(state.blanks),
        "",
        f"Shifts: {state.shifts_remaining}  Deletes: {state.deletes_remaining}  "
        f"{count} possible {'word' if count == 1 else 'words'}",
    ]

    if state.time_remaining is not None:
        lines.append(f"Time remaining: {state.time_remaining:.0f}s")

    if state.message:
        lines.append("")
        lines.append(state.message)

    return '\n'.join(lines)
