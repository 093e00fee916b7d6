"""
Output Collapser for Term Relay

Interprets backspace and carriage-return control characters in captured
command output, producing the text a terminal screen would show.
"""

from dataclasses import dataclass
from typing import List, Union

BACKSPACE = '\b'
CARRIAGE_RETURN = '\r'
NEWLINE = '\n'


@dataclass(frozen=True)
class CollapsedOutput:
    """Collapsed text and the largest length seen before a carriage return"""
    text: str
    high_water_mark: int = 0

    def __len__(self) -> int:
        return len(self.text)


class OutputCollapser:
    """Collapses backspace/carriage-return redraws into their visible text.

    A carriage return moves the cursor back to the start of the current line.
    Text written afterwards overwrites that line in place, so a shorter redraw
    leaves the tail of the longer line visible, as on a real terminal: the
    output never shrinks because of a redraw. The length of the output right
    before each carriage return is tracked as the high-water mark.

    A backspace deletes the character before the cursor when that character
    was appended after the line's last redraw; inside a redrawn region it only
    moves the cursor left. At the start of an empty line it removes the line
    break before it. ``"\\r\\n"`` is treated as a plain line ending.
    """

    def collapse(self, data: Union[str, bytes, bytearray]) -> CollapsedOutput:
        """Collapse control characters in ``data``"""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode('utf-8', errors='replace')

        if CARRIAGE_RETURN not in data and BACKSPACE not in data:
            return CollapsedOutput(text=data)

        lines: List[List[str]] = [[]]
        # Per line: how many characters were already there at its last redraw
        floors: List[int] = [0]
        column = 0
        length = 0
        high_water_mark = 0

        for index, char in enumerate(data):
            line = lines[-1]
            if char == CARRIAGE_RETURN:
                if data[index + 1:index + 2] == NEWLINE:
                    continue
                high_water_mark = max(high_water_mark, length)
                floors[-1] = len(line)
                column = 0
            elif char == NEWLINE:
                lines.append([])
                floors.append(0)
                column = 0
                length += 1
            elif char == BACKSPACE:
                if column == len(line) and column > floors[-1]:
                    line.pop()
                    column -= 1
                    length -= 1
                elif column > 0:
                    column -= 1
                elif not line and len(lines) > 1:
                    lines.pop()
                    floors.pop()
                    column = len(lines[-1])
                    length -= 1
            elif column < len(line):
                line[column] = char
                column += 1
            else:
                line.append(char)
                column += 1
                length += 1

        return CollapsedOutput(
            text=NEWLINE.join(''.join(line) for line in lines),
            high_water_mark=high_water_mark
        )


_default_collapser = OutputCollapser()


def collapse_output(data: Union[str, bytes, bytearray]) -> str:
    """Return the terminal-visible text of ``data``"""
    return _default_collapser.collapse(data).text
