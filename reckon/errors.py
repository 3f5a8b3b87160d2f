from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass(frozen=True)
class ErrorInfo:
    """Location-anchored description of a fatal script error.

    `offset` is the absolute source offset of the offending text and
    `length` the number of characters to highlight from there.
    """
    offset: int
    message: str
    length: int = 1

    def context(self, source: str) -> List[Tuple[int, str, int, int]]:
        """Return the five-line window around the error.

        Each row is `(line_number, text, highlight_start, highlight_end)`;
        only the offending line has a non-empty highlight. Line numbers are
        1-based.
        """
        lines = source.split('\n')
        offset = max(0, min(self.offset, len(source)))
        line = source.count('\n', 0, offset)
        column = offset - (source.rfind('\n', 0, offset) + 1)
        rows = []
        for l in range(line - 2, line + 3):
            if l < 0 or l >= len(lines):
                continue
            if l == line:
                end = min(len(lines[l]), column + max(self.length, 0))
                rows.append((l + 1, lines[l], column, end))
            else:
                rows.append((l + 1, lines[l], 0, 0))
        return rows

    def format(self, source: str) -> str:
        """Plain-text rendering with a caret line under the offending span."""
        rows = self.context(source)
        error_line = source.count('\n', 0, max(0, min(self.offset, len(source)))) + 1
        width = len(str(rows[-1][0])) if rows else 1
        out = []
        for number, text, start, end in rows:
            if number != error_line:
                out.append(f"  {number:>{width}} | {text}")
                continue
            out.append(f"> {number:>{width}} | {text}")
            out.append(f"  {' ' * width} | {' ' * start}{'^' * max(end - start, 1)}")
        out.append(f"Error: {self.message}")
        return '\n'.join(out)


class ReckonError(Exception):
    """Exception type used to propagate fatal script errors."""
    def __init__(self, err: ErrorInfo):
        super().__init__(f"ReckonError: {err.message} (at offset {err.offset})")
        self.err = err


class InputRequired(Exception):
    """Raised by the `input` built-in when no value has been supplied yet."""
    def __init__(self, prompt: str = ''):
        super().__init__('input')
        self.prompt = prompt


def fail(offset: int, message: str, length: int = 1):
    raise ReckonError(ErrorInfo(offset, message, length))


class ReturnSignal(Exception):
    """Returned by a block when a `return` statement ends it early."""
    def __init__(self, value: Any):
        super().__init__('return')
        self.value = value


class BreakSignal(Exception):
    """Returned by a block when a `break` statement ends it early."""
    def __init__(self):
        super().__init__('break')
