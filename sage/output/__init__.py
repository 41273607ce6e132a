"""Terminal output for the sage CLI: ANSI styles, status lines, a spinner.

Styling follows the NO_COLOR / FORCE_COLOR conventions and is otherwise
only applied when the target stream is a terminal.
"""

import itertools
import os
import re
import sys
import threading
import time


STYLES = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'dim': '\033[2m',
    'red': '\033[31m',
    'green': '\033[32m',
    'yellow': '\033[33m',
    'blue': '\033[34m',
    'magenta': '\033[35m',
    'cyan': '\033[36m',
}

CLEAR_LINE = '\r\033[K'


def _stream_supports_color(stream) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def _can_encode(symbol: str, stream) -> bool:
    try:
        symbol.encode(getattr(stream, 'encoding', None) or 'utf-8')
    except (UnicodeEncodeError, LookupError):
        return False
    return True


COLORS_ENABLED = _stream_supports_color(sys.stdout)
STDERR_COLORS_ENABLED = _stream_supports_color(sys.stderr)

CHECK = '✓' if _can_encode('✓', sys.stdout) else '[OK]'


def style(text: str, *names: str, enabled: bool | None = None) -> str:
    """Wrap text in the named STYLES. ``enabled`` defaults to stdout's setting."""
    if enabled is None:
        enabled = COLORS_ENABLED
    if not enabled or not names:
        return text
    return ''.join(STYLES[name] for name in names) + text + STYLES['reset']


def dim(text: str) -> str:
    return style(text, 'dim')


def bold(text: str) -> str:
    return style(text, 'bold')


def info(text: str) -> str:
    return style(text, 'blue')


def highlight(text: str) -> str:
    return style(text, 'cyan')


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------

def print_success(message: str) -> None:
    print(f"{style(CHECK, 'green')} {message}")


def print_error(message: str) -> None:
    label = style('Error:', 'bold', 'red', enabled=STDERR_COLORS_ENABLED)
    print(f"{label} {message}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(style(message, 'yellow'))


def print_info(message: str) -> None:
    print(info(message))


# ---------------------------------------------------------------------------
# Commit messages
# ---------------------------------------------------------------------------

COMMIT_TYPE_STYLES = {
    'feat': 'green',
    'perf': 'green',
    'fix': 'red',
    'refactor': 'yellow',
    'test': 'magenta',
    'docs': 'cyan',
    'ci': 'cyan',
    'build': 'cyan',
    'chore': 'dim',
    'style': 'dim',
}

# type, optional (scope), optional breaking-change bang, colon
COMMIT_PREFIX_RE = re.compile(r'^(\w+)(\([^)]*\))?(!?:)')


def colorize_commit_type(message: str) -> str:
    """Color the conventional commit prefix (``feat(api):``) of a message."""
    match = COMMIT_PREFIX_RE.match(message)
    if not COLORS_ENABLED or not match:
        return message

    name = COMMIT_TYPE_STYLES.get(match.group(1))
    if name is None:
        return message
    prefix = match.group(0)
    return style(prefix, 'bold', name) + message[len(prefix):]


# ---------------------------------------------------------------------------
# Spinner
# ---------------------------------------------------------------------------

class Spinner:
    """Spinner plus elapsed seconds on one terminal line, used as a context manager.

    Draws nothing when the stream is not a terminal, so piped output stays clean.
    """

    FRAMES = '⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏'
    ASCII_FRAMES = '-\\|/'
    INTERVAL = 0.1

    def __init__(self, message: str = "", stream=None):
        self.message = message
        self._stream = stream
        self._thread = None
        self._stop = threading.Event()

    @property
    def stream(self):
        # Resolved late so a replaced sys.stdout is honored
        return self._stream or sys.stdout

    def _active(self) -> bool:
        isatty = getattr(self.stream, 'isatty', None)
        return bool(isatty and isatty())

    def _run(self):
        stream = self.stream
        frames = self.FRAMES if _can_encode(self.FRAMES, stream) else self.ASCII_FRAMES
        started = time.monotonic()
        for frame in itertools.cycle(frames):
            if self._stop.is_set():
                break
            elapsed = time.monotonic() - started
            stream.write(f"{CLEAR_LINE}{info(frame)} {self.message} {dim(f'{elapsed:.0f}s')}")
            stream.flush()
            self._stop.wait(self.INTERVAL)

    def __enter__(self):
        if self._active():
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *exc_info):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
            self.stream.write(CLEAR_LINE)
            self.stream.flush()
        return False
