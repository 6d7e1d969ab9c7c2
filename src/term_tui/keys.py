"""
Integer key codes delivered by backends.

Control characters arrive as their ASCII value; named keys use the
curses numbering that blessed shares.
"""

KEY_CTRLD = 4
KEY_CTRLH = 8
KEY_TAB = 9
KEY_ENTR = 10
KEY_CTRLC = 3
KEY_CTRLZ = 26
KEY_ESC = 27
KEY_DEL = 127

KEY_DOWN = 258
KEY_UP = 259
KEY_LEFT = 260
KEY_RIGHT = 261
KEY_HOME = 262
KEY_BACKSPACE = 263
KEY_DC = 330
KEY_ENTER = 343
KEY_END = 360

# Keys the session gets first refusal on.
GLOBAL_KEYS = frozenset({KEY_CTRLC, KEY_CTRLZ, KEY_ESC})

BACKSPACE_KEYS = frozenset({KEY_BACKSPACE, KEY_DEL, KEY_CTRLH})
DELETE_KEYS = frozenset({KEY_DC, KEY_CTRLD})
SUBMIT_KEYS = frozenset({KEY_ENTR, KEY_ENTER, 13})


def is_printable(key) -> bool:
    """Return True for key codes of printable ASCII characters."""
    return isinstance(key, int) and 32 <= key < 127
