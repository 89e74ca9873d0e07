from .document import (
    check_range,
    delete_block,
    insert_block,
    replace_block,
    toggle_block,
    unrecognized_lines,
)

__all__ = [
    "check_range",
    "delete_block",
    "insert_block",
    "replace_block",
    "toggle_block",
    "unrecognized_lines",
]
