from .task_parser import (
    RECOGNIZED_KEYS,
    clean_title,
    derive_status,
    detect_priority,
    extract_tags,
    parse_metadata_line,
    parse_task_line,
    parse_tasks,
)

__all__ = [
    "RECOGNIZED_KEYS",
    "clean_title",
    "derive_status",
    "detect_priority",
    "extract_tags",
    "parse_metadata_line",
    "parse_task_line",
    "parse_tasks",
]
