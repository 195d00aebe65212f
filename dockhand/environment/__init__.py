"""Environment files: parse, merge with precedence, persist owner-only."""

from dockhand.environment.merge import (
    ENV_FILENAME,
    backup_env_file,
    discard_backup,
    env_value,
    load_defaults,
    merge,
    parse_env,
    parse_env_lines,
    read_env_file,
    read_env_lines,
    render_env,
    restore_env_file,
    write_env_file,
    write_private_file,
)

__all__ = [
    "ENV_FILENAME",
    "backup_env_file",
    "discard_backup",
    "env_value",
    "load_defaults",
    "merge",
    "parse_env",
    "parse_env_lines",
    "read_env_file",
    "read_env_lines",
    "render_env",
    "restore_env_file",
    "write_env_file",
    "write_private_file",
]
