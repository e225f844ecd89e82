"""go:generate comment files for go-bindata asset embedding."""

from .comment import (
    build_generate_command_data,
    gen_comment,
    generate_file_name,
    make_generate_command_comment,
    misc_dir_prefix,
    normalize_misc_dir,
    render_generate_file,
)

__all__ = [
    "build_generate_command_data",
    "gen_comment",
    "generate_file_name",
    "make_generate_command_comment",
    "misc_dir_prefix",
    "normalize_misc_dir",
    "render_generate_file",
]
