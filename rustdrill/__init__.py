"""Run, verify, watch and grade small Rust exercises listed in info.toml."""

__version__ = "5.5.1"