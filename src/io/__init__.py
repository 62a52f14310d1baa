"""I/O utilities for ranking inputs and result artifacts."""

from src.io.records import load_ranking_input, parse_ranking_input, write_json_atomic

__all__ = ["load_ranking_input", "parse_ranking_input", "write_json_atomic"]
