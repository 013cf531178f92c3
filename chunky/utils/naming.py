"""Chunk file naming. Deterministic: the same stem, index and extension always give the same name."""

import os


def format_chunk_name(file_stem: str, index: int, file_ext: str, width: int = 4) -> str:
    """Return e.g. chunk_0001.txt for ("chunk", 1, ".txt", 4)."""
    return f"{file_stem}_{index:0{width}d}{file_ext}"


def chunk_path(out_dir: str, file_stem: str, index: int, file_ext: str, width: int = 4) -> str:
    """Join the output directory and the formatted chunk file name."""
    return os.path.join(out_dir, format_chunk_name(file_stem, index, file_ext, width))
