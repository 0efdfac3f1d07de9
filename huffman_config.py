# filename: huffman_config.py

import os
from dataclasses import dataclass

from huffman_core import DEFAULT_CHUNK_SIZE

DECODERS = ("tree", "table")


@dataclass
class CodecConfig:
    workers: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE
    decoder: str = "tree"

    def __post_init__(self):
        if self.workers < 0:
            raise ValueError(f"workers must be >= 0, got {self.workers}")
        if self.workers == 0:
            self.workers = os.cpu_count() or 1
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.decoder not in DECODERS:
            raise ValueError(f"decoder must be one of {DECODERS}, got {self.decoder!r}")

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """
        Read RUFFMAN_WORKERS, RUFFMAN_CHUNK_SIZE and RUFFMAN_DECODER.

        Keyword overrides that are not None take precedence over the
        environment.
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field, var, convert in (
            ("workers", "RUFFMAN_WORKERS", int),
            ("chunk_size", "RUFFMAN_CHUNK_SIZE", int),
            ("decoder", "RUFFMAN_DECODER", str),
        ):
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            try:
                values[field] = convert(raw)
            except ValueError:
                raise ValueError(f"{var} has invalid value {raw!r}") from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
