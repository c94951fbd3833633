from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping


@dataclass(frozen=True)
class SeekConfig:
    """
    Configuration for range streams.

    Attributes:
        block_size: Block cache granularity in bytes; 0 disables buffering (default: 0)
        connect_timeout: Connection timeout in seconds (default: 10.0)
        read_timeout: Read timeout in seconds (default: 30.0)
        retries: Transport-level retries for idempotent requests (default: 3)
        backoff_factor: Exponential backoff factor for retries (default: 0.5)
        headers: Headers copied into every request made for a stream
    """
    block_size: int = 0
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    retries: int = 3
    backoff_factor: float = 0.5
    headers: Dict[str, str] = field(default_factory=lambda: {
        'User-Agent': 'httpseek/0.1',
        'Accept-Encoding': 'identity',
    })

    def __post_init__(self):
        if self.block_size < 0:
            raise ValueError(f"block_size must be non-negative, got {self.block_size}")

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SeekConfig":
        """Build a config from HTTPSEEK_BLOCK_SIZE, HTTPSEEK_TIMEOUT and HTTPSEEK_RETRIES."""
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get("HTTPSEEK_BLOCK_SIZE"):
            kwargs["block_size"] = int(env["HTTPSEEK_BLOCK_SIZE"])
        if env.get("HTTPSEEK_TIMEOUT"):
            kwargs["read_timeout"] = float(env["HTTPSEEK_TIMEOUT"])
        if env.get("HTTPSEEK_RETRIES"):
            kwargs["retries"] = int(env["HTTPSEEK_RETRIES"])
        return cls(**kwargs)
