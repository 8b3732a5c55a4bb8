import argparse
from dataclasses import dataclass


@dataclass
class TripConfig:
    """Configuration for GPS log processing and the nmeatrip CLI."""

    encoding: str = "utf-8"
    log_level: str = "WARNING"
    metrics: bool = False
    strict: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TripConfig":
        return cls(
            encoding=args.encoding,
            log_level=args.log_level,
            metrics=args.metrics,
            strict=args.strict,
        )
