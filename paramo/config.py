from dataclasses import dataclass
from typing import Optional


@dataclass
class AmalgamationConfig:
    """Configuration for stacking posterior samples of character maps."""

    resolution: Optional[int] = None
    """Discretize raw maps per sample before stacking; None expects discretized input."""

    label_delimiter: str = ""
    """Delimiter placed between components when composite labels are rendered."""

    merge_output: bool = False
    """Run-length merge every amalgamated map before returning it."""

    max_workers: int = 1
    """Worker processes across sample indices; 1 runs serially."""

    show_progress: bool = False
    tolerance: float = 1e-9
    logger_name: str = "paramo.amalgamation"
