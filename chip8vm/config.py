"""Driver configuration.

Defaults live in :class:`DriverConfig`; a YAML file and ``key=value``
command line overrides are merged on top with OmegaConf.
"""

import dataclasses
from typing import List, Optional

from omegaconf import OmegaConf


@dataclasses.dataclass
class DriverConfig:
    rom: Optional[str] = None
    scale: int = 8
    instructions_per_frame: int = 10  # 10 x 60 FPS = 600Hz CPU
    fps: int = 60
    color_scheme: str = "classic"
    seed: int = 0
    trace: bool = False
    log_level: str = "INFO"
    max_steps: Optional[int] = None  # headless runs only
    progress: bool = True


def load_config(path: Optional[str] = None, overrides: Optional[List[str]] = None) -> DriverConfig:
    """Build a validated DriverConfig from defaults, an optional YAML file and dotlist overrides."""
    cfg = OmegaConf.structured(DriverConfig)
    if path is not None:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    config = OmegaConf.to_object(cfg)
    if config.instructions_per_frame < 1:
        raise ValueError(f"instructions_per_frame must be positive, got {config.instructions_per_frame}")
    if config.scale < 1:
        raise ValueError(f"scale must be positive, got {config.scale}")
    return config
