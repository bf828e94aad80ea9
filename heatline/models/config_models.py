from __future__ import annotations

from dataclasses import dataclass
from datetime import date

"""Config dataclass for the heat validation pipeline.

Built by ``heatline.config.loader.load_config`` from YAML, or constructed
directly with defaults by library callers and tests.
"""

OVERLAP_REJECT = "reject"
OVERLAP_ALLOW = "allow"


@dataclass(frozen=True)
class PipelineConfig:
    """Runtime knobs of the pipeline.

    The unit table and header aliases are static and not configurable here.
    """
    overlap_policy: str = OVERLAP_REJECT  # reject | allow
    production_day_start_hour: int = 8  # 生産日の開始時刻 (08:00)
    default_date: date | None = None  # 日付列が全く無い場合の基準日 (None -> today)
    error_log_dir: str = "./logs"

    @property
    def allow_overlap(self) -> bool:
        return self.overlap_policy == OVERLAP_ALLOW
