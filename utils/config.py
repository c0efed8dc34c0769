from __future__ import annotations
import dataclasses
from typing import Dict, Optional

@dataclasses.dataclass
class Telemetry:
    endpoint: Optional[str] = None
    project: Optional[str] = None
    auth: str = "auto"
    batch: bool = True
    auto_instrument: bool = True
    headers: Dict[str, str] = dataclasses.field(default_factory=dict)

@dataclasses.dataclass
class Evaluation:
    emit_scores: bool = True

@dataclasses.dataclass
class Config:
    telemetry: Telemetry = dataclasses.field(default_factory=Telemetry)
    evaluation: Evaluation = dataclasses.field(default_factory=Evaluation)
