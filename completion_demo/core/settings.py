from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class DemoSettings(BaseModel):
    """
    Settings for one demonstrator run.

    Defaults reproduce the classic demo: five computations, each sleeping
    somewhere in [500, 4000) milliseconds.
    """
    model_config = ConfigDict(frozen=True)

    count: int = Field(default=5, ge=0)
    min_delay_ms: int = Field(default=500, ge=0)
    max_delay_ms: int = 4000
    seed: Optional[int] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @model_validator(mode="after")
    def check_delay_bounds(self) -> "DemoSettings":
        if self.max_delay_ms <= self.min_delay_ms:
            raise ValueError(
                f"max_delay_ms ({self.max_delay_ms}) must be greater than min_delay_ms ({self.min_delay_ms})"
            )
        return self

    @computed_field
    def identifiers(self) -> List[int]:
        return list(range(1, self.count + 1))
