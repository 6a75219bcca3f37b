"""
Event type produced by the step reconstructor.

A TelemetryEvent is one resolved step of a job: a name, an outcome and a
concrete time interval. Both the Prometheus and the timeline serializers
consume lists of these.
"""

from dataclasses import dataclass
from datetime import datetime

from workflow_telemetry.utils import epoch_millis, epoch_seconds


@dataclass(frozen=True)
class TelemetryEvent:
    """A resolved step interval.

    `number` is the originating step number. After an attach/background merge
    it is the number of the attach step, and is only used for display rules.
    `end_time` may precede `start_time`; consumers decide how to render that.
    """

    number: int
    name: str
    conclusion: str
    start_time: datetime
    end_time: datetime

    @property
    def start_seconds(self) -> float:
        return epoch_seconds(self.start_time)

    @property
    def end_seconds(self) -> float:
        return epoch_seconds(self.end_time)

    @property
    def duration_seconds(self) -> float:
        """Elapsed seconds, negative if the interval is inverted."""
        return (self.end_time - self.start_time).total_seconds()

    @property
    def start_ms(self) -> int:
        return epoch_millis(self.start_time)

    @property
    def end_ms(self) -> int:
        return epoch_millis(self.end_time)
