"""LTE console logger.

Parses the tables an LTE base-station shell prints (UE metrics and friends)
out of noisy console output and appends them to CSV files, one per table
kind.

Example:
    from lteconsole import RunConfig, run

    result = run(RunConfig.from_settings(["enb.log"]))
    print(result.unwrap().total_rows_written)
"""

__version__ = "0.1.0"

from lteconsole.core.models.base import Result
from lteconsole.ingest.runner import RunConfig, RunResult, run

__all__ = [
    "Result",
    "RunConfig",
    "RunResult",
    "__version__",
    "run",
]
