"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in the shell.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class TimeoutsSchema(_StrictBase):
    http: float = Field(gt=0)


class HistorySchema(_StrictBase):
    path: str
    max_entries: int = Field(ge=1)


class OperationLogSchema(_StrictBase):
    directory: str
    prefix: str


class DownloadsSchema(_StrictBase):
    directory: str


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    timeouts: TimeoutsSchema
    history: HistorySchema
    oplog: OperationLogSchema
    downloads: DownloadsSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
