"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    IN_PROGRESS = "in_progress"


class DeployStage(Enum):
    """Stages of a deploy run"""
    CONFIGURING = "configuring"
    NAMING = "naming"
    CONFLICT_CHECK = "conflict_check"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    VERIFYING = "verifying"
    LISTING = "listing"
    DONE = "done"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class RollbackStage(Enum):
    """Stages of a rollback run"""
    CONFIGURING = "configuring"
    LISTING = "listing"
    SELECTING_RELEASE = "selecting_release"
    VERIFYING_RELEASE_EXISTS = "verifying_release_exists"
    CONFIRMING_PRODUCTION_INTENT = "confirming_production_intent"
    EMITTING_REPOINT_INSTRUCTIONS = "emitting_repoint_instructions"
    DONE = "done"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass
class ErrorDetail:
    """Detailed error information"""

    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class Result:
    """Base result class"""

    status: OperationStatus = OperationStatus.IN_PROGRESS
    message: str = ""
    errors: List[ErrorDetail] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None

    @property
    def is_success(self) -> bool:
        """Check if operation was successful"""
        return self.status == OperationStatus.SUCCESS

    @property
    def is_failed(self) -> bool:
        """Check if operation failed"""
        return self.status == OperationStatus.FAILED

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def add_error(self, code: str, message: str, **context) -> None:
        """Add an error"""
        self.errors.append(ErrorDetail(code=code, message=message, context=context))

    def add_warning(self, message: str) -> None:
        """Add a warning"""
        self.warnings.append(message)

    def complete(self, status: Optional[OperationStatus] = None) -> None:
        """Mark operation as complete"""
        self.end_time = datetime.utcnow()
        if status:
            self.status = status


@dataclass
class CompressResult(Result):
    """Result of compressing a build directory"""

    compressed: List[Path] = field(default_factory=list)
    reused: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    original_bytes: int = 0
    compressed_bytes: int = 0

    @property
    def compressed_count(self) -> int:
        return len(self.compressed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def ratio(self) -> Optional[float]:
        """Compressed size as a fraction of the original size"""
        if not self.original_bytes:
            return None
        return self.compressed_bytes / self.original_bytes


@dataclass
class SyncReport:
    """Outcome of a bulk directory synchronisation"""

    uploaded: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    bytes_transferred: int = 0

    @property
    def keys(self) -> List[str]:
        """Every remote key that now mirrors a local file"""
        return self.uploaded + self.unchanged

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uploaded": len(self.uploaded),
            "unchanged": len(self.unchanged),
            "deleted": len(self.deleted),
            "bytes_transferred": self.bytes_transferred,
        }


@dataclass
class UploadResult(Result):
    """Result of the upload passes for one release"""

    bucket: Optional[str] = None
    prefix: str = ""
    sync: SyncReport = field(default_factory=SyncReport)
    metadata_patched: int = 0
    compressed_assets: int = 0
    html_files: int = 0
    compressed_html: int = 0
    intermediates_removed: int = 0
    verified: bool = False
    sync_log: Optional[Path] = None

    @property
    def total_uploaded(self) -> int:
        return (len(self.sync.uploaded) + self.compressed_assets
                + self.html_files + self.compressed_html)


@dataclass
class ReleaseInfo:
    """A release found under the releases prefix"""

    version: str
    prefix: str

    @property
    def rewrite_path(self) -> str:
        """Path used as the load balancer path prefix rewrite"""
        return "/" + self.prefix.rstrip("/")


@dataclass
class RepointInstructions:
    """Operator instructions for moving traffic to a release"""

    version: str
    location: str
    rewrite_path: Optional[str] = None
    console_steps: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    cache_invalidation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "location": self.location,
            "rewrite_path": self.rewrite_path,
            "console_steps": self.console_steps,
            "commands": self.commands,
            "cache_invalidation": self.cache_invalidation,
        }


@dataclass
class DeployResult(Result):
    """Result of a deploy run"""

    stage: DeployStage = DeployStage.CONFIGURING
    version: Optional[str] = None
    bucket: Optional[str] = None
    prefix: str = ""
    compression: Optional[CompressResult] = None
    upload: Optional[UploadResult] = None
    releases: List[ReleaseInfo] = field(default_factory=list)
    instructions: Optional[RepointInstructions] = None
    failed_stage: Optional[DeployStage] = None
    exception: Optional[Exception] = None

    @property
    def location(self) -> str:
        return f"{self.bucket}/{self.prefix}"

    def abort(self, error: Exception) -> None:
        """Record a fatal error at the current stage"""
        code = getattr(error, "error_code", None) or "SD000"
        self.add_error(code, str(error), stage=self.stage.value)
        self.message = str(error)
        self.exception = error
        self.failed_stage = self.stage
        self.stage = DeployStage.ABORTED
        self.complete(OperationStatus.FAILED)

    def cancel(self, message: str = "Deployment cancelled") -> None:
        self.message = message
        self.stage = DeployStage.CANCELLED
        self.complete(OperationStatus.CANCELLED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "status": self.status.value,
            "stage": self.stage.value,
            "message": self.message,
            "version": self.version,
            "bucket": self.bucket,
            "prefix": self.prefix,
            "compressed": self.compression.compressed_count if self.compression else 0,
            "uploaded": self.upload.total_uploaded if self.upload else 0,
            "sync": self.upload.sync.to_dict() if self.upload else None,
            "releases": [r.version for r in self.releases],
            "instructions": self.instructions.to_dict() if self.instructions else None,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
            "duration": self.duration
        }


@dataclass
class RollbackResult(Result):
    """Result of a rollback run"""

    stage: RollbackStage = RollbackStage.CONFIGURING
    version: Optional[str] = None
    releases: List[ReleaseInfo] = field(default_factory=list)
    release: Optional[ReleaseInfo] = None
    object_count: int = 0
    has_index: bool = False
    instructions: Optional[RepointInstructions] = None
    failed_stage: Optional[RollbackStage] = None
    exception: Optional[Exception] = None

    def abort(self, error: Exception) -> None:
        """Record a fatal error at the current stage"""
        code = getattr(error, "error_code", None) or "SD000"
        self.add_error(code, str(error), stage=self.stage.value)
        self.message = str(error)
        self.exception = error
        self.failed_stage = self.stage
        self.stage = RollbackStage.ABORTED
        self.complete(OperationStatus.FAILED)

    def cancel(self, message: str = "Rollback cancelled") -> None:
        self.message = message
        self.stage = RollbackStage.CANCELLED
        self.complete(OperationStatus.CANCELLED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "status": self.status.value,
            "stage": self.stage.value,
            "message": self.message,
            "version": self.version,
            "object_count": self.object_count,
            "has_index": self.has_index,
            "instructions": self.instructions.to_dict() if self.instructions else None,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
            "duration": self.duration
        }
