"""Pre-compression of text assets"""

import gzip
import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ..api.exceptions import CompressionError
from ..constants import GZIP_LEVEL, GZIP_SUFFIX, LOW_DISK_SPACE_THRESHOLD
from ..models.result import CompressResult, OperationStatus
from ..utils.file_utils import (
    TempFileTracker,
    format_size,
    get_free_space,
    safe_remove,
    scan_directory,
)


class Compressor:
    """Writes ``<file>.gz`` siblings for matching files in a build directory

    Originals are kept. A ``.gz`` sibling shipped by the build is reused as
    the compressed variant. It is uploaded like an intermediate but only
    files created here are intermediates that get removed.
    """

    def __init__(self, extensions: Iterable[str], level: int = GZIP_LEVEL):
        self.extensions = [e.lstrip('.').lower() for e in extensions]
        self.level = level
        self.logger = logging.getLogger(self.__class__.__name__)

    def compress(self, build_dir: Path, tracker: Optional[TempFileTracker] = None) -> CompressResult:
        """
        Compress matching files under ``build_dir``

        Args:
            build_dir: Build output directory
            tracker: Receives every created intermediate for scoped cleanup

        Returns:
            CompressResult listing created intermediates, reused siblings
            and failures
        """
        result = CompressResult()
        build_dir = Path(build_dir)

        self._check_free_space(build_dir, result)

        if not self.extensions:
            result.message = "No extensions configured for compression"
            result.complete(OperationStatus.SUCCESS)
            return result

        candidates = [
            path for path in scan_directory(build_dir, extensions=self.extensions)
            if not path.name.endswith(GZIP_SUFFIX)
        ]
        self.logger.info(f"Compressing {len(candidates)} file(s) with gzip -{self.level}")

        for source in candidates:
            target = source.with_name(source.name + GZIP_SUFFIX)
            if target.exists():
                self.logger.debug(f"Reusing shipped {target.name}")
                result.reused.append(target)
                continue

            try:
                self._compress_file(source, target)
            except CompressionError as e:
                self.logger.warning(str(e))
                result.failed.append(source)
                result.add_error(e.error_code, str(e), file=str(source))
                continue

            if tracker is not None:
                tracker.track(target)
            result.compressed.append(target)
            result.original_bytes += source.stat().st_size
            result.compressed_bytes += target.stat().st_size

        status = OperationStatus.PARTIAL if result.failed else OperationStatus.SUCCESS
        result.message = f"Compressed {result.compressed_count} file(s)"
        if result.failed:
            result.message += f", {result.failed_count} failed"
        result.complete(status)
        return result

    def _compress_file(self, source: Path, target: Path) -> None:
        try:
            with open(source, 'rb') as f_in:
                with gzip.open(target, 'wb', compresslevel=self.level) as f_out:
                    shutil.copyfileobj(f_in, f_out)
        except OSError as e:
            if target.exists():
                safe_remove(target)
            raise CompressionError(str(source), str(e)) from e

    def _check_free_space(self, build_dir: Path, result: CompressResult) -> None:
        free = get_free_space(build_dir)
        if free is not None and free < LOW_DISK_SPACE_THRESHOLD:
            message = (
                f"Low disk space ({format_size(free)} free), "
                f"compression may fail"
            )
            self.logger.warning(message)
            result.add_warning(message)
