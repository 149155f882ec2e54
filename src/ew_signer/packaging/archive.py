"""Packaging of an extension folder into an .rbz archive."""

import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ew_signer.core.errors import InvalidInput, PackagingFailed, SignerError
from ew_signer.transfer.fetcher import UNSIGNED_MARKER
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)

ARCHIVE_SUFFIX = ".rbz"


@dataclass
class PackageResult:
    """Outcome of packaging: an archive path or a structured error."""
    archive_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[SignerError] = None
    file_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.archive_path is not None


def validate_source(source_dir: Path) -> Path:
    """Return the source folder or raise InvalidInput."""
    source_dir = Path(source_dir)
    if not source_dir.exists():
        raise InvalidInput(str(source_dir), "does not exist")
    if not source_dir.is_dir():
        raise InvalidInput(str(source_dir), "is not a directory")
    return source_dir


def archive_path_for(source_dir: Path, output: Optional[Path] = None) -> Path:
    """Where the unsigned archive is written, next to the signed output if any."""
    if output is not None:
        output = Path(output)
        return output.parent / f"{output.stem}{UNSIGNED_MARKER}{ARCHIVE_SUFFIX}"

    source_dir = Path(source_dir).resolve()
    return source_dir.parent / f"{source_dir.name}{UNSIGNED_MARKER}{ARCHIVE_SUFFIX}"


def package_extension(source_dir: Path, archive_path: Path) -> PackageResult:
    """
    Zip the contents of ``source_dir`` into ``archive_path``.

    Entries are stored relative to the folder, so the extension loader ends up
    at the archive root. Unreadable files are skipped with a warning.
    """
    try:
        source_dir = validate_source(source_dir)
    except InvalidInput as e:
        return PackageResult(error=e)

    archive_path = Path(archive_path)
    result = PackageResult(archive_path=archive_path)

    if not any(source_dir.glob("*.rb")):
        result.warnings.append(f'No Ruby loader file found at the root of "{source_dir}"')

    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in sorted(source_dir.rglob("*")):
                if path.resolve() == archive_path.resolve():
                    continue
                if path.is_dir():
                    continue
                try:
                    archive.write(path, path.relative_to(source_dir).as_posix())
                    result.file_count += 1
                except FileNotFoundError as e:
                    result.warnings.append(f"Error while preparing the archive: {e}")
    except OSError as e:
        logger.error("Cannot create archive", path=str(archive_path), error=str(e))
        return PackageResult(
            warnings=result.warnings,
            error=PackagingFailed(f'Cannot create "{archive_path}": {e}'),
        )

    for warning in result.warnings:
        logger.warning(warning)

    logger.info(
        f'The extension has been archived in "{archive_path}"',
        files=result.file_count
    )
    return result
