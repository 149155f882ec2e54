"""Extension archive creation."""

from ew_signer.packaging.archive import PackageResult, archive_path_for, package_extension

__all__ = ["PackageResult", "archive_path_for", "package_extension"]
