"""Signed archive download."""

from ew_signer.transfer.fetcher import ResultFetcher, derive_output_path

__all__ = ["ResultFetcher", "derive_output_path"]
