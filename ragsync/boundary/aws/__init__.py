"""
AWS boundary layer.

Exports: S3SourceLister, S3ContentReader
"""

from ragsync.boundary.aws.s3_source import S3ContentReader, S3SourceLister

__all__ = ["S3SourceLister", "S3ContentReader"]
