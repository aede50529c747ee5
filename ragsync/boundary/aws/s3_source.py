"""
S3 source corpus adapters.

Lists the leaf objects under a root prefix and reads their content as text.
boto3 calls are blocking and run in worker threads.

Dependencies: boto3
System role: Source lister and content reader for the sync pipeline
"""

import asyncio
import logging
import posixpath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ragsync.core.document_processing.models import SourceFile
from ragsync.core.exceptions import SourceError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"404", "NoSuchKey"}


def _normalize_prefix(root: str) -> str:
    root = root.strip().lstrip("/")
    if root and not root.endswith("/"):
        root += "/"
    return root


class S3SourceLister:
    """Enumerate source documents under an S3 prefix."""

    def __init__(
        self,
        bucket: str,
        region: str = "eu-central-1",
        ignored_file_names: list[str] | None = None,
        client=None,
    ) -> None:
        """
        Initialize S3 lister.

        Args:
            bucket: S3 bucket name
            region: AWS region for S3 bucket
            ignored_file_names: Object names never reported (bookkeeping files)
            client: Optional preconfigured boto3 S3 client
        """
        self._bucket = bucket
        self._ignored = set(ignored_file_names or [])
        self._s3_client = client or boto3.client("s3", region_name=region)

    def _list_sync(self, root: str) -> list[SourceFile]:
        prefix = _normalize_prefix(root)
        paginator = self._s3_client.get_paginator("list_objects_v2")
        files: list[SourceFile] = []

        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                # Zero-byte folder markers
                if key.endswith("/"):
                    continue
                name = posixpath.basename(key)
                if name in self._ignored:
                    continue
                relative_dir = posixpath.dirname(key[len(prefix):])
                files.append(
                    SourceFile(
                        id=key,
                        name=name,
                        path=relative_dir or None,
                        modified_at=obj.get("LastModified"),
                    )
                )

        return files

    async def list_files(self, root: str) -> list[SourceFile]:
        """
        Recursively list leaf objects under root.

        Args:
            root: Root prefix of the corpus

        Returns:
            list[SourceFile]: Files in listing order

        Raises:
            SourceError: If listing fails
        """
        try:
            files = await asyncio.to_thread(self._list_sync, root)
        except ClientError as e:
            raise SourceError(
                f"Failed to list s3://{self._bucket}/{root}: {e}",
                location=f"s3://{self._bucket}/{root}",
            ) from e
        logger.info(f"{__name__}:list_files - Found {len(files)} files under {root}")
        return files

    async def list_ids(self, root: str) -> list[str]:
        """List only the identifiers of the files under root."""
        return [source_file.id for source_file in await self.list_files(root)]


class S3ContentReader:
    """Read S3 objects as UTF-8 text."""

    def __init__(self, bucket: str, region: str = "eu-central-1", client=None) -> None:
        """
        Initialize S3 reader.

        Args:
            bucket: S3 bucket name
            region: AWS region for S3 bucket
            client: Optional preconfigured boto3 S3 client
        """
        self._bucket = bucket
        self._s3_client = client or boto3.client("s3", region_name=region)

    def _read_sync(self, key: str) -> str:
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in MISSING_OBJECT_CODES:
                logger.debug(f"{__name__}:read_content - Object not found: {key}")
            else:
                logger.error(f"{__name__}:read_content - Failed to read {key}: {e}")
            return ""
        except BotoCoreError as e:
            # Connection, timeout and truncated-body failures
            logger.error(f"{__name__}:read_content - Transport error reading {key}: {e}")
            return ""

        if isinstance(body, bytes):
            return body.decode("utf-8", errors="replace")
        return str(body)

    async def read_content(self, key: str) -> str:
        """
        Read an object's content.

        Args:
            key: Object key (source id)

        Returns:
            str: Decoded content, or "" when the object is missing or unreadable
        """
        return await asyncio.to_thread(self._read_sync, key)

    async def read_contents(self, keys: list[str]) -> list[tuple[str, str]]:
        """
        Read several objects.

        Args:
            keys: Object keys

        Returns:
            list[tuple[str, str]]: (key, content) pairs in input order
        """
        contents = await asyncio.gather(*(self.read_content(key) for key in keys))
        return list(zip(keys, contents))
