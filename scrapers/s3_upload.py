"""
S3 upload for downloaded exports.

Usage:
    from scrapers.s3_upload import S3Uploader

    uploader = S3Uploader(bucket="bbm-snowflake-stage", region_name="ap-southeast-2")
    uri = uploader.upload_bytes("atlas_exports/2024-03-04_to_2024-03-10_transactions.csv", body)
    print(uri)  # s3://bbm-snowflake-stage/atlas_exports/...

Credentials come from the boto3 default chain (env vars, ~/.aws, Lambda role).
Pass ``client=`` to reuse an existing client or substitute a fake in tests.
"""
import logging

import boto3

logger = logging.getLogger(__name__)

MIME_CSV = "text/csv"


class S3Uploader:
    def __init__(self, bucket: str, client=None, region_name: str = None):
        self.bucket = bucket
        self.region_name = region_name
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "S3Uploader":
        return cls(bucket=settings.s3_bucket, region_name=settings.aws_region)

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region_name)
        return self._client

    def upload_bytes(self, key: str, body: bytes, content_type: str = MIME_CSV) -> str:
        """Put ``body`` at ``key`` in the bucket. Returns the s3:// URI.

        botocore errors propagate to the caller.
        """
        uri = f"s3://{self.bucket}/{key}"
        logger.info("[S3] Uploading %d bytes to %s", len(body), uri)
        self.client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        logger.info("[S3] Upload complete")
        return uri
