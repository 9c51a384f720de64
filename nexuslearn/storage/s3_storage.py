"""AWS S3 storage implementation."""

import boto3
from botocore.exceptions import ClientError, NoCredentialsError
from loguru import logger

from . import StorageProvider

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def _code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3Storage(StorageProvider):
    """S3 (or S3-compatible) bucket; downloads go through presigned URLs."""

    def __init__(
        self,
        bucket_name: str,
        region_name: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        endpoint_url: str | None = None,
    ):
        if not bucket_name:
            raise ValueError("AWS_S3_BUCKET_NAME is required for S3 storage")
        self.bucket_name = bucket_name
        self.s3_client = boto3.client(
            "s3",
            region_name=region_name,
            aws_access_key_id=aws_access_key_id or None,
            aws_secret_access_key=aws_secret_access_key or None,
            endpoint_url=endpoint_url,
        )
        self._check_bucket()

    def _check_bucket(self) -> None:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except NoCredentialsError:
            raise ValueError("No AWS credentials available for S3 storage") from None
        except ClientError as e:
            reason = {"404": "not found", "403": "access denied"}.get(
                _code(e), str(e)
            )
            raise ValueError(f"S3 bucket {self.bucket_name!r}: {reason}") from e
        logger.info(f"Using S3 bucket {self.bucket_name}")

    def _ref(self, object_key: str) -> str:
        return f"s3://{self.bucket_name}/{object_key}"

    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        params = {"Bucket": self.bucket_name, "Key": object_key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            self.s3_client.put_object(**params)
        except ClientError:
            logger.exception(f"Upload failed for {self._ref(object_key)}")
            raise
        logger.info(f"Uploaded {len(data)} bytes to {self._ref(object_key)}")
        return self._ref(object_key)

    def download_bytes(self, object_key: str) -> bytes:
        try:
            obj = self.s3_client.get_object(Bucket=self.bucket_name, Key=object_key)
        except ClientError as e:
            if _code(e) in _MISSING_CODES:
                raise FileNotFoundError(self._ref(object_key)) from e
            raise
        body: bytes = obj["Body"].read()
        return body

    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str:
        return str(
            self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": object_key},
                ExpiresIn=expires_in,
            )
        )

    def file_exists(self, object_key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=object_key)
        except ClientError as e:
            if _code(e) in _MISSING_CODES:
                return False
            raise
        return True

    def delete_file(self, object_key: str) -> None:
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=object_key)
        logger.debug(f"Deleted {self._ref(object_key)}")
