import os

import boto3

REGION = os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1"))
ENDPOINT = os.getenv("AWS_ENDPOINT_URL")  # e.g., http://localhost:4566 for LocalStack


def _kw(region=None, endpoint_url=None):
    k = {"region_name": region or REGION}
    endpoint = endpoint_url or ENDPOINT
    if endpoint:
        k["endpoint_url"] = endpoint
    return k


def dynamodb_resource(region=None, endpoint_url=None):
    return boto3.resource("dynamodb", **_kw(region, endpoint_url))


def secretsmanager_client(region=None):
    return boto3.client("secretsmanager", **_kw(region))
