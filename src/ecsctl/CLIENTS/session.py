"""
Region and credential resolution for the ECS client.
"""
import os
from typing import Any, Optional

import boto3

REGION_ENV_VARS = ("AWS_DEFAULT_REGION", "AWS_REGION")


def resolve_region(region: Optional[str] = None) -> Optional[str]:
    """
    Returns the explicit region, or the first one found in the environment.
    """
    if region:
        return region
    for var in REGION_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return value
    return None


def create_ecs_client(region: str, profile: Optional[str] = None) -> Any:
    """
    Creates an authenticated ECS client.

    :param region: AWS region the cluster lives in.
    :param profile: Optional named profile from the shared credentials file.
    :return: A boto3 ECS client.
    """
    session = boto3.session.Session(profile_name=profile, region_name=region)
    return session.client("ecs")
