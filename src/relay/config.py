import os
import boto3
from botocore.config import Config as BotoConfig
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Runtime settings, read from the environment when instantiated."""

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ

        self.QUEUE_URL = env.get("QUEUE_URL", "")
        self.GITHUB_SECRET = env.get("GITHUB_SECRET", "")  # base64 KMS ciphertext

        self.AWS_CONNECT_TIMEOUT = float(env.get("AWS_CONNECT_TIMEOUT", "2"))
        self.AWS_READ_TIMEOUT = float(env.get("AWS_READ_TIMEOUT", "5"))
        self.DISPATCH_TIMEOUT = float(env.get("DISPATCH_TIMEOUT", "10"))
        self.DEADLINE_MARGIN_MS = int(env.get("DEADLINE_MARGIN_MS", "200"))

        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO").upper()


def aws_client(service_name: str, cfg: Config):
    """boto3 client whose network calls are bounded by the configured timeouts."""
    return boto3.client(
        service_name,
        config=BotoConfig(
            connect_timeout=cfg.AWS_CONNECT_TIMEOUT,
            read_timeout=cfg.AWS_READ_TIMEOUT,
        ),
    )
