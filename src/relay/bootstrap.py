import base64
import binascii
from dataclasses import dataclass, field

from botocore.exceptions import BotoCoreError, ClientError


class BootstrapError(RuntimeError):
    """Startup cannot continue; the process must not serve requests."""


@dataclass(frozen=True)
class Settings:
    queue_url: str
    secret: bytes = field(repr=False)


def bootstrap(queue_url: str, encrypted_secret: str, kms) -> Settings:
    """Decrypt the webhook secret with KMS and pair it with the queue URL.

    `encrypted_secret` is the base64 text of a KMS ciphertext blob. Every
    failure raises BootstrapError; nothing is retried.
    """
    if not queue_url:
        raise BootstrapError("QUEUE_URL environment variable is empty")
    if not encrypted_secret:
        raise BootstrapError("GITHUB_SECRET environment variable is empty")

    try:
        ciphertext = base64.b64decode(encrypted_secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BootstrapError(f"GITHUB_SECRET environment variable base64-decoding: {e}") from e

    try:
        output = kms.decrypt(CiphertextBlob=ciphertext)
    except (BotoCoreError, ClientError) as e:
        raise BootstrapError(f"GITHUB_SECRET environment variable decryption: {e}") from e

    secret = output.get("Plaintext") or b""
    if not secret:
        raise BootstrapError("GITHUB_SECRET decrypted to an empty secret")

    return Settings(queue_url=queue_url, secret=bytes(secret))
