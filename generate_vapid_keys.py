"""
Generate a VAPID key pair for Web Push reminders.

Run once:
    python generate_vapid_keys.py >> .env

The private key is written on one line with literal \\n escapes; push_service
turns them back into newlines.
"""
import base64
from py_vapid import Vapid


def generate_vapid_keys() -> tuple[str, str]:
    """(application server key, private key PEM)"""
    v = Vapid()
    v.generate_keys()

    # Uncompressed EC point, URL-safe base64 without padding
    nums = v.public_key.public_numbers()
    raw = b"\x04" + nums.x.to_bytes(32, "big") + nums.y.to_bytes(32, "big")
    public_key = base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    private_pem = v.private_pem()
    if isinstance(private_pem, bytes):
        private_pem = private_pem.decode()
    return public_key, private_pem


def main():
    public_key, private_pem = generate_vapid_keys()
    escaped = private_pem.strip().replace("\n", "\\n")
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f'VAPID_PRIVATE_KEY="{escaped}"')


if __name__ == "__main__":
    main()
