"""Print a device token, e.g. to provision a till without typing the password on it."""
import argparse

from registry_pos_api.app.core.security import create_device_token

ap = argparse.ArgumentParser(description="Issue a device token signed with SECRET_KEY.")
ap.add_argument("--days", type=int, default=None, help="Token lifetime in days (default: DEVICE_TOKEN_EXPIRE_DAYS)")
args = ap.parse_args()

token, expires_at = create_device_token(expires_delta=args.days * 24 * 60 * 60 if args.days else None)
print(token)
