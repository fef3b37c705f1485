#!/usr/bin/env python3
"""
Generate a JWT for local calls to the RankRiot API.

Tokens are signed the way the managed auth service signs them: HS256 with the
project's JWT secret, audience "authenticated", the user id in ``sub``.

Usage:
    export SECRET_KEY="your-jwt-secret"
    python3 scripts/generate_token.py [user_id] [email]

Example:
    SECRET_KEY="my-secret" python3 scripts/generate_token.py \
        "6f1c2d9e-0b4a-4c1e-9d55-2a0f7b6f3e10" "me@example.com"
"""
from dotenv import load_dotenv
load_dotenv()

import os
import sys
import uuid
from datetime import datetime, timedelta, timezone
from jose import jwt

# Default expiration: 30 minutes (matching app settings)
ACCESS_TOKEN_EXPIRE_MINUTES = 30
ALGORITHM = "HS256"
AUDIENCE = "authenticated"


def create_access_token(data: dict, secret_key: str, expires_delta: timedelta = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "aud": AUDIENCE})
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def main():
    secret_key = os.getenv("SECRET_KEY")

    if not secret_key:
        print("ERROR: SECRET_KEY environment variable is required!")
        print("\nUsage:")
        print("  export SECRET_KEY='your-jwt-secret'")
        print("  python3 scripts/generate_token.py [user_id] [email]")
        sys.exit(1)

    user_id = sys.argv[1] if len(sys.argv) > 1 else str(uuid.uuid4())
    email = sys.argv[2] if len(sys.argv) > 2 else "test@example.com"

    token = create_access_token({"sub": user_id, "email": email}, secret_key)

    print("=" * 60)
    print("JWT Token Generated Successfully")
    print("=" * 60)
    print(f"\nUser ID: {user_id}")
    print(f"Email: {email}")
    print(f"\nToken (expires in {ACCESS_TOKEN_EXPIRE_MINUTES} minutes):")
    print("-" * 60)
    print(token)
    print("-" * 60)
    print("\nExample curl command:")
    print('curl http://localhost:8000/api/projects \\')
    print('     -H "Authorization: Bearer ' + token + '"')
    print("=" * 60)


if __name__ == "__main__":
    main()
