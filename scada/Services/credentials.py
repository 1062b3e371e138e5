# scada/Services/credentials.py

"""
Credential generation for machines and users.

Both credentials are opaque bearer strings: a namespace prefix followed by
32 random hex characters. The machine prefix is what the token classifier
uses to decide whether to look a token up as an API key.
"""

import secrets

from scada.Core.config import settings


def generate_machine_api_key() -> str:
    return f"{settings.MACHINE_KEY_PREFIX}{secrets.token_hex(16)}"


def generate_user_token() -> str:
    return f"{settings.USER_TOKEN_PREFIX}{secrets.token_hex(16)}"
