"""Interactive setup wizard for itaulink-uy."""

import getpass
from pathlib import Path
from typing import Any

from itaulink_uy.config import (
    create_default_config,
    get_base_url,
    get_config_path,
    get_timeout,
    load_config,
    save_json_config,
)
from itaulink_uy.credentials import Credentials, encode_password
from itaulink_uy.errors import ItauError


def mask_document(document: str) -> str:
    """Mask a document number for display, showing only the last 3 digits."""
    if len(document) > 3:
        return "*" * (len(document) - 3) + document[-3:]
    return document


def verify_credentials(credentials: Credentials, config: dict[str, Any]) -> int:
    """Log in once and return the number of accounts found."""
    from itaulink_uy.client import ItauClient

    with ItauClient(
        credentials,
        base_url=get_base_url(config),
        timeout=get_timeout(config),
    ) as client:
        return len(client.login())


def run_setup(config_path: Path | None = None, verify: bool = True) -> dict[str, Any]:
    """Run the setup wizard.

    The flow:
    1. Ask for the document number (keeping the stored one on empty input)
    2. Ask for the password without echoing it and encode it
    3. Optionally log in once to check the credentials
    4. Save the config file

    Args:
        config_path: Where to save (defaults to the XDG config location)
        verify: Log in with the new credentials before saving

    Returns:
        The configuration dictionary
    """
    print("\n" + "=" * 50)
    print("  ITAULINK-UY SETUP")
    print("=" * 50)

    config = load_config(config_path) if config_path and config_path.exists() else load_config()
    if config is None:
        config = create_default_config()

    section = config.setdefault("itau", {})

    # Step 1: Document number
    existing_id = section.get("id")
    prompt = "\nDocument number"
    if existing_id:
        prompt += f" [{mask_document(existing_id)}]"
    document = input(f"{prompt}: ").strip() or existing_id

    if not document:
        print("\nNo document number provided. Cannot complete setup.")
        return config

    # Step 2: Password
    password = getpass.getpass("Password: ")
    if not password:
        print("\nNo password provided. Cannot complete setup.")
        return config

    section["id"] = document
    section["password"] = encode_password(password)

    # Step 3: Check the credentials
    if verify:
        print("\nLogging in to verify credentials...")
        try:
            count = verify_credentials(Credentials(document, section["password"]), config)
        except ItauError as e:
            print(f"Login failed: {e}")
            print("Configuration not saved. Run setup again.")
            return config
        print(f"Login OK, found {count} account(s).")

    # Step 4: Save
    saved_path = save_json_config(config, config_path or get_config_path())

    print("\n" + "=" * 50)
    print("SETUP COMPLETE")
    print("=" * 50)
    print(f"\nConfiguration saved to: {saved_path}")
    print("\nYou can now run:")
    print("  itaulink-uy --accounts")
    print("  itaulink-uy --account <hash> --month 3 --year 24 -o march.csv")

    return config


def show_current_config(config: dict[str, Any]) -> None:
    """Display the current configuration."""
    print("\n" + "=" * 50)
    print("CURRENT CONFIGURATION")
    print("=" * 50)

    section = config.get("itau") or {}
    document = section.get("id")
    if document:
        print(f"\nDocument: {mask_document(document)}")
        print(f"Password: {'(set)' if section.get('password') else '(not set)'}")
    else:
        print("\nCredentials: Not configured")

    print(f"Portal: {get_base_url(config)}")
    print(f"Timeout: {get_timeout(config)}s")

    logging_config = config.get("logging") or {}
    print(f"\nLog level: {logging_config.get('level') or 'WARNING'}")
    if logging_config.get("file"):
        print(f"Log file: {logging_config['file']}")
