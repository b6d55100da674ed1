#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the external services the API depends on.
Usage: python scripts/test_connections.py
"""

from alumni_network.core.config import get_settings
from alumni_network.db.mongodb import test_mongo_connection
from alumni_network.db.postgres import test_postgres_connection
from alumni_network.services.blockchain_service import get_web3
from alumni_network.services.deepseek_client import get_deepseek_client


def main():
    settings = get_settings()
    print("=" * 50)
    print("ALUMNI NETWORK - CONNECTION TEST")
    print("=" * 50)

    print("\n[1] Testing relational database...")
    print(f"    Host: {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    print("    Relational DB: " + ("CONNECTED" if test_postgres_connection() else "FAILED"))

    print("\n[2] Testing MongoDB mirror...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    print("    MongoDB: " + ("CONNECTED" if test_mongo_connection() else "FAILED"))

    print("\n[3] Testing blockchain RPC...")
    print(f"    RPC: {settings.blockchain_rpc_url}")
    try:
        connected = get_web3().is_connected()
    except Exception as e:
        print(f"    Error: {e}")
        connected = False
    print("    RPC: " + ("CONNECTED" if connected else "FAILED"))

    print("\n[4] Testing DeepSeek API...")
    if settings.deepseek_api_key:
        print(f"    Base URL: {settings.deepseek_base_url}")
        ok = get_deepseek_client().test_connection()
        print("    DeepSeek: " + ("CONNECTED" if ok else "FAILED"))
    else:
        print("    DeepSeek: API key not configured, newsletters use the built-in template")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
