"""
IPFS Service - pins credential metadata through the nft.storage HTTP API.
"""

import json
import logging
from typing import Any, Optional

import requests

from alumni_network.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def upload_json_to_ipfs(name: str, data: Any) -> Optional[str]:
    """
    Upload a JSON document and return its ipfs:// URI.
    Returns None when no nft.storage token is configured.
    Raises requests.RequestException when the upload itself fails.
    """
    if not settings.nft_storage_token:
        logger.warning("NFT_STORAGE_TOKEN is not set. IPFS upload will be skipped.")
        return None

    filename = name if name.endswith(".json") else f"{name}.json"
    response = requests.post(
        settings.nft_storage_url,
        headers={
            "Authorization": f"Bearer {settings.nft_storage_token}",
            "Content-Type": "application/json",
            "X-Name": filename
        },
        data=json.dumps(data, indent=2, default=str),
        timeout=30
    )
    response.raise_for_status()

    cid = response.json().get("value", {}).get("cid")
    return f"ipfs://{cid}" if cid else None
