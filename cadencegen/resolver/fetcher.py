"""
Fetching deployed contract source from the Flow REST API.

    GET <endpoint>/v1/accounts/<address>?expand=contracts

returns ``{"contracts": {"<Name>": "<base64 source>", ...}, ...}``.
"""

import base64
import binascii
import logging
from typing import Dict, Optional

import requests

from ..analyzer.addresses import AddressBook, normalize_address
from ..errors import (
    AddressBookMissing,
    ContractNotFound,
    DecodeFailed,
    FetchFailed,
    NetworkUnsupported,
)

logger = logging.getLogger(__name__)

NETWORK_ENDPOINTS = {
    'mainnet': 'https://rest-mainnet.onflow.org',
    'testnet': 'https://rest-testnet.onflow.org',
}


class RemoteContractFetcher:
    """Fetches and decodes the source of deployed contracts."""

    def __init__(
        self,
        address_book: Optional[AddressBook],
        session: Optional[requests.Session] = None,
        endpoints: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            address_book: Contract addresses per network (may be None)
            session: HTTP session; a new requests.Session by default, owned
                and closed by this fetcher
            endpoints: Network name to REST endpoint
            timeout: Request timeout in seconds; None waits indefinitely
        """
        self.address_book = address_book
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.endpoints = dict(endpoints if endpoints is not None else NETWORK_ENDPOINTS)
        self.timeout = timeout

    def endpoint_for(self, network: str) -> str:
        """Get the REST endpoint for a network."""
        endpoint = self.endpoints.get(network)
        if endpoint is None:
            raise NetworkUnsupported(f'Unsupported network: {network}')
        return endpoint.rstrip('/')

    def fetch(self, contract: str, network: str) -> str:
        """
        Fetch the decoded source of a contract.

        Raises:
            NetworkUnsupported: Unknown network (raised before any request)
            AddressBookMissing: No address book configured
            ContractNotFound: Contract absent from the address book or account
            FetchFailed: Transport error, non-200 status or bad response body
            DecodeFailed: Payload is not base64-encoded UTF-8
        """
        endpoint = self.endpoint_for(network)
        if self.address_book is None:
            raise AddressBookMissing('No addresses available', contract=contract)

        address = normalize_address(self.address_book.lookup(network, contract))
        url = f'{endpoint}/v1/accounts/{address}?expand=contracts'
        logger.info('Fetching contract %s from %s', contract, url)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchFailed(f'Failed to fetch contract: {e}', contract=contract)

        if response.status_code != 200:
            raise FetchFailed(
                f'Unexpected HTTP {response.status_code} from {url}', contract=contract
            )

        try:
            account = response.json()
        except ValueError as e:
            raise FetchFailed(f'Failed to parse response: {e}', contract=contract)

        contracts = account.get('contracts') if isinstance(account, dict) else None
        if not isinstance(contracts, dict):
            raise FetchFailed('No contracts found in response', contract=contract)

        encoded = contracts.get(contract)
        if not isinstance(encoded, str):
            raise ContractNotFound(
                f'Contract {contract} not found in response', contract=contract
            )

        try:
            return base64.b64decode(encoded, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise DecodeFailed(f'Failed to decode contract code: {e}', contract=contract)

    def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'RemoteContractFetcher':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
