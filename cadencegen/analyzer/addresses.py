"""
Address book: per-network mapping from contract names to account addresses.

The file is shaped as ``{"<network>": {"<name>": "<address>", ...}, ...}``;
names may be written bare or with a ``0x`` prefix (the import alias form).
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import AddressBookMissing, ContractNotFound

logger = logging.getLogger(__name__)

ADDRESS_BOOK_FILE = 'addresses.json'


def normalize_address(address: str) -> str:
    """Strip a leading 0x from an address."""
    if address.startswith('0x'):
        return address[2:]
    return address


class AddressBook:
    """Contract addresses for each network."""

    def __init__(self, networks: Dict[str, Dict[str, str]], path: Optional[Path] = None):
        self.networks = networks
        self.path = path

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'AddressBook':
        """
        Load an address book from a JSON file.

        Raises:
            AddressBookMissing: If the file cannot be read or is not a
                mapping of networks to mappings.
        """
        path = Path(path)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise AddressBookMissing(f'Cannot load address book {path}: {e}', file_path=str(path))

        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise AddressBookMissing(
                f'Address book {path} must map each network to a mapping of contract addresses',
                file_path=str(path),
            )

        logger.info('Loaded address book %s (%d networks)', path, len(data))
        return cls(data, path=path)

    def lookup(self, network: str, contract: str) -> str:
        """
        Find the address of a contract on a network.

        Tries the 0x-prefixed alias first, then the bare name.

        Raises:
            ContractNotFound: If neither name is present for the network.
        """
        addresses = self.networks.get(network)
        if not isinstance(addresses, dict):
            raise ContractNotFound(
                f'Network {network} not found in address book', contract=contract
            )
        for name in (f'0x{contract}', contract):
            address = addresses.get(name)
            if isinstance(address, str):
                return address
        raise ContractNotFound(
            f'Contract {contract} not found in network {network}', contract=contract
        )

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return self.networks


def find_address_book(start_dir: Union[str, Path], root: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate an addresses.json file.

    Searches start_dir and each of its parents first, then every directory
    under root in sorted order. Returns the first match, or None.
    """
    directory = Path(start_dir).resolve()
    for candidate_dir in [directory] + list(directory.parents):
        candidate = candidate_dir / ADDRESS_BOOK_FILE
        if candidate.is_file():
            return candidate

    if root is not None:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            if ADDRESS_BOOK_FILE in filenames:
                return Path(dirpath) / ADDRESS_BOOK_FILE

    return None
