from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

import boa

from .config import ZERO_ADDRESS

PROJECT_ROOT = Path(__file__).resolve().parent.parent

INITIALIZER_SIGNATURE = "initialize(address,address,uint256,uint256,uint8,uint256)"
INITIALIZER_TYPES = ["address", "address", "uint256", "uint256", "uint8", "uint256"]


@dataclass
class ContractDefinition:
    name: str  # Contract name (e.g., "AuctionHouse")
    file_path: str  # Path to contract file, relative to the project root
    constructor_types: List[str]  # Constructor parameter types
    deployment_order: int  # Order in which contracts should be deployed
    state_getters: List[str] = field(default_factory=list)  # List of state functions to call


CONTRACTS = {
    "nft": ContractDefinition(
        name="AuctionNFT",
        file_path="contracts/AuctionNFT.vy",
        constructor_types=["string", "string"],
        deployment_order=1,
        state_getters=["owner", "minter", "totalSupply"],
    ),
    "implementation": ContractDefinition(
        name="AuctionHouse",
        file_path="contracts/AuctionHouse.vy",
        constructor_types=[],
        deployment_order=2,
        state_getters=["version"],
    ),
    "auction_house": ContractDefinition(
        name="AuctionHouseProxy",
        file_path="contracts/AuctionHouseProxy.vy",
        constructor_types=["address", "bytes"],
        deployment_order=3,
        state_getters=["admin", "implementation", "version", "paused", "treasury", "auction"],
    ),
    "implementation_v2": ContractDefinition(
        name="AuctionHouseV2",
        file_path="contracts/AuctionHouseV2.vy",
        constructor_types=[],
        deployment_order=4,
        state_getters=["version"],
    ),
}


class Auction(NamedTuple):
    item_id: int
    amount: int
    start_time: int
    end_time: int
    bidder: Optional[str]  # None until the first bid
    settled: bool


def contract_path(path: Union[str, Path]) -> Path:
    return PROJECT_ROOT / path


def load_contract(contract: Union[ContractDefinition, str, Path]):
    """Compile a contract and return its boa deployer."""
    if isinstance(contract, ContractDefinition):
        contract = contract.file_path
    return boa.load_partial(str(contract_path(contract)))


def read_auction(house) -> Auction:
    auction = Auction._make(house.auction())
    if auction.bidder == ZERO_ADDRESS:
        return auction._replace(bidder=None)
    return auction
