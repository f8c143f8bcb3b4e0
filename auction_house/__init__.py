from .config import (
    ZERO_ADDRESS,
    AuctionConfig,
    ConfigurationError,
    DeploymentConfig,
    Network,
    RefundPolicy,
)
from .contracts import CONTRACTS, Auction, ContractDefinition, load_contract, read_auction
from .layout import IncompatibleLayout

__all__ = [
    "Auction",
    "AuctionConfig",
    "CONTRACTS",
    "ConfigurationError",
    "ContractDefinition",
    "DeploymentConfig",
    "IncompatibleLayout",
    "Network",
    "RefundPolicy",
    "ZERO_ADDRESS",
    "load_contract",
    "read_auction",
]
