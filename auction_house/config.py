import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from dotenv import load_dotenv

DEFAULT_TIME_BUFFER = 300  # 5 minutes
DEFAULT_RESERVE_PRICE = 10**18  # 1 ether
DEFAULT_MIN_BID_INCREMENT = 5  # 5%
DEFAULT_DURATION = 3600  # 1 hour
MAX_MIN_BID_INCREMENT = 100
MAX_UINT256 = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ConfigurationError(ValueError):
    pass


class RefundPolicy(IntEnum):
    """How an outbid bidder gets their funds back.

    PUSH refunds inside the outbidding call; a refund that fails aborts the
    new bid. PULL credits a balance the bidder withdraws later.
    """

    PUSH = 0
    PULL = 1


class Network(Enum):
    LOCAL = "LOCAL"
    MAINNET = "MAINNET"
    SEPOLIA = "SEPOLIA"


@dataclass
class NetworkConfig:
    base_rpc_url: str
    requires_api_key: bool = False

    def get_rpc_url(self, api_key: Optional[str] = None) -> str:
        if self.requires_api_key:
            if not api_key:
                raise ConfigurationError(f"!api_key: {self.base_rpc_url}")
            return f"{self.base_rpc_url}/{api_key}"
        return self.base_rpc_url


NETWORK_CONFIGS = {
    # In-process chain, nothing is broadcast
    Network.LOCAL: NetworkConfig(base_rpc_url=""),
    Network.MAINNET: NetworkConfig(
        base_rpc_url="https://eth-mainnet.g.alchemy.com/v2",
        requires_api_key=True,
    ),
    Network.SEPOLIA: NetworkConfig(
        base_rpc_url="https://eth-sepolia.g.alchemy.com/v2",
        requires_api_key=True,
    ),
}


def validate_auction_params(
    time_buffer: int, reserve_price: int, min_bid_increment_percentage: int, duration: int
) -> None:
    """Reject values ``initialize`` would revert on, before anything is sent."""
    params = {
        "time_buffer": time_buffer,
        "reserve_price": reserve_price,
        "min_bid_increment_percentage": min_bid_increment_percentage,
        "duration": duration,
    }
    for name, value in params.items():
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= MAX_UINT256:
            raise ConfigurationError(f"!{name}")
    if min_bid_increment_percentage > MAX_MIN_BID_INCREMENT:
        raise ConfigurationError("!min_bid_increment_percentage")
    if duration == 0:
        raise ConfigurationError("!duration")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AuctionConfig:
    time_buffer: int = DEFAULT_TIME_BUFFER
    reserve_price: int = DEFAULT_RESERVE_PRICE
    min_bid_increment_percentage: int = DEFAULT_MIN_BID_INCREMENT
    duration: int = DEFAULT_DURATION
    payment_token: Optional[str] = None  # None pays in native currency
    refund_policy: RefundPolicy = RefundPolicy.PUSH
    burn_unsold: bool = True

    def validate(self) -> None:
        validate_auction_params(
            self.time_buffer, self.reserve_price, self.min_bid_increment_percentage, self.duration
        )

    @classmethod
    def from_env(cls) -> "AuctionConfig":
        load_dotenv()
        try:
            config = cls(
                time_buffer=int(os.getenv("AUCTION_TIME_BUFFER", DEFAULT_TIME_BUFFER)),
                reserve_price=int(os.getenv("AUCTION_RESERVE_PRICE", DEFAULT_RESERVE_PRICE)),
                min_bid_increment_percentage=int(
                    os.getenv("AUCTION_MIN_BID_INCREMENT", DEFAULT_MIN_BID_INCREMENT)
                ),
                duration=int(os.getenv("AUCTION_DURATION", DEFAULT_DURATION)),
                payment_token=os.getenv("AUCTION_PAYMENT_TOKEN") or None,
                refund_policy=RefundPolicy[os.getenv("AUCTION_REFUND_POLICY", "PUSH").upper()],
                burn_unsold=_env_flag("AUCTION_BURN_UNSOLD", True),
            )
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"!env: {e}") from e
        config.validate()
        return config


@dataclass
class DeploymentConfig:
    network: Network = Network.SEPOLIA
    fork_mode: bool = False
    deploy_mode: bool = True
    unpause: bool = True
    save: bool = True
    output_dir: str = "deployment"
    nft_name: str = "Squid DAO"
    nft_symbol: str = "SQUID"
    api_key: Optional[str] = None
    rpc_url: Optional[str] = None  # overrides the network's RPC
    admin_private_key: Optional[str] = None

    def get_rpc_url(self) -> str:
        if self.rpc_url:
            return self.rpc_url
        return NETWORK_CONFIGS[self.network].get_rpc_url(self.api_key)

    @classmethod
    def from_env(cls) -> "DeploymentConfig":
        load_dotenv()
        try:
            network = Network(os.getenv("DEPLOY_NETWORK", Network.SEPOLIA.value).upper())
        except ValueError as e:
            raise ConfigurationError(f"!network: {e}") from e
        return cls(
            network=network,
            fork_mode=_env_flag("DEPLOY_FORK", False),
            deploy_mode=_env_flag("DEPLOY_MODE", True),
            unpause=_env_flag("DEPLOY_UNPAUSE", True),
            save=_env_flag("DEPLOY_SAVE", True),
            output_dir=os.getenv("DEPLOY_OUTPUT_DIR", "deployment"),
            nft_name=os.getenv("NFT_NAME", "Squid DAO"),
            nft_symbol=os.getenv("NFT_SYMBOL", "SQUID"),
            api_key=os.getenv("ALCHEMY_KEY") or None,
            rpc_url=os.getenv("DEPLOY_RPC_URL") or None,
            admin_private_key=os.getenv("ADMIN_PRIVATE_KEY") or None,
        )
