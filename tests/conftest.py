import boa
import pytest

from auction_house import ZERO_ADDRESS
from auction_house.config import (
    DEFAULT_DURATION,
    DEFAULT_MIN_BID_INCREMENT,
    DEFAULT_RESERVE_PRICE,
    DEFAULT_TIME_BUFFER,
)
from auction_house.deploy import encode_initializer_call

USER_FUNDS = 1_000 * 10**18


# Fixtures for default values
@pytest.fixture(scope="session")
def default_time_buffer():
    return DEFAULT_TIME_BUFFER


@pytest.fixture(scope="session")
def default_reserve_price():
    return DEFAULT_RESERVE_PRICE


@pytest.fixture(scope="session")
def default_min_bid_increment():
    return DEFAULT_MIN_BID_INCREMENT


@pytest.fixture(scope="session")
def default_duration():
    return DEFAULT_DURATION


@pytest.fixture(scope="session")
def user_funds():
    return USER_FUNDS


@pytest.fixture(scope="session")
def zero_address():
    return ZERO_ADDRESS


@pytest.fixture(autouse=True)
def state_anchor():
    """Automatically anchor state between tests"""
    with boa.env.anchor():
        yield


@pytest.fixture(scope="session")
def deployer():
    return boa.env.generate_address()


@pytest.fixture(scope="session")
def payment_token(deployer):
    with boa.env.prank(deployer):
        return boa.load_partial("contracts/test/ERC20.vy").deploy("Test Token", "TEST", 18)


@pytest.fixture(scope="session")
def make_user(payment_token):
    def _make_user(funds: int = USER_FUNDS):
        addr = boa.env.generate_address()
        boa.env.set_balance(addr, funds)
        payment_token._mint_for_testing(addr, funds)
        return addr

    return _make_user


@pytest.fixture(scope="session")
def alice(make_user):
    return make_user()


@pytest.fixture(scope="session")
def bob(make_user):
    return make_user()


@pytest.fixture(scope="session")
def charlie(make_user):
    return make_user()


@pytest.fixture(scope="session")
def nft_contract():
    return boa.load_partial("contracts/AuctionNFT.vy")


@pytest.fixture(scope="session")
def auction_house_contract():
    return boa.load_partial("contracts/AuctionHouse.vy")


@pytest.fixture(scope="session")
def auction_house_v2_contract():
    return boa.load_partial("contracts/AuctionHouseV2.vy")


@pytest.fixture(scope="session")
def proxy_contract():
    return boa.load_partial("contracts/AuctionHouseProxy.vy")


@pytest.fixture(scope="session")
def implementation(auction_house_contract, deployer):
    with boa.env.prank(deployer):
        return auction_house_contract.deploy()


@pytest.fixture(scope="session")
def make_auction_house(
    deployer,
    nft_contract,
    auction_house_contract,
    proxy_contract,
    implementation,
    default_time_buffer,
    default_reserve_price,
    default_min_bid_increment,
    default_duration,
):
    """Deploy a fresh NFT and a proxied house; returns ``(house, nft)``"""

    def _make_auction_house(
        payment_asset=ZERO_ADDRESS,
        time_buffer=default_time_buffer,
        reserve_price=default_reserve_price,
        min_bid_increment=default_min_bid_increment,
        duration=default_duration,
    ):
        payment_asset = getattr(payment_asset, "address", payment_asset)
        with boa.env.prank(deployer):
            nft = nft_contract.deploy("Squid DAO", "SQUID")
            init_data = encode_initializer_call(
                [nft.address, payment_asset, time_buffer, reserve_price, min_bid_increment, duration]
            )
            proxy = proxy_contract.deploy(implementation.address, init_data)
            nft.set_minter(proxy.address)
        return auction_house_contract.at(proxy.address), nft

    return _make_auction_house


@pytest.fixture(scope="session")
def base_deployment(make_auction_house):
    return make_auction_house()


@pytest.fixture
def auction_house(base_deployment):
    """Return the session-scoped house for each test, paused and without auction"""
    return base_deployment[0]


@pytest.fixture
def nft(base_deployment):
    return base_deployment[1]


@pytest.fixture
def proxy(auction_house, proxy_contract):
    """The proxy's own interface at the house address"""
    return proxy_contract.at(auction_house.address)


@pytest.fixture
def auction_house_with_auction(auction_house, deployer):
    with boa.env.prank(deployer):
        auction_house.unpause()
    return auction_house


@pytest.fixture(scope="session")
def token_deployment(make_auction_house, payment_token):
    return make_auction_house(payment_asset=payment_token)


@pytest.fixture
def token_auction_house(token_deployment, deployer):
    """House paid in ``payment_token``, with its first auction running"""
    house = token_deployment[0]
    with boa.env.prank(deployer):
        house.unpause()
    return house


@pytest.fixture
def place_bid():
    """Bid in the native currency of a house"""

    def _place_bid(house, bidder, amount, item_id=None):
        if item_id is None:
            item_id = house.auction()[0]
        with boa.env.prank(bidder):
            house.create_bid(item_id, amount, value=amount)

    return _place_bid


@pytest.fixture
def place_token_bid(payment_token):
    """Approve and bid in ``payment_token``"""

    def _place_token_bid(house, bidder, amount, item_id=None):
        if item_id is None:
            item_id = house.auction()[0]
        with boa.env.prank(bidder):
            payment_token.approve(house.address, amount)
            house.create_bid(item_id, amount)

    return _place_token_bid


@pytest.fixture(scope="session")
def rejecting_bidder_contract():
    return boa.load_partial("contracts/test/RejectingBidder.vy")
