"""Deploy and upgrade an auction house, and record what was deployed.

Everything here runs against the active ``boa.env``: the in-process EVM in
tests, a fork after ``boa.fork``, or a live network after
:func:`setup_environment`.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import boa
import yaml
from eth_abi import encode
from eth_account import Account
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from .config import (
    ZERO_ADDRESS,
    AuctionConfig,
    ConfigurationError,
    DeploymentConfig,
    Network,
    RefundPolicy,
)
from .contracts import (
    CONTRACTS,
    INITIALIZER_SIGNATURE,
    INITIALIZER_TYPES,
    ContractDefinition,
    contract_path,
    load_contract,
)
from .layout import check_append_only

logger = logging.getLogger(__name__)


def setup_environment(config: DeploymentConfig) -> None:
    """Setup boa environment based on configuration"""
    if config.network == Network.LOCAL:
        logger.info("using the in-process chain, nothing will be broadcast")
        return

    rpc_url = config.get_rpc_url()
    if config.fork_mode:
        boa.fork(rpc_url)
        logger.info("forked %s as %s", config.network.value, boa.env.eoa)
    else:
        if not config.admin_private_key:
            raise ConfigurationError("!admin_private_key")
        acct = Account.from_key(config.admin_private_key)
        boa.set_network_env(rpc_url)
        boa.env.add_account(acct)
        logger.info("deploying to %s from %s", config.network.value, acct.address)


def _checksum(values: List[Any]) -> List[Any]:
    return [
        Web3.to_checksum_address(val) if isinstance(val, str) and val.startswith("0x") else val
        for val in values
    ]


def encode_constructor_args(types: List[str], values: List[Any]) -> str:
    return "0x" + encode(types, _checksum(values)).hex()


def encode_initializer_call(values: List[Any]) -> bytes:
    """Calldata for ``initialize``, run by the proxy constructor."""
    selector = function_signature_to_4byte_selector(INITIALIZER_SIGNATURE)
    return selector + encode(INITIALIZER_TYPES, _checksum(values))


def deploy_contract(
    contract_def: ContractDefinition, deployment_params: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Deploy a single contract and return its deployment info"""
    deployment_params = deployment_params or {}
    args = list(deployment_params.values())
    instance = load_contract(contract_def).deploy(*args)
    logger.info("%s deployed at %s", contract_def.name, instance.address)
    return {
        "instance": instance,
        "address": str(instance.address),
        "constructor_args": encode_constructor_args(contract_def.constructor_types, args),
        "params": deployment_params,
    }


def read_state(getters: List[str], *instances) -> Dict[str, Any]:
    """Call each getter on the first instance that exposes it."""
    state = {}
    for getter in getters:
        instance = next((i for i in instances if hasattr(i, getter)), None)
        if instance is None:
            logger.warning("no contract exposes %s", getter)
            continue
        try:
            state[getter] = getattr(instance, getter)()
        except Exception as e:
            logger.warning("failed to get %s state: %s", getter, e)
    return state


def deploy_auction_house(
    config: AuctionConfig,
    unpause: bool = True,
    nft_name: str = "Squid DAO",
    nft_symbol: str = "SQUID",
) -> Dict[str, Dict[str, Any]]:
    """Deploy token, implementation and proxy from ``boa.env.eoa`` and wire
    them together.

    The proxy constructor runs ``initialize``, so the deployer becomes admin
    and treasury. Returns deployment info keyed like :data:`CONTRACTS`; the
    ``auction_house`` entry's ``instance`` is the implementation's interface
    at the proxy address and ``proxy`` is the proxy's own interface.
    """
    config.validate()
    deployments = {}

    deployments["nft"] = deploy_contract(CONTRACTS["nft"], {"name": nft_name, "symbol": nft_symbol})
    deployments["implementation"] = deploy_contract(CONTRACTS["implementation"])
    nft = deployments["nft"]["instance"]
    implementation = deployments["implementation"]["instance"]

    init_params = {
        "token": str(nft.address),
        "payment_asset": config.payment_token or ZERO_ADDRESS,
        "time_buffer": config.time_buffer,
        "reserve_price": config.reserve_price,
        "min_bid_increment_percentage": config.min_bid_increment_percentage,
        "duration": config.duration,
    }
    proxy_params = {
        "implementation": str(implementation.address),
        "init_data": encode_initializer_call(list(init_params.values())),
    }
    deployment = deploy_contract(CONTRACTS["auction_house"], proxy_params)
    proxy = deployment["instance"]
    house = load_contract(CONTRACTS["implementation"]).at(proxy.address)

    nft.set_minter(proxy.address)
    if config.refund_policy != RefundPolicy.PUSH:
        house.set_refund_policy(config.refund_policy.value)
    if not config.burn_unsold:
        house.set_burn_unsold(False)
    if unpause:
        house.unpause()

    deployment.update(instance=house, proxy=proxy, params={**proxy_params, **init_params})
    deployments["auction_house"] = deployment

    for contract_id, data in deployments.items():
        instances = [data["instance"], data["proxy"]] if "proxy" in data else [data["instance"]]
        data["state"] = read_state(CONTRACTS[contract_id].state_getters, *instances)
    return deployments


def upgrade_auction_house(
    proxy,
    new_source: Union[str, Path] = CONTRACTS["implementation_v2"].file_path,
    current_source: Union[str, Path] = CONTRACTS["implementation"].file_path,
):
    """Deploy ``new_source`` and point ``proxy`` at it.

    Refuses, before deploying anything, an implementation whose storage
    layout does not extend ``current_source``'s. Returns the new
    implementation's interface at the proxy address.
    """
    check_append_only(contract_path(current_source), contract_path(new_source))
    deployer = load_contract(new_source)
    implementation = deployer.deploy()
    proxy.upgrade_to(implementation.address)
    logger.info("%s now runs %s (%s)", proxy.address, new_source, implementation.address)
    return deployer.at(proxy.address)


def _plain(value: Any) -> Any:
    if isinstance(value, RefundPolicy):
        return value.name
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, str):
        return str(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def save_deployment_info(
    deployments: Dict[str, Dict[str, Any]],
    network: str,
    is_fork: bool = False,
    base_dir: Union[str, Path] = "deployment",
) -> Path:
    """Save all deployment information to YAML"""
    chain_dir = Path(base_dir) / (network.lower() + ("-fork" if is_fork else ""))
    chain_dir.mkdir(parents=True, exist_ok=True)

    deployment_record = {
        "network": network,
        "fork": is_fork,
        "deployment_timestamp": datetime.now().isoformat(),
        "contracts": {},
    }
    for contract_id, deployment_data in sorted(
        deployments.items(), key=lambda item: CONTRACTS[item[0]].deployment_order
    ):
        contract_def = CONTRACTS[contract_id]
        deployment_record["contracts"][contract_id] = {
            "name": contract_def.name,
            "file_path": contract_def.file_path,
            "address": deployment_data["address"],
            "constructor_arguments": deployment_data.get("constructor_args"),
            "deployment_parameters": _plain(deployment_data.get("params", {})),
            "contract_state": _plain(deployment_data.get("state", {})),
        }

    path = chain_dir / f"{datetime.now().strftime('%Y%m%d')}_deployment.yaml"
    with open(path, "w") as f:
        yaml.dump(deployment_record, f, default_flow_style=False, sort_keys=False)
    logger.info("deployment info saved to %s", path)
    return path
