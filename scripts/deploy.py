import logging

import boa

from auction_house import AuctionConfig, DeploymentConfig
from auction_house.deploy import deploy_auction_house, save_deployment_info, setup_environment

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main():
    config = AuctionConfig.from_env()
    deployment_config = DeploymentConfig.from_env()
    setup_environment(deployment_config)

    if not deployment_config.deploy_mode:
        print("Dry run mode - no contracts will be deployed")
        return

    print(f"Deploying from {boa.env.eoa} on {deployment_config.network.value}")
    deployments = deploy_auction_house(
        config,
        unpause=deployment_config.unpause,
        nft_name=deployment_config.nft_name,
        nft_symbol=deployment_config.nft_symbol,
    )
    for contract_id, deployment in deployments.items():
        print(f"\n{contract_id} deployed at: {deployment['address']}")
        for getter, value in deployment["state"].items():
            print(f"  {getter}: {value}")

    if deployment_config.save:
        path = save_deployment_info(
            deployments,
            deployment_config.network.value,
            deployment_config.fork_mode,
            deployment_config.output_dir,
        )
        print(f"\nDeployment info saved to: {path}")


if __name__ == "__main__":
    main()
