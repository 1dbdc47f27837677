"""Static catalog of blockchain services reachable through the Pocket gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pocket_mcp.config import PocketConfig, default_config

EVM_METHODS: Tuple[str, ...] = (
    "eth_blockNumber",
    "eth_chainId",
    "eth_gasPrice",
    "eth_maxPriorityFeePerGas",
    "eth_feeHistory",
    "eth_getBalance",
    "eth_getCode",
    "eth_getStorageAt",
    "eth_getTransactionCount",
    "eth_getTransactionByHash",
    "eth_getTransactionReceipt",
    "eth_getBlockByNumber",
    "eth_getBlockByHash",
    "eth_getBlockTransactionCountByNumber",
    "eth_getLogs",
    "eth_call",
    "eth_estimateGas",
    "eth_syncing",
    "net_version",
    "web3_clientVersion",
)
SOLANA_METHODS: Tuple[str, ...] = (
    "getSlot",
    "getBlockHeight",
    "getBalance",
    "getAccountInfo",
    "getTransaction",
    "getSignatureStatuses",
    "getLatestBlockhash",
    "getTokenAccountBalance",
    "getEpochInfo",
    "getHealth",
    "getVersion",
)
SUI_METHODS: Tuple[str, ...] = (
    "sui_getLatestCheckpointSequenceNumber",
    "sui_getCheckpoint",
    "sui_getObject",
    "sui_getTransactionBlock",
    "sui_getChainIdentifier",
    "suix_getBalance",
    "suix_getAllBalances",
    "suix_getReferenceGasPrice",
)
COSMOS_METHODS: Tuple[str, ...] = (
    "status",
    "abci_info",
    "block",
    "blockchain",
    "tx",
    "validators",
    "net_info",
    "health",
)

PROTOCOL_METHODS: Dict[str, Tuple[str, ...]] = {
    "evm": EVM_METHODS,
    "solana": SOLANA_METHODS,
    "sui": SUI_METHODS,
    "cosmos": COSMOS_METHODS,
}

CATEGORIES = ("evm", "layer2", "non-evm")


@dataclass(frozen=True)
class BlockchainService:
    id: str
    name: str
    blockchain: str
    network: str = "mainnet"
    category: str = "evm"
    protocol: str = "evm"
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    def rpc_url(self, config: PocketConfig = default_config) -> str:
        return config.gateway_url_template.format(service_id=self.id)

    def to_dict(self, config: PocketConfig = default_config) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "blockchain": self.blockchain,
            "network": self.network,
            "category": self.category,
            "protocol": self.protocol,
            "rpcUrl": self.rpc_url(config),
        }


def _svc(
    id: str,
    name: str,
    blockchain: str,
    *,
    network: str = "mainnet",
    category: str = "evm",
    protocol: str = "evm",
    aliases: Tuple[str, ...] = (),
) -> BlockchainService:
    return BlockchainService(
        id=id,
        name=name,
        blockchain=blockchain,
        network=network,
        category=category,
        protocol=protocol,
        aliases=aliases,
    )


SERVICES: Tuple[BlockchainService, ...] = (
    # EVM layer 1
    _svc("eth", "Ethereum", "ethereum", aliases=("ether",)),
    _svc("bsc", "BNB Smart Chain", "bsc", aliases=("bnb", "binance")),
    _svc("avax", "Avalanche C-Chain", "avalanche", aliases=("avax",)),
    _svc("poly", "Polygon PoS", "polygon", aliases=("matic", "pol")),
    _svc("gnosis", "Gnosis Chain", "gnosis", aliases=("xdai",)),
    _svc("celo", "Celo", "celo"),
    _svc("fantom", "Fantom Opera", "fantom", aliases=("ftm",)),
    _svc("sonic", "Sonic", "sonic"),
    _svc("moonbeam", "Moonbeam", "moonbeam"),
    _svc("moonriver", "Moonriver", "moonriver"),
    _svc("kaia", "Kaia", "kaia", aliases=("klaytn",)),
    _svc("harmony", "Harmony", "harmony"),
    _svc("iotex", "IoTeX", "iotex"),
    _svc("kava", "Kava EVM", "kava"),
    _svc("fuse", "Fuse", "fuse"),
    _svc("oasys", "Oasys", "oasys"),
    _svc("berachain", "Berachain", "berachain", aliases=("bera",)),
    _svc("sei", "Sei EVM", "sei"),
    _svc("xrplevm", "XRPL EVM", "xrplevm", aliases=("xrpl-evm",)),
    # EVM layer 2
    _svc("arb-one", "Arbitrum One", "arbitrum", category="layer2", aliases=("arb", "arbitrum-one")),
    _svc("arb-nova", "Arbitrum Nova", "arbitrum-nova", category="layer2"),
    _svc("base", "Base", "base", category="layer2"),
    _svc("op", "Optimism", "optimism", category="layer2", aliases=("op-mainnet",)),
    _svc("linea", "Linea", "linea", category="layer2"),
    _svc("scroll", "Scroll", "scroll", category="layer2"),
    _svc("zksync-era", "zkSync Era", "zksync", category="layer2", aliases=("zksync-era",)),
    _svc("polygon-zkevm", "Polygon zkEVM", "polygon-zkevm", category="layer2"),
    _svc("blast", "Blast", "blast", category="layer2"),
    _svc("mantle", "Mantle", "mantle", category="layer2"),
    _svc("metis", "Metis Andromeda", "metis", category="layer2"),
    _svc("opbnb", "opBNB", "opbnb", category="layer2"),
    _svc("taiko", "Taiko", "taiko", category="layer2"),
    _svc("fraxtal", "Fraxtal", "fraxtal", category="layer2"),
    _svc("ink", "Ink", "ink", category="layer2"),
    _svc("unichain", "Unichain", "unichain", category="layer2"),
    _svc("boba", "Boba Network", "boba", category="layer2"),
    # Testnets
    _svc("eth-sepolia-testnet", "Ethereum Sepolia", "ethereum", network="testnet", aliases=("sepolia",)),
    _svc("eth-holesky-testnet", "Ethereum Holesky", "ethereum-holesky", network="testnet", aliases=("holesky",)),
    _svc("base-sepolia-testnet", "Base Sepolia", "base", network="testnet", category="layer2"),
    _svc("arb-sepolia-testnet", "Arbitrum Sepolia", "arbitrum", network="testnet", category="layer2"),
    _svc("op-sepolia-testnet", "Optimism Sepolia", "optimism", network="testnet", category="layer2"),
    _svc("poly-amoy-testnet", "Polygon Amoy", "polygon", network="testnet", aliases=("amoy",)),
    _svc("taiko-hekla-testnet", "Taiko Hekla", "taiko", network="testnet", category="layer2"),
    # Non-EVM
    _svc("solana", "Solana", "solana", category="non-evm", protocol="solana", aliases=("sol",)),
    _svc("sui", "Sui", "sui", category="non-evm", protocol="sui"),
    _svc("osmosis", "Osmosis", "osmosis", category="non-evm", protocol="cosmos", aliases=("osmo",)),
    _svc("pocket", "Pocket Network", "pocket", category="non-evm", protocol="cosmos", aliases=("pokt",)),
    _svc("akash", "Akash", "akash", category="non-evm", protocol="cosmos"),
    _svc("cosmoshub", "Cosmos Hub", "cosmoshub", category="non-evm", protocol="cosmos", aliases=("cosmos", "atom")),
    _svc("juno", "Juno", "juno", category="non-evm", protocol="cosmos"),
    _svc("stargaze", "Stargaze", "stargaze", category="non-evm", protocol="cosmos"),
    _svc("persistence", "Persistence", "persistence", category="non-evm", protocol="cosmos"),
    _svc("fetchai", "Fetch.ai", "fetchai", category="non-evm", protocol="cosmos"),
)


def all_services() -> List[BlockchainService]:
    return list(SERVICES)


def services_by_category(category: Optional[str]) -> List[BlockchainService]:
    if not category:
        return all_services()
    wanted = category.strip().lower()
    return [service for service in SERVICES if service.category == wanted]


def _names(service: BlockchainService) -> Tuple[str, ...]:
    return (service.id, service.blockchain, service.name.lower(), *service.aliases)


def find_service(blockchain: Optional[str], network: str = "mainnet") -> Optional[BlockchainService]:
    """Look up a service by id, chain name, display name or alias (case-insensitive)."""
    if not blockchain or not isinstance(blockchain, str):
        return None
    wanted = blockchain.strip().lower()
    wanted_network = (network or "mainnet").strip().lower()
    for service in SERVICES:
        if service.network == wanted_network and wanted in _names(service):
            return service
    # Service ids are unique across networks.
    for service in SERVICES:
        if service.id == wanted:
            return service
    return None


def service_name_index() -> List[Tuple[str, BlockchainService]]:
    """Mainnet (name, service) pairs, longest name first, for free-text matching."""
    pairs = [
        (name, service)
        for service in SERVICES
        if service.network == "mainnet"
        for name in _names(service)
        if len(name) > 2
    ]
    return sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)


def supported_methods(service: BlockchainService) -> List[str]:
    return list(PROTOCOL_METHODS.get(service.protocol, ()))
