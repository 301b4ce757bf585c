"""Contract addresses and identifiers for RMM engines and pools."""
from typing import Union

from eth_abi import encode
from eth_utils import encode_hex, keccak, to_bytes, to_canonical_address, to_checksum_address
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Volatility and gamma are stored on-chain in basis points of a unit
PARAMETER_DECIMALS = 4

# CREATE2 address prefix byte (EIP-1014)
CREATE2_PREFIX = b"\xff"


def _as_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        return to_bytes(hexstr=value)
    return bytes(value)


def get_create2_address(deployer: str, salt: Union[bytes, str],
                        init_code_hash: Union[bytes, str]) -> str:
    """
    Address of a contract deployed with CREATE2.

    address = keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

    Args:
        deployer: Address of the deploying contract
        salt: 32-byte salt
        init_code_hash: keccak256 of the contract creation code

    Returns:
        Checksummed contract address
    """
    salt_bytes = _as_bytes(salt)
    code_hash = _as_bytes(init_code_hash)
    if len(salt_bytes) != 32 or len(code_hash) != 32:
        raise ValueError("Salt and init code hash must both be 32 bytes")

    digest = keccak(CREATE2_PREFIX + to_canonical_address(deployer) + salt_bytes + code_hash)
    return to_checksum_address(digest[12:])


def compute_engine_address(factory: str, risky: str, stable: str,
                           init_code_hash: Union[bytes, str]) -> str:
    """
    Address of the engine the factory deploys for a risky/stable pair.

    The salt is keccak256(abi.encode(risky, stable)).
    """
    salt = keccak(encode(["address", "address"], [
        to_checksum_address(risky),
        to_checksum_address(stable)
    ]))
    return get_create2_address(factory, salt, init_code_hash)


def compute_pool_id(engine: str, strike: int, sigma: int, maturity: int, gamma: int) -> str:
    """
    Pool identifier within an engine.

    keccak256(abi.encodePacked(engine, strike, sigma, maturity, gamma)) with
    strike in stable base units and sigma, gamma in PARAMETER_DECIMALS units.

    Args:
        engine: Engine contract address
        strike: Strike as uint128
        sigma: Volatility as uint32
        maturity: Maturity timestamp as uint32
        gamma: Fee complement as uint32

    Returns:
        0x-prefixed hex pool id
    """
    digest = Web3.solidity_keccak(
        ["address", "uint128", "uint32", "uint32", "uint32"],
        [to_checksum_address(engine), strike, sigma, maturity, gamma]
    )
    return encode_hex(digest)
