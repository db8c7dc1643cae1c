# app/utils/tokens.py
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    mint: str
    decimals: int
    # Largest goal target accepted for this coin, in coin units
    max_target: float


TOKENS: Dict[str, TokenInfo] = {
    "BTC": TokenInfo("BTC", "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E", 8, 10),
    "ETH": TokenInfo("ETH", "7vfCXTUXx5WJV5JADk17DUJ4ksgau7utNKj4b963voxs", 8, 100),
    "SOL": TokenInfo("SOL", "So11111111111111111111111111111111111111112", 9, 10_000),
}

USDC_MINT = "EPjFWJd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def normalize_symbol(symbol: Optional[str]) -> str:
    return (symbol or "").strip().upper()


def is_valid_coin(symbol: Optional[str]) -> bool:
    return normalize_symbol(symbol) in TOKENS


def get_token_info(symbol: str) -> Optional[TokenInfo]:
    return TOKENS.get(normalize_symbol(symbol))


def get_supported_symbols() -> List[str]:
    return list(TOKENS)


def explorer_url(signature: Optional[str], network: str) -> Optional[str]:
    if not signature:
        return None
    cluster = "devnet" if network.lower() == "devnet" else "mainnet-beta"
    return f"https://explorer.solana.com/tx/{signature}?cluster={cluster}"
