from quickwallet.modules.wallets.entities.wallet_entity import WalletEntity

Wallet = WalletEntity

__all__ = ["Wallet", "WalletEntity"]
