"""Identity and EIP-712 signing."""

from clobrelay.signing.eip712 import OrderDomain, recover_order_signer, sign_order
from clobrelay.signing.identity import Identity

__all__ = ["Identity", "OrderDomain", "recover_order_signer", "sign_order"]
