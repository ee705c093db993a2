from common.choices import PaymentProvider as Provider

from .base import PaymentProvider
from .mercadopago import MercadoPagoClient
from .paypal import PayPalClient

PROVIDERS = {
    Provider.PAYPAL: PayPalClient,
    Provider.MERCADOPAGO: MercadoPagoClient,
}


def get_provider(name: str) -> PaymentProvider:
    try:
        return PROVIDERS[name]()
    except KeyError:
        raise ValueError(f"Unknown payment provider: {name}") from None
