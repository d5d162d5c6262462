from mallconsole.identity.provider import IdentityProvider, ProviderError

__all__ = ["IdentityProvider", "ProviderError"]
