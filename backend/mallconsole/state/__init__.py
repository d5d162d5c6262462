from mallconsole.state.context import (
    COLLECTIONS,
    AppContext,
    LoadOutcome,
    ResourceServices,
    derive_categories,
    derive_floors,
)

__all__ = [
    "COLLECTIONS",
    "AppContext",
    "LoadOutcome",
    "ResourceServices",
    "derive_categories",
    "derive_floors",
]
