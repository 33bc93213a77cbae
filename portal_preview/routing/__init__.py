from .defaults import PageRouteDefaultsProvider, RouteDefaultsProvider, RouteDefaultsProviderRegistry

__all__ = ["PageRouteDefaultsProvider", "RouteDefaultsProvider", "RouteDefaultsProviderRegistry"]
