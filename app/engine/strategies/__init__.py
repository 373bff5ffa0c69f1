"""
Estimation strategies.

Import this module to register the built-in strategies.  Selection order
is by priority: structure, then route, then the template fallback.
"""

from app.engine.strategies.registry import StrategyRegistry
from app.engine.strategies.route import RouteStrategy
from app.engine.strategies.structure import StructureStrategy
from app.engine.strategies.template import TemplateStrategy

# Register all built-in strategies
StrategyRegistry.register(StructureStrategy())
StrategyRegistry.register(RouteStrategy())
StrategyRegistry.register(TemplateStrategy())

__all__ = ["StrategyRegistry"]
