"""
Entity store for the arena: entities are ids, behaviour lives in components.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Type


@dataclass
class Component:
    """Base class for all components."""

    # Using slots to reduce memory usage
    __slots__ = []


class Entity:
    """An entity in the arena."""

    __slots__ = ["eid", "components"]

    def __init__(self, eid: int):
        self.eid = eid
        self.components: Dict[Type[Component], Component] = {}


class EntityManager:
    """Manages entities and their components.

    Queries return entity ids in creation order, which is the iteration order
    every system relies on for deterministic tie-breaks.
    """

    __slots__ = ["entities", "next_id", "components_by_type"]

    def __init__(self):
        self.entities: Dict[int, Entity] = {}
        self.next_id = 0
        # Type[Component] -> eid -> Component
        self.components_by_type: Dict[Type[Component], Dict[int, Component]] = (
            defaultdict(dict)
        )

    def create_entity(self) -> int:
        """Create a new entity and return its ID."""
        eid = self.next_id
        self.next_id += 1
        self.entities[eid] = Entity(eid)
        return eid

    def destroy_entity(self, eid: int):
        """Destroy an entity and remove all its components."""
        entity = self.entities.pop(eid, None)
        if entity is None:
            return

        for comp_type in entity.components:
            self.components_by_type[comp_type].pop(eid, None)
        entity.components.clear()

    def is_alive(self, eid: int) -> bool:
        return eid in self.entities

    def add_component(self, eid: int, component: Component):
        """Add a component to an entity."""
        if eid not in self.entities:
            raise ValueError(f"Entity {eid} does not exist")

        comp_type = type(component)
        self.entities[eid].components[comp_type] = component
        self.components_by_type[comp_type][eid] = component

    def remove_component(self, eid: int, comp_type: Type[Component]):
        """Remove a component from an entity."""
        entity = self.entities.get(eid)
        if entity is None:
            return

        if entity.components.pop(comp_type, None) is not None:
            self.components_by_type[comp_type].pop(eid, None)

    def get_component(
        self, eid: int, comp_type: Type[Component]
    ) -> Optional[Component]:
        """Get a specific component from an entity."""
        return self.components_by_type.get(comp_type, {}).get(eid)

    def has_component(self, eid: int, comp_type: Type[Component]) -> bool:
        """Check if an entity has a specific component."""
        return eid in self.components_by_type.get(comp_type, {})

    def get_entities_with_components(self, *comp_types: Type[Component]) -> List[int]:
        """Get all entities that have all specified components, oldest first."""
        if not comp_types:
            return []

        comp_dicts = [self.components_by_type.get(ct, {}) for ct in comp_types]
        first, rest = comp_dicts[0], comp_dicts[1:]
        return sorted(eid for eid in first if all(eid in d for d in rest))

    def get_all_entities_with_component(self, comp_type: Type[Component]) -> List[int]:
        """Get all entities that have a specific component, oldest first."""
        return sorted(self.components_by_type.get(comp_type, {}).keys())

    def clear(self):
        self.entities.clear()
        self.components_by_type.clear()
