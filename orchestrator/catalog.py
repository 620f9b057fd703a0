from typing import Dict, Iterable, Iterator, List, Optional

from llm.models import ToolDeclaration
from orchestrator.models import ToolDescriptor


class ToolCatalog:
    """
    Maps tool names to the descriptor of the server that owns them.

    Tool names are unique across the catalog.
    """

    def __init__(self):
        self._tools: Dict[str, ToolDescriptor] = {}

    def register(self, descriptors: Iterable[ToolDescriptor]) -> None:
        descriptors = list(descriptors)

        # Check everything first so a clash registers nothing
        for descriptor in descriptors:
            existing = self._tools.get(descriptor.name)
            if existing is not None and existing.server_id != descriptor.server_id:
                raise ValueError(
                    f"Tool {descriptor.name} is already provided by {existing.server_id}"
                )

        for descriptor in descriptors:
            self._tools[descriptor.name] = descriptor

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def for_server(self, server_id: str) -> List[ToolDescriptor]:
        return [tool for tool in self._tools.values() if tool.server_id == server_id]

    def declarations(self) -> List[ToolDeclaration]:
        return [tool.to_declaration() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)
