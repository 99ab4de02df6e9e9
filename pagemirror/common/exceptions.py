from enum import Enum


class ResourceType(str, Enum):
    DOCUMENT = "Document"


class ResourceLockedException(Exception):
    def __init__(self, resource_type: ResourceType, identifier: str):
        self.resource_type = resource_type.value
        self.identifier = identifier
        super().__init__(
            f"There is already a mirror task running for document '{identifier}'"
        )
