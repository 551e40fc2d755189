"""
Helper object to represent a kubernetes object that is owned by a
reconciliation unit
"""


class ManagedObject:
    """Descriptor for a single owned object slot. It carries just enough
    information to fetch the object and to key the per-pass cache; the content
    itself lives in the NamespacedObjectManager.
    """

    __slots__ = ["kind", "api_version", "name"]

    def __init__(self, kind: str, api_version: str, name: str):
        assert kind is not None, "No kind found"
        assert api_version is not None, "No apiVersion found"
        assert name is not None, "No name found"
        self.kind = kind
        self.api_version = api_version
        self.name = name

    def reference(self, namespace: str) -> dict:
        """Minimal manifest addressing this object in the given namespace"""
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "metadata": {"name": self.name, "namespace": namespace},
        }

    def __str__(self):
        return f"{self.api_version}/{self.kind}/{self.name}"

    def __repr__(self):
        return str(self)

    def __hash__(self):
        return hash(str(self))

    def __eq__(self, other):
        return isinstance(other, ManagedObject) and str(self) == str(other)
