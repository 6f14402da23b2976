"""In-memory stand-ins for the async Firestore client."""

import copy
from typing import Dict, Optional, Tuple

Path = Tuple[str, ...]


class FakeSnapshot:
    def __init__(self, path: Path, data: Optional[dict]):
        self.id = path[-1]
        self.exists = data is not None
        self._data = data

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeFirestoreClient:
    """Documents keyed by their full path; ``fail_with`` is raised by the next call."""

    def __init__(self):
        self.docs: Dict[Path, dict] = {}
        self.fail_with: Optional[Exception] = None
        self.commits = 0

    def check(self):
        if self.fail_with is not None:
            exc, self.fail_with = self.fail_with, None
            raise exc

    def collection(self, name: str) -> "FakeCollection":
        return FakeCollection(self, (name,))

    def batch(self) -> "FakeBatch":
        return FakeBatch(self)

    def write(self, path: Path, data: dict, merge: bool = False):
        data = copy.deepcopy(data)
        if merge and path in self.docs:
            self.docs[path] = {**self.docs[path], **data}
        else:
            self.docs[path] = data


class FakeDocument:
    def __init__(self, client: FakeFirestoreClient, path: Path):
        self.client = client
        self.path = path
        self.id = path[-1]

    def collection(self, name: str) -> "FakeCollection":
        return FakeCollection(self.client, self.path + (name,))

    async def get(self) -> FakeSnapshot:
        self.client.check()
        return FakeSnapshot(self.path, self.client.docs.get(self.path))

    async def set(self, data: dict, merge: bool = False):
        self.client.check()
        self.client.write(self.path, data, merge)

    async def delete(self):
        self.client.check()
        self.client.docs.pop(self.path, None)


class FakeCollection:
    def __init__(self, client: FakeFirestoreClient, path: Path, order_field: Optional[str] = None):
        self.client = client
        self.path = path
        self.order_field = order_field

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self.client, self.path + (doc_id,))

    def order_by(self, field: str) -> "FakeCollection":
        return FakeCollection(self.client, self.path, order_field=field)

    async def stream(self):
        self.client.check()
        matches = [
            FakeSnapshot(path, data)
            for path, data in self.client.docs.items()
            if path[:-1] == self.path
        ]
        if self.order_field:
            matches.sort(key=lambda snapshot: snapshot.to_dict()[self.order_field])
        for snapshot in matches:
            yield snapshot


class FakeBatch:
    def __init__(self, client: FakeFirestoreClient):
        self.client = client
        self.ops = []

    def set(self, ref: FakeDocument, data: dict, merge: bool = False):
        self.ops.append(("set", ref.path, data, merge))

    def delete(self, ref: FakeDocument):
        self.ops.append(("delete", ref.path, None, False))

    async def commit(self):
        self.client.check()
        for op, path, data, merge in self.ops:
            if op == "set":
                self.client.write(path, data, merge)
            else:
                self.client.docs.pop(path, None)
        self.client.commits += 1
