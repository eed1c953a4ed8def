import pytest

from config.settings import Settings
from store import InMemoryStore


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, db, path):
        self._db = db
        self._path = path
        self.id = path[-1]

    def collection(self, name):
        return FakeCollection(self._db, self._path + (name,))

    def get(self):
        return FakeSnapshot(self.id, self._db.docs.get(self._path))

    def set(self, data):
        self._db.docs[self._path] = dict(data)

    def delete(self):
        self._db.docs.pop(self._path, None)


class FakeCollection:
    def __init__(self, db, path, order_field=None):
        self._db = db
        self._path = path
        self._order_field = order_field

    def document(self, doc_id):
        return FakeDocumentRef(self._db, self._path + (doc_id,))

    def order_by(self, field):
        return FakeCollection(self._db, self._path, order_field=field)

    def stream(self):
        snapshots = [
            FakeSnapshot(path[-1], data)
            for path, data in self._db.docs.items()
            if path[:-1] == self._path
        ]
        if self._order_field:
            snapshots.sort(key=lambda s: s.to_dict()[self._order_field])
        return iter(snapshots)


class FakeFirestore:
    """Just enough of the Firestore client API for FirestoreStore."""

    def __init__(self):
        self.docs = {}

    def collection(self, name):
        return FakeCollection(self, (name,))


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def store():
    return InMemoryStore(participants=["Alice", "Bob", "Carol"])


@pytest.fixture
def settings():
    return Settings(store_backend="memory", group_id="test", strict=False, log_level="DEBUG")
