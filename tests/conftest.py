import pytest
from bson import ObjectId


class _InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class _UpdateResult:
    def __init__(self, count):
        self.matched_count = count
        self.modified_count = count
        self.deleted_count = count


def _matches(doc, filter_dict):
    return all(doc.get(k) == v for k, v in (filter_dict or {}).items())


class FakeCollection:
    """Equality-filter subset of the pymongo Collection API used by main.py."""

    def __init__(self):
        self.docs = []

    def find(self, filter_dict=None):
        return [dict(d) for d in self.docs if _matches(d, filter_dict)]

    def find_one(self, filter_dict=None):
        for d in self.docs:
            if _matches(d, filter_dict):
                return dict(d)
        return None

    def insert_one(self, doc):
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return _InsertResult(doc["_id"])

    def update_one(self, filter_dict, update):
        for d in self.docs:
            if _matches(d, filter_dict):
                d.update(update.get("$set", {}))
                return _UpdateResult(1)
        return _UpdateResult(0)

    def update_many(self, filter_dict, update):
        count = 0
        for d in self.docs:
            if _matches(d, filter_dict):
                d.update(update.get("$set", {}))
                count += 1
        return _UpdateResult(count)

    def delete_one(self, filter_dict):
        for i, d in enumerate(self.docs):
            if _matches(d, filter_dict):
                del self.docs[i]
                return _UpdateResult(1)
        return _UpdateResult(0)

    def delete_many(self, filter_dict):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, filter_dict)]
        return _UpdateResult(before - len(self.docs))

    def count_documents(self, filter_dict):
        return len(self.find(filter_dict))


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())

    def list_collection_names(self):
        return list(self.collections)


@pytest.fixture
def fake_db(monkeypatch):
    import database
    import main

    fake = FakeDatabase()
    monkeypatch.setattr(database, "db", fake)
    monkeypatch.setattr(main, "db", fake)
    return fake
