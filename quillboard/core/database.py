"""
Document Store
==============

Collection-oriented storage used by every Quillboard module.

Two backends share the same collection API:
- MongoDocumentStore: MongoDB through pymongo (production)
- MemoryDocumentStore: in-process dicts (tests, local development)

A missing document is never an error: reads return an empty Snapshot and
writes report False. Each operation is atomic for a single document only.
"""

import copy
import logging
import threading
import uuid

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .config import Config
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Equality-style filters supported by query()
OPERATORS = {
    '==': '$eq',
    '!=': '$ne',
    'in': '$in',
}


def _check_operator(op):
    if op not in OPERATORS:
        raise ValueError(f"Unsupported query operator: {op!r}")


def _project(data, fields=None):
    """Copy a document body, optionally keeping only the given fields"""
    if fields is None:
        return copy.deepcopy(data)
    return {field: copy.deepcopy(data[field]) for field in fields if field in data}


def _strip_id(doc):
    return {key: value for key, value in doc.items() if key not in ('id', '_id')}


class Snapshot:
    """Point-in-time read of a single document, possibly non-existent"""

    def __init__(self, doc_id, data=None):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def data(self):
        """Return a copy of the document body, or None if it does not exist"""
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field, default=None):
        if self._data is None:
            return default
        return self._data.get(field, default)

    def __repr__(self):
        return f"Snapshot(id={self.id!r}, exists={self.exists})"


class MemoryCollection:
    """Dict-backed collection. Preserves insertion order like a fresh Mongo collection."""

    def __init__(self, name):
        self.name = name
        self._docs = {}
        self._lock = threading.Lock()

    def get(self, doc_id, fields=None):
        with self._lock:
            data = self._docs.get(doc_id)
            if data is None:
                return Snapshot(doc_id)
            return Snapshot(doc_id, _project(data, fields))

    def query(self, field, op, value, fields=None):
        _check_operator(op)
        with self._lock:
            results = []
            for doc_id, data in self._docs.items():
                actual = data.get(field)
                if op == '==':
                    matched = actual == value
                elif op == '!=':
                    matched = actual != value
                else:
                    matched = actual in value
                if matched:
                    results.append(Snapshot(doc_id, _project(data, fields)))
            return results

    def list(self, fields=None):
        with self._lock:
            return [Snapshot(doc_id, _project(data, fields)) for doc_id, data in self._docs.items()]

    def insert(self, doc):
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._docs[doc_id] = copy.deepcopy(_strip_id(doc))
        return doc_id

    def update(self, doc_id, partial):
        with self._lock:
            data = self._docs.get(doc_id)
            if data is None:
                return False
            data.update(copy.deepcopy(_strip_id(partial)))
            return True

    def delete(self, doc_id):
        with self._lock:
            return self._docs.pop(doc_id, None) is not None

    def count(self):
        with self._lock:
            return len(self._docs)


class MongoCollection:
    """pymongo-backed collection. Ids are exposed as strings of the ObjectId."""

    def __init__(self, collection):
        self._collection = collection
        self.name = collection.name

    @staticmethod
    def _object_id(doc_id):
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _projection(fields):
        if fields is None:
            return None
        return {field: 1 for field in fields}

    @staticmethod
    def _snapshot(document):
        data = dict(document)
        doc_id = str(data.pop('_id'))
        return Snapshot(doc_id, data)

    def _run(self, operation, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Error in {operation}: collection={self.name}, error={e}")
            raise

    def get(self, doc_id, fields=None):
        oid = self._object_id(doc_id)
        if oid is None:
            return Snapshot(doc_id)
        document = self._run('find_one', self._collection.find_one, {'_id': oid}, self._projection(fields))
        if document is None:
            return Snapshot(doc_id)
        return self._snapshot(document)

    def query(self, field, op, value, fields=None):
        _check_operator(op)
        cursor = self._run(
            'find', self._collection.find, {field: {OPERATORS[op]: value}}, self._projection(fields)
        )
        return [self._snapshot(document) for document in cursor]

    def list(self, fields=None):
        cursor = self._run('find', self._collection.find, {}, self._projection(fields))
        return [self._snapshot(document) for document in cursor]

    def insert(self, doc):
        result = self._run('insert_one', self._collection.insert_one, _strip_id(doc))
        return str(result.inserted_id)

    def update(self, doc_id, partial):
        oid = self._object_id(doc_id)
        if oid is None:
            return False
        fields = _strip_id(partial)
        if not fields:
            return self.get(doc_id).exists
        result = self._run('update_one', self._collection.update_one, {'_id': oid}, {'$set': fields})
        return result.matched_count > 0

    def delete(self, doc_id):
        oid = self._object_id(doc_id)
        if oid is None:
            return False
        result = self._run('delete_one', self._collection.delete_one, {'_id': oid})
        return result.deleted_count > 0

    def count(self):
        return self._run('count_documents', self._collection.count_documents, {})


class DocumentStore:
    """Hands out collections by name, caching one handle per collection"""

    def __init__(self):
        self._collections = {}

    def _open_collection(self, name):
        raise NotImplementedError

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = self._open_collection(name)
        return self._collections[name]

    def close(self):
        self._collections.clear()


class MemoryDocumentStore(DocumentStore):
    def _open_collection(self, name):
        return MemoryCollection(name)


class MongoDocumentStore(DocumentStore):
    def __init__(self, uri=None, database=None, client=None):
        super().__init__()
        if client is None:
            if not uri:
                raise ConfigurationError(
                    "MONGODB_URI not configured. Set MONGODB_URI when DOCUMENT_STORE=mongodb."
                )
            client = MongoClient(uri, tz_aware=True)
        self._client = client
        self._db = client[database or Config.MONGODB_DATABASE]
        logger.info(f"Connected document store to database '{self._db.name}'")

    def _open_collection(self, name):
        return MongoCollection(self._db[name])

    def close(self):
        super().close()
        self._client.close()


def create_document_store(kind=None, uri=None, database=None):
    """
    Create the store selected by DOCUMENT_STORE.

    Args:
        kind: 'memory' or 'mongodb' (default: Config.DOCUMENT_STORE)
        uri: MongoDB connection string (required for mongodb)
        database: MongoDB database name
    """
    kind = (kind or Config.DOCUMENT_STORE).lower()

    if kind == 'mongodb':
        return MongoDocumentStore(uri or Config.MONGODB_URI, database or Config.MONGODB_DATABASE)
    if kind == 'memory':
        return MemoryDocumentStore()

    raise ConfigurationError(
        f"Invalid DOCUMENT_STORE value: {kind}. Expected 'memory' or 'mongodb'"
    )


def get_store():
    """Return the store bound to the current Flask app"""
    from flask import current_app
    return current_app.extensions['quillboard'].store
