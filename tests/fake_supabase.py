"""
In-memory stand-in for the parts of the Supabase client AssignHub uses:
PostgREST table queries, Storage buckets, Auth and RPC.
Zero network calls.
"""
import uuid
from types import SimpleNamespace


class FakeAPIError(Exception):
    pass


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = 'select'
        self.filters = []
        self.values = None
        self.on_conflict = None
        self.count_mode = None
        self.order_by = None
        self.max_rows = None

    # -- builders --------------------------------------------------------
    def select(self, columns='*', count=None):
        self.op = 'select'
        self.count_mode = count
        return self

    def insert(self, values):
        self.op = 'insert'
        self.values = values
        return self

    def upsert(self, values, on_conflict='', ignore_duplicates=False):
        self.op = 'upsert'
        self.values = values
        self.on_conflict = [c.strip() for c in on_conflict.split(',') if c.strip()]
        return self

    def update(self, values):
        self.op = 'update'
        self.values = values
        return self

    def delete(self):
        self.op = 'delete'
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # -- execution -------------------------------------------------------
    def _matches(self, row):
        return all(row.get(col) == val for col, val in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op))
        if (self.table, self.op) in self.db.failures:
            raise FakeAPIError(f"{self.op} on {self.table} failed")

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == 'select':
            found = [dict(r) for r in rows if self._matches(r)]
            if self.order_by:
                column, desc = self.order_by
                found.sort(key=lambda r: r.get(column) or '', reverse=desc)
            count = len(found) if self.count_mode else None
            if self.max_rows is not None:
                found = found[:self.max_rows]
            return FakeResponse(found, count)

        if self.op == 'insert':
            row = dict(self.values)
            row.setdefault('id', str(uuid.uuid4()))
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.op == 'upsert':
            self.db.upsert_targets.append((self.table, list(self.on_conflict)))
            for row in rows:
                if all(row.get(c) == self.values.get(c) for c in self.on_conflict):
                    row.update(self.values)
                    return FakeResponse([dict(row)])
            row = dict(self.values)
            row.setdefault('id', str(uuid.uuid4()))
            row.setdefault('grade', None)
            row.setdefault('feedback', None)
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.op == 'update':
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.values)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.op == 'delete':
            removed = [dict(r) for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)

        raise AssertionError(f"unknown op {self.op}")


class FakeBucketApi:
    def __init__(self, storage, bucket):
        self.storage = storage
        self.bucket = bucket

    def _objects(self):
        if self.bucket not in self.storage.buckets:
            raise FakeAPIError("Bucket not found")
        return self.storage.buckets[self.bucket]

    def upload(self, path, data, file_options=None):
        if self.storage.fail_upload:
            raise FakeAPIError("The resource already exists")
        objects = self._objects()
        objects[path] = bytes(data)
        self.storage.content_types[(self.bucket, path)] = (file_options or {}).get('content-type')
        return SimpleNamespace(path=path)

    def download(self, path):
        if self.storage.fail_direct_download:
            raise FakeAPIError("Object not found")
        objects = self._objects()
        if path not in objects:
            raise FakeAPIError("Object not found")
        return objects[path]

    def create_signed_url(self, path, expires_in):
        self.storage.signed_requests.append((self.bucket, path, expires_in))
        if self.storage.fail_signed_url:
            raise FakeAPIError("Object not found")
        url = f"https://fake.supabase.co/storage/v1/object/sign/{self.bucket}/{path}?token=t"
        self.storage.signed_urls[url] = (self.bucket, path)
        return {"signedURL": url, "signedUrl": url}

    def remove(self, paths):
        if self.storage.fail_remove:
            raise FakeAPIError("remove failed")
        objects = self._objects()
        removed = []
        for p in paths:
            if p in objects:
                del objects[p]
                removed.append({"name": p})
        return removed


class FakeStorage:
    def __init__(self, bucket_names=()):
        self.buckets = {name: {} for name in bucket_names}
        self.content_types = {}
        self.signed_urls = {}
        self.signed_requests = []
        self.created_buckets = []
        self.fail_upload = False
        self.fail_direct_download = False
        self.fail_signed_url = False
        self.fail_remove = False
        self.fail_list = False

    def from_(self, bucket):
        return FakeBucketApi(self, bucket)

    def list_buckets(self):
        if self.fail_list:
            raise FakeAPIError("list failed")
        return [SimpleNamespace(id=name, name=name) for name in self.buckets]

    def create_bucket(self, name, options=None):
        self.created_buckets.append((name, options))
        self.buckets[name] = {}
        return {"name": name}


class FakeAdmin:
    def __init__(self, auth):
        self.auth = auth
        self.signed_out = []
        self.fail_update = False

    def update_user_by_id(self, user_id, attributes):
        if self.fail_update:
            raise FakeAPIError("update failed")
        for email, (password, uid) in list(self.auth.accounts.items()):
            if uid == user_id and 'password' in attributes:
                self.auth.accounts[email] = (attributes['password'], uid)
        return SimpleNamespace(user=SimpleNamespace(id=user_id))

    def sign_out(self, jwt, scope='global'):
        self.signed_out.append(jwt)


class FakeAuth:
    def __init__(self):
        self.accounts = {}
        self.admin = FakeAdmin(self)

    def add_account(self, email, password, user_id):
        self.accounts[email] = (password, user_id)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials.get('email'))
        if account is None or account[0] != credentials.get('password'):
            raise FakeAPIError("Invalid login credentials")
        session = SimpleNamespace(
            access_token=f"access-{account[1]}",
            refresh_token=f"refresh-{account[1]}",
            expires_at=1999999999,
        )
        user = SimpleNamespace(id=account[1], email=credentials['email'])
        return SimpleNamespace(user=user, session=session)


class FakeSupabase:
    def __init__(self, bucket_names=()):
        self.tables = {}
        self.failures = set()
        self.calls = []
        self.upsert_targets = []
        self.rpcs = []
        self.fail_rpc = False
        self.storage = FakeStorage(bucket_names)
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, op):
        self.failures.add((table, op))

    def rpc(self, name, params=None):
        fake = self

        class _Call:
            def execute(self):
                fake.rpcs.append(name)
                if fake.fail_rpc:
                    raise FakeAPIError("function does not exist")
                return FakeResponse(None)
        return _Call()

    def rows(self, table):
        return self.tables.get(table, [])


class FakeHTTPResponse:
    """requests.Response stand-in usable as a context manager."""

    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise FakeAPIError(f"HTTP error! status: {self.status_code}")

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
