import hashlib
import unittest
import uuid
from unittest.mock import patch

from rolltheworld.identity import IDENTITY_KEY, IdentityProvider, hash_identity
from rolltheworld.kv import InMemoryKeyValueStore


class IdentityProviderTests(unittest.TestCase):
    def test_hash_is_salted_sha256(self):
        expected = hashlib.sha256(b"salt:abc").hexdigest()
        self.assertEqual(hash_identity("abc", "salt"), expected)

    def test_derives_from_hardware_id_and_persists(self):
        kv = InMemoryKeyValueStore()
        provider = IdentityProvider(kv, hardware_id=lambda: "hw-1", salt="s")

        identity = provider.resolve_identity()

        self.assertEqual(identity, hash_identity("hw-1", "s"))
        self.assertEqual(kv.get(IDENTITY_KEY), identity.encode("utf-8"))

    def test_stored_identity_wins(self):
        kv = InMemoryKeyValueStore()
        kv.set(IDENTITY_KEY, b"already-there")
        provider = IdentityProvider(kv, hardware_id=lambda: "hw-1")
        self.assertEqual(provider.resolve_identity(), "already-there")

    def test_stable_across_calls_without_hardware_id(self):
        kv = InMemoryKeyValueStore()
        provider = IdentityProvider(kv, hardware_id=lambda: None)
        fixed = uuid.UUID("12345678-1234-5678-1234-567812345678")
        with patch("rolltheworld.identity.uuid.uuid4", return_value=fixed) as uuid4:
            first = provider.resolve_identity()
            second = IdentityProvider(kv, hardware_id=lambda: None).resolve_identity()
        self.assertEqual(first, second)
        self.assertEqual(first, hash_identity(str(fixed)))
        uuid4.assert_called_once()

    def test_storage_failures_still_return_identity(self):
        class FailingKeyValueStore:
            def get(self, key):
                raise OSError("locked")

            def set(self, key, value):
                raise OSError("locked")

            def delete(self, key):
                raise OSError("locked")

        provider = IdentityProvider(FailingKeyValueStore(), hardware_id=lambda: "hw")
        with self.assertLogs("rolltheworld.identity", level="WARNING"):
            identity = provider.resolve_identity()
        self.assertEqual(identity, hash_identity("hw"))


if __name__ == "__main__":
    unittest.main()
